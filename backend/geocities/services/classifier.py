"""ContentClassifier: decides whether submitted text reads as AI-authored.

- One model call per text with a fixed rubric (formality, genericity,
  structural repetition, missing personal detail, grammatical perfection)
- The answer must parse as DetectionAnalysis; anything else is a failure
- confidence > DETECTION_THRESHOLD -> detected-ai, otherwise user-written
  (a confidence of exactly 0.7 is user-written)
- classify() NEVER raises: any failure yields user-written with confidence None
"""

import structlog
from pydantic import ValidationError as PydanticValidationError

from geocities.core.exceptions import ClassificationError, GeoCitiesError
from geocities.generation.prompts import build_detection_prompt
from geocities.llm.client import LanguageModel
from geocities.llm.helpers import _extract_json_object
from geocities.schemas.ai import DetectionAnalysis, ProvenanceVerdict
from geocities.schemas.pages import ContentTag

logger = structlog.get_logger(__name__)

DETECTION_THRESHOLD: float = 0.7

_FALLBACK_RATIONALE = "Detection failed"


def tag_for_confidence(confidence: float) -> ContentTag:
    """Strictly greater than the threshold counts as detected AI."""
    return ContentTag.DETECTED_AI if confidence > DETECTION_THRESHOLD else ContentTag.USER_WRITTEN


class ContentClassifier:
    """Provenance classifier over an injected LanguageModel.

    Public API:
        classify(text) -> ProvenanceVerdict

    Never raises. Falls back to a user-written verdict with no confidence.
    """

    def __init__(self, llm: LanguageModel):
        self.llm = llm

    async def classify(self, text: str) -> ProvenanceVerdict:
        try:
            analysis = await self._analyze(text)
        except Exception as exc:
            logger.warning(
                "classification_failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return ProvenanceVerdict(
                tag=ContentTag.USER_WRITTEN,
                confidence=None,
                rationale=_FALLBACK_RATIONALE,
            )

        verdict = ProvenanceVerdict(
            tag=tag_for_confidence(analysis.confidence),
            confidence=analysis.confidence,
            rationale=analysis.reasoning,
        )
        logger.info(
            "classification_complete",
            tag=verdict.tag.value,
            confidence=verdict.confidence,
        )
        return verdict

    async def _analyze(self, text: str) -> DetectionAnalysis:
        """Call the model and parse its verdict.

        Raises:
            ClassificationError: model failure or unparseable verdict
        """
        try:
            raw = await self.llm.complete(build_detection_prompt(text))
        except GeoCitiesError as exc:
            raise ClassificationError(f"Detection call failed: {exc}") from exc

        try:
            return DetectionAnalysis.model_validate(_extract_json_object(raw))
        except (ValueError, PydanticValidationError) as exc:
            raise ClassificationError("Invalid response format from AI detection") from exc
