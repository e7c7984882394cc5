"""FakeLanguageModel: Scenario-based test double for the LanguageModel protocol.

Provides deterministic, instant responses for named scenarios:
- happy_path: Generation prompts get prose, detection prompts get a JSON verdict
- llm_failure: Every call raises UpstreamGenerationError
- malformed_detection: Generation works, detection answers are not JSON
- detection_failure: Generation works, detection calls raise

Also used by the dev server when no Anthropic API key is configured.
"""

import asyncio
import json

from geocities.core.exceptions import UpstreamGenerationError
from geocities.generation.prompts import DETECTION_MARKER


class FakeLanguageModel:
    """Deterministic LanguageModel with call counting and prompt capture."""

    VALID_SCENARIOS = {"happy_path", "llm_failure", "malformed_detection", "detection_failure"}

    def __init__(
        self,
        scenario: str = "happy_path",
        detection_confidence: float = 0.2,
        detection_gate: asyncio.Event | None = None,
        generation_gate: asyncio.Event | None = None,
    ):
        """Initialize with a named scenario.

        Args:
            scenario: One of VALID_SCENARIOS
            detection_confidence: Confidence reported by detection answers
            detection_gate: When set, detection calls wait on this event before answering
            generation_gate: When set, generation calls wait on this event before answering

        Raises:
            ValueError: If scenario is not recognized
        """
        if scenario not in self.VALID_SCENARIOS:
            raise ValueError(
                f"Unknown scenario: {scenario}. Valid scenarios: {self.VALID_SCENARIOS}"
            )
        self.scenario = scenario
        self.detection_confidence = detection_confidence
        self.detection_gate = detection_gate
        self.generation_gate = generation_gate
        self.prompts: list[str] = []

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    @property
    def generation_calls(self) -> int:
        return sum(1 for p in self.prompts if DETECTION_MARKER not in p)

    @property
    def detection_calls(self) -> int:
        return sum(1 for p in self.prompts if DETECTION_MARKER in p)

    async def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)

        if self.scenario == "llm_failure":
            raise UpstreamGenerationError("Language model call failed: APIConnectionError")

        if DETECTION_MARKER in prompt:
            return await self._detect()

        return await self._generate(prompt)

    async def aclose(self) -> None:
        return None

    async def _detect(self) -> str:
        if self.detection_gate is not None:
            await self.detection_gate.wait()

        if self.scenario == "detection_failure":
            raise UpstreamGenerationError("Language model call failed: APITimeoutError")

        if self.scenario == "malformed_detection":
            return "I think this was probably written by a person, hard to say."

        return json.dumps(
            {
                "isAiGenerated": self.detection_confidence > 0.5,
                "confidence": self.detection_confidence,
                "reasoning": "Deterministic verdict from FakeLanguageModel.",
            }
        )

    async def _generate(self, prompt: str) -> str:
        number = self.generation_calls
        if self.generation_gate is not None:
            await self.generation_gate.wait()

        first_line = prompt.strip().splitlines()[0] if prompt.strip() else ""
        return (
            f"[fake generation #{number}] "
            f"Welcome, netizens! Fresh content inspired by: {first_line[:120]}"
        )
