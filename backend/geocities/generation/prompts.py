"""Prompt builders for ambient city content, page content, and AI detection.

Pure functions: same inputs, same prompt string. Ambient prompts switch
between cold-start framing (no pages yet: grand opening / first issue) and
steady-state framing that names recent pages by title and type.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from geocities.schemas.ai import ArtifactKind

PLATFORM_NAME = "GeoCities AI"

# Recent-page sample sizes per ambient kind
ANNOUNCEMENT_PAGE_SAMPLE = 10
NEWSLETTER_PAGE_SAMPLE = 20

# Present in every detection prompt and in no generation prompt
DETECTION_MARKER = "Respond with ONLY a JSON object"

DETECTION_INDICATORS = (
    "Overly formal or structured language",
    "Lack of personal anecdotes or specific details",
    "Generic or templated phrasing",
    "Perfect grammar and punctuation",
    "Balanced, neutral tone without strong opinions",
    "Repetitive sentence structures",
    "Lack of colloquialisms or informal language",
    "Overly comprehensive or encyclopedic style",
)


@dataclass(frozen=True)
class CityContext:
    name: str
    theme: str
    vibe: str


@dataclass(frozen=True)
class PageSummary:
    title: str
    type: str
    content: str = ""


def page_sample_size(kind: ArtifactKind) -> int:
    """How many recent pages the prompt for this kind draws on (0 = none)."""
    if kind == ArtifactKind.ANNOUNCEMENT:
        return ANNOUNCEMENT_PAGE_SAMPLE
    if kind == ArtifactKind.NEWSLETTER:
        return NEWSLETTER_PAGE_SAMPLE
    return 0


def build_announcement_prompt(city: CityContext, recent_pages: Sequence[PageSummary]) -> str:
    intro = (
        f"You are the events coordinator for {city.name}, a {city.theme}-themed city "
        f"in the {PLATFORM_NAME} platform."
    )

    if not recent_pages:
        return (
            f"{intro}\n\n"
            "The city has just been founded! Write a brief 2-3 sentence announcement about "
            'today\'s "grand opening" event, welcoming the first residents and describing what '
            f"exciting activities and opportunities await in this new {city.theme}-themed neighborhood."
        )

    pages_summary = "\n".join(f'- "{p.title}" ({p.type})' for p in recent_pages)
    return (
        f"{intro}\n\n"
        f"Recent pages created:\n{pages_summary}\n\n"
        "Write a brief 2-3 sentence announcement about today's events and happenings in the "
        "public square. This could include:\n"
        "- Community gatherings or meetups related to recent content\n"
        "- Celebrations of new pages or milestones\n"
        "- Daily activities or workshops happening in the city\n"
        "- Information about what's trending today\n\n"
        "Make it feel like a real daily event announcement. Reference specific pages if relevant. "
        "Be creative and enthusiastic!"
    )


def build_newsletter_prompt(city: CityContext, recent_pages: Sequence[PageSummary]) -> str:
    if not recent_pages:
        return (
            f"You are an AI journalist writing the first issue of the newsletter for {city.name}, "
            f"a {city.theme}-themed city in the {PLATFORM_NAME} platform.\n\n"
            "This is a brand new city with no pages yet! Write 3-4 short news stories "
            "(in paragraph form) covering:\n"
            f"1. **BREAKING:** The grand opening of {city.name}\n"
            f"2. **COMMUNITY:** What kind of residents and content this {city.theme}-themed "
            "neighborhood hopes to attract\n"
            "3. **FORECAST:** Predictions for what exciting developments might happen soon\n\n"
            "Write in a news-style format with a playful GeoCities twist. Make each story feel "
            "like a real news headline come to life!"
        )

    pages_summary = "\n".join(
        f"- **{p.title}** ({p.type}): {p.content[:100]}..." for p in recent_pages
    )
    return (
        f"You are an AI journalist writing today's top news stories for {city.name}, "
        f"a {city.theme}-themed city in the {PLATFORM_NAME} platform with "
        f"{len(recent_pages)} pages of content.\n\n"
        f"Recent pages in the city:\n{pages_summary}\n\n"
        "Write 3-4 short news stories (in paragraph form) covering today's top happenings:\n"
        "1. **HEADLINE STORY:** Feature the most interesting or recent page with specific details\n"
        "2. **TRENDING:** What's popular or emerging as a trend in the community\n"
        "3. **COMMUNITY SPOTLIGHT:** Highlight another notable page or creator\n"
        "4. **WHAT'S NEXT:** Tease what might be coming or what the city needs\n\n"
        "Write in a news-style format. Reference specific page titles and content. Make it feel "
        "like real daily news coverage with a playful GeoCities vibe!"
    )


def build_radio_prompt(city: CityContext) -> str:
    return (
        f"You are creating the radio station for {city.name}, a city with a {city.vibe} vibe "
        f"in the {PLATFORM_NAME} platform.\n\n"
        "Describe the radio station in a creative, atmospheric way. Include:\n"
        "1. The genre/style of music that plays\n"
        "2. Mood descriptors that capture the station's atmosphere\n"
        "3. Three fictional song titles that would play on this station (make them creative "
        f"and fitting to the {city.vibe} vibe)\n\n"
        "Write it as an immersive description that makes people feel like they're tuning into "
        f"this unique station. Be evocative and capture the essence of the {city.vibe} atmosphere."
    )


def build_ambient_prompt(
    kind: ArtifactKind,
    city: CityContext,
    recent_pages: Sequence[PageSummary] = (),
) -> str:
    """Dispatch to the prompt builder for an ambient artifact kind."""
    if kind == ArtifactKind.ANNOUNCEMENT:
        return build_announcement_prompt(city, recent_pages)
    if kind == ArtifactKind.NEWSLETTER:
        return build_newsletter_prompt(city, recent_pages)
    if kind == ArtifactKind.RADIO:
        return build_radio_prompt(city)
    raise ValueError(f"Unknown artifact kind: {kind}")


def build_page_content_prompt(city: CityContext, title: str, page_type: str, instruction: str) -> str:
    return (
        f"You are creating content for a page in {PLATFORM_NAME}.\n\n"
        "City Context:\n"
        f"- City Name: {city.name}\n"
        f"- Theme: {city.theme}\n"
        f"- Vibe: {city.vibe}\n\n"
        "Page Details:\n"
        f"- Title: {title}\n"
        f"- Type: {page_type}\n"
        f"- User's Request: {instruction}\n\n"
        "Create engaging, creative content for this page that:\n"
        f"1. Matches the {city.vibe} vibe of {city.name}\n"
        f"2. Fits the {city.theme} theme\n"
        f"3. Is appropriate for a {page_type} page\n"
        f'4. Fulfills the user\'s request: "{instruction}"\n'
        "5. Is 2-4 paragraphs long\n"
        "6. Feels authentic to the GeoCities aesthetic (nostalgic, creative, personal)\n\n"
        "Write the content now:"
    )


def build_detection_prompt(text: str) -> str:
    indicators = "\n".join(f"{i}. {line}" for i, line in enumerate(DETECTION_INDICATORS, start=1))
    return (
        "Analyze the following text and determine if it was likely generated by an AI "
        "language model.\n\n"
        f"Consider these indicators:\n{indicators}\n\n"
        f'Text to analyze:\n"""\n{text}\n"""\n\n'
        f"{DETECTION_MARKER} in this exact format (no other text):\n"
        "{\n"
        '  "isAiGenerated": true,\n'
        '  "confidence": 0.85,\n'
        '  "reasoning": "brief explanation"\n'
        "}"
    )
