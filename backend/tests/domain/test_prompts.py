"""Tests for ambient, page-content and detection prompt builders."""
import pytest

from geocities.generation.prompts import (
    DETECTION_INDICATORS,
    DETECTION_MARKER,
    CityContext,
    PageSummary,
    build_ambient_prompt,
    build_announcement_prompt,
    build_detection_prompt,
    build_newsletter_prompt,
    build_page_content_prompt,
    build_radio_prompt,
    page_sample_size,
)
from geocities.schemas.ai import ArtifactKind

pytestmark = pytest.mark.unit

CITY = CityContext(name="Neon District", theme="cyberpunk", vibe="edgy")

PAGES = [
    PageSummary(title="Chrome Dreams", type="blog", content="Jacked in all night again. " * 10),
    PageSummary(title="Synthwave Shack", type="music", content="Tapes, tapes, tapes."),
]


class TestAnnouncementPrompt:
    def test_cold_start_announces_grand_opening(self):
        prompt = build_announcement_prompt(CITY, [])
        assert "grand opening" in prompt
        assert "Neon District" in prompt
        assert "Recent pages" not in prompt

    def test_steady_state_lists_pages_by_title_and_type(self):
        prompt = build_announcement_prompt(CITY, PAGES)
        assert '- "Chrome Dreams" (blog)' in prompt
        assert '- "Synthwave Shack" (music)' in prompt
        assert "grand opening" not in prompt


class TestNewsletterPrompt:
    def test_cold_start_is_first_issue(self):
        prompt = build_newsletter_prompt(CITY, [])
        assert "first issue" in prompt
        assert "BREAKING" in prompt
        assert "grand opening of Neon District" in prompt

    def test_steady_state_includes_truncated_content(self):
        prompt = build_newsletter_prompt(CITY, PAGES)
        assert "**Chrome Dreams** (blog)" in prompt
        assert PAGES[0].content[:100] + "..." in prompt
        assert PAGES[0].content not in prompt
        assert "with 2 pages of content" in prompt


class TestRadioPrompt:
    def test_radio_uses_vibe_only(self):
        prompt = build_radio_prompt(CITY)
        assert "edgy vibe" in prompt
        assert "cyberpunk" not in prompt

    def test_radio_ignores_pages(self):
        assert build_ambient_prompt(ArtifactKind.RADIO, CITY, PAGES) == build_radio_prompt(CITY)


class TestDispatch:
    @pytest.mark.parametrize(
        "kind, size",
        [(ArtifactKind.ANNOUNCEMENT, 10), (ArtifactKind.NEWSLETTER, 20), (ArtifactKind.RADIO, 0)],
    )
    def test_page_sample_size(self, kind, size):
        assert page_sample_size(kind) == size

    def test_unknown_kind_raises(self):
        with pytest.raises(ValueError, match="Unknown artifact kind"):
            build_ambient_prompt("weather", CITY)

    def test_builders_are_deterministic(self):
        assert build_ambient_prompt(ArtifactKind.NEWSLETTER, CITY, PAGES) == build_ambient_prompt(
            ArtifactKind.NEWSLETTER, CITY, PAGES
        )


class TestPageAndDetectionPrompts:
    def test_page_content_prompt_carries_city_and_instruction(self):
        prompt = build_page_content_prompt(CITY, "Chrome Dreams", "blog", "a diary of late-night hacking")
        assert "City Name: Neon District" in prompt
        assert "Theme: cyberpunk" in prompt
        assert "Vibe: edgy" in prompt
        assert "Type: blog" in prompt
        assert '"a diary of late-night hacking"' in prompt
        assert DETECTION_MARKER not in prompt

    def test_detection_prompt_embeds_text_and_rubric(self):
        prompt = build_detection_prompt("hey its me, new site lol")
        assert "hey its me, new site lol" in prompt
        assert DETECTION_MARKER in prompt
        for indicator in DETECTION_INDICATORS:
            assert indicator in prompt

    def test_ambient_prompts_never_look_like_detection(self):
        for kind in ArtifactKind:
            assert DETECTION_MARKER not in build_ambient_prompt(kind, CITY, PAGES)
