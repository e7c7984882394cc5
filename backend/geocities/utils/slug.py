"""URL-friendly normalized keys for titles and city names.

Examples:
- "Silicon Valley" -> "silicon-valley"
- "Neon District!" -> "neon-district"
- "  Art & Design  " -> "art-design"
"""

import re

_DISALLOWED = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUNS = re.compile(r"-+")


def generate_slug(text: str | None) -> str:
    """Normalize text into a lowercase hyphenated key. Returns "" for empty input."""
    if not text or not isinstance(text, str):
        return ""

    slug = text.lower().strip()
    slug = _DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHEN_RUNS.sub("-", slug)
    return slug.strip("-")
