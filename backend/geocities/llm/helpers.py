"""Shared LLM utility functions for fence-stripping and JSON extraction."""

import json
import re

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def _strip_json_fences(content: str) -> str:
    """Remove markdown code fences wrapping JSON output."""
    content = content.strip()
    if content.startswith("```"):
        first_newline = content.find("\n")
        if first_newline != -1:
            content = content[first_newline + 1 :]
        if content.endswith("```"):
            content = content[:-3].rstrip()
    return content


def _extract_json_object(content: str) -> dict:
    """Parse the outermost {...} object embedded in free-form model output.

    Raises:
        ValueError: no object found, or the object is not valid JSON
    """
    match = _JSON_OBJECT.search(_strip_json_fences(content))
    if match is None:
        raise ValueError("No JSON object found in model response")
    parsed = json.loads(match.group(0))
    if not isinstance(parsed, dict):
        raise ValueError("Model response JSON is not an object")
    return parsed
