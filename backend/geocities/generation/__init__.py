"""Ambient content generation package.

Provides:
- GenerationCache: Append-only, time-expiring artifact cache per city
- AmbientContentService: Cache-first announcement / newsletter / radio generation
- Prompt builders: Pure functions assembling model prompts from city context
"""

from geocities.generation.ambient import AmbientContentService
from geocities.generation.cache import GenerationCache

__all__ = ["AmbientContentService", "GenerationCache"]
