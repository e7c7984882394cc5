"""Re-export all models so Base.metadata sees them."""

from geocities.db.models.ai_generation import AIGeneration
from geocities.db.models.city import City
from geocities.db.models.page import Page

__all__ = [
    "AIGeneration",
    "City",
    "Page",
]
