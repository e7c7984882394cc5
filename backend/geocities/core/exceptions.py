class GeoCitiesError(Exception):
    """Base exception for the GeoCities AI backend."""

    pass


class ValidationError(GeoCitiesError):
    """Raised when caller input is rejected (length, mode, duplicate, capacity)."""

    pass


class DuplicateError(ValidationError):
    """Raised when a normalized key collides with an existing record."""

    pass


class DuplicateTitleError(DuplicateError):
    """Raised when a page title collides with an existing page in the same city."""

    def __init__(self, title: str, slug: str):
        self.title = title
        self.slug = slug
        super().__init__("A page with this title already exists in this city")


class CapacityExceededError(ValidationError):
    """Raised when a city already holds the maximum number of pages."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(f"This city has reached its page limit ({limit} pages)")


class NotFoundError(GeoCitiesError):
    """Raised when a city or page does not exist."""

    pass


class UpstreamGenerationError(GeoCitiesError):
    """Raised when the language model fails or returns unusable output."""

    pass


class ClassificationError(GeoCitiesError):
    """Raised inside the content classifier. Never escapes ContentClassifier.classify()."""

    pass
