"""Exceptions raised by the record comparison system."""


class InvalidArgumentError(ValueError):
    """Raised when a comparison is configured or called incorrectly."""


class ResourceExhaustedError(MemoryError):
    """Raised when an input is too large to index or compare in memory."""
