class ShowcaseError(Exception):
    pass

class ValidationError(ShowcaseError):
    """A required form field is missing."""

class PersistenceError(ShowcaseError):
    """The submission store is unavailable or rejected a write."""

class AnnotationError(ShowcaseError):
    """Gemini upload or generation failed."""

class FilesystemError(ShowcaseError):
    """Staging, reading or removing a local file failed."""
