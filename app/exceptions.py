# app/exceptions.py
"""Error taxonomy for the content pipeline."""


class ContentError(Exception):
    """Base error that maps to an HTTP status and a user-facing message."""

    def __init__(self, message, code=500, payload=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.payload = payload

    def to_dict(self):
        rv = dict(self.payload or ())
        rv["error"] = self.message
        return rv


class ArticleValidationError(ContentError):
    def __init__(self, message="Invalid article data", payload=None):
        super().__init__(message, code=400, payload=payload)


class SlugConflictError(ContentError):
    def __init__(self, slug=None, payload=None):
        message = "Slug is already in use. Choose a different identifier."
        if slug:
            message = f"Slug '{slug}' is already in use. Choose a different identifier."
        super().__init__(message, code=409, payload=payload)
        self.slug = slug


class ArticleNotFound(ContentError):
    def __init__(self, message="Article not found", payload=None):
        super().__init__(message, code=404, payload=payload)


class MarkupParseError(Exception):
    """A markup file whose preamble cannot be parsed."""


class BuildError(Exception):
    """The static content build failed."""

    def __init__(self, message, returncode=None):
        super().__init__(message)
        self.returncode = returncode


class BuildToolMissing(BuildError):
    """Neither the local build executable nor the package runner could be started."""
