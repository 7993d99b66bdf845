"""Error taxonomy for the movie matching pipeline."""
from typing import Optional


class MovieMatcherError(Exception):
    """Base exception for movie_matcher."""


class ParseError(MovieMatcherError, ValueError):
    """Raised when CSV input is empty or its header row cannot be determined."""


class ConfigurationError(MovieMatcherError):
    """Raised when the catalog client is used before an API key is configured."""


class CatalogError(MovieMatcherError):
    """Base class for failures talking to the movie catalog."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class CatalogUnavailable(CatalogError):
    """Raised when a catalog request has used up its retry budget."""


class CatalogRequestError(CatalogError):
    """Raised for catalog responses that retrying cannot fix (e.g. 401, 404)."""
