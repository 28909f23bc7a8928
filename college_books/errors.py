"""
Error types raised by the catalogue.

Each error carries the HTTP status it maps to, so that the exception
handlers registered in ``main.py`` can turn any of them into a JSON
``{"error": message}`` body without knowing which layer raised it.
"""


class CatalogError(Exception):
    """Base class for every error the catalogue reports to clients."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """Malformed or missing input."""

    status_code = 400


class NotFoundError(CatalogError):
    """The requested listing does not exist."""

    status_code = 404


class PersistenceError(CatalogError):
    """The storage backend failed to complete an operation."""

    status_code = 500
