"""Domain errors raised by the explorer services.

Each error carries the HTTP status the API layer maps it to, so services
never have to import FastAPI.
"""

from __future__ import annotations


class ExplorerError(Exception):
    """Base class for explorer errors."""

    status_code: int = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__doc__ or self.__class__.__name__)
        self.message = message or self.__doc__ or self.__class__.__name__


class InvalidPath(ExplorerError):
    """Invalid path"""

    status_code = 400


class NotFound(ExplorerError):
    """Not found"""

    status_code = 404


class DirectoryUnavailable(ExplorerError):
    """Unable to read directory"""

    status_code = 500


class ArchiveFailure(ExplorerError):
    """Archive creation failed"""

    status_code = 500
