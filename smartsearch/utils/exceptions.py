"""Custom exception classes."""

from fastapi import HTTPException, status


class SmartSearchException(Exception):
    """Base exception for the smart search service."""

    pass


class NotFoundError(SmartSearchException):
    """Raised when a resource is not found."""

    def __init__(self, resource: str = "Resource", detail: str | None = None):
        self.detail = detail or f"{resource} not found"
        super().__init__(self.detail)

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=self.detail,
        )


class ValidationError(SmartSearchException):
    """Raised when a request is well-formed but semantically invalid."""

    def __init__(self, detail: str = "Invalid request"):
        self.detail = detail
        super().__init__(detail)

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=self.detail,
        )
