from typing import Any, Optional

from fastapi import HTTPException, status


class ValidationError(HTTPException):
    def __init__(self, detail: str = "Invalid request", error: Optional[Any] = None):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)
        self.error = error


class InvalidStatusError(ValidationError):
    def __init__(self, detail: str = "Invalid status value"):
        super().__init__(detail)


class ImportParseError(ValidationError):
    pass


class NotFoundError(HTTPException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)
        self.error = None


class ConflictError(HTTPException):
    """Unique constraint violation (duplicate email, cnic, title)."""

    def __init__(self, detail: str = "Already exists", status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(status_code=status_code, detail=detail)
        self.error = None


class DependencyError(HTTPException):
    """Database, blob store or another collaborator failed; the message is passed through."""

    def __init__(self, detail: str = "Upstream service failed", error: Optional[Any] = None):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
        self.error = error
