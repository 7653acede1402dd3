"""Domain errors carrying their HTTP status

Services raise these directly; being HTTPException subclasses, FastAPI renders
them as {"detail": message} with the matching status code.
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class BadRequestError(AppError):
    """Malformed input shape or type"""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    """Entity absent or owned by another store - callers cannot tell which"""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Illegal state transition or overlapping pickup slot"""

    status_code = status.HTTP_409_CONFLICT


class UnprocessableEntityError(AppError):
    """Well-formed input that violates a business rule"""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
