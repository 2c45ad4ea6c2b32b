"""
storefront/core/exceptions.py
─────────────────────────────
Custom application exceptions with HTTP status mappings.
Raised inside services/routes; reshaped into {"error": ...} bodies by the
handlers registered in main.py.
"""

from fastapi import HTTPException, status


class UnauthorizedError(HTTPException):
    def __init__(self, detail: str = "Unauthorized") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(HTTPException):
    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class BadRequestError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class EmailAlreadyRegisteredError(BadRequestError):
    def __init__(self, email: str) -> None:
        super().__init__(f"Email '{email}' is already registered.")


class ProductNotFoundError(HTTPException):
    def __init__(self, product_id: str) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with id '{product_id}' was not found.",
        )


class UserNotFoundError(HTTPException):
    def __init__(self, user_id: str) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"User with id '{user_id}' was not found.",
        )


class PersonaNotFoundError(HTTPException):
    def __init__(self, persona_id: str) -> None:
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Persona '{persona_id}' was not found.",
        )


class AIServiceError(HTTPException):
    def __init__(self, detail: str = "AI service encountered an error.") -> None:
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=detail,
        )


class AssistantUnavailableError(HTTPException):
    def __init__(self) -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Shopping assistant is not configured.",
        )
