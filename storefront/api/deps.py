"""
storefront/api/deps.py
──────────────────────
Shared FastAPI dependencies: session lookup and the local clock.
"""

from datetime import datetime
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from storefront.core.exceptions import UnauthorizedError
from storefront.core.security import decode_access_token
from storefront.database import get_session
from storefront.models import User

_bearer = HTTPBearer(auto_error=False)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    db: Session = Depends(get_session),
) -> Optional[User]:
    """Resolve the bearer token to a User, or None for anonymous callers."""
    if credentials is None:
        return None
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        return None
    return db.get(User, user_id)


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    if user is None:
        raise UnauthorizedError()
    return user


def get_current_hour() -> int:
    """Local hour of day (0-23); overridden in tests."""
    return datetime.now().hour
