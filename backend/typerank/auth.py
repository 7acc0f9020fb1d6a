"""Authentication helpers and FastAPI security dependencies.

This module decodes bearer JWTs and provides three dependencies:
`get_current_user` (token required), `get_optional_user` (token used if
present) and `require_admin` (token of an account listed in
`ADMIN_EMAILS`). Failures raise `AuthError`/`ForbiddenError` so they are
rendered like every other API error.
"""

from typing import Optional

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
import jwt
from sqlmodel import Session

from .config import settings
from .database import get_session
from .errors import AuthError, ForbiddenError
from . import models, repositories

bearer_scheme = HTTPBearer(auto_error=False)


def decode_token(token: str) -> dict:
    """Decode and verify a JWT token.

    Returns the decoded payload on success or raises `AuthError` on failure.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError('token expired')
    except jwt.InvalidTokenError:
        raise AuthError('invalid token')


def _user_from_credentials(credentials: HTTPAuthorizationCredentials, session: Session) -> models.User:
    payload = decode_token(credentials.credentials)
    user_id = payload.get('user_id')
    if not user_id:
        raise AuthError('invalid token payload')
    user = repositories.UserRepository(session).get(user_id)
    if not user:
        raise AuthError('user not found')
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    session: Session = Depends(get_session),
) -> models.User:
    """FastAPI dependency that returns the authenticated user or raises 401."""
    if credentials is None:
        raise AuthError('Not authenticated')
    return _user_from_credentials(credentials, session)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(bearer_scheme),
    session: Session = Depends(get_session),
) -> Optional[models.User]:
    """Return the authenticated user, or `None` when no token was sent.

    A token that is present but invalid is still rejected.
    """
    if credentials is None:
        return None
    return _user_from_credentials(credentials, session)


def require_admin(user: models.User = Depends(get_current_user)) -> models.User:
    """Allow the request only for accounts listed in `ADMIN_EMAILS`."""
    if user.email.lower() not in settings.ADMIN_EMAILS:
        raise ForbiddenError('admin access required')
    return user
