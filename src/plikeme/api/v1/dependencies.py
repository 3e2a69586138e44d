"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from plikeme.core.security import JWTError, decode_access_token
from plikeme.core.settings import settings
from plikeme.db.session import get_db
from plikeme.models import User

# Bearer header is optional; the session cookie is the primary carrier.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]

NOT_LOGGED_IN = "未登录"
SESSION_EXPIRED = "登录已过期，请重新登录"


def _extract_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    token = request.cookies.get(settings.session_cookie_name)
    if token:
        return token
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return None


def _user_from_token(token: str, db: Session) -> User:
    """Resolve a session token to its user.

    Raises:
        HTTPException: If the token is invalid, expired or names a missing user.
    """
    try:
        payload = decode_access_token(token)
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=SESSION_EXPIRED,
        ) from err

    subject = payload.get("sub")
    try:
        user_id = int(subject)
    except (TypeError, ValueError) as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=SESSION_EXPIRED,
        ) from err

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="用户不存在",
        )
    return user


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User:
    """Get the authenticated user from the session cookie or bearer token.

    Raises:
        HTTPException: 401 when no valid session is presented.
    """
    token = _extract_token(request, credentials)
    if token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=NOT_LOGGED_IN,
        )
    return _user_from_token(token, db)


def get_optional_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> User | None:
    """Like :func:`get_current_user` but returns None instead of failing."""
    token = _extract_token(request, credentials)
    if token is None:
        return None
    try:
        return _user_from_token(token, db)
    except HTTPException:
        return None


# Type aliases for current user dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]
