"""API dependencies for dependency injection."""

import logging
from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from app.db.session import get_session
from app.models.user import User
from app.services.tokens import TokenClaims, is_token_revoked, verify_token

logger = logging.getLogger(__name__)

# auto_error=False: a missing header or a non-Bearer scheme both arrive as None
security = HTTPBearer(auto_error=False)


def get_db_session() -> Generator[Session, None, None]:
    """Get database session dependency."""
    yield from get_session()


DBSession = Annotated[Session, Depends(get_db_session)]
BearerCredentials = Annotated[HTTPAuthorizationCredentials | None, Depends(security)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_token_claims(credentials: BearerCredentials) -> TokenClaims | None:
    """Decode the bearer token if one was sent and it verifies."""
    if credentials is None or not credentials.credentials:
        return None
    return verify_token(credentials.credentials)


def get_current_user(
    request: Request,
    session: DBSession,
    credentials: BearerCredentials,
) -> User:
    """Resolve the bearer token to a user or reject with 401.

    On success the user and its id are also attached to ``request.state``.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized("Authentication token required")

    claims = verify_token(credentials.credentials)
    if claims is None or is_token_revoked(session, claims):
        raise _unauthorized("Invalid or expired token")

    user = session.get(User, claims.user_id)
    if user is None:
        logger.info("Token subject no longer exists", extra={"user_id": str(claims.user_id)})
        raise _unauthorized("User not found")

    request.state.user = user
    request.state.user_id = user.id
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalTokenClaims = Annotated[TokenClaims | None, Depends(get_token_claims)]
