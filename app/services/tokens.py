"""Token issuing, verification and revocation.

Tokens are HS256 JWTs carrying ``sub`` (user id), ``iat``, ``exp`` and a
random ``jti``. Verification never raises: any failure (bad signature,
malformed structure, expired, unknown subject format) yields ``None``.
Revocation is a table of ``jti`` values bounded by each token's expiry.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from uuid import UUID, uuid4

from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.config import get_settings
from app.models.revoked_token import RevokedToken

logger = logging.getLogger(__name__)

settings = get_settings()


@dataclass(frozen=True)
class TokenClaims:
    """Decoded identity carried by a valid token."""

    user_id: UUID
    jti: str
    issued_at: datetime
    expires_at: datetime


def issue_token(
    user_id: UUID, expires_delta: timedelta | None = None
) -> tuple[str, datetime]:
    """
    Generate a signed token for the user.
    Returns (token, expires_at).
    """
    issued_at = datetime.utcnow().replace(microsecond=0)
    if expires_delta is None:
        expires_delta = timedelta(days=settings.JWT_EXPIRATION_DAYS)
    expires_at = issued_at + expires_delta
    payload = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": expires_at,
        "jti": uuid4().hex,
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    return token, expires_at


def verify_token(token: str) -> TokenClaims | None:
    """Check signature and expiry and return the decoded claims, or None."""
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={
                "require_exp": True,
                "require_iat": True,
                "require_sub": True,
                "require_jti": True,
            },
        )
        return TokenClaims(
            user_id=UUID(payload["sub"]),
            jti=str(payload["jti"]),
            issued_at=datetime.utcfromtimestamp(int(payload["iat"])),
            expires_at=datetime.utcfromtimestamp(int(payload["exp"])),
        )
    except (JWTError, KeyError, TypeError, ValueError):
        return None


def is_token_revoked(session: Session, claims: TokenClaims) -> bool:
    """Return True if the token's jti is in the revocation set."""
    entry = session.get(RevokedToken, claims.jti)
    return entry is not None and entry.expires_at > datetime.utcnow()


def revoke_token(session: Session, claims: TokenClaims) -> None:
    """Add a token to the revocation set until its natural expiry."""
    purge_expired_revocations(session, commit=False)
    if session.get(RevokedToken, claims.jti) is None:
        session.add(
            RevokedToken(
                jti=claims.jti,
                user_id=claims.user_id,
                expires_at=claims.expires_at,
            )
        )
    try:
        session.commit()
    except IntegrityError:
        # A concurrent logout stored the same jti first
        session.rollback()
        logger.info("Token already revoked", extra={"user_id": str(claims.user_id)})
        return
    logger.info("Token revoked", extra={"user_id": str(claims.user_id)})


def purge_expired_revocations(session: Session, commit: bool = True) -> int:
    """Delete revocation entries whose token has already expired.

    Returns:
        Number of entries removed
    """
    now = datetime.utcnow()
    expired = session.exec(
        select(RevokedToken).where(RevokedToken.expires_at <= now)
    ).all()
    for entry in expired:
        session.delete(entry)
    if commit:
        session.commit()
    return len(expired)
