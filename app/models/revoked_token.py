"""Revoked token entity model.

Rows are keyed by the token's ``jti`` claim and only matter until the
token's own expiry; after that the signature check already rejects it.
"""

from datetime import datetime
from uuid import UUID

from sqlmodel import Field, SQLModel


class RevokedToken(SQLModel, table=True):
    """Revocation set entry."""

    __tablename__ = "revoked_tokens"

    jti: str = Field(primary_key=True, max_length=64)
    user_id: UUID = Field(index=True)
    expires_at: datetime = Field(index=True)
    revoked_at: datetime = Field(default_factory=datetime.utcnow)
