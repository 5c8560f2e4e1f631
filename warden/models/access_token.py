"""
Personal access token model.

Tokens are opaque bearer credentials. The plaintext is shown to the client
once; the database keeps only a keyed digest of its secret part.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warden.models.base import Base
from warden.models.mixins import TimestampMixin, as_utc
from warden.models.user import User

# Ability granting every permission
WILDCARD_ABILITY = "*"


class AccessToken(Base, TimestampMixin):
    """
    Bearer token issued to a user.

    Attributes:
        id: UUID primary key, also the public prefix of the plaintext token
        user_id: Owner of the token
        name: Client supplied label (default "auth_token")
        token_hash: HMAC-SHA256 digest of the token secret
        abilities: Permission names the token may exercise, ["*"] for all
        expires_at: Expiry timestamp (NULL = no expiry)
        last_used_at: Last successful authentication with this token
        ip_address: Client IP at issuance (IPv6 fits in 45 chars)
        user_agent: Client User-Agent at issuance
    """

    __tablename__ = "access_tokens"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    token_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
    )

    abilities: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=lambda: [WILDCARD_ABILITY],
    )

    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
    )

    last_used_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)

    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user: Mapped[User] = relationship()

    def is_expired(self, now: datetime) -> bool:
        """True if the token has an expiry at or before now."""
        return self.expires_at is not None and as_utc(self.expires_at) <= now

    def can(self, ability: str) -> bool:
        """True if the token may exercise the given ability."""
        return WILDCARD_ABILITY in self.abilities or ability in self.abilities

    def __repr__(self) -> str:
        return f"AccessToken(id={self.id}, user_id={self.user_id}, name={self.name})"
