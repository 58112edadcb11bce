"""
Verification Token Model

Single-use magic-link token bound to one user.

Security Features:
=================
1. Only the SHA-256 digest of the token is stored; the raw value exists
   only inside the emailed link
2. user_id is unique: a user has at most one live token
3. expires_at bounds the token's lifetime; expired rows count as absent
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from digiread.database import Base


class VerificationToken(Base):
    """
    Table: verification_tokens

    Lifecycle:
    - created on link request (superseding any previous token of the user)
    - deleted on successful verification
    - ignored (and later purged) once expires_at has passed
    """

    __tablename__ = "verification_tokens"

    id: Mapped[int] = mapped_column(primary_key=True)

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        index=True,
        nullable=False,
        comment="Owner of the token"
    )

    token_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="SHA-256 hex digest of the token value"
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        index=True,
        nullable=False,
        comment="After this instant the token is treated as absent"
    )

    def __repr__(self) -> str:
        return f"VerificationToken(id={self.id}, user_id={self.user_id})"
