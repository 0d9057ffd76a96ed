"""TokenRecord model - device-scoped refresh tokens and the access-token deny-list"""
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String

from filevault.database import Base


class TokenRecord(Base):
    """One issued token pair.

    A row is created on every signup/signin. Rotation swaps
    ``access_token_hash`` in place and keeps ``refresh_token``. Logout flips
    ``is_revoked`` for every live row of the (user, device) pair; the flag is
    never cleared. Rows past ``expires_at`` are pruned by the expiry sweep.
    """

    __tablename__ = "tokens"
    __table_args__ = (
        # Revocation scans: UPDATE ... WHERE user_id = ? AND device_id = ?
        Index("ix_tokens_user_device", "user_id", "device_id"),
        # Expiry sweeps and deny-list checks
        Index("ix_tokens_revoked_expires", "is_revoked", "expires_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    device_id = Column(String(64), nullable=False)
    refresh_token = Column(String(255), unique=True, nullable=False, index=True)
    access_token_hash = Column(String(64), nullable=True, index=True)  # SHA-256 of latest access token
    is_revoked = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)
