"""Token lifecycle: issue, rotate, verify and revoke device-scoped token pairs.

Access tokens are short-lived JWTs carrying ``sub`` (user id) and
``device_id``. Refresh tokens are opaque random strings stored in the token
store together with a SHA-256 digest of the most recent access token. A
logout flips ``is_revoked`` on the device's rows; ``verify`` then rejects any
access token whose digest sits on a revoked row (a deny-list lookup, so the
common case stays stateless apart from that one query).
"""
import hashlib
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Callable, NamedTuple, Optional

from filevault.config import settings
from filevault.errors import ExpiredOrInvalidRefreshToken, InvalidToken, TokenRevoked
from filevault.stores.base import TokenStore
from filevault.utils.clock import utcnow
from filevault.utils.jwt_utils import JWTSigner, default_signer
from filevault.utils.logger import logger

ACCESS_TOKEN_TYPE = "access"
_EPOCH = datetime(1970, 1, 1)  # clock() returns naive UTC


class TokenPair(NamedTuple):
    access_token: str
    refresh_token: str


class Principal(NamedTuple):
    """Identity resolved from a verified access token"""
    user_id: str
    device_id: str


def hash_access_token(access_token: str) -> str:
    """Digest persisted in place of the plaintext access token"""
    return hashlib.sha256(access_token.encode()).hexdigest()


class TokenManager:
    """Stateless service over an injected token store"""

    def __init__(
        self,
        store: TokenStore,
        signer: Optional[JWTSigner] = None,
        access_ttl_seconds: Optional[int] = None,
        refresh_ttl_days: Optional[int] = None,
        refresh_token_bytes: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.signer = signer or default_signer
        self.access_ttl_seconds = (
            access_ttl_seconds if access_ttl_seconds is not None else settings.ACCESS_TOKEN_EXPIRE_SECONDS
        )
        self.refresh_ttl_days = (
            refresh_ttl_days if refresh_ttl_days is not None else settings.REFRESH_TOKEN_EXPIRE_DAYS
        )
        self.refresh_token_bytes = refresh_token_bytes or settings.REFRESH_TOKEN_BYTES
        self.clock = clock

    def _mint_access_token(self, user_id: str, device_id: str) -> str:
        now = int((self.clock() - _EPOCH).total_seconds())
        claims = {
            "sub": user_id,
            "device_id": device_id,
            "jti": str(uuid.uuid4()),
            "iat": now,
            "exp": now + self.access_ttl_seconds,
            "type": ACCESS_TOKEN_TYPE,
        }
        return self.signer.encode(claims)

    # -----------------------------------------------------------------------
    # Issuance and rotation
    # -----------------------------------------------------------------------

    def issue(self, user_id: str, device_id: str) -> TokenPair:
        """Create a new token pair row for this device and return both plaintexts"""
        access_token = self._mint_access_token(user_id, device_id)
        refresh_token = secrets.token_hex(self.refresh_token_bytes)
        expires_at = self.clock() + timedelta(days=self.refresh_ttl_days)

        self.store.add(
            user_id=user_id,
            device_id=device_id,
            refresh_token=refresh_token,
            access_token_hash=hash_access_token(access_token),
            expires_at=expires_at,
        )

        logger.info(
            "Issued token pair",
            extra={"user_id": user_id, "device_id": device_id, "action": "issue_token"},
        )
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def rotate(self, refresh_token: str) -> str:
        """Exchange a live refresh token for a new access token.

        Unknown, revoked and expired refresh tokens all raise the same
        ExpiredOrInvalidRefreshToken.
        """
        record = self.store.find_live(refresh_token, self.clock()) if refresh_token else None
        if record is None:
            raise ExpiredOrInvalidRefreshToken()

        user_id, device_id = record.user_id, record.device_id
        access_token = self._mint_access_token(user_id, device_id)
        self.store.replace_access_token(record.id, hash_access_token(access_token))

        logger.info(
            "Rotated access token",
            extra={"user_id": user_id, "device_id": device_id, "action": "rotate_token"},
        )
        return access_token

    # -----------------------------------------------------------------------
    # Verification
    # -----------------------------------------------------------------------

    def verify(self, access_token: str) -> Principal:
        """Resolve an access token to (user_id, device_id).

        Raises InvalidToken, TokenExpired or TokenRevoked, in that order of
        checks.
        """
        if not access_token:
            raise InvalidToken()

        claims = self.signer.decode(access_token)

        user_id = claims.get("sub")
        device_id = claims.get("device_id")
        if claims.get("type") != ACCESS_TOKEN_TYPE or not isinstance(user_id, str) or not isinstance(device_id, str):
            raise InvalidToken()

        if self.store.is_access_revoked(hash_access_token(access_token)):
            raise TokenRevoked()

        return Principal(user_id=user_id, device_id=device_id)

    # -----------------------------------------------------------------------
    # Revocation and cleanup
    # -----------------------------------------------------------------------

    def revoke_device(self, user_id: str, device_id: str) -> int:
        """Revoke every live pair of one device; other devices are untouched"""
        revoked = self.store.revoke_device(user_id, device_id)
        logger.info(
            f"Revoked {revoked} token(s) for device",
            extra={"user_id": user_id, "device_id": device_id, "action": "revoke_device"},
        )
        return revoked

    def revoke_all(self, user_id: str) -> int:
        """Revoke every live pair of the user across all devices"""
        revoked = self.store.revoke_user(user_id)
        logger.warning(
            f"Revoked {revoked} token(s) across all devices",
            extra={"user_id": user_id, "action": "revoke_all"},
        )
        return revoked

    def sweep_expired(self) -> int:
        """Delete rows whose refresh token has expired"""
        deleted = self.store.delete_expired(self.clock())
        logger.info(f"Swept {deleted} expired token row(s)", extra={"action": "sweep_tokens"})
        return deleted
