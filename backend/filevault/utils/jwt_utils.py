"""JWT utilities: signing keys, token signing and verification"""
import threading
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from filevault.config import settings
from filevault.errors import InvalidToken, TokenExpired
from filevault.utils.logger import logger


class JWTSigner:
    """Signs and verifies access tokens with python-jose.

    HS* algorithms use a shared secret. RS* algorithms use an RSA keypair
    loaded from a PEM string, or generated on first use when none is
    configured.
    """

    def __init__(
        self,
        algorithm: str,
        secret: Optional[str] = None,
        private_key_pem: Optional[str] = None,
        key_id: Optional[str] = None,
    ):
        self.algorithm = algorithm
        self.secret = secret
        self.private_key_pem = private_key_pem
        self.key_id = key_id
        self._private_key: Any = None   # cryptography RSAPrivateKey object
        self._public_key: Any = None    # cryptography RSAPublicKey object
        self._key_lock = threading.Lock()

    @property
    def is_symmetric(self) -> bool:
        return self.algorithm.startswith("HS")

    # -----------------------------------------------------------------------
    # Keypair management
    # -----------------------------------------------------------------------

    def _load_keypair(self) -> None:
        """Load or auto-generate the RSA keypair.

        If no PEM is configured, generates a fresh RSA-2048 keypair and logs
        a warning: every token is invalidated on restart.
        """
        from cryptography.hazmat.primitives import serialization
        from cryptography.hazmat.primitives.asymmetric import rsa

        if self.private_key_pem:
            self._private_key = serialization.load_pem_private_key(
                self.private_key_pem.encode(), password=None,
            )
            logger.info("JWT keypair loaded from JWT_PRIVATE_KEY setting")
        else:
            self._private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
            logger.warning(
                "JWT_PRIVATE_KEY not set, auto-generated RSA-2048 keypair for this process. "
                "All access tokens will be invalidated on restart."
            )
        self._public_key = self._private_key.public_key()

    def _ensure_keypair(self) -> None:
        # _public_key is assigned last, so it marks a fully loaded pair
        if self._public_key is not None:
            return
        with self._key_lock:
            if self._public_key is None:
                self._load_keypair()

    def _signing_key(self) -> Any:
        if self.is_symmetric:
            return self.secret
        self._ensure_keypair()
        return self._private_key

    def _verification_key(self) -> Any:
        if self.is_symmetric:
            return self.secret
        self._ensure_keypair()
        return self._public_key

    # -----------------------------------------------------------------------
    # Token creation / verification
    # -----------------------------------------------------------------------

    def encode(self, claims: Dict[str, Any]) -> str:
        headers = {"kid": self.key_id} if self.key_id else None
        return jwt.encode(claims, self._signing_key(), algorithm=self.algorithm, headers=headers)

    def decode(self, token: str) -> Dict[str, Any]:
        """Verify signature and expiry and return the claims.

        Raises:
            TokenExpired: the signature is valid but ``exp`` has passed.
            InvalidToken: anything else (bad signature, garbage, wrong alg).
        """
        try:
            return jwt.decode(token, self._verification_key(), algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except JWTError as exc:
            logger.debug(f"JWT decode failed: {exc}")
            raise InvalidToken() from exc


def signer_from_settings() -> JWTSigner:
    return JWTSigner(
        algorithm=settings.JWT_ALGORITHM,
        secret=settings.JWT_SECRET,
        private_key_pem=settings.JWT_PRIVATE_KEY,
        key_id=settings.JWT_KEY_ID,
    )


# Process-wide signer so an auto-generated RSA key survives across requests
default_signer = signer_from_settings()
