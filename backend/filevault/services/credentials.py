"""Signup and signin credential checks"""
import re
from typing import Dict, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from filevault.errors import IdentifierMalformed, IdentifierTaken
from filevault.stores.base import CredentialStore
from filevault.utils.logger import logger

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[1-9]\d{1,14}$")  # E.164


_default_hasher = PasswordHasher()
_dummy_hashes: Dict[int, str] = {}


def _dummy_hash_for(hasher: PasswordHasher) -> str:
    key = id(hasher)
    if key not in _dummy_hashes:
        _dummy_hashes[key] = hasher.hash("filevault-dummy-password")
    return _dummy_hashes[key]


def is_valid_identifier(identifier: str) -> bool:
    """Email address or E.164 phone number"""
    return bool(EMAIL_RE.fullmatch(identifier) or PHONE_RE.fullmatch(identifier))


class CredentialService:
    """Registers identities and checks passwords against stored argon2 hashes"""

    def __init__(self, store: CredentialStore, hasher: Optional[PasswordHasher] = None):
        self.store = store
        self.hasher = hasher or _default_hasher

    @property
    def _dummy_hash(self) -> str:
        # Verified against when the user does not exist, so unknown ids cost
        # the same argon2 work as a wrong password
        return _dummy_hash_for(self.hasher)

    def register(self, identifier: str, raw_password: str) -> None:
        if not is_valid_identifier(identifier):
            raise IdentifierMalformed()

        if self.store.exists(identifier):
            raise IdentifierTaken()

        self.store.create(identifier, self.hasher.hash(raw_password))
        logger.info("Registered user", extra={"user_id": identifier, "action": "register"})

    def verify_credentials(self, identifier: str, raw_password: str) -> bool:
        """True only for an existing user with a matching password; never raises on mismatch"""
        user = self.store.get(identifier)
        password_hash = user.password_hash if user is not None else self._dummy_hash

        try:
            matched = self.hasher.verify(password_hash, raw_password)
        except (VerificationError, InvalidHashError):
            matched = False

        return matched and user is not None
