"""Store interfaces consumed by the services.

The SQLAlchemy and filesystem implementations live next to this module;
tests substitute in-memory fakes that satisfy the same protocols.
"""
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol, Tuple

from filevault.models import FileRecord, TokenRecord, User


class CredentialStore(Protocol):
    def get(self, user_id: str) -> Optional[User]: ...

    def exists(self, user_id: str) -> bool: ...

    def create(self, user_id: str, password_hash: str) -> User:
        """Insert a user; raises IdentifierTaken when the id already exists"""
        ...


class TokenStore(Protocol):
    def add(
        self,
        user_id: str,
        device_id: str,
        refresh_token: str,
        access_token_hash: str,
        expires_at: datetime,
    ) -> TokenRecord: ...

    def find_live(self, refresh_token: str, now: datetime) -> Optional[TokenRecord]: ...

    def replace_access_token(self, record_id: int, access_token_hash: str) -> bool: ...

    def is_access_revoked(self, access_token_hash: str) -> bool: ...

    def revoke_device(self, user_id: str, device_id: str) -> int: ...

    def revoke_user(self, user_id: str) -> int: ...

    def delete_expired(self, now: datetime) -> int: ...


class FileMetadataStore(Protocol):
    def insert(
        self,
        owner_id: str,
        original_name: str,
        storage_name: str,
        extension: str,
        mime_type: str,
        size: int,
        uploaded_at: datetime,
    ) -> FileRecord: ...

    def get(self, file_id: int, owner_id: str) -> Optional[FileRecord]: ...

    def page(self, owner_id: str, offset: int, limit: int) -> Tuple[List[FileRecord], int]: ...

    def update(
        self,
        file_id: int,
        owner_id: str,
        original_name: str,
        storage_name: str,
        extension: str,
        mime_type: str,
        size: int,
        uploaded_at: datetime,
    ) -> Optional[FileRecord]:
        """Overwrite the row in one statement; None when no row matched"""
        ...

    def delete(self, file_id: int, owner_id: str) -> bool: ...


class BlobStore(Protocol):
    def write(self, name: str, data: bytes) -> None:
        """Create a new blob; raises BlobCollision if ``name`` is taken"""
        ...

    def locate(self, name: str) -> Optional[Path]: ...

    def delete(self, name: str) -> bool:
        """Remove a blob; False when it was already gone"""
        ...
