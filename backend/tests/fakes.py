"""In-memory store implementations for service-level tests"""
import itertools
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from filevault.errors import BlobCollision, IdentifierTaken, InfrastructureError
from filevault.models import FileRecord, TokenRecord, User


class InMemoryCredentialStore:
    def __init__(self):
        self.users: Dict[str, User] = {}

    def get(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def exists(self, user_id: str) -> bool:
        return user_id in self.users

    def create(self, user_id: str, password_hash: str) -> User:
        if user_id in self.users:
            raise IdentifierTaken()
        user = User(id=user_id, password_hash=password_hash, created_at=datetime.utcnow())
        self.users[user_id] = user
        return user


class RacingCredentialStore(InMemoryCredentialStore):
    """Reports the id as free, then loses the insert to a concurrent signup"""

    def exists(self, user_id: str) -> bool:
        return False

    def create(self, user_id: str, password_hash: str) -> User:
        raise IdentifierTaken()


class InMemoryTokenStore:
    def __init__(self):
        self.rows: List[TokenRecord] = []
        self._ids = itertools.count(1)

    def add(self, user_id, device_id, refresh_token, access_token_hash, expires_at) -> TokenRecord:
        record = TokenRecord(
            id=next(self._ids),
            user_id=user_id,
            device_id=device_id,
            refresh_token=refresh_token,
            access_token_hash=access_token_hash,
            is_revoked=False,
            created_at=datetime.utcnow(),
            expires_at=expires_at,
        )
        self.rows.append(record)
        return record

    def find_live(self, refresh_token: str, now: datetime) -> Optional[TokenRecord]:
        for row in self.rows:
            if row.refresh_token == refresh_token and not row.is_revoked and row.expires_at > now:
                return row
        return None

    def replace_access_token(self, record_id: int, access_token_hash: str) -> bool:
        for row in self.rows:
            if row.id == record_id:
                row.access_token_hash = access_token_hash
                return True
        return False

    def is_access_revoked(self, access_token_hash: str) -> bool:
        return any(row.is_revoked and row.access_token_hash == access_token_hash for row in self.rows)

    def revoke_device(self, user_id: str, device_id: str) -> int:
        return self._revoke(lambda row: row.user_id == user_id and row.device_id == device_id)

    def revoke_user(self, user_id: str) -> int:
        return self._revoke(lambda row: row.user_id == user_id)

    def _revoke(self, match) -> int:
        count = 0
        for row in self.rows:
            if match(row) and not row.is_revoked:
                row.is_revoked = True
                count += 1
        return count

    def delete_expired(self, now: datetime) -> int:
        before = len(self.rows)
        self.rows = [row for row in self.rows if row.expires_at >= now]
        return before - len(self.rows)


class InMemoryFileMetadataStore:
    """Thread-safe so concurrent update tests exercise real interleavings"""

    def __init__(self):
        self.rows: Dict[int, FileRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    @staticmethod
    def _copy(row: FileRecord) -> FileRecord:
        return FileRecord(
            id=row.id,
            owner_id=row.owner_id,
            original_name=row.original_name,
            storage_name=row.storage_name,
            extension=row.extension,
            mime_type=row.mime_type,
            size=row.size,
            uploaded_at=row.uploaded_at,
        )

    def insert(self, owner_id, original_name, storage_name, extension, mime_type, size, uploaded_at) -> FileRecord:
        with self._lock:
            row = FileRecord(
                id=next(self._ids),
                owner_id=owner_id,
                original_name=original_name,
                storage_name=storage_name,
                extension=extension,
                mime_type=mime_type,
                size=size,
                uploaded_at=uploaded_at,
            )
            self.rows[row.id] = row
            return self._copy(row)

    def get(self, file_id: int, owner_id: str) -> Optional[FileRecord]:
        with self._lock:
            row = self.rows.get(file_id)
            if row is None or row.owner_id != owner_id:
                return None
            return self._copy(row)

    def page(self, owner_id: str, offset: int, limit: int) -> Tuple[List[FileRecord], int]:
        with self._lock:
            owned = [row for row in self.rows.values() if row.owner_id == owner_id]
            owned.sort(key=lambda row: (row.uploaded_at, row.id), reverse=True)
            return [self._copy(row) for row in owned[offset:offset + limit]], len(owned)

    def update(self, file_id, owner_id, original_name, storage_name, extension, mime_type, size, uploaded_at):
        with self._lock:
            row = self.rows.get(file_id)
            if row is None or row.owner_id != owner_id:
                return None
            row.original_name = original_name
            row.storage_name = storage_name
            row.extension = extension
            row.mime_type = mime_type
            row.size = size
            row.uploaded_at = uploaded_at
            return self._copy(row)

    def delete(self, file_id: int, owner_id: str) -> bool:
        with self._lock:
            row = self.rows.get(file_id)
            if row is None or row.owner_id != owner_id:
                return False
            del self.rows[file_id]
            return True


class FailingFileMetadataStore(InMemoryFileMetadataStore):
    """Metadata store whose writes fail after the blob has been written"""

    def __init__(self, fail_insert: bool = False, fail_update: bool = False):
        super().__init__()
        self.fail_insert = fail_insert
        self.fail_update = fail_update

    def insert(self, *args, **kwargs):
        if self.fail_insert:
            raise InfrastructureError()
        return super().insert(*args, **kwargs)

    def update(self, *args, **kwargs):
        if self.fail_update:
            raise InfrastructureError()
        return super().update(*args, **kwargs)


class InMemoryBlobStore:
    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    def write(self, name: str, data: bytes) -> None:
        with self._lock:
            if name in self.blobs:
                raise BlobCollision()
            self.blobs[name] = data

    def locate(self, name: str) -> Optional[Path]:
        # Only the presence matters to the manager
        with self._lock:
            return Path(name) if name in self.blobs else None

    def delete(self, name: str) -> bool:
        with self._lock:
            return self.blobs.pop(name, None) is not None
