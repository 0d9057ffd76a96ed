"""File persistence: keeps blobs and metadata rows consistent.

Ordering rules:

* a blob is written before any row references it;
* a blob is deleted only after no row references it any more;
* the metadata row is the authoritative "does this file exist" signal.

Following these, no row ever points at a blob this service removed. A row
whose blob vanished out-of-band is reported as an ordinary not-found.
"""
import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, List, NamedTuple, Optional, Tuple

from filevault.config import settings
from filevault.errors import InfrastructureError, NotFoundError
from filevault.models.file import FileRecord
from filevault.stores.base import BlobStore, FileMetadataStore
from filevault.utils.clock import utcnow
from filevault.utils.logger import logger


class FilePage(NamedTuple):
    records: List[FileRecord]
    total_count: int
    page: int
    page_size: int


# Longer suffixes are not treated as extensions; they end up in blob names
MAX_EXTENSION_LENGTH = 16

# Offsets past SQLite's signed 64-bit INTEGER overflow the bind parameter
MAX_OFFSET = 2 ** 62


def file_extension(original_name: str) -> str:
    """Lower-cased suffix including the dot, or "" when there is none"""
    extension = os.path.splitext(original_name or "")[1].lower()
    if len(extension) > MAX_EXTENSION_LENGTH:
        return ""
    return extension


def new_storage_name(extension: str) -> str:
    return f"{uuid.uuid4().hex}{extension}"


class FileManager:
    """Stateless service coordinating a metadata store and a blob store"""

    def __init__(
        self,
        metadata: FileMetadataStore,
        blobs: BlobStore,
        default_page_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.metadata = metadata
        self.blobs = blobs
        self.default_page_size = default_page_size or settings.FILE_LIST_DEFAULT_PAGE_SIZE
        self.max_page_size = max_page_size or settings.FILE_LIST_MAX_PAGE_SIZE
        self.clock = clock

    # -----------------------------------------------------------------------
    # Create
    # -----------------------------------------------------------------------

    def store(self, owner_id: str, data: bytes, original_name: str, mime_type: str) -> FileRecord:
        """Write the blob, then insert the row that references it"""
        extension = file_extension(original_name)
        storage_name = new_storage_name(extension)

        # A failed write leaves no row behind
        self.blobs.write(storage_name, data)

        try:
            record = self.metadata.insert(
                owner_id=owner_id,
                original_name=original_name,
                storage_name=storage_name,
                extension=extension,
                mime_type=mime_type,
                size=len(data),
                uploaded_at=self.clock(),
            )
        except Exception:
            self._discard_blob(storage_name, reason="insert_failed")
            raise

        logger.info(
            f"Stored file {record.id}",
            extra={"user_id": owner_id, "file_id": record.id, "action": "store_file"},
        )
        return record

    # -----------------------------------------------------------------------
    # Read
    # -----------------------------------------------------------------------

    def list(self, owner_id: str, page: int = 1, page_size: Optional[int] = None) -> FilePage:
        """Newest-first page of the owner's files; non-positive inputs fall back to defaults"""
        page = page if page and page >= 1 else 1
        page_size = page_size if page_size and page_size >= 1 else self.default_page_size
        page_size = min(page_size, self.max_page_size)

        offset = min((page - 1) * page_size, MAX_OFFSET)
        records, total = self.metadata.page(owner_id, offset=offset, limit=page_size)
        return FilePage(records=records, total_count=total, page=page, page_size=page_size)

    def get(self, file_id: int, owner_id: str) -> FileRecord:
        record = self.metadata.get(file_id, owner_id)
        if record is None:
            raise NotFoundError()
        return record

    def resolve_for_download(self, file_id: int, owner_id: str) -> Tuple[Path, FileRecord]:
        record = self.get(file_id, owner_id)
        path = self.blobs.locate(record.storage_name)
        if path is None:
            logger.error(
                f"Blob missing for file {file_id}",
                extra={"user_id": owner_id, "file_id": file_id, "action": "resolve_file"},
            )
            raise NotFoundError()
        return path, record

    # -----------------------------------------------------------------------
    # Mutate
    # -----------------------------------------------------------------------

    def update(
        self,
        file_id: int,
        owner_id: str,
        data: bytes,
        original_name: str,
        mime_type: str,
    ) -> FileRecord:
        """Replace a file's content and metadata.

        1. write the new blob under a fresh name
        2. point the row at it
        3. delete the old blob

        If step 2 fails the new blob is removed and the old state stays
        authoritative. A failure in step 3 only leaks an unreferenced blob.
        """
        current = self.get(file_id, owner_id)
        # Copy before the row changes underneath the ORM object
        old_storage_name = current.storage_name

        extension = file_extension(original_name)
        storage_name = new_storage_name(extension)
        self.blobs.write(storage_name, data)

        try:
            updated = self.metadata.update(
                file_id,
                owner_id,
                original_name=original_name,
                storage_name=storage_name,
                extension=extension,
                mime_type=mime_type,
                size=len(data),
                uploaded_at=self.clock(),
            )
        except Exception:
            self._discard_blob(storage_name, reason="update_failed")
            raise

        if updated is None:
            # Row deleted concurrently between the read and the update
            self._discard_blob(storage_name, reason="row_vanished")
            raise NotFoundError()

        self._discard_blob(old_storage_name, reason="replaced")

        logger.info(
            f"Updated file {file_id}",
            extra={"user_id": owner_id, "file_id": file_id, "action": "update_file"},
        )
        return updated

    def delete(self, file_id: int, owner_id: str) -> None:
        """Remove the row, then the blob on a best-effort basis"""
        record = self.get(file_id, owner_id)
        storage_name = record.storage_name

        if not self.metadata.delete(file_id, owner_id):
            raise NotFoundError()

        self._discard_blob(storage_name, reason="deleted")

        logger.info(
            f"Deleted file {file_id}",
            extra={"user_id": owner_id, "file_id": file_id, "action": "delete_file"},
        )

    def _discard_blob(self, storage_name: str, reason: str) -> None:
        """Delete a blob no row references; failures are logged, never raised"""
        try:
            removed = self.blobs.delete(storage_name)
        except (InfrastructureError, OSError):
            logger.warning(
                f"Could not delete blob {storage_name} ({reason})",
                extra={"action": "discard_blob"},
                exc_info=True,
            )
            return
        if not removed:
            logger.warning(
                f"Blob {storage_name} already absent ({reason})",
                extra={"action": "discard_blob"},
            )
