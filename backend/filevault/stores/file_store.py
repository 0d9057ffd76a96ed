"""SQLAlchemy-backed file metadata store"""
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from filevault.database import store_errors
from filevault.models.file import FileRecord


class SqlFileMetadataStore:
    """Owner-scoped access to ``files`` rows.

    Every lookup filters on both ``id`` and ``owner_id`` so a foreign id
    behaves exactly like a missing one.
    """

    def __init__(self, db: Session):
        self.db = db

    def _owned(self, file_id: int, owner_id: str):
        return self.db.query(FileRecord).filter(
            FileRecord.id == file_id,
            FileRecord.owner_id == owner_id,
        )

    def insert(
        self,
        owner_id: str,
        original_name: str,
        storage_name: str,
        extension: str,
        mime_type: str,
        size: int,
        uploaded_at: datetime,
    ) -> FileRecord:
        with store_errors(self.db, "insert_file"):
            record = FileRecord(
                owner_id=owner_id,
                original_name=original_name,
                storage_name=storage_name,
                extension=extension,
                mime_type=mime_type,
                size=size,
                uploaded_at=uploaded_at,
            )
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
            return record

    def get(self, file_id: int, owner_id: str) -> Optional[FileRecord]:
        with store_errors(self.db, "get_file"):
            return self._owned(file_id, owner_id).first()

    def page(self, owner_id: str, offset: int, limit: int) -> Tuple[List[FileRecord], int]:
        with store_errors(self.db, "list_files"):
            query = self.db.query(FileRecord).filter(FileRecord.owner_id == owner_id)
            total = query.count()
            records = (
                query.order_by(FileRecord.uploaded_at.desc(), FileRecord.id.desc())
                .offset(offset)
                .limit(limit)
                .all()
            )
            return records, total

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
        with store_errors(self.db, "update_file"):
            updated = self._owned(file_id, owner_id).update(
                {
                    FileRecord.original_name: original_name,
                    FileRecord.storage_name: storage_name,
                    FileRecord.extension: extension,
                    FileRecord.mime_type: mime_type,
                    FileRecord.size: size,
                    FileRecord.uploaded_at: uploaded_at,
                },
                synchronize_session=False,
            )
            self.db.commit()
            if not updated:
                return None
            return self._owned(file_id, owner_id).first()

    def delete(self, file_id: int, owner_id: str) -> bool:
        with store_errors(self.db, "delete_file"):
            deleted = self._owned(file_id, owner_id).delete(synchronize_session=False)
            self.db.commit()
            return deleted > 0
