"""FileRecord model - metadata for blobs held in the blob store"""
from datetime import datetime

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String

from filevault.database import Base


class FileRecord(Base):
    """Metadata row for one stored file.

    The row is the source of truth for whether a file exists. ``storage_name``
    is the opaque key of the blob on disk and changes on every update.
    """

    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(255), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    original_name = Column(String(255), nullable=False)
    storage_name = Column(String(255), unique=True, nullable=False)
    extension = Column(String(50), nullable=False, default="")
    mime_type = Column(String(100), nullable=False)
    size = Column(BigInteger, nullable=False)
    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
