"""File schemas"""
import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class FileSummary(BaseModel):
    """Client view of a FileRecord (the storage name is never exposed)"""

    id: int
    name: str
    extension: str
    mime_type: str = Field(..., alias="mimeType")
    size: int
    upload_date: Optional[datetime] = Field(None, alias="uploadDate")

    class Config:
        from_attributes = True
        populate_by_name = True

    @model_validator(mode="before")
    @classmethod
    def map_file_record(cls, data):
        """Map FileRecord attribute names onto the public field names"""
        # Handle SQLAlchemy model objects
        if hasattr(data, "storage_name") and hasattr(data, "original_name"):
            return {
                "id": data.id,
                "name": data.original_name,
                "extension": data.extension,
                "mime_type": data.mime_type,
                "size": data.size,
                "upload_date": data.uploaded_at,
            }
        return data


class FileListData(BaseModel):
    """One page of the caller's files"""

    page: int
    list_size: int = Field(..., alias="listSize")
    total_pages: int = Field(..., alias="totalPages")
    total_count: int = Field(..., alias="totalCount")
    files: List[FileSummary]

    class Config:
        populate_by_name = True

    @classmethod
    def from_page(cls, page) -> "FileListData":
        return cls(
            page=page.page,
            list_size=page.page_size,
            total_pages=math.ceil(page.total_count / page.page_size) if page.page_size else 0,
            total_count=page.total_count,
            files=[FileSummary.model_validate(record) for record in page.records],
        )
