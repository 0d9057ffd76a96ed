"""Database models"""
from filevault.models.file import FileRecord
from filevault.models.token import TokenRecord
from filevault.models.user import User

__all__ = ["FileRecord", "TokenRecord", "User"]
