"""Pydantic schemas for request/response validation"""
from filevault.schemas.auth import (
    AccessTokenData,
    RefreshRequest,
    SigninRequest,
    SignupRequest,
    TokenPairData,
    UserInfo,
)
from filevault.schemas.common import ApiResponse, error_body
from filevault.schemas.file import FileListData, FileSummary

__all__ = [
    "AccessTokenData",
    "ApiResponse",
    "FileListData",
    "FileSummary",
    "RefreshRequest",
    "SigninRequest",
    "SignupRequest",
    "TokenPairData",
    "UserInfo",
    "error_body",
]
