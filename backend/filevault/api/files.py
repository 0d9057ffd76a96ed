"""File endpoints - every route acts on the caller's own files only"""
from contextlib import contextmanager
from typing import Optional, Tuple

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from fastapi.responses import FileResponse

from filevault.api.deps import get_current_principal, get_file_manager
from filevault.config import settings
from filevault.errors import EmptyPayload, FileVaultError, PayloadTooLarge
from filevault.middleware.monitoring import record_file_operation
from filevault.schemas.common import ApiResponse
from filevault.schemas.file import FileListData, FileSummary
from filevault.services.files import FileManager
from filevault.services.tokens import Principal

router = APIRouter(prefix="/file", tags=["files"])

DEFAULT_MIME_TYPE = "application/octet-stream"


@contextmanager
def _tracked(operation: str):
    try:
        yield
    except FileVaultError:
        record_file_operation(operation, "error")
        raise
    record_file_operation(operation, "success")


def _read_upload(upload: Optional[UploadFile]) -> Tuple[bytes, str, str]:
    """Return (data, original name, mime type) of a multipart upload.

    Reads at most MAX_FILE_SIZE + 1 bytes so oversized bodies are rejected
    without being held in memory.
    """
    if upload is None or not upload.filename:
        raise EmptyPayload()

    data = upload.file.read(settings.MAX_FILE_SIZE + 1)
    if len(data) > settings.MAX_FILE_SIZE:
        raise PayloadTooLarge(f"File exceeds the {settings.MAX_FILE_SIZE} byte limit")

    return data, upload.filename, upload.content_type or DEFAULT_MIME_TYPE


@router.post("/upload", response_model=ApiResponse[FileSummary], status_code=status.HTTP_201_CREATED)
def upload_file(
    file: Optional[UploadFile] = File(None),
    principal: Principal = Depends(get_current_principal),
    files: FileManager = Depends(get_file_manager),
):
    """Store a new file for the caller (multipart field ``file``)"""
    with _tracked("store"):
        data, original_name, mime_type = _read_upload(file)
        record = files.store(principal.user_id, data, original_name, mime_type)

    return ApiResponse(message="File uploaded successfully", data=FileSummary.model_validate(record))


@router.get("/list", response_model=ApiResponse[FileListData])
def list_files(
    page: int = Query(1, description="1-based page number"),
    list_size: Optional[int] = Query(None, description="Files per page (default 10, max 100)"),
    principal: Principal = Depends(get_current_principal),
    files: FileManager = Depends(get_file_manager),
):
    """Newest-first page of the caller's files"""
    result = files.list(principal.user_id, page=page, page_size=list_size)
    return ApiResponse(data=FileListData.from_page(result))


@router.get("/download/{file_id}")
def download_file(
    file_id: int,
    principal: Principal = Depends(get_current_principal),
    files: FileManager = Depends(get_file_manager),
):
    """Raw bytes with the stored Content-Type and the original file name"""
    with _tracked("download"):
        path, record = files.resolve_for_download(file_id, principal.user_id)

    return FileResponse(path, media_type=record.mime_type, filename=record.original_name)


@router.put("/update/{file_id}", response_model=ApiResponse[FileSummary])
def update_file(
    file_id: int,
    file: Optional[UploadFile] = File(None),
    principal: Principal = Depends(get_current_principal),
    files: FileManager = Depends(get_file_manager),
):
    """Replace a file's content and metadata"""
    with _tracked("update"):
        data, original_name, mime_type = _read_upload(file)
        record = files.update(file_id, principal.user_id, data, original_name, mime_type)

    return ApiResponse(message="File updated successfully", data=FileSummary.model_validate(record))


@router.delete("/delete/{file_id}", response_model=ApiResponse[None])
def delete_file(
    file_id: int,
    principal: Principal = Depends(get_current_principal),
    files: FileManager = Depends(get_file_manager),
):
    with _tracked("delete"):
        files.delete(file_id, principal.user_id)

    return ApiResponse(message="File deleted successfully")


# Declared last so /file/list is not captured as an id
@router.get("/{file_id}", response_model=ApiResponse[FileSummary])
def get_file(
    file_id: int,
    principal: Principal = Depends(get_current_principal),
    files: FileManager = Depends(get_file_manager),
):
    """Metadata of one file"""
    record = files.get(file_id, principal.user_id)
    return ApiResponse(data=FileSummary.model_validate(record))
