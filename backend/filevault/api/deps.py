"""API dependencies: service construction, device identity and bearer authentication.

Services are built per request around the request's database session, so
nothing shares mutable state between requests. Tests swap any of these
through ``app.dependency_overrides``.
"""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from filevault.config import settings
from filevault.database import get_db
from filevault.errors import AuthenticationError
from filevault.middleware.monitoring import record_auth_failure
from filevault.services.credentials import CredentialService
from filevault.services.device import client_address, fingerprint
from filevault.services.files import FileManager
from filevault.services.tokens import Principal, TokenManager
from filevault.stores.blob_store import LocalBlobStore
from filevault.stores.credential_store import SqlCredentialStore
from filevault.stores.file_store import SqlFileMetadataStore
from filevault.stores.token_store import SqlTokenStore

_bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------

@lru_cache
def get_blob_store() -> LocalBlobStore:
    """One blob store per process, rooted at UPLOAD_DIR"""
    return LocalBlobStore(settings.UPLOAD_DIR)


def get_credential_service(db: Session = Depends(get_db)) -> CredentialService:
    return CredentialService(SqlCredentialStore(db))


def get_token_manager(db: Session = Depends(get_db)) -> TokenManager:
    return TokenManager(SqlTokenStore(db))


def get_file_manager(
    db: Session = Depends(get_db),
    blobs: LocalBlobStore = Depends(get_blob_store),
) -> FileManager:
    return FileManager(SqlFileMetadataStore(db), blobs)


# ---------------------------------------------------------------------------
# Device identity
# ---------------------------------------------------------------------------

def get_device_id(request: Request) -> str:
    """Fingerprint of the calling device (User-Agent + client address)"""
    peer = request.client.host if request.client else None
    address = client_address(peer, request.headers.get("x-forwarded-for"), settings.TRUST_PROXY_HEADERS)
    return fingerprint(request.headers.get("user-agent"), address)


# ---------------------------------------------------------------------------
# Bearer authentication
# ---------------------------------------------------------------------------

def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    tokens: TokenManager = Depends(get_token_manager),
) -> Principal:
    """Require a valid, unexpired, unrevoked access token.

    Returns the (user_id, device_id) embedded in the token. Raises an
    AuthenticationError subclass (401) otherwise.
    """
    if not credentials:
        record_auth_failure("missing_token")
        raise AuthenticationError("No token provided")

    try:
        return tokens.verify(credentials.credentials)
    except AuthenticationError as exc:
        record_auth_failure(type(exc).__name__)
        raise
