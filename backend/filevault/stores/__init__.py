"""Data-access layer: SQL stores for users, tokens and file metadata, plus blob storage"""
from filevault.stores.blob_store import LocalBlobStore
from filevault.stores.credential_store import SqlCredentialStore
from filevault.stores.file_store import SqlFileMetadataStore
from filevault.stores.token_store import SqlTokenStore

__all__ = ["LocalBlobStore", "SqlCredentialStore", "SqlFileMetadataStore", "SqlTokenStore"]
