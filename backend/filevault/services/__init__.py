"""Session and file services built on injected stores"""
from filevault.services.credentials import CredentialService
from filevault.services.device import fingerprint
from filevault.services.files import FileManager, FilePage
from filevault.services.tokens import Principal, TokenManager, TokenPair

__all__ = [
    "CredentialService",
    "FileManager",
    "FilePage",
    "Principal",
    "TokenManager",
    "TokenPair",
    "fingerprint",
]
