"""FileVault: per-device token sessions and owner-scoped file storage"""

__version__ = "0.1.0"
