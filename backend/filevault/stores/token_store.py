"""SQLAlchemy-backed token store"""
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from filevault.database import store_errors
from filevault.models.token import TokenRecord


class SqlTokenStore:
    """Persists token pairs, revocation flags and expiry in the ``tokens`` table.

    Every method is a single statement followed by a commit; nothing here
    spans a multi-statement transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def add(
        self,
        user_id: str,
        device_id: str,
        refresh_token: str,
        access_token_hash: str,
        expires_at: datetime,
    ) -> TokenRecord:
        with store_errors(self.db, "add_token"):
            record = TokenRecord(
                user_id=user_id,
                device_id=device_id,
                refresh_token=refresh_token,
                access_token_hash=access_token_hash,
                is_revoked=False,
                expires_at=expires_at,
            )
            self.db.add(record)
            self.db.commit()
            self.db.refresh(record)
            return record

    def find_live(self, refresh_token: str, now: datetime) -> Optional[TokenRecord]:
        with store_errors(self.db, "find_refresh_token"):
            return self.db.query(TokenRecord).filter(
                TokenRecord.refresh_token == refresh_token,
                TokenRecord.is_revoked == False,  # noqa: E712
                TokenRecord.expires_at > now,
            ).first()

    def replace_access_token(self, record_id: int, access_token_hash: str) -> bool:
        with store_errors(self.db, "replace_access_token"):
            updated = self.db.query(TokenRecord).filter(
                TokenRecord.id == record_id,
            ).update({TokenRecord.access_token_hash: access_token_hash}, synchronize_session=False)
            self.db.commit()
            return updated > 0

    def is_access_revoked(self, access_token_hash: str) -> bool:
        with store_errors(self.db, "check_revocation"):
            return self.db.query(TokenRecord.id).filter(
                TokenRecord.access_token_hash == access_token_hash,
                TokenRecord.is_revoked == True,  # noqa: E712
            ).first() is not None

    def revoke_device(self, user_id: str, device_id: str) -> int:
        with store_errors(self.db, "revoke_device"):
            revoked = self.db.query(TokenRecord).filter(
                TokenRecord.user_id == user_id,
                TokenRecord.device_id == device_id,
                TokenRecord.is_revoked == False,  # noqa: E712
            ).update({TokenRecord.is_revoked: True}, synchronize_session=False)
            self.db.commit()
            return revoked

    def revoke_user(self, user_id: str) -> int:
        with store_errors(self.db, "revoke_user"):
            revoked = self.db.query(TokenRecord).filter(
                TokenRecord.user_id == user_id,
                TokenRecord.is_revoked == False,  # noqa: E712
            ).update({TokenRecord.is_revoked: True}, synchronize_session=False)
            self.db.commit()
            return revoked

    def delete_expired(self, now: datetime) -> int:
        with store_errors(self.db, "delete_expired_tokens"):
            deleted = self.db.query(TokenRecord).filter(
                TokenRecord.expires_at < now,
            ).delete(synchronize_session=False)
            self.db.commit()
            return deleted
