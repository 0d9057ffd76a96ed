"""SQLAlchemy-backed credential store"""
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from filevault.database import store_errors
from filevault.errors import IdentifierTaken
from filevault.models.user import User


class SqlCredentialStore:
    """Reads and inserts ``users`` rows through a request-scoped session"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        with store_errors(self.db, "get_user"):
            return self.db.query(User).filter(User.id == user_id).first()

    def exists(self, user_id: str) -> bool:
        with store_errors(self.db, "user_exists"):
            return self.db.query(User.id).filter(User.id == user_id).first() is not None

    def create(self, user_id: str, password_hash: str) -> User:
        with store_errors(self.db, "create_user"):
            user = User(id=user_id, password_hash=password_hash)
            self.db.add(user)
            try:
                self.db.commit()
            except IntegrityError:
                # Lost the race against a concurrent signup for the same id
                self.db.rollback()
                raise IdentifierTaken()
            self.db.refresh(user)
            return user
