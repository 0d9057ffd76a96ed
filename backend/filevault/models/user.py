"""User model - identities that own tokens and files"""
from datetime import datetime

from sqlalchemy import Column, DateTime, String

from filevault.database import Base


class User(Base):
    """A registered identity.

    ``id`` is the email address or E.164 phone number the user signed up with.
    Rows are immutable after creation and never deleted by the service.
    """

    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    password_hash = Column(String(255), nullable=False)  # argon2 encoded hash
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
