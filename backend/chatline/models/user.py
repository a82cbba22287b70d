# backend/chatline/models/user.py
"""
User model for the chat backend.

Users are created on their first login with an unknown username and are never
deleted by the API.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
import ulid

from ..database import Base


class User(Base):
    """
    Registered chat user.

    Attributes:
        id: ULID primary key
        username: Unique login name
        hashed_password: Bcrypt hashed password
        profile_picture_key: Avatar key picked at random on registration
        created_at: Account creation timestamp
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    username = Column(String(50), unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    profile_picture_key = Column(String(64), nullable=False)
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc)
    )

    def __repr__(self) -> str:
        return f"<User {self.username}>"
