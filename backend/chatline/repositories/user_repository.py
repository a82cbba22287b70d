# backend/chatline/repositories/user_repository.py
"""
User Repository for the chat backend.

Lookups by username, by id and by id set.
"""

from typing import List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for User entity operations."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_username(self, username: str) -> Optional[User]:
        return self.find_one_by(username=username)

    def get_by_ids(self, user_ids: Sequence[str]) -> List[User]:
        """
        Fetch users for a set of ids.

        Results follow the order of ``user_ids``; unknown ids are skipped.
        """
        if not user_ids:
            return []
        try:
            rows = self.db.query(User).filter(User.id.in_(list(user_ids))).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching users by ids: {str(e)}")
            raise RepositoryException(f"Failed to fetch users: {str(e)}")
        by_id = {user.id: user for user in rows}
        return [by_id[user_id] for user_id in user_ids if user_id in by_id]

    def list_all(self) -> List[User]:
        try:
            return self.db.query(User).order_by(User.username).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing users: {str(e)}")
            raise RepositoryException(f"Failed to list users: {str(e)}")
