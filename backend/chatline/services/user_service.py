# backend/chatline/services/user_service.py
"""
User service: login-or-register and user listings.
"""

from dataclasses import dataclass
import random
from typing import List, Sequence

from sqlalchemy.orm import Session

from ..auth import create_access_token, get_password_hash_async, verify_password_async
from ..core.config import settings
from ..core.exceptions import DomainException, ErrorKind, RepositoryException
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService


@dataclass
class LoginResult:
    user: User
    access_token: str
    is_new_user: bool


class UserService(BaseService):
    """Identity operations on top of the user repository."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("login")
    async def login(self, username: str, password: str) -> LoginResult:
        """
        Log a user in, registering them first if the username is unknown.

        Password hashing runs in the bcrypt thread pool. When a concurrent
        login registers the same username first, the insert fails on the
        unique constraint and this login is checked against that user.

        Raises:
            DomainException: VALIDATION when the password does not match
        """
        user = self.user_repository.get_by_username(username)
        if user is None:
            hashed_password = await get_password_hash_async(password)
            try:
                with self.transaction():
                    user = self.user_repository.create(
                        username=username,
                        hashed_password=hashed_password,
                        profile_picture_key=random.choice(settings.profile_picture_keys),
                    )
            except RepositoryException:
                self.db.rollback()
                user = self.user_repository.get_by_username(username)
                if user is None:
                    raise
                self.logger.info(
                    "Username registered by a concurrent login", extra={"username": username}
                )
            else:
                self.log_operation("register_user", user_id=user.id, username=username)
                return LoginResult(
                    user=user,
                    access_token=create_access_token({"sub": user.id}),
                    is_new_user=True,
                )

        if not await verify_password_async(password, user.hashed_password):
            self.logger.info("Rejected login", extra={"username": username})
            raise DomainException(
                ErrorKind.VALIDATION,
                "Wrong password for this username",
                code="invalid_credentials",
            )
        return LoginResult(
            user=user,
            access_token=create_access_token({"sub": user.id}),
            is_new_user=False,
        )

    def list_all_users(self) -> List[User]:
        return self.user_repository.list_all()

    def get_users_by_ids(self, user_ids: Sequence[str]) -> List[User]:
        return self.user_repository.get_by_ids(user_ids)
