# backend/chatline/repositories/base_repository.py
"""
Base repository for the chat backend.

Provides the common CRUD operations shared by every entity repository.
Repositories never commit: transaction boundaries belong to the service layer.
SQLAlchemy failures are logged and re-raised as ``RepositoryException``.
"""

import logging
from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException

# Type variable for generic model support
T = TypeVar("T")

logger = logging.getLogger(__name__)


class BaseRepository(Generic[T]):
    """
    Concrete base repository with common data access patterns.

    Attributes:
        db: SQLAlchemy session
        model: SQLAlchemy model class
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Initialize repository with database session and model.

        Args:
            db: SQLAlchemy session (managed by service layer)
            model: SQLAlchemy model class
        """
        self.db = db
        self.model = model
        self.logger = logging.getLogger(f"{__name__}.{model.__name__}")

    def get_by_id(self, id: str) -> Optional[T]:
        """Retrieve an entity by its primary key."""
        try:
            return self.db.get(self.model, id)
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting {self.model.__name__} by id {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve {self.model.__name__}: {str(e)}")

    def create(self, **kwargs: Any) -> T:
        """
        Create a new entity.

        Note: Does NOT commit - transaction management is handled by service layer.
        """
        try:
            entity = self.model(**kwargs)
            self.db.add(entity)
            self.db.flush()  # Get ID without committing
            return entity
        except IntegrityError as exc:
            self.logger.error(
                "Integrity error creating %s: %s", self.model.__name__, exc, exc_info=True
            )
            self.db.rollback()
            raise RepositoryException(f"Integrity constraint violated: {exc}") from exc
        except SQLAlchemyError as e:
            self.logger.error(f"Error creating {self.model.__name__}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to create {self.model.__name__}: {str(e)}")

    def delete(self, id: str) -> bool:
        """
        Delete an entity by its primary key.

        Returns False if entity not found.
        """
        try:
            entity = self.get_by_id(id)
            if not entity:
                return False

            self.db.delete(entity)
            self.db.flush()
            return True
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting {self.model.__name__} {id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to delete {self.model.__name__}: {str(e)}")

    def find_one_by(self, **kwargs: Any) -> Optional[T]:
        try:
            return self.db.query(self.model).filter_by(**kwargs).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error finding one by criteria: {str(e)}")
            raise RepositoryException(f"Failed to find record: {str(e)}")
