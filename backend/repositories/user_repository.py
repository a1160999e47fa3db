"""
User repository for account lookups and creation.
"""

from typing import Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from exceptions import ConflictError
from models import User as UserModel
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[UserModel]):
    """Repository for User model operations."""

    def __init__(self, db: Session):
        super().__init__(db, UserModel)

    def get_by_email(self, email: str) -> Optional[UserModel]:
        return self.first_by(email=email.strip().lower())

    def create_user(self, user: UserModel) -> UserModel:
        """
        Persist a new account.

        Raises:
            ConflictError: If the email is already registered
        """
        if self.get_by_email(user.email) is not None:
            raise ConflictError("User", "email", user.email)
        try:
            self.create(user)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("User", "email", user.email) from e
        logger.info(f"Created user {user.id} ({user.role})")
        return user
