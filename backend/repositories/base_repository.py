"""
Base repository providing common CRUD operations over string-keyed documents.
"""

from typing import Generic, TypeVar, Optional, Type, Any
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from exceptions import DatabaseError

T = TypeVar('T')


class BaseRepository(Generic[T]):
    """
    Generic base repository.

    Writes are flushed, not committed; each concrete repository decides
    when its operation is complete and calls commit().
    """

    def __init__(self, db: Session, model: Type[T]):
        """
        Args:
            db: SQLAlchemy database session
            model: Mapped class with a string `id` primary key
        """
        self.db = db
        self.model = model

    def create(self, obj: T) -> T:
        """Add a new record and flush so generated ids are assigned."""
        self.db.add(obj)
        self.db.flush()
        return obj

    def get_by_id(self, id: str) -> Optional[T]:
        return self.db.get(self.model, id)

    def delete(self, obj: T) -> None:
        self.db.delete(obj)
        self.db.flush()

    def first_by(self, **filters: Any) -> Optional[T]:
        """
        Return the first record matching equality filters.

        Args:
            **filters: Column name/value pairs; unknown names are ignored

        Returns:
            Model instance or None
        """
        query = self.db.query(self.model)
        for key, value in filters.items():
            if hasattr(self.model, key):
                query = query.filter(getattr(self.model, key) == value)
        return query.first()

    def commit(self, operation: str) -> None:
        """
        Commit the session.

        Raises:
            DatabaseError: If the commit fails (the session is rolled back)
        """
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError(operation, str(e)) from e
