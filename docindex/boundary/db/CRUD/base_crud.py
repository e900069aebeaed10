"""
Base CRUD operations for the tracking ledger tables.

Generic create and read helpers shared by the ledger CRUD classes. All
methods take the caller's session; committing is left to the caller's
transaction scope.

Dependencies: sqlalchemy
System role: Foundation for ledger CRUD operations
"""

from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from docindex.boundary.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseCRUD(Generic[ModelT]):
    """
    Generic base class for CRUD operations.

    Type Parameters:
        ModelT: SQLAlchemy model class inheriting from Base

    Attributes:
        model: The SQLAlchemy model class to operate on
    """

    def __init__(self, model: type[ModelT]) -> None:
        self.model = model

    def create(self, session: Session, **kwargs: Any) -> ModelT:
        """
        Insert a row and flush so generated columns are populated.

        Args:
            session: Database session
            **kwargs: Model field values

        Returns:
            Created model instance
        """
        instance = self.model(**kwargs)
        session.add(instance)
        session.flush()
        return instance

    def get(self, session: Session, key: Any) -> ModelT | None:
        """Row by primary key, or None."""
        return session.get(self.model, key)

    def get_all(self, session: Session) -> Sequence[ModelT]:
        """Every row in primary key order."""
        stmt = select(self.model).order_by(*self.model.__mapper__.primary_key)
        return session.execute(stmt).scalars().all()
