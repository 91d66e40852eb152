"""
Repository Pattern Base Classes

Provides the database abstraction layer for the gateway tables.

Repositories never commit: the caller owns the transaction (the request's
session from ``get_db`` or a job's ``get_session`` block). Writes are flushed
so generated ids and constraint violations surface immediately.
"""

from abc import ABC
from typing import Generic, Type, TypeVar
from sqlalchemy.orm import Session
from mpay24_gateway.database.models.model_base import SqlAlchemyModel


ModelType = TypeVar("ModelType", bound=SqlAlchemyModel)


class BaseRepository(Generic[ModelType], ABC):
    """
    Abstract base repository; subclasses add their own queries.

    Type Parameters:
        ModelType: The SQLAlchemy model class (OpenOrder, ...)

    Example:
        class OpenOrderRepository(BaseRepository[OpenOrder]):
            def __init__(self, session: Session):
                super().__init__(session, OpenOrder)
    """

    def __init__(self, session: Session, model: Type[ModelType]):
        """
        Initialize repository.

        Args:
            session: SQLAlchemy session
            model: The SQLAlchemy model class
        """
        self.session = session
        self.model = model

    def create(self, **kwargs) -> ModelType:
        """
        Create a new record.

        Args:
            **kwargs: Column values for the new record

        Returns:
            Created model instance (flushed, with its id assigned)
        """
        instance = self.model(**kwargs)
        self.session.add(instance)
        self.session.flush()
        self.session.refresh(instance)
        return instance
