"""Base service class with transaction management for database operations."""

import logging
from typing import Any, Generic, List, NoReturn, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from student_power.exceptions import (
    DatabaseConnectionError,
    DuplicateRecordError,
    InvalidFilterError,
    RecordNotFoundError,
    RelatedRecordNotFoundError,
)
from student_power.models.base import BaseModel
from student_power.utils.validation import is_valid_identifier

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

UNIQUE_VIOLATION = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """Check whether an IntegrityError was raised by a unique constraint."""
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    return "unique" in str(orig).lower()


class BaseService(Generic[T]):
    """Base service class managing database transactions for model operations.

    Provides automatic transaction management using direct SQLAlchemy queries:
    - Write operations (create, update, delete) automatically commit
    - Read operations (get_by_id, find, get_by_id_or_slug) don't commit
    - All errors trigger automatic rollback

    Usage:
        class UniversityService(BaseService[University]):
            model = University

        service = UniversityService(db_session)
        university = await service.create(name="MIT", slug="mit", ...)

    Attributes:
        db: Database session for operations
        model: Model class this service manages
        default_order: Column expressions applied by find()
    """

    model: type[T]
    default_order: tuple = ()

    def __init__(self, db: AsyncSession) -> None:
        """Initialize service with database session.

        Args:
            db: Database session for operations
        """
        self.db = db

    @property
    def model_name(self) -> str:
        return self.model.__name__

    async def _fail_write(
        self, action: str, error: SQLAlchemyError, **context: Any
    ) -> NoReturn:
        """Roll back and translate a failed write into an application error."""
        await self.db.rollback()
        logger.error(
            f"Failed to {action} {self.model_name}",
            extra={"model": self.model_name, "error": str(error), **context},
            exc_info=True,
        )
        if isinstance(error, IntegrityError) and is_unique_violation(error):
            raise DuplicateRecordError(
                self.model_name,
                f"A {self.model_name.lower()} with this name already exists",
            ) from error
        raise DatabaseConnectionError(
            f"Database error during {action}: {str(error)}"
        ) from error

    async def create(self, **kwargs: Any) -> T:
        """Create a new record and commit transaction.

        Args:
            **kwargs: Model attributes

        Returns:
            Created model instance

        Raises:
            DuplicateRecordError: If a unique constraint is violated
            DatabaseConnectionError: If database operation fails
        """
        try:
            instance = self.model(**kwargs)
            self.db.add(instance)
            await self.db.flush()
            await self.db.refresh(instance)
            await self.db.commit()
        except (IntegrityError, DBAPIError, SQLAlchemyError) as e:
            await self._fail_write("create", e)
        logger.debug(
            f"Created {self.model_name}",
            extra={"model": self.model_name, "id": instance.id},
        )
        return instance

    async def get_by_id(self, record_id: int) -> Optional[T]:
        """Retrieve a record by its primary key ID.

        Raises:
            DatabaseConnectionError: If database operation fails
        """
        try:
            result = await self.db.execute(
                select(self.model).where(self.model.id == record_id)
            )
            return result.scalar_one_or_none()
        except (DBAPIError, SQLAlchemyError) as e:
            logger.error(
                f"Failed to get {self.model_name} by id",
                extra={"model": self.model_name, "id": record_id, "error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(f"Database error during get: {str(e)}") from e

    async def get_by_id_or_fail(self, record_id: int) -> T:
        """Retrieve a record by ID or raise RecordNotFoundError."""
        record = await self.get_by_id(record_id)
        if record is None:
            raise RecordNotFoundError(self.model_name, record_id)
        return record

    async def get_by_slug(self, slug: str, **parent_filters: Any) -> Optional[T]:
        """Retrieve the first record with the given slug.

        Slugs are unique only within a parent, so callers pass the parent
        column (e.g. ``university_id=3``) to disambiguate. Without it the
        oldest match wins.

        Raises:
            DatabaseConnectionError: If database operation fails
        """
        try:
            query = self._filtered(select(self.model), parent_filters)
            query = query.where(self.model.slug == slug.lower()).order_by(
                self.model.id
            )
            result = await self.db.execute(query.limit(1))
            return result.scalars().first()
        except InvalidFilterError:
            raise
        except (DBAPIError, SQLAlchemyError) as e:
            logger.error(
                f"Failed to get {self.model_name} by slug",
                extra={"model": self.model_name, "slug": slug, "error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Database error during get_by_slug: {str(e)}"
            ) from e

    async def get_by_id_or_slug(self, id_or_slug: str, **parent_filters: Any) -> T:
        """Resolve a path segment by primary key first, then by slug.

        Raises:
            RecordNotFoundError: If neither lookup matches
            DatabaseConnectionError: If database operation fails
        """
        id_or_slug = id_or_slug.strip()
        if is_valid_identifier(id_or_slug):
            record = await self.get_by_id(int(id_or_slug))
            if record is not None:
                return record
        record = await self.get_by_slug(id_or_slug, **parent_filters)
        if record is None:
            raise RecordNotFoundError(self.model_name, id_or_slug)
        return record

    def _filtered(self, query, filters: dict[str, Any]):
        for key, value in filters.items():
            if value is None:
                continue
            if not hasattr(self.model, key):
                raise InvalidFilterError(
                    f"Invalid filter key '{key}' for model {self.model_name}"
                )
            query = query.where(getattr(self.model, key) == value)
        return query

    async def find(self, **filters: Any) -> List[T]:
        """Find records matching the given filters, in default order.

        Filters whose value is None are ignored so optional query
        parameters can be passed straight through.

        Raises:
            InvalidFilterError: If invalid filter key provided
            DatabaseConnectionError: If database operation fails
        """
        try:
            query = self._filtered(select(self.model), filters)
            if self.default_order:
                query = query.order_by(*self.default_order)
            result = await self.db.execute(query)
            return list(result.scalars().all())
        except InvalidFilterError:
            raise
        except (DBAPIError, SQLAlchemyError) as e:
            logger.error(
                f"Failed to find {self.model_name}",
                extra={"model": self.model_name, "filters": filters, "error": str(e)},
                exc_info=True,
            )
            raise DatabaseConnectionError(
                f"Database error during find: {str(e)}"
            ) from e

    async def ensure_related(
        self, related_model: type[BaseModel], field: str, record_id: int
    ) -> BaseModel:
        """Load a parent record or raise RelatedRecordNotFoundError.

        Raises:
            RelatedRecordNotFoundError: If the parent does not exist
            DatabaseConnectionError: If database operation fails
        """
        try:
            result = await self.db.execute(
                select(related_model).where(related_model.id == record_id)
            )
            parent = result.scalar_one_or_none()
        except (DBAPIError, SQLAlchemyError) as e:
            raise DatabaseConnectionError(
                f"Database error during parent lookup: {str(e)}"
            ) from e
        if parent is None:
            raise RelatedRecordNotFoundError(field, record_id)
        return parent

    async def update(self, record_id: int, **kwargs: Any) -> T:
        """Update a record and commit transaction.

        Raises:
            RecordNotFoundError: If record not found
            InvalidFilterError: If invalid attribute provided
            DuplicateRecordError: If a unique constraint is violated
            DatabaseConnectionError: If database operation fails
        """
        try:
            record = await self.get_by_id_or_fail(record_id)
            for key, value in kwargs.items():
                if not hasattr(record, key):
                    raise InvalidFilterError(
                        f"Invalid attribute '{key}' for model {self.model_name}"
                    )
                setattr(record, key, value)
            await self.db.flush()
            await self.db.refresh(record)
            await self.db.commit()
        except (RecordNotFoundError, InvalidFilterError):
            await self.db.rollback()
            raise
        except (IntegrityError, DBAPIError, SQLAlchemyError) as e:
            await self._fail_write("update", e, id=record_id)
        logger.debug(
            f"Updated {self.model_name}",
            extra={"model": self.model_name, "id": record_id},
        )
        return record

    async def delete(self, record_id: int) -> None:
        """Delete a single record and commit transaction.

        Raises:
            RecordNotFoundError: If record not found
            DatabaseConnectionError: If database operation fails
        """
        try:
            record = await self.get_by_id_or_fail(record_id)
            await self.db.delete(record)
            await self.db.flush()
            await self.db.commit()
        except RecordNotFoundError:
            await self.db.rollback()
            raise
        except (DBAPIError, SQLAlchemyError) as e:
            await self._fail_write("delete", e, id=record_id)
        logger.debug(
            f"Deleted {self.model_name}",
            extra={"model": self.model_name, "id": record_id},
        )
