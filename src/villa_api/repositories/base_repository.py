"""
Base repository class providing common database operations.

`BaseRepository` is the only code that talks to the `AsyncSession`. Services hand it
model instances and typed filters (see `repositories.filters`), and get model
instances back. Every store call runs inside `db_error_handler`, so callers only ever
see app-level exceptions from `villa_api.exceptions`.

Reads come in two modes:

| `get(..., tracked=...)` | Returns                                                          |
| ----------------------- | ---------------------------------------------------------------- |
| `True` (default)        | the session-attached instance; changes are written on `save()`   |
| `False`                 | a transient copy; changing it never reaches the database         |

Mutations `flush()` so ids and column defaults are available immediately, but only
`save()` commits. That keeps the transaction boundary in the service layer.
"""
import time
import logging
from typing import TypeVar, Generic, Type

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession

from villa_api.database.base import Base
from villa_api.exceptions.base import InvalidInputError, NotFoundError
from villa_api.exceptions.mapper import db_error_handler
from villa_api.repositories.filters import FieldEquals
from villa_api.utils.clock import utcnow
from villa_api.validators.exception_validators import get_column_names, find_missing_required

# Type variable for the model class
ModelType = TypeVar("ModelType", bound=Base)

logger = logging.getLogger(__name__)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository providing common CRUD operations.

    Type Parameters:
        ModelType: The SQLAlchemy model class this repository manages.

    Subclasses configure:
        immutable_fields: columns `update()` never writes.
        timestamp_fields: columns `create()` stamps with one shared instant when unset.
    """

    immutable_fields: tuple[str, ...] = ("id",)
    timestamp_fields: tuple[str, ...] = ()

    def __init__(self, model: Type[ModelType], db: AsyncSession):
        """
        Args:
            model: The SQLAlchemy model class (e.g. `Villa`, not `Villa()`)
            db: The async database session, one per request
        """
        self.model = model
        self.db = db

    @property
    def model_name(self) -> str:
        return self.model.__name__

    def _select(self, filter: FieldEquals | None = None):
        query = select(self.model)
        if filter is not None:
            query = query.where(filter.to_clause(self.model))
        return query

    def _detached_copy(self, entity: ModelType) -> ModelType:
        """A new transient instance holding the same column values as `entity`."""
        return self.model(**{name: getattr(entity, name) for name in get_column_names(self.model)})

    # =================================================================================================================
    # Read Operations
    # =================================================================================================================

    async def get_all(self, filter: FieldEquals | None = None) -> list[ModelType]:
        """
        Return every entity (optionally narrowed by `filter`) in the order the database yields them.
        """
        query = self._select(filter)

        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(query)
            entities = list(result.scalars().all())

        logger.debug(
            "repo.get_all.success",
            extra={"model": self.model_name, "operation": "get_all", "count": len(entities)},
        )
        return entities

    async def get(self, filter: FieldEquals, tracked: bool = True) -> ModelType | None:
        """
        Return the first entity matching `filter`, or None.

        Args:
            filter: typed equality filter, e.g. `ById(3)` or `ByName("Royal Villa")`
            tracked: when False, return an independent transient copy instead of the
                session-attached instance.

        Raises:
            InvalidFieldError: `filter` names a field the model does not have.
            StoreUnavailableError: the database could not be reached.
        """
        query = self._select(filter).limit(1)

        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(query)
            entity = result.scalars().first()

        logger.debug(
            "repo.get.%s" % ("hit" if entity is not None else "miss"),
            extra={
                "model": self.model_name,
                "operation": "get",
                "filter_field": filter.field,
                "tracked": tracked,
            },
        )

        if entity is None or tracked:
            return entity
        return self._detached_copy(entity)

    # =================================================================================================================
    # Write Operations
    # =================================================================================================================

    async def create(self, entity: ModelType) -> ModelType:
        """
        Insert `entity` and return it with its id (and column defaults) populated.

        Timestamp columns that are still None are all stamped with the same instant.
        Name uniqueness is not checked here.

        Raises:
            InvalidInputError: a required column is None.
            DuplicateError: a database unique constraint rejected the row.
        """
        logger.debug(
            "repo.create.start",
            extra={"model": self.model_name, "operation": "create"},
        )

        now = utcnow()
        for field in self.timestamp_fields:
            if getattr(entity, field, None) is None:
                setattr(entity, field, now)

        missing = find_missing_required(entity)
        if missing:
            # INFO: missing input - expected client error
            logger.info(
                "repo.create.missing_required",
                extra={"model": self.model_name, "operation": "create", "missing_fields": sorted(missing)},
            )
            raise InvalidInputError(
                f"Missing required field(s): {', '.join(missing)} for {self.model_name}",
                fields=missing,
            )

        start = time.perf_counter()

        async with db_error_handler(self.db, self.model_name):
            self.db.add(entity)
            await self.db.flush()
            await self.db.refresh(entity)

        logger.info(
            "repo.create.success",
            extra={
                "model": self.model_name,
                "operation": "create",
                "id": getattr(entity, "id", None),
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return entity

    async def update(self, entity: ModelType) -> ModelType:
        """
        Replace the stored row with `entity.id` by the values carried on `entity`.

        Every column except `immutable_fields` is written, None values included.
        Timestamps are not recomputed here.

        Raises:
            NotFoundError: no row has `entity.id`.
        """
        values = {
            name: getattr(entity, name)
            for name in get_column_names(self.model)
            if name not in self.immutable_fields
        }
        stmt = (
            update(self.model)
            .where(self.model.id == entity.id)
            .values(**values)
            .execution_options(synchronize_session="evaluate")
        )

        start = time.perf_counter()

        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                logger.info(
                    "repo.update.not_found",
                    extra={"model": self.model_name, "operation": "update", "id": entity.id},
                )
                raise NotFoundError(f"{self.model_name} with ID {entity.id} not found")

            # reload so column values reflect what the database now holds
            refreshed = await self.db.execute(
                select(self.model)
                .where(self.model.id == entity.id)
                .execution_options(populate_existing=True)
            )
            updated = refreshed.scalars().one()

        logger.info(
            "repo.update.success",
            extra={
                "model": self.model_name,
                "operation": "update",
                "id": entity.id,
                "duration_ms": int((time.perf_counter() - start) * 1000),
            },
        )
        return updated

    async def remove(self, entity: ModelType) -> None:
        """
        Delete the row with `entity.id`.

        Raises:
            NotFoundError: no row has `entity.id`.
        """
        stmt = (
            delete(self.model)
            .where(self.model.id == entity.id)
            .execution_options(synchronize_session="evaluate")
        )

        async with db_error_handler(self.db, self.model_name):
            result = await self.db.execute(stmt)
            if result.rowcount == 0:
                logger.info(
                    "repo.remove.not_found",
                    extra={"model": self.model_name, "operation": "remove", "id": entity.id},
                )
                raise NotFoundError(f"{self.model_name} with ID {entity.id} not found")
            await self.db.flush()

        logger.info(
            "repo.remove.success",
            extra={"model": self.model_name, "operation": "remove", "id": entity.id},
        )

    async def save(self) -> None:
        """Commit the unit of work. Nothing written through this repository is durable before this."""
        async with db_error_handler(self.db, self.model_name):
            await self.db.commit()
        logger.debug("repo.save.success", extra={"model": self.model_name, "operation": "save"})
