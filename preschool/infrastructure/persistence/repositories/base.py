"""Base repository: generic CRUD plus the conditional update primitive.

The record store is treated as an external system: every repository call
opens its own session and commits before returning. Mapping to DTOs happens
inside the session. Database errors are translated into domain exceptions
(unique violations → ConflictException, connection-level failures →
ProviderUnavailableException).
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, inspect as sa_inspect, update
from sqlalchemy.exc import DBAPIError, IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from preschool.domain.exceptions import ConflictException, ProviderUnavailableException
from preschool.infrastructure.persistence.database import Base
from preschool.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

ModelType = TypeVar("ModelType", bound=Base)
ResultType = TypeVar("ResultType")


class BaseRepository(Generic[ModelType, ResultType]):
    """Base repository with get_by_id, create, update_fields, conditional_update, delete.

    Subclasses implement _to_result to map ORM rows to application DTOs or
    domain entities.
    """

    resource_type: str = "record"
    provider: str = "record_store"

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type[ModelType],
    ) -> None:
        self.session_factory = session_factory
        self.model = model

    def _to_result(self, obj: ModelType) -> ResultType:
        raise NotImplementedError

    @property
    def _pk(self) -> Any:
        return sa_inspect(self.model).primary_key[0]

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Yield a session inside a transaction; commit on exit, translate errors."""
        try:
            async with self.session_factory() as session, session.begin():
                yield session
        except IntegrityError as e:
            logger.info("%s write rejected by constraint: %s", self.resource_type, e.orig)
            raise ConflictException(self.resource_type) from e
        except (OperationalError, InterfaceError) as e:
            logger.warning("%s unavailable (%s)", self.provider, type(e).__name__)
            raise ProviderUnavailableException(self.provider, self.resource_type) from e
        except DBAPIError as e:
            if e.connection_invalidated:
                raise ProviderUnavailableException(self.provider, self.resource_type) from e
            raise

    async def get_by_id(self, entity_id: str) -> ResultType | None:
        """Return a single record by primary key, or None."""
        async with self.transaction() as session:
            obj = await session.get(self.model, entity_id)
            return self._to_result(obj) if obj is not None else None

    async def create(self, obj: ModelType) -> ResultType:
        """Insert a new record. Unique violations raise ConflictException."""
        async with self.transaction() as session:
            session.add(obj)
            await session.flush()
            return self._to_result(obj)

    async def update_fields(self, entity_id: str, values: dict[str, Any]) -> bool:
        """UPDATE ... SET values WHERE pk = entity_id. Return whether a row matched."""
        stmt = (
            update(self.model)
            .where(self._pk == entity_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self.transaction() as session:
            result = await session.execute(stmt)
            return result.rowcount == 1

    async def conditional_update(
        self, entity_id: str, values: dict[str, Any], when_null: str
    ) -> bool:
        """UPDATE ... SET values WHERE pk = entity_id AND <when_null> IS NULL.

        Return True only if this call applied the write. Of any number of
        concurrent callers for the same row, at most one observes True.
        """
        guard = getattr(self.model, when_null)
        stmt = (
            update(self.model)
            .where(self._pk == entity_id, guard.is_(None))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        async with self.transaction() as session:
            result = await session.execute(stmt)
            return result.rowcount == 1

    async def delete(self, entity_id: str) -> bool:
        """Hard-delete by primary key. Return whether a row was removed."""
        stmt = delete(self.model).where(self._pk == entity_id)
        async with self.transaction() as session:
            result = await session.execute(stmt)
            return result.rowcount == 1
