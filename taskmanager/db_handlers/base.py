from __future__ import annotations

import asyncio
from functools import wraps
from typing import Any, Generic, TypeVar

from asyncpg.exceptions import ConnectionDoesNotExistError
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.db import AppAsyncSessionLocal
from taskmanager.exceptions import PersistenceError
from taskmanager.models.base import Base
from taskmanager.utils.logger import setup_logger

logger = setup_logger("db_handlers")


ModelType = TypeVar("ModelType", bound=Base)

MAX_CONNECTION_ATTEMPTS = 3


def check_local_db(func):
    """Database session decorator with transaction management and retry logic.

    The outermost call opens a session, commits on success and rolls back on
    failure. Nested calls that already received ``db`` run inside the caller's
    transaction. Store-level failures reach the caller as ``PersistenceError``;
    the original exception is only logged.
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        # The outermost caller who created the session owns the transaction.
        if kwargs.get("db"):
            return await func(*args, **kwargs)

        last_exception = None
        for attempt in range(MAX_CONNECTION_ATTEMPTS):
            async with AppAsyncSessionLocal() as db:
                kwargs["db"] = db
                try:
                    result = await func(*args, **kwargs)
                    await db.commit()
                    return result
                except DBAPIError as e:
                    await db.rollback()
                    if isinstance(e.orig, ConnectionDoesNotExistError):
                        last_exception = e
                        logger.warning(
                            f"Connection error in {func.__name__} (attempt {attempt + 1}/{MAX_CONNECTION_ATTEMPTS}): {e}. Retrying..."
                        )
                        await asyncio.sleep(1 + attempt)
                        continue
                    logger.error(f"DBAPIError in {func.__name__}: {e}", exc_info=True)
                    raise PersistenceError() from e
                except SQLAlchemyError as e:
                    await db.rollback()
                    logger.error(
                        f"Transaction failed in {func.__name__}: {e}", exc_info=True
                    )
                    raise PersistenceError() from e
                except Exception:
                    await db.rollback()
                    raise

        logger.error(
            f"All retries failed for {func.__name__}. Last error: {last_exception}"
        )
        raise PersistenceError() from last_exception

    return wrapper


class BaseDBHandler(Generic[ModelType]):
    """Generic handler for database operations with basic CRUD methods."""

    def __init__(self, model: type[ModelType]):
        self.model = model

    @check_local_db
    async def create(
        self, obj_dict: dict[str, Any], *, db: AsyncSession = None
    ) -> ModelType:
        """Create a new record in the database."""
        db_obj = self.model(**obj_dict)
        try:
            db.add(db_obj)
            await db.flush()
            await db.refresh(db_obj)
            return db_obj
        except IntegrityError as e:
            logger.warning(f"IntegrityError creating {self.model.__name__}: {e}")
            # Re-raise IntegrityError so calling code can handle it specifically
            raise
        except SQLAlchemyError as e:
            logger.error(f"Error creating {self.model.__name__}: {e}", exc_info=True)
            raise

    @check_local_db
    async def get(self, id: Any, *, db: AsyncSession = None) -> ModelType | None:
        """Get a single record by its primary key."""
        stmt = select(self.model).where(self.model.id == id)
        result = await db.execute(stmt)
        return result.scalars().first()

    @check_local_db
    async def get_by_attributes(
        self, *, db: AsyncSession = None, **kwargs
    ) -> ModelType | None:
        """Get a single record by a set of attributes."""
        options_to_load = kwargs.pop("options", None)

        stmt = select(self.model).filter_by(**kwargs)
        if options_to_load:
            stmt = stmt.options(*options_to_load)

        result = await db.execute(stmt)
        return result.scalars().first()

    @check_local_db
    async def get_multi(
        self, *, db: AsyncSession = None, options: list | None = None
    ) -> list[ModelType]:
        """Get all records ordered by primary key."""
        stmt = select(self.model).order_by(self.model.id)
        if options:
            stmt = stmt.options(*options)
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @check_local_db
    async def remove(self, id: Any, *, db: AsyncSession = None) -> ModelType | None:
        """Remove a record from the database by its primary key."""
        obj = await self.get(id, db=db)
        if obj:
            await db.delete(obj)
            await db.flush()
            return obj
        return None
