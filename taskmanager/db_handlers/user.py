from __future__ import annotations

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskmanager.db_handlers.base import BaseDBHandler, check_local_db
from taskmanager.exceptions import ConflictError
from taskmanager.models.user import Role, User
from taskmanager.utils.logger import setup_logger

logger = setup_logger("db_handlers.user")


class UserDBHandler(BaseDBHandler[User]):
    def __init__(self):
        super().__init__(User)

    @check_local_db
    async def create_user(
        self,
        username: str,
        password_hash: str,
        role: Role = Role.USER,
        *,
        db: AsyncSession = None,
    ) -> User:
        """Insert a user; the unique username index backs up the caller's check."""
        try:
            return await self.create(
                {"username": username, "password": password_hash, "role": role},
                db=db,
            )
        except IntegrityError as e:
            logger.warning(f"Unique index rejected username '{username}'")
            raise ConflictError(
                f"User with username {username} is already registered."
            ) from e

    @check_local_db
    async def get_user_by_username(
        self, username: str, *, db: AsyncSession = None
    ) -> User | None:
        """Get a user by username."""
        stmt = select(User).filter(User.username == username)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @check_local_db
    async def get_all_users(self, *, db: AsyncSession = None) -> list[User]:
        return await self.get_multi(db=db)

    @check_local_db
    async def update_password_hash(
        self, user_id: int, password_hash: str, *, db: AsyncSession = None
    ) -> bool:
        """Replace the stored hash; returns False when no row matched."""
        stmt = update(User).where(User.id == user_id).values(password=password_hash)
        result = await db.execute(stmt)
        return result.rowcount > 0
