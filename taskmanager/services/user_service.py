"""
User service: registration, authentication and role-aware account management.

Every operation that acts on behalf of a caller takes the ``Principal`` built
by the authorization gate; identities never come from client-supplied ids.

Known gaps, kept on purpose:
    - registration writes the user and its task history in two separate
      transactions; a failure in between leaves a user without a history
    - the username check before insert is advisory; the unique index is the
      real guard and its violation is reported as ``ConflictError``
    - ``get_user_by_id`` performs no authorization check
"""

from taskmanager.db_handlers import TaskHistoryDBHandler, UserDBHandler
from taskmanager.exceptions import (
    ConflictError,
    InvalidArgumentError,
    InvalidCredentialsError,
    NotFoundError,
    UnauthorizedError,
)
from taskmanager.models import Role, User
from taskmanager.schemas import AuthenticationResult, Principal
from taskmanager.services.task_history_service import TaskHistoryService
from taskmanager.utils.auth import PasswordHasher, TokenService
from taskmanager.utils.logger import setup_logger

logger = setup_logger("user_service")

INCORRECT_CREDENTIALS_MESSAGE = "Incorrect username or password"


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


class UserService:
    def __init__(
        self,
        user_handler: UserDBHandler,
        task_history_handler: TaskHistoryDBHandler,
        task_history_service: TaskHistoryService,
        password_hasher: PasswordHasher,
        token_service: TokenService,
    ):
        self.user_handler = user_handler
        self.task_history_handler = task_history_handler
        self.task_history_service = task_history_service
        self.password_hasher = password_hasher
        self.token_service = token_service

    async def list_users(self, principal: Principal) -> list[User]:
        """Admins get every user; users get a list holding only themselves."""
        if principal.role == Role.ADMIN:
            return await self.user_handler.get_all_users()
        if principal.role == Role.USER:
            user = await self.user_handler.get_user_by_username(principal.username)
            if user is None:
                raise NotFoundError(
                    f"No user found with username: {principal.username}."
                )
            return [user]
        logger.warning(
            f"Role '{principal.role.value}' of '{principal.username}' may not list users"
        )
        raise UnauthorizedError()

    async def get_user_by_id(self, user_id: int) -> User:
        user = await self.user_handler.get(user_id)
        if user is None:
            raise NotFoundError(f"User with id {user_id} does not exist.")
        return user

    async def register(
        self, username: str, password: str, role: Role = Role.USER
    ) -> User:
        """
        Create an account together with its empty task history.

        Raises:
            InvalidArgumentError: blank username or password.
            ConflictError: the username is already registered.
        """
        if _is_blank(username) or _is_blank(password):
            raise InvalidArgumentError("Username and password are required")

        if await self.user_handler.get_user_by_username(username) is not None:
            raise ConflictError(f"User with username {username} is already registered.")

        hashed_password = await self.password_hasher.hash_async(password)
        user = await self.user_handler.create_user(username, hashed_password, role)
        await self.task_history_handler.create_for_user(user.id)

        logger.info(f"Registered user '{username}' (id={user.id}, role={user.role})")
        return user

    async def authenticate(self, username: str, password: str) -> AuthenticationResult:
        """
        Check credentials and issue an access token.

        Unknown usernames and wrong passwords fail identically so that the
        response does not reveal which accounts exist.
        """
        user = await self.user_handler.get_user_by_username(username)
        if user is None:
            # Same bcrypt work as a wrong password, so timing does not tell them apart
            await self.password_hasher.verify_async(
                password, await self.password_hasher.dummy_hash_async()
            )
            logger.info(f"Failed login attempt for username '{username}'")
            raise InvalidCredentialsError(INCORRECT_CREDENTIALS_MESSAGE)

        if not await self.password_hasher.verify_async(password, user.password):
            logger.info(f"Failed login attempt for username '{username}'")
            raise InvalidCredentialsError(INCORRECT_CREDENTIALS_MESSAGE)

        principal = Principal(username=user.username, role=Role(user.role))
        token = self.token_service.issue(principal)
        return AuthenticationResult(
            token=token, username=principal.username, role=principal.role
        )

    async def user_exists(self, username: str) -> bool:
        return await self.user_handler.get_user_by_username(username) is not None

    async def delete_user(self, user_id: int, principal: Principal) -> bool:
        """Admin-only removal of a user and, first, its task history."""
        if principal.role != Role.ADMIN:
            logger.warning(
                f"'{principal.username}' ({principal.role.value}) tried to delete user {user_id}"
            )
            raise UnauthorizedError()

        user = await self.get_user_by_id(user_id)
        await self.task_history_service.delete_task_history_from_user(user.id)
        await self.user_handler.remove(user.id)

        logger.info(f"User '{user.username}' (id={user.id}) deleted by '{principal.username}'")
        return True

    async def change_password(
        self, old_password: str, new_password: str, principal: Principal
    ) -> bool:
        """Replace the caller's own password after checking the current one."""
        if _is_blank(old_password) or _is_blank(new_password):
            raise InvalidArgumentError("Current password and new password are required")

        user = await self.user_handler.get_user_by_username(principal.username)
        if user is None:
            raise NotFoundError(f"User with username {principal.username} does not exist")

        if not await self.password_hasher.verify_async(old_password, user.password):
            logger.info(f"Password change for '{principal.username}' rejected")
            raise InvalidCredentialsError("Password is not correct.")

        hashed_password = await self.password_hasher.hash_async(new_password)
        await self.user_handler.update_password_hash(user.id, hashed_password)

        logger.info(f"Password changed for '{principal.username}'")
        return True
