"""
Shared fixtures and configuration for the test suite.

The database handlers are replaced by in-memory fakes with the same async
method signatures, so neither the services nor the HTTP layer need a running
database. Keep the fakes aligned with the handler methods the services call.
"""

from datetime import UTC, datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from taskmanager.config import Settings
from taskmanager.dependencies import get_task_history_service, get_user_service
from taskmanager.exceptions import ConflictError
from taskmanager.models import Role, Task, TaskHistory, User
from taskmanager.services import TaskHistoryService, UserService
from taskmanager.utils.auth import PasswordHasher, TokenService


class FakeUserDBHandler:
    def __init__(self):
        self.users: dict[int, User] = {}
        self._next_id = 1

    async def create_user(
        self, username: str, password_hash: str, role: Role = Role.USER
    ) -> User:
        if any(user.username == username for user in self.users.values()):
            raise ConflictError(f"User with username {username} is already registered.")
        user = User(
            id=self._next_id, username=username, password=password_hash, role=role
        )
        self.users[user.id] = user
        self._next_id += 1
        return user

    async def get(self, user_id: int) -> User | None:
        return self.users.get(user_id)

    async def get_user_by_username(self, username: str) -> User | None:
        return next(
            (user for user in self.users.values() if user.username == username), None
        )

    async def get_all_users(self) -> list[User]:
        return [self.users[user_id] for user_id in sorted(self.users)]

    async def update_password_hash(self, user_id: int, password_hash: str) -> bool:
        user = self.users.get(user_id)
        if user is None:
            return False
        user.password = password_hash
        return True

    async def remove(self, user_id: int) -> User | None:
        return self.users.pop(user_id, None)


class FakeTaskDBHandler:
    def __init__(self):
        self.tasks: dict[int, Task] = {}
        self._next_id = 1

    def add_task(self, owner_id: int, title: str = "Write report") -> Task:
        """Test helper standing in for the external task CRUD."""
        task = Task(id=self._next_id, title=title, owner_id=owner_id, done=False)
        self.tasks[task.id] = task
        self._next_id += 1
        return task

    async def get(self, task_id: int) -> Task | None:
        return self.tasks.get(task_id)


class FakeTaskHistoryDBHandler:
    def __init__(self, task_handler: FakeTaskDBHandler):
        self.task_handler = task_handler
        self.histories: dict[int, TaskHistory] = {}
        self._next_id = 1

    async def create_for_user(self, user_id: int) -> TaskHistory:
        history = TaskHistory(id=self._next_id, user_id=user_id)
        self.histories[user_id] = history
        self._next_id += 1
        return history

    async def get_by_user_id(self, user_id: int) -> TaskHistory | None:
        return self.histories.get(user_id)

    async def get_all_histories(self) -> list[TaskHistory]:
        return sorted(self.histories.values(), key=lambda history: history.id)

    async def add_finished_task(self, user_id: int, task_id: int) -> Task | None:
        history = self.histories.get(user_id)
        task = self.task_handler.tasks.get(task_id)
        if history is None or task is None:
            return None
        task.done = True
        task.end_date = datetime.now(UTC)
        if task not in history.finished_tasks:
            history.finished_tasks.append(task)
        return task

    async def delete_by_user_id(self, user_id: int) -> bool:
        return self.histories.pop(user_id, None) is not None


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret="test-signing-key",
        jwt_expires_hours=1,
        bcrypt_rounds=4,
    )


@pytest.fixture
def password_hasher(settings: Settings) -> PasswordHasher:
    return PasswordHasher.from_settings(settings)


@pytest.fixture
def token_service(settings: Settings) -> TokenService:
    return TokenService.from_settings(settings)


@pytest.fixture
def user_handler() -> FakeUserDBHandler:
    return FakeUserDBHandler()


@pytest.fixture
def task_handler() -> FakeTaskDBHandler:
    return FakeTaskDBHandler()


@pytest.fixture
def task_history_handler(task_handler: FakeTaskDBHandler) -> FakeTaskHistoryDBHandler:
    return FakeTaskHistoryDBHandler(task_handler)


@pytest.fixture
def task_history_service(
    task_history_handler, user_handler, task_handler
) -> TaskHistoryService:
    return TaskHistoryService(
        task_history_handler=task_history_handler,
        user_handler=user_handler,
        task_handler=task_handler,
    )


@pytest.fixture
def user_service(
    user_handler,
    task_history_handler,
    task_history_service,
    password_hasher,
    token_service,
) -> UserService:
    return UserService(
        user_handler=user_handler,
        task_history_handler=task_history_handler,
        task_history_service=task_history_service,
        password_hasher=password_hasher,
        token_service=token_service,
    )


@pytest.fixture
def app(
    settings: Settings,
    user_service: UserService,
    task_history_service: TaskHistoryService,
) -> FastAPI:
    """
    Create a new application instance wired to the in-memory services.
    """
    from main import create_app

    app_ = create_app(settings)
    app_.dependency_overrides[get_user_service] = lambda: user_service
    app_.dependency_overrides[get_task_history_service] = lambda: task_history_service
    return app_


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """
    Test client for making API requests.

    Used without the context manager so the lifespan, which connects to the
    database, does not run.
    """
    return TestClient(app)


def signup(client: TestClient, username: str, password: str, role: str = "user") -> dict:
    response = client.post(
        "/users/signup",
        json={"username": username, "password": password, "role": role},
    )
    assert response.status_code == 200, response.text
    return response.json()


def login(client: TestClient, username: str, password: str) -> str:
    response = client.post(
        "/users/login", json={"username": username, "password": password}
    )
    assert response.status_code == 200, response.text
    return response.json()["token"]


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
