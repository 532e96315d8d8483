from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from taskmanager.models import Role


class Principal(BaseModel):
    """Authenticated caller, built only from verified token claims."""

    username: str
    role: Role

    model_config = ConfigDict(frozen=True)


class UserRegister(BaseModel):
    username: str = Field(..., max_length=50, description="Username for the new account")
    password: str = Field(..., description="Password for the new account")
    role: Role = Field(default=Role.USER, description="Role of the new account")


class UserLogin(BaseModel):
    username: str = Field(..., description="Username for login")
    password: str = Field(..., description="Password for login")


class PasswordChange(BaseModel):
    old_password: str = Field(
        ..., alias="oldPassword", description="The current password of the user"
    )
    new_password: str = Field(
        ..., alias="newPassword", description="The new password to set"
    )

    model_config = ConfigDict(populate_by_name=True)


class UserResponse(BaseModel):
    id: int = Field(..., description="User unique identifier")
    username: str = Field(..., description="Username")
    role: Role = Field(..., description="Authorization tier")

    model_config = ConfigDict(from_attributes=True)


class AuthenticationResult(BaseModel):
    token: str = Field(..., description="JWT access token")
    username: str = Field(..., description="Username")
    role: Role = Field(..., description="Authorization tier")


class AuthenticationResponse(AuthenticationResult):
    message: str = Field(..., description="Authentication response")


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str | None = None
    done: bool
    end_date: datetime | None = None
    owner_id: int

    model_config = ConfigDict(from_attributes=True)


class TaskHistoryResponse(BaseModel):
    id: int
    user_id: int
    finished_tasks: list[TaskResponse] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    message: str = Field(..., description="Response message")
