# User API routes: registration, login, listing, deletion and password change

from fastapi import APIRouter, Depends

from taskmanager.dependencies import (
    get_current_principal,
    get_user_service,
    require_roles,
)
from taskmanager.models import Role
from taskmanager.schemas import (
    AuthenticationResponse,
    MessageResponse,
    PasswordChange,
    Principal,
    UserLogin,
    UserRegister,
    UserResponse,
)
from taskmanager.services import UserService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/", response_model=list[UserResponse])
async def get_users(
    principal: Principal = Depends(get_current_principal),
    user_service: UserService = Depends(get_user_service),
):
    """List users: every user for admins, only yourself for users."""
    users = await user_service.list_users(principal)
    return [UserResponse.model_validate(user) for user in users]


@router.get("/exists/{username}", response_model=bool)
async def user_exists(
    username: str,
    user_service: UserService = Depends(get_user_service),
):
    """Tell whether a username is already taken."""
    return await user_service.user_exists(username)


@router.get("/{user_id}", response_model=UserResponse)
async def get_user_by_id(
    user_id: int,
    user_service: UserService = Depends(get_user_service),
):
    user = await user_service.get_user_by_id(user_id)
    return UserResponse.model_validate(user)


@router.post("/signup", response_model=UserResponse)
async def signup(
    user_data: UserRegister,
    user_service: UserService = Depends(get_user_service),
):
    """Register a new user; the password is stored as a bcrypt hash."""
    user = await user_service.register(
        user_data.username, user_data.password, user_data.role
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=AuthenticationResponse)
async def login(
    user_data: UserLogin,
    user_service: UserService = Depends(get_user_service),
):
    """Authenticate user and return a JWT token for API access."""
    result = await user_service.authenticate(user_data.username, user_data.password)
    return AuthenticationResponse(
        message="Authentication successful", **result.model_dump()
    )


@router.delete("/deleteUser/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    principal: Principal = Depends(require_roles(Role.ADMIN)),
    user_service: UserService = Depends(get_user_service),
):
    await user_service.delete_user(user_id, principal)
    return MessageResponse(message="User successfully deleted!")


@router.post("/changePassword", response_model=MessageResponse)
async def change_password(
    payload: PasswordChange,
    principal: Principal = Depends(get_current_principal),
    user_service: UserService = Depends(get_user_service),
):
    """Change the caller's own password."""
    await user_service.change_password(
        payload.old_password, payload.new_password, principal
    )
    return MessageResponse(
        message="Password has been successfully updated, login again with new credentials!"
    )
