"""
Authentication dependencies for FastAPI route protection.

Protected routes depend on ``get_current_principal``; public routes simply do
not. The principal is taken from the verified token as-is, without a store
lookup, so a deleted user stays authenticated until the token expires.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from taskmanager.exceptions import UnauthorizedError
from taskmanager.models import Role
from taskmanager.schemas import Principal
from taskmanager.utils.auth import TokenService
from taskmanager.utils.logger import setup_logger

logger = setup_logger("dependencies.auth")

# Missing credentials are reported as 401 by get_current_principal itself
security = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    token_service: TokenService = Depends(get_token_service),
) -> Principal:
    """
    Dependency to get the authenticated caller from the bearer token.
    """
    if credentials is None:
        raise UnauthorizedError("Not authenticated")

    # InvalidTokenError / ExpiredTokenError / MalformedTokenError are all 401s
    return token_service.verify(credentials.credentials)


def require_roles(*roles: Role):
    """Dependency factory restricting a route to the given roles."""

    async def dependency(
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        if principal.role not in roles:
            logger.warning(
                f"'{principal.username}' ({principal.role.value}) refused; requires {[r.value for r in roles]}"
            )
            raise UnauthorizedError()
        return principal

    return dependency
