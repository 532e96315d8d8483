"""
Common utilities: password hashing and access tokens, logging.
"""

from taskmanager.utils.auth import PasswordHasher, TokenService
from taskmanager.utils.logger import setup_logger

__all__ = [
    "PasswordHasher",
    "TokenService",
    "setup_logger",
]
