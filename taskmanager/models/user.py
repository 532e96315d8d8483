"""
User model for authentication, role-based authorization and task ownership.

Architecture:
    User → TaskHistory (1:1) → finished Tasks
    User → Tasks (1:n)

Key Features:
    - bcrypt password hashes only, never plaintext
    - Unique username enforced by a database index
    - Closed role set: admin, user, guest
"""

from enum import Enum

from sqlalchemy import Column, Index, String
from sqlalchemy.orm import relationship, validates

from taskmanager.models.base import Base, IntegerIdMixin, TimestampMixin


class Role(str, Enum):
    """Authorization tier of a user. Checks compare members explicitly."""

    ADMIN = "admin"
    USER = "user"
    GUEST = "guest"


class User(Base, IntegerIdMixin, TimestampMixin):
    """
    Registered account.

    The username is the identity carried in access tokens; the role decides
    what the account may do. Every user owns exactly one TaskHistory, created
    at registration and removed together with the user.
    """

    __tablename__ = "users"
    __table_args__ = (Index("ix_users_username", "username", unique=True),)

    username = Column(
        String(50),
        nullable=False,
        comment="Unique username for user identification and login",
    )

    password = Column(
        String(255),
        nullable=False,
        comment="Bcrypt hashed password",
    )

    role = Column(
        String(10),
        nullable=False,
        default=Role.USER.value,
        comment="Authorization tier: admin/user/guest",
    )

    tasks = relationship(
        "Task",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
        doc="Tasks created by this user",
    )

    task_history = relationship(
        "TaskHistory",
        back_populates="user",
        uselist=False,
        passive_deletes=True,
        doc="History of tasks this user has finished",
    )

    @validates("role")
    def validate_role(self, key, value):
        """Store the plain string value of a known role."""
        return Role(value).value

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', role='{self.role}')>"
