"""
TaskHistory model: the per-user record of finished tasks.

Architecture:
    User ←1:1→ TaskHistory ←n:m→ Task

Invariants:
    - exactly one history per user (unique ``user_id``)
    - created during registration, removed when the user is deleted
    - only grows while the user exists
"""

from sqlalchemy import Column, ForeignKey, Integer, Table, UniqueConstraint
from sqlalchemy.orm import relationship

from taskmanager.models.base import Base, IntegerIdMixin, TimestampMixin

task_history_finished_tasks = Table(
    "task_history_finished_tasks",
    Base.metadata,
    Column(
        "task_history_id",
        Integer,
        ForeignKey("task_histories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "task_id",
        Integer,
        ForeignKey("tasks.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class TaskHistory(Base, IntegerIdMixin, TimestampMixin):
    """Accumulated finished tasks of one user."""

    __tablename__ = "task_histories"
    __table_args__ = (UniqueConstraint("user_id", name="uq_task_history_user"),)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Owning user; one history per user",
    )

    user = relationship("User", back_populates="task_history")

    finished_tasks = relationship(
        "Task",
        secondary=task_history_finished_tasks,
        doc="Tasks the owner has finished, in no particular order",
    )

    def __repr__(self):
        return f"<TaskHistory(id={self.id}, user_id={self.user_id})>"
