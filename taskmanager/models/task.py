"""
Task model.

Task CRUD lives outside this service; the model only carries what the task
history needs: an identity, an owner and the finished state.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from taskmanager.models.base import Base, IntegerIdMixin, TimestampMixin


class Task(Base, IntegerIdMixin, TimestampMixin):
    __tablename__ = "tasks"
    __table_args__ = (Index("ix_tasks_owner_id", "owner_id"),)

    title = Column(String(255), nullable=False)

    description = Column(Text, nullable=True)

    done = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default="false",
        comment="Whether the owner has marked the task finished",
    )

    end_date = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="Timestamp when the task was finished",
    )

    owner_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        comment="Reference to the user who owns this task",
    )

    owner = relationship("User", back_populates="tasks")

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', done={self.done})>"
