"""Task and assignee-set models"""
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
import enum

from taskflow.core.database import Base
from taskflow.core.types import GUID, generate_uuid, utcnow


TITLE_MAX_LENGTH = 200


class TaskStatus(str, enum.Enum):
    """Task status"""
    TODO = "To-Do"
    IN_PROGRESS = "In-Progress"
    COMPLETED = "Completed"


class TaskPriority(str, enum.Enum):
    """Task priority"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Task(Base):
    """Task - owned by its creator, shared with a set of assignees"""
    __tablename__ = "tasks"

    __table_args__ = (
        Index('ix_tasks_creator_id', 'creator_id'),
        Index('ix_tasks_status', 'status'),
        Index('ix_tasks_priority', 'priority'),
        Index('ix_tasks_due_date', 'due_date'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    creator_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        SQLEnum(TaskStatus, values_callable=_enum_values, name="task_status"),
        default=TaskStatus.TODO,
        nullable=False,
    )
    priority = Column(
        SQLEnum(TaskPriority, values_callable=_enum_values, name="task_priority"),
        default=TaskPriority.MEDIUM,
        nullable=False,
    )
    due_date = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relationships
    creator = relationship("User", foreign_keys=[creator_id])
    assignees = relationship(
        "TaskAssignee",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskAssignee.assigned_at",
        lazy="selectin",
    )

    @property
    def assignee_ids(self) -> list:
        return [a.user_id for a in self.assignees]

    def is_creator(self, user_id: str) -> bool:
        return str(self.creator_id) == str(user_id)

    def is_assignee(self, user_id: str) -> bool:
        return str(user_id) in {str(a.user_id) for a in self.assignees}

    def __repr__(self):
        return f"<Task {self.title}>"


class TaskAssignee(Base):
    """One member of a task's assignee set; the composite key forbids duplicates"""
    __tablename__ = "task_assignees"

    __table_args__ = (
        Index('ix_task_assignees_user_id', 'user_id'),
    )

    task_id = Column(GUID, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    assigned_at = Column(DateTime, default=utcnow, nullable=False)

    task = relationship("Task", back_populates="assignees")

    def __repr__(self):
        return f"<TaskAssignee {self.user_id} on {self.task_id}>"
