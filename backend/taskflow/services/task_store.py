"""
Task Store - persistence for tasks and their assignee sets.

Every mutating method is a single statement (or a single transaction) so the
engine never does read-then-write on shared state:
- add_assignee is INSERT ... ON CONFLICT DO NOTHING on the (task_id, user_id) key
- update is UPDATE ... WHERE <authorization predicate>
"""

from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.logging_config import logger
from taskflow.core.types import utcnow
from taskflow.models.task import Task, TaskAssignee


class TaskStore:
    """SQLAlchemy-backed task persistence"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, **values: Any) -> Task:
        task = Task(**values)
        self.db.add(task)
        await self.db.commit()
        return await self.get(task.id)

    async def get(self, task_id: str) -> Optional[Task]:
        """Fetch a task with its assignee set, bypassing any stale identity-map copy"""
        result = await self.db.execute(
            select(Task)
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def find(self, where: Iterable, order_by: Iterable) -> List[Task]:
        result = await self.db.execute(
            select(Task)
            .where(and_(*where))
            .order_by(*order_by)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def update(self, task_id: str, values: Dict[str, Any], *conditions) -> bool:
        """
        Apply `values` to the task when every condition still holds.

        Returns False when no row matched (task gone or condition no longer true).
        """
        result = await self.db.execute(
            update(Task)
            .where(Task.id == task_id, *conditions)
            .values(**values, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def delete(self, task_id: str) -> bool:
        """Delete the task and its assignee rows in one transaction"""
        await self.db.execute(delete(TaskAssignee).where(TaskAssignee.task_id == task_id))
        result = await self.db.execute(
            delete(Task)
            .where(Task.id == task_id)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        self.db.expunge_all()
        return result.rowcount > 0

    async def add_assignee(self, task_id: str, user_id: str) -> bool:
        """
        Add user_id to the task's assignee set.

        Returns True when the user was newly added, False when already present.
        """
        values = {"task_id": task_id, "user_id": user_id, "assigned_at": utcnow()}
        dialect = self.db.get_bind().dialect.name

        if dialect in ("sqlite", "postgresql"):
            if dialect == "sqlite":
                from sqlalchemy.dialects.sqlite import insert as dialect_insert
            else:
                from sqlalchemy.dialects.postgresql import insert as dialect_insert

            stmt = dialect_insert(TaskAssignee).values(**values).on_conflict_do_nothing(
                index_elements=["task_id", "user_id"]
            )
            result = await self.db.execute(stmt)
            added = result.rowcount > 0
        else:
            try:
                async with self.db.begin_nested():
                    await self.db.execute(insert(TaskAssignee).values(**values))
                added = True
            except IntegrityError:
                logger.debug(f"Assignee {user_id} already on task {task_id}")
                added = False

        if added:
            await self.db.execute(
                update(Task)
                .where(Task.id == task_id)
                .values(updated_at=utcnow())
                .execution_options(synchronize_session=False)
            )
        await self.db.commit()
        return added
