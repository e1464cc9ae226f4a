import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from studystats.models.task import TASK_STATUS_DONE, Task
from studystats.services.date_resolver import to_utc


def _apply_completion(task: Task, completed_at: datetime | None) -> None:
    """Keep ``completed_at`` in step with the done status."""
    if task.status == TASK_STATUS_DONE:
        if completed_at is not None:
            task.completed_at = to_utc(completed_at)
        elif task.completed_at is None:
            task.completed_at = datetime.now(timezone.utc)
    else:
        task.completed_at = None


async def get_tasks(
    db: AsyncSession,
    user_id: uuid.UUID,
    status: int | None = None,
) -> list[Task]:
    query = select(Task).where(Task.user_id == user_id)
    if status is not None:
        query = query.where(Task.status == status)
    query = query.order_by(Task.status.asc(), Task.priority.desc(), Task.sort_order.asc())
    result = await db.execute(query)
    return list(result.scalars().all())


async def create_task(db: AsyncSession, user_id: uuid.UUID, data: dict) -> Task:
    completed_at = data.pop("completed_at", None)
    task = Task(user_id=user_id, **data)
    _apply_completion(task, completed_at)
    db.add(task)
    await db.flush()
    await db.refresh(task)
    return task


async def update_task(
    db: AsyncSession, user_id: uuid.UUID, task_id: uuid.UUID, data: dict
) -> Task | None:
    result = await db.execute(
        select(Task).where(Task.id == task_id, Task.user_id == user_id)
    )
    task = result.scalar_one_or_none()
    if task is None:
        return None

    completed_at = data.pop("completed_at", None)
    for key, value in data.items():
        if value is not None:
            setattr(task, key, value)
    _apply_completion(task, completed_at)
    task.updated_at = datetime.now(timezone.utc)

    await db.flush()
    await db.refresh(task)
    return task
