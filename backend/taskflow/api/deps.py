"""Shared request dependencies for the v1 routers"""
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from taskflow.core.database import get_db
from taskflow.services.task_events import TaskEventSink, build_listener
from taskflow.services.task_service import TaskService
from taskflow.services.user_service import UserService


def get_dispatcher(request: Request):
    return getattr(request.app.state, "dispatcher", None)


def get_task_events(dispatcher=Depends(get_dispatcher)) -> TaskEventSink:
    return build_listener(dispatcher)


def get_task_service(
    db: AsyncSession = Depends(get_db),
    events: TaskEventSink = Depends(get_task_events)
) -> TaskService:
    return TaskService(db, events)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)
