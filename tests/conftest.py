# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from app.features.tasks.domain import Task, TaskStatus
from app.features.tasks.service import TaskService
from app.models.user import Actor, UserRole

from .fakes import FakeLogRepo, FakeTaskRepo

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


@pytest.fixture()
def now() -> datetime:
    """Fixed reference time so priorities are deterministic."""
    return NOW


@pytest.fixture()
def admin() -> Actor:
    return Actor(id="user-admin", role=UserRole.ADMIN)


@pytest.fixture()
def manager() -> Actor:
    return Actor(id="user-manager", role=UserRole.MANAGER)


@pytest.fixture()
def task_repo() -> FakeTaskRepo:
    return FakeTaskRepo()


@pytest.fixture()
def log_repo() -> FakeLogRepo:
    return FakeLogRepo()


@pytest.fixture()
def service(task_repo: FakeTaskRepo, log_repo: FakeLogRepo, now: datetime) -> TaskService:
    return TaskService(task_repo, log_repo, clock=lambda: now)


@pytest.fixture()
def make_task(task_repo: FakeTaskRepo, now: datetime) -> Callable[..., Task]:
    """
    Seed a task straight into the fake store, bypassing the service
    (no log entry is written).
    """

    def factory(task_id: str, **overrides) -> Task:
        fields = dict(
            id=task_id,
            title=f"Task {task_id}",
            description=f"Description of {task_id}",
            status=TaskStatus.PENDING,
            assigned_to="user-dev",
            deadline=now + timedelta(days=14),
            created_by="user-manager",
            created_at=now - timedelta(days=1),
            updated_at=now - timedelta(days=1),
        )
        fields.update(overrides)
        task = Task(**fields)
        task.calculate_priority(now)
        return task_repo.add(task)

    return factory
