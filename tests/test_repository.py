# tests/test_repository.py

from __future__ import annotations

from datetime import timedelta

import pytest
import pytest_asyncio
from fastapi import HTTPException
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

import app.db.models  # noqa: F401
from app.db.base import Base
from app.db.models.user import User as UserORM
from app.features.audit_logs.domain import LogAction, LogEntryCreate
from app.features.audit_logs.repository import LogRepository
from app.features.tasks.domain import Task, TaskStatus
from app.features.tasks.repository import TaskRepository
from app.features.tasks.schemas import SortField, SortOrder, TaskListQuery
from app.features.tasks.service import TaskService
from app.middleware.auth import get_current_actor
from app.models.user import UserRole


@pytest_asyncio.fixture()
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tasks.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture()
async def session(session_factory):
    async with session_factory() as db:
        yield db


def _task(task_id: str, now, **overrides) -> Task:
    fields = dict(
        id=task_id,
        title=f"Task {task_id}",
        description=f"Description of {task_id}",
        assigned_to="user-dev",
        deadline=now + timedelta(days=14),
        created_by="user-manager",
        created_at=now,
        updated_at=now,
    )
    fields.update(overrides)
    task = Task(**fields)
    task.calculate_priority(now)
    return task


@pytest.mark.asyncio
async def test_task_round_trip(session, session_factory, now) -> None:
    original = _task("t1", now, dependencies=["a", "b"], tags=["backend"], estimated_hours=3)

    await TaskRepository(session).save(original)
    async with session_factory() as fresh:
        repo = TaskRepository(fresh)
        loaded = await repo.find_by_id("t1")
        missing = await repo.find_by_id("missing")

    assert loaded == original
    assert loaded.deadline.tzinfo is not None
    assert loaded.created_at == now
    assert missing is None


@pytest.mark.asyncio
async def test_find_by_ids_skips_unknown_ids(session, now) -> None:
    repo = TaskRepository(session)
    await repo.save_many([_task("a", now), _task("b", now)])

    found = await repo.find_by_ids(["a", "ghost", "b"])

    assert sorted(task.id for task in found) == ["a", "b"]
    assert await repo.find_by_ids([]) == []


@pytest.mark.asyncio
async def test_find_dependents_matches_whole_ids(session, now) -> None:
    repo = TaskRepository(session)
    await repo.save_many([
        _task("task-1", now),
        _task("task-10", now),
        _task("uses-task-10", now, dependencies=["task-10"]),
        _task("uses-task-1", now, dependencies=["other", "task-1"]),
    ])

    dependents = await repo.find_dependents("task-1")

    assert [task.id for task in dependents] == ["uses-task-1"]


@pytest.mark.asyncio
async def test_find_page_filters_sorts_and_counts(session, now) -> None:
    repo = TaskRepository(session)
    await repo.save_many([
        _task("a", now, title="Write docs", deadline=now + timedelta(days=2)),
        _task("b", now, title="Fix login", deadline=now + timedelta(days=30)),
        _task("c", now, title="Fix signup", deadline=now + timedelta(days=9)),
        _task("d", now, title="Fix logout", status=TaskStatus.COMPLETED),
    ])

    items, total = await repo.find_page(TaskListQuery(
        search="fix",
        status=TaskStatus.PENDING,
        sort_by=SortField.DEADLINE,
        sort_order=SortOrder.ASC,
        limit=1,
    ))

    assert total == 2
    assert [task.id for task in items] == ["c"]

    items, total = await repo.find_page(TaskListQuery(page=2, limit=3))
    assert total == 4
    assert len(items) == 1


@pytest.mark.asyncio
async def test_save_many_updates_existing_rows(session, now) -> None:
    repo = TaskRepository(session)
    await repo.save(_task("a", now))

    changed = _task("a", now, status=TaskStatus.BLOCKED, title="Renamed")
    saved = await repo.save_many([changed, _task("b", now)])

    assert [task.id for task in saved] == ["a", "b"]
    stored = await repo.find_by_id("a")
    assert stored.status == TaskStatus.BLOCKED
    assert stored.title == "Renamed"


@pytest.mark.asyncio
async def test_delete(session, now) -> None:
    repo = TaskRepository(session)
    await repo.save(_task("a", now))

    await repo.delete("a")

    assert await repo.find_by_id("a") is None


@pytest.mark.asyncio
async def test_log_entries_are_returned_newest_first(session, now) -> None:
    repo = LogRepository(session)

    def entry(action: LogAction, minutes: int) -> LogEntryCreate:
        return LogEntryCreate(
            action=action,
            task_id="t1",
            user_id="user-admin",
            changes={"id": "t1"},
            timestamp=now + timedelta(minutes=minutes),
            metadata={"user_role": "admin"},
        )

    await repo.append(entry(LogAction.CREATE, 0))
    await repo.append_many([entry(LogAction.UPDATE, 5), entry(LogAction.DELETE, 10)])

    history = await repo.find_by_task("t1")

    assert [e.action for e in history] == [LogAction.DELETE, LogAction.UPDATE, LogAction.CREATE]
    assert history[0].metadata == {"user_role": "admin"}
    assert len(await repo.find_by_task("t1", limit=2)) == 2
    assert await repo.find_by_task("other") == []


@pytest.mark.asyncio
async def test_log_timestamps_read_back_as_utc(session, session_factory, now) -> None:
    await LogRepository(session).append(LogEntryCreate(
        action=LogAction.CREATE,
        task_id="t1",
        user_id="user-admin",
        changes={"id": "t1"},
        timestamp=now,
        metadata={"user_role": "admin"},
    ))

    async with session_factory() as fresh:
        [stored] = await LogRepository(fresh).find_by_task("t1")

    assert stored.timestamp.tzinfo is not None
    assert stored.timestamp == now


@pytest.mark.asyncio
async def test_service_against_database(session, now, manager, admin) -> None:
    service = TaskService(TaskRepository(session), LogRepository(session), clock=lambda: now)

    dep = await service.create_task({
        "title": "Design schema",
        "description": "Tables and indexes",
        "assigned_to": "user-dev",
        "deadline": now + timedelta(days=3),
    }, manager)
    task = await service.create_task({
        "title": "Build API",
        "description": "Endpoints on top of the schema",
        "assigned_to": "user-dev",
        "deadline": now + timedelta(days=10),
        "dependencies": [dep.id],
    }, manager)

    await service.update_task(dep.id, {"status": "completed"}, manager)
    done = await service.update_task(task.id, {"status": "completed"}, manager)
    assert done.status == TaskStatus.COMPLETED

    await service.delete_task(task.id, admin)
    history = await service.get_task_history(task.id)
    assert [e.action for e in history][0] == LogAction.DELETE
    assert {e.action for e in history} == {LogAction.CREATE, LogAction.UPDATE, LogAction.DELETE}


@pytest.mark.asyncio
async def test_current_actor_is_loaded_from_users_table(session) -> None:
    session.add(UserORM(id="user-7", name="Dana", email="dana@example.com", role="manager"))
    await session.commit()

    actor = await get_current_actor(user_id="user-7", db=session)
    assert actor.role == UserRole.MANAGER

    with pytest.raises(HTTPException) as excinfo:
        await get_current_actor(user_id="nobody", db=session)
    assert excinfo.value.status_code == 401
