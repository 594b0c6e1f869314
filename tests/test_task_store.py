import typing
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from taskq.domain.models import TaskDomain
from taskq.domain.states import TaskState, TaskType
from taskq.services.task_store import TaskStore


@pytest.mark.asyncio
async def test_create_then_get_round_trip(store, clock):
    task_id = await store.create(TaskType.FOO)

    task = await store.get(task_id)

    assert task is not None
    assert task.id == task_id
    assert task.type == TaskType.FOO
    assert task.state == TaskState.PENDING
    assert task.start_time == clock.now


@pytest.mark.asyncio
async def test_create_keeps_explicit_start_time_as_utc(store):
    plus_two = timezone(timedelta(hours=2))
    start = datetime(2026, 10, 20, 14, 30, tzinfo=plus_two)

    task_id = await store.create(TaskType.BAR, start_time=start)
    task = await store.get(task_id)

    assert task.start_time == start
    assert task.start_time.tzinfo == timezone.utc
    assert task.start_time.hour == 12


@pytest.mark.asyncio
async def test_get_unknown_task_returns_none(store):
    assert await store.get(uuid4()) is None


@pytest.mark.asyncio
async def test_list_applies_type_and_state_filters_independently(store):
    foo_pending = await store.create(TaskType.FOO)
    foo_done = await store.create(TaskType.FOO)
    bar_pending = await store.create(TaskType.BAR)
    await store.set_state(foo_done, TaskState.DONE)

    both = await store.list(task_type=TaskType.FOO, state=TaskState.PENDING)
    by_type = await store.list(task_type=TaskType.FOO)
    by_state = await store.list(state=TaskState.PENDING)
    everything = await store.list()

    assert {t.id for t in both} == {foo_pending}
    assert {t.id for t in by_type} == {foo_pending, foo_done}
    assert {t.id for t in by_state} == {foo_pending, bar_pending}
    assert {t.id for t in everything} == {foo_pending, foo_done, bar_pending}


@pytest.mark.asyncio
async def test_list_returns_empty_when_nothing_matches(store):
    await store.create(TaskType.BAZ)

    assert await store.list(task_type=TaskType.BAR) == []


@pytest.mark.asyncio
async def test_delete_is_idempotent(store):
    task_id = await store.create(TaskType.BAZ)

    await store.delete(task_id)
    assert await store.get(task_id) is None

    # Second delete of the same id, and a delete of an id that never existed
    await store.delete(task_id)
    await store.delete(uuid4())


@pytest.mark.asyncio
async def test_set_state_is_unconditional(store):
    task_id = await store.create(TaskType.FOO)

    assert await store.set_state(task_id, TaskState.DONE) is True
    assert (await store.get(task_id)).state == TaskState.DONE

    # The store does not police transitions; that is the worker's job.
    assert await store.set_state(task_id, TaskState.ACTIVE) is True
    assert (await store.get(task_id)).state == TaskState.ACTIVE


@pytest.mark.asyncio
async def test_set_state_on_missing_task_reports_false(store):
    assert await store.set_state(uuid4(), TaskState.DONE) is False


def test_list_annotation_resolves_to_the_builtin():
    hints = typing.get_type_hints(TaskStore.list)

    assert hints["return"] == list[TaskDomain]
