# tests/test_store.py
import pytest

from models import Priority, SortKey, StatusFilter
from store import TaskNotFound, TaskQuery


def test_insert_assigns_id_and_defaults(store):
    task = store.insert(title="Buy milk")

    assert task.id == 1
    assert task.completed is False
    assert task.priority == "medium"
    assert task.description is None
    assert task.due_date is None
    assert task.created_at == task.updated_at


def test_find_by_id(store):
    task = store.insert(title="a")

    assert store.find_by_id(task.id).title == "a"
    assert store.find_by_id(999) is None


def test_query_default_is_newest_first(store):
    ids = [store.insert(title=f"t{i}").id for i in range(3)]

    assert [t.id for t in store.query()] == list(reversed(ids))


def test_query_filters_combine(store):
    store.insert(title="high open", priority="high")
    done = store.insert(title="high done", priority="high")
    store.insert(title="low open", priority="low")
    store.toggle_completed(done.id)

    active_high = store.query(TaskQuery(status=StatusFilter.ACTIVE, priority=Priority.HIGH))
    assert [t.title for t in active_high] == ["high open"]

    completed = store.query(TaskQuery(status=StatusFilter.COMPLETED))
    assert [t.title for t in completed] == ["high done"]

    low = store.query(TaskQuery(priority=Priority.LOW))
    assert [t.title for t in low] == ["low open"]


def test_sort_by_priority_uses_rank_not_lexical_order(store):
    for p in ["low", "medium", "high", "low", "high"]:
        store.insert(title=p, priority=p)

    result = [t.priority for t in store.query(TaskQuery(sort=SortKey.PRIORITY))]
    assert result == ["high", "high", "medium", "low", "low"]


def test_sort_by_due_date_puts_missing_dates_last(store):
    store.insert(title="none")
    store.insert(title="late", due_date="2026-03-01")
    store.insert(title="early", due_date="2026-01-15")

    result = [t.title for t in store.query(TaskQuery(sort=SortKey.DUE_DATE))]
    assert result == ["early", "late", "none"]


def test_sort_by_title(store):
    for title in ["pear", "apple", "mango"]:
        store.insert(title=title)

    result = [t.title for t in store.query(TaskQuery(sort=SortKey.TITLE))]
    assert result == ["apple", "mango", "pear"]


def test_from_params_ignores_unknown_values():
    q = TaskQuery.from_params(status="archived", priority="urgent", sort="random")
    assert q == TaskQuery()

    q = TaskQuery.from_params(status="active", priority="low", sort="due_date")
    assert q.status is StatusFilter.ACTIVE
    assert q.priority is Priority.LOW
    assert q.sort is SortKey.DUE_DATE


def test_from_params_ignores_injection_attempts(store):
    store.insert(title="keep me")
    q = TaskQuery.from_params(priority="high' OR '1'='1", sort="title; DROP TABLE tasks")

    assert q == TaskQuery()
    assert [t.title for t in store.query(q)] == ["keep me"]


def test_update_merges_only_given_fields(store):
    task = store.insert(title="Original", description="desc", priority="low", due_date="2026-02-01")

    updated = store.update(task.id, {"title": "Renamed"})

    assert updated.title == "Renamed"
    assert updated.description == "desc"
    assert updated.priority == "low"
    assert updated.due_date == "2026-02-01"
    assert updated.created_at == task.created_at
    assert updated.updated_at > task.updated_at


def test_update_can_clear_optional_fields(store):
    task = store.insert(title="x", description="desc", due_date="2026-02-01")

    updated = store.update(task.id, {"description": None, "due_date": None, "completed": 1})

    assert updated.description is None
    assert updated.due_date is None
    assert updated.completed is True


def test_update_missing_task_raises(store):
    with pytest.raises(TaskNotFound):
        store.update(42, {"title": "x"})


def test_update_rejects_unknown_fields(store):
    task = store.insert(title="x")
    with pytest.raises(ValueError):
        store.update(task.id, {"id": 7})


def test_toggle_twice_restores_state_and_bumps_updated_at(store):
    task = store.insert(title="x")

    first = store.toggle_completed(task.id)
    second = store.toggle_completed(task.id)

    assert first.completed is True
    assert second.completed is False
    assert task.updated_at < first.updated_at < second.updated_at


def test_toggle_missing_task_raises(store):
    with pytest.raises(TaskNotFound):
        store.toggle_completed(5)


def test_delete_reports_whether_removed(store):
    task = store.insert(title="x")

    assert store.delete(task.id) is True
    assert store.delete(task.id) is False
    assert store.count() == 0


def test_seed(store):
    added = store.seed([{"title": "a", "priority": "high"}, {"title": "b"}])

    assert added == 2
    assert store.count() == 2


def test_ids_outside_storage_range_are_missing(store):
    store.insert(title="x")
    huge = 2 ** 64

    assert store.find_by_id(huge) is None
    assert store.find_by_id(-huge) is None
    assert store.delete(huge) is False
    with pytest.raises(TaskNotFound):
        store.update(huge, {"title": "y"})
    with pytest.raises(TaskNotFound):
        store.toggle_completed(huge)
    assert store.count() == 1
