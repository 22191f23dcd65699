from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from task_api.db.memory_store import MemoryStore  # noqa: E402
from task_api.models.task import SortField, SortOrder, TaskStatus  # noqa: E402
from task_api.schemas.task import TaskFilters  # noqa: E402


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


def _titles(tasks) -> list[str]:
    return [t.title for t in tasks]


def test_create_assigns_id_timestamps_and_default_status(store):
    task = store.create({"title": "Escrever relatório"})

    assert task.id
    assert task.status == TaskStatus.TODO
    assert task.created_at == task.updated_at
    assert task.deleted_at is None
    assert store.find_by_id(task.id) == task


def test_returned_tasks_are_copies(store):
    task = store.create({"title": "Original"})
    task.title = "Alterado fora do store"

    assert store.find_by_id(task.id).title == "Original"


def test_find_by_title_ignores_soft_deleted_tasks(store):
    task = store.create({"title": "Repetida"})
    assert store.find_by_title("Repetida").id == task.id

    assert store.delete(task.id) is True
    assert store.find_by_title("Repetida") is None
    assert store.find_by_title("repetida") is None


def test_update_keeps_identity_and_refreshes_updated_at(store):
    task = store.create({"title": "Antes", "description": "texto"})

    updated = store.update(task.id, {
        "title": "Depois",
        "id": "outro-id",
        "created_at": "2000-01-01T00:00:00.000Z",
    })

    assert updated.id == task.id
    assert updated.created_at == task.created_at
    assert updated.title == "Depois"
    assert updated.description == "texto"
    assert updated.updated_at > task.updated_at


def test_update_with_none_clears_optional_field(store):
    task = store.create({"title": "Com prazo", "due_date": "2024-01-01T00:00:00.000Z"})

    updated = store.update(task.id, {"due_date": None})

    assert updated.due_date is None


def test_update_missing_or_deleted_returns_none(store):
    task = store.create({"title": "Vai sumir"})
    store.delete(task.id)

    assert store.update(task.id, {"title": "Nada"}) is None
    assert store.update("nao-existe", {"title": "Nada"}) is None


def test_delete_is_soft_and_not_repeatable(store):
    task = store.create({"title": "Apagar"})

    assert store.delete(task.id) is True
    assert store.delete(task.id) is False
    assert store.delete("nao-existe") is False

    kept = store.find_by_id(task.id)
    assert kept.deleted_at is not None
    assert kept.updated_at == kept.deleted_at
    assert store.find_all() == []
    assert len(store.all()) == 1


def test_find_all_filters_by_status_and_due_date(store):
    store.create({"title": "A", "status": "todo"})
    store.create({"title": "B", "status": "done", "due_date": "2024-06-01T00:00:00.000Z"})
    store.create({"title": "C", "status": "todo", "due_date": "2024-06-01T00:00:00.000Z"})

    by_status = store.find_all(TaskFilters(status=TaskStatus.TODO))
    assert sorted(_titles(by_status)) == ["A", "C"]

    by_due = store.find_all(TaskFilters(due_date="2024-06-01T00:00:00.000Z"))
    assert sorted(_titles(by_due)) == ["B", "C"]


def test_find_all_range_is_inclusive_and_skips_tasks_without_due_date(store):
    store.create({"title": "Sem prazo"})
    store.create({"title": "Limite inferior", "due_date": "2024-06-01T00:00:00.000Z"})
    store.create({"title": "Meio", "due_date": "2024-06-15T00:00:00.000Z"})
    store.create({"title": "Limite superior", "due_date": "2024-06-30T00:00:00.000Z"})
    store.create({"title": "Fora", "due_date": "2024-07-01T00:00:00.000Z"})

    tasks = store.find_all(TaskFilters(
        due_after="2024-06-01T00:00:00.000Z",
        due_before="2024-06-30T00:00:00.000Z",
        sort_by=SortField.DUE_DATE,
        sort_order=SortOrder.ASC,
    ))

    assert _titles(tasks) == ["Limite inferior", "Meio", "Limite superior"]


def test_find_all_search_matches_title_or_description_case_insensitive(store):
    store.create({"title": "Planejar Sprint", "description": "Revisar BACKLOG do produto"})
    store.create({"title": "Tarefa Em Progresso"})
    store.create({"title": "Outra"})

    assert _titles(store.find_all(TaskFilters(search="backlog"))) == ["Planejar Sprint"]
    assert _titles(store.find_all(TaskFilters(search="  PROGRESSO "))) == ["Tarefa Em Progresso"]
    assert len(store.find_all(TaskFilters(search="   "))) == 3


@pytest.mark.parametrize("order", [SortOrder.ASC, SortOrder.DESC])
def test_find_all_puts_missing_sort_field_last(store, order):
    store.create({"title": "Sem prazo 1"})
    store.create({"title": "Tarde", "due_date": "2025-01-01T00:00:00.000Z"})
    store.create({"title": "Cedo", "due_date": "2024-01-01T00:00:00.000Z"})
    store.create({"title": "Sem prazo 2"})

    tasks = store.find_all(TaskFilters(sort_by=SortField.DUE_DATE, sort_order=order))

    expected = ["Cedo", "Tarde"] if order == SortOrder.ASC else ["Tarde", "Cedo"]
    assert _titles(tasks) == expected + ["Sem prazo 1", "Sem prazo 2"]


def test_find_all_default_sort_is_created_at_descending(store):
    for title in ("primeira", "segunda", "terceira"):
        store.create({"title": title})

    created = [t.created_at for t in store.find_all()]

    assert created == sorted(created, reverse=True)


def test_count_and_clear(store):
    a = store.create({"title": "A"})
    store.create({"title": "B"})
    store.delete(a.id)

    assert store.count() == 1
    store.clear()
    assert store.all() == []
