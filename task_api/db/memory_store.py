# task_api/db/memory_store.py
from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import uuid4

from task_api.core.timestamps import next_iso_after, now_iso, parse_iso
from task_api.models.task import SortOrder, Task, TaskStatus
from task_api.schemas.task import TaskFilters

log = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = {"id", "created_at"}


class MemoryStore:
    """
    Process-local task storage keyed by id.

    - Records are never removed: delete only stamps ``deleted_at``.
    - Every method hands out copies, callers never touch the stored objects.
    - dict keeps insertion order, which breaks ties when sorting.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        log.debug("MemoryStore ready")

    def create(self, data: dict[str, Any]) -> Task:
        now = now_iso()
        task = Task.model_validate({
            **data,
            "id": str(uuid4()),
            "status": data.get("status") or TaskStatus.TODO,
            "created_at": now,
            "updated_at": now,
            "deleted_at": None,
        })
        self._tasks[task.id] = task
        return task.model_copy()

    def find_by_id(self, task_id: str) -> Optional[Task]:
        task = self._tasks.get(task_id)
        return task.model_copy() if task else None

    def find_by_title(self, title: str) -> Optional[Task]:
        for task in self._tasks.values():
            if task.title == title and not task.is_deleted:
                return task.model_copy()
        return None

    def find_all(self, filters: Optional[TaskFilters] = None) -> list[Task]:
        filters = filters or TaskFilters()
        tasks = [t for t in self._tasks.values() if not t.is_deleted]

        if filters.status is not None:
            tasks = [t for t in tasks if t.status == filters.status]

        if filters.due_date is not None:
            tasks = [t for t in tasks if t.due_date == filters.due_date]

        if filters.due_before is not None or filters.due_after is not None:
            before = parse_iso(filters.due_before) if filters.due_before else None
            after = parse_iso(filters.due_after) if filters.due_after else None
            tasks = [t for t in tasks if _due_in_range(t, after, before)]

        term = (filters.search or "").strip().lower()
        if term:
            tasks = [
                t for t in tasks
                if term in t.title.lower() or term in (t.description or "").lower()
            ]

        return [t.model_copy() for t in _sorted(tasks, filters)]

    def update(self, task_id: str, updates: dict[str, Any]) -> Optional[Task]:
        existing = self._tasks.get(task_id)
        if existing is None or existing.is_deleted:
            return None

        changes = {k: v for k, v in updates.items() if k not in _IMMUTABLE_FIELDS}
        task = Task.model_validate({
            **existing.model_dump(),
            **changes,
            "updated_at": next_iso_after(existing.updated_at),
        })
        self._tasks[task_id] = task
        return task.model_copy()

    def delete(self, task_id: str) -> bool:
        existing = self._tasks.get(task_id)
        if existing is None or existing.is_deleted:
            return False

        stamp = next_iso_after(existing.updated_at)
        self._tasks[task_id] = existing.model_copy(
            update={"deleted_at": stamp, "updated_at": stamp}
        )
        log.debug("soft-deleted id=%s at=%s", task_id, stamp)
        return True

    def count(self) -> int:
        return sum(1 for t in self._tasks.values() if not t.is_deleted)

    # ---- test helpers ----

    def all(self) -> list[Task]:
        """Every record, soft-deleted ones included."""
        return [t.model_copy() for t in self._tasks.values()]

    def clear(self) -> None:
        self._tasks.clear()


def _due_in_range(task: Task, after, before) -> bool:
    due = parse_iso(task.due_date) if task.due_date else None
    if due is None:
        return False
    if after is not None and due < after:
        return False
    if before is not None and due > before:
        return False
    return True


def _sorted(tasks: list[Task], filters: TaskFilters) -> list[Task]:
    """Sort on the requested field; tasks lacking it always go last."""
    attr = filters.sort_by.attribute
    present = [t for t in tasks if getattr(t, attr)]
    missing = [t for t in tasks if not getattr(t, attr)]
    present.sort(
        key=lambda t: getattr(t, attr),
        reverse=filters.sort_order == SortOrder.DESC,
    )
    return present + missing
