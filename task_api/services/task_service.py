# task_api/services/task_service.py
from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Any, Optional

from task_api.core.errors import ConflictError, NotFoundError, ValidationError
from task_api.core.timestamps import is_valid_iso, parse_iso, utcnow
from task_api.db.memory_store import MemoryStore
from task_api.models.task import Task, TaskStatus
from task_api.schemas.task import (
    CreateTaskRequest,
    PartialUpdateTaskRequest,
    StatusCounts,
    TaskFilters,
    TaskSummary,
    UpdateTaskRequest,
)

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 1000
DUE_SOON_WINDOW = timedelta(days=7)

MSG_TITLE_REQUIRED = "Título é obrigatório"
MSG_TITLE_EMPTY = "Título não pode estar vazio"
MSG_TITLE_TOO_LONG = "Título deve ter no máximo 200 caracteres"
MSG_DESCRIPTION_TOO_LONG = "Descrição deve ter no máximo 1000 caracteres"
MSG_DUE_DATE_FORMAT = "Data de vencimento deve estar no formato ISO 8601"
MSG_EMPTY_PATCH = "Pelo menos um campo deve ser fornecido para atualização"
MSG_DUPLICATE_TITLE = "Uma tarefa com este título já existe"
MSG_NOT_FOUND = "Tarefa não encontrada"


def _check_title(title: Optional[str], *, missing_message: str) -> None:
    if title is None or not title.strip():
        raise ValidationError(missing_message)
    if len(title) > TITLE_MAX_LENGTH:
        raise ValidationError(MSG_TITLE_TOO_LONG)


def _check_description(description: Optional[str]) -> None:
    if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(MSG_DESCRIPTION_TOO_LONG)


def _check_due_date(due_date: Optional[str]) -> None:
    if due_date is not None and not is_valid_iso(due_date):
        raise ValidationError(MSG_DUE_DATE_FORMAT)


class TaskService:
    """Validation, title-conflict rules and aggregation on top of a store."""

    def __init__(self, store: MemoryStore) -> None:
        self.store = store
        # title checks and the writes they guard must not interleave
        self._lock = threading.Lock()

    # ---- commands ----

    def create_task(self, data: CreateTaskRequest) -> Task:
        _check_title(data.title, missing_message=MSG_TITLE_REQUIRED)
        _check_description(data.description)
        status = TaskStatus.parse(data.status) if data.status is not None else TaskStatus.TODO
        _check_due_date(data.due_date)

        with self._lock:
            if self.store.find_by_title(data.title) is not None:
                logger.warning("Tentativa de criar tarefa com título duplicado title=%r", data.title)
                raise ConflictError(MSG_DUPLICATE_TITLE)

            task = self.store.create({
                "title": data.title,
                "description": data.description,
                "status": status,
                "due_date": data.due_date,
            })
        logger.info("Tarefa criada com sucesso taskId=%s title=%r", task.id, task.title)
        return task

    def update_task(self, task_id: str, data: UpdateTaskRequest) -> Task:
        """Full replace: absent description/dueDate are cleared."""
        _check_title(data.title, missing_message=MSG_TITLE_REQUIRED)
        _check_description(data.description)
        status = TaskStatus.parse(data.status)
        _check_due_date(data.due_date)

        with self._lock:
            existing = self._get_active(task_id, action="atualizar")
            self._ensure_title_available(existing, data.title)

            updated = self.store.update(task_id, {
                "title": data.title,
                "description": data.description,
                "status": status,
                "due_date": data.due_date,
            })
        if updated is None:
            raise NotFoundError(MSG_NOT_FOUND)

        logger.info("Tarefa atualizada com sucesso taskId=%s", task_id)
        return updated

    def partial_update_task(self, task_id: str, data: PartialUpdateTaskRequest) -> Task:
        fields = data.provided_fields()
        if not fields:
            raise ValidationError(MSG_EMPTY_PATCH)

        updates: dict[str, Any] = {}
        if "title" in fields:
            _check_title(fields["title"], missing_message=MSG_TITLE_EMPTY)
            updates["title"] = fields["title"]
        if "description" in fields:
            _check_description(fields["description"])
            updates["description"] = fields["description"]
        if "status" in fields:
            updates["status"] = TaskStatus.parse(fields["status"])
        if "due_date" in fields:
            _check_due_date(fields["due_date"])
            updates["due_date"] = fields["due_date"]

        with self._lock:
            existing = self._get_active(task_id, action="atualizar parcialmente")
            if "title" in updates:
                self._ensure_title_available(existing, updates["title"])

            updated = self.store.update(task_id, updates)
        if updated is None:
            raise NotFoundError(MSG_NOT_FOUND)

        logger.info(
            "Tarefa atualizada parcialmente com sucesso taskId=%s fields=%s",
            task_id, sorted(updates),
        )
        return updated

    def delete_task(self, task_id: str) -> None:
        with self._lock:
            self._get_active(task_id, action="deletar")
            if not self.store.delete(task_id):
                raise NotFoundError(MSG_NOT_FOUND)
        logger.info("Tarefa deletada com sucesso taskId=%s", task_id)

    # ---- queries ----

    def get_all_tasks(self, filters: Optional[TaskFilters] = None) -> list[Task]:
        tasks = self.store.find_all(filters)
        logger.debug("Tarefas recuperadas count=%d filters=%s", len(tasks), filters)
        return tasks

    def get_task_by_id(self, task_id: str) -> Task:
        task = self.store.find_by_id(task_id)
        if task is None or task.is_deleted:
            logger.warning("Tarefa não encontrada taskId=%s", task_id)
            raise NotFoundError(MSG_NOT_FOUND)
        logger.debug("Tarefa recuperada por ID taskId=%s", task_id)
        return task

    def get_task_summary(self, now: Optional[datetime] = None) -> TaskSummary:
        """
        Counts over every non-deleted task.
        - overdue: not done, due strictly before ``now``
        - due_soon: not done, due between ``now`` and ``now + 7 days`` (inclusive)
        """
        now = now or utcnow()
        horizon = now + DUE_SOON_WINDOW

        counts = StatusCounts()
        total = overdue = due_soon = 0
        for task in self.store.find_all():
            total += 1
            if task.status == TaskStatus.TODO:
                counts.todo += 1
            elif task.status == TaskStatus.IN_PROGRESS:
                counts.in_progress += 1
            else:
                counts.done += 1

            if task.status == TaskStatus.DONE or not task.due_date:
                continue
            due = parse_iso(task.due_date)
            if due is None:
                continue
            if due < now:
                overdue += 1
            elif due <= horizon:
                due_soon += 1

        summary = TaskSummary(
            total=total, status_counts=counts, overdue=overdue, due_soon=due_soon,
        )
        logger.debug("Resumo de tarefas calculado %s", summary)
        return summary

    # ---- helpers ----

    def _get_active(self, task_id: str, *, action: str) -> Task:
        existing = self.store.find_by_id(task_id)
        if existing is None or existing.is_deleted:
            logger.warning("Tentativa de %s tarefa inexistente taskId=%s", action, task_id)
            raise NotFoundError(MSG_NOT_FOUND)
        return existing

    def _ensure_title_available(self, existing: Task, title: str) -> None:
        if title == existing.title:
            return
        duplicate = self.store.find_by_title(title)
        if duplicate is not None and duplicate.id != existing.id:
            logger.warning(
                "Tentativa de atualizar para título duplicado taskId=%s newTitle=%r",
                existing.id, title,
            )
            raise ConflictError(MSG_DUPLICATE_TITLE)
