# task_api/routers/task.py
import logging
import re
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Response

from task_api.core.errors import ValidationError
from task_api.core.timestamps import parse_iso
from task_api.dependencies.task_service import get_task_service
from task_api.models.task import SortField, SortOrder, Task, TaskStatus
from task_api.schemas.task import (
    CreateTaskRequest,
    Page,
    PartialUpdateTaskRequest,
    TaskFilters,
    TaskSummary,
    UpdateTaskRequest,
)
from task_api.services.task_service import MSG_DUE_DATE_FORMAT, TaskService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["Tasks"])

SEARCH_MAX_LENGTH = 200
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_INT_RE = re.compile(r"[0-9]+")


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    return value if value else None


def _parse_iso_param(value: Optional[str], message: str) -> Optional[str]:
    if value is None:
        return None
    if parse_iso(value) is None:
        raise ValidationError(message)
    return value


def _parse_int_param(value: Optional[str], default: int, *, low: int, high: Optional[int], message: str) -> int:
    if value is None:
        return default
    if not _INT_RE.fullmatch(value):
        raise ValidationError(message)
    number = int(value)
    if number < low or (high is not None and number > high):
        raise ValidationError(message)
    return number


def build_filters(
    *,
    status: Optional[str] = None,
    due_date: Optional[str] = None,
    due_before: Optional[str] = None,
    due_after: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
) -> TaskFilters:
    """Turn raw query-string values into TaskFilters; empty strings count as absent."""
    status, due_date, due_before, due_after, search, sort_by, sort_order = map(
        _blank_to_none, (status, due_date, due_before, due_after, search, sort_by, sort_order)
    )

    filters = TaskFilters()
    if status is not None:
        filters.status = TaskStatus.parse(status)

    filters.due_date = _parse_iso_param(due_date, MSG_DUE_DATE_FORMAT)
    filters.due_before = _parse_iso_param(
        due_before, "Parâmetro dueBefore deve estar no formato ISO 8601"
    )
    filters.due_after = _parse_iso_param(
        due_after, "Parâmetro dueAfter deve estar no formato ISO 8601"
    )
    if filters.due_after and filters.due_before:
        if parse_iso(filters.due_after) > parse_iso(filters.due_before):
            raise ValidationError("Parâmetro dueAfter deve ser anterior ou igual a dueBefore")

    if search is not None:
        if len(search) > SEARCH_MAX_LENGTH:
            raise ValidationError("Parâmetro search deve ter no máximo 200 caracteres")
        filters.search = search.strip() or None

    if sort_by is not None:
        filters.sort_by = SortField.parse(sort_by)
    if sort_order is not None:
        filters.sort_order = SortOrder.parse(sort_order)
    return filters


def build_page(page: Optional[str] = None, page_size: Optional[str] = None) -> Page:
    return Page(
        page=_parse_int_param(
            _blank_to_none(page), 1, low=1, high=None,
            message="Parâmetro page deve ser um inteiro maior ou igual a 1",
        ),
        page_size=_parse_int_param(
            _blank_to_none(page_size), DEFAULT_PAGE_SIZE, low=1, high=MAX_PAGE_SIZE,
            message="Parâmetro pageSize deve ser um inteiro entre 1 e 100",
        ),
    )


@router.post("", status_code=201, response_model=Task, response_model_exclude_none=True)
@router.post("/", status_code=201, response_model=Task, response_model_exclude_none=True, include_in_schema=False)
def create_task(
    payload: Optional[CreateTaskRequest] = Body(None),
    service: TaskService = Depends(get_task_service),
):
    task = service.create_task(payload or CreateTaskRequest())
    logger.info("Nova tarefa criada via API taskId=%s", task.id)
    return task


@router.get("", response_model=list[Task], response_model_exclude_none=True)
@router.get("/", response_model=list[Task], response_model_exclude_none=True, include_in_schema=False)
def list_tasks(
    response: Response,
    status: Optional[str] = Query(None),
    due_date: Optional[str] = Query(None, alias="dueDate"),
    due_before: Optional[str] = Query(None, alias="dueBefore"),
    due_after: Optional[str] = Query(None, alias="dueAfter"),
    search: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    page: Optional[str] = Query(None),
    page_size: Optional[str] = Query(None, alias="pageSize"),
    service: TaskService = Depends(get_task_service),
):
    filters = build_filters(
        status=status,
        due_date=due_date,
        due_before=due_before,
        due_after=due_after,
        search=search,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    paging = build_page(page, page_size)

    tasks = service.get_all_tasks(filters)
    paging.total = len(tasks)
    response.headers.update(paging.headers())

    items = tasks[paging.offset:paging.offset + paging.page_size]
    logger.debug(
        "Tarefas listadas via API count=%d total=%d page=%d",
        len(items), paging.total, paging.page,
    )
    return items


@router.get("/summary", response_model=TaskSummary)
def get_summary(service: TaskService = Depends(get_task_service)):
    return service.get_task_summary()


@router.get("/{task_id}", response_model=Task, response_model_exclude_none=True)
def get_task(task_id: str, service: TaskService = Depends(get_task_service)):
    return service.get_task_by_id(task_id)


@router.put("/{task_id}", response_model=Task, response_model_exclude_none=True)
def update_task(
    task_id: str,
    payload: Optional[UpdateTaskRequest] = Body(None),
    service: TaskService = Depends(get_task_service),
):
    task = service.update_task(task_id, payload or UpdateTaskRequest())
    logger.info("Tarefa atualizada completamente via API taskId=%s", task_id)
    return task


@router.patch("/{task_id}", response_model=Task, response_model_exclude_none=True)
def partial_update_task(
    task_id: str,
    payload: Optional[PartialUpdateTaskRequest] = Body(None),
    service: TaskService = Depends(get_task_service),
):
    task = service.partial_update_task(task_id, payload or PartialUpdateTaskRequest())
    logger.info("Tarefa atualizada parcialmente via API taskId=%s", task_id)
    return task


@router.delete("/{task_id}", status_code=204)
def delete_task(task_id: str, service: TaskService = Depends(get_task_service)):
    service.delete_task(task_id)
    logger.info("Tarefa deletada via API taskId=%s", task_id)
    return Response(status_code=204)
