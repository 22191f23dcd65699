from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from task_api.models.task import SortField, SortOrder, TaskStatus


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ===== Request bodies =====
# Fields stay loosely typed (plain strings) so the service can answer with
# its own messages instead of pydantic's.

class TaskPayload(_CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None
    due_date: Optional[str] = None


class CreateTaskRequest(TaskPayload):
    pass


class UpdateTaskRequest(TaskPayload):
    pass


class PartialUpdateTaskRequest(TaskPayload):
    def provided_fields(self) -> dict:
        """Fields present in the request body, explicit nulls included."""
        return {name: getattr(self, name) for name in self.model_fields_set}


# ===== Listing =====

class TaskFilters(BaseModel):
    status: Optional[TaskStatus] = None
    due_date: Optional[str] = None
    due_before: Optional[str] = None
    due_after: Optional[str] = None
    search: Optional[str] = None
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortOrder = SortOrder.DESC


class Page(BaseModel):
    page: int = 1
    page_size: int = 20
    total: int = 0

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.page_size)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    def headers(self) -> dict[str, str]:
        return {
            "X-Total-Count": str(self.total),
            "X-Total-Pages": str(self.total_pages),
            "X-Page": str(self.page),
            "X-Page-Size": str(self.page_size),
        }


# ===== Summary =====

class StatusCounts(_CamelModel):
    todo: int = 0
    in_progress: int = 0
    done: int = 0


class TaskSummary(_CamelModel):
    total: int = 0
    status_counts: StatusCounts = Field(default_factory=StatusCounts)
    overdue: int = 0
    due_soon: int = 0
