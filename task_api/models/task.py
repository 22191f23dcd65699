from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from task_api.core.errors import ValidationError


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"

    @classmethod
    def parse(cls, value: object) -> "TaskStatus":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError("Status deve ser: todo, in-progress ou done") from None


class SortField(str, Enum):
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    DUE_DATE = "dueDate"

    @classmethod
    def parse(cls, value: object) -> "SortField":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                "Parâmetro sortBy deve ser: createdAt, updatedAt ou dueDate"
            ) from None

    @property
    def attribute(self) -> str:
        return {
            SortField.CREATED_AT: "created_at",
            SortField.UPDATED_AT: "updated_at",
            SortField.DUE_DATE: "due_date",
        }[self]


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: object) -> "SortOrder":
        try:
            return cls(value)
        except ValueError:
            raise ValidationError("Parâmetro sortOrder deve ser: asc ou desc") from None


class Task(BaseModel):
    """Stored task record. Timestamps are canonical ISO-8601 strings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )

    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    due_date: Optional[str] = None
    created_at: str
    updated_at: str
    deleted_at: Optional[str] = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
