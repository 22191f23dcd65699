from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


# anything outside this table is a 500
STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
}

INTERNAL_ERROR_MESSAGE = "Erro interno do servidor"
ENDPOINT_NOT_FOUND_MESSAGE = "Endpoint não encontrado"
INVALID_BODY_MESSAGE = "Corpo da requisição inválido"


class TaskError(Exception):
    """Recoverable failure; the route layer turns it into a JSON error body."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(TaskError):
    kind = ErrorKind.VALIDATION


class ConflictError(TaskError):
    kind = ErrorKind.CONFLICT


class NotFoundError(TaskError):
    kind = ErrorKind.NOT_FOUND
