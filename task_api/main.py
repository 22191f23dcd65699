# task_api/main.py  (entrypoint: uvicorn task_api.main:app)
import logging
import platform
import time
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv

# .env before Settings() is read
load_dotenv()

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402
from starlette.exceptions import HTTPException as StarletteHTTPException  # noqa: E402

from task_api.core.config import Settings, get_settings  # noqa: E402
from task_api.core.errors import (  # noqa: E402
    ENDPOINT_NOT_FOUND_MESSAGE,
    INTERNAL_ERROR_MESSAGE,
    INVALID_BODY_MESSAGE,
    TaskError,
)
from task_api.core.logging_config import setup_logging  # noqa: E402
from task_api.db.memory_store import MemoryStore  # noqa: E402
from task_api.routers import health, task  # noqa: E402
from task_api.services.task_service import TaskService  # noqa: E402

logger = logging.getLogger(__name__)

PAGINATION_HEADERS = ["X-Total-Count", "X-Total-Pages", "X-Page", "X-Page-Size"]


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(TaskError)
    async def task_error_handler(request: Request, exc: TaskError):
        logger.warning(
            "Requisição rejeitada kind=%s method=%s path=%s error=%s",
            exc.kind.value, request.method, request.url.path, exc.message,
        )
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            "Corpo inválido method=%s path=%s errors=%s",
            request.method, request.url.path, exc.errors(),
        )
        return _error(400, INVALID_BODY_MESSAGE)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # unknown path and known path with the wrong method both read as "no such endpoint"
        if exc.status_code in (404, 405):
            return _error(404, ENDPOINT_NOT_FOUND_MESSAGE)
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Erro não capturado na aplicação method=%s path=%s",
            request.method, request.url.path,
        )
        return _error(500, INTERNAL_ERROR_MESSAGE)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build an app with its own store; tests call this once per case."""
    settings = settings or get_settings()
    setup_logging(settings.resolved_log_level, json_format=settings.is_production)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Servidor iniciado com sucesso port=%s environment=%s python=%s",
            settings.port, settings.app_env, platform.python_version(),
        )
        yield
        logger.info("Encerrando servidor graciosamente tasks=%d", app.state.store.count())

    app = FastAPI(
        title="Task API",
        version=settings.app_version,
        lifespan=lifespan,
    )

    store = MemoryStore()
    app.state.settings = settings
    app.state.store = store
    app.state.task_service = TaskService(store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=PAGINATION_HEADERS,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        # an exception escaping the route is answered with a 500 further out
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "Requisição HTTP processada method=%s url=%s statusCode=%s duration=%.1fms userAgent=%r ip=%s",
                request.method,
                request.url.path,
                status_code,
                duration_ms,
                request.headers.get("user-agent"),
                request.client.host if request.client else None,
            )

    _register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(task.router)
    return app


app = create_app()


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
