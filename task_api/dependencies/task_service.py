from fastapi import Request

from task_api.services.task_service import TaskService


def get_task_service(request: Request) -> TaskService:
    """FastAPI Depends(get_task_service): the service wired in create_app()."""
    return request.app.state.task_service
