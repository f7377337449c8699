from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from typing_extensions import Annotated

from taskcache.models import Task, TaskCreate, TaskUpdate
from taskcache.services.task_service import TaskService

router = APIRouter(prefix="/tasks", tags=["tasks"])


def get_task_service(request: Request) -> TaskService:
    return request.app.state.task_service


TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]


def _json(payload: str, status_code: int = status.HTTP_200_OK) -> Response:
    # payloads may come straight from the cache, so pass them through as-is
    return Response(content=payload, status_code=status_code, media_type="application/json")


def _not_found(task_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Task with id {task_id} not found",
    )


@router.get("", response_model=list[Task])
async def get_tasks(service: TaskServiceDep):
    """List all tasks (order is not guaranteed)"""
    return _json(await service.list_tasks())


@router.post("", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(task_data: TaskCreate, service: TaskServiceDep):
    """Create a new task"""
    return _json(await service.create_task(task_data), status.HTTP_201_CREATED)


@router.get("/{task_id}", response_model=Task)
async def get_task(task_id: str, service: TaskServiceDep):
    """Get a specific task by ID"""
    payload = await service.get_task(task_id)
    if payload is None:
        raise _not_found(task_id)
    return _json(payload)


@router.put("/{task_id}")
async def update_task(task_id: str, task_data: TaskUpdate, service: TaskServiceDep):
    """Replace a task's title and completed flag"""
    if not await service.update_task(task_id, task_data):
        raise _not_found(task_id)
    return Response(status_code=status.HTTP_200_OK)


@router.delete("/{task_id}")
async def delete_task(task_id: str, service: TaskServiceDep):
    """Delete a task"""
    if not await service.delete_task(task_id):
        raise _not_found(task_id)
    return Response(status_code=status.HTTP_200_OK)
