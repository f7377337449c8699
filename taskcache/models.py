from pydantic import BaseModel, Field, TypeAdapter
from pydantic_core import PydanticSerializationError

from taskcache.core.exceptions import TaskSerializationError


class TaskBase(BaseModel):
    """Base model with shared fields"""

    title: str
    completed: bool = Field(default=False)


class Task(TaskBase):
    """Stored task record"""

    id: int


class TaskCreate(TaskBase):
    """Schema for creating a task. Any "id" in the payload is ignored."""

    pass


class TaskUpdate(TaskBase):
    """Schema for replacing a task's fields. The path id always wins."""

    pass


_task_list = TypeAdapter(list[Task])


def dump_task(task: Task) -> str:
    try:
        return task.model_dump_json()
    except PydanticSerializationError as e:
        raise TaskSerializationError(f"Cannot encode task {task.id}: {e}") from e


def dump_tasks(tasks: list[Task]) -> str:
    try:
        return _task_list.dump_json(tasks).decode()
    except PydanticSerializationError as e:
        raise TaskSerializationError(f"Cannot encode task list: {e}") from e
