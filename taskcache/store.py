import logging

from taskcache.core.rwlock import ReadWriteLock
from taskcache.models import Task, TaskBase

logger = logging.getLogger(__name__)


class TaskStore:
    """
    In-memory source of truth for tasks.

    Maps task id -> Task plus a counter for the next id. Ids start at 1 and
    are never reused, even after a delete. Reads share the lock, writes hold
    it exclusively; every method returns copies so callers never see (or
    mutate) the stored records.
    """

    def __init__(self, first_id: int = 1):
        self._lock = ReadWriteLock()
        self._tasks: dict[int, Task] = {}
        self._next_id = first_id

    def add(self, task: TaskBase) -> int:
        with self._lock.write_locked():
            task_id = self._next_id
            self._tasks[task_id] = Task(
                id=task_id, title=task.title, completed=task.completed
            )
            self._next_id += 1
        logger.debug(f"Stored task {task_id}")
        return task_id

    def get(self, task_id: int) -> Task | None:
        with self._lock.read_locked():
            task = self._tasks.get(task_id)
            return task.model_copy() if task is not None else None

    def update(self, task_id: int, task: TaskBase) -> bool:
        with self._lock.write_locked():
            if task_id not in self._tasks:
                return False
            self._tasks[task_id] = Task(
                id=task_id, title=task.title, completed=task.completed
            )
        logger.debug(f"Updated task {task_id}")
        return True

    def delete(self, task_id: int) -> bool:
        with self._lock.write_locked():
            if self._tasks.pop(task_id, None) is None:
                return False
        logger.debug(f"Deleted task {task_id}")
        return True

    def list_all(self) -> list[Task]:
        with self._lock.read_locked():
            return [task.model_copy() for task in self._tasks.values()]

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._tasks)
