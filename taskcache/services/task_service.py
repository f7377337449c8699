import logging
import re

from taskcache.cache.decorators import invalidates, read_through
from taskcache.cache.layer import CacheLayer
from taskcache.core.config import Settings
from taskcache.core.exceptions import InvalidTaskId
from taskcache.models import Task, TaskCreate, TaskUpdate, dump_task, dump_tasks
from taskcache.store import TaskStore

logger = logging.getLogger(__name__)

ALL_TASKS_KEY = "all_tasks"

# leading zeros are allowed, as long as the value fits in a signed 64-bit int
_TASK_ID = re.compile(r"[+-]?0*[0-9]{1,19}")
_TASK_ID_MIN, _TASK_ID_MAX = -(2**63), 2**63 - 1


def task_key(task_id: int) -> str:
    return f"task:{task_id}"


def parse_task_id(raw: str) -> int:
    if not _TASK_ID.fullmatch(raw):
        raise InvalidTaskId(raw)
    task_id = int(raw)
    if not _TASK_ID_MIN <= task_id <= _TASK_ID_MAX:
        raise InvalidTaskId(raw)
    return task_id


class TaskService:
    """
    Sequences store and cache calls for each task operation.

    Reads go through the cache (read-through); writes hit the store first
    and then drop the affected task:<id> entry. The all_tasks snapshot is
    only expired by its TTL unless ``invalidate_list_on_write`` is set, so a
    list read may trail recent writes by up to ``list_ttl_seconds``.

    A concurrent get can repopulate task:<id> with the old record between a
    store write and the invalidation that follows it. That window is
    inherent to explicit invalidation and is left as is.
    """

    def __init__(self, store: TaskStore, cache: CacheLayer, settings: Settings):
        self.store = store
        self.cache = cache
        self.settings = settings

    @read_through(lambda: ALL_TASKS_KEY, ttl=lambda svc: svc.settings.list_ttl_seconds)
    async def list_tasks(self) -> str:
        return dump_tasks(self.store.list_all())

    async def create_task(self, task_data: TaskCreate) -> str:
        task_id = self.store.add(task_data)
        payload = dump_task(
            Task(id=task_id, title=task_data.title, completed=task_data.completed)
        )
        logger.info(f"Created task {task_id}")

        if self.settings.cache_on_create:
            await self.cache.set(task_key(task_id), payload, ttl=self.settings.task_ttl_seconds)
        await self._invalidate_list()
        return payload

    async def get_task(self, task_id: str) -> str | None:
        return await self._load_task(parse_task_id(task_id))

    @read_through(task_key, ttl=lambda svc: svc.settings.task_ttl_seconds)
    async def _load_task(self, task_id: int) -> str | None:
        task = self.store.get(task_id)
        if task is None:
            return None
        return dump_task(task)

    async def update_task(self, task_id: str, task_data: TaskUpdate) -> bool:
        return await self._replace_task(parse_task_id(task_id), task_data)

    @invalidates(lambda task_id, *_: task_key(task_id))
    async def _replace_task(self, task_id: int, task_data: TaskUpdate) -> bool:
        if not self.store.update(task_id, task_data):
            return False
        logger.info(f"Updated task {task_id}")
        await self._invalidate_list()
        return True

    async def delete_task(self, task_id: str) -> bool:
        return await self._remove_task(parse_task_id(task_id))

    @invalidates(task_key)
    async def _remove_task(self, task_id: int) -> bool:
        if not self.store.delete(task_id):
            return False
        logger.info(f"Deleted task {task_id}")
        await self._invalidate_list()
        return True

    async def _invalidate_list(self):
        if self.settings.invalidate_list_on_write:
            await self.cache.delete(ALL_TASKS_KEY)
