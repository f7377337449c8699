# tests/test_store.py

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from taskcache.models import Task, TaskCreate, TaskUpdate
from taskcache.store import TaskStore


def _new(title: str = "t", completed: bool = False) -> TaskCreate:
    return TaskCreate(title=title, completed=completed)


def test_ids_increase_and_are_never_reused(store: TaskStore) -> None:
    ids = [store.add(_new()) for _ in range(3)]
    assert ids == [1, 2, 3]

    assert store.delete(3)
    assert store.delete(2)

    assert store.add(_new()) == 4
    assert store.add(_new()) == 5


def test_get_returns_copy(store: TaskStore) -> None:
    task_id = store.add(_new("buy milk"))

    task = store.get(task_id)
    assert task == Task(id=task_id, title="buy milk", completed=False)

    task.title = "changed"
    assert store.get(task_id).title == "buy milk"


def test_get_missing_returns_none(store: TaskStore) -> None:
    assert store.get(1) is None


def test_update_missing_leaves_store_unchanged(store: TaskStore) -> None:
    store.add(_new("a"))
    before = store.list_all()

    assert store.update(42, TaskUpdate(title="x", completed=True)) is False

    assert store.list_all() == before
    assert store.get(42) is None
    # update never allocates ids
    assert store.add(_new()) == 2


def test_update_keeps_path_id(store: TaskStore) -> None:
    task_id = store.add(_new("a"))

    assert store.update(task_id, Task(id=99, title="b", completed=True))

    assert store.get(task_id) == Task(id=task_id, title="b", completed=True)
    assert store.get(99) is None


def test_delete_twice(store: TaskStore) -> None:
    task_id = store.add(_new())

    assert store.delete(task_id) is True
    assert store.delete(task_id) is False
    assert len(store) == 0


def test_list_all_is_a_snapshot(store: TaskStore) -> None:
    store.add(_new("a"))
    store.add(_new("b"))

    snapshot = store.list_all()
    store.add(_new("c"))
    for task in snapshot:
        task.title = "mutated"

    assert len(snapshot) == 2
    assert sorted(t.title for t in store.list_all()) == ["a", "b", "c"]


def test_custom_first_id() -> None:
    store = TaskStore(first_id=10)
    assert store.add(_new()) == 10
    assert store.add(_new()) == 11


def test_concurrent_adds_get_distinct_ids(store: TaskStore) -> None:
    n = 500
    with ThreadPoolExecutor(max_workers=16) as pool:
        ids = list(pool.map(lambda i: store.add(_new(f"task {i}")), range(n)))

    assert sorted(ids) == list(range(1, n + 1))
    assert len(store) == n
    assert {t.id for t in store.list_all()} == set(ids)


def test_concurrent_readers_never_see_torn_records(store: TaskStore) -> None:
    task_id = store.add(TaskCreate(title="even", completed=False))
    stop = threading.Event()
    bad: list[Task] = []

    def writer() -> None:
        for i in range(2000):
            if i % 2:
                store.update(task_id, TaskUpdate(title="odd", completed=True))
            else:
                store.update(task_id, TaskUpdate(title="even", completed=False))
        stop.set()

    def reader() -> None:
        while not stop.is_set():
            task = store.get(task_id)
            if (task.title == "odd") != task.completed:
                bad.append(task)

    threads = [threading.Thread(target=reader) for _ in range(4)]
    threads.append(threading.Thread(target=writer))
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30)

    assert bad == []
    assert store.get(task_id).id == task_id
