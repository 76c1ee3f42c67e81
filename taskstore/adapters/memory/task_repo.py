from taskstore.domain.task import Task, TaskId
from taskstore.domain.errors import TaskAlreadyExistsError, TaskNotFoundError, TaskValidationError
from taskstore.ports.task_repository import ORDER_FIELDS, OrderBy
from dataclasses import replace
from typing import Iterable, Optional
import threading

### COMMENTS
# ==========================================================
# Adapter pamięciowy dla repozytorium zadań (adapters/memory/task_repo.py).
# ==========================================================
# - Do testów, demo i trybu bez trwałego zapisu.
# - Dane w słowniku `_data: dict[TaskId, Task]`, żyją tyle co obiekt.
# - Licznik `_last_id` rośnie monotonicznie: id usuniętych zadań nie wracają.
# - Zasady zgodne z kontraktem portu:
#     * `add`  → nadaje id pod blokadą; `TaskAlreadyExistsError`, jeśli podane id istnieje,
#     * `update` / `remove` → `TaskNotFoundError`, jeśli id nie istnieje,
#     * `list_all` → sortuje ASC + tiebreaker po `id`, potem paginacja.


class InMemoryTaskRepository:
    """
        Repozytorium w pamięci z opcjonalną kolekcją startowych zadań.
        :param initial: Iterable z obiektami Task do wstępnego załadowania.
        Przy duplikatach id obowiązuje zasada: ostatni wygrywa (to tylko seed, nie API).
    """
    def __init__(self, initial: Iterable[Task] | None = None) -> None:
        self._data: dict[TaskId, Task] = {}
        self._last_id = 0
        self._lock = threading.Lock()
        for t in (initial or []):
            self._data[t.id] = t
            self._last_id = max(self._last_id, int(t.id))

    def add(self, task: Task) -> Task:
        """
            Dodaje nowe zadanie; bez `id` dostaje kolejną wartość licznika,
            z podanym `id` kolizja rozpoznawana po kluczu.

            :raises TaskAlreadyExistsError: Jeśli zadanie o tym samym `id` już istnieje.
        """
        with self._lock:
            if task.id is None:
                task = replace(task, id=TaskId(self._last_id + 1))
            elif task.id in self._data:
                raise TaskAlreadyExistsError(task.id)
            self._data[task.id] = task
            self._last_id = max(self._last_id, int(task.id))
        return task

    def get(self, task_id: TaskId) -> Optional[Task]:
        return self._data.get(task_id)

    def update(self, task: Task) -> None:
        """
            Pełna podmiana istniejącego rekordu o danym `id`.

            :raises TaskNotFoundError: Gdy rekord z `id` nie istnieje.
        """
        if task.id not in self._data:
            raise TaskNotFoundError(task.id)
        self._data[task.id] = task

    def remove(self, task_id: TaskId) -> None:
        """
            Usuwa zadanie o wskazanym identyfikatorze.

            :raises TaskNotFoundError: Jeśli nie istnieje wpis o podanym `id`.
        """
        if task_id not in self._data:
            raise TaskNotFoundError(task_id)
        del self._data[task_id]

    def list_all(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[OrderBy] = None,
    ) -> list[Task]:
        """
        Zwraca posortowaną i paginowaną listę zadań.

        :raises TaskValidationError: Przy błędnych parametrach (order_by, offset, limit).
        """
        order_by = order_by or "id"
        offset = offset or 0

        if order_by not in ORDER_FIELDS:
            raise TaskValidationError("order_by", f"Nieobsługiwane pole: {order_by}")

        if offset < 0 or (limit is not None and limit <= 0):
            raise TaskValidationError("pagination", "Offset >= 0, limit > 0")

        tasks = sorted(self._data.values(), key=lambda t: (getattr(t, order_by), t.id))

        if limit is not None:
            return tasks[offset : offset + limit]
        return tasks[offset:]

    def count_all(self) -> int:
        return len(self._data)

    def exists(self, task_id: TaskId) -> bool:
        return task_id in self._data
