from taskstore.ports.task_repository import TaskRepository, ORDER_FIELDS, OrderBy
from taskstore.domain.task import Task, TaskId
from taskstore.domain.errors import TaskAlreadyExistsError, TaskNotFoundError, TaskValidationError
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional
import logging
import threading
import os, json

logger = logging.getLogger(__name__)

# jedna blokada na plik: odczyt-modyfikacja-zapis nie przeplata się między wątkami
_LOCKS: dict[Path, threading.RLock] = {}
_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.RLock:
    key = path.resolve()
    with _LOCKS_GUARD:
        return _LOCKS.setdefault(key, threading.RLock())


def _encode_task(task: Task) -> str:
    return json.dumps(task.to_dict(), ensure_ascii=False)


def _decode_task(record: dict) -> Task:
    return Task.from_dict(record)


class JsonlTaskRepository(TaskRepository):
    def __init__(self, path: Path) -> None:
        """Inicjalizuje repozytorium JSONL.
        Tworzy katalog nadrzędny dla pliku, jeśli nie istnieje."""
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = _lock_for(self.path)

    def _load_tasks(self) -> dict[int, Task]:
        """Wczytuje cały plik.
        Uszkodzona linia to błąd magazynu (ValueError z plik:linia), nie błąd danych klienta."""
        tasks: dict[int, Task] = {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                for lineno, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        record = json.loads(line)
                    except json.JSONDecodeError as e:
                        raise ValueError(f"{self.path.name}:{lineno}: invalid JSON: {e}") from e

                    try:
                        task = _decode_task(record)
                    except (KeyError, TypeError, ValueError) as e:
                        raise ValueError(f"{self.path.name}:{lineno}: {e}") from e

                    key = int(task.id)
                    if key in tasks:
                        raise ValueError(f"{self.path.name}:{lineno}: duplicate id '{key}'")
                    tasks[key] = task
        except FileNotFoundError:
            return {}
        return tasks

    def _atomic_dump(self, tasks: Iterable[Task]) -> None:
        tmp = self.path.with_suffix(self.path.suffix + ".swap")
        try:
            with tmp.open("w", encoding="utf-8", newline="\n") as f:
                for t in sorted(tasks, key=lambda t: t.id):
                    f.write(_encode_task(t))
                    f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self.path)
        except OSError:
            logger.exception("Nie udalo sie zapisac %s", self.path)
            try:
                tmp.unlink()
            except OSError:
                pass
            raise

    def add(self, task: Task) -> Task:
        """Dodaje nowy Task do repozytorium.
        Bez id nadaje max(id)+1 w tym samym odczycie-zapisie (pod blokadą pliku).
        Rzuca TaskAlreadyExistsError, jeśli podane id już istnieje.
        Zapisuje dane w sposób atomowy."""
        with self._lock:
            tasks = self._load_tasks()
            if task.id is None:
                task = replace(task, id=TaskId(max(tasks, default=0) + 1))
            key = int(task.id)
            if key in tasks:
                raise TaskAlreadyExistsError(task.id)
            tasks[key] = task
            self._atomic_dump(tasks.values())
        return task

    def get(self, task_id: TaskId) -> Optional[Task]:
        return self._load_tasks().get(int(task_id))

    def update(self, task: Task) -> None:
        with self._lock:
            tasks = self._load_tasks()
            key = int(task.id)
            if key not in tasks:
                raise TaskNotFoundError(task.id)
            tasks[key] = task
            self._atomic_dump(tasks.values())

    def remove(self, task_id: TaskId) -> None:
        """Usuwa Task o podanym ID.
        Rzuca TaskNotFoundError, jeśli nie istnieje.
        Zapis wykonywany atomowo."""
        with self._lock:
            tasks = self._load_tasks()
            key = int(task_id)
            if key not in tasks:
                raise TaskNotFoundError(task_id)
            del tasks[key]
            self._atomic_dump(tasks.values())

    def list_all(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[OrderBy] = None,
    ) -> list[Task]:
        """Zwraca listę Tasków posortowaną rosnąco po `order_by`,
        z tiebreakerem po id. Następnie stosuje paginację offset/limit."""
        order = order_by or "id"
        if order not in ORDER_FIELDS:
            raise TaskValidationError("order_by", f"Nieobsługiwane pole: {order}")

        tasks = sorted(self._load_tasks().values(), key=lambda t: (getattr(t, order), t.id))

        start = max(0, int(offset or 0))
        if limit is None:
            return tasks[start:]
        if limit <= 0:
            return []
        return tasks[start:start + int(limit)]

    def count_all(self) -> int:
        return len(self._load_tasks())

    def exists(self, task_id: TaskId) -> bool:
        return int(task_id) in self._load_tasks()
