from taskstore.ports.task_repository import TaskRepository, ORDER_FIELDS, OrderBy
from taskstore.ports.clock import Clock
from taskstore.adapters.system.clock_system import SystemClock
from taskstore.domain.task import Task, TaskId
from taskstore.domain.errors import TaskValidationError, TaskNotFoundError
from taskstore.domain.enums import TaskStatus
from taskstore.domain.rules import CREATE_FIELDS, REQUIRED_FIELDS, UPDATE_FIELDS, validate_input
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Mapping
import logging

logger = logging.getLogger(__name__)


### COMMENTS
# ==========================================================
# Warstwa serwisowa (services/task_service.py): przypadki użycia.
# ==========================================================
# Rola:
# - Orkiestracja CRUD nad portem `TaskRepository`.
# - Walidacja danych wejściowych wg reguł z `domain/rules.py`.
# - Nadawanie id, znaczników czasu i domyślnego statusu.
#
# Zasady:
# - Serwis korzysta wyłącznie z portów (repozytorium, zegar); nie zna adapterów
#   poza domyślnym SystemClock.
# - Błędy domenowe:
#     * Walidacje (puste pole, zły status, nieznane pole) → `TaskValidationError`.
#     * Brak wpisu przy find_one/update/remove → `TaskNotFoundError`.
# - Walidacja przed zapisem: odrzucone dane nie tworzą ani nie zmieniają rekordu.
# - Modele są niemutowalne (`frozen=True`), zmiana = `replace(...)` i `repo.update`.


class TaskService:
    """
    Serwis przypadków użycia dla zadań (Task Store).

    :param repo: Implementacja portu TaskRepository.
    :param clock: Źródło czasu UTC; domyślnie SystemClock.
    """
    def __init__(self, repo: TaskRepository, clock: Clock | None = None) -> None:
        self.repo = repo
        self.clock = clock or SystemClock()

    def find_all(self) -> list[Task]:
        """Wszystkie zadania, rosnąco po id. Pusta lista, gdy nie ma zadań."""
        return list(self.repo.list_all())

    def find_page(
        self,
        page: int = 1,
        page_size: int = 20,
        order_by: OrderBy | None = None,
        ) -> tuple[list[Task], int]:
        """
        Zwraca stronę zadań oraz łączną liczbę rekordów.

        - offset = (page - 1) * page_size, limit = page_size.
        - Sortowanie rosnąco po `order_by` (domyślnie "id") z tiebreakerem po id.

        :raises TaskValidationError: Gdy paginacja lub `order_by` jest niepoprawne.
        :return: (items, total)
        """
        if page < 1 or page_size < 1:
            raise TaskValidationError("pagination", "page >= 1, page_size >= 1")
        order_by = order_by or "id"
        if order_by not in ORDER_FIELDS:
            raise TaskValidationError("order_by", f"Nieobsługiwane pole: {order_by}")

        offset = (page - 1) * page_size
        total = self.repo.count_all()
        items = self.repo.list_all(limit=page_size, offset=offset, order_by=order_by)
        return list(items), total

    def count(self) -> int:
        return self.repo.count_all()

    def find_one(self, task_id: TaskId) -> Task:
        """
            Zwraca pojedyncze zadanie o wskazanym identyfikatorze.

            :raises TaskNotFoundError: Gdy nie znaleziono zadania.
        """
        task = self.repo.get(task_id)
        if task is None:
            logger.debug("Brak zadania id=%s", task_id)
            raise TaskNotFoundError(task_id)
        return task

    def create(self, data: Mapping[str, Any]) -> Task:
        """
            Tworzy nowe zadanie i zapisuje je w repozytorium.

            - Walidacja: `title` i `description` wymagane i niepuste,
              `status` (opcjonalny) z zestawu aberto/fazendo/finalizado,
              żadnych innych pól.
            - `id` nadaje repozytorium w `repo.add()` (atomowo z zapisem),
              `created_at = updated_at = clock.now()`.
            - Status startowy: "aberto", gdy nie podano.

            :param data: Pola nowego zadania.
            :return: Utworzony obiekt `Task`.
            :raises TaskValidationError: Gdy dane wejściowe są niepoprawne.
        """
        try:
            fields = validate_input(data, allowed=CREATE_FIELDS, required=REQUIRED_FIELDS)
        except TaskValidationError as e:
            logger.debug("Odrzucono create: %s", e)
            raise

        now = self.clock.now()
        draft = Task(
            id=None,
            title=fields["title"],
            description=fields["description"],
            status=fields.get("status", TaskStatus.ABERTO),
            created_at=now,
            updated_at=now,
        )
        task = self.repo.add(draft)
        logger.info("Utworzono zadanie id=%s status=%s", task.id, task.status)
        return task

    def update(self, task_id: TaskId, data: Mapping[str, Any]) -> Task:
        """
            Częściowa aktualizacja istniejącego zadania.

            - Brak zadania → `TaskNotFoundError` (sprawdzane przed walidacją danych).
            - Podane pola walidowane jak przy `create`; pominięte pozostają bez zmian.
            - `updated_at` zawsze rośnie, `created_at` i `id` nie zmieniają się.

            :raises TaskNotFoundError: Gdy nie znaleziono zadania.
            :raises TaskValidationError: Gdy dane wejściowe są niepoprawne.
        """
        current = self.find_one(task_id)
        try:
            fields = validate_input(data, allowed=UPDATE_FIELDS)
        except TaskValidationError as e:
            logger.debug("Odrzucono update id=%s: %s", task_id, e)
            raise

        updated = replace(current, **fields, updated_at=self._touch(current.updated_at))
        self.repo.update(updated)
        logger.info("Zaktualizowano zadanie id=%s pola=%s", updated.id, sorted(fields))
        return updated

    def remove(self, task_id: TaskId) -> None:
        """
            Usuwa zadanie z repozytorium (hard delete).

            :raises TaskNotFoundError: Gdy nie znaleziono zadania, to nie jest no-op.
        """
        if not self.repo.exists(task_id):
            logger.debug("Brak zadania id=%s", task_id)
            raise TaskNotFoundError(task_id)
        self.repo.remove(task_id)
        logger.info("Usunieto zadanie id=%s", task_id)

    def _touch(self, previous: datetime) -> datetime:
        # updated_at musi być ściśle większy od poprzedniego
        now = self.clock.now()
        if now > previous:
            return now
        return previous + timedelta(microseconds=1)
