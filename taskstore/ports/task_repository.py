from typing import Protocol, Optional, Literal
from taskstore.domain.task import Task, TaskId


### COMMENTS
# ==========================================================
# Kontrakt repozytorium zadań (ports/task_repository.py).
# ==========================================================
# Interfejs (Protocol) warstwy trwałości: "abstrakcyjny magazyn rekordów"
# z wyszukiwaniem po id, wstawianiem, podmianą, usuwaniem i listowaniem.
# - Niezależny od technologii (pamięć, plik JSONL, baza SQL).
# - Adaptery mapują rozpoznane błędy technologiczne na błędy domenowe
#   (np. UNIQUE → TaskAlreadyExistsError, brak rekordu → TaskNotFoundError).
# - Repozytorium nie waliduje danych (to robi serwis).
# - Listowanie ma stabilną kolejność dzięki tiebreakerowi po id (ASC).

OrderBy = Literal["id", "created_at", "title"]
ORDER_FIELDS = ("id", "created_at", "title")


class TaskRepository(Protocol):
    """Interfejs repozytorium do zapisu i odczytu obiektów `Task`.

    Adaptery (implementacje) muszą:
    - zapewnić atomowość operacji zapisu,
    - mapować błędy technologiczne na błędy domenowe,
    - stosować stabilne sortowanie (tiebreaker po `id` rosnąco),
    - nie wykonywać walidacji biznesowych (te należą do warstwy serwisu).
    """

    def add(self, task: Task) -> Task:
        """Dodaje nowy rekord `Task` i zwraca go w postaci zapisanej.

        - `task.id is None`: repozytorium nadaje świeże id w tej samej
          atomowej operacji co zapis (równoległe `add` nie dostaną tego samego id).
        - `task.id` podane: zapis pod tym id.

        Wyjątki domenowe:
            TaskAlreadyExistsError: Gdy podano `id`, a wpis o tym `id` już istnieje.

        Uwagi:
            Ponowne użycie id usuniętego rekordu jest dozwolone, ale nie wymagane.
        """

    def get(self, task_id: TaskId) -> Optional[Task]:
        """Zwraca zadanie o podanym `id` albo `None`.

        Wyjątki domenowe:
            Brak, to odczyt; brak rekordu interpretuje serwis.
        """

    def update(self, task: Task) -> None:
        """Pełna podmiana istniejącego rekordu o danym `id`.

        Wyjątki domenowe:
            TaskNotFoundError: Gdy rekord z `id` nie istnieje.

        Uwagi:
            Repozytorium nie „skleja” pól: zapisuje kompletny obiekt.
        """

    def remove(self, task_id: TaskId) -> None:
        """Usuwa (hard delete) rekord o podanym `id`.

        Wyjątki domenowe:
            TaskNotFoundError: Gdy rekord z `id` nie istnieje.

        Uwagi:
            Idempotencja nie jest wymagana: brak rekordu to błąd domenowy.
        """

    def list_all(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[OrderBy] = None,
    ) -> list[Task]:
        """Zwraca posortowaną listę zadań z paginacją.

        Parametry:
            limit: Maksymalna liczba wyników; `None` = bez ograniczenia.
            offset: Przesunięcie od początku posortowanej listy; `None` = 0.
            order_by: Główne kryterium sortowania (ASC); `None` = `"id"`.

        Sortowanie:
            Najpierw po `order_by`, potem tiebreaker po `id` (ASC).
            Paginacja ZAWSZE po sortowaniu.
        """

    def count_all(self) -> int:
        """Zwraca liczbę wszystkich rekordów (do paginacji)."""

    def exists(self, task_id: TaskId) -> bool:
        """Szybkie sprawdzenie istnienia rekordu o `id`."""
