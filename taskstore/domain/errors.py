### COMMENTS
# ============================================
# Konwencja użycia błędów domenowych w projekcie
# ============================================
# - Repozytoria (adaptery):
#     * wykrywają kolizje identyfikatorów lub brak rekordów
#     * mapują rozpoznane błędy techniczne (np. IntegrityError) na DomainError
#     * błędy I/O i silnika bazy przepuszczają dalej bez zmian
#
# - Serwis (TaskService):
#     * waliduje dane wejściowe i rzuca TaskValidationError
#     * jeśli get() zwraca None, a operacja wymaga istniejącego zadania → TaskNotFoundError
#
# - Warstwa zewnętrzna (CLI, HTTP):
#     * łapie DomainError i pokazuje przyjazny komunikat
#     * `status_code` podpowiada kod HTTP (400 / 404 / 409)


class DomainError(Exception):
    """Bazowa klasa dla błędów domenowych.
    Odróżnia błędy logiki aplikacji od błędów technicznych (baza danych, I/O).
    Nie powinna być rzucana bezpośrednio: używaj klas pochodnych.
    """
    status_code: int = 400


class TaskAlreadyExistsError(DomainError):
    """Rzucany przez `TaskRepository.add()`, gdy rekord o tym samym `id` już istnieje."""
    status_code = 409

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(self.__str__())

    def __str__(self):
        return f"Zadanie o ID {self.task_id} juz istnieje."


class TaskValidationError(DomainError):
    """Rzucany, gdy dane wejściowe nie spełniają reguł dla zadania.
    Przykłady:
    - tytuł lub opis jest pusty,
    - status spoza zamkniętego zestawu wartości,
    - nieznane pole w danych wejściowych.

    Zbiera wszystkie błędne pola naraz: `errors` mapuje nazwę pola na komunikat,
    `fields` zwraca same nazwy (w kolejności wykrycia).
    Dla wygody przyjmuje też pojedynczą parę `(field, message)`.
    """
    status_code = 400

    def __init__(self, field: str | dict[str, str], message: str | None = None):
        if isinstance(field, dict):
            self.errors = dict(field)
        else:
            self.errors = {field: message or "niepoprawna wartosc"}
        super().__init__(self.__str__())

    @property
    def fields(self) -> list[str]:
        return list(self.errors)

    @property
    def field(self) -> str:
        return self.fields[0]

    def __str__(self):
        details = "; ".join(f"'{name}': {msg}" for name, msg in self.errors.items())
        return f"Błąd walidacji pól {details}"


class TaskNotFoundError(DomainError):
    """Rzucany, gdy żądane zadanie nie istnieje w repozytorium.
    Dotyczy `find_one()`, `update()` i `remove()`: usunięcie nieistniejącego
    zadania to błąd, a nie no-op.
    """
    status_code = 404

    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(self.__str__())

    def __str__(self):
        return f"Zadanie o ID {self.task_id} nie istnieje."
