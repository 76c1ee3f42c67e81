from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from taskstore.domain.enums import TaskStatus
from taskstore.domain.errors import TaskValidationError


### COMMENTS
# ==========================================================
# Reguły walidacji (domain/rules.py): dane zamiast dekoratorów.
# ==========================================================
# - FIELD_RULES: nazwa pola -> (predykat, komunikat, normalizacja).
# - Zbiory pól rozpoznawanych przez operację: CREATE_FIELDS / UPDATE_FIELDS.
# - Polityka "whitelist": pole spoza zbioru = błąd, nie ciche pominięcie.
# - Zbieramy wszystkie błędy naraz i rzucamy jeden TaskValidationError.


@dataclass(frozen=True)
class FieldRule:
    check: Callable[[Any], bool]
    message: str
    normalize: Callable[[Any], Any] = lambda value: value


def _non_empty_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _known_status(value: Any) -> bool:
    if isinstance(value, TaskStatus):
        return True
    return isinstance(value, str) and value in TaskStatus.values()


FIELD_RULES: dict[str, FieldRule] = {
    "title": FieldRule(_non_empty_text, "nie moze byc pusty"),
    "description": FieldRule(_non_empty_text, "nie moze byc pusty"),
    "status": FieldRule(
        _known_status,
        f"musi byc jednym z: {', '.join(TaskStatus.values())}",
        TaskStatus,
    ),
}

CREATE_FIELDS = frozenset({"title", "description", "status"})
REQUIRED_FIELDS = frozenset({"title", "description"})
UPDATE_FIELDS = frozenset({"title", "description", "status"})


def validate_input(
    data: Mapping[str, Any],
    *,
    allowed: frozenset[str],
    required: frozenset[str] = frozenset(),
) -> dict[str, Any]:
    """
    Sprawdza dane wejściowe i zwraca ich znormalizowaną kopię.

    :param data: Pola przekazane przez wywołującego.
    :param allowed: Pola rozpoznawane przez operację.
    :param required: Pola, które muszą wystąpić.
    :raises TaskValidationError: Gdy choć jedno pole jest nieznane, brakujące lub błędne.
    """
    if not isinstance(data, Mapping):
        raise TaskValidationError("body", "oczekiwano obiektu z polami")

    errors: dict[str, str] = {}

    for name in data:
        if name not in allowed:
            errors[name] = "nieznane pole"

    for name in sorted(required):
        if name not in data:
            errors[name] = "pole wymagane"

    cleaned: dict[str, Any] = {}
    for name, value in data.items():
        if name in errors:
            continue
        rule = FIELD_RULES[name]
        if not rule.check(value):
            errors[name] = rule.message
            continue
        cleaned[name] = rule.normalize(value)

    if errors:
        raise TaskValidationError(errors)
    return cleaned
