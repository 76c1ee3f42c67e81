from typing import NewType
from datetime import datetime, timezone
from dataclasses import dataclass
from taskstore.domain.enums import TaskStatus

TaskId = NewType("TaskId", int)


def encode_dt(dt: datetime) -> str:
    """ISO 8601 w UTC z sufiksem 'Z'."""
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def decode_dt(s: str) -> datetime:
    """'...Z' -> aware UTC."""
    if not isinstance(s, str) or not s.endswith("Z"):
        raise ValueError(f"oczekiwano daty ISO8601 UTC z 'Z', otrzymano {s!r}")
    return datetime.fromisoformat(s.replace("Z", "+00:00")).astimezone(timezone.utc)


@dataclass(frozen=True)
class Task():
    """
    Model domenowy pojedynczego zadania; niemutowalny; status z zamkniętego zestawu wartości;
    oba znaczniki czasu w UTC dostarcza serwis (port Clock)
    """
    id: TaskId | None
    title: str
    description: str
    created_at: datetime
    updated_at: datetime
    status: TaskStatus = TaskStatus.ABERTO

    def to_dict(self) -> dict:
        """Rekord z nazwami pól używanymi na zewnątrz (createdAt/updatedAt)."""
        return {
            "id": int(self.id),
            "title": self.title,
            "description": self.description,
            "status": TaskStatus(self.status).value,
            "createdAt": encode_dt(self.created_at),
            "updatedAt": encode_dt(self.updated_at),
        }

    @classmethod
    def from_dict(cls, record: dict) -> "Task":
        return cls(
            id=TaskId(int(record["id"])),
            title=record["title"],
            description=record["description"],
            status=TaskStatus(record.get("status", TaskStatus.ABERTO.value)),
            created_at=decode_dt(record["createdAt"]),
            updated_at=decode_dt(record["updatedAt"]),
        )


### COMMENTS
# - `frozen=True`: każda zmiana to nowa instancja (dataclasses.replace) i `repo.update`.
# - Pola z wartością domyślną (status) muszą być na końcu.
# - created_at/updated_at nie mają domyślnych wartości: czas podaje serwis,
#   inaczej liczyłby się przy imporcie modułu, a nie przy tworzeniu zadania.
# - id=None tylko przed pierwszym zapisem: id nadaje repozytorium w `add()`,
#   raz i na zawsze.
# - Niezmienniki (pilnuje ich serwis): niepuste title/description,
#   created_at <= updated_at.
