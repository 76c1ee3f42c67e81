from taskstore.adapters.memory.task_repo import InMemoryTaskRepository
from taskstore.services.task_service import TaskService
from taskstore.domain.enums import TaskStatus
from taskstore.domain.errors import TaskNotFoundError, TaskValidationError
import pytest
from datetime import datetime, timezone, timedelta


class FakeClock:
    def __init__(self, fixed: datetime | None = None):
        # jeśli nie podamy fixed, zwróci zawsze ten sam „teraz”
        self.fixed = fixed or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    def now(self) -> datetime:
        return self.fixed


class TickingClock:
    """Każde wywołanie now() przesuwa czas o sekundę."""
    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    def now(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


VALID = {"title": "Estudar NestJS", "description": "Aprender sobre documentação"}


@pytest.fixture
def service():
    return TaskService(InMemoryTaskRepository(), FakeClock())


def test_create_task_defaults(service):
    # Act
    task = service.create(VALID)

    # Assert
    assert task.id == 1
    assert task.status == TaskStatus.ABERTO
    assert task.created_at == task.updated_at
    assert task.title == "Estudar NestJS"
    assert task.description == "Aprender sobre documentação"


def test_create_with_explicit_status(service):
    task = service.create({**VALID, "status": "fazendo"})
    assert task.status is TaskStatus.FAZENDO


def test_create_assigns_fresh_ids(service):
    ids = [service.create(VALID).id for _ in range(5)]
    assert len(set(ids)) == 5


def test_ids_are_not_reused_after_remove(service):
    t1 = service.create(VALID)
    service.remove(t1.id)
    t2 = service.create(VALID)
    assert t2.id != t1.id


def test_create_uses_clock_time():
    clock = FakeClock(datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
    svc = TaskService(InMemoryTaskRepository(), clock)

    t = svc.create(VALID)
    assert t.created_at == clock.fixed
    assert t.updated_at == clock.fixed


@pytest.mark.parametrize(
    "data, bad_fields",
    [
        ({"title": "", "description": "x"}, ["title"]),
        ({"title": "x", "description": ""}, ["description"]),
        ({"title": "   ", "description": "x"}, ["title"]),
        ({"title": "x", "description": "x", "status": "done"}, ["status"]),
        ({"title": "x"}, ["description"]),
        ({"title": "x", "description": "x", "priority": 1}, ["priority"]),
        ({"title": "", "description": "", "status": "nope"}, ["title", "description", "status"]),
    ],
)
def test_create_rejects_invalid_input(service, data, bad_fields):
    with pytest.raises(TaskValidationError) as exc:
        service.create(data)

    assert sorted(exc.value.fields) == sorted(bad_fields)
    assert service.find_all() == []


def test_find_one_round_trip(service):
    created = service.create(VALID)
    assert service.find_one(created.id) == created


@pytest.mark.parametrize("operation", ["find_one", "update", "remove"])
def test_missing_id_raises_not_found(service, operation):
    service.create(VALID)
    with pytest.raises(TaskNotFoundError) as exc:
        if operation == "update":
            service.update(999, {"status": "fazendo"})
        else:
            getattr(service, operation)(999)
    assert exc.value.task_id == 999
    assert exc.value.status_code == 404


def test_update_missing_id_reports_not_found_before_validation(service):
    with pytest.raises(TaskNotFoundError):
        service.update(42, {"status": "invalid"})


def test_partial_update_changes_only_status():
    svc = TaskService(InMemoryTaskRepository(), TickingClock())
    t = svc.create(VALID)

    updated = svc.update(t.id, {"status": "fazendo"})

    assert updated.status == TaskStatus.FAZENDO
    assert updated.title == t.title
    assert updated.description == t.description
    assert updated.created_at == t.created_at
    assert updated.updated_at > t.updated_at
    assert svc.find_one(t.id) == updated


def test_update_rejects_invalid_fields_without_mutation(service):
    t = service.create(VALID)

    with pytest.raises(TaskValidationError) as exc:
        service.update(t.id, {"title": "", "id": 7})

    assert set(exc.value.fields) == {"title", "id"}
    assert service.find_one(t.id) == t


def test_update_rejects_none_values(service):
    t = service.create(VALID)
    with pytest.raises(TaskValidationError):
        service.update(t.id, {"description": None})


def test_updated_at_strictly_increases_with_frozen_clock(service):
    t = service.create(VALID)

    u1 = service.update(t.id, {"status": "fazendo"})
    u2 = service.update(t.id, {})

    assert t.created_at <= t.updated_at < u1.updated_at < u2.updated_at
    assert u2.status == TaskStatus.FAZENDO


def test_find_all_is_idempotent(service):
    service.create(VALID)
    service.create({"title": "B", "description": "b"})

    assert service.find_all() == service.find_all()
    assert [t.id for t in service.find_all()] == [1, 2]


def test_find_all_empty(service):
    assert service.find_all() == []
    assert service.count() == 0


def test_remove_is_not_idempotent(service):
    t = service.create(VALID)
    service.remove(t.id)
    with pytest.raises(TaskNotFoundError):
        service.remove(t.id)


def test_find_page_paginates_and_counts(service):
    for title in ["C", "A", "B"]:
        service.create({"title": title, "description": "d"})

    items, total = service.find_page(page=1, page_size=2, order_by="title")
    assert total == 3
    assert [t.title for t in items] == ["A", "B"]

    items, _ = service.find_page(page=2, page_size=2, order_by="title")
    assert [t.title for t in items] == ["C"]


def test_find_page_sorted_by_created_at_then_id(service):
    service.create(VALID)
    service.create(VALID)

    items, _ = service.find_page(order_by="created_at")
    assert items == sorted(items, key=lambda t: (t.created_at, t.id))


@pytest.mark.parametrize(
    "kwargs, field",
    [
        ({"page": 0}, "pagination"),
        ({"page_size": 0}, "pagination"),
        ({"order_by": "status"}, "order_by"),
    ],
)
def test_find_page_rejects_bad_arguments(service, kwargs, field):
    with pytest.raises(TaskValidationError) as exc:
        service.find_page(**kwargs)
    assert exc.value.field == field


def test_lifecycle_scenario():
    svc = TaskService(InMemoryTaskRepository(), TickingClock())

    created = svc.create({"title": "Estudar NestJS", "description": "Aprender sobre documentação"})
    assert created.status == TaskStatus.ABERTO
    assert isinstance(created.id, int)
    assert created.created_at == created.updated_at

    finished = svc.update(created.id, {"status": "finalizado"})
    assert finished.status == TaskStatus.FINALIZADO
    assert finished.updated_at > created.updated_at
    assert (finished.title, finished.description) == (created.title, created.description)

    svc.remove(created.id)
    with pytest.raises(TaskNotFoundError):
        svc.find_one(created.id)


def test_created_at_is_utc_aware(service):
    t = service.create(VALID)
    assert t.created_at.tzinfo is not None
    assert t.created_at.utcoffset() == timedelta(0)
