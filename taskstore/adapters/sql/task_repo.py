from __future__ import annotations
from dataclasses import replace
from typing import Optional
import logging
import sqlalchemy as db
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError
from pathlib import Path
from taskstore.ports.task_repository import TaskRepository, OrderBy
from taskstore.domain.task import Task, TaskId, encode_dt, decode_dt
from taskstore.domain.enums import TaskStatus
from taskstore.domain.errors import TaskAlreadyExistsError, TaskNotFoundError, TaskValidationError

logger = logging.getLogger(__name__)


def _ensure_sqlite_dir(db_url: str) -> None:
    # sqlite nie tworzy katalogów; ':memory:' i pusty URL nie mają pliku
    url = make_url(db_url)
    if url.get_backend_name() != "sqlite":
        return
    database = url.database
    if not database or database == ":memory:" or database.startswith("file:"):
        return
    Path(database).parent.mkdir(parents=True, exist_ok=True)


class SqlTaskRepository(TaskRepository):
    def __init__(self, url: str | Path) -> None:
        """
        url: np. 'sqlite:///data/tasks.db' lub Path do pliku (zostanie zrobiony URL)
        Katalog pliku SQLite powstaje przy starcie, także dla ścieżek względnych w URL.
        """
        db_url = f"sqlite:///{url}" if isinstance(url, Path) else str(url)
        _ensure_sqlite_dir(db_url)

        self.engine = db.create_engine(db_url, future=True)
        self.meta = db.MetaData()

        # id nadaje baza (AUTOINCREMENT: usunięte id nie wracają)
        self.tasks = db.Table(
            "tasks",
            self.meta,
            db.Column("id", db.Integer, primary_key=True, autoincrement=True),
            db.Column("title", db.String, nullable=False),
            db.Column("description", db.String, nullable=False),
            db.Column("status", db.String, nullable=False),      # 'aberto'/'fazendo'/'finalizado'
            db.Column("created_at", db.String, nullable=False),  # ISO8601 '...Z'
            db.Column("updated_at", db.String, nullable=False),
            sqlite_autoincrement=True,
        )

        # utwórz tabelę jeśli nie istnieje
        self.meta.create_all(self.engine)
        logger.debug("Repozytorium SQL gotowe: %s", self.engine.url)

    def _to_row(self, task: Task) -> dict:
        row = {
            "title": task.title,
            "description": task.description,
            "status": TaskStatus(task.status).value,
            "created_at": encode_dt(task.created_at),
            "updated_at": encode_dt(task.updated_at),
        }
        if task.id is not None:
            row["id"] = int(task.id)
        return row

    def _from_row(self, row) -> Task:
        return Task(
            id=TaskId(row["id"]),
            title=row["title"],
            description=row["description"],
            status=TaskStatus(row["status"]),
            created_at=decode_dt(row["created_at"]),
            updated_at=decode_dt(row["updated_at"]),
        )

    def add(self, task: Task) -> Task:
        """
        INSERT w jednej transakcji; bez `task.id` klucz nadaje baza
        i wraca w `inserted_primary_key`.
        """
        stmt = db.insert(self.tasks).values(**self._to_row(task))
        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
                new_id = result.inserted_primary_key[0]
        except IntegrityError:
            # konflikt PK
            raise TaskAlreadyExistsError(task.id)
        return replace(task, id=TaskId(int(new_id)))

    def get(self, task_id: TaskId) -> Optional[Task]:
        stmt = db.select(self.tasks).where(self.tasks.c.id == int(task_id))
        with self.engine.connect() as conn:
            row = conn.execute(stmt).mappings().first()
        return None if row is None else self._from_row(row)

    def update(self, task: Task) -> None:
        stmt = (
            db.update(self.tasks)
            .where(self.tasks.c.id == int(task.id))
            .values(**self._to_row(task))
        )
        with self.engine.begin() as conn:
            result = conn.execute(stmt)
            if result.rowcount == 0:
                raise TaskNotFoundError(task.id)

    def remove(self, task_id: TaskId) -> None:
        stmt = db.delete(self.tasks).where(self.tasks.c.id == int(task_id))
        with self.engine.begin() as conn:
            result = conn.execute(stmt)
            if result.rowcount == 0:
                raise TaskNotFoundError(task_id)

    def exists(self, task_id: TaskId) -> bool:
        stmt = (
            db.select(db.literal(1))
            .select_from(self.tasks)
            .where(self.tasks.c.id == int(task_id))
            .limit(1)
        )
        with self.engine.connect() as conn:
            return conn.execute(stmt).first() is not None

    def count_all(self) -> int:
        stmt = db.select(db.func.count()).select_from(self.tasks)
        with self.engine.connect() as conn:
            return int(conn.execute(stmt).scalar_one())

    def list_all(
        self,
        *,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[OrderBy] = None,
    ) -> list[Task]:
        # sortowanie stabilne: ASC + tie-breaker po id
        order = order_by or "id"
        if order == "title":
            ordering = (self.tasks.c.title.asc(), self.tasks.c.id.asc())
        elif order == "created_at":
            ordering = (self.tasks.c.created_at.asc(), self.tasks.c.id.asc())
        elif order == "id":
            ordering = (self.tasks.c.id.asc(),)
        else:
            raise TaskValidationError("order_by", f"Nieobsługiwane pole: {order}")

        stmt = db.select(self.tasks).order_by(*ordering)
        if offset and offset > 0:
            stmt = stmt.offset(int(offset))
        if limit is not None:
            if limit <= 0:
                return []
            stmt = stmt.limit(int(limit))

        with self.engine.connect() as conn:
            rows = conn.execute(stmt).mappings().all()
        return [self._from_row(r) for r in rows]
