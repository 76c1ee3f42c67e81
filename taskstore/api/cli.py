from taskstore.domain.errors import TaskNotFoundError, TaskValidationError, DomainError
from taskstore.domain.task import Task, TaskId
from taskstore.domain.enums import TaskStatus
from taskstore.services.task_service import TaskService
from taskstore.adapters.memory.task_repo import InMemoryTaskRepository
from taskstore.adapters.jsonl.task_repo import JsonlTaskRepository
from taskstore.adapters.sql.task_repo import SqlTaskRepository
from taskstore.config import Settings, load_settings
from taskstore.logging_setup import setup_logging
from typer import Argument, Exit, Option, Typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from math import ceil
from pathlib import Path
from typing import Optional


### COMMENTS
# ==========================================================
# CLI (Typer + Rich): interfejs użytkownika dla Task Store.
# ==========================================================
# - Mapuje komendy na operacje TaskService (list/show/add/update/rm).
# - Id parsowane jako int przez Typer, zanim trafi do serwisu.
# - Łapie DomainError, drukuje czerwony panel i kończy z kodem 1.
# - Zła konfiguracja (zmienne TASKSTORE_*) kończy się kodem 2 przed każdą komendą.
# - Zero logiki biznesowej: deleguj do TaskService.


app = Typer(help="Tasks CLI (aberto / fazendo / finalizado)")
console = Console()

service: TaskService | None = None  # ustawimy w callbacku

STATUS_STYLE = {
    TaskStatus.ABERTO: "red",
    TaskStatus.FAZENDO: "blue",
    TaskStatus.FINALIZADO: "green",
}


def build_service(settings: Settings) -> TaskService:
    """Tworzy serwis na bazie wybranego adaptera (memory / jsonl / sql)."""
    if settings.backend == "jsonl":
        repo = JsonlTaskRepository(settings.data_file)
    elif settings.backend == "sql":
        repo = SqlTaskRepository(settings.database_url)
    else:
        repo = InMemoryTaskRepository()
    return TaskService(repo)


@app.callback()
def main(
    file: Optional[Path] = Option(
        None,
        "--file",
        "-f",
        help="Ścieżka do pliku JSONL (włącza tryb trwały)",
    ),
    db_url: Optional[str] = Option(
        None,
        "--db",
        help="URL bazy SQLAlchemy, np. sqlite:///data/tasks.db",
    ),
) -> None:
    """Bootstrap zależności na starcie procesu CLI."""
    global service
    try:
        settings = load_settings()
    except ValueError as e:
        console.print(Panel.fit(f"❌ {e}", title="Błąd konfiguracji", border_style="red"))
        raise Exit(code=2)
    if file:
        settings = settings.with_overrides(backend="jsonl", data_file=file)
    elif db_url:
        settings = settings.with_overrides(backend="sql", database_url=db_url)
    setup_logging(settings.log_level, settings.log_dir)
    service = build_service(settings)


def color_status(status: TaskStatus) -> str:
    """Zwraca status w Rich-markup z kolorem."""
    style = STATUS_STYLE.get(status)
    if style is None:
        return str(status)
    return f"[{style}]{status}[/]"


def render_list(items: list[Task], total: int, page: int, page_size: int) -> None:
    table = Table(show_lines=True, header_style="bold")
    table.add_column("ID", no_wrap=True, style="cyan")
    table.add_column("Title")
    table.add_column("Description")
    table.add_column("Updated At", no_wrap=True, style="dim")
    table.add_column("Status", no_wrap=True)

    for t in items:
        table.add_row(
            str(t.id),
            t.title,
            t.description,
            t.updated_at.strftime("%Y-%m-%d %H:%M"),
            color_status(t.status),
        )

    pages = max(1, ceil(total / page_size))
    console.print(table)
    console.print(f"[dim]Strona {page}/{pages} • Razem: {total} • Page size: {page_size}[/dim]")


def render_task(task: Task, title: str = "Szczegóły zadania", border_style: str = "cyan") -> None:
    console.print(Panel.fit(
        "\n".join([
            f"ID: {task.id}",
            f"Title: {task.title}",
            f"Description: {task.description}",
            f"Created: {task.created_at.isoformat()}",
            f"Updated: {task.updated_at.isoformat()}",
            f"Status: {color_status(task.status)}",
        ]),
        title=title,
        border_style=border_style,
    ))


def fail(e: DomainError) -> None:
    """Drukuje panel błędu i kończy komendę kodem 1."""
    if isinstance(e, TaskNotFoundError):
        console.print(Panel.fit(
            f"❌ {e}\n[dim]Użyj 'taskstore list', żeby znaleźć poprawne ID[/]",
            title="Nie znaleziono",
            border_style="red",
        ))
    elif isinstance(e, TaskValidationError):
        body = "\n".join(f"• {name}: {msg}" for name, msg in e.errors.items())
        console.print(Panel.fit(
            f"❌ Niepoprawne dane\n{body}",
            title="Błąd walidacji",
            border_style="red",
        ))
    else:
        console.print(Panel.fit(f"❌ {e}", title="Błąd domenowy", border_style="red"))
    raise Exit(code=1)


@app.command("list")
def list_cmd(
    page: int = Option(1, "--page", "-p", min=1),
    page_size: int = Option(20, "--page-size", "-s", min=1),
    order_by: Optional[str] = Option(None, "--order-by", "-o", help="id | created_at | title"),
) -> None:
    """Listuje zadania z paginacją."""
    try:
        items, total = service.find_page(page=page, page_size=page_size, order_by=order_by)
    except DomainError as e:
        fail(e)
    render_list(items, total, page, page_size)


@app.command("show")
def show(task_id: int = Argument(..., help="ID zadania")) -> None:
    """Pokazuje szczegóły pojedynczego zadania."""
    try:
        task = service.find_one(TaskId(task_id))
    except DomainError as e:
        fail(e)
    render_task(task)


@app.command("add")
def add(
    title: str,
    description: str,
    status: Optional[str] = Option(None, "--status", help="aberto | fazendo | finalizado"),
) -> None:
    """Dodaje nowe zadanie (status domyślnie 'aberto')."""
    data = {"title": title, "description": description}
    if status is not None:
        data["status"] = status
    try:
        task = service.create(data)
    except DomainError as e:
        fail(e)
    render_task(task, title="✅ Dodano zadanie", border_style="green")


@app.command("update")
def update(
    task_id: int = Argument(..., help="ID zadania"),
    title: Optional[str] = Option(None, "--title", "-t"),
    description: Optional[str] = Option(None, "--description", "-d"),
    status: Optional[str] = Option(None, "--status", help="aberto | fazendo | finalizado"),
) -> None:
    """Aktualizuje tylko podane pola zadania."""
    data = {
        name: value
        for name, value in (("title", title), ("description", description), ("status", status))
        if value is not None
    }
    try:
        task = service.update(TaskId(task_id), data)
    except DomainError as e:
        fail(e)
    render_task(task, title="✅ Zaktualizowano", border_style="green")


@app.command("rm")
def rm(task_id: int = Argument(..., help="ID zadania")) -> None:
    """Usuwa zadanie. Nieistniejące ID to błąd."""
    try:
        service.remove(TaskId(task_id))
    except DomainError as e:
        fail(e)
    console.print(Panel.fit(
        f"🟡 Zadanie usunięte\nID: {task_id}",
        title="Usunięto",
        border_style="yellow",
    ))


@app.command("demo")
def demo() -> None:
    """
    Pokazowy przebieg cyklu życia zadania w jednym procesie (InMemory).

    - Tworzy 3 zadania i pokazuje listę.
    - Przestawia jedno na 'fazendo', drugie na 'finalizado'.
    - Usuwa trzecie i pokazuje listę po zmianach.
    """
    svc = TaskService(InMemoryTaskRepository())
    console.print(Panel.fit("🚀 Start demonstracji", border_style="cyan"))

    t1 = svc.create({"title": "Estudar NestJS", "description": "Aprender sobre documentação"})
    t2 = svc.create({"title": "Escrever DTOs", "description": "Validar campos de entrada"})
    t3 = svc.create({"title": "Revisar PR", "description": "Checar rotas de tarefas"})

    items, total = svc.find_page()
    console.print("\n📋 Lista po utworzeniu:")
    render_list(items, total, page=1, page_size=20)

    svc.update(t1.id, {"status": TaskStatus.FINALIZADO})
    svc.update(t2.id, {"status": TaskStatus.FAZENDO})
    svc.remove(t3.id)
    console.print(Panel.fit(f"🗑️ Usunięto zadanie: {t3.id} ({t3.title})", border_style="red"))

    items, total = svc.find_page()
    console.print("\n📋 Lista po zmianach:")
    render_list(items, total, page=1, page_size=20)

    console.print(Panel.fit("🏁 Demo zakończone", border_style="cyan"))


if __name__ == "__main__":
    app()
