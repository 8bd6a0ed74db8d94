"""CLI commands for the EyeLevel tracker.

Commands:
- extract: Extract level/book from text
- scan: OCR a workbook photo, confirm fields, optionally record the entry
- add-student / students: Manage the student registry
- record / history / delete-entry: Manage progress entries
- chart: Show a student's progress per subject
- serve: Run the Web API
"""

import base64
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from eyelevel.config.app_config import load_app_config, storage_db_path
from eyelevel.core.chart import CategorySection, build_dashboard
from eyelevel.core.extraction import ExtractionResult, extract
from eyelevel.core.records import (
    Category,
    DataCorruptionError,
    RecordStore,
    RecordStoreError,
    StudentRegistry,
)
from eyelevel.db.kv_store import SqliteKeyValueStore, StorageUnavailableError
from eyelevel.ocr.client import OcrClient, OcrServiceError, analyze

app = typer.Typer(
    name="eyelevel",
    help="Track workbook levels and error counts from photos.",
    no_args_is_help=True,
)

console = Console()

SPARK_BLOCKS = "▁▂▃▄▅▆▇█"


def _open_store() -> tuple[RecordStore, StudentRegistry]:
    kv = SqliteKeyValueStore(storage_db_path())
    return RecordStore(kv), StudentRegistry(kv)


def _parse_category_or_exit(name: str) -> Category:
    try:
        return Category.parse(name)
    except RecordStoreError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


def _fail(error: Exception) -> None:
    """Print a short notice for a store error and exit."""
    if isinstance(error, StorageUnavailableError):
        console.print("[red]✗ Operation failed, please retry later[/red]")
    elif isinstance(error, DataCorruptionError):
        console.print(f"[red]✗ Stored data is corrupted ({error.key})[/red]")
    else:
        console.print(f"[red]✗ {error}[/red]")
    raise typer.Exit(code=1)


def _print_extraction(result: ExtractionResult) -> None:
    if result.outcome == "complete":
        console.print(f"[green]✓ Level {result.level}, Book {result.book}[/green]")
    elif result.outcome == "partial":
        console.print("[yellow]⚠ Partially read, please check the missing field[/yellow]")
    else:
        console.print("[red]✗ Could not read level or book, please enter them[/red]")
    console.print(f"  [dim]level:[/dim] {result.level or '-'}")
    console.print(f"  [dim]book:[/dim]  {result.book or '-'}")


def _sparkline(values: list[int]) -> str:
    low, high = min(values), max(values)
    span = (high - low) or 1
    top = len(SPARK_BLOCKS) - 1
    return "".join(SPARK_BLOCKS[round((v - low) / span * top)] for v in values)


def _print_section(section: CategorySection) -> None:
    console.print(f"\n[bold {section.color}]{section.title}[/bold {section.color}]")

    if section.series is None:
        console.print("  [dim italic]Add more books to see progress graph.[/dim italic]")
    else:
        values = [p.y for p in section.series]
        console.print(f"  {_sparkline(values)}  [dim]({values[0]} → {values[-1]} errors)[/dim]")

    if not section.history:
        return

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Date")
    table.add_column("Book")
    table.add_column("Errors", justify="right")
    table.add_column("ID", style="dim")
    for entry in section.history:
        table.add_row(entry.date, entry.label, str(entry.value), entry.id)
    console.print(table)


# =============================================================================
# EXTRACTION COMMANDS
# =============================================================================


@app.command(name="extract")
def extract_text(
    text: str | None = typer.Argument(None, help="Recognized text to analyze"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Read text from a file"),
) -> None:
    """Extract level and book from recognized text."""
    if file is not None:
        if not file.exists():
            console.print(f"[red]✗ File not found: {file}[/red]")
            raise typer.Exit(code=1)
        text = file.read_text(encoding="utf-8")

    _print_extraction(extract(text))


@app.command()
def scan(
    image: Path = typer.Argument(..., help="Photo of the workbook (JPEG)"),
    student: str | None = typer.Option(None, "--student", "-s", help="Student to record for"),
    category: str = typer.Option("BTM", "--category", "-c", help="BTM, CTM or English"),
    errors: str | None = typer.Option(None, "--errors", "-e", help="Error count"),
    date: str | None = typer.Option(None, "--date", "-d", help="Date (default: today)"),
    save: bool = typer.Option(False, "--save", help="Record the confirmed entry"),
) -> None:
    """OCR a workbook photo and extract level/book."""
    if not image.exists():
        console.print(f"[red]✗ File not found: {image}[/red]")
        raise typer.Exit(code=1)

    image_base64 = base64.b64encode(image.read_bytes()).decode("ascii")

    try:
        with OcrClient() as client:
            result = analyze(image_base64, client)
    except OcrServiceError:
        console.print("[red]✗ OCR service unavailable, retry later[/red]")
        raise typer.Exit(code=1)

    console.print("[dim]Recognized text:[/dim]")
    console.print(result.raw_text.strip() or "[dim](empty)[/dim]")
    _print_extraction(result.extracted)

    if not save:
        return

    resolved = _parse_category_or_exit(category)
    store, registry = _open_store()

    try:
        if student is None:
            student = typer.prompt("Student", default=registry.list()[0])
        level = typer.prompt("Level", default=result.extracted.level or None)
        book = typer.prompt("Book", default=result.extracted.book or None)
        if errors is None:
            errors = typer.prompt("Errors")
        entry = store.record(student, resolved, level, book, errors, date)
    except (RecordStoreError, StorageUnavailableError) as e:
        _fail(e)

    console.print(f"[green]✓ {resolved.value} entry for {student} saved[/green]")
    console.print(f"  [dim]id:[/dim] {entry.id}  [dim]label:[/dim] {entry.label}")


# =============================================================================
# STUDENT COMMANDS
# =============================================================================


@app.command(name="add-student")
def add_student(
    name: str = typer.Argument(..., help="Student name"),
) -> None:
    """Add a student to the registry."""
    _, registry = _open_store()

    try:
        students = registry.add(name)
    except (RecordStoreError, StorageUnavailableError) as e:
        _fail(e)

    console.print(f"[green]✓ Student added: {name.strip()}[/green] ({len(students)} total)")


@app.command(name="students")
def list_students() -> None:
    """List registered students."""
    _, registry = _open_store()

    try:
        students = registry.list()
    except (RecordStoreError, StorageUnavailableError) as e:
        _fail(e)

    console.print(f"\n[bold]Students ({len(students)}):[/bold]")
    for name in students:
        console.print(f"  - {name}")


# =============================================================================
# ENTRY COMMANDS
# =============================================================================


@app.command()
def record(
    student: str = typer.Argument(..., help="Student name"),
    category: str = typer.Argument(..., help="BTM, CTM or English"),
    level: str = typer.Option(..., "--level", "-l", help="Workbook level (A-M)"),
    book: str = typer.Option(..., "--book", "-b", help="Workbook number"),
    errors: str = typer.Option(..., "--errors", "-e", help="Error count"),
    date: str | None = typer.Option(None, "--date", "-d", help="Date (default: today)"),
) -> None:
    """Record a progress entry."""
    resolved = _parse_category_or_exit(category)
    store, _ = _open_store()

    try:
        entry = store.record(student, resolved, level, book, errors, date)
    except (RecordStoreError, StorageUnavailableError) as e:
        _fail(e)

    console.print(f"[green]✓ {resolved.value} entry for {student} saved[/green]")
    console.print(f"  [dim]id:[/dim]    {entry.id}")
    console.print(f"  [dim]label:[/dim] {entry.label}")
    console.print(f"  [dim]date:[/dim]  {entry.date}")


@app.command()
def history(
    student: str = typer.Argument(..., help="Student name"),
    category: str = typer.Argument(..., help="BTM, CTM or English"),
) -> None:
    """List entries of a partition in insertion order."""
    resolved = _parse_category_or_exit(category)
    store, _ = _open_store()

    try:
        entries = store.list(student, resolved)
    except (RecordStoreError, StorageUnavailableError) as e:
        _fail(e)

    if not entries:
        console.print(f"[yellow]No {resolved.value} entries for {student}[/yellow]")
        return

    table = Table(title=f"{student} · {resolved.display_title}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("ID")
    table.add_column("Date")
    table.add_column("Book")
    table.add_column("Errors", justify="right")
    for index, entry in enumerate(entries, start=1):
        table.add_row(str(index), entry.id, entry.date, entry.label, str(entry.value))
    console.print(table)


@app.command(name="delete-entry")
def delete_entry(
    student: str = typer.Argument(..., help="Student name"),
    category: str = typer.Argument(..., help="BTM, CTM or English"),
    entry_id: str = typer.Argument(..., help="Entry ID (see 'history')"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Remove an entry from a partition."""
    resolved = _parse_category_or_exit(category)
    store, _ = _open_store()

    if not yes:
        if not typer.confirm("Are you sure you want to remove this record?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(code=0)

    try:
        removed = store.delete(student, resolved, entry_id)
    except (RecordStoreError, StorageUnavailableError) as e:
        _fail(e)

    if removed:
        console.print(f"[green]✓ Entry {entry_id} removed[/green]")
    else:
        console.print(f"[yellow]Entry {entry_id} not found, nothing removed[/yellow]")


@app.command()
def chart(
    student: str = typer.Argument(..., help="Student name"),
) -> None:
    """Show progress charts and history for every subject."""
    store, _ = _open_store()

    try:
        sections = build_dashboard(store, student)
    except (RecordStoreError, StorageUnavailableError) as e:
        _fail(e)

    console.print(f"[bold]Progress Dashboard · {student}[/bold]")
    for section in sections:
        _print_section(section)


# =============================================================================
# SERVER
# =============================================================================


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default: $PORT or 3000)"),
) -> None:
    """Run the Web API with uvicorn."""
    import uvicorn

    config = load_app_config()
    uvicorn.run(
        "eyelevel.web.api:create_app",
        factory=True,
        host=host or config.server.host,
        port=port or config.server.port,
    )


if __name__ == "__main__":
    app()
