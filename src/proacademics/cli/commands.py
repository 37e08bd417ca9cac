"""CLI commands for the ProAcademics admin backend.

Commands:
- init-db: Create the database schema
- serve: Run the admin API with uvicorn
- subjects: Show the subject -> program tree
- import-homework / import-lessons / import-topics: CSV imports
- export: Write a content collection to CSV
- dedupe-programs: Remove programs with duplicate names
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.tree import Tree

from proacademics.config import load_app_config
from proacademics.core.csv_export import (
    export_homework_csv,
    export_lessons_csv,
    export_past_papers_csv,
    export_topics_csv,
)
from proacademics.core.csv_parser import CsvFormatError
from proacademics.core.homework_importer import ImportValidationError, import_homework_csv
from proacademics.core.lesson_importer import commit_lessons, preview_lessons_csv
from proacademics.core.topic_vault_importer import commit_topics, preview_topics_csv
from proacademics.db.database import current_db_path, init_db
from proacademics.db.homework_repository import list_all_homework
from proacademics.db.lessons_repository import list_all_lessons
from proacademics.db.pastpapers_repository import list_all_past_papers
from proacademics.db.subjects_repository import (
    find_duplicate_programs,
    list_subjects_with_programs,
    remove_duplicate_programs,
)
from proacademics.db.topic_vault_repository import list_all_topics

app = typer.Typer(
    name="proacademics",
    help="Admin backend for ProAcademics content: homework, lessons, past papers and topics.",
    no_args_is_help=True,
)

console = Console()

EXPORTERS = {
    "homework": (list_all_homework, export_homework_csv),
    "lessons": (list_all_lessons, export_lessons_csv),
    "pastpapers": (list_all_past_papers, export_past_papers_csv),
    "topics": (list_all_topics, export_topics_csv),
}


def _read_file_or_exit(file: str) -> str:
    path = Path(file)
    if not path.exists():
        console.print(f"[red]✗ File not found: {path}[/red]")
        raise typer.Exit(code=1)
    return path.read_text(encoding="utf-8-sig")


@app.command(name="init-db")
def init_db_command(
    db: str | None = typer.Option(None, "--db", help="Database file (defaults to config)"),
) -> None:
    """Create the database and its tables."""
    init_db(Path(db) if db else None)
    console.print(f"[green]✓ Database ready: {current_db_path()}[/green]")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Run the admin API."""
    import uvicorn

    config = load_app_config()
    console.print(f"[blue]Starting {config.api.title} on http://{host}:{port}[/blue]")
    uvicorn.run("proacademics.web.api:app", host=host, port=port, reload=reload)


@app.command()
def subjects() -> None:
    """Show subjects and their programs."""
    init_db()
    records = list_subjects_with_programs()
    if not records:
        console.print("[yellow]⚠ No subjects yet[/yellow]")
        return

    tree = Tree("[bold]Subjects[/bold]")
    for subject in records:
        label = subject.name if subject.is_active else f"[dim]{subject.name} (inactive)[/dim]"
        branch = tree.add(f"{label} [dim]{subject.color}[/dim]")
        for program in subject.programs:
            suffix = "" if program.is_active else " [dim](inactive)[/dim]"
            branch.add(f"{program.name}{suffix}")
    console.print(tree)


@app.command(name="import-homework")
def import_homework(
    file: str = typer.Argument(..., help="Homework CSV (one row per question)"),
) -> None:
    """Import homework assignments from CSV."""
    text = _read_file_or_exit(file)
    init_db()

    try:
        result = import_homework_csv(text)
    except (CsvFormatError, ImportValidationError) as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Imported {result.inserted_count} homework assignments[/green]")
    console.print(f"  [dim]valid rows:[/dim]   {result.valid_rows}")
    if result.invalid_rows:
        console.print(f"  [yellow]invalid rows: {len(result.invalid_rows)}[/yellow]")
        for message in result.invalid_rows:
            console.print(f"    - {message}")


@app.command(name="import-lessons")
def import_lessons(
    file: str = typer.Argument(..., help="Lesson schedule (CSV or TSV)"),
    status: str = typer.Option("draft", "--status", "-s", help="Status for every lesson: draft, active"),
) -> None:
    """Import lessons from a schedule file; rows with errors are skipped."""
    if status not in ("draft", "active"):
        console.print(f"[red]✗ Invalid status '{status}'. Use draft or active[/red]")
        raise typer.Exit(code=1)

    text = _read_file_or_exit(file)
    init_db()

    try:
        preview = preview_lessons_csv(text, status)
    except CsvFormatError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    for row in preview.rows:
        if row.errors:
            console.print(f"  [yellow]Row {row.row}: {'; '.join(row.errors)}[/yellow]")

    valid = [row.to_dict() for row in preview.rows if not row.errors]
    if not valid:
        console.print("[red]✗ No valid lessons to import[/red]")
        raise typer.Exit(code=1)

    records = commit_lessons(valid)
    console.print(f"[green]✓ Imported {len(records)} lessons[/green]")
    if preview.skipped_rows:
        console.print(f"  [dim]skipped break rows:[/dim] {preview.skipped_rows}")


@app.command(name="import-topics")
def import_topics(
    file: str = typer.Argument(..., help="Topic vault CSV (one row per video)"),
) -> None:
    """Import topic vault videos, merging into existing topics."""
    text = _read_file_or_exit(file)
    init_db()

    try:
        preview = preview_topics_csv(text)
    except CsvFormatError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    for error in preview.errors:
        console.print(f"  [yellow]Row {error.row} {error.field}: {error.message}[/yellow]")

    if not preview.rows:
        console.print("[red]✗ No valid rows to import[/red]")
        raise typer.Exit(code=1)

    try:
        result = commit_topics(preview.rows)
    except ImportValidationError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(
        f"[green]✓ Imported {result['subtopics_added']} videos "
        f"({result['created']} new topics, {result['updated']} updated)[/green]"
    )


@app.command()
def export(
    kind: str = typer.Argument(..., help="homework, lessons, pastpapers or topics"),
    output: str | None = typer.Option(None, "--output", "-o", help="Output file (default: stdout)"),
) -> None:
    """Export a content collection to CSV."""
    if kind not in EXPORTERS:
        console.print(f"[red]✗ Unknown kind '{kind}'. Use: {', '.join(EXPORTERS)}[/red]")
        raise typer.Exit(code=1)

    init_db()
    list_records, render = EXPORTERS[kind]
    records = list_records()
    content = render(records)

    if output is None:
        typer.echo(content, nl=False)
        return

    Path(output).write_text(content, encoding="utf-8")
    console.print(f"[green]✓ Exported {len(records)} {kind} to {output}[/green]")


@app.command(name="dedupe-programs")
def dedupe_programs(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Remove programs sharing a name, keeping the oldest of each."""
    init_db()
    groups = find_duplicate_programs()
    if not groups:
        console.print("[green]✓ No duplicate programs[/green]")
        return

    for name, programs in groups.items():
        console.print(f"  {name}: {len(programs)} programs")

    if not yes and not typer.confirm("\nDelete duplicates?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    deleted, kept = remove_duplicate_programs()
    console.print(f"[green]✓ Removed {deleted} duplicate programs, kept {kept}[/green]")


if __name__ == "__main__":
    app()
