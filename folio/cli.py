"""CLI entrypoints for Folio content tooling."""

import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .cache import DocumentCache
from .config import Config, load_config
from .content import ContentParseError
from .dates import format_date
from .export import export_site
from .recommendations import InvalidArgumentError, similarity
from .repository import ContentRepository, NotFoundError, sort_by_date
from .validation import DocumentIssue, IssueSeverity, lint_workspace

console = Console()
app = typer.Typer(help="Folio blog content toolkit.")

ConfigPathOption = Annotated[
    str,
    typer.Option("--config", "-c", help="Path to configuration file or project directory."),
]
IdentifierArgument = Annotated[
    str,
    typer.Argument(..., help="Article identifier, e.g. 'go-channels'."),
]


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging."),
    ] = False,
) -> None:
    """Inspect, validate and export blog articles."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command("list")
def list_articles(config_path: ConfigPathOption = ".") -> None:
    """List every article, newest first."""
    repository = _repository(config_path)
    documents = _guard(lambda: sort_by_date(repository.get_all_documents()))

    if not documents:
        console.print("[bold yellow]No articles[/]: content directory is empty.")
        raise typer.Exit()

    table = Table(title=f"{len(documents)} article(s)")
    table.add_column("Published")
    table.add_column("Identifier", style="cyan")
    table.add_column("Category")
    table.add_column("Title")
    for document in documents:
        table.add_row(
            format_date(document.meta.published_date),
            document.identifier,
            document.meta.category,
            document.meta.title,
        )
    console.print(table)


@app.command()
def show(
    identifier: IdentifierArgument,
    config_path: ConfigPathOption = ".",
    html: Annotated[
        bool,
        typer.Option("--html", help="Print the compiled HTML body."),
    ] = False,
) -> None:
    """Show metadata and the compiled body summary for one article."""
    repository = _repository(config_path)
    document = _guard(lambda: repository.get_document(identifier))
    compiled = repository.compile(document)
    meta = document.meta

    console.print(f"[bold]{escape(meta.title)}[/]")
    console.print(f"{escape(meta.category)} · {format_date(meta.published_date)}")
    console.print(escape(meta.description))
    if meta.keywords:
        console.print(f"[bold blue]Keywords[/]: {', '.join(meta.keywords)}")
    console.print(
        f"[bold blue]Reading time[/]: {compiled.reading_time_minutes} min "
        f"({compiled.word_count} words)"
    )
    for heading in compiled.headings:
        indent = "  " * (heading.level - 2)
        console.print(f"{indent}- {heading.text} [dim]#{heading.anchor}[/]")
    if html:
        console.print(compiled.html, markup=False, highlight=False)


@app.command()
def related(
    identifier: IdentifierArgument,
    config_path: ConfigPathOption = ".",
    limit: Annotated[
        int | None,
        typer.Option("--limit", "-n", help="Number of related articles (defaults to config)."),
    ] = None,
) -> None:
    """Show the articles recommended alongside one article."""
    repository = _repository(config_path)
    document = _guard(lambda: repository.get_document(identifier))
    results = _guard(lambda: repository.recommendations(document, limit))

    if not results:
        console.print("[bold yellow]No related articles[/].")
        raise typer.Exit()

    weights = repository.config.recommendations
    table = Table(title=f"Related to {document.identifier}")
    table.add_column("#", justify="right")
    table.add_column("Identifier", style="cyan")
    table.add_column("Category")
    table.add_column("Score", justify="right")
    table.add_column("Published")
    for position, entry in enumerate(results, start=1):
        table.add_row(
            str(position),
            entry.identifier,
            entry.meta.category,
            f"{similarity(document, entry, weights):g}",
            format_date(entry.meta.published_date),
        )
    console.print(table)


@app.command()
def lint(
    config_path: ConfigPathOption = ".",
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Treat warnings as errors."),
    ] = False,
) -> None:
    """Check every article and report all problems at once."""
    config = _load(config_path)
    report = lint_workspace(config)

    if not report.issues:
        console.print(
            f"[bold green]Lint clean[/]: {report.document_count} article(s), no issues detected."
        )
        raise typer.Exit()

    for issue in sorted(report.issues, key=_lint_sort_key):
        style = "red" if issue.severity is IssueSeverity.ERROR else "yellow"
        location = issue.source_path
        if issue.pointer:
            location = f"{location} :: {issue.pointer}"
        console.print(
            f"[bold {style}]{issue.severity.name}[/] {escape(location)} - {escape(issue.message)}",
            highlight=False,
        )

    console.print(
        f"[bold blue]Summary[/]: {report.error_count} error(s), {report.warning_count} warning(s) "
        f"across {report.document_count} article(s)."
    )

    exit_code = 0
    if report.error_count > 0 or (strict and report.warning_count > 0):
        exit_code = 1
    raise typer.Exit(code=exit_code)


@app.command()
def export(
    config_path: ConfigPathOption = ".",
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Directory for the JSON records (defaults to config)."),
    ] = None,
) -> None:
    """Write the article index and per-article JSON records."""
    repository = _repository(config_path)
    destination = output or repository.config.output_dir
    written = _guard(lambda: export_site(repository, destination))
    console.print(
        f"[bold green]Exported[/]: {len(written) - 1} article(s) and index to {destination}."
    )


def _repository(config_path: str) -> ContentRepository:
    config = _load(config_path)
    cache: DocumentCache[Any] | None = DocumentCache() if config.cache_enabled else None
    return ContentRepository(config, cache=cache)


def _guard(action: Any) -> Any:
    try:
        return action()
    except NotFoundError as exc:
        console.print(f"[bold red]Not found[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except ContentParseError as exc:
        console.print(f"[bold red]Content error[/]: {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=1) from exc
    except InvalidArgumentError as exc:
        console.print(f"[bold red]Invalid argument[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _lint_sort_key(issue: DocumentIssue) -> tuple[int, str, str]:
    severity_rank = 0 if issue.severity is IssueSeverity.ERROR else 1
    return (severity_rank, issue.source_path, issue.pointer or "")


def _load(path: str) -> Config:
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
