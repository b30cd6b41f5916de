"""Command line interface for docscope."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from docscope.config import AppConfig, load_config
from docscope.content.tree import ContentTree
from docscope.embedding.encoder import EmbeddingConfig, EmbeddingModel
from docscope.errors import ConfigError, DocumentError
from docscope.index.indexer import Indexer
from docscope.index.search import Searcher
from docscope.index.storage import SQLiteCatalogStore
from docscope.navigation import build_sidebar
from docscope.validation.checks import ERROR, validate_corpus
from docscope.validation.parity import coverage as topic_coverage
from docscope.web.app import app as web_app


console = Console()
app = typer.Typer(help="docscope - inspect and search a multilingual documentation tree")

ROOT_OPTION = typer.Option(None, "--root", help="Content root (defaults to the configured one)")
CONFIG_OPTION = typer.Option(None, "--config", help="Path to docscope.yml or its directory")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Verbose logging")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _ensure_db_parent(db_path: Path) -> None:
    db_path.parent.mkdir(parents=True, exist_ok=True)


def _load_config(config: Optional[Path]) -> AppConfig:
    try:
        return load_config(config if config is not None else Path.cwd())
    except ConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


def _open_tree(root: Optional[Path], config: AppConfig) -> ContentTree:
    tree = ContentTree(root, config) if root is not None else ContentTree.from_config(config)
    if not tree.root.is_dir():
        raise typer.BadParameter(f"Content root not found: {tree.root}", param_hint="--root")
    return tree


def _print_errors(errors: list[DocumentError]) -> None:
    for error in errors:
        name = type(error).__name__
        console.print(f"[red]{name}[/red] {escape(str(error.path))}: {escape(error.reason)}")


@app.command("list")
def list_documents(
    root: Optional[Path] = ROOT_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    locale: Optional[str] = typer.Option(None, help="Only show pages in this locale"),
    topic: Optional[str] = typer.Option(None, help="Only show pages in this topic"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """List the pages of the content tree."""
    _setup_logging(verbose)
    tree = _open_tree(root, _load_config(config))
    result = tree.scan()

    descriptors = [
        descriptor
        for descriptor in result.descriptors
        if (locale is None or descriptor.locale == locale)
        and (topic is None or descriptor.topic == topic)
    ]
    if not descriptors and not result.errors:
        console.print("[yellow]No documents found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Locale")
    table.add_column("Topic")
    table.add_column("Path")
    table.add_column("Title")
    for descriptor in descriptors:
        table.add_row(descriptor.locale, descriptor.topic or "-", descriptor.relative_path, descriptor.title)
    console.print(table)

    _print_errors(result.errors)
    console.print(f"{len(descriptors)} documents, {len(result.errors)} errors")


@app.command()
def validate(
    root: Optional[Path] = ROOT_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    strict: bool = typer.Option(False, "--strict", help="Fail on warnings too"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Check frontmatter, code fences and locale parity."""
    _setup_logging(verbose)
    tree = _open_tree(root, _load_config(config))
    report = validate_corpus(tree, strict=strict)

    for issue in report.issues:
        colour = "red" if issue.severity == ERROR else "yellow"
        location = escape(str(issue.path))
        console.print(f"[{colour}]{issue.severity}[/{colour}] {issue.code} {location}: {escape(issue.message)}")

    console.print(
        f"Checked: {report.checked}, errors: {len(report.errors)}, warnings: {len(report.warnings)}"
    )
    if not report.ok:
        raise typer.Exit(code=1)


@app.command()
def coverage(
    root: Optional[Path] = ROOT_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Show how many pages each topic has per locale."""
    tree = _open_tree(root, _load_config(config))
    langs = tree.config.langs
    matrix = topic_coverage(tree.scan().descriptors, langs)

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Topic")
    for lang in langs:
        table.add_column(lang, justify="right")
    for name, counts in matrix.items():
        table.add_row(name or "(root)", *(str(counts.get(lang, 0)) for lang in langs))
    console.print(table)


@app.command()
def sidebar(
    locale: Optional[str] = typer.Argument(None, help="Locale to render (defaults to the default locale)"),
    root: Optional[Path] = ROOT_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
) -> None:
    """Print the autogenerated sidebar."""
    tree = _open_tree(root, _load_config(config))
    locale = locale or tree.config.default_lang
    if locale not in tree.config.langs:
        raise typer.BadParameter(f"Unknown locale: {locale}")

    for group in build_sidebar(tree.scan().descriptors, tree.config, locale):
        console.print(f"[bold]{group.label}[/bold]")
        if not group.entries:
            console.print("  [dim](empty)[/dim]")
        for entry in group.entries:
            marker = " [dim](fallback)[/dim]" if entry.fallback else ""
            console.print(f"  {entry.label} -> {entry.url}{marker}")


@app.command()
def index(
    root: Optional[Path] = ROOT_OPTION,
    config: Optional[Path] = CONFIG_OPTION,
    db: Path = typer.Option(None, "--db", help="SQLite catalog path"),
    model: Optional[str] = typer.Option(None, help="Sentence-transformer model name"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Index the content tree into the search catalog."""
    _setup_logging(verbose)
    app_config = _load_config(config)
    if db is not None:
        app_config.db_path = db
    if model:
        app_config.model_name = model
    tree = _open_tree(root, app_config)

    resolved_db = app_config.resolve_db_path(Path.cwd())
    _ensure_db_parent(resolved_db)

    embedder = EmbeddingModel(EmbeddingConfig(model_name=app_config.model_name))
    store = SQLiteCatalogStore(resolved_db, dimension=embedder.dimension)
    indexer = Indexer(embedder, store, chunk_chars=app_config.chunk_chars, overlap=app_config.overlap)

    console.print(f"Indexing into [bold]{resolved_db}[/bold]...")
    try:
        stats = indexer.index(tree)
    finally:
        store.close()

    console.print(
        f"Inserted: {stats.inserted}, updated: {stats.updated}, "
        f"skipped: {stats.skipped}, failed: {stats.failed}"
    )
    _print_errors(stats.errors)


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    config: Optional[Path] = CONFIG_OPTION,
    db: Path = typer.Option(None, "--db", help="SQLite catalog path"),
    top_k: int = typer.Option(10, min=1, help="Number of results to display"),
    locale: Optional[str] = typer.Option(None, help="Restrict results to a locale"),
    topic: Optional[str] = typer.Option(None, help="Restrict results to a topic"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Search the catalog."""
    _setup_logging(verbose)
    app_config = _load_config(config)
    if db is not None:
        app_config.db_path = db
    resolved_db = app_config.resolve_db_path(Path.cwd())

    if not resolved_db.exists():
        raise typer.BadParameter(f"Catalog not found: {resolved_db}")

    embedder = EmbeddingModel(EmbeddingConfig(model_name=app_config.model_name))
    store = SQLiteCatalogStore(resolved_db, dimension=embedder.dimension)
    try:
        results = Searcher(embedder, store).search(query, top_k=top_k, locale=locale, topic=topic)
    finally:
        store.close()

    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Score")
    table.add_column("Locale")
    table.add_column("Page")
    table.add_column("Section")
    table.add_column("Snippet")

    for result in results:
        snippet = result.text.replace("\n", " ")
        table.add_row(f"{result.score:.4f}", result.locale, result.slug, result.heading, snippet[:160])

    console.print(table)


@app.command()
def prune(
    config: Optional[Path] = CONFIG_OPTION,
    db: Path = typer.Option(None, "--db", help="SQLite catalog path"),
) -> None:
    """Remove catalog entries whose files no longer exist."""
    app_config = _load_config(config)
    if db is not None:
        app_config.db_path = db
    resolved_db = app_config.resolve_db_path(Path.cwd())

    if not resolved_db.exists():
        console.print("[yellow]Catalog not found, nothing to prune.[/yellow]")
        return

    store = SQLiteCatalogStore(resolved_db, dimension=0)
    try:
        removed = store.remove_missing_files()
    finally:
        store.close()
    console.print(f"Removed {removed} orphaned documents.")


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
) -> None:
    """Start the web API for the docscope.yml in the working directory."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    app_config = _load_config(None)
    resolved_root = app_config.resolve_content_root(Path.cwd())
    if not resolved_root.is_dir():
        console.print("[yellow]Warning: content root not found, requests might fail.[/yellow]")

    console.print(f"Starting web API on http://{host}:{port} (content root: {resolved_root})")
    uvicorn.run(
        web_app,
        host=host,
        port=port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":  # pragma: no cover
    app()
