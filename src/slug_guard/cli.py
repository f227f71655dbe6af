"""
Slug Guard CLI - Command Line Interface.

Manage blog posts whose slugs stay in sync with their titles.

Commands:
    create  Create a post
    update  Update a post (slug follows the title)
    check   Validate a change without saving it
    show    Show one post
    list    List all posts
    repro   Replay the slug rollback reproduction steps
    config  Manage configuration
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from slug_guard import __version__
from slug_guard.config import Settings, load_settings
from slug_guard.core.repro import run_scenarios
from slug_guard.core.store import PostStore, RecordNotFound
from slug_guard.models import Post
from slug_guard.utils.display import (
    print_error,
    print_field_errors,
    print_info,
    print_post,
    print_posts,
    print_repro_results,
    print_success,
    print_warning,
)
from slug_guard.utils.logger import setup_logging


# Create the Typer app
app = typer.Typer(
    name="slug-guard",
    help="Blog posts with slugs that stay in sync with their titles.",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()

DbOption = typer.Option(
    None,
    "--db",
    help="Path to SQLite database (overrides config).",
)
ConfigOption = typer.Option(
    None,
    "--config",
    "-c",
    help="Path to config file.",
    exists=True,
    dir_okay=False,
)
VerboseOption = typer.Option(
    False,
    "--verbose",
    "-V",
    help="Log slug regeneration and rollback details.",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]slug-guard[/bold cyan] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Slug Guard - slugs that never leak from a failed save."""


# =============================================================================
# CREATE Command
# =============================================================================
@app.command()
def create(
    title: str = typer.Option(..., "--title", "-t", help="Post title."),
    body: str = typer.Option(..., "--body", "-b", help="Post body."),
    db: Optional[Path] = DbOption,
    config_file: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """
    Create a post. Its slug is derived from the title.

    Example:
        slug-guard create --title "My First Post" --body "My Deep Thoughts"
    """
    with _open_store(config_file, db, verbose) as store:
        post = store.create(title=title, body=body)
        if post.errors:
            print_field_errors(post.errors)
            raise typer.Exit(1)

        print_post(post, title="Created")
        print_success(f"Created post /posts/{post.to_param()}")


# =============================================================================
# UPDATE Command
# =============================================================================
@app.command()
def update(
    identifier: str = typer.Argument(..., help="Slug or id of the post."),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title."),
    body: Optional[str] = typer.Option(None, "--body", "-b", help="New body."),
    db: Optional[Path] = DbOption,
    config_file: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """
    Update a post. A new title regenerates the slug; a rejected update
    keeps the old one.

    Example:
        slug-guard update my-first-post --title "Changed My Mind"
    """
    attributes = _collect_attributes(title=title, body=body)

    with _open_store(config_file, db, verbose) as store:
        post = _find_or_exit(store, identifier)
        if not attributes:
            print_warning("Nothing to update.")
            raise typer.Exit(0)

        if not store.update(post, **attributes):
            print_field_errors(post.errors)
            print_info(f"Form posts back to /posts/{post.to_param()}")
            raise typer.Exit(1)

        print_post(post, title="Updated")
        print_success(f"Updated post /posts/{post.to_param()}")


# =============================================================================
# CHECK Command
# =============================================================================
@app.command()
def check(
    identifier: str = typer.Argument(..., help="Slug or id of the post."),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Candidate title."),
    body: Optional[str] = typer.Option(None, "--body", "-b", help="Candidate body."),
    db: Optional[Path] = DbOption,
    config_file: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """Validate a change without saving it and show the resulting slug."""
    attributes = _collect_attributes(title=title, body=body)

    with _open_store(config_file, db, verbose) as store:
        post = _find_or_exit(store, identifier)
        post.assign_attributes(attributes)

        if store.valid(post):
            print_post(post, title="Valid (not saved)")
            print_success("Change is valid.")
            return

        print_field_errors(post.errors)
        print_post(post, title="Invalid (not saved)")
        raise typer.Exit(1)


# =============================================================================
# SHOW / LIST Commands
# =============================================================================
@app.command()
def show(
    identifier: str = typer.Argument(..., help="Slug or id of the post."),
    db: Optional[Path] = DbOption,
    config_file: Optional[Path] = ConfigOption,
) -> None:
    """Show one post."""
    with _open_store(config_file, db) as store:
        post = _find_or_exit(store, identifier)
        print_post(post)
        if post.body:
            console.print()
            console.print(post.body, markup=False)


@app.command("list")
def list_posts(
    db: Optional[Path] = DbOption,
    config_file: Optional[Path] = ConfigOption,
) -> None:
    """List all posts."""
    with _open_store(config_file, db) as store:
        posts = store.all()

    if not posts:
        print_info("No posts yet. Create one with `slug-guard create`.")
        return
    print_posts(posts)


# =============================================================================
# REPRO Command
# =============================================================================
@app.command()
def repro(
    config_file: Optional[Path] = ConfigOption,
    verbose: bool = VerboseOption,
) -> None:
    """
    Replay the reproduction steps against a throwaway database.

    Covers: slug follows a title update, and a blank title leaves the
    slug untouched after both valid() and save().
    """
    settings = _load(config_file, None, verbose)
    results = run_scenarios(settings)
    print_repro_results(results)

    failed = [r for r in results if not r["passed"]]
    if failed:
        print_error(f"{len(failed)} of {len(results)} checks failed.")
        raise typer.Exit(1)
    print_success(f"All {len(results)} checks passed.")


# =============================================================================
# CONFIG Command
# =============================================================================
@app.command()
def config(
    show: bool = typer.Option(
        False,
        "--show",
        help="Show current configuration.",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        help="Write a config file with the current settings.",
    ),
    output: Path = typer.Option(
        Path("slug-guard.toml"),
        "--output",
        "-o",
        help="Output path for config file.",
    ),
) -> None:
    """Manage configuration."""
    if init:
        if output.exists():
            print_error(f"Config file already exists: {output}")
            raise typer.Exit(1)
        Settings().to_file(output)
        print_success(f"Generated config file: {output}")
        return

    if show:
        settings = Settings()
        table = Table(title="Current Configuration", border_style="cyan")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")

        table.add_row("Database", str(settings.database.path))
        table.add_row("Table", settings.database.table)
        table.add_row("Source Field", settings.slugs.source_field)
        table.add_row("Slug Field", settings.slugs.slug_field)
        table.add_row("Separator", settings.slugs.separator)
        table.add_row(
            "Max Length",
            str(settings.slugs.max_length) if settings.slugs.max_length else "[dim]unlimited[/dim]",
        )
        table.add_row("Rollback Policy", settings.slugs.rollback_policy.value)
        table.add_row("Log Level", settings.logging.level)
        table.add_row("Slug Log Level", settings.logging.slug_level or "[dim]same as log level[/dim]")

        console.print(table)
        return

    console.print("Use --show to view config or --init to create config file.")


# =============================================================================
# Helper Functions
# =============================================================================
def _load(
    config_file: Path | None,
    db: Path | None,
    verbose: bool = False,
) -> Settings:
    """Build settings from config file and overrides, and set up logging."""
    try:
        settings = load_settings(config_file)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if db is not None:
        settings.database.path = db

    setup_logging(
        level="DEBUG" if verbose else settings.logging.level,
        log_file=settings.logging.file,
        format_style=settings.logging.format,
        max_file_size_mb=settings.logging.max_file_size_mb,
        backup_count=settings.logging.backup_count,
        slug_level=settings.logging.slug_level,
    )
    return settings


def _open_store(
    config_file: Path | None,
    db: Path | None,
    verbose: bool = False,
) -> PostStore:
    settings = _load(config_file, db, verbose)
    try:
        return PostStore.open(settings)
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)


def _find_or_exit(store: PostStore, identifier: str) -> Post:
    try:
        return store.find(identifier)
    except RecordNotFound as e:
        print_error(str(e))
        raise typer.Exit(1)


def _collect_attributes(**values: str | None) -> dict[str, str]:
    """Drop options that were not given."""
    return {name: value for name, value in values.items() if value is not None}


if __name__ == "__main__":
    app()
