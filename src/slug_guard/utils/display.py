"""
Rich Terminal Display Components.

Provides console output for:
- Post details and listings
- Field-level validation errors
- Reproduction scenario results
- Status messages
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from slug_guard.core.entity import ErrorSet
from slug_guard.models import Post


console = Console()


def print_post(post: Post, title: str = "Post") -> None:
    """Print a single post as a property table."""
    table = Table(title=title, border_style="blue")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("ID", str(post.id) if post.id is not None else "[dim]unsaved[/dim]")
    table.add_row("Title", escape(post.title or "") or "[dim]blank[/dim]")
    table.add_row("Slug", post.slug or "[dim]none[/dim]")
    table.add_row("URL param", post.to_param() or "[dim]none[/dim]")

    changes = post.changes.to_dict()
    if changes:
        pending = ", ".join(f"{name}: {old!r} → {new!r}" for name, (old, new) in changes.items())
        table.add_row("Pending", f"[yellow]{escape(pending)}[/yellow]")

    console.print(table)


def print_posts(posts: Sequence[Post]) -> None:
    """Print a listing of posts."""
    table = Table(title="Posts", border_style="green")
    table.add_column("ID", justify="right")
    table.add_column("Slug", style="cyan")
    table.add_column("Title")

    for post in posts:
        table.add_row(str(post.id), post.slug or "", escape(post.title or ""))

    console.print(table)


def print_field_errors(errors: ErrorSet) -> None:
    """Print validation errors the way a form would list them."""
    count = len(errors)
    noun = "error" if count == 1 else "errors"
    console.print(f"[red bold]{count} {noun} prohibited this post from being saved:[/red bold]")
    for message in errors.full_messages():
        console.print(f"  • {escape(message)}")


def print_repro_results(results: Sequence[dict[str, Any]]) -> None:
    """Print one row per reproduction scenario."""
    table = Table(title="Slug Reproduction", border_style="magenta")
    table.add_column("Scenario", style="cyan")
    table.add_column("Expected")
    table.add_column("Actual")
    table.add_column("Result", justify="center")

    for result in results:
        outcome = "[green]✓ pass[/green]" if result["passed"] else "[red]✗ fail[/red]"
        table.add_row(
            result["scenario"],
            repr(result["expected"]),
            repr(result["actual"]),
            outcome,
        )

    console.print(table)


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red bold]Error:[/red bold] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green bold]✓[/green bold] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow bold]⚠[/yellow bold] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ[/blue] {message}")
