"""Rich formatting helpers for the termtrack CLI.

Provides functions that format SDK data structures for terminal display.
Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from termtrack.models.branch import BranchInfo
    from termtrack.models.commit import CommitInfo
    from termtrack.models.merge import MergeResult
    from termtrack.models.project import ProjectInfo
    from termtrack.models.term import Term


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_terms(terms: list[Term], languages: list[str], console: Console) -> None:
    """Display working terms with one column per project language."""
    if not terms:
        console.print("[dim]No terms.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Id", style="yellow", no_wrap=True)
    table.add_column("Text")
    table.add_column("Context", style="dim")
    for code in languages:
        table.add_column(code, style="green")

    for term in terms:
        table.add_row(
            term.id,
            escape(term.text),
            escape(term.context or ""),
            *(escape(term.translations.get(code, "")) for code in languages),
        )

    console.print(table)


def format_log(entries: list[CommitInfo], console: Console) -> None:
    """Display commit log in compact table format."""
    if not entries:
        console.print("[dim]No commits.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Commit", style="yellow", no_wrap=True)
    table.add_column("Time", style="dim")
    table.add_column("Author", style="cyan")
    table.add_column("Terms", justify="right", style="green")
    table.add_column("Message")

    for entry in entries:
        author = entry.author.name if entry.author else "-"
        table.add_row(
            entry.id,
            entry.created_at.strftime("%Y-%m-%d %H:%M"),
            escape(author),
            str(len(entry.terms)),
            escape(entry.message) if entry.message else "",
        )

    console.print(table)


def format_branches(branches: list[BranchInfo], console: Console) -> None:
    """Display branches, marking the current one with ``*``."""
    if not branches:
        console.print("[dim]No branches.[/dim]")
        return

    for b in branches:
        marker = "[green]*[/green]" if b.is_current else " "
        head = b.head_commit_id or "-"
        console.print(
            f"{marker} {escape(b.name)}  [dim]{b.commit_count} commits, "
            f"{len(b.working_terms)} terms, head {head}[/dim]"
        )


def format_status(project: ProjectInfo, console: Console) -> None:
    """Display the project's current branch and its working state."""
    console.print(f"Project [bold]{escape(project.name)}[/bold] ({project.id})")
    console.print(f"  Languages: {', '.join(project.language_codes) or '-'}")
    console.print(f"  Default:   {project.default_language_code or '-'}")

    current = next(
        (b for b in project.branches if b.name == project.current_branch_name), None
    )
    if current is None:
        console.print(
            f"On branch [red]{escape(project.current_branch_name)}[/red] "
            f"[dim](missing)[/dim]"
        )
        return

    console.print(f"On branch [green]{escape(current.name)}[/green]")
    console.print(f"  Commits: {current.commit_count}")
    console.print(f"  Terms:   {len(current.working_terms)}")
    if current.head_commit_id:
        console.print(f"  Head:    [yellow]{current.head_commit_id}[/yellow]")


def format_merge_result(result: MergeResult, console: Console) -> None:
    """Display a merge summary."""
    console.print(
        f"Merged [green]{escape(result.source_branch)}[/green] into "
        f"[green]{escape(result.target_branch)}[/green]"
    )
    console.print(
        f"  [green]+{len(result.added_term_ids)}[/green] added  "
        f"[yellow]~{len(result.overwritten_term_ids)}[/yellow] overwritten  "
        f"[dim]{result.term_count} terms[/dim]"
    )
    if result.changed:
        console.print("[dim]Commit the target branch to record the merge.[/dim]")


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {message}", highlight=False)
