"""termtrack commit / log / rollback -- record and undo history."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from termtrack.cli.formatting import format_log

if TYPE_CHECKING:
    from termtrack.service import VersionControlService


def _branch_or_current(
    svc: VersionControlService, project_id: str, branch_name: str | None
) -> str:
    if branch_name is not None:
        return branch_name
    return svc.get_project(project_id).current_branch_name


@click.command()
@click.option("-m", "--message", required=True, help="Commit message.")
@click.option("--branch", "branch_name", default=None, help="Branch to commit (default: current).")
@click.pass_context
def commit(ctx: click.Context, message: str, branch_name: str | None) -> None:
    """Record the branch's working terms as a new commit."""
    from termtrack.cli import _service_session

    with _service_session(ctx) as (svc, project_id, console):
        name = _branch_or_current(svc, project_id, branch_name)
        info = svc.create_commit(project_id, name, message, ctx.obj["user_id"])
        console.print(
            f"Committed [yellow]{info.id}[/yellow] on [green]{name}[/green] "
            f"({len(info.terms)} terms)"
        )


@click.command()
@click.option("-n", "--limit", default=20, type=int, help="Maximum number of commits to show.")
@click.option("--branch", "branch_name", default=None, help="Branch to show (default: current).")
@click.pass_context
def log(ctx: click.Context, limit: int, branch_name: str | None) -> None:
    """Show commit history, newest first."""
    from termtrack.cli import _service_session

    with _service_session(ctx) as (svc, project_id, console):
        name = _branch_or_current(svc, project_id, branch_name)
        format_log(svc.log(project_id, name, limit=limit), console)


@click.command()
@click.option("--branch", "branch_name", default=None, help="Branch to roll back (default: current).")
@click.option("--yes", is_flag=True, help="Skip confirmation.")
@click.pass_context
def rollback(ctx: click.Context, branch_name: str | None, yes: bool) -> None:
    """Delete the latest commit and restore working terms from the one before.

    Uncommitted working changes on the branch are discarded.
    """
    from termtrack.cli import _service_session

    with _service_session(ctx) as (svc, project_id, console):
        name = _branch_or_current(svc, project_id, branch_name)
        if not yes and not click.confirm(
            f"Discard the latest commit on {name} and its working changes?",
            default=False,
        ):
            console.print("[yellow]Cancelled.[/yellow]")
            return
        head = svc.rollback_latest_commit(project_id, name, ctx.obj["user_id"])
        console.print(f"Rolled back {name}; head is now [yellow]{head.id}[/yellow]")
