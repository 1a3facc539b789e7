"""termtrack branch -- create, list, delete and switch branches."""

from __future__ import annotations

import click

from termtrack.cli.formatting import format_branches


@click.group()
def branch() -> None:
    """Manage branches of the project."""


@branch.command("list")
@click.pass_context
def list_branches(ctx: click.Context) -> None:
    """List branches; the current one is marked with *."""
    from termtrack.cli import _service_session

    with _service_session(ctx) as (svc, project_id, console):
        format_branches(svc.list_branches(project_id), console)


@branch.command("create")
@click.argument("name")
@click.option("--from", "source", default=None, help="Source branch (default: current).")
@click.option("--commit", "commit_id", default=None, help="Fork from this commit instead of a branch head.")
@click.option("--switch", "do_switch", is_flag=True, help="Make the new branch current.")
@click.pass_context
def create(
    ctx: click.Context,
    name: str,
    source: str | None,
    commit_id: str | None,
    do_switch: bool,
) -> None:
    """Create branch NAME from a branch head or a commit."""
    from termtrack.cli import _service_session

    if source is not None and commit_id is not None:
        raise click.UsageError("--from and --commit are mutually exclusive.")

    with _service_session(ctx) as (svc, project_id, console):
        if commit_id is not None:
            info = svc.create_branch_from_commit(project_id, commit_id, name)
            origin = commit_id
        else:
            origin = source or svc.get_project(project_id).current_branch_name
            info = svc.create_branch(project_id, name, origin)
        if do_switch:
            svc.switch_current_branch(project_id, name)
        console.print(
            f"Created branch [green]{info.name}[/green] from {origin} "
            f"({len(info.working_terms)} terms)"
        )


@branch.command("delete")
@click.argument("name")
@click.pass_context
def delete(ctx: click.Context, name: str) -> None:
    """Delete branch NAME and its history."""
    from termtrack.cli import _service_session

    with _service_session(ctx) as (svc, project_id, console):
        if not svc.delete_branch(project_id, name):
            console.print(f"No branch named [green]{name}[/green]; nothing deleted")
            return
        console.print(f"Deleted branch [green]{name}[/green]")
        if svc.get_project(project_id).current_branch_name == name:
            console.print(
                "[yellow]Current branch no longer exists; "
                "run 'termtrack branch switch main'.[/yellow]"
            )


@branch.command("switch")
@click.argument("name")
@click.pass_context
def switch(ctx: click.Context, name: str) -> None:
    """Make NAME the project's current branch."""
    from termtrack.cli import _service_session

    with _service_session(ctx) as (svc, project_id, console):
        svc.switch_current_branch(project_id, name)
        console.print(f"Switched to branch [green]{name}[/green]")
