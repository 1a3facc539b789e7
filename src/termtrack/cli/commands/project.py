"""termtrack init / status -- create a project and show where you are."""

from __future__ import annotations

import click

from termtrack.cli.formatting import format_error, format_status, get_console


@click.command()
@click.argument("name")
@click.option("--owner-name", required=True, help="Display name of the project owner.")
@click.option("--owner-email", required=True, help="E-mail of the project owner.")
@click.pass_context
def init(ctx: click.Context, name: str, owner_name: str, owner_email: str) -> None:
    """Create project NAME with a main branch and an initial commit.

    The owner is created unless a user with OWNER_EMAIL already exists.
    """
    from termtrack.cli import _get_service

    console = get_console()
    try:
        svc = _get_service(ctx, create=True)
        try:
            owner = svc.find_user_by_email(owner_email)
            if owner is None:
                owner = svc.add_user(owner_name, owner_email)
            project = svc.create_project(name, owner.id)
        finally:
            svc.close()
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    console.print(f"Created project [bold]{project.name}[/bold]")
    console.print(f"  Project: {project.id}")
    console.print(f"  Owner:   {owner.id}")


@click.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the current branch, its term count and head commit."""
    from termtrack.cli import _service_session

    with _service_session(ctx) as (svc, project_id, console):
        format_status(svc.get_project(project_id), console)
