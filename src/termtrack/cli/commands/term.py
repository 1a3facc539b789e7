"""termtrack term -- edit the current branch's working terms."""

from __future__ import annotations

import click

from termtrack.cli.formatting import format_terms


@click.group()
def term() -> None:
    """Add, list, edit, translate and remove terms on the current branch."""


@term.command("add")
@click.argument("text")
@click.option("--context", default=None, help="Note for translators.")
@click.pass_context
def add(ctx: click.Context, text: str, context: str | None) -> None:
    """Add a term with TEXT to the current branch."""
    from termtrack.cli import _service_session

    with _service_session(ctx) as (svc, project_id, console):
        new = svc.add_term(
            project_id, text, context=context, actor_id=ctx.obj["user_id"]
        )
        console.print(f"Added [yellow]{new.id}[/yellow]")


@term.command("list")
@click.option("--branch", "branch_name", default=None, help="Branch to list (default: current).")
@click.pass_context
def list_terms(ctx: click.Context, branch_name: str | None) -> None:
    """List working terms."""
    from termtrack.cli import _service_session

    with _service_session(ctx) as (svc, project_id, console):
        project = svc.get_project(project_id)
        terms = svc.get_working_terms(project_id, branch_name)
        format_terms(terms, project.language_codes, console)


@term.command("edit")
@click.argument("term_id")
@click.option("--text", default=None, help="New source text.")
@click.option("--context", default=None, help="New translator note.")
@click.pass_context
def edit(ctx: click.Context, term_id: str, text: str | None, context: str | None) -> None:
    """Change the text and/or context of TERM_ID."""
    from termtrack.cli import _service_session

    if text is None and context is None:
        raise click.UsageError("Nothing to change. Pass --text and/or --context.")

    with _service_session(ctx) as (svc, project_id, console):
        actor = ctx.obj["user_id"]
        changed = False
        if text is not None:
            changed |= svc.update_term_text(project_id, term_id, text, actor_id=actor)
        if context is not None:
            changed |= svc.update_term_context(
                project_id, term_id, context, actor_id=actor
            )
        if changed:
            console.print(f"Updated [yellow]{term_id}[/yellow]")
        else:
            console.print(f"[dim]No term {term_id}; nothing changed.[/dim]")


@term.command("translate")
@click.argument("term_id")
@click.argument("lang_code")
@click.argument("value")
@click.pass_context
def translate(ctx: click.Context, term_id: str, lang_code: str, value: str) -> None:
    """Set the LANG_CODE translation of TERM_ID to VALUE."""
    from termtrack.cli import _service_session

    with _service_session(ctx) as (svc, project_id, console):
        if svc.update_translation(
            project_id, term_id, lang_code, value, actor_id=ctx.obj["user_id"]
        ):
            console.print(f"Translated [yellow]{term_id}[/yellow] ({lang_code})")
        else:
            console.print(f"[dim]No term {term_id}; nothing changed.[/dim]")


@term.command("rm")
@click.argument("term_id")
@click.pass_context
def remove(ctx: click.Context, term_id: str) -> None:
    """Remove TERM_ID from the current branch."""
    from termtrack.cli import _service_session

    with _service_session(ctx) as (svc, project_id, console):
        if svc.delete_term(project_id, term_id, actor_id=ctx.obj["user_id"]):
            console.print(f"Removed [yellow]{term_id}[/yellow]")
        else:
            console.print(f"[dim]No term {term_id}; nothing changed.[/dim]")
