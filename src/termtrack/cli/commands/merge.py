"""termtrack merge -- merge a branch's head into a branch's working terms."""

from __future__ import annotations

import click

from termtrack.cli.formatting import format_merge_result


@click.command()
@click.argument("source")
@click.option("--into", "target", default=None, help="Target branch (default: current).")
@click.pass_context
def merge(ctx: click.Context, source: str, target: str | None) -> None:
    """Merge SOURCE's head commit into the target's working terms.

    Terms from SOURCE win on shared ids. No commit is created.
    """
    from termtrack.cli import _service_session

    with _service_session(ctx) as (svc, project_id, console):
        target = target or svc.get_project(project_id).current_branch_name
        result = svc.merge_branches(project_id, source, target, ctx.obj["user_id"])
        format_merge_result(result, console)
