"""termtrack CLI -- terminal interface for localization term version control.

This module is NEVER imported from termtrack/__init__.py.
It is only loaded via the ``termtrack`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import TYPE_CHECKING

try:
    import click
except ImportError:
    raise ImportError(
        "CLI dependencies not installed. Install with: pip install termtrack[cli]"
    ) from None

from termtrack.cli.formatting import format_error, get_console

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rich.console import Console

    from termtrack.service import VersionControlService


@click.group()
@click.option(
    "--db",
    default=".termtrack.db",
    envvar="TERMTRACK_DB",
    help="Path to termtrack database.",
)
@click.option(
    "--project",
    "project_id",
    default=None,
    envvar="TERMTRACK_PROJECT",
    help="Project ID (auto-discovered if omitted).",
)
@click.option(
    "--user",
    "user_id",
    default=None,
    envvar="TERMTRACK_USER",
    help="Acting user ID, recorded as commit author and event actor.",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    db: str,
    project_id: str | None,
    user_id: str | None,
    verbose: bool,
) -> None:
    """termtrack: branch, commit and merge localization terms."""
    ctx.ensure_object(dict)
    ctx.obj["db_path"] = db
    ctx.obj["project_id"] = project_id
    ctx.obj["user_id"] = user_id
    if verbose:
        _enable_logging()


def _enable_logging() -> None:
    from rich.logging import RichHandler

    logger = logging.getLogger("termtrack")
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=get_console(), show_path=False))
    logger.setLevel(logging.DEBUG)


def _get_service(ctx: click.Context, *, create: bool = False) -> VersionControlService:
    """Open a VersionControlService for the --db path.

    Unless *create* is set, the database file must already exist.
    """
    from termtrack.models.config import MailConfig, TermTrackConfig
    from termtrack.service import VersionControlService

    db_path = ctx.obj["db_path"]
    if not create and db_path != ":memory:" and not os.path.exists(db_path):
        format_error(f"Database not found: {db_path}", get_console())
        raise SystemExit(1)

    config = TermTrackConfig(db_path=db_path, mail=MailConfig.from_env())
    return VersionControlService.open(db_path, config=config)


def _resolve_project(ctx: click.Context, svc: VersionControlService) -> str:
    """Return --project, or the only project in the database."""
    project_id = ctx.obj["project_id"]
    if project_id is not None:
        return project_id

    projects = svc.list_projects()
    if len(projects) == 0:
        format_error("No projects found in database. Run 'termtrack init'.", get_console())
        raise SystemExit(1)
    if len(projects) > 1:
        format_error(
            f"Multiple projects found ({len(projects)}). Use --project to specify one.",
            get_console(),
        )
        raise SystemExit(1)
    return projects[0].id


@contextmanager
def _service_session(
    ctx: click.Context,
) -> Iterator[tuple[VersionControlService, str, Console]]:
    """Open a service, yield (service, project_id, console), and handle cleanup.

    Ensures the service is closed on exit and formats exceptions as CLI errors.
    """
    console = get_console()
    try:
        svc = _get_service(ctx)
        try:
            yield svc, _resolve_project(ctx, svc), console
        finally:
            svc.close()
    except SystemExit:
        raise
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None


# Register subcommands after cli group is defined
from termtrack.cli.commands.project import init, status  # noqa: E402
from termtrack.cli.commands.term import term  # noqa: E402
from termtrack.cli.commands.commit import commit, log, rollback  # noqa: E402
from termtrack.cli.commands.branch import branch  # noqa: E402
from termtrack.cli.commands.merge import merge  # noqa: E402

cli.add_command(init)
cli.add_command(status)
cli.add_command(term)
cli.add_command(commit)
cli.add_command(log)
cli.add_command(rollback)
cli.add_command(branch)
cli.add_command(merge)
