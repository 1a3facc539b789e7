"""VersionControlService -- the public entry point for termtrack.

Ties together storage, the term/commit/branch/merge operations, and the
notification collaborators into one user-facing API.

Every public method is one unit of work: it opens its own session, re-reads
the state it needs, commits once, and only then publishes events or sends
mail. Nothing is cached between calls, so one service may be shared by many
threads; the store serializes writers to the same branch.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from functools import partial
from typing import TYPE_CHECKING, Any

from termtrack.events import BranchChanged, NullPublisher
from termtrack.exceptions import (
    BranchNotFoundError,
    CommitNotFoundError,
    ProjectNotFoundError,
    UserNotFoundError,
)
from termtrack.mailer import SmtpMailer, render_commit_email
from termtrack.models.config import TermTrackConfig
from termtrack.operations import branch as branch_ops
from termtrack.operations import commits as commit_ops
from termtrack.operations import merge as merge_ops
from termtrack.operations import project as project_ops
from termtrack.operations import team as team_ops
from termtrack.operations import terms as term_ops
from termtrack.storage.engine import (
    create_session_factory,
    create_termtrack_engine,
    init_db,
)
from termtrack.storage.unit_of_work import UnitOfWork, transaction

if TYPE_CHECKING:
    from sqlalchemy import Engine
    from sqlalchemy.orm import Session, sessionmaker

    from termtrack.models.branch import BranchInfo
    from termtrack.models.commit import CommitInfo
    from termtrack.models.merge import MergeResult
    from termtrack.models.project import Language, ProjectInfo
    from termtrack.models.team import TeamMember, UserInfo, UserRole, UserSettings
    from termtrack.models.term import Term
    from termtrack.protocols import EventPublisher, Mailer, TeamDirectory

logger = logging.getLogger(__name__)


class VersionControlService:
    """Branch/commit/merge engine for localization terms.

    Create a service via :meth:`VersionControlService.open` (recommended) or
    :meth:`VersionControlService.from_components` (testing / DI).

    Example::

        with VersionControlService.open("terms.db") as svc:
            owner = svc.add_user("Ada", "ada@example.com")
            project = svc.create_project("Website", owner.id)
            svc.add_term(project.id, "welcome.title", actor_id=owner.id)
            svc.create_commit(project.id, "main", "Add welcome title", owner.id)
    """

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def __init__(
        self,
        *,
        engine: Engine | None,
        session_factory: sessionmaker[Session],
        config: TermTrackConfig,
        publisher: EventPublisher,
        mailer: Mailer,
        team_directory: TeamDirectory | None = None,
    ) -> None:
        self._engine = engine
        self._session_factory = session_factory
        self._config = config
        self._publisher = publisher
        self._mailer = mailer
        self._team_directory = team_directory
        self._closed = False

    @classmethod
    def open(
        cls,
        path: str = ":memory:",
        *,
        url: str | None = None,
        config: TermTrackConfig | None = None,
        publisher: EventPublisher | None = None,
        mailer: Mailer | None = None,
        team_directory: TeamDirectory | None = None,
    ) -> VersionControlService:
        """Open (or create) a termtrack database.

        Args:
            path: SQLite path.  ``":memory:"`` for in-memory (default).
            url: Full SQLAlchemy URL; overrides *path* and ``config.db_url``.
            config: Service configuration.  Defaults created if *None*.
            publisher: Receives ``BranchChanged`` events.  Drops them by default.
            mailer: Sends commit notifications.  SMTP per ``config.mail`` by default.
            team_directory: Source of team members for notifications.
                Defaults to the project's team tables.

        Returns:
            A ready-to-use service.
        """
        if config is None:
            config = TermTrackConfig(db_path=path, db_url=url)

        engine = create_termtrack_engine(
            config.db_path,
            url=url or config.db_url,
            busy_timeout_ms=config.busy_timeout_ms,
        )
        init_db(engine)

        return cls(
            engine=engine,
            session_factory=create_session_factory(engine),
            config=config,
            publisher=publisher if publisher is not None else NullPublisher(),
            mailer=mailer if mailer is not None else SmtpMailer(config.mail),
            team_directory=team_directory,
        )

    @classmethod
    def from_components(
        cls,
        *,
        session_factory: sessionmaker[Session],
        config: TermTrackConfig | None = None,
        publisher: EventPublisher | None = None,
        mailer: Mailer | None = None,
        team_directory: TeamDirectory | None = None,
    ) -> VersionControlService:
        """Build a service over an existing session factory.

        The caller owns the engine; :meth:`close` will not dispose it.
        """
        config = config or TermTrackConfig()
        return cls(
            engine=None,
            session_factory=session_factory,
            config=config,
            publisher=publisher if publisher is not None else NullPublisher(),
            mailer=mailer if mailer is not None else SmtpMailer(config.mail),
            team_directory=team_directory,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def config(self) -> TermTrackConfig:
        return self._config

    @property
    def publisher(self) -> EventPublisher:
        return self._publisher

    # ------------------------------------------------------------------
    # Transaction glue
    # ------------------------------------------------------------------

    @contextmanager
    def _transaction(self) -> Iterator[UnitOfWork]:
        with transaction(self._session_factory) as uow:
            yield uow

    def _branch_changed(
        self, uow: UnitOfWork, project_id: str, branch_name: str, actor_id: str | None
    ) -> None:
        """Publish ``BranchChanged`` once *uow* has committed."""

        def _publish() -> None:
            self._publisher.publish(
                BranchChanged(
                    project_id=project_id, branch_name=branch_name, actor_id=actor_id
                )
            )

        uow.after_commit(_publish)

    def _team(self, uow: UnitOfWork) -> TeamDirectory:
        if self._team_directory is not None:
            return self._team_directory
        return team_ops.MembershipTeamDirectory(uow.memberships)

    def _edit_current_branch(
        self,
        project_id: str,
        actor_id: str | None,
        edit: Callable[[Any, Any], bool],
    ) -> bool:
        """Apply *edit* to the current branch; emit an event only if it changed."""
        with self._transaction() as uow:
            branch = term_ops.resolve_current_branch(
                project_id, uow.projects, uow.branches
            )
            changed = edit(branch, uow.branches)
            if changed:
                self._branch_changed(uow, project_id, branch.name, actor_id)
        return changed

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def create_project(
        self, name: str, owner_id: str, *, project_id: str | None = None
    ) -> ProjectInfo:
        """Create a project with a ``main`` branch and an initial commit."""
        with self._transaction() as uow:
            row = project_ops.create_project(
                name,
                owner_id,
                uow.projects,
                uow.branches,
                uow.commits,
                uow.users,
                uow.memberships,
                project_id=project_id,
            )
            return project_ops.project_to_info(row, uow.branches, uow.commits)

    def get_project(self, project_id: str) -> ProjectInfo:
        with self._transaction() as uow:
            row = project_ops.get_project_row(project_id, uow.projects)
            return project_ops.project_to_info(row, uow.branches, uow.commits)

    def list_projects(self) -> list[ProjectInfo]:
        with self._transaction() as uow:
            return [project_ops.project_to_info(p) for p in uow.projects.list_all()]

    def delete_project(self, project_id: str) -> None:
        """Delete a project and everything it owns."""
        with self._transaction() as uow:
            project_ops.delete_project(project_id, uow.projects)

    def update_project_languages(
        self, project_id: str, languages: Iterable[Language | dict]
    ) -> ProjectInfo:
        """Replace the language set, repairing the default and member assignments.

        All project and membership writes commit together or not at all.
        """
        with self._transaction() as uow:
            row = project_ops.update_project_languages(
                project_id, languages, uow.projects, uow.memberships
            )
            return project_ops.project_to_info(row, uow.branches, uow.commits)

    def set_default_language(self, project_id: str, lang_code: str) -> None:
        with self._transaction() as uow:
            project_ops.set_default_language(project_id, lang_code, uow.projects)

    # ------------------------------------------------------------------
    # Users and team
    # ------------------------------------------------------------------

    def add_user(
        self,
        name: str,
        email: str,
        *,
        user_id: str | None = None,
        avatar_initials: str | None = None,
        settings: UserSettings | None = None,
    ) -> UserInfo:
        with self._transaction() as uow:
            row = team_ops.add_user(
                name,
                email,
                uow.users,
                user_id=user_id,
                avatar_initials=avatar_initials,
                settings=settings,
            )
            return team_ops.user_to_info(row)

    def get_user(self, user_id: str) -> UserInfo:
        with self._transaction() as uow:
            row = uow.users.get(user_id)
            if row is None:
                raise UserNotFoundError(user_id)
            return team_ops.user_to_info(row)

    def find_user_by_email(self, email: str) -> UserInfo | None:
        with self._transaction() as uow:
            row = uow.users.get_by_email(email)
            return team_ops.user_to_info(row) if row is not None else None

    def update_user_settings(self, user_id: str, settings: UserSettings) -> UserInfo:
        with self._transaction() as uow:
            row = team_ops.update_user_settings(user_id, settings, uow.users)
            return team_ops.user_to_info(row)

    def delete_user(self, user_id: str) -> None:
        """Delete a user; commits they authored keep existing without an author."""
        with self._transaction() as uow:
            team_ops.delete_user(user_id, uow.users)

    def add_member(
        self,
        project_id: str,
        email: str,
        role: UserRole,
        languages: Iterable[str] = (),
    ) -> TeamMember:
        with self._transaction() as uow:
            row = team_ops.add_member(
                project_id,
                email,
                role,
                languages,
                uow.projects,
                uow.users,
                uow.memberships,
            )
            return team_ops.membership_to_member(row)

    def remove_member(self, project_id: str, user_id: str) -> None:
        with self._transaction() as uow:
            team_ops.remove_member(project_id, user_id, uow.memberships)

    def update_member_role(self, project_id: str, user_id: str, role: UserRole) -> None:
        with self._transaction() as uow:
            team_ops.update_member_role(project_id, user_id, role, uow.memberships)

    def update_member_languages(
        self, project_id: str, user_id: str, languages: Iterable[str]
    ) -> None:
        with self._transaction() as uow:
            team_ops.update_member_languages(
                project_id, user_id, languages, uow.memberships
            )

    def list_members(self, project_id: str) -> list[TeamMember]:
        with self._transaction() as uow:
            project_ops.get_project_row(project_id, uow.projects)
            return self._team(uow).list_members(project_id)

    # ------------------------------------------------------------------
    # Terms (current branch's working snapshot)
    # ------------------------------------------------------------------

    def add_term(
        self,
        project_id: str,
        text: str,
        *,
        context: str | None = None,
        actor_id: str | None = None,
    ) -> Term:
        """Append a new, untranslated term to the current branch."""
        with self._transaction() as uow:
            branch = term_ops.resolve_current_branch(
                project_id, uow.projects, uow.branches
            )
            term = term_ops.add_term(branch, text, uow.branches, context=context)
            self._branch_changed(uow, project_id, branch.name, actor_id)
        return term

    def update_term_text(
        self,
        project_id: str,
        term_id: str,
        new_text: str,
        *,
        actor_id: str | None = None,
    ) -> bool:
        """Replace a term's text. Unknown ids are ignored; returns whether it changed."""
        return self._edit_current_branch(
            project_id,
            actor_id,
            lambda branch, repo: term_ops.update_term_text(branch, term_id, new_text, repo),
        )

    def update_term_context(
        self,
        project_id: str,
        term_id: str,
        new_context: str | None,
        *,
        actor_id: str | None = None,
    ) -> bool:
        return self._edit_current_branch(
            project_id,
            actor_id,
            lambda branch, repo: term_ops.update_term_context(
                branch, term_id, new_context, repo
            ),
        )

    def delete_term(
        self, project_id: str, term_id: str, *, actor_id: str | None = None
    ) -> bool:
        return self._edit_current_branch(
            project_id,
            actor_id,
            lambda branch, repo: term_ops.delete_term(branch, term_id, repo),
        )

    def update_translation(
        self,
        project_id: str,
        term_id: str,
        lang_code: str,
        value: str,
        *,
        actor_id: str | None = None,
    ) -> bool:
        """Set ``translations[lang_code]``. The code is not checked against the project."""
        return self._edit_current_branch(
            project_id,
            actor_id,
            lambda branch, repo: term_ops.update_translation(
                branch, term_id, lang_code, value, repo
            ),
        )

    def bulk_replace_terms(
        self,
        project_id: str,
        terms: Iterable[Term | dict[str, Any]],
        *,
        actor_id: str | None = None,
    ) -> list[Term]:
        """Replace the current branch's whole working snapshot."""
        with self._transaction() as uow:
            branch = term_ops.resolve_current_branch(
                project_id, uow.projects, uow.branches
            )
            snapshot = term_ops.bulk_replace_terms(branch, terms, uow.branches)
            self._branch_changed(uow, project_id, branch.name, actor_id)
        return list(snapshot)

    def get_working_terms(
        self, project_id: str, branch_name: str | None = None
    ) -> list[Term]:
        """Working terms of *branch_name*, or of the current branch if omitted."""
        with self._transaction() as uow:
            if branch_name is None:
                branch = term_ops.resolve_current_branch(
                    project_id, uow.projects, uow.branches
                )
            else:
                branch = uow.branches.get(project_id, branch_name)
                if branch is None:
                    raise BranchNotFoundError(branch_name)
            return list(term_ops.load_working(branch))

    # ------------------------------------------------------------------
    # Commits
    # ------------------------------------------------------------------

    def create_commit(
        self,
        project_id: str,
        branch_name: str,
        message: str,
        author_id: str | None,
    ) -> CommitInfo:
        """Freeze the branch's working terms into a new head commit.

        Team members other than the author who opted into commit
        notifications are e-mailed after the commit is persisted; mail
        failures never undo the commit.
        """
        with self._transaction() as uow:
            branch, row = commit_ops.create_commit(
                project_id, branch_name, message, author_id, uow.branches, uow.commits
            )
            info = commit_ops.row_to_info(row, branch.name)

            if self._config.commit_notifications:
                recipients = commit_ops.commit_recipients(
                    self._team(uow).list_members(project_id), author_id
                )
                if recipients:
                    project = project_ops.get_project_row(project_id, uow.projects)
                    author_name = info.author.name if info.author else "Someone"
                    subject, html = render_commit_email(
                        project.name, branch.name, author_name, message
                    )
                    for member in recipients:
                        uow.after_commit(
                            partial(self._mailer.send_email, member.user.email, subject, html)
                        )
            self._branch_changed(uow, project_id, branch.name, author_id)
        return info

    def rollback_latest_commit(
        self, project_id: str, branch_name: str, actor_id: str | None = None
    ) -> CommitInfo:
        """Undo the head commit and restore working terms from the new head.

        Returns:
            The commit that is head after the rollback.

        Raises:
            CannotRollbackError: If only the initial commit is left.
        """
        with self._transaction() as uow:
            new_head = commit_ops.rollback_latest_commit(
                project_id, branch_name, uow.branches, uow.commits
            )
            info = commit_ops.row_to_info(new_head, branch_name)
            self._branch_changed(uow, project_id, branch_name, actor_id)
        return info

    def log(
        self, project_id: str, branch_name: str, *, limit: int | None = None
    ) -> list[CommitInfo]:
        """Commit history of a branch, newest first."""
        with self._transaction() as uow:
            branch = uow.branches.get(project_id, branch_name)
            if branch is None:
                raise BranchNotFoundError(branch_name)
            return [
                commit_ops.row_to_info(row, branch.name)
                for row in uow.commits.list_for_branch(branch.id, limit=limit)
            ]

    def get_commit(self, commit_id: str) -> CommitInfo:
        with self._transaction() as uow:
            row = uow.commits.get(commit_id)
            if row is None:
                raise CommitNotFoundError(commit_id)
            return commit_ops.row_to_info(row)

    # ------------------------------------------------------------------
    # Branches
    # ------------------------------------------------------------------

    def create_branch(
        self, project_id: str, new_name: str, source_name: str
    ) -> BranchInfo:
        """Fork *new_name* from the head of *source_name*."""
        with self._transaction() as uow:
            row = branch_ops.create_branch(
                project_id, new_name, source_name, uow.branches, uow.commits
            )
            return self._branch_info(uow, row)

    def create_branch_from_commit(
        self, project_id: str, commit_id: str, new_name: str
    ) -> BranchInfo:
        """Fork *new_name* from any commit in the project's history."""
        with self._transaction() as uow:
            row = branch_ops.create_branch_from_commit(
                project_id, commit_id, new_name, uow.branches, uow.commits
            )
            return self._branch_info(uow, row)

    def delete_branch(self, project_id: str, name: str) -> bool:
        """Delete a branch and its commits. ``main`` cannot be deleted.

        Returns False if there was no branch called *name*. The
        current-branch pointer is not moved if it named *name*.
        """
        with self._transaction() as uow:
            return branch_ops.delete_branch(project_id, name, uow.branches)

    def switch_current_branch(self, project_id: str, name: str) -> None:
        """Point the project at *name* without checking that it exists."""
        with self._transaction() as uow:
            branch_ops.switch_current_branch(project_id, name, uow.projects)

    def get_branch(self, project_id: str, name: str) -> BranchInfo:
        with self._transaction() as uow:
            if uow.projects.get(project_id) is None:
                raise ProjectNotFoundError(project_id)
            row = uow.branches.get(project_id, name)
            if row is None:
                raise BranchNotFoundError(name)
            return self._branch_info(uow, row)

    def list_branches(self, project_id: str) -> list[BranchInfo]:
        with self._transaction() as uow:
            return branch_ops.list_branches(
                project_id, uow.projects, uow.branches, uow.commits
            )

    def _branch_info(self, uow: UnitOfWork, row: Any) -> BranchInfo:
        project = uow.projects.get(row.project_id)
        current = project.current_branch_name if project is not None else None
        return branch_ops.branch_to_info(row, uow.commits, current_branch_name=current)

    # ------------------------------------------------------------------
    # Merge
    # ------------------------------------------------------------------

    def merge_branches(
        self,
        project_id: str,
        source_name: str,
        target_name: str,
        actor_id: str | None = None,
    ) -> MergeResult:
        """Write the source head's terms over the target's working terms.

        Source wins on shared term ids; target-only terms are kept. No commit
        is created -- commit the target afterwards to record the merge.
        """
        with self._transaction() as uow:
            result = merge_ops.merge_branches(
                project_id, source_name, target_name, uow.branches, uow.commits
            )
            self._branch_changed(uow, project_id, target_name, actor_id)
        return result

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Dispose the engine if this service created it."""
        if self._closed:
            return
        self._closed = True
        if self._engine is not None:
            self._engine.dispose()

    def __enter__(self) -> VersionControlService:
        return self

    def __exit__(
        self, exc_type: type | None, exc_val: BaseException | None, exc_tb: object
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"VersionControlService({state})"
