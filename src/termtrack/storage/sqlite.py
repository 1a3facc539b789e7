"""SQL implementations of repository interfaces.

All repositories use SQLAlchemy 2.0-style queries (select() + session.execute()).
Each repository takes a Session in its constructor. None of them commit:
transaction boundaries belong to the caller.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from termtrack.exceptions import BranchExistsError
from termtrack.storage.repositories import (
    BranchRepository,
    CommitRepository,
    MembershipRepository,
    ProjectRepository,
    UserRepository,
)
from termtrack.storage.schema import (
    BranchRow,
    CommitRow,
    ProjectRow,
    TeamMembershipRow,
    UserRow,
)


class SqliteProjectRepository(ProjectRepository):
    """SQL implementation of project repository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, project_id: str, *, for_update: bool = False) -> ProjectRow | None:
        stmt = select(ProjectRow).where(ProjectRow.id == project_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.execute(stmt).scalar_one_or_none()

    def list_all(self) -> Sequence[ProjectRow]:
        stmt = select(ProjectRow).order_by(ProjectRow.created_at.asc(), ProjectRow.id)
        return self._session.execute(stmt).scalars().all()

    def save(self, project: ProjectRow) -> None:
        self._session.add(project)
        self._session.flush()

    def delete(self, project: ProjectRow) -> None:
        self._session.delete(project)
        self._session.flush()


class SqliteBranchRepository(BranchRepository):
    """SQL implementation of branch repository.

    The (project_id, name) unique constraint is the source of truth for
    name collisions; the pre-check only produces a clearer error earlier.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(
        self, project_id: str, name: str, *, for_update: bool = False
    ) -> BranchRow | None:
        stmt = select(BranchRow).where(
            BranchRow.project_id == project_id, BranchRow.name == name
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.execute(stmt).scalar_one_or_none()

    def list_for_project(self, project_id: str) -> Sequence[BranchRow]:
        stmt = (
            select(BranchRow)
            .where(BranchRow.project_id == project_id)
            .order_by(BranchRow.created_at.asc(), BranchRow.id.asc())
        )
        return self._session.execute(stmt).scalars().all()

    def save(self, branch: BranchRow) -> None:
        if branch.id is None:
            existing = self.get(branch.project_id, branch.name)
            if existing is not None:
                raise BranchExistsError(branch.name)
        self._session.add(branch)
        try:
            self._session.flush()
        except IntegrityError as exc:
            raise BranchExistsError(branch.name) from exc

    def delete(self, branch: BranchRow) -> None:
        self._session.delete(branch)
        self._session.flush()


class SqliteCommitRepository(CommitRepository):
    """SQL implementation of commit repository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, commit_id: str) -> CommitRow | None:
        stmt = select(CommitRow).where(CommitRow.id == commit_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def save(self, commit: CommitRow) -> None:
        if not commit.seq:
            stmt = select(func.coalesce(func.max(CommitRow.seq), 0)).where(
                CommitRow.branch_id == commit.branch_id
            )
            commit.seq = self._session.execute(stmt).scalar_one() + 1
        self._session.add(commit)
        self._session.flush()

    def list_for_branch(
        self, branch_id: int, limit: int | None = None
    ) -> Sequence[CommitRow]:
        stmt = (
            select(CommitRow)
            .where(CommitRow.branch_id == branch_id)
            .order_by(CommitRow.created_at.desc(), CommitRow.seq.desc())
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        return self._session.execute(stmt).scalars().all()

    def get_head(self, branch_id: int) -> CommitRow | None:
        rows = self.list_for_branch(branch_id, limit=1)
        return rows[0] if rows else None

    def count(self, branch_id: int) -> int:
        stmt = select(func.count()).select_from(CommitRow).where(
            CommitRow.branch_id == branch_id
        )
        return self._session.execute(stmt).scalar_one()

    def delete(self, commit: CommitRow) -> None:
        self._session.delete(commit)
        self._session.flush()


class SqliteUserRepository(UserRepository):
    """SQL implementation of user repository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, user_id: str) -> UserRow | None:
        stmt = select(UserRow).where(UserRow.id == user_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_by_email(self, email: str) -> UserRow | None:
        stmt = select(UserRow).where(UserRow.email == email)
        return self._session.execute(stmt).scalar_one_or_none()

    def save(self, user: UserRow) -> None:
        self._session.add(user)
        self._session.flush()

    def delete(self, user: UserRow) -> None:
        self._session.delete(user)
        self._session.flush()


class SqliteMembershipRepository(MembershipRepository):
    """SQL implementation of team membership repository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, project_id: str, user_id: str) -> TeamMembershipRow | None:
        stmt = select(TeamMembershipRow).where(
            TeamMembershipRow.project_id == project_id,
            TeamMembershipRow.user_id == user_id,
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def list_for_project(self, project_id: str) -> Sequence[TeamMembershipRow]:
        stmt = (
            select(TeamMembershipRow)
            .where(TeamMembershipRow.project_id == project_id)
            .order_by(TeamMembershipRow.user_id)
        )
        return self._session.execute(stmt).scalars().unique().all()

    def save(self, membership: TeamMembershipRow) -> None:
        self._session.add(membership)
        self._session.flush()

    def delete(self, membership: TeamMembershipRow) -> None:
        self._session.delete(membership)
        self._session.flush()
