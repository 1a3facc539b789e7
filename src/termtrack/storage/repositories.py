"""Abstract repository interfaces for termtrack storage.

Defines ABC interfaces for all database operations. No SQLAlchemy
imports here -- pure abstract contracts.

Concrete implementations are in sqlite.py.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from termtrack.storage.schema import (
        BranchRow,
        CommitRow,
        ProjectRow,
        TeamMembershipRow,
        UserRow,
    )


class ProjectRepository(ABC):
    """Abstract interface for project storage operations."""

    @abstractmethod
    def get(self, project_id: str, *, for_update: bool = False) -> ProjectRow | None:
        """Get a project by id. Returns None if not found."""
        ...

    @abstractmethod
    def list_all(self) -> Sequence[ProjectRow]:
        """All projects, oldest first."""
        ...

    @abstractmethod
    def save(self, project: ProjectRow) -> None:
        """Insert or update a project."""
        ...

    @abstractmethod
    def delete(self, project: ProjectRow) -> None:
        """Delete a project; branches, commits and memberships cascade."""
        ...


class BranchRepository(ABC):
    """Abstract interface for branch storage operations."""

    @abstractmethod
    def get(
        self, project_id: str, name: str, *, for_update: bool = False
    ) -> BranchRow | None:
        """Get a branch by (project_id, name). Returns None if not found.

        With *for_update*, the row is locked for the rest of the transaction
        on backends that support row locks.
        """
        ...

    @abstractmethod
    def list_for_project(self, project_id: str) -> Sequence[BranchRow]:
        """All branches of a project, in creation order."""
        ...

    @abstractmethod
    def save(self, branch: BranchRow) -> None:
        """Insert or update a branch.

        Raises BranchExistsError if (project_id, name) is already taken.
        """
        ...

    @abstractmethod
    def delete(self, branch: BranchRow) -> None:
        """Delete a branch; its commits cascade."""
        ...


class CommitRepository(ABC):
    """Abstract interface for commit storage operations."""

    @abstractmethod
    def get(self, commit_id: str) -> CommitRow | None:
        """Get a commit by id. Returns None if not found."""
        ...

    @abstractmethod
    def save(self, commit: CommitRow) -> None:
        """Append a commit to its branch log, assigning the next ``seq``."""
        ...

    @abstractmethod
    def list_for_branch(
        self, branch_id: int, limit: int | None = None
    ) -> Sequence[CommitRow]:
        """Commits of a branch, newest first."""
        ...

    @abstractmethod
    def get_head(self, branch_id: int) -> CommitRow | None:
        """Newest commit of a branch, or None for an empty log."""
        ...

    @abstractmethod
    def count(self, branch_id: int) -> int:
        """Number of commits in a branch log."""
        ...

    @abstractmethod
    def delete(self, commit: CommitRow) -> None:
        """Delete a commit."""
        ...


class UserRepository(ABC):
    """Abstract interface for user storage operations."""

    @abstractmethod
    def get(self, user_id: str) -> UserRow | None:
        ...

    @abstractmethod
    def get_by_email(self, email: str) -> UserRow | None:
        ...

    @abstractmethod
    def save(self, user: UserRow) -> None:
        ...

    @abstractmethod
    def delete(self, user: UserRow) -> None:
        """Delete a user. Authored commits keep existing with no author."""
        ...


class MembershipRepository(ABC):
    """Abstract interface for team membership operations."""

    @abstractmethod
    def get(self, project_id: str, user_id: str) -> TeamMembershipRow | None:
        ...

    @abstractmethod
    def list_for_project(self, project_id: str) -> Sequence[TeamMembershipRow]:
        """Memberships of a project with their users loaded."""
        ...

    @abstractmethod
    def save(self, membership: TeamMembershipRow) -> None:
        ...

    @abstractmethod
    def delete(self, membership: TeamMembershipRow) -> None:
        ...
