"""Commit engine operations: snapshotting, copying and rolling back history.

A commit freezes a deep copy of the branch's working terms. The working
snapshot is left as-is and becomes the base of the next commit; there is
no dirty tracking, so committing twice in a row records the same content
twice.
"""

from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from termtrack.exceptions import BranchNotFoundError, CannotRollbackError
from termtrack.models.commit import AuthorInfo, CommitInfo, new_commit_id
from termtrack.models.term import Snapshot
from termtrack.storage.schema import CommitRow

if TYPE_CHECKING:
    from termtrack.models.team import TeamMember
    from termtrack.storage.repositories import BranchRepository, CommitRepository
    from termtrack.storage.schema import BranchRow

logger = logging.getLogger(__name__)


def row_to_info(row: CommitRow, branch_name: str | None = None) -> CommitInfo:
    """Convert a CommitRow to CommitInfo, resolving the author if present."""
    author = None
    if row.author is not None:
        author = AuthorInfo(
            id=row.author.id,
            name=row.author.name,
            avatar_initials=row.author.avatar_initials,
        )
    return CommitInfo(
        id=row.id,
        branch_name=branch_name if branch_name is not None else row.branch.name,
        message=row.message,
        author_id=row.author_id,
        author=author,
        created_at=row.created_at,
        terms=list(Snapshot.from_json(row.terms_json)),
    )


def snapshot_commit(
    branch: BranchRow,
    message: str,
    author_id: str | None,
    commit_repo: CommitRepository,
) -> CommitRow:
    """Append a commit holding a deep copy of the branch's working terms."""
    row = CommitRow(
        id=new_commit_id(),
        branch_id=branch.id,
        message=message,
        author_id=author_id,
        created_at=datetime.now(timezone.utc),
        terms_json=copy.deepcopy(branch.working_terms or []),
    )
    commit_repo.save(row)
    return row


def copy_commit(
    source: CommitRow, branch: BranchRow, commit_repo: CommitRepository
) -> CommitRow:
    """Duplicate *source* onto *branch* under a fresh id.

    Message, author and timestamp are preserved so the new branch's history
    starts where it was forked from.
    """
    row = CommitRow(
        id=new_commit_id(),
        branch_id=branch.id,
        message=source.message,
        author_id=source.author_id,
        created_at=source.created_at,
        terms_json=copy.deepcopy(source.terms_json or []),
    )
    commit_repo.save(row)
    return row


def create_commit(
    project_id: str,
    branch_name: str,
    message: str,
    author_id: str | None,
    branch_repo: BranchRepository,
    commit_repo: CommitRepository,
) -> tuple[BranchRow, CommitRow]:
    """Record the named branch's working terms as a new head commit.

    Raises:
        BranchNotFoundError: If the branch does not exist in the project.
    """
    branch = branch_repo.get(project_id, branch_name, for_update=True)
    if branch is None:
        raise BranchNotFoundError(branch_name)
    row = snapshot_commit(branch, message, author_id, commit_repo)
    logger.debug("Committed %s on %s/%s", row.id, project_id, branch_name)
    return branch, row


def rollback_latest_commit(
    project_id: str,
    branch_name: str,
    branch_repo: BranchRepository,
    commit_repo: CommitRepository,
) -> CommitRow:
    """Delete the head commit and reset working terms to the new head.

    Both writes happen in the caller's transaction; the caller must roll
    back on any failure so a half-applied rollback is never visible.

    Returns:
        The commit that is head after the rollback.

    Raises:
        BranchNotFoundError: If the branch does not exist.
        CannotRollbackError: If the log has one commit or none.
    """
    branch = branch_repo.get(project_id, branch_name, for_update=True)
    if branch is None:
        raise BranchNotFoundError(branch_name)

    history = commit_repo.list_for_branch(branch.id, limit=2)
    if len(history) <= 1:
        raise CannotRollbackError(branch_name)

    head, new_head = history[0], history[1]
    commit_repo.delete(head)
    branch.working_terms = copy.deepcopy(new_head.terms_json or [])
    branch_repo.save(branch)
    logger.debug(
        "Rolled back %s on %s/%s; head is now %s",
        head.id,
        project_id,
        branch_name,
        new_head.id,
    )
    return new_head


def commit_recipients(
    members: list[TeamMember], author_id: str | None
) -> list[TeamMember]:
    """Members other than the author who opted into commit notifications."""
    return [
        m
        for m in members
        if m.user.id != author_id and m.wants_commit_notifications and m.user.email
    ]
