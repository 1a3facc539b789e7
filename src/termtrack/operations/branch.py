"""Branch lifecycle operations for termtrack.

Create, fork-from-commit, delete, switch, list, and validate branches.
Composes storage primitives (branch repo, commit repo) into higher-level
actions. Every created branch gets one commit copied from its seed, so no
branch ever has an empty history.
"""

from __future__ import annotations

import copy
import logging
import re
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from termtrack.exceptions import (
    CannotDeleteMainError,
    CommitNotFoundError,
    InvalidBranchNameError,
    ProjectNotFoundError,
    SourceBranchNotFoundError,
)
from termtrack.models.branch import MAIN_BRANCH, BranchInfo
from termtrack.models.term import Snapshot
from termtrack.operations.commits import copy_commit
from termtrack.storage.schema import BranchRow

if TYPE_CHECKING:
    from termtrack.storage.repositories import (
        BranchRepository,
        CommitRepository,
        ProjectRepository,
    )
    from termtrack.storage.schema import CommitRow

logger = logging.getLogger(__name__)

# Characters forbidden in branch names (git-style)
_FORBIDDEN_CHARS = re.compile(r"[\s~^:?*\[\\]")


def validate_branch_name(name: str) -> None:
    """Validate a branch name against git-style naming rules.

    Raises InvalidBranchNameError on violation.
    """
    if not name:
        raise InvalidBranchNameError(name, "branch name cannot be empty")

    if ".." in name:
        raise InvalidBranchNameError(name, "branch name cannot contain '..'")

    if name.startswith(".") or name.endswith("."):
        raise InvalidBranchNameError(name, "branch name cannot start or end with '.'")

    if _FORBIDDEN_CHARS.search(name):
        raise InvalidBranchNameError(
            name, "branch name contains forbidden characters (whitespace, ~, ^, :, ?, *, [, \\)"
        )

    if name.startswith("/") or name.endswith("/") or "//" in name:
        raise InvalidBranchNameError(name, "branch name has invalid slash usage")


def branch_to_info(
    branch: BranchRow,
    commit_repo: CommitRepository,
    *,
    current_branch_name: str | None = None,
) -> BranchInfo:
    head = commit_repo.get_head(branch.id)
    return BranchInfo(
        name=branch.name,
        project_id=branch.project_id,
        working_terms=list(Snapshot.from_json(branch.working_terms)),
        is_current=branch.name == current_branch_name,
        head_commit_id=head.id if head is not None else None,
        commit_count=commit_repo.count(branch.id),
    )


def _seed_branch(
    project_id: str,
    name: str,
    seed: CommitRow | None,
    branch_repo: BranchRepository,
    commit_repo: CommitRepository,
) -> BranchRow:
    """Create branch *name* with working terms (and first commit) from *seed*."""
    branch = BranchRow(
        project_id=project_id,
        name=name,
        working_terms=copy.deepcopy(seed.terms_json or []) if seed is not None else [],
        created_at=datetime.now(timezone.utc),
    )
    branch_repo.save(branch)
    if seed is not None:
        copy_commit(seed, branch, commit_repo)
    return branch


def create_branch(
    project_id: str,
    new_name: str,
    source_name: str,
    branch_repo: BranchRepository,
    commit_repo: CommitRepository,
) -> BranchRow:
    """Fork *new_name* from the head commit of *source_name*.

    The new branch's working terms equal the source head's terms (empty if
    the source somehow has no commits), and its log starts with a copy of
    that head.

    Raises:
        InvalidBranchNameError: If *new_name* breaks naming rules.
        SourceBranchNotFoundError: If the source branch does not exist.
        BranchExistsError: If *new_name* is already taken in the project.
    """
    validate_branch_name(new_name)

    source = branch_repo.get(project_id, source_name)
    if source is None:
        raise SourceBranchNotFoundError(source_name)

    head = commit_repo.get_head(source.id)
    if head is None:
        logger.warning(
            "Branch %s/%s has no commits; forking %s with empty terms",
            project_id,
            source_name,
            new_name,
        )
    branch = _seed_branch(project_id, new_name, head, branch_repo, commit_repo)
    logger.debug("Created branch %s/%s from %s", project_id, new_name, source_name)
    return branch


def create_branch_from_commit(
    project_id: str,
    commit_id: str,
    new_name: str,
    branch_repo: BranchRepository,
    commit_repo: CommitRepository,
) -> BranchRow:
    """Fork *new_name* from any commit of the project, not only a head.

    Raises:
        InvalidBranchNameError: If *new_name* breaks naming rules.
        CommitNotFoundError: If the commit does not exist in this project.
        BranchExistsError: If *new_name* is already taken in the project.
    """
    validate_branch_name(new_name)

    seed = commit_repo.get(commit_id)
    if seed is None or seed.branch.project_id != project_id:
        raise CommitNotFoundError(commit_id)

    branch = _seed_branch(project_id, new_name, seed, branch_repo, commit_repo)
    logger.debug(
        "Created branch %s/%s from commit %s", project_id, new_name, commit_id
    )
    return branch


def delete_branch(
    project_id: str,
    name: str,
    branch_repo: BranchRepository,
) -> bool:
    """Delete a branch and, by cascade, its commits.

    Deleting a name with no branch is a no-op that returns False. The
    project's current-branch pointer is left untouched even when it names
    the deleted branch; choosing a new current branch is up to the caller.

    Raises:
        CannotDeleteMainError: If *name* is ``main``.
    """
    if name == MAIN_BRANCH:
        raise CannotDeleteMainError(name)

    branch = branch_repo.get(project_id, name, for_update=True)
    if branch is None:
        return False
    branch_repo.delete(branch)
    logger.debug("Deleted branch %s/%s", project_id, name)
    return True


def switch_current_branch(
    project_id: str,
    name: str,
    project_repo: ProjectRepository,
) -> None:
    """Point the project at branch *name*.

    The branch is not required to exist; term operations will fail with
    BranchNotFoundError until the pointer names a real branch.

    Raises:
        ProjectNotFoundError: If the project does not exist.
    """
    project = project_repo.get(project_id, for_update=True)
    if project is None:
        raise ProjectNotFoundError(project_id)
    project.current_branch_name = name
    project.updated_at = datetime.now(timezone.utc)
    project_repo.save(project)


def list_branches(
    project_id: str,
    project_repo: ProjectRepository,
    branch_repo: BranchRepository,
    commit_repo: CommitRepository,
) -> list[BranchInfo]:
    project = project_repo.get(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    return [
        branch_to_info(b, commit_repo, current_branch_name=project.current_branch_name)
        for b in branch_repo.list_for_project(project_id)
    ]
