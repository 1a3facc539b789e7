"""Project operations for termtrack.

A project is created together with its ``main`` branch, an initial empty
commit, and an admin membership for the owner. Changing the language set
touches the project row and every membership row; callers must run it in a
single transaction.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from termtrack.exceptions import (
    DuplicateLanguageError,
    ProjectNotFoundError,
    UnknownLanguageError,
    UserNotFoundError,
)
from termtrack.models.branch import MAIN_BRANCH
from termtrack.models.project import DEFAULT_LANGUAGES, Language, ProjectInfo
from termtrack.models.team import UserRole
from termtrack.operations.branch import branch_to_info
from termtrack.operations.commits import snapshot_commit
from termtrack.storage.schema import BranchRow, ProjectRow, TeamMembershipRow

if TYPE_CHECKING:
    from termtrack.storage.repositories import (
        BranchRepository,
        CommitRepository,
        MembershipRepository,
        ProjectRepository,
        UserRepository,
    )

logger = logging.getLogger(__name__)

INITIAL_COMMIT_MESSAGE = "Initial commit"


def new_project_id() -> str:
    return f"proj-{uuid.uuid4().hex}"


def _languages(project: ProjectRow) -> list[Language]:
    return [Language.model_validate(item) for item in project.languages_json or []]


def project_to_info(
    project: ProjectRow,
    branch_repo: BranchRepository | None = None,
    commit_repo: CommitRepository | None = None,
) -> ProjectInfo:
    """Convert a ProjectRow; branches are included when repos are given."""
    branches = []
    if branch_repo is not None and commit_repo is not None:
        branches = [
            branch_to_info(b, commit_repo, current_branch_name=project.current_branch_name)
            for b in branch_repo.list_for_project(project.id)
        ]
    return ProjectInfo(
        id=project.id,
        name=project.name,
        languages=_languages(project),
        default_language_code=project.default_language_code,
        current_branch_name=project.current_branch_name,
        branches=branches,
        created_at=project.created_at,
    )


def get_project_row(project_id: str, project_repo: ProjectRepository) -> ProjectRow:
    project = project_repo.get(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    return project


def create_project(
    name: str,
    owner_id: str,
    project_repo: ProjectRepository,
    branch_repo: BranchRepository,
    commit_repo: CommitRepository,
    user_repo: UserRepository,
    membership_repo: MembershipRepository,
    *,
    project_id: str | None = None,
) -> ProjectRow:
    """Create a project with its main branch, initial commit and owner.

    Raises:
        UserNotFoundError: If *owner_id* is not a known user.
    """
    if user_repo.get(owner_id) is None:
        raise UserNotFoundError(owner_id)

    now = datetime.now(timezone.utc)
    default_lang = DEFAULT_LANGUAGES[0].code
    project = ProjectRow(
        id=project_id or new_project_id(),
        name=name,
        languages_json=[lang.model_dump() for lang in DEFAULT_LANGUAGES],
        default_language_code=default_lang,
        current_branch_name=MAIN_BRANCH,
        created_at=now,
        updated_at=now,
    )
    project_repo.save(project)

    membership_repo.save(
        TeamMembershipRow(
            project_id=project.id,
            user_id=owner_id,
            role=UserRole.ADMIN,
            languages_json=[default_lang],
        )
    )

    main = BranchRow(
        project_id=project.id, name=MAIN_BRANCH, working_terms=[], created_at=now
    )
    branch_repo.save(main)
    snapshot_commit(main, INITIAL_COMMIT_MESSAGE, owner_id, commit_repo)

    logger.info("Created project %s (%s)", project.id, name)
    return project


def update_project_languages(
    project_id: str,
    languages: Iterable[Language | dict],
    project_repo: ProjectRepository,
    membership_repo: MembershipRepository,
) -> ProjectRow:
    """Replace the project's language set.

    The default language survives if still supported, otherwise it becomes
    the first new code (or ``""`` when the set is empty). Every member's
    assigned languages are filtered down to the new set.

    Raises:
        ProjectNotFoundError: If the project does not exist.
        DuplicateLanguageError: If a code appears twice.
    """
    new_languages = [
        lang if isinstance(lang, Language) else Language.model_validate(lang)
        for lang in languages
    ]
    codes: list[str] = []
    for lang in new_languages:
        if lang.code in codes:
            raise DuplicateLanguageError(lang.code)
        codes.append(lang.code)

    project = project_repo.get(project_id, for_update=True)
    if project is None:
        raise ProjectNotFoundError(project_id)

    for membership in membership_repo.list_for_project(project_id):
        kept = [c for c in membership.languages_json or [] if c in codes]
        if kept != list(membership.languages_json or []):
            membership.languages_json = kept
            membership_repo.save(membership)

    if project.default_language_code not in codes:
        project.default_language_code = codes[0] if codes else ""
    project.languages_json = [lang.model_dump() for lang in new_languages]
    project.updated_at = datetime.now(timezone.utc)
    project_repo.save(project)
    return project


def set_default_language(
    project_id: str, lang_code: str, project_repo: ProjectRepository
) -> ProjectRow:
    """Raises UnknownLanguageError if *lang_code* is not a supported language."""
    project = project_repo.get(project_id, for_update=True)
    if project is None:
        raise ProjectNotFoundError(project_id)
    if lang_code not in {lang.code for lang in _languages(project)}:
        raise UnknownLanguageError(lang_code)
    project.default_language_code = lang_code
    project.updated_at = datetime.now(timezone.utc)
    project_repo.save(project)
    return project


def delete_project(project_id: str, project_repo: ProjectRepository) -> None:
    project = project_repo.get(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    project_repo.delete(project)
    logger.info("Deleted project %s", project_id)
