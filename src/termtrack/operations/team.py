"""User and team membership operations.

Team data is read by the commit engine to decide who gets notified; it is
otherwise plain CRUD. Authorization decisions are made before any of these
functions are called.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import TYPE_CHECKING

from termtrack.exceptions import (
    MemberExistsError,
    ProjectNotFoundError,
    UserNotFoundError,
)
from termtrack.models.team import TeamMember, UserInfo, UserRole, UserSettings
from termtrack.storage.schema import TeamMembershipRow, UserRow

if TYPE_CHECKING:
    from termtrack.storage.repositories import (
        MembershipRepository,
        ProjectRepository,
        UserRepository,
    )


def _initials(name: str) -> str:
    parts = [p for p in name.split() if p]
    return "".join(p[0] for p in parts[:2]).upper()


def user_to_info(row: UserRow) -> UserInfo:
    return UserInfo(
        id=row.id,
        name=row.name,
        email=row.email,
        avatar_initials=row.avatar_initials,
        settings=UserSettings.model_validate(row.settings_json or {}),
    )


def membership_to_member(row: TeamMembershipRow) -> TeamMember:
    return TeamMember(
        user=user_to_info(row.user),
        role=row.role,
        languages=list(row.languages_json or []),
    )


class MembershipTeamDirectory:
    """TeamDirectory backed by the membership table of the current session."""

    def __init__(self, membership_repo: MembershipRepository) -> None:
        self._membership_repo = membership_repo

    def list_members(self, project_id: str) -> list[TeamMember]:
        return [
            membership_to_member(row)
            for row in self._membership_repo.list_for_project(project_id)
        ]


def add_user(
    name: str,
    email: str,
    user_repo: UserRepository,
    *,
    user_id: str | None = None,
    avatar_initials: str | None = None,
    settings: UserSettings | None = None,
) -> UserRow:
    row = UserRow(
        id=user_id or f"user-{uuid.uuid4().hex}",
        name=name,
        email=email,
        avatar_initials=avatar_initials or _initials(name),
        settings_json=(settings or UserSettings()).model_dump(),
    )
    user_repo.save(row)
    return row


def update_user_settings(
    user_id: str, settings: UserSettings, user_repo: UserRepository
) -> UserRow:
    row = user_repo.get(user_id)
    if row is None:
        raise UserNotFoundError(user_id)
    row.settings_json = settings.model_dump()
    user_repo.save(row)
    return row


def delete_user(user_id: str, user_repo: UserRepository) -> None:
    """Remove a user. Their commits remain, with no author."""
    row = user_repo.get(user_id)
    if row is None:
        raise UserNotFoundError(user_id)
    user_repo.delete(row)


def add_member(
    project_id: str,
    email: str,
    role: UserRole,
    languages: Iterable[str],
    project_repo: ProjectRepository,
    user_repo: UserRepository,
    membership_repo: MembershipRepository,
) -> TeamMembershipRow:
    """Add the user with *email* to the project team.

    Raises:
        ProjectNotFoundError: If the project does not exist.
        UserNotFoundError: If no user has this e-mail address.
        MemberExistsError: If the user is already on the team.
    """
    if project_repo.get(project_id) is None:
        raise ProjectNotFoundError(project_id)
    user = user_repo.get_by_email(email)
    if user is None:
        raise UserNotFoundError(email)
    if membership_repo.get(project_id, user.id) is not None:
        raise MemberExistsError(user.id)

    row = TeamMembershipRow(
        project_id=project_id,
        user_id=user.id,
        role=UserRole(role),
        languages_json=list(languages),
    )
    membership_repo.save(row)
    return row


def _get_membership(
    project_id: str, user_id: str, membership_repo: MembershipRepository
) -> TeamMembershipRow:
    row = membership_repo.get(project_id, user_id)
    if row is None:
        raise UserNotFoundError(user_id)
    return row


def remove_member(
    project_id: str, user_id: str, membership_repo: MembershipRepository
) -> None:
    row = membership_repo.get(project_id, user_id)
    if row is not None:
        membership_repo.delete(row)


def update_member_role(
    project_id: str,
    user_id: str,
    role: UserRole,
    membership_repo: MembershipRepository,
) -> TeamMembershipRow:
    row = _get_membership(project_id, user_id, membership_repo)
    row.role = UserRole(role)
    membership_repo.save(row)
    return row


def update_member_languages(
    project_id: str,
    user_id: str,
    languages: Iterable[str],
    membership_repo: MembershipRepository,
) -> TeamMembershipRow:
    row = _get_membership(project_id, user_id, membership_repo)
    row.languages_json = list(languages)
    membership_repo.save(row)
    return row
