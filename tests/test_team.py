"""Tests for users and team membership.

Covers:
- add_user initials and settings defaults
- add_member / remove_member / update_member_role / update_member_languages
- Error cases: unknown project, unknown e-mail, duplicate membership
"""

from __future__ import annotations

import pytest

from termtrack import (
    MemberExistsError,
    ProjectNotFoundError,
    UserNotFoundError,
    UserRole,
    UserSettings,
)


class TestUsers:
    def test_add_user_defaults(self, service):
        user = service.add_user("grace brewster hopper", "grace@example.com")
        assert user.id.startswith("user-")
        assert user.avatar_initials == "GB"
        assert user.settings == UserSettings()

    def test_explicit_initials(self, service):
        user = service.add_user("Grace", "grace@example.com", avatar_initials="GH")
        assert user.avatar_initials == "GH"

    def test_find_by_email(self, service, owner):
        assert service.find_user_by_email(owner.email).id == owner.id
        assert service.find_user_by_email("nobody@example.com") is None

    def test_update_settings(self, service, owner):
        updated = service.update_user_settings(
            owner.id, UserSettings(commit_notifications=False, mention_notifications=True)
        )
        assert updated.settings.mention_notifications is True
        assert service.get_user(owner.id).settings.commit_notifications is False

    def test_update_settings_unknown(self, service):
        with pytest.raises(UserNotFoundError):
            service.update_user_settings("user-missing", UserSettings())

    def test_delete_user_removes_membership(self, service, project):
        bob = service.add_user("Bob", "bob@example.com")
        service.add_member(project.id, bob.email, UserRole.EDITOR)
        service.delete_user(bob.id)
        assert bob.id not in {m.user.id for m in service.list_members(project.id)}
        with pytest.raises(UserNotFoundError):
            service.get_user(bob.id)


class TestMembers:
    @pytest.fixture
    def bob(self, service):
        return service.add_user("Bob", "bob@example.com")

    def test_add_member(self, service, project, bob):
        member = service.add_member(project.id, bob.email, UserRole.TRANSLATOR, ["it"])
        assert member.user.id == bob.id
        assert member.role == UserRole.TRANSLATOR
        assert member.languages == ["it"]
        assert len(service.list_members(project.id)) == 2

    def test_add_member_by_role_string(self, service, project, bob):
        member = service.add_member(project.id, bob.email, "editor")
        assert member.role == UserRole.EDITOR

    def test_add_member_unknown_email(self, service, project):
        with pytest.raises(UserNotFoundError):
            service.add_member(project.id, "ghost@example.com", UserRole.EDITOR)

    def test_add_member_unknown_project(self, service, bob):
        with pytest.raises(ProjectNotFoundError):
            service.add_member("proj-missing", bob.email, UserRole.EDITOR)

    def test_add_member_twice(self, service, project, bob):
        service.add_member(project.id, bob.email, UserRole.EDITOR)
        with pytest.raises(MemberExistsError):
            service.add_member(project.id, bob.email, UserRole.ADMIN)

    def test_update_role_and_languages(self, service, project, bob):
        service.add_member(project.id, bob.email, UserRole.TRANSLATOR, ["it"])
        service.update_member_role(project.id, bob.id, UserRole.EDITOR)
        service.update_member_languages(project.id, bob.id, ["it", "es"])

        member = next(m for m in service.list_members(project.id) if m.user.id == bob.id)
        assert member.role == UserRole.EDITOR
        assert member.languages == ["it", "es"]

    def test_update_non_member(self, service, project, bob):
        with pytest.raises(UserNotFoundError):
            service.update_member_role(project.id, bob.id, UserRole.ADMIN)

    def test_remove_member(self, service, project, bob):
        service.add_member(project.id, bob.email, UserRole.EDITOR)
        service.remove_member(project.id, bob.id)
        service.remove_member(project.id, bob.id)
        assert bob.id not in {m.user.id for m in service.list_members(project.id)}

    def test_list_members_unknown_project(self, service):
        with pytest.raises(ProjectNotFoundError):
            service.list_members("proj-missing")
