"""Tests for project lifecycle and language settings.

Covers:
- create_project defaults: languages, main branch, initial commit, admin owner
- get / list / delete
- update_project_languages: default repair, member filtering, atomicity
- set_default_language validation
"""

from __future__ import annotations

import pytest

from termtrack import (
    DuplicateLanguageError,
    Language,
    ProjectNotFoundError,
    UnknownLanguageError,
    UserNotFoundError,
    UserRole,
)


class TestCreateProject:
    def test_defaults(self, service, owner):
        info = service.create_project("Website", owner.id)

        assert info.id.startswith("proj-")
        assert info.languages == [Language(code="en", name="English")]
        assert info.default_language_code == "en"
        assert info.current_branch_name == "main"
        assert [b.name for b in info.branches] == ["main"]
        assert info.branches[0].working_terms == []

    def test_initial_commit_by_owner(self, service, owner):
        info = service.create_project("Website", owner.id)
        (initial,) = service.log(info.id, "main")
        assert initial.message == "Initial commit"
        assert initial.author.id == owner.id

    def test_owner_is_admin(self, service, owner):
        info = service.create_project("Website", owner.id)
        (member,) = service.list_members(info.id)
        assert member.user.id == owner.id
        assert member.role == UserRole.ADMIN
        assert member.languages == ["en"]

    def test_explicit_id(self, service, owner):
        info = service.create_project("Website", owner.id, project_id="proj-web")
        assert service.get_project("proj-web").name == info.name

    def test_unknown_owner(self, service):
        with pytest.raises(UserNotFoundError):
            service.create_project("Website", "user-missing")
        assert service.list_projects() == []

    def test_create_emits_no_event(self, service, owner, publisher):
        service.create_project("Website", owner.id)
        assert len(publisher) == 0


class TestProjectQueries:
    def test_get_missing(self, service):
        with pytest.raises(ProjectNotFoundError) as exc_info:
            service.get_project("proj-missing")
        assert exc_info.value.to_dict()["kind"] == "ProjectNotFound"

    def test_list(self, service, owner):
        a = service.create_project("A", owner.id)
        b = service.create_project("B", owner.id)
        assert {p.id for p in service.list_projects()} == {a.id, b.id}

    def test_delete_cascades(self, service, project, owner):
        service.add_term(project.id, "x")
        service.create_branch(project.id, "feature", "main")
        service.delete_project(project.id)

        with pytest.raises(ProjectNotFoundError):
            service.get_project(project.id)
        assert service.list_projects() == []
        # Owner account survives the project.
        assert service.get_user(owner.id).email == owner.email

    def test_delete_missing(self, service):
        with pytest.raises(ProjectNotFoundError):
            service.delete_project("proj-missing")


class TestLanguages:
    def test_replace_languages_keeps_default(self, service, project):
        info = service.update_project_languages(
            project.id,
            [Language(code="en", name="English"), {"code": "it", "name": "Italian"}],
        )
        assert info.language_codes == ["en", "it"]
        assert info.default_language_code == "en"

    def test_default_moves_to_first_when_dropped(self, service, project):
        info = service.update_project_languages(
            project.id, [{"code": "de", "name": "German"}, {"code": "fr", "name": "French"}]
        )
        assert info.default_language_code == "de"

    def test_empty_language_set(self, service, project):
        info = service.update_project_languages(project.id, [])
        assert info.languages == []
        assert info.default_language_code == ""

    def test_member_languages_filtered(self, service, project, owner):
        translator = service.add_user("Tina", "tina@example.com")
        service.update_project_languages(
            project.id,
            [{"code": "en", "name": "English"}, {"code": "it", "name": "Italian"}],
        )
        service.add_member(project.id, translator.email, UserRole.TRANSLATOR, ["en", "it"])

        service.update_project_languages(project.id, [{"code": "it", "name": "Italian"}])

        members = {m.user.id: m for m in service.list_members(project.id)}
        assert members[translator.id].languages == ["it"]
        assert members[owner.id].languages == []

    def test_duplicate_codes_rejected_atomically(self, service, project):
        with pytest.raises(DuplicateLanguageError):
            service.update_project_languages(
                project.id,
                [{"code": "it", "name": "Italian"}, {"code": "it", "name": "Italiano"}],
            )
        info = service.get_project(project.id)
        assert info.language_codes == ["en"]
        assert service.list_members(project.id)[0].languages == ["en"]

    def test_unknown_project(self, service):
        with pytest.raises(ProjectNotFoundError):
            service.update_project_languages("proj-missing", [])

    def test_set_default_language(self, service, project):
        service.update_project_languages(
            project.id,
            [{"code": "en", "name": "English"}, {"code": "it", "name": "Italian"}],
        )
        service.set_default_language(project.id, "it")
        assert service.get_project(project.id).default_language_code == "it"

    def test_set_default_language_unknown(self, service, project):
        with pytest.raises(UnknownLanguageError):
            service.set_default_language(project.id, "ja")
        assert service.get_project(project.id).default_language_code == "en"
