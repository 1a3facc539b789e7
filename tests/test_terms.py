"""Tests for term operations on the current branch.

Covers:
- add / update text / update context / delete / translate / bulk replace
- Operations target the project's current branch
- Unknown term ids are silent no-ops that emit no event
- One BranchChanged event per successful mutation
- ProjectNotFound / BranchNotFound resolution errors
"""

from __future__ import annotations

import pytest

from termtrack import (
    BranchNotFoundError,
    DuplicateTermIdError,
    ProjectNotFoundError,
    Term,
)


class TestAddTerm:
    def test_add_appends_untranslated_term(self, service, project):
        term = service.add_term(project.id, "welcome.title", context="Home page")
        terms = service.get_working_terms(project.id)
        assert terms == [term]
        assert term.translations == {}
        assert term.context == "Home page"

    def test_add_preserves_order(self, service, project, add_terms):
        ids = add_terms(project.id, "a", "b", "c")
        assert [t.id for t in service.get_working_terms(project.id)] == ids

    def test_add_emits_one_event(self, service, project, publisher, owner):
        service.add_term(project.id, "x", actor_id=owner.id)
        assert len(publisher) == 1
        event = publisher.events[0]
        assert event.project_id == project.id
        assert event.branch_name == "main"
        assert event.actor_id == owner.id

    def test_add_targets_current_branch(self, service, project):
        service.create_branch(project.id, "feature", "main")
        service.switch_current_branch(project.id, "feature")
        service.add_term(project.id, "only on feature")

        assert len(service.get_working_terms(project.id, "feature")) == 1
        assert service.get_working_terms(project.id, "main") == []

    def test_unknown_project(self, service, publisher):
        with pytest.raises(ProjectNotFoundError):
            service.add_term("proj-missing", "x")
        assert len(publisher) == 0

    def test_current_branch_missing(self, service, project, publisher):
        service.switch_current_branch(project.id, "ghost")
        with pytest.raises(BranchNotFoundError) as exc_info:
            service.add_term(project.id, "x")
        assert exc_info.value.kind == "BranchNotFound"
        assert len(publisher) == 0


class TestUpdateTerm:
    def test_update_text(self, service, project, add_terms, publisher):
        (tid,) = add_terms(project.id, "Hello")
        assert service.update_term_text(project.id, tid, "Hi") is True
        assert service.get_working_terms(project.id)[0].text == "Hi"
        assert len(publisher) == 1

    def test_update_text_unknown_id_is_noop(self, service, project, add_terms, publisher):
        add_terms(project.id, "Hello")
        before = service.get_working_terms(project.id)
        assert service.update_term_text(project.id, "nonexistent-id", "x") is False
        assert service.get_working_terms(project.id) == before
        assert len(publisher) == 0

    def test_update_context(self, service, project, add_terms):
        (tid,) = add_terms(project.id, "Hello")
        service.update_term_context(project.id, tid, "Greeting on login")
        assert service.get_working_terms(project.id)[0].context == "Greeting on login"

    def test_update_context_unknown_id_is_noop(self, service, project, publisher):
        assert service.update_term_context(project.id, "nope", "c") is False
        assert len(publisher) == 0

    def test_update_translation(self, service, project, add_terms, publisher):
        (tid,) = add_terms(project.id, "Hello")
        service.update_translation(project.id, tid, "it", "Ciao")
        service.update_translation(project.id, tid, "es", "Hola")
        term = service.get_working_terms(project.id)[0]
        assert term.translations == {"it": "Ciao", "es": "Hola"}
        assert len(publisher) == 2

    def test_translation_language_not_validated(self, service, project, add_terms):
        (tid,) = add_terms(project.id, "Hello")
        service.update_translation(project.id, tid, "xx", "???")
        assert service.get_working_terms(project.id)[0].translations["xx"] == "???"

    def test_update_translation_unknown_id_is_noop(self, service, project, publisher):
        assert service.update_translation(project.id, "nope", "it", "Ciao") is False
        assert len(publisher) == 0

    def test_edits_keep_other_terms_untouched(self, service, project, add_terms):
        a, b = add_terms(project.id, "A", "B")
        service.update_term_text(project.id, a, "A2")
        terms = {t.id: t for t in service.get_working_terms(project.id)}
        assert terms[a].text == "A2"
        assert terms[b].text == "B"


class TestDeleteTerm:
    def test_delete(self, service, project, add_terms, publisher):
        a, b = add_terms(project.id, "A", "B")
        assert service.delete_term(project.id, a) is True
        assert [t.id for t in service.get_working_terms(project.id)] == [b]
        assert len(publisher) == 1

    def test_delete_unknown_is_noop(self, service, project, publisher):
        assert service.delete_term(project.id, "nope") is False
        assert len(publisher) == 0


class TestBulkReplace:
    def test_replace_with_terms_and_dicts(self, service, project, add_terms, publisher):
        add_terms(project.id, "old")
        result = service.bulk_replace_terms(
            project.id,
            [
                Term(id="t1", text="One", translations={"it": "Uno"}),
                {"id": "t2", "text": "Two"},
            ],
        )
        assert [t.id for t in result] == ["t1", "t2"]
        assert [t.id for t in service.get_working_terms(project.id)] == ["t1", "t2"]
        assert len(publisher) == 1

    def test_replace_with_empty_list_emits(self, service, project, add_terms, publisher):
        add_terms(project.id, "old")
        assert service.bulk_replace_terms(project.id, []) == []
        assert service.get_working_terms(project.id) == []
        assert len(publisher) == 1

    def test_duplicate_ids_rejected_and_nothing_written(
        self, service, project, add_terms, publisher
    ):
        ids = add_terms(project.id, "keep me")
        with pytest.raises(DuplicateTermIdError):
            service.bulk_replace_terms(
                project.id, [{"id": "t1", "text": "a"}, {"id": "t1", "text": "b"}]
            )
        assert [t.id for t in service.get_working_terms(project.id)] == ids
        assert len(publisher) == 0


class TestGetWorkingTerms:
    def test_named_branch_missing(self, service, project):
        with pytest.raises(BranchNotFoundError):
            service.get_working_terms(project.id, "nope")

    def test_returned_terms_are_detached_copies(self, service, project, add_terms):
        add_terms(project.id, "Hello")
        first = service.get_working_terms(project.id)
        first.clear()
        assert len(service.get_working_terms(project.id)) == 1
