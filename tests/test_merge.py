"""Tests for merge_branches and the snapshot merge policy.

Covers:
- Source head wins on shared ids; target-only terms survive
- Source-only terms are appended after the target's existing order
- Merge reads the source's head commit, not its working terms
- No commit is created; the merge lands in the target's working terms
- MergeResult reports added / overwritten ids
- Property: union-with-source-precedence for arbitrary snapshots
"""

from __future__ import annotations

import pytest
from hypothesis import given

from termtrack import BranchNotFoundError, MergeOutcome, Term
from termtrack.models.term import Snapshot
from termtrack.operations.merge import merge_snapshots
from tests.strategies import snapshots


def _t(term_id: str, text: str, **translations: str) -> Term:
    return Term(id=term_id, text=text, translations=translations)


# ---------------------------------------------------------------------------
# merge_snapshots (pure)
# ---------------------------------------------------------------------------


class TestMergeSnapshots:
    def test_source_wins_and_target_only_kept(self):
        target = Snapshot([_t("1", "A", it="a"), _t("2", "B")])
        source = Snapshot([_t("1", "A", it="b"), _t("3", "C")])

        merged, added, overwritten = merge_snapshots(target, source)

        assert merged.by_id() == {
            "1": _t("1", "A", it="b"),
            "2": _t("2", "B"),
            "3": _t("3", "C"),
        }
        assert [t.id for t in merged] == ["1", "2", "3"]
        assert added == ["3"]
        assert overwritten == ["1"]

    def test_identical_terms_not_reported_as_overwritten(self):
        snap = Snapshot([_t("1", "A")])
        merged, added, overwritten = merge_snapshots(snap, snap)
        assert merged == snap
        assert added == []
        assert overwritten == []

    def test_empty_source(self):
        target = Snapshot([_t("1", "A")])
        merged, added, overwritten = merge_snapshots(target, Snapshot())
        assert merged == target
        assert (added, overwritten) == ([], [])

    @given(snapshots(), snapshots())
    def test_union_with_source_precedence(self, target, source):
        merged, added, overwritten = merge_snapshots(target, source)
        result = merged.by_id()

        assert set(result) == {t.id for t in target} | {t.id for t in source}
        for term in source:
            assert result[term.id] == term
        for term in target:
            if term.id not in source:
                assert result[term.id] == term

        target_ids = [t.id for t in target]
        assert [t.id for t in merged][: len(target_ids)] == target_ids
        assert set(added) == {t.id for t in source} - set(target_ids)
        assert set(overwritten) <= set(target_ids)


# ---------------------------------------------------------------------------
# merge_branches (service)
# ---------------------------------------------------------------------------


@pytest.fixture
def diverged(service, project, owner):
    """main and feature both edit term 1; feature adds term 3; main has term 2."""
    service.bulk_replace_terms(
        project.id,
        [_t("1", "A", it="a"), _t("2", "B")],
    )
    service.create_commit(project.id, "main", "base", owner.id)
    service.create_branch(project.id, "feature", "main")

    service.switch_current_branch(project.id, "feature")
    service.update_translation(project.id, "1", "it", "b")
    service.delete_term(project.id, "2")
    service.bulk_replace_terms(
        project.id,
        [*service.get_working_terms(project.id), _t("3", "C")],
    )
    service.create_commit(project.id, "feature", "feature work", owner.id)
    service.switch_current_branch(project.id, "main")
    return project


class TestMergeBranches:
    def test_merge_into_working_terms(self, service, diverged, publisher):
        publisher.clear()
        result = service.merge_branches(diverged.id, "feature", "main")

        terms = service.get_working_terms(diverged.id, "main")
        assert [t.id for t in terms] == ["1", "2", "3"]
        assert terms[0].translations == {"it": "b"}
        assert result.outcome == MergeOutcome.APPLIED
        assert result.added_term_ids == ["3"]
        assert result.overwritten_term_ids == ["1"]
        assert result.term_count == 3
        assert result.changed

    def test_deletion_on_source_does_not_propagate(self, service, diverged):
        service.merge_branches(diverged.id, "feature", "main")
        assert "2" in {t.id for t in service.get_working_terms(diverged.id, "main")}

    def test_merge_creates_no_commit(self, service, diverged):
        before = service.log(diverged.id, "main")
        service.merge_branches(diverged.id, "feature", "main")
        assert service.log(diverged.id, "main") == before

    def test_merge_uses_source_head_not_working(self, service, diverged):
        service.switch_current_branch(diverged.id, "feature")
        service.add_term(diverged.id, "uncommitted on feature")
        service.merge_branches(diverged.id, "feature", "main")

        texts = {t.text for t in service.get_working_terms(diverged.id, "main")}
        assert "uncommitted on feature" not in texts

    def test_target_uncommitted_edits_survive_on_other_ids(self, service, diverged):
        service.add_term(diverged.id, "main draft")
        service.merge_branches(diverged.id, "feature", "main")
        texts = [t.text for t in service.get_working_terms(diverged.id, "main")]
        assert "main draft" in texts

    def test_merge_emits_event_for_target(self, service, diverged, publisher, owner):
        publisher.clear()
        service.merge_branches(diverged.id, "feature", "main", owner.id)
        assert [(e.branch_name, e.actor_id) for e in publisher.events] == [
            ("main", owner.id)
        ]

    def test_merge_missing_source(self, service, project, publisher):
        with pytest.raises(BranchNotFoundError):
            service.merge_branches(project.id, "nope", "main")
        assert len(publisher) == 0

    def test_merge_missing_target(self, service, project):
        with pytest.raises(BranchNotFoundError):
            service.merge_branches(project.id, "main", "nope")

    def test_commit_after_merge_records_result(self, service, diverged, owner):
        service.merge_branches(diverged.id, "feature", "main")
        info = service.create_commit(diverged.id, "main", "Merge feature", owner.id)
        assert [t.id for t in info.terms] == ["1", "2", "3"]
