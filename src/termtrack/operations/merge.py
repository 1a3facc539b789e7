"""Merge operations for termtrack.

Implements the source-wins union merge: every term of the source branch's
head commit is written into the target's working snapshot by id, replacing
a target term with the same id or appending it if the target lacks it.
Target-only terms are kept. Nothing is ever reported as a conflict, and no
commit is created: the caller commits the merged working state afterwards.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from termtrack.exceptions import BranchNotFoundError
from termtrack.models.merge import MergeOutcome, MergeResult
from termtrack.models.term import Snapshot
from termtrack.operations.terms import load_working, store_working

if TYPE_CHECKING:
    from termtrack.storage.repositories import BranchRepository, CommitRepository

logger = logging.getLogger(__name__)


def merge_snapshots(
    target: Snapshot, source: Snapshot
) -> tuple[Snapshot, list[str], list[str]]:
    """Union *source* into *target*, source winning on shared ids.

    Order is the target's existing order followed by source-only terms in
    source order.

    Returns:
        (merged snapshot, ids added from source, ids overwritten with a
        different source value)
    """
    merged = target.by_id()
    added: list[str] = []
    overwritten: list[str] = []
    for term in source:
        existing = merged.get(term.id)
        if existing is None:
            added.append(term.id)
        elif existing != term:
            overwritten.append(term.id)
        merged[term.id] = term
    return Snapshot(merged.values()), added, overwritten


def merge_branches(
    project_id: str,
    source_name: str,
    target_name: str,
    branch_repo: BranchRepository,
    commit_repo: CommitRepository,
) -> MergeResult:
    """Merge the head commit of *source_name* into *target_name*'s working terms.

    A source with an empty log contributes no terms.

    Raises:
        BranchNotFoundError: If either branch does not exist.
    """
    source = branch_repo.get(project_id, source_name)
    if source is None:
        raise BranchNotFoundError(source_name)
    target = branch_repo.get(project_id, target_name, for_update=True)
    if target is None:
        raise BranchNotFoundError(target_name)

    head = commit_repo.get_head(source.id)
    source_terms = Snapshot.from_json(head.terms_json if head is not None else None)

    merged, added, overwritten = merge_snapshots(load_working(target), source_terms)
    store_working(target, merged, branch_repo)

    logger.debug(
        "Merged %s into %s (%d added, %d overwritten)",
        source_name,
        target_name,
        len(added),
        len(overwritten),
    )
    return MergeResult(
        source_branch=source_name,
        target_branch=target_name,
        outcome=MergeOutcome.APPLIED,
        added_term_ids=added,
        overwritten_term_ids=overwritten,
        term_count=len(merged),
    )
