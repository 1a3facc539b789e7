"""Merge result model for termtrack.

Merges are a source-wins union keyed by term id. No conflict is ever
raised; MergeResult only reports what happened so callers can show it.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel


class MergeOutcome(str, enum.Enum):
    """How a merge landed on the target branch."""

    APPLIED = "applied"

    def __repr__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class MergeResult(BaseModel):
    """Summary of a merge into a target branch's working terms.

    Attributes:
        source_branch: Branch whose head commit supplied the terms.
        target_branch: Branch whose working terms were rewritten.
        outcome: Always ``APPLIED``; merges never refuse.
        added_term_ids: Source-only ids appended to the target.
        overwritten_term_ids: Ids present on both sides whose target value
            differed and was replaced by the source value.
        term_count: Number of working terms on the target after the merge.
    """

    source_branch: str
    target_branch: str
    outcome: MergeOutcome = MergeOutcome.APPLIED
    added_term_ids: list[str] = []
    overwritten_term_ids: list[str] = []
    term_count: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.added_term_ids or self.overwritten_term_ids)

    def __str__(self) -> str:
        return (
            f"Merged {self.source_branch} into {self.target_branch}: "
            f"{len(self.added_term_ids)} added, "
            f"{len(self.overwritten_term_ids)} overwritten"
        )
