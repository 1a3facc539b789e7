"""Branch domain model for termtrack.

BranchInfo is the SDK-facing model returned when reading or listing branches.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from termtrack.models.term import Term

MAIN_BRANCH = "main"


class BranchInfo(BaseModel):
    """SDK-facing branch information model."""

    name: str
    project_id: str
    working_terms: list[Term] = []
    is_current: bool = False
    head_commit_id: Optional[str] = None
    commit_count: int = 0

    @property
    def is_main(self) -> bool:
        return self.name == MAIN_BRANCH
