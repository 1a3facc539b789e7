"""Commit domain model for termtrack.

CommitInfo is the SDK-facing model returned when querying commits.
Not an ORM model -- used for data transfer only.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from termtrack.models.term import Term


def new_commit_id() -> str:
    return f"commit-{uuid.uuid4().hex}"


class AuthorInfo(BaseModel):
    """Resolved author details attached to a commit."""

    id: str
    name: str
    avatar_initials: Optional[str] = None


class CommitInfo(BaseModel):
    """SDK-facing commit information model."""

    id: str
    branch_name: str
    message: str
    author_id: Optional[str] = None
    author: Optional[AuthorInfo] = None
    created_at: datetime
    terms: list[Term] = []

    def __str__(self) -> str:
        msg = self.message
        if len(msg) > 60:
            msg = msg[:57] + "..."
        return f"{self.id[:15]} {msg}"

    def __repr__(self) -> str:
        return (
            f"CommitInfo({self.id!r} on {self.branch_name!r}, "
            f"{len(self.terms)} terms, {self.message!r})"
        )
