"""User and team membership models for termtrack."""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel


class UserRole(str, enum.Enum):
    """Role of a user within a project team."""

    TRANSLATOR = "translator"
    EDITOR = "editor"
    ADMIN = "admin"

    def __repr__(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


class UserSettings(BaseModel):
    """Per-user notification preferences."""

    commit_notifications: bool = False
    mention_notifications: bool = False


class UserInfo(BaseModel):
    id: str
    name: str
    email: str
    avatar_initials: Optional[str] = None
    settings: UserSettings = UserSettings()


class TeamMember(BaseModel):
    """A project team member with role, assigned languages, and settings."""

    user: UserInfo
    role: UserRole
    languages: list[str] = []

    @property
    def wants_commit_notifications(self) -> bool:
        return self.user.settings.commit_notifications
