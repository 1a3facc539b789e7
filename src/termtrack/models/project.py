"""Project domain models.

ProjectInfo is the SDK-facing view of a project: its languages, default
language, current branch pointer, and (optionally) its branches.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from termtrack.models.branch import BranchInfo


class Language(BaseModel):
    """A supported language: code (unique within a project) and display name."""

    model_config = ConfigDict(frozen=True)

    code: str
    name: str


# Languages a new project starts with.
DEFAULT_LANGUAGES: tuple[Language, ...] = (Language(code="en", name="English"),)

AVAILABLE_LANGUAGES: tuple[Language, ...] = (
    Language(code="en", name="English"),
    Language(code="it", name="Italian"),
    Language(code="es", name="Spanish"),
    Language(code="de", name="German"),
    Language(code="fr", name="French"),
    Language(code="pt", name="Portuguese"),
    Language(code="ru", name="Russian"),
    Language(code="ja", name="Japanese"),
    Language(code="zh", name="Chinese"),
    Language(code="ar", name="Arabic"),
)


class ProjectInfo(BaseModel):
    """SDK-facing project information model."""

    id: str
    name: str
    languages: list[Language] = []
    default_language_code: str = ""
    current_branch_name: str = "main"
    branches: list[BranchInfo] = []
    created_at: Optional[datetime] = None

    @property
    def language_codes(self) -> list[str]:
        return [lang.code for lang in self.languages]

    def __str__(self) -> str:
        return f"{self.name} ({self.id}) on {self.current_branch_name}"
