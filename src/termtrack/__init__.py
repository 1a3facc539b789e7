"""termtrack: branch, commit and merge for localization terms.

Translators and editors work on a branch's working snapshot of terms,
freeze it into commits, fork branches from any commit, and merge one
branch's head into another.
"""

from termtrack._version import __version__

# Core entry point
from termtrack.service import VersionControlService

# Term types
from termtrack.models.term import Snapshot, Term

# Project, branch and commit models
from termtrack.models.project import AVAILABLE_LANGUAGES, DEFAULT_LANGUAGES, Language, ProjectInfo
from termtrack.models.branch import MAIN_BRANCH, BranchInfo
from termtrack.models.commit import AuthorInfo, CommitInfo
from termtrack.models.merge import MergeOutcome, MergeResult

# Team models
from termtrack.models.team import TeamMember, UserInfo, UserRole, UserSettings

# Configuration
from termtrack.models.config import MailConfig, TermTrackConfig

# Collaborators
from termtrack.protocols import EventPublisher, Mailer, TeamDirectory
from termtrack.events import BranchChanged, InMemoryPublisher, NullPublisher
from termtrack.mailer import SmtpMailer, render_commit_email

# Exceptions
from termtrack.exceptions import (
    TermTrackError,
    ProjectNotFoundError,
    BranchNotFoundError,
    SourceBranchNotFoundError,
    CommitNotFoundError,
    BranchExistsError,
    InvalidBranchNameError,
    CannotDeleteMainError,
    CannotRollbackError,
    DuplicateTermIdError,
    DuplicateLanguageError,
    UnknownLanguageError,
    UserNotFoundError,
    MemberExistsError,
)

__all__ = [
    "__version__",
    "VersionControlService",
    # Terms
    "Term",
    "Snapshot",
    # Projects, branches, commits
    "Language",
    "AVAILABLE_LANGUAGES",
    "DEFAULT_LANGUAGES",
    "ProjectInfo",
    "MAIN_BRANCH",
    "BranchInfo",
    "AuthorInfo",
    "CommitInfo",
    "MergeOutcome",
    "MergeResult",
    # Team
    "TeamMember",
    "UserInfo",
    "UserRole",
    "UserSettings",
    # Config
    "MailConfig",
    "TermTrackConfig",
    # Collaborators
    "EventPublisher",
    "Mailer",
    "TeamDirectory",
    "BranchChanged",
    "InMemoryPublisher",
    "NullPublisher",
    "SmtpMailer",
    "render_commit_email",
    # Exceptions
    "TermTrackError",
    "ProjectNotFoundError",
    "BranchNotFoundError",
    "SourceBranchNotFoundError",
    "CommitNotFoundError",
    "BranchExistsError",
    "InvalidBranchNameError",
    "CannotDeleteMainError",
    "CannotRollbackError",
    "DuplicateTermIdError",
    "DuplicateLanguageError",
    "UnknownLanguageError",
    "UserNotFoundError",
    "MemberExistsError",
]
