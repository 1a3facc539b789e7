"""termtrack exception hierarchy.

All termtrack-specific exceptions inherit from TermTrackError. Each carries
a stable ``kind`` string so callers can report a structured failure
(kind + human message) without matching on class names.
"""


class TermTrackError(Exception):
    """Base exception for all termtrack errors."""

    kind = "TermTrackError"

    def to_dict(self) -> dict[str, str]:
        """Structured failure description: ``{"kind": ..., "message": ...}``."""
        return {"kind": self.kind, "message": str(self)}


class ProjectNotFoundError(TermTrackError):
    """Raised when a project id lookup fails."""

    kind = "ProjectNotFound"

    def __init__(self, project_id: str) -> None:
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class BranchNotFoundError(TermTrackError):
    """Raised when a branch lookup fails."""

    kind = "BranchNotFound"

    def __init__(self, branch_name: str) -> None:
        self.branch_name = branch_name
        super().__init__(f"Branch not found: {branch_name}")


class SourceBranchNotFoundError(TermTrackError):
    """Raised when the branch to fork from does not exist."""

    kind = "SourceBranchNotFound"

    def __init__(self, branch_name: str) -> None:
        self.branch_name = branch_name
        super().__init__(f"Source branch not found: {branch_name}")


class CommitNotFoundError(TermTrackError):
    """Raised when a commit id lookup fails."""

    kind = "CommitNotFound"

    def __init__(self, commit_id: str) -> None:
        self.commit_id = commit_id
        super().__init__(f"Commit not found: {commit_id}")


class BranchExistsError(TermTrackError):
    """Raised when trying to create a branch that already exists."""

    kind = "BranchNameExists"

    def __init__(self, branch_name: str) -> None:
        self.branch_name = branch_name
        super().__init__(f"Branch already exists: {branch_name}")


class InvalidBranchNameError(TermTrackError):
    """Raised when a branch name violates naming rules."""

    kind = "InvalidBranchName"

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid branch name '{name}': {reason}")


class CannotDeleteMainError(TermTrackError):
    """Raised when deleting the protected main branch."""

    kind = "CannotDeleteMain"

    def __init__(self, branch_name: str = "main") -> None:
        self.branch_name = branch_name
        super().__init__(f"Cannot delete the {branch_name} branch")


class CannotRollbackError(TermTrackError):
    """Raised when rolling back would remove a branch's initial commit."""

    kind = "CannotRollback"

    def __init__(self, branch_name: str) -> None:
        self.branch_name = branch_name
        super().__init__(
            f"Cannot roll back branch '{branch_name}': "
            f"the initial commit cannot be deleted"
        )


class DuplicateTermIdError(TermTrackError):
    """Raised when a snapshot would contain two terms with the same id."""

    kind = "DuplicateTermId"

    def __init__(self, term_id: str) -> None:
        self.term_id = term_id
        super().__init__(f"Duplicate term id in snapshot: {term_id}")


class DuplicateLanguageError(TermTrackError):
    """Raised when a language set lists the same code twice."""

    kind = "DuplicateLanguage"

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Duplicate language code: {code}")


class UnknownLanguageError(TermTrackError):
    """Raised when a language code is not supported by the project."""

    kind = "UnknownLanguage"

    def __init__(self, code: str) -> None:
        self.code = code
        super().__init__(f"Language not supported by project: {code}")


class UserNotFoundError(TermTrackError):
    """Raised when a user lookup (by id or e-mail) fails."""

    kind = "UserNotFound"

    def __init__(self, ref: str) -> None:
        self.ref = ref
        super().__init__(f"User not found: {ref}")


class MemberExistsError(TermTrackError):
    """Raised when adding a user who is already on the project team."""

    kind = "MemberExists"

    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User is already a member of the project: {user_id}")
