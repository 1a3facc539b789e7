"""Term mutation operations on a branch's working snapshot.

Every function loads the snapshot, derives a new one, and writes it back
wholesale. Edits that target an unknown term id are no-ops and report
``False`` so the caller can skip persistence side effects.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from termtrack.exceptions import BranchNotFoundError, ProjectNotFoundError
from termtrack.models.term import Snapshot, Term

if TYPE_CHECKING:
    from termtrack.storage.repositories import BranchRepository, ProjectRepository
    from termtrack.storage.schema import BranchRow


def resolve_current_branch(
    project_id: str,
    project_repo: ProjectRepository,
    branch_repo: BranchRepository,
) -> BranchRow:
    """Load the branch named by the project's current-branch pointer.

    The branch row is locked for the rest of the transaction.

    Raises:
        ProjectNotFoundError: If the project does not exist.
        BranchNotFoundError: If the pointer names a missing branch.
    """
    project = project_repo.get(project_id)
    if project is None:
        raise ProjectNotFoundError(project_id)
    branch = branch_repo.get(project_id, project.current_branch_name, for_update=True)
    if branch is None:
        raise BranchNotFoundError(project.current_branch_name)
    return branch


def load_working(branch: BranchRow) -> Snapshot:
    return Snapshot.from_json(branch.working_terms)


def store_working(
    branch: BranchRow, snapshot: Snapshot, branch_repo: BranchRepository
) -> None:
    branch.working_terms = snapshot.to_json()
    branch_repo.save(branch)


def add_term(
    branch: BranchRow,
    text: str,
    branch_repo: BranchRepository,
    *,
    context: str | None = None,
) -> Term:
    """Append a new term with a fresh id and no translations."""
    term = Term.create(text, context=context)
    store_working(branch, load_working(branch).append(term), branch_repo)
    return term


def update_term(
    branch: BranchRow,
    term_id: str,
    change: Callable[[Term], Term],
    branch_repo: BranchRepository,
) -> bool:
    """Replace the term *term_id* with ``change(term)``.

    Returns False (and writes nothing) when the id is not in the snapshot.
    """
    snapshot = load_working(branch)
    term = snapshot.find(term_id)
    if term is None:
        return False
    store_working(branch, snapshot.replace(change(term)), branch_repo)
    return True


def update_term_text(
    branch: BranchRow, term_id: str, new_text: str, branch_repo: BranchRepository
) -> bool:
    return update_term(branch, term_id, lambda t: t.with_text(new_text), branch_repo)


def update_term_context(
    branch: BranchRow,
    term_id: str,
    new_context: str | None,
    branch_repo: BranchRepository,
) -> bool:
    return update_term(
        branch, term_id, lambda t: t.with_context(new_context), branch_repo
    )


def update_translation(
    branch: BranchRow,
    term_id: str,
    lang_code: str,
    value: str,
    branch_repo: BranchRepository,
) -> bool:
    """Set one translation. The language code is not validated here."""
    return update_term(
        branch, term_id, lambda t: t.with_translation(lang_code, value), branch_repo
    )


def delete_term(branch: BranchRow, term_id: str, branch_repo: BranchRepository) -> bool:
    snapshot = load_working(branch)
    if term_id not in snapshot:
        return False
    store_working(branch, snapshot.remove(term_id), branch_repo)
    return True


def coerce_terms(terms: Iterable[Term | dict[str, Any]]) -> Snapshot:
    """Build a snapshot from Terms or plain dicts (validated)."""
    return Snapshot(
        t if isinstance(t, Term) else Term.model_validate(t) for t in terms
    )


def bulk_replace_terms(
    branch: BranchRow,
    terms: Iterable[Term | dict[str, Any]],
    branch_repo: BranchRepository,
) -> Snapshot:
    """Replace the whole working snapshot. No diffing against the old one."""
    snapshot = coerce_terms(terms)
    store_working(branch, snapshot, branch_repo)
    return snapshot
