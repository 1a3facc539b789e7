"""Term and Snapshot domain models.

Term is an immutable value record: edits produce a new Term via the
``with_*`` helpers, never an in-place patch.

Snapshot is an ordered, immutable sequence of Terms with an id -> position
index built once at construction. Ordering is insertion order and only
matters for display; identity is the term id.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Iterator, Sequence
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from termtrack.exceptions import DuplicateTermIdError


def new_term_id() -> str:
    """Generate a fresh term id."""
    return f"term-{uuid.uuid4().hex}"


class Term(BaseModel):
    """A translatable key with optional context and per-language values."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    context: Optional[str] = None
    translations: dict[str, str] = {}

    @classmethod
    def create(cls, text: str, *, context: str | None = None) -> Term:
        return cls(id=new_term_id(), text=text, context=context, translations={})

    def with_text(self, text: str) -> Term:
        return self.model_copy(update={"text": text})

    def with_context(self, context: str | None) -> Term:
        return self.model_copy(update={"context": context})

    def with_translation(self, lang_code: str, value: str) -> Term:
        return self.model_copy(
            update={"translations": {**self.translations, lang_code: value}}
        )

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "text": self.text,
            "translations": dict(self.translations),
        }
        if self.context is not None:
            data["context"] = self.context
        return data


class Snapshot:
    """Ordered, immutable collection of Terms keyed by id.

    Every mutator returns a new Snapshot; the receiver is never changed.
    """

    __slots__ = ("_terms", "_index")

    def __init__(self, terms: Iterable[Term] = ()) -> None:
        self._terms: tuple[Term, ...] = tuple(terms)
        index: dict[str, int] = {}
        for pos, term in enumerate(self._terms):
            if term.id in index:
                raise DuplicateTermIdError(term.id)
            index[term.id] = pos
        self._index = index

    @classmethod
    def from_json(cls, data: Sequence[dict[str, Any]] | None) -> Snapshot:
        if not data:
            return cls()
        return cls(Term.model_validate(item) for item in data)

    def to_json(self) -> list[dict[str, Any]]:
        """Serialize to a fresh list of plain dicts (a deep copy)."""
        return [term.to_json() for term in self._terms]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def terms(self) -> tuple[Term, ...]:
        return self._terms

    def find(self, term_id: str) -> Term | None:
        pos = self._index.get(term_id)
        return None if pos is None else self._terms[pos]

    def by_id(self) -> dict[str, Term]:
        """Id-keyed view in snapshot order."""
        return {term.id: term for term in self._terms}

    def __contains__(self, term_id: object) -> bool:
        return term_id in self._index

    def __iter__(self) -> Iterator[Term]:
        return iter(self._terms)

    def __len__(self) -> int:
        return len(self._terms)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Snapshot):
            return NotImplemented
        return self._terms == other._terms

    def __hash__(self) -> int:
        return hash(tuple(term.id for term in self._terms))

    def __repr__(self) -> str:
        return f"Snapshot({len(self._terms)} terms)"

    # ------------------------------------------------------------------
    # Mutators (copy-on-write)
    # ------------------------------------------------------------------

    def append(self, term: Term) -> Snapshot:
        return Snapshot((*self._terms, term))

    def replace(self, term: Term) -> Snapshot:
        """Swap the term sharing ``term.id``. Unknown ids return self."""
        pos = self._index.get(term.id)
        if pos is None:
            return self
        terms = list(self._terms)
        terms[pos] = term
        return Snapshot(terms)

    def remove(self, term_id: str) -> Snapshot:
        if term_id not in self._index:
            return self
        return Snapshot(t for t in self._terms if t.id != term_id)
