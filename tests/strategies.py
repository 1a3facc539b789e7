"""Hypothesis strategies for termtrack terms and snapshots."""

from hypothesis import strategies as st

from termtrack.models.term import Snapshot, Term

lang_codes = st.sampled_from(["en", "it", "es", "de", "fr"])

term_text = st.text(
    min_size=1,
    max_size=200,
    alphabet=st.characters(whitelist_categories=("L", "N", "P", "Z", "S")),
)

# Small id pool so generated snapshots overlap by id.
term_ids = st.sampled_from([f"term-{i}" for i in range(12)])

translations = st.dictionaries(keys=lang_codes, values=term_text, max_size=3)

terms = st.builds(
    Term,
    id=term_ids,
    text=term_text,
    context=st.one_of(st.none(), term_text),
    translations=translations,
)


@st.composite
def snapshots(draw, max_size: int = 8) -> Snapshot:
    """Snapshots with unique ids drawn from the shared pool."""
    drawn = draw(st.lists(terms, max_size=max_size, unique_by=lambda t: t.id))
    return Snapshot(drawn)
