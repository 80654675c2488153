"""Search-term expansion — bilingual dictionary plus plural/singular fallback."""

from __future__ import annotations

from collections.abc import Mapping

from oteis.config import TERM_TRANSLATIONS


def expand_terms(
    raw_term: str,
    translations: Mapping[str, list[str]] = TERM_TRANSLATIONS,
) -> list[str]:
    """Return the ordered candidate terms for *raw_term*.

    English translations come first, then the lowercased term itself.  When
    the dictionary has no entry, one plural/singular variant is appended:
    a trailing ``s`` is stripped, otherwise one is added.  Duplicates are
    removed keeping the first occurrence.

    >>> expand_terms("murs")
    ['wall', 'walls', 'murs']
    >>> expand_terms("portique")
    ['portique', 'portiques']
    """
    term = raw_term.lower()
    candidates: list[str] = []

    known = translations.get(term)
    if known:
        candidates.extend(known)

    candidates.append(term)

    if not known:
        candidates.append(term[:-1] if term.endswith("s") else term + "s")

    return list(dict.fromkeys(candidates))
