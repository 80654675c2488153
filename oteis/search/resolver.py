"""Query resolution — map a free-text criterion to a set of elements.

Matching is a plain case-insensitive substring test against the element
name and every property name and value.  Candidate terms from
:func:`expand_terms` are tried one at a time; the first term with at least
one match decides the result, and results of different terms are never
merged.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from oteis.models.element import ElementRecord, Property, PropertyBag
from oteis.scene.service import PropertyService, fetch_all
from oteis.search.terms import expand_terms

logger = logging.getLogger(__name__)


def matches_term(
    name: str | None,
    properties: Iterable[Property],
    term: str,
) -> bool:
    """Return True if *term* (already lowercased) occurs in the name or any property."""
    if not term:
        return False
    if name and term in name.lower():
        return True
    return any(
        term in prop.display_name.lower() or term in prop.display_value.lower()
        for prop in properties
    )


def bag_matches(bag: PropertyBag | None, term: str) -> bool:
    if bag is None:
        return False
    return matches_term(bag.name, bag.properties, term)


def resolve_query(raw_term: str, records: Sequence[ElementRecord]) -> list[int]:
    """Return the ids matched by the first fruitful candidate term.

    An empty list means "no results"; it is never an error.
    """
    if not raw_term:
        return []

    terms = expand_terms(raw_term)
    logger.debug("Resolving %r with candidate terms %s", raw_term, terms)

    for term in terms:
        matched = [r.id for r in records if matches_term(r.name, r.properties, term)]
        if matched:
            logger.info("Query %r matched %d elements via %r", raw_term, len(matched), term)
            return matched

    logger.info("Query %r matched nothing", raw_term)
    return []


class QueryResolver:
    """Resolver that queries the property service directly.

    Each candidate term triggers a full fan-out over every node and waits
    for all of them before the next term is considered.  Use
    :func:`resolve_query` instead when classified records are cached.

    Parameters
    ----------
    node_ids:
        Leaves of the current model.
    service:
        Property service of the current model.
    max_concurrency:
        Upper bound on in-flight fetches; ``0`` means unbounded.
    """

    def __init__(
        self,
        node_ids: Sequence[int],
        service: PropertyService,
        *,
        max_concurrency: int = 0,
    ) -> None:
        self.node_ids = list(node_ids)
        self.service = service
        self.max_concurrency = max_concurrency

    async def resolve(self, raw_term: str) -> list[int]:
        """Async counterpart of :func:`resolve_query`."""
        if not raw_term or not self.node_ids:
            return []

        for term in expand_terms(raw_term):
            matched = await self.search_term(term)
            if matched:
                logger.info("Query %r matched %d elements via %r", raw_term, len(matched), term)
                return matched

        logger.info("Query %r matched nothing", raw_term)
        return []

    async def search_term(self, term: str) -> list[int]:
        """Ids of every node whose properties contain *term*."""
        fetched = await fetch_all(
            self.node_ids, self.service, max_concurrency=self.max_concurrency
        )
        needle = term.lower()
        return [node_id for node_id, bag in fetched if bag_matches(bag, needle)]
