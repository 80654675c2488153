"""Property service contract and the fetch-all-then-join fan-out."""

from __future__ import annotations

import abc
import asyncio
import logging
from collections.abc import Mapping, Sequence

from oteis.errors import FetchError
from oteis.models.element import PropertyBag

logger = logging.getLogger(__name__)


class PropertyService(abc.ABC):
    """Asynchronous source of per-node property bags.

    Implementations must raise :class:`FetchError` when a node's properties
    cannot be returned.
    """

    @abc.abstractmethod
    async def fetch(self, node_id: int) -> PropertyBag:
        """Return the property bag for *node_id*."""


class InMemoryPropertyService(PropertyService):
    """Property service over a prebuilt ``node_id -> PropertyBag`` mapping.

    Nodes missing from the mapping, or listed in *failing*, raise
    :class:`FetchError`.
    """

    def __init__(
        self,
        bags: Mapping[int, PropertyBag],
        failing: Sequence[int] = (),
    ) -> None:
        self._bags = dict(bags)
        self._failing = set(failing)
        self.calls = 0

    async def fetch(self, node_id: int) -> PropertyBag:
        self.calls += 1
        if node_id in self._failing or node_id not in self._bags:
            raise FetchError(node_id, "no properties available")
        return self._bags[node_id]


async def fetch_all(
    node_ids: Sequence[int],
    service: PropertyService,
    *,
    max_concurrency: int = 0,
) -> list[tuple[int, PropertyBag | None]]:
    """Fetch every node concurrently and wait for all of them.

    Returns ``(node_id, bag)`` pairs in *node_ids* order.  A failed fetch
    yields ``(node_id, None)`` and never cancels the other requests.

    Parameters
    ----------
    node_ids:
        Nodes to fetch.
    service:
        The property service to query.
    max_concurrency:
        Upper bound on in-flight fetches; ``0`` means unbounded.
    """
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None

    async def _one(node_id: int) -> PropertyBag:
        if semaphore is None:
            return await service.fetch(node_id)
        async with semaphore:
            return await service.fetch(node_id)

    outcomes = await asyncio.gather(
        *(_one(node_id) for node_id in node_ids),
        return_exceptions=True,
    )

    results: list[tuple[int, PropertyBag | None]] = []
    failures = 0
    for node_id, outcome in zip(node_ids, outcomes):
        if isinstance(outcome, FetchError):
            failures += 1
            logger.debug("Skipping node %s: %s", node_id, outcome)
            results.append((node_id, None))
        elif isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            failures += 1
            logger.warning(
                "Property service error for node %s",
                node_id,
                exc_info=outcome,
            )
            results.append((node_id, None))
        else:
            results.append((node_id, outcome))

    if failures:
        logger.info("Fetched %d/%d nodes (%d failed)", len(node_ids) - failures, len(node_ids), failures)
    return results
