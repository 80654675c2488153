"""ModelSession — the single entry point for analysing one loaded model.

Usage::

    from oteis import ModelSession

    session = ModelSession(scene_graph, property_service)
    index = await session.load()
    report = await session.analyze()
    ids = await session.search("murs")
    outcomes = await session.run_commands(assistant_reply, viewer)

The session is the explicit context (scene graph + property service)
threaded through every core call.  Its own calls are serialised; callers
that use the module-level functions directly must not run two analyses of
the same model at once.
"""

from __future__ import annotations

import asyncio
import logging

from oteis.classification.classifier import classify_all
from oteis.classification.index import ModelIndex, build_index
from oteis.commands.dispatcher import CommandDispatcher, CommandOutcome, ViewerActions
from oteis.commands.parser import extract_command_payloads
from oteis.config import Settings
from oteis.environment.engine import MetricsEngine
from oteis.environment.materials import MaterialCatalog
from oteis.environment.report import MetricsResult
from oteis.errors import EmptyModelError, FetchError
from oteis.models.element import ElementRecord, PropertyBag
from oteis.scene.graph import SceneGraph
from oteis.scene.service import PropertyService, fetch_all
from oteis.search.resolver import QueryResolver, resolve_query

logger = logging.getLogger(__name__)


class ModelSession:
    """Analysis context for one model load.

    Parameters
    ----------
    graph:
        Scene graph of the loaded model.
    service:
        Property service of the loaded model.
    settings:
        Runtime settings.  Defaults to :meth:`Settings.from_env`.
    catalog:
        Material catalog for the metrics engine.
    """

    def __init__(
        self,
        graph: SceneGraph,
        service: PropertyService,
        *,
        settings: Settings | None = None,
        catalog: MaterialCatalog | None = None,
    ) -> None:
        self.graph = graph
        self.service = service
        self.settings = settings or Settings.from_env()
        self.engine = MetricsEngine(catalog=catalog, settings=self.settings)
        self._lock = asyncio.Lock()
        self._node_ids: list[int] | None = None
        self._records: list[ElementRecord] | None = None
        self._index: ModelIndex | None = None

    # -- model state --------------------------------------------------------

    @property
    def node_ids(self) -> list[int]:
        """Leaves of the model, walked once per session."""
        if self._node_ids is None:
            self._node_ids = self.graph.walk()
            logger.info("Model has %d leaf elements", len(self._node_ids))
        return self._node_ids

    @property
    def records(self) -> list[ElementRecord] | None:
        """Classified records from the last :meth:`load`, if any."""
        return self._records

    @property
    def index(self) -> ModelIndex | None:
        return self._index

    def invalidate(self) -> None:
        """Forget everything derived from the current model."""
        self._node_ids = None
        self._records = None
        self._index = None

    async def load(self) -> ModelIndex:
        """Fetch and classify every element, then rebuild the index.

        Raises
        ------
        EmptyModelError
            If the model has no elements.
        """
        async with self._lock:
            node_ids = self.node_ids
            if not node_ids:
                raise EmptyModelError()
            fetched = await fetch_all(
                node_ids, self.service, max_concurrency=self.settings.max_concurrent_fetches
            )
            self._records = classify_all(fetched)
            self._index = build_index(self._records)
            logger.info("Loaded %d classified elements", self._index.total_count)
            return self._index

    def context(self) -> str:
        """Model summary text for the assistant's prompt."""
        if self._index is None:
            return "3D model loaded.\n- Analysis in progress..."
        return self._index.to_context()

    # -- analyses -----------------------------------------------------------

    async def analyze(self) -> MetricsResult:
        """Environmental report, from cached records when available.

        Raises
        ------
        EmptyModelError
            If the model has no elements.
        """
        async with self._lock:
            if not self.node_ids:
                raise EmptyModelError()
            if self._records is not None:
                return self.engine.accumulate(self._records)
            return await self.engine.compute(self.node_ids, self.service)

    async def search(self, raw_term: str) -> list[int]:
        """Element ids matching *raw_term*; empty when nothing matches."""
        async with self._lock:
            if self._records is not None:
                return resolve_query(raw_term, self._records)
            resolver = QueryResolver(
                self.node_ids,
                self.service,
                max_concurrency=self.settings.max_concurrent_fetches,
            )
            return await resolver.resolve(raw_term)

    async def properties(self, node_id: int) -> PropertyBag | None:
        """Property bag of one element, or *None* if it cannot be fetched."""
        try:
            return await self.service.fetch(node_id)
        except FetchError:
            logger.debug("No properties for element %s", node_id, exc_info=True)
            return None

    async def run_commands(self, reply_text: str, viewer: ViewerActions) -> list[CommandOutcome]:
        """Execute every command embedded in an assistant reply."""
        payloads = extract_command_payloads(reply_text)
        if not payloads:
            return []
        logger.info("Running %d assistant command(s)", len(payloads))
        return await CommandDispatcher(self, viewer).execute_all(payloads)
