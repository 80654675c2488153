"""ModelIndex — whole-model summary of classified elements."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from pydantic import BaseModel, Field

from oteis.classification.classifier import classify_all
from oteis.errors import EmptyModelError
from oteis.models.element import ElementRecord
from oteis.scene.service import PropertyService, fetch_all

logger = logging.getLogger(__name__)

_CONTEXT_FAMILY_LIMIT = 10
_CONTEXT_NAME_LIMIT = 20


class ModelIndex(BaseModel):
    """Counts and distinct values over one model load.

    Rebuilt from scratch on every load; never updated in place.
    """

    total_count: int = 0
    category_counts: list[tuple[str, int]] = Field(default_factory=list)
    """``(category, count)`` pairs, most frequent first."""

    materials: list[str] = Field(default_factory=list)
    families: list[str] = Field(default_factory=list)
    element_names: list[str] = Field(default_factory=list)
    levels: list[str] = Field(default_factory=list)

    def to_context(self) -> str:
        """Render the index as the plain-text model summary given to the assistant."""
        lines = ["3D model loaded and analysed.", "ELEMENTS AVAILABLE IN THE MODEL:"]
        lines.append(f"- Total: {self.total_count} elements")
        if self.category_counts:
            cats = ", ".join(f"{cat} ({count}x)" for cat, count in self.category_counts)
            lines.append(f"- Categories: {cats}")
        if self.materials:
            lines.append(f"- Materials: {', '.join(self.materials)}")
        if self.families:
            lines.append(f"- Families: {', '.join(self.families[:_CONTEXT_FAMILY_LIMIT])}")
        if self.levels:
            lines.append(f"- Levels: {', '.join(self.levels)}")
        if self.element_names:
            names = ", ".join(self.element_names[:_CONTEXT_NAME_LIMIT])
            lines.append(f"- Sample element names: {names}")
        return "\n".join(lines)


def build_index(records: Iterable[ElementRecord]) -> ModelIndex:
    """Fold classified records into a :class:`ModelIndex`."""
    total = 0
    categories: dict[str, int] = {}
    materials: set[str] = set()
    families: set[str] = set()
    names: set[str] = set()
    levels: set[str] = set()

    for record in records:
        total += 1
        names.add(record.name)
        if record.category:
            categories[record.category] = categories.get(record.category, 0) + 1
        if record.material:
            materials.add(record.material)
        if record.family:
            families.add(record.family)
        if record.level:
            levels.add(record.level)

    # Stable sort keeps first-seen order among equal counts
    ranked = sorted(categories.items(), key=lambda item: item[1], reverse=True)

    return ModelIndex(
        total_count=total,
        category_counts=ranked,
        materials=sorted(materials),
        families=sorted(families),
        element_names=sorted(names),
        levels=sorted(levels),
    )


async def build_model_index(
    node_ids: Sequence[int],
    service: PropertyService,
    *,
    max_concurrency: int = 0,
) -> ModelIndex:
    """Fetch, classify and index every node.

    Raises
    ------
    EmptyModelError
        If *node_ids* is empty.
    """
    if not node_ids:
        raise EmptyModelError()

    logger.info("Indexing %d elements", len(node_ids))
    fetched = await fetch_all(node_ids, service, max_concurrency=max_concurrency)
    index = build_index(classify_all(fetched))
    logger.info(
        "Index built: %d elements, %d categories, %d materials, %d families",
        index.total_count,
        len(index.category_counts),
        len(index.materials),
        len(index.families),
    )
    return index
