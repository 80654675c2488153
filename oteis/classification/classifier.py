"""Element classification — semantic fields from display-name heuristics."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from oteis.config import (
    CATEGORY_FIELDS,
    FAMILY_FIELDS,
    LEVEL_FIELDS,
    MATERIAL_FIELDS,
    TYPE_FIELDS,
)
from oteis.models.element import ElementRecord, Property, PropertyBag

logger = logging.getLogger(__name__)


def find_property(
    properties: Sequence[Property],
    candidates: Iterable[str],
) -> Property | None:
    """Return the first property whose display name contains a candidate.

    Candidates are tried in order; for each one the first property whose
    display name contains it (case-insensitively) wins, whatever its value.
    """
    for candidate in candidates:
        needle = candidate.lower()
        for prop in properties:
            if prop.display_name and needle in prop.display_name.lower():
                return prop
    return None


def find_property_value(
    properties: Sequence[Property],
    candidates: Iterable[str],
) -> str | None:
    """Return the display value supplied by the highest-priority candidate.

    Like :func:`find_property`, but a candidate whose first matching
    property has an empty value is passed over in favour of the next
    candidate.  Returns *None* when no candidate yields a value.
    """
    for candidate in candidates:
        prop = find_property(properties, (candidate,))
        if prop is not None and prop.display_value != "":
            return prop.display_value
    return None


def classify(node_id: int, bag: PropertyBag) -> ElementRecord | None:
    """Classify one property bag.

    Returns *None* when the bag has no usable name, in which case the node
    takes no part in any aggregate.
    """
    if not bag.has_usable_name:
        logger.debug("Node %s has no usable name, not classified", node_id)
        return None

    props = bag.properties
    return ElementRecord(
        id=node_id,
        name=bag.name,
        category=find_property_value(props, CATEGORY_FIELDS),
        material=find_property_value(props, MATERIAL_FIELDS),
        family=find_property_value(props, FAMILY_FIELDS),
        type=find_property_value(props, TYPE_FIELDS),
        level=find_property_value(props, LEVEL_FIELDS),
        properties=props,
    )


def classify_all(
    fetched: Iterable[tuple[int, PropertyBag | None]],
) -> list[ElementRecord]:
    """Classify fetched ``(node_id, bag)`` pairs, dropping failed fetches."""
    records: list[ElementRecord] = []
    for node_id, bag in fetched:
        if bag is None:
            continue
        record = classify(node_id, bag)
        if record is not None:
            records.append(record)
    return records
