"""Quantity takeoff from element properties.

Surfaces and volumes are read directly when the element exposes them and
derived from its dimensions otherwise.  Units are whatever the host
reports; no conversion is applied.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from oteis.classification.classifier import find_property
from oteis.config import (
    HEIGHT_FIELDS,
    LENGTH_FIELDS,
    SURFACE_FIELDS,
    VOLUME_FIELDS,
    WIDTH_FIELDS,
)
from oteis.models.element import Property

_NON_NUMERIC_RE = re.compile(r"[^0-9.\-]")
_LEADING_FLOAT_RE = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)")


def parse_numeric(value: str | None) -> float:
    """Parse a display value such as ``"12.5 m²"`` into ``12.5``.

    Every character other than digits, ``.`` and ``-`` is dropped, the
    longest leading number is read, and its absolute value returned.
    Missing or unparsable values give ``0.0``.
    """
    if not value:
        return 0.0
    cleaned = _NON_NUMERIC_RE.sub("", str(value))
    match = _LEADING_FLOAT_RE.match(cleaned)
    if match is None:
        return 0.0
    return abs(float(match.group(0)))


def element_surface(properties: Sequence[Property]) -> float:
    """Surface from a Surface/Area field, else length x width."""
    surface = find_property(properties, SURFACE_FIELDS)
    if surface is not None:
        return parse_numeric(surface.display_value)

    length = find_property(properties, LENGTH_FIELDS)
    width = find_property(properties, WIDTH_FIELDS)
    if length is not None and width is not None:
        return parse_numeric(length.display_value) * parse_numeric(width.display_value)
    return 0.0


def element_volume(properties: Sequence[Property], surface: float) -> float:
    """Volume from a Volume field, else *surface* x height."""
    volume = find_property(properties, VOLUME_FIELDS)
    if volume is not None:
        return parse_numeric(volume.display_value)

    height = find_property(properties, HEIGHT_FIELDS)
    if surface and height is not None:
        return surface * parse_numeric(height.display_value)
    return 0.0


def element_quantities(properties: Sequence[Property]) -> tuple[float, float]:
    """Return ``(surface, volume)`` for one element."""
    surface = element_surface(properties)
    return surface, element_volume(properties, surface)
