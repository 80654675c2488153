"""Element records — property bags as fetched, and their classified form.

A property bag is the raw snapshot the host returns for one scene-graph
leaf; an ElementRecord is the same element after classification.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Property(BaseModel):
    """A single (display name, display value) pair."""

    model_config = ConfigDict(frozen=True)

    display_name: str = ""
    display_value: str = ""

    @field_validator("display_name", "display_value", mode="before")
    @classmethod
    def _coerce_str(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)


class PropertyBag(BaseModel):
    """Immutable snapshot of the properties exposed for one element."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    properties: tuple[Property, ...] = ()

    @classmethod
    def from_pairs(
        cls,
        name: str | None,
        pairs: list[tuple[Any, Any]] | None = None,
    ) -> PropertyBag:
        """Build a bag from ``(display_name, display_value)`` tuples."""
        return cls(
            name=name,
            properties=tuple(
                Property(display_name=k, display_value=v) for k, v in (pairs or [])
            ),
        )

    @property
    def has_usable_name(self) -> bool:
        return bool(self.name)


class ElementRecord(BaseModel):
    """One classified element.

    Semantic fields are *None* when no matching property was found.
    """

    id: int
    name: str
    category: str | None = None
    material: str | None = None
    family: str | None = None
    type: str | None = None
    level: str | None = None
    properties: tuple[Property, ...] = Field(default_factory=tuple)
