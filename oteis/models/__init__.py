"""Element data models."""

from oteis.models.element import ElementRecord, Property, PropertyBag

__all__ = ["ElementRecord", "Property", "PropertyBag"]
