"""IFC host adapter — scene graph and property service backed by ifcopenshell."""

from oteis.extraction.ifc import IfcPropertyService, IfcSceneGraph, open_ifc

__all__ = ["IfcPropertyService", "IfcSceneGraph", "open_ifc"]
