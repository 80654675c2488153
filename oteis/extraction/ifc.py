"""IFC host adapter — scene graph and property service over an IFC file.

Node ids are IFC step ids.  The graph follows the spatial decomposition
(IfcRelAggregates) and spatial containment (IfcRelContainedInSpatialStructure)
down from IfcProject; its leaves are the building elements.

Each element's property bag is built from its class, object type, type
object, material, containing storey, and every property and quantity set.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import ifcopenshell
import ifcopenshell.util.element

from oteis.errors import FetchError
from oteis.models.element import Property, PropertyBag
from oteis.scene.graph import SceneGraph, walk
from oteis.scene.service import PropertyService

logger = logging.getLogger(__name__)

# IFC class treated as an analysable element; captures IfcWall, IfcDoor, IfcSlab, ...
ELEMENT_BASE_CLASS = "IfcElement"


class IfcSceneGraph(SceneGraph):
    """Spatial tree of an IFC file, rooted at its IfcProject."""

    def __init__(self, ifc_file: ifcopenshell.file) -> None:
        self.ifc_file = ifc_file
        projects = ifc_file.by_type("IfcProject")
        if not projects:
            raise ValueError("IFC file has no IfcProject")
        self._root = projects[0].id()

    def root(self) -> int:
        return self._root

    def children(self, node_id: int) -> list[int]:
        entity = self.ifc_file.by_id(node_id)
        kids: list[int] = []
        for rel in getattr(entity, "IsDecomposedBy", None) or ():
            kids.extend(obj.id() for obj in rel.RelatedObjects)
        for rel in getattr(entity, "ContainsElements", None) or ():
            kids.extend(obj.id() for obj in rel.RelatedElements)
        return kids

    def walk(self, root: int | None = None) -> list[int]:
        """Leaf building elements; empty spatial containers are left out."""
        leaves = walk(self, self.root() if root is None else root)
        return [
            node_id for node_id in leaves
            if self.ifc_file.by_id(node_id).is_a(ELEMENT_BASE_CLASS)
        ]


class IfcPropertyService(PropertyService):
    """Property bags read from IFC entities."""

    def __init__(self, ifc_file: ifcopenshell.file) -> None:
        self.ifc_file = ifc_file

    async def fetch(self, node_id: int) -> PropertyBag:
        try:
            entity = self.ifc_file.by_id(node_id)
        except RuntimeError as exc:
            raise FetchError(node_id, str(exc)) from exc

        try:
            properties = element_properties(entity)
        except Exception as exc:
            logger.debug("Property extraction failed for #%s", node_id, exc_info=True)
            raise FetchError(node_id, "property extraction failed") from exc

        return PropertyBag(name=entity.Name, properties=properties)


def element_properties(element: ifcopenshell.entity_instance) -> list[Property]:
    """Flatten the descriptive data of *element* into display pairs."""
    props: list[Property] = [Property(display_name="Category", display_value=element.is_a())]

    object_type = getattr(element, "ObjectType", None)
    if object_type:
        props.append(Property(display_name="Object Type", display_value=object_type))

    element_type = ifcopenshell.util.element.get_type(element)
    if element_type is not None and element_type.Name:
        props.append(Property(display_name="Type Name", display_value=element_type.Name))

    materials = material_names(element)
    if materials:
        props.append(Property(display_name="Material", display_value=materials[0]))

    container = ifcopenshell.util.element.get_container(element)
    if container is not None and container.Name:
        props.append(Property(display_name="Level", display_value=container.Name))

    for values in ifcopenshell.util.element.get_psets(element).values():
        for key, value in values.items():
            if key == "id":
                # Internal ifcopenshell id of the set itself
                continue
            props.append(Property(display_name=key, display_value=_display(value)))

    return props


def material_names(element: ifcopenshell.entity_instance) -> list[str]:
    """Names of the materials assigned to *element*, outermost layer first.

    Handles single materials, layer sets (and their usages), constituent
    sets and material lists.
    """
    mat = ifcopenshell.util.element.get_material(element)
    if mat is None:
        return []

    mat_type = mat.is_a()
    if mat_type == "IfcMaterial":
        return [mat.Name] if mat.Name else []
    if mat_type == "IfcMaterialLayerSetUsage":
        mat = mat.ForLayerSet
        mat_type = mat.is_a()
    if mat_type == "IfcMaterialLayerSet":
        return [layer.Material.Name for layer in mat.MaterialLayers if layer.Material]
    if mat_type == "IfcMaterialConstituentSet":
        return [c.Material.Name for c in (mat.MaterialConstituents or []) if c.Material]
    if mat_type == "IfcMaterialList":
        return [m.Name for m in mat.Materials if m.Name]
    return []


def _display(value: Any) -> str:
    if isinstance(value, ifcopenshell.entity_instance):
        return str(value)
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return "" if value is None else str(value)


def open_ifc(ifc_path: str | Path) -> tuple[IfcSceneGraph, IfcPropertyService]:
    """Open an IFC2x3/IFC4 file and return its scene graph and property service."""
    ifc_path = Path(ifc_path)
    logger.info("Opening %s", ifc_path)
    ifc_file = ifcopenshell.open(str(ifc_path))
    return IfcSceneGraph(ifc_file), IfcPropertyService(ifc_file)
