"""Tests for the IFC host adapter.

All tests build a synthetic IFC in memory with ifcopenshell's API and read
it back through the scene graph and property service.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import ifcopenshell
import ifcopenshell.api
import pytest

from oteis.api.facade import ModelSession
from oteis.config import Settings
from oteis.errors import FetchError
from oteis.extraction.ifc import (
    IfcPropertyService,
    IfcSceneGraph,
    element_properties,
    material_names,
    open_ifc,
)


# ---------------------------------------------------------------------------
# Fixtures: synthetic IFC files
# ---------------------------------------------------------------------------


def _build_minimal_ifc() -> ifcopenshell.file:
    """Return an IFC4 file with one wall, one door, and one slab.

    The wall has:
      - Pset_WallCommon with IsExternal and FireRating
      - Qto_WallBaseQuantities with NetSideArea 12 and Height 3
      - A two-layer material (Concrete 200mm + Insulation 50mm)
    All three elements sit in storey "Level 1" under Site > Building.
    """
    f = ifcopenshell.file(schema="IFC4")

    proj = ifcopenshell.api.run(
        "root.create_entity", f, ifc_class="IfcProject", name="SyntheticProject"
    )
    ifcopenshell.api.run("context.add_context", f, context_type="Model")

    site = ifcopenshell.api.run("root.create_entity", f, ifc_class="IfcSite", name="TestSite")
    building = ifcopenshell.api.run(
        "root.create_entity", f, ifc_class="IfcBuilding", name="TestBuilding"
    )
    storey = ifcopenshell.api.run(
        "root.create_entity", f, ifc_class="IfcBuildingStorey", name="Level 1"
    )

    ifcopenshell.api.run("aggregate.assign_object", f, products=[site], relating_object=proj)
    ifcopenshell.api.run("aggregate.assign_object", f, products=[building], relating_object=site)
    ifcopenshell.api.run("aggregate.assign_object", f, products=[storey], relating_object=building)

    # --- Wall ---
    wall = ifcopenshell.api.run("root.create_entity", f, ifc_class="IfcWall", name="ExteriorWall")
    ifcopenshell.api.run("spatial.assign_container", f, products=[wall], relating_structure=storey)

    pset = ifcopenshell.api.run("pset.add_pset", f, product=wall, name="Pset_WallCommon")
    ifcopenshell.api.run(
        "pset.edit_pset", f, pset=pset, properties={"IsExternal": True, "FireRating": "2HR"}
    )
    qto = ifcopenshell.api.run("pset.add_qto", f, product=wall, name="Qto_WallBaseQuantities")
    ifcopenshell.api.run(
        "pset.edit_qto", f, qto=qto, properties={"NetSideArea": 12.0, "Height": 3.0}
    )

    mat_set = ifcopenshell.api.run(
        "material.add_material_set", f, name="WallLayers", set_type="IfcMaterialLayerSet"
    )
    concrete = ifcopenshell.api.run("material.add_material", f, name="Concrete")
    insulation = ifcopenshell.api.run("material.add_material", f, name="Insulation")
    layer1 = ifcopenshell.api.run("material.add_layer", f, layer_set=mat_set, material=concrete)
    ifcopenshell.api.run("material.edit_layer", f, layer=layer1, attributes={"LayerThickness": 200.0})
    layer2 = ifcopenshell.api.run("material.add_layer", f, layer_set=mat_set, material=insulation)
    ifcopenshell.api.run("material.edit_layer", f, layer=layer2, attributes={"LayerThickness": 50.0})
    ifcopenshell.api.run("material.assign_material", f, products=[wall], material=mat_set)

    # --- Door ---
    door = ifcopenshell.api.run("root.create_entity", f, ifc_class="IfcDoor", name="EntryDoor")
    ifcopenshell.api.run("spatial.assign_container", f, products=[door], relating_structure=storey)

    # --- Slab ---
    slab = ifcopenshell.api.run("root.create_entity", f, ifc_class="IfcSlab", name="GroundSlab")
    ifcopenshell.api.run("spatial.assign_container", f, products=[slab], relating_structure=storey)

    return f


@pytest.fixture()
def synthetic_ifc_file() -> ifcopenshell.file:
    return _build_minimal_ifc()


@pytest.fixture()
def synthetic_ifc(tmp_path: Path) -> Path:
    """Write a synthetic IFC4 to a temp file and return its path."""
    p = tmp_path / "synthetic.ifc"
    _build_minimal_ifc().write(str(p))
    return p


def _element_id(f: ifcopenshell.file, ifc_class: str) -> int:
    return f.by_type(ifc_class)[0].id()


def _as_dict(props) -> dict[str, str]:
    return {p.display_name: p.display_value for p in props}


# ---------------------------------------------------------------------------
# Scene graph
# ---------------------------------------------------------------------------


class TestIfcSceneGraph:
    def test_root_is_project(self, synthetic_ifc_file):
        graph = IfcSceneGraph(synthetic_ifc_file)
        assert graph.root() == _element_id(synthetic_ifc_file, "IfcProject")

    def test_walk_returns_building_elements(self, synthetic_ifc_file):
        leaves = IfcSceneGraph(synthetic_ifc_file).walk()
        classes = {synthetic_ifc_file.by_id(i).is_a() for i in leaves}
        assert len(leaves) == 3
        assert classes == {"IfcWall", "IfcDoor", "IfcSlab"}

    def test_storey_children(self, synthetic_ifc_file):
        graph = IfcSceneGraph(synthetic_ifc_file)
        storey = _element_id(synthetic_ifc_file, "IfcBuildingStorey")
        assert len(graph.children(storey)) == 3

    def test_empty_spatial_tree(self):
        f = ifcopenshell.file(schema="IFC4")
        ifcopenshell.api.run("root.create_entity", f, ifc_class="IfcProject", name="Empty")
        assert IfcSceneGraph(f).walk() == []

    def test_no_project(self):
        with pytest.raises(ValueError):
            IfcSceneGraph(ifcopenshell.file(schema="IFC4"))


# ---------------------------------------------------------------------------
# Property extraction
# ---------------------------------------------------------------------------


class TestElementProperties:
    def test_wall(self, synthetic_ifc_file):
        wall = synthetic_ifc_file.by_type("IfcWall")[0]
        props = _as_dict(element_properties(wall))
        assert props["Category"] == "IfcWall"
        assert props["Material"] == "Concrete"
        assert props["Level"] == "Level 1"
        assert props["FireRating"] == "2HR"
        assert props["IsExternal"] == "Yes"
        assert float(props["NetSideArea"]) == pytest.approx(12.0)
        assert "id" not in props

    def test_door_without_material(self, synthetic_ifc_file):
        door = synthetic_ifc_file.by_type("IfcDoor")[0]
        props = _as_dict(element_properties(door))
        assert props["Category"] == "IfcDoor"
        assert "Material" not in props

    def test_material_layers_in_order(self, synthetic_ifc_file):
        wall = synthetic_ifc_file.by_type("IfcWall")[0]
        assert material_names(wall) == ["Concrete", "Insulation"]

    def test_no_material(self, synthetic_ifc_file):
        assert material_names(synthetic_ifc_file.by_type("IfcSlab")[0]) == []


class TestIfcPropertyService:
    def test_fetch(self, synthetic_ifc_file):
        service = IfcPropertyService(synthetic_ifc_file)
        bag = asyncio.run(service.fetch(_element_id(synthetic_ifc_file, "IfcWall")))
        assert bag.name == "ExteriorWall"
        assert _as_dict(bag.properties)["Material"] == "Concrete"

    def test_missing_id(self, synthetic_ifc_file):
        service = IfcPropertyService(synthetic_ifc_file)
        with pytest.raises(FetchError):
            asyncio.run(service.fetch(999_999))


# ---------------------------------------------------------------------------
# End to end
# ---------------------------------------------------------------------------


class TestIfcSession:
    def test_open_and_index(self, synthetic_ifc: Path):
        graph, service = open_ifc(synthetic_ifc)
        session = ModelSession(graph, service, settings=Settings())
        index = asyncio.run(session.load())
        assert index.total_count == 3
        assert index.levels == ["Level 1"]
        assert index.materials == ["Concrete"]
        assert {cat for cat, _ in index.category_counts} == {"IfcWall", "IfcDoor", "IfcSlab"}

    def test_metrics(self, synthetic_ifc_file):
        session = ModelSession(
            IfcSceneGraph(synthetic_ifc_file),
            IfcPropertyService(synthetic_ifc_file),
            settings=Settings(),
        )
        result = asyncio.run(session.analyze())
        assert result.elements_analyzed == 3
        assert result.surface_total == pytest.approx(12.0)
        assert result.volume_total == pytest.approx(36.0)
        assert result.carbon_footprint == pytest.approx(36 * 2400 * 0.2)

    def test_french_search(self, synthetic_ifc_file):
        session = ModelSession(
            IfcSceneGraph(synthetic_ifc_file),
            IfcPropertyService(synthetic_ifc_file),
            settings=Settings(),
        )
        door_id = _element_id(synthetic_ifc_file, "IfcDoor")
        assert asyncio.run(session.search("porte")) == [door_id]
