"""Tests for the environmental metrics engine."""

from __future__ import annotations

import asyncio
import json

import pytest

from oteis.classification.classifier import classify_all
from oteis.config import Settings
from oteis.environment.engine import MetricsEngine, compute_metrics
from oteis.environment.materials import DEFAULT_PROFILE, LocalCatalog
from oteis.environment.quantities import (
    element_quantities,
    element_surface,
    element_volume,
    parse_numeric,
)
from oteis.environment.report import (
    MaterialBreakdown,
    MetricsResult,
    format_currency,
    format_number,
    format_surface,
    format_weight,
)
from oteis.errors import EmptyModelError
from oteis.models.element import ElementRecord, PropertyBag
from oteis.scene.service import InMemoryPropertyService


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _props(*pairs: tuple[str, object]):
    return PropertyBag.from_pairs("x", list(pairs)).properties


def _three_element_bags() -> dict[int, PropertyBag]:
    """Wall (concrete, 10 m2 x 3 m), door (wood, 2 m2), roof (steel, 15 m2)."""
    return {
        1: PropertyBag.from_pairs("Wall-01", [
            ("Category", "Walls"),
            ("Material", "Concrete"),
            ("Surface", "10 m²"),
            ("Height", "3 m"),
        ]),
        2: PropertyBag.from_pairs("Door-01", [
            ("Category", "Doors"),
            ("Material", "Wood"),
            ("Surface", "2 m²"),
        ]),
        3: PropertyBag.from_pairs("Roof-01", [
            ("Category", "Roofs"),
            ("Material", "Steel"),
            ("Surface", "15 m²"),
        ]),
    }


def _engine(**settings) -> MetricsEngine:
    return MetricsEngine(settings=Settings(**settings))


def _record(node_id: int, material: str | None, *pairs: tuple[str, object]) -> ElementRecord:
    return ElementRecord(
        id=node_id,
        name=f"E{node_id}",
        material=material,
        properties=_props(*pairs),
    )


@pytest.fixture
def three_element_result() -> MetricsResult:
    service = InMemoryPropertyService(_three_element_bags())
    return asyncio.run(_engine().compute([1, 2, 3], service))


# ---------------------------------------------------------------------------
# Numeric parsing and quantities
# ---------------------------------------------------------------------------


class TestParseNumeric:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("12.5 m²", 12.5),
            ("3 m", 3.0),
            ("-4.2", 4.2),
            ("1.2.3", 1.2),
            ("3-4", 3.0),
            ("1,5", 15.0),
            (".5", 0.5),
            ("12.", 12.0),
        ],
    )
    def test_values(self, raw, expected):
        assert parse_numeric(raw) == pytest.approx(expected)

    @pytest.mark.parametrize("raw", ["", None, "abc", "-", "m²"])
    def test_unparsable_is_zero(self, raw):
        assert parse_numeric(raw) == 0.0


class TestQuantities:
    def test_direct_surface(self):
        assert element_surface(_props(("Area", "5"))) == 5.0

    def test_surface_candidate_priority(self):
        assert element_surface(_props(("Area", "5"), ("Surface", "7"))) == 7.0

    def test_surface_from_length_and_width(self):
        props = _props(("Length", "4 m"), ("Width", "0.5 m"))
        assert element_surface(props) == pytest.approx(2.0)

    def test_surface_needs_both_dimensions(self):
        assert element_surface(_props(("Length", "4 m"))) == 0.0

    def test_direct_volume_wins_over_height(self):
        props = _props(("Surface", "10"), ("Height", "3"), ("Volume", "5 m³"))
        assert element_quantities(props) == (10.0, 5.0)

    def test_volume_from_surface_and_height(self):
        assert element_quantities(_props(("Surface", "10"), ("Hauteur", "2.5"))) == (10.0, 25.0)

    def test_height_without_surface_is_zero(self):
        assert element_volume(_props(("Height", "3")), 0.0) == 0.0

    def test_no_dimensions(self):
        assert element_quantities(_props(("Mark", "A1"))) == (0.0, 0.0)


# ---------------------------------------------------------------------------
# Material catalog
# ---------------------------------------------------------------------------


class TestLocalCatalog:
    def test_exact(self):
        assert LocalCatalog().get_profile("Concrete").density == 2400

    def test_case_insensitive_substring(self):
        catalog = LocalCatalog()
        assert catalog.get_profile("Béton Concrete C25/30").density == 2400
        assert catalog.get_profile("reinforced STEEL").density == 7850

    def test_table_order_breaks_ties(self):
        assert LocalCatalog().get_profile("Steel and Glass").density == 7850

    def test_unknown_uses_default(self):
        assert LocalCatalog().get_profile("Unobtainium") == DEFAULT_PROFILE

    def test_recyclability(self):
        catalog = LocalCatalog()
        assert catalog.recyclability_rate("Aluminum frame") == 0.95
        assert catalog.recyclability_rate("Unobtainium") == 0.0

    def test_custom_tables(self):
        catalog = LocalCatalog(
            profiles={"Hemp": {"density": 300, "carbon_factor": 0.05, "energy_factor": 1, "cost_factor": 60}},
            recyclability={"Hemp": 0.5},
        )
        assert catalog.get_profile("Hempcrete").density == 300
        assert catalog.get_profile("Concrete") == DEFAULT_PROFILE
        assert catalog.recyclability_rate("hempcrete") == 0.5


# ---------------------------------------------------------------------------
# Metrics engine
# ---------------------------------------------------------------------------


class TestMetricsEngine:
    def test_three_element_model(self, three_element_result):
        r = three_element_result
        assert r.elements_analyzed == 3
        assert r.surface_total == pytest.approx(27.0)
        assert r.volume_total == pytest.approx(30.0)
        assert r.carbon_footprint == pytest.approx(14400.0)
        assert len(r.material_breakdown) == 3

    def test_derived_wall_volume(self, three_element_result):
        wall = three_element_result.material_breakdown[0]
        assert wall.material == "Concrete"
        assert wall.volume == pytest.approx(30.0)
        assert wall.mass_approx == pytest.approx(72000.0)

    def test_energy_cost_and_balance(self, three_element_result):
        r = three_element_result
        assert r.energy_consumption == pytest.approx(10 * 5 + 2 * 2 + 15 * 8)
        assert r.cost_estimate == pytest.approx(10 * 150 + 2 * 400 + 15 * 800)
        assert r.maintenance_cost == pytest.approx(r.cost_estimate * 0.15)
        assert r.thermal_eval == pytest.approx(27 / 100 * 0.8)
        assert r.global_balance == pytest.approx(
            r.carbon_footprint + r.energy_consumption * 0.5 + r.thermal_eval
        )

    def test_derived_indicators(self, three_element_result):
        r = three_element_result
        assert r.potential_savings == pytest.approx(72000 * 0.02)
        assert r.annual_co2_emissions == pytest.approx(14400 * 0.05)
        assert r.water_consumption == pytest.approx(27 * 2.5)
        assert r.biodiversity_impact == pytest.approx(2.7)
        assert r.estimated_lifespan_years == 50
        assert r.eco_certification == "Standard"

    def test_recyclability_only_counts_mass(self, three_element_result):
        # Door and roof have no volume, so concrete carries all the mass
        assert three_element_result.recyclability_percent == pytest.approx(10.0)

    def test_breakdown_sums_match_totals(self, three_element_result):
        r = three_element_result
        assert sum(b.surface for b in r.material_breakdown) == pytest.approx(r.surface_total)
        assert sum(b.volume for b in r.material_breakdown) == pytest.approx(r.volume_total)
        assert sum(b.count for b in r.material_breakdown) == r.elements_analyzed
        assert sum(b.mass_approx for b in r.material_breakdown) == pytest.approx(r.mass_total)

    def test_mixed_recyclability(self):
        records = [
            _record(1, "Concrete", ("Volume", "1")),
            _record(2, "Steel", ("Volume", "1")),
        ]
        r = _engine().accumulate(records)
        expected = (2400 * 0.1 + 7850 * 0.9) / (2400 + 7850) * 100
        assert r.recyclability_percent == pytest.approx(expected)
        assert r.eco_certification == "HQE/BREEAM eligible"

    def test_recyclability_zero_without_mass(self):
        r = _engine().accumulate([_record(1, "Steel", ("Surface", "4"))])
        assert r.recyclability_percent == 0.0
        assert r.mass_total == 0.0

    def test_unknown_material_bucket(self):
        r = _engine().accumulate([_record(1, None, ("Volume", "2"))])
        entry = r.material_breakdown[0]
        assert entry.material == "Unknown"
        assert entry.mass_approx == pytest.approx(2000.0)
        assert r.carbon_footprint == pytest.approx(200.0)

    def test_unknown_material_label_setting(self):
        r = _engine(unknown_material_label="Unclassified").accumulate([_record(1, None)])
        assert r.material_breakdown[0].material == "Unclassified"

    def test_same_material_aggregates(self):
        records = [
            _record(1, "Brick", ("Surface", "2")),
            _record(2, "Brick", ("Surface", "3")),
        ]
        r = _engine().accumulate(records)
        assert r.material_breakdown == [
            MaterialBreakdown(material="Brick", surface=5.0, volume=0.0, mass_approx=0.0, count=2)
        ]

    def test_empty_model_raises(self):
        with pytest.raises(EmptyModelError):
            asyncio.run(_engine().compute([], InMemoryPropertyService({})))

    def test_failed_fetch_is_excluded(self):
        service = InMemoryPropertyService(_three_element_bags(), failing=[3])
        r = asyncio.run(_engine().compute([1, 2, 3], service))
        assert r.elements_analyzed == 2
        assert r.surface_total == pytest.approx(12.0)
        assert [b.material for b in r.material_breakdown] == ["Concrete", "Wood"]

    def test_all_fetches_failing_gives_zero_result(self):
        service = InMemoryPropertyService({}, failing=[1, 2])
        r = asyncio.run(_engine().compute([1, 2], service))
        assert r.elements_analyzed == 0
        assert r.material_breakdown == []

    def test_repeatable(self):
        service = InMemoryPropertyService(_three_element_bags())
        engine = _engine()
        first = asyncio.run(engine.compute([1, 2, 3], service))
        second = asyncio.run(engine.compute([1, 2, 3], service))
        assert first == second

    def test_accumulate_matches_compute(self, three_element_result):
        fetched = [(node_id, bag) for node_id, bag in _three_element_bags().items()]
        assert _engine().accumulate(classify_all(fetched)) == three_element_result

    def test_concurrency_cap_setting(self):
        service = InMemoryPropertyService(_three_element_bags())
        r = asyncio.run(_engine(max_concurrent_fetches=1).compute([1, 2, 3], service))
        assert r.elements_analyzed == 3

    def test_compute_metrics_wrapper(self):
        service = InMemoryPropertyService(_three_element_bags())
        r = asyncio.run(compute_metrics([1, 2, 3], service))
        assert r.carbon_footprint == pytest.approx(14400.0)


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


class TestReport:
    def test_markdown(self, three_element_result):
        md = three_element_result.to_markdown()
        assert "# Environmental Analysis" in md
        assert "| Total surface | 27.00 m² |" in md
        assert "| Total mass | 72.00 t |" in md
        assert "## Materials" in md
        assert "| Concrete | 1 |" in md

    def test_markdown_escapes_pipes(self):
        result = MetricsResult(material_breakdown=[MaterialBreakdown(material="A|B", count=1)])
        assert "A\\|B" in result.to_markdown()

    def test_markdown_without_breakdown(self):
        assert "## Materials" not in MetricsResult().to_markdown()

    def test_json(self, three_element_result):
        data = json.loads(three_element_result.to_json())
        assert data["elements_analyzed"] == 3
        assert len(data["material_breakdown"]) == 3

    def test_to_dict(self, three_element_result):
        data = three_element_result.to_dict()
        assert data["eco_certification"] == "Standard"
        assert data["material_breakdown"][0]["material"] == "Concrete"


class TestFormatting:
    def test_surface_units(self):
        assert format_surface(12.5) == "12.50 m²"
        assert format_surface(25_000) == "2.50 ha"
        assert format_surface(2_000_000) == "2.00 km²"

    def test_weight_units(self):
        assert format_weight(500) == "500.00 kg"
        assert format_weight(72_000) == "72.00 t"
        assert format_weight(3_000_000) == "3.00 kt"

    def test_number_and_currency(self):
        assert format_number(500) == "500.00"
        assert format_number(1_500) == "1.50 K"
        assert format_currency(14_300) == "14.30 K €"
        assert format_currency(12) == "12.00 €"
