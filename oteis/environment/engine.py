"""MetricsEngine — environmental and economic impact of a whole model.

Usage::

    from oteis.environment import MetricsEngine

    engine = MetricsEngine()
    result = await engine.compute(node_ids, property_service)
    result = engine.accumulate(records)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from oteis.classification.classifier import classify_all
from oteis.config import (
    ANNUAL_CO2_RATE,
    BIODIVERSITY_PER_M2,
    ECO_CERTIFICATION_THRESHOLD,
    ENERGY_BALANCE_WEIGHT,
    ESTIMATED_LIFESPAN_YEARS,
    MAINTENANCE_RATE,
    RECYCLING_SAVINGS_RATE,
    THERMAL_FACTOR,
    WATER_PER_M2,
    Settings,
)
from oteis.environment.materials import LocalCatalog, MaterialCatalog, MaterialProfile
from oteis.environment.quantities import element_quantities
from oteis.environment.report import MaterialBreakdown, MetricsResult
from oteis.errors import EmptyModelError
from oteis.models.element import ElementRecord
from oteis.scene.service import PropertyService, fetch_all

logger = logging.getLogger(__name__)


@dataclass
class _MaterialTally:
    profile: MaterialProfile
    surface: float = 0.0
    volume: float = 0.0
    count: int = 0

    @property
    def mass(self) -> float:
        return self.volume * self.profile.density


class MetricsEngine:
    """Environmental metrics engine.

    Parameters
    ----------
    catalog:
        Material catalog.  Defaults to :class:`LocalCatalog` (embedded tables).
    settings:
        Runtime settings.  Defaults to :meth:`Settings.from_env`.
    """

    def __init__(
        self,
        catalog: MaterialCatalog | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.catalog = catalog or LocalCatalog()
        self.settings = settings or Settings.from_env()

    async def compute(
        self,
        node_ids: Sequence[int],
        service: PropertyService,
    ) -> MetricsResult:
        """Fetch every node, classify it and fold the result.

        Nodes whose fetch fails are skipped and not counted.

        Raises
        ------
        EmptyModelError
            If *node_ids* is empty.
        """
        if not node_ids:
            raise EmptyModelError()

        logger.info("Analysing %d elements", len(node_ids))
        fetched = await fetch_all(
            node_ids,
            service,
            max_concurrency=self.settings.max_concurrent_fetches,
        )
        result = self.accumulate(classify_all(fetched))
        logger.info(
            "Analysis complete: %d/%d elements, %.2f kg CO2e",
            result.elements_analyzed,
            len(node_ids),
            result.carbon_footprint,
        )
        return result

    def accumulate(self, records: Iterable[ElementRecord]) -> MetricsResult:
        """Fold classified records into a :class:`MetricsResult`.

        Records are folded in iteration order, so identical inputs give
        bit-identical results.
        """
        analyzed = 0
        surface_total = 0.0
        volume_total = 0.0
        carbon = 0.0
        energy = 0.0
        cost = 0.0
        tallies: dict[str, _MaterialTally] = {}

        for record in records:
            analyzed += 1
            surface, volume = element_quantities(record.properties)
            surface_total += surface
            volume_total += volume

            material = record.material or self.settings.unknown_material_label
            tally = tallies.get(material)
            if tally is None:
                tally = _MaterialTally(profile=self.catalog.get_profile(material))
                tallies[material] = tally
            tally.surface += surface
            tally.volume += volume
            tally.count += 1

            profile = tally.profile
            carbon += volume * profile.density * profile.carbon_factor
            energy += surface * profile.energy_factor
            cost += surface * profile.cost_factor

        thermal = (surface_total / 100) * THERMAL_FACTOR
        mass_total = sum(t.mass for t in tallies.values())
        recyclability = self._recyclability(tallies)

        return MetricsResult(
            elements_analyzed=analyzed,
            surface_total=surface_total,
            volume_total=volume_total,
            mass_total=mass_total,
            carbon_footprint=carbon,
            energy_consumption=energy,
            thermal_eval=thermal,
            cost_estimate=cost,
            maintenance_cost=cost * MAINTENANCE_RATE,
            recyclability_percent=recyclability,
            global_balance=carbon + energy * ENERGY_BALANCE_WEIGHT + thermal,
            material_breakdown=[
                MaterialBreakdown(
                    material=name,
                    surface=t.surface,
                    volume=t.volume,
                    mass_approx=t.mass,
                    count=t.count,
                )
                for name, t in tallies.items()
            ],
            potential_savings=mass_total * RECYCLING_SAVINGS_RATE,
            annual_co2_emissions=carbon * ANNUAL_CO2_RATE,
            water_consumption=surface_total * WATER_PER_M2,
            estimated_lifespan_years=ESTIMATED_LIFESPAN_YEARS,
            biodiversity_impact=surface_total * BIODIVERSITY_PER_M2,
            eco_certification=(
                "HQE/BREEAM eligible"
                if recyclability > ECO_CERTIFICATION_THRESHOLD
                else "Standard"
            ),
        )

    def _recyclability(self, tallies: dict[str, _MaterialTally]) -> float:
        """Mass-weighted recyclable share, as a percentage."""
        total_mass = 0.0
        recyclable_mass = 0.0
        for name, tally in tallies.items():
            mass = tally.mass
            total_mass += mass
            recyclable_mass += mass * self.catalog.recyclability_rate(name)
        if total_mass <= 0:
            return 0.0
        return min(max(recyclable_mass / total_mass * 100, 0.0), 100.0)


async def compute_metrics(
    node_ids: Sequence[int],
    service: PropertyService,
    *,
    catalog: MaterialCatalog | None = None,
) -> MetricsResult:
    """Convenience wrapper around :meth:`MetricsEngine.compute`."""
    return await MetricsEngine(catalog=catalog).compute(node_ids, service)
