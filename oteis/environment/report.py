"""MetricsResult model and Markdown rendering of the environmental report."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, Field


class MaterialBreakdown(BaseModel):
    """Aggregated quantities for one material name."""

    material: str
    surface: float = 0.0
    volume: float = 0.0
    mass_approx: float = 0.0
    count: int = 0


class MetricsResult(BaseModel):
    """Environmental and economic impact of one model.

    Recomputed on demand from the current walk; never persisted.
    """

    elements_analyzed: int = 0
    surface_total: float = 0.0
    """m2"""
    volume_total: float = 0.0
    """m3"""
    mass_total: float = 0.0
    """kg"""
    carbon_footprint: float = 0.0
    """kg CO2e"""
    energy_consumption: float = 0.0
    """kWh"""
    thermal_eval: float = 0.0
    """kWh"""
    cost_estimate: float = 0.0
    maintenance_cost: float = 0.0
    """per year"""
    recyclability_percent: float = 0.0
    global_balance: float = 0.0
    material_breakdown: list[MaterialBreakdown] = Field(default_factory=list)

    # Derived indicators
    potential_savings: float = 0.0
    annual_co2_emissions: float = 0.0
    water_consumption: float = 0.0
    """litres"""
    estimated_lifespan_years: int = 0
    biodiversity_impact: float = 0.0
    eco_certification: str = "Standard"

    def to_dict(self) -> dict[str, Any]:
        """Return dict representation."""
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        """Return structured JSON for the host application."""
        return json.dumps(self.to_dict(), indent=2, default=str)

    def to_markdown(self) -> str:
        """Render the environmental report as Markdown."""
        lines: list[str] = []

        lines.append("# Environmental Analysis")
        lines.append("")
        lines.append(f"**Elements analysed:** {format_number(self.elements_analyzed)}")
        lines.append("")

        lines.append("## Structure")
        lines.append("")
        lines.append("| Indicator | Value |")
        lines.append("|-----------|-------|")
        lines.append(f"| Total surface | {format_surface(self.surface_total)} |")
        lines.append(f"| Total volume | {format_volume(self.volume_total)} |")
        lines.append(f"| Total mass | {format_weight(self.mass_total)} |")
        lines.append("")

        lines.append("## Environmental Impact")
        lines.append("")
        lines.append("| Indicator | Value |")
        lines.append("|-----------|-------|")
        lines.append(f"| Carbon footprint | {format_weight(self.carbon_footprint)} CO2e |")
        lines.append(f"| Annual CO2 emissions | {format_weight(self.annual_co2_emissions)} CO2e |")
        lines.append(f"| Energy consumption | {format_energy(self.energy_consumption)} |")
        lines.append(f"| Thermal evaluation | {format_energy(self.thermal_eval)} |")
        lines.append(f"| Global balance | {format_number(self.global_balance)} |")
        lines.append(f"| Water consumption | {format_number(self.water_consumption)} L |")
        lines.append(f"| Biodiversity impact | {self.biodiversity_impact:.2f} |")
        lines.append(f"| Recyclability | {self.recyclability_percent:.1f} % |")
        lines.append(f"| Certification | {self.eco_certification} |")
        lines.append("")

        lines.append("## Economics")
        lines.append("")
        lines.append("| Indicator | Value |")
        lines.append("|-----------|-------|")
        lines.append(f"| Estimated cost | {format_currency(self.cost_estimate)} |")
        lines.append(f"| Maintenance (per year) | {format_currency(self.maintenance_cost)} |")
        lines.append(f"| Recycling savings | {format_currency(self.potential_savings)} |")
        lines.append(f"| Estimated lifespan | {self.estimated_lifespan_years} years |")
        lines.append("")

        if self.material_breakdown:
            lines.append("## Materials")
            lines.append("")
            lines.append("| Material | Count | Surface | Volume | Mass |")
            lines.append("|----------|-------|---------|--------|------|")
            for entry in self.material_breakdown:
                name = entry.material.replace("|", "\\|")
                lines.append(
                    f"| {name} | {entry.count} | {format_surface(entry.surface)} "
                    f"| {format_volume(entry.volume)} | {format_weight(entry.mass_approx)} |"
                )
            lines.append("")

        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Unit formatting
# ---------------------------------------------------------------------------


def _scaled(value: float, steps: list[tuple[float, str]], base_unit: str) -> str:
    for threshold, unit in steps:
        if value >= threshold:
            return f"{value / threshold:.2f} {unit}".rstrip()
    return f"{value:.2f} {base_unit}".rstrip()


def format_number(value: float) -> str:
    return _scaled(value, [(1e9, "Md"), (1e6, "M"), (1e3, "K")], "")


def format_surface(value: float) -> str:
    if value >= 1e6:
        return f"{value / 1e6:.2f} km²"
    if value >= 1e4:
        return f"{value / 1e4:.2f} ha"
    return f"{value:.2f} m²"


def format_volume(value: float) -> str:
    return _scaled(value, [(1e6, "Mm³"), (1e3, "Km³")], "m³")


def format_weight(value: float) -> str:
    return _scaled(value, [(1e6, "kt"), (1e3, "t")], "kg")


def format_energy(value: float) -> str:
    return _scaled(value, [(1e6, "GWh"), (1e3, "MWh")], "kWh")


def format_currency(value: float) -> str:
    return _scaled(value, [(1e9, "Md €"), (1e6, "M €"), (1e3, "K €")], "€")
