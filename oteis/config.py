"""Global configuration: lookup tables, report factors, runtime settings."""

from __future__ import annotations

import logging
import os
from typing import Any

from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Classification: candidate display-name substrings, in priority order
# ---------------------------------------------------------------------------

CATEGORY_FIELDS = ("Category", "Catégorie", "Object Type", "Type d'objet", "Element Type")
MATERIAL_FIELDS = ("Material", "Matériau", "Matériel", "Structural Material", "Finish Material")
FAMILY_FIELDS = ("Family", "Famille", "Family Name", "Type Name")
TYPE_FIELDS = ("Type", "Element Type", "Type Name", "Nom du type")
LEVEL_FIELDS = ("Level", "Niveau", "Reference Level", "Constraint", "Elevation")

# ---------------------------------------------------------------------------
# Quantities: dimension fields read by the metrics engine
# ---------------------------------------------------------------------------

SURFACE_FIELDS = ("Surface", "Area", "Aire")
VOLUME_FIELDS = ("Volume",)
LENGTH_FIELDS = ("Length", "Longueur")
WIDTH_FIELDS = ("Width", "Largeur")
HEIGHT_FIELDS = ("Height", "Hauteur")

# ---------------------------------------------------------------------------
# Material physics: density (kg/m3), carbon, energy and cost factors
# ---------------------------------------------------------------------------

MATERIAL_PROFILES: dict[str, dict[str, float]] = {
    "Concrete": {"density": 2400, "carbon_factor": 0.2, "energy_factor": 5, "cost_factor": 150},
    "Steel": {"density": 7850, "carbon_factor": 2.3, "energy_factor": 8, "cost_factor": 800},
    "Wood": {"density": 600, "carbon_factor": 0.1, "energy_factor": 2, "cost_factor": 400},
    "Glass": {"density": 2500, "carbon_factor": 0.8, "energy_factor": 12, "cost_factor": 200},
    "Aluminum": {"density": 2700, "carbon_factor": 9.0, "energy_factor": 15, "cost_factor": 1500},
    "Brick": {"density": 1800, "carbon_factor": 0.3, "energy_factor": 3, "cost_factor": 100},
    "Plaster": {"density": 1200, "carbon_factor": 0.1, "energy_factor": 1, "cost_factor": 50},
}

DEFAULT_MATERIAL_PROFILE: dict[str, float] = {
    "density": 1000,
    "carbon_factor": 0.1,
    "energy_factor": 5,
    "cost_factor": 100,
}

RECYCLABILITY_RATES: dict[str, float] = {
    "Steel": 0.9,
    "Aluminum": 0.95,
    "Glass": 0.8,
    "Wood": 0.3,
    "Concrete": 0.1,
    "Brick": 0.05,
    "Plaster": 0.02,
}

UNKNOWN_MATERIAL = "Unknown"

# Report factors
THERMAL_FACTOR = 0.8                  # kWh per 100 m2 of surface
ENERGY_BALANCE_WEIGHT = 0.5
MAINTENANCE_RATE = 0.15               # share of initial cost, per year
RECYCLING_SAVINGS_RATE = 0.02         # per kg of material
ANNUAL_CO2_RATE = 0.05
WATER_PER_M2 = 2.5                    # litres per m2 built
ESTIMATED_LIFESPAN_YEARS = 50
BIODIVERSITY_PER_M2 = 0.1
ECO_CERTIFICATION_THRESHOLD = 70.0    # recyclability percent

# ---------------------------------------------------------------------------
# Search: French term -> English candidates, in trial order
# ---------------------------------------------------------------------------

TERM_TRANSLATIONS: dict[str, list[str]] = {
    "mur": ["wall", "walls"],
    "murs": ["wall", "walls"],
    "toit": ["roof", "roofing", "ceiling"],
    "toiture": ["roof", "roofing", "ceiling"],
    "porte": ["door", "doors"],
    "portes": ["door", "doors"],
    "fenêtre": ["window", "windows"],
    "fenêtres": ["window", "windows"],
    "sol": ["floor", "floors", "slab"],
    "plancher": ["floor", "floors", "slab"],
    "colonne": ["column", "columns", "pillar"],
    "colonnes": ["column", "columns", "pillar"],
    "poutre": ["beam", "beams"],
    "poutres": ["beam", "beams"],
    "escalier": ["stair", "stairs", "staircase"],
    "escaliers": ["stair", "stairs", "staircase"],
    "cloison": ["partition", "wall", "walls"],
    "dalle": ["slab", "floor", "floors"],
    "fondation": ["foundation", "footing"],
    "fondations": ["foundation", "footing"],
    "plafond": ["ceiling", "roof"],
}

# ---------------------------------------------------------------------------
# Runtime settings
# ---------------------------------------------------------------------------

# All known environment keys with defaults
_CONFIG_KEYS: dict[str, dict[str, Any]] = {
    "OTEIS_LOG_LEVEL": {"default": "INFO", "description": "Logging level"},
    "OTEIS_MAX_CONCURRENT_FETCHES": {
        "default": "0",
        "description": "Cap on in-flight property fetches (0 = unbounded)",
    },
    "OTEIS_UNKNOWN_MATERIAL_LABEL": {
        "default": UNKNOWN_MATERIAL,
        "description": "Breakdown label for elements without a material",
    },
}


class Settings(BaseModel):
    """Runtime settings, usually read from the environment."""

    log_level: str = "INFO"
    max_concurrent_fetches: int = 0
    unknown_material_label: str = UNKNOWN_MATERIAL

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> Settings:
        """Build settings from ``OTEIS_*`` variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        values = {
            key: env.get(key, meta["default"]) for key, meta in _CONFIG_KEYS.items()
        }
        return cls(
            log_level=values["OTEIS_LOG_LEVEL"].upper(),
            max_concurrent_fetches=int(values["OTEIS_MAX_CONCURRENT_FETCHES"]),
            unknown_material_label=values["OTEIS_UNKNOWN_MATERIAL_LABEL"],
        )


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the configured log level to the ``oteis`` logger hierarchy."""
    settings = settings or Settings.from_env()
    logging.getLogger("oteis").setLevel(settings.log_level)
