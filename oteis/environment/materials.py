"""MaterialCatalog interface and the built-in material-physics table.

Every profile is embedded in :mod:`oteis.config`; no external data files are read.
"""

from __future__ import annotations

import abc
import logging

from pydantic import BaseModel, ConfigDict

from oteis.config import DEFAULT_MATERIAL_PROFILE, MATERIAL_PROFILES, RECYCLABILITY_RATES

logger = logging.getLogger(__name__)


class MaterialProfile(BaseModel):
    """Physical and economic coefficients of a material family."""

    model_config = ConfigDict(frozen=True)

    density: float
    """kg/m3"""
    carbon_factor: float
    """kg CO2e per kg of material"""
    energy_factor: float
    """kWh per m2 of surface"""
    cost_factor: float
    """currency per m2 of surface"""


DEFAULT_PROFILE = MaterialProfile(**DEFAULT_MATERIAL_PROFILE)


class MaterialCatalog(abc.ABC):
    """Abstract source of material profiles and recyclability rates."""

    @abc.abstractmethod
    def get_profile(self, material_name: str) -> MaterialProfile:
        """Return the profile for *material_name*, never *None*."""

    @abc.abstractmethod
    def recyclability_rate(self, material_name: str) -> float:
        """Return the recyclable share (0-1) of *material_name*."""


class LocalCatalog(MaterialCatalog):
    """Catalog over the embedded tables.

    Lookups are case-insensitive substring matches of each table key
    against the material name, tried in table order; the first key
    contained in the name wins.
    """

    def __init__(
        self,
        profiles: dict[str, dict[str, float]] | None = None,
        recyclability: dict[str, float] | None = None,
    ) -> None:
        self._profiles = {
            key: MaterialProfile(**data)
            for key, data in (profiles if profiles is not None else MATERIAL_PROFILES).items()
        }
        self._recyclability = dict(
            recyclability if recyclability is not None else RECYCLABILITY_RATES
        )

    def get_profile(self, material_name: str) -> MaterialProfile:
        key = _match_key(material_name, self._profiles)
        if key is None:
            logger.debug("No profile for material %r, using default", material_name)
            return DEFAULT_PROFILE
        return self._profiles[key]

    def recyclability_rate(self, material_name: str) -> float:
        key = _match_key(material_name, self._recyclability)
        if key is None:
            return 0.0
        return self._recyclability[key]


def _match_key(material_name: str, table: dict[str, object]) -> str | None:
    name = material_name.lower()
    for key in table:
        if key.lower() in name:
            return key
    return None
