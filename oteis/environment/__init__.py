"""Environmental metrics — material physics, quantities, impact report."""

from oteis.environment.engine import MetricsEngine, compute_metrics
from oteis.environment.materials import LocalCatalog, MaterialCatalog, MaterialProfile
from oteis.environment.report import MaterialBreakdown, MetricsResult

__all__ = [
    "LocalCatalog",
    "MaterialBreakdown",
    "MaterialCatalog",
    "MaterialProfile",
    "MetricsEngine",
    "MetricsResult",
    "compute_metrics",
]
