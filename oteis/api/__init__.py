"""Public API — the model session facade."""

from oteis.api.facade import ModelSession

__all__ = ["ModelSession"]
