"""Element classification and model indexing."""

from oteis.classification.classifier import classify, classify_all, find_property, find_property_value
from oteis.classification.index import ModelIndex, build_index, build_model_index

__all__ = [
    "ModelIndex",
    "build_index",
    "build_model_index",
    "classify",
    "classify_all",
    "find_property",
    "find_property_value",
]
