"""OTEIS — environmental analysis and bilingual search over 3D building models."""

__version__ = "1.0.0"

from oteis.api.facade import ModelSession
from oteis.classification.classifier import classify
from oteis.classification.index import ModelIndex, build_index, build_model_index
from oteis.commands.dispatcher import CommandDispatcher, CommandOutcome, ViewerActions
from oteis.commands.parser import extract_command_payloads
from oteis.commands.schema import Command, parse_command
from oteis.config import Settings
from oteis.environment.engine import MetricsEngine, compute_metrics
from oteis.environment.materials import LocalCatalog, MaterialCatalog, MaterialProfile
from oteis.environment.report import MaterialBreakdown, MetricsResult
from oteis.errors import (
    CommandError,
    EmptyModelError,
    FetchError,
    InvalidCommandError,
    OteisError,
    UnknownCommandError,
)
from oteis.models.element import ElementRecord, Property, PropertyBag
from oteis.scene.graph import InMemorySceneGraph, SceneGraph, walk
from oteis.scene.service import InMemoryPropertyService, PropertyService, fetch_all
from oteis.search.resolver import QueryResolver, resolve_query
from oteis.search.terms import expand_terms

__all__ = [
    "__version__",
    # Facade
    "ModelSession",
    # Scene
    "InMemoryPropertyService",
    "InMemorySceneGraph",
    "PropertyService",
    "SceneGraph",
    "fetch_all",
    "walk",
    # Models
    "ElementRecord",
    "Property",
    "PropertyBag",
    # Classification
    "ModelIndex",
    "build_index",
    "build_model_index",
    "classify",
    # Environment
    "LocalCatalog",
    "MaterialBreakdown",
    "MaterialCatalog",
    "MaterialProfile",
    "MetricsEngine",
    "MetricsResult",
    "compute_metrics",
    # Search
    "QueryResolver",
    "expand_terms",
    "resolve_query",
    # Commands
    "Command",
    "CommandDispatcher",
    "CommandOutcome",
    "ViewerActions",
    "extract_command_payloads",
    "parse_command",
    # Config & errors
    "CommandError",
    "EmptyModelError",
    "FetchError",
    "InvalidCommandError",
    "OteisError",
    "Settings",
    "UnknownCommandError",
]
