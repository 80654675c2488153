"""Scene graph walking and property fetching."""

from oteis.scene.graph import InMemorySceneGraph, SceneGraph, walk
from oteis.scene.service import InMemoryPropertyService, PropertyService, fetch_all

__all__ = [
    "InMemoryPropertyService",
    "InMemorySceneGraph",
    "PropertyService",
    "SceneGraph",
    "fetch_all",
    "walk",
]
