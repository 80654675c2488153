"""Typed viewer commands — the closed set the assistant may request.

Each command is a pydantic model tagged by its ``name``; :data:`Command`
is the discriminated union over all of them.  Parameter models accept the
alternate keys the assistant is known to emit (``criteria`` for
``query``, ``dbId`` for ``elementId``, ``name`` for ``layerName``).
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from oteis.errors import InvalidCommandError, UnknownCommandError

# ---------------------------------------------------------------------------
# Parameter models
# ---------------------------------------------------------------------------


class NoParams(BaseModel):
    """Commands that take no parameters."""


class QueryParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(min_length=1, validation_alias=AliasChoices("query", "criteria"))


class OptionalQueryParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    query: str | None = Field(default=None, validation_alias=AliasChoices("query", "criteria"))


class ColorParams(QueryParams):
    color: str = "#ff0000"


class ElementIdParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    element_id: int = Field(validation_alias=AliasChoices("elementId", "dbId", "element_id"))


class LayerParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    layer_name: str | None = Field(
        default=None, validation_alias=AliasChoices("layerName", "name", "layer_name")
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class IsolateElements(BaseModel):
    name: Literal["isolate_elements"] = "isolate_elements"
    params: QueryParams


class ShowAllElements(BaseModel):
    name: Literal["show_all_elements"] = "show_all_elements"
    params: NoParams = Field(default_factory=NoParams)


class CountElements(BaseModel):
    name: Literal["count_elements"] = "count_elements"
    params: OptionalQueryParams = Field(default_factory=OptionalQueryParams)


class SearchElements(BaseModel):
    name: Literal["search_elements"] = "search_elements"
    params: QueryParams


class GetProperties(BaseModel):
    name: Literal["get_properties"] = "get_properties"
    params: ElementIdParams


class HideElements(BaseModel):
    name: Literal["hide_elements"] = "hide_elements"
    params: QueryParams


class ChangeColor(BaseModel):
    name: Literal["change_color"] = "change_color"
    params: ColorParams


class GetModelInfo(BaseModel):
    name: Literal["get_model_info"] = "get_model_info"
    params: NoParams = Field(default_factory=NoParams)


class ZoomToElements(BaseModel):
    name: Literal["zoom_to_elements"] = "zoom_to_elements"
    params: QueryParams


class GetLayers(BaseModel):
    name: Literal["get_layers"] = "get_layers"
    params: NoParams = Field(default_factory=NoParams)


class ToggleLayer(BaseModel):
    name: Literal["toggle_layer"] = "toggle_layer"
    params: LayerParams = Field(default_factory=LayerParams)


class MeasureDistance(BaseModel):
    name: Literal["measure_distance"] = "measure_distance"
    params: NoParams = Field(default_factory=NoParams)


class CreateSection(BaseModel):
    name: Literal["create_section"] = "create_section"
    params: NoParams = Field(default_factory=NoParams)


Command = Annotated[
    Union[
        IsolateElements,
        ShowAllElements,
        CountElements,
        SearchElements,
        GetProperties,
        HideElements,
        ChangeColor,
        GetModelInfo,
        ZoomToElements,
        GetLayers,
        ToggleLayer,
        MeasureDistance,
        CreateSection,
    ],
    Field(discriminator="name"),
]

COMMAND_NAMES: frozenset[str] = frozenset({
    "isolate_elements",
    "show_all_elements",
    "count_elements",
    "search_elements",
    "get_properties",
    "hide_elements",
    "change_color",
    "get_model_info",
    "zoom_to_elements",
    "get_layers",
    "toggle_layer",
    "measure_distance",
    "create_section",
})

_COMMAND_ADAPTER: TypeAdapter[Any] = TypeAdapter(Command)


def parse_command(payload: Any) -> Command:
    """Validate one ``{"name": ..., "params": {...}}`` payload.

    Raises
    ------
    UnknownCommandError
        If the name is missing or not a supported command.
    InvalidCommandError
        If the parameters do not fit the command.
    """
    name = payload.get("name") if isinstance(payload, dict) else None
    if not isinstance(name, str) or name not in COMMAND_NAMES:
        raise UnknownCommandError(str(name))

    params = payload.get("params") or {}
    try:
        return _COMMAND_ADAPTER.validate_python({"name": name, "params": params})
    except ValidationError as exc:
        raise InvalidCommandError(name, str(exc)) from exc
