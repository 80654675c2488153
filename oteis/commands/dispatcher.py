"""CommandDispatcher — execute typed commands against the viewer.

The viewer itself is an external collaborator reached only through
:class:`ViewerActions`.  Element selection goes through the model session,
so every query-based command uses the same resolver as a direct search.
"""

from __future__ import annotations

import abc
import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field

from oteis.commands.schema import (
    ChangeColor,
    Command,
    CountElements,
    CreateSection,
    GetLayers,
    GetModelInfo,
    GetProperties,
    HideElements,
    IsolateElements,
    MeasureDistance,
    SearchElements,
    ShowAllElements,
    ToggleLayer,
    ZoomToElements,
    parse_command,
)
from oteis.errors import CommandError
from oteis.models.element import PropertyBag

if TYPE_CHECKING:
    from oteis.api.facade import ModelSession

logger = logging.getLogger(__name__)

RGBA = tuple[float, float, float, float]

HIGHLIGHT_COLOR: RGBA = (1.0, 1.0, 0.0, 0.5)
DEFAULT_COLOR: RGBA = (1.0, 0.0, 0.0, 0.8)
HIGHLIGHT_LIMIT = 5
PROPERTY_PREVIEW_LIMIT = 5

_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.I)


class ViewerActions(abc.ABC):
    """What the host viewer must offer for commands to take effect."""

    @abc.abstractmethod
    def isolate(self, node_ids: list[int]) -> None:
        """Show only *node_ids*."""

    @abc.abstractmethod
    def hide(self, node_ids: list[int]) -> None:
        """Hide *node_ids*."""

    @abc.abstractmethod
    def show_all(self) -> None:
        """Make every element visible again."""

    @abc.abstractmethod
    def set_color(self, node_ids: list[int], rgba: RGBA) -> None:
        """Apply a theming colour to *node_ids*."""

    @abc.abstractmethod
    def clear_colors(self) -> None:
        """Remove all theming colours."""

    @abc.abstractmethod
    def fit_to_view(self, node_ids: list[int]) -> None:
        """Frame *node_ids* in the camera."""

    @abc.abstractmethod
    def activate_tool(self, tool: str) -> bool:
        """Activate a viewer tool (``"measure"``, ``"section"``); False if unavailable."""


class CommandOutcome(BaseModel):
    """Result of one command, ready to be shown in the chat transcript."""

    command: str
    success: bool = True
    message: str = ""
    element_ids: list[int] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)


def hex_to_rgba(color: str, alpha: float = 0.8) -> RGBA:
    """Convert ``#rrggbb`` to an RGBA tuple in 0-1; red for anything else."""
    match = _HEX_RE.match(color or "")
    if match is None:
        return DEFAULT_COLOR
    r, g, b = (int(part, 16) / 255 for part in match.groups())
    return (r, g, b, alpha)


def format_properties(bag: PropertyBag, limit: int = PROPERTY_PREVIEW_LIMIT) -> str:
    """Short text preview of a property bag."""
    lines = [f"Name: {bag.name or 'N/A'}"]
    for prop in bag.properties[:limit]:
        lines.append(f"- {prop.display_name}: {prop.display_value}")
    remaining = len(bag.properties) - limit
    if remaining > 0:
        lines.append(f"... and {remaining} more propert{'y' if remaining == 1 else 'ies'}")
    return "\n".join(lines)


class CommandDispatcher:
    """Execute commands for one model session.

    Parameters
    ----------
    session:
        The loaded model the commands act on.
    viewer:
        Host viewer adapter.
    """

    def __init__(self, session: ModelSession, viewer: ViewerActions) -> None:
        self.session = session
        self.viewer = viewer

    async def execute_all(self, payloads: Iterable[Any]) -> list[CommandOutcome]:
        """Parse and run each payload in order.

        A payload that fails to parse or to run produces a failed outcome;
        the remaining payloads still run.
        """
        outcomes: list[CommandOutcome] = []
        for payload in payloads:
            try:
                command = parse_command(payload)
            except CommandError as exc:
                logger.warning("Rejected command: %s", exc)
                outcomes.append(CommandOutcome(command=exc.name, success=False, message=str(exc)))
                continue

            try:
                outcomes.append(await self.execute(command))
            except Exception as exc:
                logger.warning("Command %s failed", command.name, exc_info=True)
                outcomes.append(CommandOutcome(
                    command=command.name,
                    success=False,
                    message=f"Error while running {command.name}: {exc}",
                ))
        return outcomes

    async def execute(self, command: Command) -> CommandOutcome:
        """Run one typed command."""
        logger.debug("Executing %s with %s", command.name, command.params)

        if isinstance(command, IsolateElements):
            return await self._on_match(command.name, command.params.query, self.viewer.isolate, "isolated")
        if isinstance(command, HideElements):
            return await self._on_match(command.name, command.params.query, self.viewer.hide, "hidden")
        if isinstance(command, ZoomToElements):
            return await self._on_match(command.name, command.params.query, self.viewer.fit_to_view, "framed")
        if isinstance(command, ShowAllElements):
            self.viewer.show_all()
            return CommandOutcome(command=command.name, message="All elements are visible again.")
        if isinstance(command, CountElements):
            return await self._count(command)
        if isinstance(command, SearchElements):
            return await self._search(command)
        if isinstance(command, ChangeColor):
            return await self._change_color(command)
        if isinstance(command, GetProperties):
            return await self._get_properties(command)
        if isinstance(command, GetModelInfo):
            return self._model_info(command)
        if isinstance(command, (GetLayers, ToggleLayer)):
            return CommandOutcome(
                command=command.name,
                success=False,
                message="Layer management is not supported for this model.",
            )
        if isinstance(command, MeasureDistance):
            return self._activate(command.name, "measure", "Measure tool active: pick two points.")
        if isinstance(command, CreateSection):
            return self._activate(command.name, "section", "Section tool active.")

        raise TypeError(f"Unhandled command type: {type(command).__name__}")

    # -- handlers -----------------------------------------------------------

    async def _on_match(self, name: str, query: str, action, verb: str) -> CommandOutcome:
        ids = await self.session.search(query)
        if not ids:
            return _no_results(name, query)
        action(ids)
        return CommandOutcome(
            command=name,
            message=f"{len(ids)} element(s) {verb} matching \"{query}\".",
            element_ids=ids,
        )

    async def _count(self, command: CountElements) -> CommandOutcome:
        query = command.params.query
        if not query:
            total = len(self.session.node_ids)
            return CommandOutcome(
                command=command.name,
                message=f"Total elements in the model: {total}",
                data={"count": total},
            )
        ids = await self.session.search(query)
        return CommandOutcome(
            command=command.name,
            message=f"{len(ids)} element(s) found matching \"{query}\".",
            element_ids=ids,
            data={"count": len(ids)},
        )

    async def _search(self, command: SearchElements) -> CommandOutcome:
        query = command.params.query
        ids = await self.session.search(query)
        if 0 < len(ids) <= HIGHLIGHT_LIMIT:
            self.viewer.clear_colors()
            self.viewer.set_color(ids, HIGHLIGHT_COLOR)
        return CommandOutcome(
            command=command.name,
            message=f"Search \"{query}\": {len(ids)} result(s).",
            element_ids=ids,
        )

    async def _change_color(self, command: ChangeColor) -> CommandOutcome:
        query = command.params.query
        ids = await self.session.search(query)
        if not ids:
            return _no_results(command.name, query)
        self.viewer.set_color(ids, hex_to_rgba(command.params.color))
        return CommandOutcome(
            command=command.name,
            message=f"Colour changed for {len(ids)} element(s) matching \"{query}\".",
            element_ids=ids,
        )

    async def _get_properties(self, command: GetProperties) -> CommandOutcome:
        element_id = command.params.element_id
        bag = await self.session.properties(element_id)
        if bag is None:
            return CommandOutcome(
                command=command.name,
                success=False,
                message=f"Could not fetch the properties of element {element_id}.",
            )
        return CommandOutcome(
            command=command.name,
            message=f"Properties of element {element_id}:\n{format_properties(bag)}",
            element_ids=[element_id],
            data={"properties": bag.model_dump(mode="json")},
        )

    def _model_info(self, command: GetModelInfo) -> CommandOutcome:
        total = len(self.session.node_ids)
        return CommandOutcome(
            command=command.name,
            message=f"Model information:\n- Total elements: {total}\n- Model loaded: yes",
            data={"total_elements": total, "has_model": True},
        )

    def _activate(self, name: str, tool: str, message: str) -> CommandOutcome:
        if not self.viewer.activate_tool(tool):
            return CommandOutcome(
                command=name, success=False, message=f"The {tool} tool could not be loaded."
            )
        return CommandOutcome(command=name, message=message)


def _no_results(name: str, query: str) -> CommandOutcome:
    return CommandOutcome(command=name, message=f"No element found matching \"{query}\".")
