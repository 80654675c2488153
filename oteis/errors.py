"""Exception hierarchy for the analysis core."""

from __future__ import annotations


class OteisError(Exception):
    """Base class for all errors raised by this package."""


class EmptyModelError(OteisError):
    """Raised when an analysis is requested over zero nodes."""

    def __init__(self, message: str = "No elements found in the model") -> None:
        super().__init__(message)


class FetchError(OteisError):
    """A property service could not return the property bag of one node."""

    def __init__(self, node_id: int, reason: str = "") -> None:
        self.node_id = node_id
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Could not fetch properties for node {node_id}{detail}")


class CommandError(OteisError):
    """A command payload could not be turned into a typed command."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(message)


class UnknownCommandError(CommandError):
    """The command name is not one of the supported commands."""

    def __init__(self, name: str) -> None:
        super().__init__(name, f"Unknown command: {name}")


class InvalidCommandError(CommandError):
    """The command name is known but its parameters are invalid."""

    def __init__(self, name: str, detail: str) -> None:
        self.detail = detail
        super().__init__(name, f"Invalid parameters for command {name}: {detail}")
