"""Assistant commands — typed parsing and dispatch to the viewer."""

from oteis.commands.dispatcher import CommandDispatcher, CommandOutcome, ViewerActions
from oteis.commands.parser import extract_command_payloads
from oteis.commands.schema import Command, parse_command

__all__ = [
    "Command",
    "CommandDispatcher",
    "CommandOutcome",
    "ViewerActions",
    "extract_command_payloads",
    "parse_command",
]
