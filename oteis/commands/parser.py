"""Extract command payloads from the assistant's reply text.

The assistant appends its requests as ``COMMANDS: [{...}, ...]``.  Only
the JSON is read here; validation happens in :func:`parse_command`.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_MARKER_RE = re.compile(r"COMMANDS:\s*", re.I)
_DECODER = json.JSONDecoder()


def extract_command_payloads(text: str) -> list[dict[str, Any]]:
    """Return every command object found in ``COMMANDS:`` blocks of *text*.

    Blocks that are not a valid JSON array are logged and skipped, as are
    array items that are not objects.
    """
    payloads: list[dict[str, Any]] = []
    if not text:
        return payloads

    for marker in _MARKER_RE.finditer(text):
        start = marker.end()
        if not text.startswith("[", start):
            continue
        try:
            block, _ = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError:
            logger.warning("Ignoring malformed command block at offset %d", start)
            continue

        for item in block:
            if isinstance(item, dict):
                payloads.append(item)
            else:
                logger.debug("Ignoring non-object command entry: %r", item)

    return payloads
