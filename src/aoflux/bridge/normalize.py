"""Render arbitrary result values as clean, human-readable text."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

# Both the JSON-escaped form ("\u001b[31m" as literal text) and a raw ESC.
_ANSI_RE = re.compile(r"(?:\\u001b|\x1b)\[\d+(?:;\d+)*m")
_ESCAPED_NEWLINE = "\\n"


def _strip_ansi(text: str) -> str:
    # Removing one code can splice its neighbours into another.
    while True:
        text, count = _ANSI_RE.subn("", text)
        if not count:
            return text


def clean_text(text: str) -> str:
    """Strip ANSI color codes and turn literal ``\\n`` into line breaks."""
    return _strip_ansi(text).replace(_ESCAPED_NEWLINE, "\n")


def normalize(value: Any) -> str:
    """Serialize a value to indented JSON text, then clean it.

    ``None`` renders as the empty string. Never raises: a value that
    cannot be serialized also renders as the empty string.
    """
    if value is None:
        return ""
    try:
        text = json.dumps(value, indent=2, ensure_ascii=False, default=str)
    except Exception as e:
        logger.debug("Cannot serialize %s for output: %s", type(value).__name__, e)
        return ""
    return clean_text(text)
