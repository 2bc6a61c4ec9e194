"""Shared type aliases and helpers for policy parameters."""

from __future__ import annotations

import json
import os
from typing import Literal


def coerce_root_list(value: str | list | tuple | None) -> list[str]:
    """Parse a configured root list into a list of raw path strings.

    Environment variables and settings stores hand root lists over as a
    single string. Accepts a JSON array, or entries separated by newlines
    or ``os.pathsep``. Lists pass through unchanged apart from dropping
    non-string and blank entries.

    Args:
        value: The configured value (string, sequence, or None).

    Returns:
        List of raw root strings, in configuration order.
    """
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                parsed = json.loads(text)
                if isinstance(parsed, list):
                    return coerce_root_list(parsed)
            except (json.JSONDecodeError, TypeError):
                pass
        entries: list[str] = []
        for line in text.splitlines():
            entries.extend(line.split(os.pathsep))
        return [e.strip() for e in entries if e.strip()]
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]

# ── Literal enums ────────────────────────────────────────────────────────────

Operation = Literal["read", "write"]
RootKind = Literal["vault", "context", "export"]
