"""Auto-load environment variables from a shared config file.

Loads root configuration from ``~/.config/vault-path-policy/.env`` when
the variables aren't already set in the process environment. No external
dependencies.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_ENV_PATH = Path.home() / ".config" / "vault-path-policy" / ".env"

ENV_VAULT_ROOT = "VAULT_ROOT"
ENV_CONTEXT_ROOTS = "VAULT_CONTEXT_ROOTS"
ENV_EXPORT_ROOTS = "VAULT_EXPORT_ROOTS"
ROOT_ENV_KEYS = (ENV_VAULT_ROOT, ENV_CONTEXT_ROOTS, ENV_EXPORT_ROOTS)


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def is_unset_or_placeholder(key: str, value: str | None) -> bool:
    """Return True when the current env value should be treated as unset.

    Blank values and unresolved self-placeholders that some hosts pass
    through unchanged (``${VAULT_ROOT}``, ``$VAULT_ROOT``,
    ``${VAULT_ROOT:-}``, ``%VAULT_ROOT%``, ``!VAULT_ROOT!``) count as
    unset. References to *other* variables
    are real configuration and are expanded later by the normalizer.
    """
    if value is None:
        return True

    normalized = _strip_quotes(value.strip()).strip()
    if not normalized:
        return True

    if normalized in {f"${key}", f"${{{key}}}", f"%{key}%", f"!{key}!"}:
        return True
    return normalized.startswith(f"${{{key}:-") and normalized.endswith("}")


def parse_dotenv_text(text: str) -> dict[str, str]:
    """Parse ``.env`` content into a dict of key-value pairs.

    Supports ``KEY=VALUE``, ``KEY="VALUE"``, ``KEY='VALUE'``,
    ``export KEY=VALUE``, blank lines, ``#`` comments and CRLF line
    endings. No variable expansion.
    """
    result: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        if "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        value = _strip_quotes(value.strip())
        if key:
            result[key] = value
    return result


def parse_dotenv(path: Path) -> dict[str, str]:
    """Parse a ``.env`` file; a missing file yields an empty dict."""
    if not path.is_file():
        return {}
    return parse_dotenv_text(path.read_text())


def load_dotenv(path: Path | None = None) -> dict[str, str]:
    """Load vars from *path* into ``os.environ`` when existing values are unset.

    A root variable (see :data:`ROOT_ENV_KEYS`) whose file value is itself
    blank or a self-placeholder is skipped with a warning, so the
    environment never holds an empty root that looks configured.

    Args:
        path: Path to the ``.env`` file. Defaults to :data:`DEFAULT_ENV_PATH`.

    Returns:
        Dict of vars that were actually injected.
    """
    if path is None:
        path = DEFAULT_ENV_PATH
    parsed = parse_dotenv(path)
    injected: dict[str, str] = {}
    for key, value in parsed.items():
        if key in ROOT_ENV_KEYS and is_unset_or_placeholder(key, value):
            logger.warning("%s in %s has no value; leaving it unset", key, path)
            continue
        if is_unset_or_placeholder(key, os.environ.get(key)):
            os.environ[key] = value
            injected[key] = value
    return injected
