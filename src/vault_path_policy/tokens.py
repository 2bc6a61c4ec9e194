"""Detect path-like tokens in shell commands.

Used by callers that vet a shell command before running it: every token
that looks like a filesystem path is classified, and commands touching
paths outside the allowed roots can be refused.
"""

from __future__ import annotations

import logging
import os
import re
import shlex

from .classifier import AccessClass, AccessClassifier

logger = logging.getLogger(__name__)

_WINDOWS_DRIVE = re.compile(r"^[A-Za-z]:[\\/]")
_NON_PATH_TOKENS = {".", "/", "\\", "--"}


def is_path_like_token(token: str, *, windows: bool | None = None) -> bool:
    """Return True when *token* looks like a filesystem path.

    Backslash forms (``~\\``, ``.\\``, ``C:\\``, ``\\\\server``) only count
    on Windows; elsewhere a backslash is a shell escape.
    """
    if windows is None:
        windows = os.name == "nt"
    if not token or token in _NON_PATH_TOKENS:
        return False

    if token == "~" or token.startswith("~/"):
        return True
    if token == ".." or token.startswith("./") or token.startswith("../"):
        return True
    if token.startswith("/"):
        return True
    if "/" in token:
        return True

    if windows:
        if token.startswith("~\\") or token.startswith(".\\") or token.startswith("..\\"):
            return True
        if _WINDOWS_DRIVE.match(token) or token.startswith("\\\\"):
            return True
        if "\\" in token:
            return True
    return False


def path_like_tokens(command: str, *, windows: bool | None = None) -> list[str]:
    """Split *command* like a shell would and return its path-like tokens.

    An unparseable command (unbalanced quotes) yields no tokens.
    """
    if windows is None:
        windows = os.name == "nt"
    try:
        tokens = shlex.split(command, posix=not windows)
    except ValueError as exc:
        logger.debug("Cannot tokenize command %r: %s", command, exc)
        return []
    if windows:
        tokens = [t[1:-1] if len(t) >= 2 and t[0] == t[-1] and t[0] in "\"'" else t for t in tokens]
    return [t for t in tokens if is_path_like_token(t, windows=windows)]


def find_unreachable_paths(
    command: str,
    context_roots: list[str] | None,
    export_roots: list[str] | None,
    vault_root: str,
    *,
    classifier: AccessClassifier | None = None,
) -> list[str]:
    """Return the path-like tokens of *command* that no root grants access to."""
    clf = classifier if classifier is not None else AccessClassifier()
    snapshot = clf.snapshot(context_roots, export_roots, vault_root)
    return [
        token
        for token in path_like_tokens(command, windows=clf.normalizer.windows)
        if snapshot.classify(token) == AccessClass.NONE
    ]
