"""Filesystem probe capability used by the realpath resolver.

The resolver is the only component that touches the filesystem, and it
does so exclusively through this interface so tests can substitute an
in-memory fake.
"""

from __future__ import annotations

import os
from typing import Protocol


class FilesystemProbe(Protocol):
    """Read-only filesystem queries needed for path canonicalization."""

    def exists(self, path: str) -> bool:
        """Return True when *path* exists (following symlinks)."""
        ...

    def realpath(self, path: str) -> str:
        """Return the canonical path of an existing *path*.

        Raises:
            OSError: If the path does not exist or cannot be resolved.
        """
        ...

    def cwd(self) -> str:
        """Return the current working directory."""
        ...


class OsProbe:
    """Probe backed by the host filesystem."""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def realpath(self, path: str) -> str:
        return os.path.realpath(path, strict=True)

    def cwd(self) -> str:
        return os.getcwd()
