"""Symlink-aware realpath that tolerates nonexistent targets."""

from __future__ import annotations

import logging

from .normalizer import PathNormalizer
from .probe import FilesystemProbe, OsProbe

logger = logging.getLogger(__name__)


class RealpathResolver:
    """Canonicalize paths through a :class:`FilesystemProbe`.

    Args:
        probe: Filesystem capability. Defaults to the host filesystem.
        normalizer: Supplies the platform path flavor. Defaults to the host.
    """

    def __init__(
        self,
        probe: FilesystemProbe | None = None,
        normalizer: PathNormalizer | None = None,
    ) -> None:
        self.probe = probe if probe is not None else OsProbe()
        self.normalizer = normalizer if normalizer is not None else PathNormalizer()

    def absolute(self, path: str) -> str:
        """Join a relative *path* to the probe's cwd.

        ``..`` segments are kept: collapsing them before symlinks are
        followed would resolve ``link/..`` to the link's own parent.
        """
        flavor = self.normalizer.path
        if flavor.isabs(path):
            return path
        return flavor.join(self.probe.cwd(), path)

    def resolve_real(self, path: str) -> str:
        """Return the canonical path of *path*, even if it does not exist yet.

        When the full path is missing, the nearest existing ancestor is
        canonicalized and the missing trailing segments are re-appended, so
        symlinked ancestors are honored for files that are about to be
        created. Ancestors are tried with their ``..`` segments intact, so
        ``link/..`` means the parent of the link target. Never raises; the
        last resort is the lexical absolute path.
        """
        try:
            return self.probe.realpath(path)
        except (OSError, ValueError):
            pass

        flavor = self.normalizer.path
        try:
            absolute = self.absolute(path)
        except (OSError, TypeError, ValueError) as exc:
            logger.debug("Cannot make %r absolute: %s", path, exc)
            return path if isinstance(path, str) else ""

        current = absolute
        suffix: list[str] = []
        while True:
            try:
                if self.probe.exists(current):
                    resolved = self.probe.realpath(current)
                    if not suffix:
                        return resolved
                    # The re-appended tail lies below a missing entry, so it
                    # holds no symlinks and can be collapsed lexically.
                    return flavor.normpath(flavor.join(resolved, *reversed(suffix)))
            except (OSError, ValueError) as exc:
                logger.debug("Skipping unresolvable ancestor %s: %s", current, exc)

            parent = flavor.dirname(current)
            if parent == current:
                logger.debug("No existing ancestor for %s; using lexical path", absolute)
                return flavor.normpath(absolute)

            suffix.append(flavor.basename(current))
            current = parent


def resolve_real(path: str) -> str:
    """Resolve *path* against the host filesystem."""
    return RealpathResolver().resolve_real(path)
