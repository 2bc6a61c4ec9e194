"""Root registry and access classification for vault-confined agents.

Given a candidate path, the vault root and the operator-configured
context (read-only) and export (write-only) roots, decide which access
class applies. Every call re-resolves every root; nothing is cached
across calls.

Rules:
- The vault is checked first and always wins.
- Roots resolving to the same canonical path merge their flags; a root
  that is both context and export is read-write.
- Among matching auxiliary roots the longest canonical path wins.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel

from .normalizer import PathNormalizer
from .probe import FilesystemProbe
from .resolver import RealpathResolver
from .types import RootKind

logger = logging.getLogger(__name__)


class AccessClass(str, Enum):
    """What an agent may do with a path."""

    VAULT = "vault"
    READWRITE = "readwrite"
    CONTEXT = "context"
    EXPORT = "export"
    NONE = "none"

    @property
    def can_read(self) -> bool:
        return self in {AccessClass.VAULT, AccessClass.READWRITE, AccessClass.CONTEXT}

    @property
    def can_write(self) -> bool:
        return self in {AccessClass.VAULT, AccessClass.READWRITE, AccessClass.EXPORT}


class RootSpec(BaseModel):
    """An operator-configured root as written in settings."""

    kind: RootKind
    raw: str


@dataclass
class RootFlags:
    """Accumulated flags for one canonical root."""

    context: bool = False
    export: bool = False

    @property
    def access(self) -> AccessClass:
        if self.context and self.export:
            return AccessClass.READWRITE
        if self.context:
            return AccessClass.CONTEXT
        if self.export:
            return AccessClass.EXPORT
        return AccessClass.NONE


@dataclass
class ResolvedRoot:
    """A canonical root path (comparison form) with its merged flags."""

    path: str
    flags: RootFlags = field(default_factory=RootFlags)


@dataclass
class RootSnapshot:
    """Roots resolved once for a batch of classifications.

    Only valid for as long as the filesystem and configuration it was
    built from are unchanged; build a fresh one per agent turn.
    """

    vault_root: str
    vault_real: str
    roots: list[ResolvedRoot]
    classifier: AccessClassifier

    def classify(self, candidate: str) -> AccessClass:
        if not candidate or not isinstance(candidate, str):
            return AccessClass.NONE
        candidate_real = self.classifier.resolve_candidate(candidate, self.vault_root)
        if not candidate_real:
            return AccessClass.NONE
        if self.classifier.normalizer.is_within(candidate_real, self.vault_real):
            return AccessClass.VAULT
        return self.classifier.match_roots(candidate_real, self.roots)


class AccessClassifier:
    """Classify candidate paths against vault, context and export roots.

    Args:
        normalizer: String normalizer; fixes the platform flavor.
        probe: Filesystem probe handed to the default resolver.
        resolver: Realpath resolver. Built from *normalizer* and *probe*
            when omitted.
    """

    def __init__(
        self,
        normalizer: PathNormalizer | None = None,
        probe: FilesystemProbe | None = None,
        resolver: RealpathResolver | None = None,
    ) -> None:
        self.normalizer = normalizer if normalizer is not None else PathNormalizer()
        self.resolver = (
            resolver if resolver is not None else RealpathResolver(probe, self.normalizer)
        )

    # ── Resolution ───────────────────────────────────────────────────────────

    def resolve_root(self, raw: str) -> str:
        """Resolve a configured root to its comparison key ("" when blank)."""
        if not isinstance(raw, str):
            return ""
        trimmed = raw.strip()
        if not trimmed:
            return ""
        normalized = self.normalizer.normalize(trimmed)
        return self.normalizer.comparison_key(self.resolver.resolve_real(normalized))

    def resolve_vault(self, vault_root: str) -> str:
        if not vault_root or not isinstance(vault_root, str):
            return ""
        return self.resolve_root(vault_root)

    def resolve_candidate(self, candidate: str, vault_root: str) -> str:
        """Resolve *candidate* to a comparison key.

        Relative candidates are joined to the vault root exactly as
        configured, before any canonicalization. Without a vault root a
        relative candidate has no anchor and resolves to "".
        """
        normalized = self.normalizer.normalize(candidate)
        if not normalized:
            return ""
        if not self.normalizer.is_absolute(normalized):
            if not vault_root or not isinstance(vault_root, str):
                return ""
            normalized = self.normalizer.path.join(vault_root, normalized)
        return self.normalizer.comparison_key(self.resolver.resolve_real(normalized))

    def build_root_map(
        self,
        context_roots: list[str] | None,
        export_roots: list[str] | None,
    ) -> dict[str, RootFlags]:
        """Resolve both root lists, merging entries with the same canonical path."""
        roots: dict[str, RootFlags] = {}
        for raw in context_roots or []:
            resolved = self.resolve_root(raw)
            if resolved:
                roots.setdefault(resolved, RootFlags()).context = True
        for raw in export_roots or []:
            resolved = self.resolve_root(raw)
            if resolved:
                roots.setdefault(resolved, RootFlags()).export = True
        return roots

    def build_roots_from_specs(self, specs: list[RootSpec]) -> dict[str, RootFlags]:
        return self.build_root_map(
            [s.raw for s in specs if s.kind == "context"],
            [s.raw for s in specs if s.kind == "export"],
        )

    # ── Matching ─────────────────────────────────────────────────────────────

    def match_roots(self, candidate_real: str, roots: list[ResolvedRoot]) -> AccessClass:
        """Return the access of the most specific root containing *candidate_real*."""
        best: ResolvedRoot | None = None
        for root in roots:
            if not self.normalizer.is_within(candidate_real, root.path):
                continue
            # Equal-length distinct roots cannot both contain one path, so
            # strict comparison never has to break a tie.
            if best is None or len(root.path) > len(best.path):
                best = root
        if best is None:
            return AccessClass.NONE
        return best.flags.access

    def snapshot(
        self,
        context_roots: list[str] | None,
        export_roots: list[str] | None,
        vault_root: str,
    ) -> RootSnapshot:
        root_map = self.build_root_map(context_roots, export_roots)
        return RootSnapshot(
            vault_root=vault_root,
            vault_real=self.resolve_vault(vault_root),
            roots=[ResolvedRoot(path, flags) for path, flags in root_map.items()],
            classifier=self,
        )

    # ── Public predicates ────────────────────────────────────────────────────

    def classify(
        self,
        candidate: str,
        context_roots: list[str] | None,
        export_roots: list[str] | None,
        vault_root: str,
    ) -> AccessClass:
        """Return the access class of *candidate*. Never raises."""
        if not candidate or not isinstance(candidate, str):
            return AccessClass.NONE

        candidate_real = self.resolve_candidate(candidate, vault_root)
        if not candidate_real:
            return AccessClass.NONE

        vault_real = self.resolve_vault(vault_root)
        if self.normalizer.is_within(candidate_real, vault_real):
            logger.debug("%s -> vault (%s)", candidate, candidate_real)
            return AccessClass.VAULT

        root_map = self.build_root_map(context_roots, export_roots)
        access = self.match_roots(
            candidate_real,
            [ResolvedRoot(path, flags) for path, flags in root_map.items()],
        )
        logger.debug("%s -> %s (%s)", candidate, access.value, candidate_real)
        return access

    async def classify_async(
        self,
        candidate: str,
        context_roots: list[str] | None,
        export_roots: list[str] | None,
        vault_root: str,
    ) -> AccessClass:
        """Run :meth:`classify` in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(
            self.classify, candidate, context_roots, export_roots, vault_root,
        )

    def is_within_vault(self, candidate: str, vault_root: str) -> bool:
        if not candidate or not isinstance(candidate, str):
            return False
        candidate_real = self.resolve_candidate(candidate, vault_root)
        return self.normalizer.is_within(candidate_real, self.resolve_vault(vault_root))

    def is_within_roots(self, candidate: str, roots: list[str] | None, vault_root: str) -> bool:
        """Return True when *candidate* lies within any of *roots*.

        Empty root lists short-circuit to False without filesystem access.
        """
        if not roots:
            return False
        if not candidate or not isinstance(candidate, str):
            return False
        candidate_real = self.resolve_candidate(candidate, vault_root)
        if not candidate_real:
            return False
        for raw in roots:
            root_real = self.resolve_root(raw)
            if root_real and self.normalizer.is_within(candidate_real, root_real):
                return True
        return False


def classify(
    candidate: str,
    context_roots: list[str] | None,
    export_roots: list[str] | None,
    vault_root: str,
) -> AccessClass:
    """Classify *candidate* against the host filesystem."""
    return AccessClassifier().classify(candidate, context_roots, export_roots, vault_root)


def is_path_within_vault(candidate: str, vault_root: str) -> bool:
    return AccessClassifier().is_within_vault(candidate, vault_root)


def is_path_in_roots(candidate: str, roots: list[str] | None, vault_root: str) -> bool:
    """Return True when *candidate* is inside any context or export root in *roots*."""
    return AccessClassifier().is_within_roots(candidate, roots, vault_root)
