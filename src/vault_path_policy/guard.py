"""Operation-level access checks for tool-execution callers.

The classifier answers "what access class does this path have"; this
module answers "may this operation proceed" and, for callers that want
it, raises :class:`PathAccessDenied` on refusal. Checks are point-in-time:
re-run them immediately before the actual I/O.
"""

from __future__ import annotations

import asyncio
import logging

from pydantic import BaseModel

from .classifier import AccessClass, AccessClassifier
from .config import PolicyConfig, get_config
from .errors import PathAccessDenied
from .types import Operation

logger = logging.getLogger(__name__)


class AccessDecision(BaseModel):
    """Outcome of one operation check."""

    path: str
    operation: Operation
    access: AccessClass
    allowed: bool
    reason: str = ""


def is_operation_allowed(access: AccessClass, operation: Operation) -> bool:
    if operation == "read":
        return access.can_read
    if operation == "write":
        return access.can_write
    return False


def _denial_reason(access: AccessClass, operation: Operation) -> str:
    if access == AccessClass.CONTEXT:
        return "context roots are read-only"
    if access == AccessClass.EXPORT:
        return "export roots are write-only"
    return f"path is outside the vault and all allowed roots ({operation})"


def check_access(
    candidate: str,
    operation: Operation,
    *,
    config: PolicyConfig | None = None,
    classifier: AccessClassifier | None = None,
) -> AccessDecision:
    """Classify *candidate* under *config* and decide whether *operation* may proceed.

    Args:
        candidate: Path the tool wants to touch.
        operation: ``"read"`` or ``"write"``.
        config: Root configuration. Defaults to the global config.
        classifier: Classifier to use. Defaults to one for the host platform.

    Returns:
        AccessDecision; never raises for malformed paths.
    """
    cfg = config if config is not None else get_config()
    clf = classifier if classifier is not None else AccessClassifier()
    access = clf.classify(candidate, cfg.context_roots, cfg.export_roots, cfg.vault_root)
    allowed = is_operation_allowed(access, operation)
    return AccessDecision(
        path=candidate if isinstance(candidate, str) else "",
        operation=operation,
        access=access,
        allowed=allowed,
        reason="" if allowed else _denial_reason(access, operation),
    )


async def check_access_async(
    candidate: str,
    operation: Operation,
    *,
    config: PolicyConfig | None = None,
    classifier: AccessClassifier | None = None,
) -> AccessDecision:
    """Async variant of :func:`check_access`; filesystem probing runs in a thread."""
    cfg = config if config is not None else get_config()
    return await asyncio.to_thread(
        check_access, candidate, operation, config=cfg, classifier=classifier,
    )


def enforce_access(
    candidate: str,
    operation: Operation,
    *,
    config: PolicyConfig | None = None,
    classifier: AccessClassifier | None = None,
) -> AccessDecision:
    """Like :func:`check_access` but raise when the operation is not allowed.

    Raises:
        PathAccessDenied: If the path's access class forbids *operation*.
    """
    decision = check_access(candidate, operation, config=config, classifier=classifier)
    if not decision.allowed:
        logger.warning(
            "Denied %s of %r (access=%s): %s",
            operation, decision.path, decision.access.value, decision.reason,
        )
        raise PathAccessDenied(
            decision.path,
            operation,
            decision.access.value,
            f"{operation.capitalize()} access denied for '{decision.path}': {decision.reason}",
        )
    return decision
