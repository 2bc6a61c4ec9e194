"""Path resolution and access control for agents confined to a document vault.

Re-exports the public surface so callers can write
``from vault_path_policy import classify, AccessClass``.
"""

from .classifier import (
    AccessClass,
    AccessClassifier,
    ResolvedRoot,
    RootFlags,
    RootSnapshot,
    RootSpec,
    classify,
    is_path_in_roots,
    is_path_within_vault,
)
from .config import PolicyConfig, get_config, update_config
from .errors import PathAccessDenied, make_tool_error
from .guard import AccessDecision, check_access, check_access_async, enforce_access
from .normalizer import PathNormalizer, normalize
from .probe import FilesystemProbe, OsProbe
from .resolver import RealpathResolver, resolve_real
from .tokens import find_unreachable_paths, is_path_like_token, path_like_tokens

__all__ = [
    "AccessClass",
    "AccessClassifier",
    "AccessDecision",
    "FilesystemProbe",
    "OsProbe",
    "PathAccessDenied",
    "PathNormalizer",
    "PolicyConfig",
    "RealpathResolver",
    "ResolvedRoot",
    "RootFlags",
    "RootSnapshot",
    "RootSpec",
    "check_access",
    "check_access_async",
    "classify",
    "enforce_access",
    "find_unreachable_paths",
    "get_config",
    "is_path_in_roots",
    "is_path_like_token",
    "is_path_within_vault",
    "make_tool_error",
    "normalize",
    "path_like_tokens",
    "resolve_real",
    "update_config",
]
