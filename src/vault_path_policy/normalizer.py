"""Path normalization: home, environment-variable and platform-syntax expansion.

Turns a raw path string supplied by a user or an agent into a canonical,
platform-correct string without touching the filesystem. The order of the
steps matters and is fixed:

1. expand environment variables (``%NAME%``, ``!NAME!``, ``$env:NAME``,
   ``$NAME``, ``${NAME}``)
2. expand a leading ``~``
3. translate MSYS drive paths (``/c/Users`` -> ``C:\\Users``, Windows only)
4. strip extended-length prefixes (``\\\\?\\C:\\`` -> ``C:\\``, Windows only)

Separator and case folding for comparison happens later, in
:meth:`PathNormalizer.comparison_key`.
"""

from __future__ import annotations

import ntpath
import os
import posixpath
import re
from collections.abc import Callable, Mapping

_PERCENT_VAR = re.compile(r"%([A-Za-z_][A-Za-z0-9_()]*[A-Za-z0-9_)]?)%")
_BANG_VAR = re.compile(r"!([A-Za-z_][A-Za-z0-9_]*)!")
_POWERSHELL_VAR = re.compile(r"\$env:([A-Za-z_][A-Za-z0-9_]*)", re.IGNORECASE)
_POSIX_VAR = re.compile(r"\$([A-Za-z_][A-Za-z0-9_]*)|\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
_MSYS_DRIVE = re.compile(r"^/([a-zA-Z])(/.*)?$")

_UNC_EXTENDED_PREFIX = "\\\\?\\UNC\\"
_EXTENDED_PREFIX = "\\\\?\\"
_MAX_EXPANSION_PASSES = 8

EnvLookup = Callable[[str], "str | None"]


def starts_with_home(value: str) -> bool:
    """Return True when *value* uses home-directory notation (``~``, ``~/``, ``~\\``)."""
    return value == "~" or value.startswith("~/") or value.startswith("~\\")


def make_env_lookup(env: Mapping[str, str], *, windows: bool) -> EnvLookup:
    """Build a variable lookup over *env*.

    Lookup is case-sensitive on POSIX. On Windows it falls back through
    exact match, upper case, lower case, then a full case-insensitive scan.
    """

    def lookup(name: str) -> str | None:
        if name in env:
            return env[name]
        if not windows:
            return None
        upper = name.upper()
        if upper in env:
            return env[upper]
        lower = name.lower()
        if lower in env:
            return env[lower]
        folded = name.lower()
        for key in env:
            if key.lower() == folded:
                return env[key]
        return None

    return lookup


class PathNormalizer:
    """Pure string transforms for one platform flavor.

    Args:
        env: Variable mapping used for substitution. Defaults to the live
            ``os.environ``.
        home: Home directory used for ``~`` expansion. Defaults to the
            current user's home.
        windows: Apply Windows semantics (``ntpath``, MSYS translation,
            case folding). Defaults to the host platform.
    """

    def __init__(
        self,
        *,
        env: Mapping[str, str] | None = None,
        home: str | None = None,
        windows: bool | None = None,
    ) -> None:
        self.windows = (os.name == "nt") if windows is None else windows
        self.path = ntpath if self.windows else posixpath
        self._env = os.environ if env is None else env
        self._home = home
        self._lookup = make_env_lookup(self._env, windows=self.windows)

    @property
    def home(self) -> str:
        return self._home if self._home is not None else os.path.expanduser("~")

    @property
    def sep(self) -> str:
        return self.path.sep

    def lookup(self, name: str) -> str | None:
        return self._lookup(name)

    def _substitute(self, match: re.Match[str]) -> str:
        name = next(group for group in match.groups() if group)
        value = self._lookup(name)
        return value if value is not None else match.group(0)

    def _expand_once(self, value: str) -> str:
        expanded = _PERCENT_VAR.sub(self._substitute, value)
        expanded = _BANG_VAR.sub(self._substitute, expanded)
        expanded = _POWERSHELL_VAR.sub(self._substitute, expanded)
        return _POSIX_VAR.sub(self._substitute, expanded)

    def expand_env_vars(self, value: str) -> str:
        """Substitute every recognised variable reference in *value*.

        Values that themselves hold references are expanded again until
        nothing changes, up to a fixed number of passes; a self-referencing
        variable stops there instead of looping. Unresolvable references
        are left verbatim.
        """
        for _ in range(_MAX_EXPANSION_PASSES):
            if "%" not in value and "$" not in value and "!" not in value:
                return value
            expanded = self._expand_once(value)
            if expanded == value:
                return value
            value = expanded
        return value

    def expand_home(self, value: str) -> str:
        if value == "~":
            return self.home
        if value.startswith("~/") or (self.windows and value.startswith("~\\")):
            return self.path.join(self.home, value[2:])
        return value

    def translate_msys_path(self, value: str) -> str:
        """Rewrite ``/c/...`` as ``C:\\...`` on Windows; identity elsewhere."""
        if not self.windows:
            return value
        match = _MSYS_DRIVE.match(value)
        if not match:
            return value
        drive = match.group(1).upper()
        rest = (match.group(2) or "\\").replace("/", "\\")
        return f"{drive}:{rest}"

    def strip_extended_prefix(self, value: str) -> str:
        if not self.windows:
            return value
        if value.startswith(_UNC_EXTENDED_PREFIX):
            return "\\\\" + value[len(_UNC_EXTENDED_PREFIX):]
        if value.startswith(_EXTENDED_PREFIX):
            return value[len(_EXTENDED_PREFIX):]
        return value

    def normalize(self, raw: str) -> str:
        """Return the normalized form of *raw*; never touches the filesystem."""
        if not isinstance(raw, str):
            return ""
        expanded = self.expand_home(self.expand_env_vars(raw))
        return self.strip_extended_prefix(self.translate_msys_path(expanded))

    def is_absolute(self, value: str) -> bool:
        return self.path.isabs(value)

    def comparison_key(self, value: str) -> str:
        """Normalize separators, trailing separators and case for comparison."""
        if not value or not isinstance(value, str):
            return ""
        if self.windows:
            value = self.strip_extended_prefix(self.translate_msys_path(value))
        try:
            normalized = self.path.normpath(value)
        except (TypeError, ValueError):
            normalized = value
        return normalized.lower() if self.windows else normalized

    def is_within(self, child_key: str, root_key: str) -> bool:
        """Separator-bounded containment check on two comparison keys.

        ``/vault2`` is not within ``/vault``. A root that already ends in a
        separator (the filesystem root) contains every path below it.
        """
        if not child_key or not root_key:
            return False
        if child_key == root_key:
            return True
        prefix = root_key if root_key.endswith(self.sep) else root_key + self.sep
        return child_key.startswith(prefix)


def normalize(raw: str) -> str:
    """Normalize *raw* using the host platform, environment and home directory."""
    return PathNormalizer().normalize(raw)
