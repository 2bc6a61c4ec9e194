"""Shared test fixtures for vault-path-policy."""

from __future__ import annotations

import errno
import ntpath
import posixpath

import pytest

from vault_path_policy.classifier import AccessClassifier
from vault_path_policy.normalizer import PathNormalizer
from vault_path_policy.resolver import RealpathResolver


class FakeProbe:
    """In-memory filesystem probe.

    ``paths`` are created together with all their ancestors. ``links``
    maps a symlink path to its target; the target is created too.
    """

    def __init__(self, flavor, paths=(), links=None, cwd=None):
        self.flavor = flavor
        self.existing: set[str] = set()
        self.links: dict[str, str] = {}
        self.calls = 0
        for p in paths:
            self.add(p)
        for link, target in (links or {}).items():
            self.link(link, target)
        self._cwd = cwd or ("C:\\" if flavor is ntpath else "/")

    def add(self, path: str) -> None:
        path = self.flavor.normpath(path)
        while True:
            self.existing.add(path)
            parent = self.flavor.dirname(path)
            if parent == path:
                return
            path = parent

    def link(self, link: str, target: str, *, create_target: bool = True) -> None:
        self.links[self.flavor.normpath(link)] = self.flavor.normpath(target)
        if create_target:
            self.add(target)
        self.add(self.flavor.dirname(link))

    def _follow(self, path: str, depth: int = 0) -> str:
        """Walk *path* one segment at a time, like the kernel does.

        Links are substituted as soon as a segment reaches them, so ``..``
        after a link climbs out of the link target. Every intermediate
        directory must exist.
        """
        if depth > 40:
            raise OSError(errno.ELOOP, "Too many levels of symbolic links", path)
        if not self.flavor.isabs(path):
            path = self.flavor.join(self._cwd, path)
        sep = self.flavor.sep
        drive, tail = self.flavor.splitdrive(path)
        if self.flavor is ntpath:
            tail = tail.replace("/", sep)
        current = drive + sep
        for part in tail.split(sep):
            if part in ("", "."):
                continue
            if current not in self.existing:
                raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
            if part == "..":
                current = self.flavor.dirname(current)
                continue
            current = self.flavor.join(current, part)
            if current in self.links:
                current = self._follow(self.links[current], depth + 1)
        return current

    def exists(self, path: str) -> bool:
        self.calls += 1
        try:
            return self._follow(path) in self.existing
        except OSError:
            return False

    def realpath(self, path: str) -> str:
        self.calls += 1
        resolved = self._follow(path)
        if resolved not in self.existing:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", path)
        return resolved

    def cwd(self) -> str:
        return self._cwd


def make_classifier(probe: FakeProbe, *, env=None, home=None) -> AccessClassifier:
    """Build a classifier whose platform flavor matches *probe*."""
    windows = probe.flavor is ntpath
    normalizer = PathNormalizer(
        env=env or {},
        home=home or ("C:\\Users\\tester" if windows else "/home/tester"),
        windows=windows,
    )
    return AccessClassifier(normalizer, resolver=RealpathResolver(probe, normalizer))


@pytest.fixture()
def posix_fs():
    """Factory for a POSIX-flavored in-memory filesystem."""

    def _make(paths=(), links=None, cwd=None) -> FakeProbe:
        return FakeProbe(posixpath, paths, links, cwd)

    return _make


@pytest.fixture()
def windows_fs():
    """Factory for a Windows-flavored in-memory filesystem."""

    def _make(paths=(), links=None, cwd=None) -> FakeProbe:
        return FakeProbe(ntpath, paths, links, cwd)

    return _make


@pytest.fixture(autouse=True)
def _isolate_dotenv(tmp_path, monkeypatch):
    """Prevent tests from loading the user's real ~/.config/vault-path-policy/.env."""
    monkeypatch.setattr(
        "vault_path_policy.dotenv.DEFAULT_ENV_PATH",
        tmp_path / "nonexistent.env",
    )


@pytest.fixture(autouse=True)
def _clear_root_env(monkeypatch):
    """Ensure host root configuration never leaks into tests."""
    for key in ("VAULT_ROOT", "VAULT_CONTEXT_ROOTS", "VAULT_EXPORT_ROOTS"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def clean_config():
    """Reset the config singleton between tests."""
    import vault_path_policy.config as cfg_mod

    cfg_mod._config = None
    yield
    cfg_mod._config = None


@pytest.fixture()
def classifier_for():
    """Factory building a classifier over a fake probe; see :func:`make_classifier`."""
    return make_classifier
