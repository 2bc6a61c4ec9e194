"""Root configuration via environment variables."""

from __future__ import annotations

import os

from pydantic import BaseModel, Field, field_validator

from .classifier import RootSpec
from .dotenv import (
    ENV_CONTEXT_ROOTS,
    ENV_EXPORT_ROOTS,
    ENV_VAULT_ROOT,
    is_unset_or_placeholder,
)
from .normalizer import PathNormalizer
from .types import coerce_root_list


def _env_value(key: str) -> str:
    """Read *key* from the environment, treating placeholders as unset."""
    value = os.getenv(key)
    if is_unset_or_placeholder(key, value):
        return ""
    return value.strip()


class PolicyConfig(BaseModel):
    """Vault and auxiliary roots.

    The vault root has ``~`` and environment references expanded here,
    because relative candidates are joined to it as-is. Context and export
    roots stay verbatim until the normalizer sees them. No root is
    resolved against the filesystem until classification.
    """

    vault_root: str = Field(default="")
    context_roots: list[str] = Field(default_factory=list)
    export_roots: list[str] = Field(default_factory=list)

    @field_validator("vault_root")
    @classmethod
    def validate_vault_root(cls, value: str) -> str:
        value = value.strip()
        if not value:
            return ""
        return PathNormalizer().normalize(value)

    @field_validator("context_roots", "export_roots", mode="before")
    @classmethod
    def validate_root_lists(cls, value: object) -> list[str]:
        if value is None or isinstance(value, (str, list, tuple)):
            return coerce_root_list(value)
        raise ValueError("Root lists must be a string or a list of strings")

    def root_specs(self) -> list[RootSpec]:
        """Return every configured root, vault first."""
        specs: list[RootSpec] = []
        if self.vault_root:
            specs.append(RootSpec(kind="vault", raw=self.vault_root))
        specs.extend(RootSpec(kind="context", raw=r) for r in self.context_roots)
        specs.extend(RootSpec(kind="export", raw=r) for r in self.export_roots)
        return specs

    @classmethod
    def from_env(cls) -> PolicyConfig:
        """Build config from environment variables."""
        return cls(
            vault_root=_env_value(ENV_VAULT_ROOT),
            context_roots=_env_value(ENV_CONTEXT_ROOTS),
            export_roots=_env_value(ENV_EXPORT_ROOTS),
        )


# Singleton, initialised on first access.
_config: PolicyConfig | None = None


def get_config() -> PolicyConfig:
    """Return the global config singleton, creating it on first access.

    Loads ``~/.config/vault-path-policy/.env`` before reading env vars.
    Process environment always takes precedence over the config file.
    """
    global _config
    if _config is None:
        import logging

        from .dotenv import load_dotenv

        injected = load_dotenv()
        if injected:
            logger = logging.getLogger(__name__)
            logger.info(
                "Loaded %d var(s) from config: %s",
                len(injected),
                ", ".join(injected.keys()),
            )
        _config = PolicyConfig.from_env()
    return _config


def update_config(**overrides: object) -> PolicyConfig:
    """Patch the live config, e.g. after the settings layer saves new roots."""
    global _config
    cfg = get_config()
    data = cfg.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    _config = PolicyConfig(**data)
    return _config
