"""Tests for root configuration parsing and the config singleton."""

from __future__ import annotations

import json
import os

import pytest
from pydantic import ValidationError

import vault_path_policy.config as cfg_mod
from vault_path_policy.config import PolicyConfig, get_config, update_config
from vault_path_policy.types import coerce_root_list


class TestCoerceRootList:
    def test_json_array(self):
        assert coerce_root_list(json.dumps(["/a", " /b ", ""])) == ["/a", "/b"]

    def test_newline_and_pathsep_separated(self):
        raw = f"/a{os.pathsep}/b\n/c\n\n"
        assert coerce_root_list(raw) == ["/a", "/b", "/c"]

    def test_malformed_json_falls_back_to_separators(self):
        assert coerce_root_list("[not json") == ["[not json"]

    def test_list_passthrough_drops_blanks_and_non_strings(self):
        assert coerce_root_list(["/a", "  ", 3, "~/b"]) == ["/a", "~/b"]

    def test_empty_values(self):
        assert coerce_root_list(None) == []
        assert coerce_root_list("   ") == []


class TestPolicyConfig:
    def test_auxiliary_roots_are_kept_verbatim(self):
        cfg = PolicyConfig(vault_root=" /vault ", context_roots=["~/docs", "$NOTES"])
        assert cfg.vault_root == "/vault"
        assert cfg.context_roots == ["~/docs", "$NOTES"]

    def test_vault_root_tilde_is_expanded(self, tmp_path, monkeypatch):
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("USERPROFILE", str(tmp_path))
        cfg = PolicyConfig(vault_root="~/vault", context_roots=["~/docs"])
        assert cfg.vault_root == os.path.join(str(tmp_path), "vault")
        assert cfg.context_roots == ["~/docs"]

    def test_invalid_root_list_type(self):
        with pytest.raises(ValidationError):
            PolicyConfig(context_roots=42)

    def test_root_specs_order(self):
        cfg = PolicyConfig(vault_root="/vault", context_roots=["/docs"], export_roots=["/out"])
        assert [(s.kind, s.raw) for s in cfg.root_specs()] == [
            ("vault", "/vault"),
            ("context", "/docs"),
            ("export", "/out"),
        ]

    def test_root_specs_without_vault(self):
        assert PolicyConfig(export_roots=["/out"]).root_specs()[0].kind == "export"


class TestFromEnv:
    def test_reads_all_variables(self, monkeypatch):
        monkeypatch.setenv("VAULT_ROOT", "/vault")
        monkeypatch.setenv("VAULT_CONTEXT_ROOTS", '["/docs", "~/ref"]')
        monkeypatch.setenv("VAULT_EXPORT_ROOTS", "/out")
        cfg = PolicyConfig.from_env()
        assert cfg.vault_root == "/vault"
        assert cfg.context_roots == ["/docs", "~/ref"]
        assert cfg.export_roots == ["/out"]

    def test_defaults_when_unset(self):
        cfg = PolicyConfig.from_env()
        assert cfg.vault_root == ""
        assert cfg.context_roots == []
        assert cfg.export_roots == []

    @pytest.mark.parametrize("placeholder", ["${VAULT_ROOT}", "$VAULT_ROOT", "${VAULT_ROOT:-}", '""'])
    def test_self_placeholder_is_treated_as_unset(self, monkeypatch, placeholder):
        monkeypatch.setenv("VAULT_ROOT", placeholder)
        assert PolicyConfig.from_env().vault_root == ""

    def test_vault_root_is_expanded(self, monkeypatch):
        monkeypatch.setenv("VPP_BASE", "/srv")
        monkeypatch.setenv("VAULT_ROOT", "$VPP_BASE/vault")
        assert PolicyConfig.from_env().vault_root == "/srv/vault"

    def test_reference_to_other_variable_is_kept(self, monkeypatch):
        monkeypatch.setenv("VAULT_CONTEXT_ROOTS", "$HOME/docs")
        assert PolicyConfig.from_env().context_roots == ["$HOME/docs"]


class TestSingleton:
    def test_loads_dotenv_file(self, tmp_path, monkeypatch, clean_config, caplog):
        env_file = tmp_path / "config.env"
        env_file.write_text("VAULT_ROOT=/from/file\nVAULT_EXPORT_ROOTS=/out\n")
        monkeypatch.setattr("vault_path_policy.dotenv.DEFAULT_ENV_PATH", env_file)
        monkeypatch.delenv("VAULT_ROOT", raising=False)
        monkeypatch.delenv("VAULT_EXPORT_ROOTS", raising=False)

        with caplog.at_level("INFO", logger="vault_path_policy.config"):
            cfg = get_config()

        assert cfg.vault_root == "/from/file"
        assert cfg.export_roots == ["/out"]
        assert "Loaded 2 var(s)" in caplog.text

    def test_process_env_wins_over_dotenv(self, tmp_path, monkeypatch, clean_config):
        env_file = tmp_path / "config.env"
        env_file.write_text("VAULT_ROOT=/from/file\n")
        monkeypatch.setattr("vault_path_policy.dotenv.DEFAULT_ENV_PATH", env_file)
        monkeypatch.setenv("VAULT_ROOT", "/from/env")
        assert get_config().vault_root == "/from/env"

    def test_singleton_is_reused(self, clean_config):
        assert get_config() is get_config()

    def test_update_config_patches_live_config(self, clean_config):
        cfg = update_config(vault_root="/vault", context_roots="/docs")
        assert cfg.vault_root == "/vault"
        assert cfg.context_roots == ["/docs"]
        assert cfg_mod._config is cfg

    def test_update_config_ignores_none(self, clean_config):
        update_config(vault_root="/vault")
        assert update_config(vault_root=None).vault_root == "/vault"
