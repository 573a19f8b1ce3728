"""Unit tests for zettelvault.config."""

import logging
import textwrap
from pathlib import Path

import pytest

from zettelvault.config import VaultConfig, configure_logging
from zettelvault.errors import ConfigError


@pytest.fixture()
def toml_file(tmp_path: Path) -> Path:
    path = tmp_path / "zettelvault.toml"
    path.write_text(
        textwrap.dedent(f"""\
            [vault]
            dir = "{tmp_path.as_posix()}/vault"
            notes_subdir = "zettel"
            debounce_delay = 0.5
            log_level = "info"
        """),
        encoding="utf-8",
    )
    return path


class TestDefaults:
    def test_unconfigured(self):
        config = VaultConfig()
        assert not config.is_configured
        assert config.notes_dir is None
        assert config.trash_dir is None
        assert config.debounce_delay == 1.0

    def test_derived_directories(self, tmp_path: Path):
        config = VaultConfig(vault_dir=tmp_path)
        assert config.notes_dir == tmp_path / "notes"
        assert config.trash_dir == tmp_path / "trash"

    def test_negative_debounce_rejected(self):
        with pytest.raises(ConfigError):
            VaultConfig(debounce_delay=-1)

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ConfigError):
            VaultConfig(log_level="chatty")


class TestSources:
    def test_from_toml(self, toml_file: Path, tmp_path: Path):
        config = VaultConfig.from_toml(toml_file)
        assert config.vault_dir == tmp_path / "vault"
        assert config.notes_dir == tmp_path / "vault" / "zettel"
        assert config.debounce_delay == 0.5
        assert config.log_level == "info"

    def test_from_dict_without_section(self):
        config = VaultConfig.from_dict({"debounce_delay": "2"})
        assert config.debounce_delay == 2.0

    def test_bad_number(self):
        with pytest.raises(ConfigError):
            VaultConfig.from_dict({"vault": {"debounce_delay": "soon"}})

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigError):
            VaultConfig.from_toml(tmp_path / "absent.toml")

    def test_malformed_file(self, tmp_path: Path):
        path = tmp_path / "bad.toml"
        path.write_text("[vault\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            VaultConfig.from_toml(path)

    def test_env_overrides_file(self, toml_file: Path, tmp_path: Path):
        env = {"ZETTELVAULT_DIR": str(tmp_path / "other"), "ZETTELVAULT_DEBOUNCE": "3"}
        config = VaultConfig.load(toml_file, environ=env)
        assert config.vault_dir == tmp_path / "other"
        assert config.debounce_delay == 3.0
        assert config.notes_subdir == "zettel"

    def test_empty_env_values_ignored(self):
        config = VaultConfig.load(environ={"ZETTELVAULT_DIR": "", "ZETTELVAULT_LOG_LEVEL": ""})
        assert config == VaultConfig()

    def test_kwargs_override_env(self, tmp_path: Path):
        config = VaultConfig.load(environ={"ZETTELVAULT_DEBOUNCE": "3"}, debounce_delay=0.1)
        assert config.debounce_delay == 0.1

    def test_invalid_env_value(self):
        with pytest.raises(ConfigError):
            VaultConfig.load(environ={"ZETTELVAULT_LOG_LEVEL": "loud"})


def test_configure_logging(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.update(kw))
    configure_logging("debug")
    assert calls["level"] == "DEBUG"
