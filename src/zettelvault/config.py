"""Vault configuration.

Settings come from, in increasing precedence: built-in defaults, a TOML
file with a ``[vault]`` table, environment variables, explicit kwargs::

    [vault]
    dir            = "~/Notes/zettelvault"
    notes_subdir   = "notes"
    trash_subdir   = "trash"
    debounce_delay = 1.0
    log_level      = "INFO"

Environment variables:
    ZETTELVAULT_DIR         vault root directory
    ZETTELVAULT_DEBOUNCE    seconds to hold updates while editing
    ZETTELVAULT_LOG_LEVEL   logging level name
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from zettelvault.errors import ConfigError

logger = logging.getLogger(__name__)

_ENV_DIR = "ZETTELVAULT_DIR"
_ENV_DEBOUNCE = "ZETTELVAULT_DEBOUNCE"
_ENV_LOG_LEVEL = "ZETTELVAULT_LOG_LEVEL"


@dataclass(frozen=True)
class VaultConfig:
    vault_dir: Path | None = None
    notes_subdir: str = "notes"
    trash_subdir: str = "trash"
    debounce_delay: float = 1.0
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.debounce_delay < 0:
            raise ConfigError("debounce_delay must not be negative", {"debounce_delay": self.debounce_delay})
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(f"Unknown log level {self.log_level!r}")

    @property
    def notes_dir(self) -> Path | None:
        return self.vault_dir / self.notes_subdir if self.vault_dir else None

    @property
    def trash_dir(self) -> Path | None:
        return self.vault_dir / self.trash_subdir if self.vault_dir else None

    @property
    def is_configured(self) -> bool:
        return self.vault_dir is not None

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VaultConfig":
        section = data.get("vault", data)
        kwargs: dict[str, Any] = {}
        if section.get("dir"):
            kwargs["vault_dir"] = Path(section["dir"]).expanduser()
        for key in ("notes_subdir", "trash_subdir", "log_level"):
            if key in section:
                kwargs[key] = str(section[key])
        if "debounce_delay" in section:
            kwargs["debounce_delay"] = _to_float(section["debounce_delay"], "debounce_delay")
        return cls(**kwargs)

    @classmethod
    def from_toml(cls, path: Path) -> "VaultConfig":
        try:
            with open(path, "rb") as fh:
                data = tomllib.load(fh)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}", {"path": str(path)}) from exc
        return cls.from_dict(data)

    def with_env(self, environ: Mapping[str, str] | None = None) -> "VaultConfig":
        """Return a copy with any ``ZETTELVAULT_*`` variables applied."""
        env = os.environ if environ is None else environ
        changes: dict[str, Any] = {}
        if env.get(_ENV_DIR):
            changes["vault_dir"] = Path(env[_ENV_DIR]).expanduser()
        if env.get(_ENV_DEBOUNCE):
            changes["debounce_delay"] = _to_float(env[_ENV_DEBOUNCE], _ENV_DEBOUNCE)
        if env.get(_ENV_LOG_LEVEL):
            changes["log_level"] = env[_ENV_LOG_LEVEL]
        return replace(self, **changes) if changes else self

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        *,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "VaultConfig":
        config = cls.from_toml(path) if path is not None else cls()
        config = config.with_env(environ)
        if overrides:
            config = replace(config, **overrides)
        logger.debug("Loaded vault config: %s", config)
        return config


def _to_float(value: Any, name: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a number, got {value!r}") from exc


def configure_logging(level: str | int = "WARNING") -> None:
    """Basic root logging setup for applications embedding the vault."""
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
