"""Configuration for the yojimbo-import CLI.

Reads an optional TOML file and applies environment overrides on top.
Default location: ``~/.config/yojimbo-import/config.toml``.
Override with the ``YOJIMBO_IMPORT_CONFIG`` environment variable.

Example::

    [decoder]
    max_workers = 4
    database_suffix = "Database.sqlite"

    [export]
    batch_size = 50
    include_payloads = true
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from yojimbo_import.config import DecoderConfig
from yojimbo_import.db.loader import DATABASE_SUFFIX

_DEFAULT_CONFIG_DIR = Path("~/.config/yojimbo-import").expanduser()


def _config_path() -> Path:
    env = os.environ.get("YOJIMBO_IMPORT_CONFIG")
    if env:
        return Path(env).expanduser()
    return _DEFAULT_CONFIG_DIR / "config.toml"


@dataclass
class Config:
    max_workers: int = 1
    database_suffix: str = DATABASE_SUFFIX

    # 0 writes a single {items, labels, summary} document
    batch_size: int = 0
    include_payloads: bool = True

    def decoder_config(self) -> DecoderConfig:
        return DecoderConfig(
            database_suffix=self.database_suffix,
            max_workers=self.max_workers,
        )


def load_config() -> Config:
    """Load config from disk, falling back to defaults + env overrides."""
    path = _config_path()
    cfg = Config()

    if path.exists():
        with open(path, "rb") as f:
            data = tomllib.load(f)
        decoder_section = data.get("decoder", {})
        export_section = data.get("export", {})

        cfg.max_workers = int(decoder_section.get("max_workers", cfg.max_workers))
        cfg.database_suffix = decoder_section.get(
            "database_suffix", cfg.database_suffix
        )
        cfg.batch_size = int(export_section.get("batch_size", cfg.batch_size))
        cfg.include_payloads = bool(
            export_section.get("include_payloads", cfg.include_payloads)
        )

    # Environment variables always take precedence
    cfg.max_workers = int(
        os.environ.get("YOJIMBO_IMPORT_WORKERS", str(cfg.max_workers))
    )
    cfg.batch_size = int(
        os.environ.get("YOJIMBO_IMPORT_BATCH_SIZE", str(cfg.batch_size))
    )

    return cfg


def config_exists() -> bool:
    return _config_path().exists()


def config_path_display() -> str:
    return str(_config_path())
