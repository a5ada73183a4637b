from __future__ import annotations

from pathlib import Path

import pytest

from yojimbo_import.cli.config import load_config
from yojimbo_import.config import DecoderConfig


class TestDecoderConfig:
    def test_defaults(self):
        cfg = DecoderConfig()
        assert cfg.database_suffix == "Database.sqlite"
        assert cfg.max_workers == 1
        assert cfg.min_run_length == 5
        assert cfg.min_blob_length == 10

    def test_from_dict(self):
        cfg = DecoderConfig.from_dict({"max_workers": 8})
        assert cfg.max_workers == 8

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ValueError, match="workers"):
            DecoderConfig.from_dict({"workers": 8})

    def test_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            DecoderConfig(max_workers=0)

    @pytest.mark.parametrize(
        "config",
        [
            {"max_workers": "4"},
            {"max_workers": True},
            {"min_run_length": 5.0},
            {"database_suffix": 3},
        ],
    )
    def test_from_dict_rejects_wrong_types(self, config):
        with pytest.raises(ValueError, match=next(iter(config))):
            DecoderConfig.from_dict(config)


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("YOJIMBO_IMPORT_CONFIG", str(tmp_path / "missing.toml"))
        monkeypatch.delenv("YOJIMBO_IMPORT_WORKERS", raising=False)
        monkeypatch.delenv("YOJIMBO_IMPORT_BATCH_SIZE", raising=False)
        cfg = load_config()
        assert cfg.max_workers == 1
        assert cfg.batch_size == 0
        assert cfg.include_payloads is True

    def test_reads_toml_and_env_overrides(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "config.toml"
        path.write_text(
            "[decoder]\nmax_workers = 2\n\n"
            "[export]\nbatch_size = 25\ninclude_payloads = false\n",
            encoding="utf-8",
        )
        monkeypatch.setenv("YOJIMBO_IMPORT_CONFIG", str(path))
        monkeypatch.setenv("YOJIMBO_IMPORT_WORKERS", "6")
        monkeypatch.delenv("YOJIMBO_IMPORT_BATCH_SIZE", raising=False)

        cfg = load_config()
        assert cfg.max_workers == 6
        assert cfg.batch_size == 25
        assert cfg.include_payloads is False
        assert cfg.decoder_config().max_workers == 6
