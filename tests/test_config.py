"""Tests for configuration loading and saving."""

import json
import logging
import logging.handlers

import pytest

from ttklab.core.config import (
    ENV_OVERRIDES,
    LoggingConfig,
    TTKLabConfig,
    configure_logging,
    dict_to_config,
    get_config,
    load_config,
    load_config_file,
    load_env_config,
    merge_configs,
    reset_config,
    save_config,
    set_config,
)
from ttklab.ingest.normalizer import DamageCorrection, corrections_from_mapping

YAML_CONFIG = """\
ingest:
  data_source: https://example.com/ttk.csv
  damage_corrections:
    "33": 33.5
    "20": 21
analysis:
  top_n: 3
  default_range: 35M
"""


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """No config files or TTKLAB_* variables leak in from the host."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    for var in ENV_OVERRIDES:
        monkeypatch.delenv(var, raising=False)
    reset_config()
    yield tmp_path
    reset_config()


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self):
        config = TTKLabConfig()
        assert config.ingest.damage_corrections == {33.0: 33.5}
        assert config.analysis.default_range == "10M"
        assert config.analysis.default_fire_mode == "hip"
        assert config.export.filename_template == "battlefield6_ttk_{date}.csv"

    def test_default_corrections_match_normalizer(self):
        rules = corrections_from_mapping(TTKLabConfig().ingest.damage_corrections)
        assert rules == (DamageCorrection(33.0, 33.5),)


class TestLoading:
    """Tests for file and environment sources."""

    def test_yaml_file(self, isolated):
        path = isolated / "custom.yaml"
        path.write_text(YAML_CONFIG)
        config = load_config(path, include_env=False)
        assert config.ingest.data_source == "https://example.com/ttk.csv"
        assert config.ingest.damage_corrections == {33.0: 33.5, 20.0: 21.0}
        assert config.analysis.top_n == 3
        assert config.analysis.default_range == "35M"
        assert config.export.csv_delimiter == ","

    def test_json_file(self, isolated):
        path = isolated / "custom.json"
        path.write_text(json.dumps({"export": {"json_indent": 4}}))
        assert load_config(path, include_env=False).export.json_indent == 4

    def test_toml_file(self, isolated):
        path = isolated / "custom.toml"
        path.write_text('[logging]\nlevel = "DEBUG"\n')
        assert load_config(path, include_env=False).logging.level == "DEBUG"

    def test_discovers_cwd_file(self, isolated):
        (isolated / "ttklab.yaml").write_text(YAML_CONFIG)
        assert load_config(include_env=False).analysis.top_n == 3

    def test_missing_and_unknown_files(self, isolated):
        assert load_config_file(isolated / "missing.yaml") == {}
        path = isolated / "config.ini"
        path.write_text("[x]")
        assert load_config_file(path) == {}

    def test_env_overrides_file(self, isolated, monkeypatch):
        path = isolated / "custom.yaml"
        path.write_text(YAML_CONFIG)
        monkeypatch.setenv("TTKLAB_TOP_N", "7")
        monkeypatch.setenv("TTKLAB_LOG_LEVEL", "WARNING")
        config = load_config(path)
        assert config.analysis.top_n == 7
        assert config.logging.level == "WARNING"
        assert config.ingest.data_source == "https://example.com/ttk.csv"

    def test_env_values_typed_per_setting(self, isolated, monkeypatch):
        monkeypatch.setenv("TTKLAB_DATA_SOURCE", "2025")
        monkeypatch.setenv("TTKLAB_TOP_N", "8")
        assert load_env_config() == {"ingest": {"data_source": "2025"}, "analysis": {"top_n": 8}}
        assert load_config(include_env=True).ingest.data_source == "2025"

    def test_invalid_env_value_ignored(self, isolated, monkeypatch):
        monkeypatch.setenv("TTKLAB_TOP_N", "many")
        assert load_env_config() == {}
        assert load_config().analysis.top_n == 5

    def test_unknown_keys_ignored(self):
        config = dict_to_config({"analysis": {"bogus": 1}, "other": {"x": 1}})
        assert not hasattr(config.analysis, "bogus")

    def test_merge(self):
        merged = merge_configs({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 1}


class TestSaving:
    """Tests for saving configuration."""

    @pytest.mark.parametrize("filename", ["saved.yaml", "saved.json"])
    def test_save_and_reload(self, isolated, filename):
        config = TTKLabConfig()
        config.analysis.top_n = 9
        config.ingest.damage_corrections = {33.0: 33.5, 12.0: 12.5}
        path = isolated / filename
        save_config(config, path)
        assert load_config(path, include_env=False) == config

    def test_unknown_format(self, isolated):
        with pytest.raises(ValueError, match="Unknown config format"):
            save_config(TTKLabConfig(), isolated / "saved.ini")


class TestGlobalConfig:
    """Tests for the process-wide configuration."""

    def test_set_and_reset(self, isolated):
        custom = TTKLabConfig()
        custom.analysis.top_n = 42
        set_config(custom)
        assert get_config() is custom

        reset_config()
        assert get_config().analysis.top_n == 5

    def test_cached(self, isolated):
        assert get_config() is get_config()


class TestConfigureLogging:
    """Tests for applying logging settings."""

    @pytest.fixture
    def root_logger(self):
        root = logging.getLogger()
        previous_level = root.level
        previous_handlers = list(root.handlers)
        yield root
        for handler in list(root.handlers):
            if handler not in previous_handlers:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(previous_level)

    def test_level_and_file_handler(self, root_logger, tmp_path):
        log_file = tmp_path / "ttklab.log"
        configure_logging(LoggingConfig(level="warning", file=str(log_file)))
        assert root_logger.level == logging.WARNING
        logging.getLogger("ttklab.test").warning("written to file")
        for handler in root_logger.handlers:
            handler.flush()
        assert "written to file" in log_file.read_text()

    def test_repeated_setup_adds_one_file_handler(self, root_logger, tmp_path):
        settings = LoggingConfig(file=str(tmp_path / "ttklab.log"))
        configure_logging(settings)
        configure_logging(settings)
        file_handlers = [
            h for h in root_logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
