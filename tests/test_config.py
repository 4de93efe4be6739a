"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from esristyle.config import (AppConfig, ConfigManager, ConfigurationNotFoundError,
                              ConfigurationValidationError)
from esristyle.symbology.colors import METERS_PER_UNIT


@pytest.fixture
def config_dir(tmp_path):
    base = {
        "global": {"log_level": "info", "request_timeout": 30},
        "style": {"projection_unit": "m", "group_by_label": True},
    }
    (tmp_path / "esristyle_config.yaml").write_text(yaml.safe_dump(base))
    (tmp_path / "environments").mkdir()
    (tmp_path / "environments" / "production.yaml").write_text(
        yaml.safe_dump({"_environment": "production", "style": {"projection_unit": "degrees"}})
    )
    return tmp_path


def test_defaults_without_files(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = ConfigManager().load_config(environment="development")

    assert config.global_.log_level == "INFO"
    assert config.style.group_by_label is True
    assert config.style.resolve_meters_per_unit() == 1.0


def test_base_file(config_dir):
    config = ConfigManager().load_config(config_dir / "esristyle_config.yaml", "development")
    assert config.global_.log_level == "INFO"
    assert config.style.projection_unit == "m"


def test_environment_override(config_dir):
    config = ConfigManager().load_config(config_dir / "esristyle_config.yaml", "production")
    assert config.style.projection_unit == "degrees"
    assert config.style.translation_options() == {
        "meters_per_unit": METERS_PER_UNIT["degrees"],
        "group_by_label": True,
    }


def test_env_var_overrides(config_dir, monkeypatch):
    monkeypatch.setenv("ESRISTYLE_STYLE_GROUP_BY_LABEL", "false")
    monkeypatch.setenv("ESRISTYLE_STYLE_METERS_PER_UNIT", "0.3048")
    monkeypatch.setenv("ESRISTYLE_GLOBAL_LOG_LEVEL", "warning")

    config = ConfigManager().load_config(config_dir / "esristyle_config.yaml", "development")
    assert config.style.group_by_label is False
    assert config.style.resolve_meters_per_unit() == 0.3048
    assert config.global_.log_level == "WARNING"


def test_invalid_values(config_dir, monkeypatch):
    monkeypatch.setenv("ESRISTYLE_STYLE_PROJECTION_UNIT", "furlong")
    with pytest.raises(ConfigurationValidationError):
        ConfigManager().load_config(config_dir / "esristyle_config.yaml", "development")


def test_missing_explicit_file(tmp_path):
    with pytest.raises(ConfigurationNotFoundError):
        ConfigManager().load_config(tmp_path / "nope.yaml", "development")


def test_get_config_before_load():
    with pytest.raises(ValueError):
        ConfigManager().get_config()


def test_global_alias():
    config = AppConfig(**{"global": {"log_level": "debug"}})
    assert config.global_.log_level == "DEBUG"
    assert AppConfig(global_={"log_level": "error"}).global_.log_level == "ERROR"


def test_proxy_requests_format():
    config = AppConfig(**{"global": {"proxy": {"https_proxy": "http://proxy:8080"}}})
    assert config.global_.proxy.to_requests_format() == {"https": "http://proxy:8080"}


def test_repository_config_loads():
    root = Path(__file__).parent.parent
    config = ConfigManager().load_config(root / "config" / "esristyle_config.yaml", "test")
    assert config.global_.logging.file.enabled is False
    assert config.global_.log_level == "WARNING"
