import json

import pytest

from rootbyte.config import DEFAULT_CONFIG, Config
from rootbyte.core.errors import ConfigError


def test_defaults_without_file():
    config = Config()
    assert config.get("breaking.spike_threshold") == 4
    assert config.get("breaking.expires_hours") == 12
    assert config.get("missing.key", "fallback") == "fallback"


def test_yaml_file_is_merged(tmp_path):
    path = tmp_path / "rootbyte.yaml"
    path.write_text("site:\n  base_url: https://staging.rootbyte.com\nbreaking:\n  spike_threshold: 5\n")

    config = Config(str(path))

    assert config.get("site.base_url") == "https://staging.rootbyte.com"
    assert config.get("breaking.spike_threshold") == 5
    assert config.get("breaking.expires_hours") == 12
    assert DEFAULT_CONFIG["site"]["base_url"] == "https://rootbyte.com"


def test_json_file_is_merged(tmp_path):
    path = tmp_path / "rootbyte.json"
    path.write_text(json.dumps({"trending": {"max_ticker": 5}}))
    assert Config(str(path)).get("trending.max_ticker") == 5


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("ROOTBYTE_SITE__BASE_URL", "https://env.example")
    monkeypatch.setenv("ROOTBYTE_BREAKING__SPIKE_THRESHOLD", "6")

    config = Config()

    assert config.get("site.base_url") == "https://env.example"
    assert config.get("breaking.spike_threshold") == 6


def test_unreadable_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("site: [unclosed")
    assert Config(str(path)).get("site.base_url") == "https://rootbyte.com"


def test_invalid_replace_policy_is_reported_on_validate(monkeypatch):
    monkeypatch.setenv("ROOTBYTE_BREAKING__REPLACE_POLICY", "sometimes")
    config = Config()
    assert config.get("breaking.replace_policy") == "sometimes"
    with pytest.raises(ConfigError):
        config.validate()


def test_default_config_validates():
    Config().validate()
