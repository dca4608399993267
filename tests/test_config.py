from __future__ import annotations

from pathlib import Path

import pytest

from lidlstock.config import ConfigError, load_config


def test_missing_stock_api_is_fatal() -> None:
    with pytest.raises(ConfigError):
        load_config(environ={"MAPS_HOST": "https://maps.example", "MAPS_API_KEY": "k"})


def test_environment_overrides_yaml(tmp_path: Path) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(
        "stock_api: https://yaml.example/\nstore_cache: cache.json\ntimeout_seconds: 5\n",
        encoding="utf-8",
    )

    config = load_config(path, environ={"LIDL_STOCK_API": "https://env.example/"})

    assert config.stock_api == "https://env.example/"
    assert config.store_cache == Path("cache.json")
    assert config.timeout_seconds == 5
    assert config.maps_host is None


def test_invalid_timeout_rejected() -> None:
    with pytest.raises(ConfigError):
        load_config(environ={"LIDL_STOCK_API": "https://env.example/", "LIDL_HTTP_TIMEOUT": "-1"})
