from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from lidlstock.models import AppConfig

LOG = logging.getLogger(__name__)

ENV_KEYS = {
    "MAPS_HOST": "maps_host",
    "MAPS_API_KEY": "maps_api_key",
    "LIDL_STOCK_API": "stock_api",
    "STORE_CACHE_PATH": "store_cache",
    "LIDL_HTTP_TIMEOUT": "timeout_seconds",
}


class ConfigError(RuntimeError):
    pass


def load_config(
    config_path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    payload: dict[str, object] = {}
    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"config file not found: {path}")
        payload.update(yaml.safe_load(path.read_text(encoding="utf-8")) or {})

    if environ is None:
        load_dotenv()
        environ = os.environ

    for env_key, field in ENV_KEYS.items():
        value = environ.get(env_key)
        if value:
            payload[field] = value

    if not payload.get("stock_api"):
        raise ConfigError("Missing environment variable: LIDL_STOCK_API")

    try:
        config = AppConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc

    LOG.debug("loaded config cache=%s stock_api=%s", config.store_cache, config.stock_api)
    return config
