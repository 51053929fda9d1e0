"""Config loader: reads YAML, applies MARKET_* env var overrides."""

from __future__ import annotations

import os
from pathlib import Path

import yaml

from rwa_market.config.schema import AppConfig

# env var -> (section, key)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "MARKET_STORE_URL": ("store", "url"),
    "MARKET_STORE_ANON_KEY": ("store", "anon_key"),
    "MARKET_CHAIN_RPC_URL": ("chain", "rpc_url"),
    "MARKET_PINNING_JWT": ("pinning", "jwt"),
    "MARKET_WALLET_PROJECT_ID": ("wallet_protocol", "project_id"),
    "MARKET_DATABASE_URL": ("database", "url"),
    "MARKET_LOG_LEVEL": ("logging", "level"),
    "MARKET_LOG_FORMAT": ("logging", "format"),
}


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from a YAML file, then apply env var overrides.

    If *path* is None or the file doesn't exist, returns defaults (every
    remote service unconfigured). Blank env vars are ignored so an exported
    but empty ``MARKET_STORE_URL`` never masks the YAML value.
    """
    data: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p) as f:
                data = yaml.safe_load(f) or {}

    for env_name, (section, key) in ENV_OVERRIDES.items():
        value = os.environ.get(env_name, "").strip()
        if value:
            data.setdefault(section, {})[key] = value

    return AppConfig.model_validate(data)
