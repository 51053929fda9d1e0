"""Run one connection test cycle: python -m rwa_market.health [--config path]."""

import argparse
import asyncio

from rwa_market.config import AppConfig, load_config
from rwa_market.logging import setup_logging
from rwa_market.services import build_services


async def _run(cfg: AppConfig) -> str:
    services = build_services(cfg)
    try:
        snapshot = await services.health.test_all()
    finally:
        await services.aclose()
    return snapshot.model_dump_json(by_alias=True, indent=2)


parser = argparse.ArgumentParser(description="Test connections to the store, chain and pinning services")
parser.add_argument("--config", default=None, help="Path to config.yaml")
args = parser.parse_args()

cfg = load_config(args.config)
setup_logging(level=cfg.logging.level, log_format=cfg.logging.format)
print(asyncio.run(_run(cfg)))
