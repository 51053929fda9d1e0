"""Asset assembly and marketplace write paths."""

from rwa_market.assets.assembler import EntityAssembler
from rwa_market.assets.mapping import build_asset, placeholder_owner, shorten_wallet

__all__ = ["EntityAssembler", "build_asset", "placeholder_owner", "shorten_wallet"]
