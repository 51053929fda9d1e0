"""Store schema: ORM base and the marketplace tables."""

from rwa_market.db.base import Base
from rwa_market.db.engine import ensure_psycopg_driver

__all__ = ["Base", "ensure_psycopg_driver"]
