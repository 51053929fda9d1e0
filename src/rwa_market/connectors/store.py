"""Store connector: the relational backend reached through its PostgREST API.

Requests go to ``{url}/rest/v1/{table}`` with the anon key in both the
``apikey`` and ``Authorization`` headers. PostgREST reports failures as
``{"code", "message", "hint", "details"}`` bodies; the Postgres error codes
in there are what separates a missing table from a blocked policy.
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from rwa_market.config import StoreConfig
from rwa_market.connectors.base import HttpConnector, elapsed_ms
from rwa_market.logging import get_logger
from rwa_market.models import StoreHealth
from rwa_market.resilience import CallResult, ErrorKind, RemoteError, SafeCallExecutor

log = get_logger("store")

PROBE_TABLES = ("assets", "bids", "transactions", "notifications")

NO_ROWS = "PGRST116"
UNDEFINED_TABLE = "42P01"
TABLE_NOT_IN_SCHEMA_CACHE = "PGRST205"
INSUFFICIENT_PRIVILEGE = "42501"

_OBJECT = "application/vnd.pgrst.object+json"


def classify_response(resp: httpx.Response) -> RemoteError:
    """Turn a non-2xx PostgREST response into a classified ``RemoteError``."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}

    code = body.get("code")
    code = str(code) if code is not None else None
    message = body.get("message") or resp.text or f"{resp.status_code} {resp.reason_phrase}"
    lowered = message.lower()

    if code in (UNDEFINED_TABLE, TABLE_NOT_IN_SCHEMA_CACHE) or "does not exist" in lowered:
        kind = ErrorKind.SCHEMA
    elif code == INSUFFICIENT_PRIVILEGE or "permission denied" in lowered:
        kind = ErrorKind.PERMISSION
    else:
        kind = ErrorKind.REMOTE

    return RemoteError(
        message=message,
        kind=kind,
        code=code,
        hint=body.get("hint"),
        status=resp.status_code,
    )


def quote_filter_value(value: str) -> str:
    """Double-quote a value for a PostgREST logic filter so commas and parens stay literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'

class StoreConnector(HttpConnector):
    """Async client for the marketplace store."""

    service = "store"

    def __init__(
        self,
        config: StoreConfig,
        executor: SafeCallExecutor | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(
            configured=config.configured,
            timeout_s=config.timeout_s,
            executor=executor,
            transport=transport,
        )
        self.config = config

    def _client_kwargs(self) -> dict[str, Any]:
        key = self.config.anon_key or ""
        return {
            "base_url": self.config.rest_url,
            "headers": {"apikey": key, "Authorization": f"Bearer {key}"},
        }

    # --- Raw table access (returns CallResult, never raises) ---

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> CallResult[Any]:
        if not self.is_configured():
            return CallResult.failure(RemoteError.not_configured(self.service))

        http = await self._get_http()
        try:
            resp = await http.request(method, f"/{table}", params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            return CallResult.failure(RemoteError.from_exception(exc))

        if not resp.is_success:
            return CallResult.failure(classify_response(resp))
        if not resp.content:
            return CallResult.success(None)
        try:
            return CallResult.success(resp.json())
        except ValueError:
            return CallResult.failure(RemoteError(
                message=f"store returned a non-JSON body for {table}",
                status=resp.status_code,
            ))

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        filters: dict[str, str] | None = None,
        order: str | None = None,
        ascending: bool = False,
        limit: int | None = None,
        single: bool = False,
        extra_params: dict[str, str] | None = None,
    ) -> CallResult[Any]:
        """Read rows. ``filters`` are column equality matches.

        With ``single=True`` the payload is one object, or None when no row
        matches; zero rows is an empty result, not a failure.
        """
        params: dict[str, Any] = {"select": columns}
        for column, value in (filters or {}).items():
            params[column] = f"eq.{value}"
        if order:
            params["order"] = f"{order}.{'asc' if ascending else 'desc'}"
        if limit is not None:
            params["limit"] = limit
        if extra_params:
            params.update(extra_params)

        headers = {"Accept": _OBJECT} if single else None
        result = await self._request("GET", table, params=params, headers=headers)
        if single and result.error is not None and result.error.code == NO_ROWS:
            return CallResult.success(None)
        return result

    async def insert(self, table: str, row: dict[str, Any], *, returning: bool = False) -> CallResult[Any]:
        if returning:
            headers = {"Prefer": "return=representation", "Accept": _OBJECT}
        else:
            headers = {"Prefer": "return=minimal"}
        return await self._request("POST", table, json=row, headers=headers)

    async def update(self, table: str, values: dict[str, Any], *, filters: dict[str, str]) -> CallResult[Any]:
        params = {column: f"eq.{value}" for column, value in filters.items()}
        return await self._request(
            "PATCH", table, params=params, json=values, headers={"Prefer": "return=minimal"},
        )

    async def upsert(
        self, table: str, row: dict[str, Any], *, on_conflict: str, returning: bool = False,
    ) -> CallResult[Any]:
        if returning:
            headers = {"Prefer": "resolution=merge-duplicates,return=representation", "Accept": _OBJECT}
        else:
            headers = {"Prefer": "resolution=merge-duplicates,return=minimal"}
        return await self._request(
            "POST", table, params={"on_conflict": on_conflict}, json=row, headers=headers,
        )

    # --- Writes (the caller decides what a failure means) ---

    async def insert_asset(self, row: dict[str, Any]) -> CallResult[dict]:
        return await self.insert("assets", row, returning=True)

    async def insert_bid(self, row: dict[str, Any]) -> CallResult[dict]:
        return await self.insert("bids", row, returning=True)

    async def insert_transaction(self, row: dict[str, Any]) -> CallResult[dict]:
        return await self.insert("transactions", row, returning=True)

    async def insert_activity(self, row: dict[str, Any]) -> CallResult[None]:
        return await self.insert("activities", row)

    async def insert_notification(self, row: dict[str, Any]) -> CallResult[None]:
        return await self.insert("notifications", row)

    async def update_asset(self, asset_id: str, values: dict[str, Any]) -> CallResult[None]:
        return await self.update("assets", values, filters={"id": asset_id})

    async def update_user(self, user_id: str, values: dict[str, Any]) -> CallResult[None]:
        return await self.update("users", values, filters={"id": user_id})

    async def upsert_profile(self, row: dict[str, Any]) -> CallResult[dict]:
        return await self.upsert("profiles", row, on_conflict="wallet", returning=True)

    # --- Functional reads (fall back silently) ---

    async def fetch_assets(self) -> list[dict]:
        return await self.executor.execute(
            lambda: self.select("assets", order="created_at"), [], method="fetch_assets",
        )

    async def fetch_asset(self, asset_id: str) -> dict | None:
        return await self.executor.execute(
            lambda: self.select("assets", filters={"id": asset_id}, single=True),
            None,
            method="fetch_asset",
        )

    async def fetch_asset_summary(self, asset_id: str) -> dict | None:
        """Name and current owner only; used by the write paths."""
        return await self.executor.execute(
            lambda: self.select("assets", columns="name,owner_id", filters={"id": asset_id}, single=True),
            None,
            method="fetch_asset_summary",
        )

    async def fetch_user(self, user_id: str) -> dict | None:
        return await self.executor.execute(
            lambda: self.select("users", filters={"id": user_id}, single=True),
            None,
            method="fetch_user",
        )

    async def fetch_bids(self, asset_id: str) -> list[dict]:
        return await self.executor.execute(
            lambda: self.select("bids", filters={"asset_id": asset_id}, order="created_at"),
            [],
            method="fetch_bids",
        )

    async def fetch_activities(self, asset_id: str) -> list[dict]:
        return await self.executor.execute(
            lambda: self.select("activities", filters={"asset_id": asset_id}, order="created_at"),
            [],
            method="fetch_activities",
        )

    async def fetch_price_history(self, asset_id: str) -> list[dict]:
        return await self.executor.execute(
            lambda: self.select(
                "price_history", filters={"asset_id": asset_id}, order="recorded_at", ascending=True,
            ),
            [],
            method="fetch_price_history",
        )

    async def fetch_platform_stats(self) -> dict | None:
        return await self.executor.execute(
            lambda: self.select("platform_stats", limit=1, single=True),
            None,
            method="fetch_platform_stats",
        )

    async def fetch_notifications(self, user_id: str) -> list[dict]:
        return await self.executor.execute(
            lambda: self.select("notifications", filters={"user_id": user_id}, order="created_at"),
            [],
            method="fetch_notifications",
        )

    async def fetch_transactions(self, wallet: str) -> list[dict]:
        quoted = quote_filter_value(wallet)
        either_side = {"or": f"(from_address.eq.{quoted},to_address.eq.{quoted})"}
        return await self.executor.execute(
            lambda: self.select("transactions", order="created_at", extra_params=either_side),
            [],
            method="fetch_transactions",
        )

    # --- Health probe ---

    async def test_connection(self) -> StoreHealth:
        if not self.is_configured():
            log.info("store_not_configured")
            return StoreHealth(configured=False, error="Store URL or anon key not set")

        start = time.monotonic()
        result = await self.executor.capture(
            lambda: self.select("assets", columns="id", limit=1),
            method="test_connection",
            report=False,
        )
        latency_ms = elapsed_ms(start)

        if result.error is not None:
            log.warning(
                "store_read_probe_failed",
                kind=result.error.kind.value,
                code=result.error.code,
                error=result.error.message,
            )
            return _failed_probe(result.error, latency_ms)

        tables = await self._reachable_tables()
        log.info("store_probe_ok", latency_ms=latency_ms, tables=tables)
        return StoreHealth(
            configured=True,
            connected=True,
            can_read=True,
            # A readable primary table stands in for write access; a real
            # write probe would leave rows behind.
            can_write="assets" in tables,
            latency_ms=latency_ms,
            tables=tables,
        )

    async def _reachable_tables(self) -> list[str]:
        tables: list[str] = []
        for table in PROBE_TABLES:
            result = await self.executor.capture(
                lambda t=table: self.select(t, columns="id", limit=1),
                method="probe_table",
                report=False,
            )
            if result.ok:
                tables.append(table)
            else:
                log.info("store_table_unreachable", table=table, error=result.error.message)
        return tables


def _failed_probe(error: RemoteError, latency_ms: int) -> StoreHealth:
    if error.kind is ErrorKind.TRANSPORT:
        return StoreHealth(
            configured=True,
            connected=False,
            latency_ms=latency_ms,
            error=f"Network error: {error.message}. Check the store URL.",
        )
    if error.kind is ErrorKind.SCHEMA:
        message = (
            "Tables not created yet. Provision the store schema "
            "(assets, bids, transactions, notifications, ...)."
        )
    elif error.kind is ErrorKind.PERMISSION:
        message = "Row-level security policy blocking access. Add a SELECT policy for the anon role on assets."
    else:
        message = error.message
    return StoreHealth(configured=True, connected=True, latency_ms=latency_ms, error=message)
