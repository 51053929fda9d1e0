"""Shared test fixtures.

Remote services are faked behind ``httpx.MockTransport``: ``FakePostgrest``
keeps tables in memory and answers the subset of PostgREST the store
connector speaks, ``FakeChain`` answers JSON-RPC and the price feed.
"""

from __future__ import annotations

import itertools
import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session

from rwa_market.config import ChainConfig, PinningConfig, StoreConfig
from rwa_market.connectors import ChainConnector, PinningConnector, StoreConnector
from rwa_market.db.base import Base
from rwa_market.resilience import RecordingErrorSink, SafeCallExecutor

STORE_TABLES = (
    "assets",
    "users",
    "bids",
    "activities",
    "notifications",
    "transactions",
    "price_history",
    "platform_stats",
    "profiles",
)

STORE_CONFIG = StoreConfig(url="https://store.test", anon_key="anon-key")
CHAIN_CONFIG = ChainConfig(
    rpc_url="https://chain.test/v2/rpc-key",
    price_url="https://prices.test/simple/price",
)
PINNING_CONFIG = PinningConfig(jwt="pin-jwt", api_url="https://pinning.test")

_OBJECT = "application/vnd.pgrst.object+json"
_EPOCH = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _clear_market_env(monkeypatch):
    for name in (
        "MARKET_STORE_URL",
        "MARKET_STORE_ANON_KEY",
        "MARKET_CHAIN_RPC_URL",
        "MARKET_PINNING_JWT",
        "MARKET_WALLET_PROJECT_ID",
        "MARKET_DATABASE_URL",
        "MARKET_LOG_LEVEL",
        "MARKET_LOG_FORMAT",
        "MARKET_CONFIG_PATH",
    ):
        monkeypatch.delenv(name, raising=False)


class FakePostgrest:
    """In-memory PostgREST. Tables missing from ``tables`` answer 42P01."""

    def __init__(self, tables=STORE_TABLES):
        self.tables: dict[str, list[dict]] = {name: [] for name in tables}
        self.requests: list[httpx.Request] = []
        self.offline = False
        self._failures: dict[tuple[str, str], tuple[int, dict]] = {}
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)

    # --- test helpers ---

    def seed(self, table: str, *rows: dict) -> None:
        for row in rows:
            self.tables[table].append(self._with_defaults(table, dict(row)))

    def fail(self, table: str, *, method: str = "*", status: int = 400, code: str | None = None,
             message: str = "boom") -> None:
        self._failures[(method, table)] = (status, {"code": code, "message": message, "hint": None})

    def requests_to(self, table: str, method: str | None = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.url.path.endswith(f"/{table}") and (method is None or r.method == method)
        ]

    # --- transport ---

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)

        table = request.url.path.rsplit("/", 1)[-1]
        failure = self._failures.get((request.method, table)) or self._failures.get(("*", table))
        if failure is not None:
            status, body = failure
            return httpx.Response(status, json=body)
        if table not in self.tables:
            return httpx.Response(404, json={
                "code": "42P01",
                "message": f'relation "public.{table}" does not exist',
                "hint": None,
            })

        if request.method == "GET":
            return self._select(request, table)
        if request.method == "POST":
            return self._insert(request, table)
        if request.method == "PATCH":
            return self._update(request, table)
        return httpx.Response(405)

    def _select(self, request: httpx.Request, table: str) -> httpx.Response:
        params = request.url.params
        rows = [r for r in self.tables[table] if self._matches(r, params)]

        order = params.get("order")
        if order:
            column, _, direction = order.partition(".")
            rows.sort(key=lambda r: str(r.get(column) or ""), reverse=direction == "desc")
        if "limit" in params:
            rows = rows[: int(params["limit"])]

        columns = params.get("select", "*")
        if columns != "*":
            wanted = columns.split(",")
            rows = [{c: r.get(c) for c in wanted} for r in rows]

        if request.headers.get("accept") == _OBJECT:
            if len(rows) != 1:
                return httpx.Response(406, json={
                    "code": "PGRST116",
                    "message": "JSON object requested, multiple (or no) rows returned",
                    "hint": None,
                })
            return httpx.Response(200, json=rows[0])
        return httpx.Response(200, json=rows)

    def _insert(self, request: httpx.Request, table: str) -> httpx.Response:
        row = json.loads(request.content)
        conflict = request.url.params.get("on_conflict")
        existing = None
        if conflict:
            existing = next((r for r in self.tables[table] if r.get(conflict) == row.get(conflict)), None)
        if existing is not None:
            existing.update(row)
            stored = existing
        else:
            stored = self._with_defaults(table, row)
            self.tables[table].append(stored)

        if "return=representation" in request.headers.get("prefer", ""):
            if request.headers.get("accept") == _OBJECT:
                return httpx.Response(201, json=stored)
            return httpx.Response(201, json=[stored])
        return httpx.Response(201)

    def _update(self, request: httpx.Request, table: str) -> httpx.Response:
        values = json.loads(request.content)
        for row in self.tables[table]:
            if self._matches(row, request.url.params):
                row.update(values)
        return httpx.Response(204)

    def _with_defaults(self, table: str, row: dict) -> dict:
        row.setdefault("id", f"{table[:3]}-{next(self._ids)}")
        stamp = (_EPOCH + timedelta(seconds=next(self._clock))).isoformat()
        row.setdefault("recorded_at" if table == "price_history" else "created_at", stamp)
        return row

    @staticmethod
    def _matches(row: dict, params: httpx.QueryParams) -> bool:
        for key, value in params.multi_items():
            if key in ("select", "order", "limit", "on_conflict"):
                continue
            if key == "or":
                clauses = _split_clauses(value[1:-1])
                if not any(_clause_matches(row, clause) for clause in clauses):
                    return False
                continue
            if value.startswith("eq.") and str(row.get(key)) != value[3:]:
                return False
        return True


def _split_clauses(body: str) -> list[str]:
    """Split a logic filter body on commas outside double quotes."""
    clauses, current, quoted, escaped = [], "", False, False
    for char in body:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char == '"':
            quoted = not quoted
        elif char == "," and not quoted:
            clauses.append(current)
            current = ""
            continue
        current += char
    clauses.append(current)
    return clauses


def _clause_matches(row: dict, clause: str) -> bool:
    column, op, expected = clause.split(".", 2)
    if len(expected) >= 2 and expected[0] == expected[-1] == '"':
        expected = expected[1:-1].replace('\\"', '"').replace("\\\\", "\\")
    return op == "eq" and str(row.get(column)) == expected


class FakeChain:
    """JSON-RPC node plus the simple-price endpoint."""

    def __init__(self, block_number: int = 1_000_000, price: float | None = 3200.0,
                 balance_wei: int = 1_500_000_000_000_000_000):
        self.block_number = block_number
        self.price = price
        self.balance_wei = balance_wei
        self.nfts: list[dict] = []
        self.offline = False
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)

        if request.url.host == "prices.test":
            if self.price is None:
                return httpx.Response(200, json={})
            return httpx.Response(200, json={"ethereum": {"usd": self.price}})
        if request.url.path.endswith("/getNFTsForOwner"):
            return httpx.Response(200, json={"ownedNfts": self.nfts, "totalCount": len(self.nfts)})

        payload = json.loads(request.content)
        if payload["method"] == "eth_blockNumber":
            result = hex(self.block_number)
        elif payload["method"] == "eth_getBalance":
            result = hex(self.balance_wei)
        else:
            return httpx.Response(200, json={
                "jsonrpc": "2.0", "id": payload["id"],
                "error": {"code": -32601, "message": "method not found"},
            })
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": result})


def pinning_transport(status: int = 200) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if status == 200:
            return httpx.Response(200, json={"message": "Congratulations! You are communicating with the Pinata API!"})
        return httpx.Response(status, json={"error": {"reason": "INVALID_CREDENTIALS"}})
    return httpx.MockTransport(handler)


@pytest.fixture
def sink():
    return RecordingErrorSink()


@pytest.fixture
def fake_store():
    return FakePostgrest()


@pytest.fixture
def fake_chain():
    return FakeChain()


@pytest.fixture
def store(fake_store, sink):
    return StoreConnector(
        STORE_CONFIG,
        executor=SafeCallExecutor("store", sink),
        transport=httpx.MockTransport(fake_store.handler),
    )


@pytest.fixture
def chain(fake_chain, sink):
    return ChainConnector(
        CHAIN_CONFIG,
        executor=SafeCallExecutor("chain", sink),
        transport=httpx.MockTransport(fake_chain.handler),
    )


@pytest.fixture
def pinning(sink):
    return PinningConnector(
        PINNING_CONFIG,
        executor=SafeCallExecutor("pinning", sink),
        transport=pinning_transport(),
    )


@pytest.fixture
def db_session():
    """In-memory SQLite session with all store tables created."""
    import rwa_market.db.tables  # noqa: F401

    engine = create_engine("sqlite:///:memory:")

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, _rec):
        dbapi_conn.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)

    session = Session(engine)
    yield session
    session.close()
    engine.dispose()
