"""Single owner of the process-wide connection snapshot."""

from __future__ import annotations

from rwa_market.models import ConnectionStatusSnapshot


class ConnectionStatusStore:
    """Holds the latest snapshot and the in-flight ``testing`` flag.

    All transitions are synchronous, so on one event loop a reader sees
    either the previous snapshot or the next one, never a partial update.
    """

    def __init__(self, initial: ConnectionStatusSnapshot) -> None:
        self._snapshot = initial
        self._testing = False

    @property
    def snapshot(self) -> ConnectionStatusSnapshot:
        return self._snapshot

    @property
    def testing(self) -> bool:
        return self._testing

    def try_begin(self) -> bool:
        """Claim the cycle. False when one is already running."""
        if self._testing:
            return False
        self._testing = True
        return True

    def publish(self, snapshot: ConnectionStatusSnapshot) -> None:
        self._snapshot = snapshot
        self._testing = False

    def abort(self) -> None:
        self._testing = False
