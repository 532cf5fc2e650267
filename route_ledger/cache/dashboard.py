"""Single-slot dashboard cache with TTL and owner checks evaluated at read time"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, Optional

from route_ledger.cache.stores import KeyValueStore
from route_ledger.config import settings
from route_ledger.domain.exceptions import CacheReadError, CacheWriteError
from route_ledger.domain.models import DashboardSnapshot, DebtorSummary, PortfolioAlerts, PortfolioMetrics
from route_ledger.infrastructure.observability.logging import log_cache_lookup
from route_ledger.infrastructure.observability.metrics import cache_lookup_counter, cache_write_failures_counter
from route_ledger.utils.date_utils import now_ms


class CacheState(str, Enum):
    EMPTY = "empty"
    FRESH = "fresh"
    STALE = "stale"


@dataclass(frozen=True)
class CacheEntry:
    """The one cached snapshot, stamped with capture time and owner"""

    snapshot: DashboardSnapshot
    captured_at_ms: int
    owner_user_id: str

    def age_ms(self, now: int) -> int:
        return now - self.captured_at_ms

    def is_stale(self, current_user_id: Optional[str], now: int, ttl_ms: int) -> bool:
        return self.age_ms(now) > ttl_ms or self.owner_user_id != current_user_id


def snapshot_to_dict(snapshot: DashboardSnapshot) -> Dict[str, Any]:
    """JSON-safe form of a snapshot (decimals as strings)"""
    m = snapshot.metrics
    a = snapshot.alerts
    return {
        "metrics": {
            "countOnTime": m.count_on_time,
            "countUpcoming": m.count_upcoming,
            "countDelinquent": m.count_delinquent,
            "countNoInstallments": m.count_no_installments,
            "totalPaid": str(m.total_paid),
            "totalOverdue": str(m.total_overdue),
            "totalUpcoming": str(m.total_upcoming),
            "delinquencyRatePct": str(m.delinquency_rate_pct),
        },
        "alerts": {
            "installmentsDueToday": a.installments_due_today,
            "clientsLongOverdue": a.clients_long_overdue,
            "topDebtors": [
                {
                    "clientId": d.client_id,
                    "displayName": d.display_name,
                    "overdueAmount": str(d.overdue_amount),
                }
                for d in a.top_debtors
            ],
        },
    }


def snapshot_from_dict(data: Dict[str, Any]) -> DashboardSnapshot:
    m = data["metrics"]
    a = data.get("alerts") or {}
    return DashboardSnapshot(
        metrics=PortfolioMetrics(
            count_on_time=int(m["countOnTime"]),
            count_upcoming=int(m["countUpcoming"]),
            count_delinquent=int(m["countDelinquent"]),
            count_no_installments=int(m.get("countNoInstallments", 0)),
            total_paid=Decimal(m["totalPaid"]),
            total_overdue=Decimal(m["totalOverdue"]),
            total_upcoming=Decimal(m["totalUpcoming"]),
            delinquency_rate_pct=Decimal(m["delinquencyRatePct"]),
        ),
        alerts=PortfolioAlerts(
            installments_due_today=int(a.get("installmentsDueToday", 0)),
            clients_long_overdue=int(a.get("clientsLongOverdue", 0)),
            top_debtors=tuple(
                DebtorSummary(
                    client_id=d["clientId"],
                    display_name=d["displayName"],
                    overdue_amount=Decimal(d["overdueAmount"]),
                )
                for d in a.get("topDebtors", [])
            ),
        ),
    )


def encode_entry(entry: CacheEntry) -> str:
    """Envelope persisted under the cache key: {data, timestamp, userId}"""
    return json.dumps(
        {
            "data": snapshot_to_dict(entry.snapshot),
            "timestamp": entry.captured_at_ms,
            "userId": entry.owner_user_id,
        }
    )


def decode_entry(raw: str) -> CacheEntry:
    """
    Raises:
        CacheReadError: envelope is not valid JSON, misses fields or has the wrong shape
    """
    try:
        envelope = json.loads(raw)
        return CacheEntry(
            snapshot=snapshot_from_dict(envelope["data"]),
            captured_at_ms=int(envelope["timestamp"]),
            owner_user_id=str(envelope["userId"]),
        )
    except (ValueError, KeyError, TypeError, AttributeError, InvalidOperation) as e:
        raise CacheReadError(f"Corrupt cache envelope: {e}") from e


class DashboardCache:
    """
    Holds at most one dashboard snapshot per device.

    The entry is considered absent when it is older than the TTL or belongs
    to another user. Both checks happen on every read; nothing is evicted at
    write or login time. Persistence failures never propagate: a failed
    write leaves the in-memory entry as the source of truth for the session.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_ms: int | None = None,
        key: str | None = None,
        clock: Callable[[], int] = now_ms,
    ):
        self.store = store
        self.ttl_ms = ttl_ms if ttl_ms is not None else settings.dashboard_cache_ttl_ms
        self.key = key or settings.dashboard_cache_key
        self.clock = clock
        self._entry: Optional[CacheEntry] = None

    async def _load_entry(self) -> Optional[CacheEntry]:
        if self._entry is not None:
            return self._entry

        try:
            raw = await self.store.get(self.key)
            if raw is None:
                return None
            self._entry = decode_entry(raw)
        except CacheReadError as e:
            cache_lookup_counter.labels(outcome="read_error").inc()
            logging.warning(f"Dashboard cache read failed: {e}", extra={"cache_key": self.key})
            return None

        return self._entry

    async def lookup(self, current_user_id: str) -> Optional[CacheEntry]:
        """Return the entry if it is fresh and owned by `current_user_id`"""
        entry = await self._load_entry()
        if entry is None:
            outcome = "miss"
        elif entry.owner_user_id != current_user_id:
            outcome = "foreign_user"
        elif entry.age_ms(self.clock()) > self.ttl_ms:
            outcome = "expired"
        else:
            outcome = "hit"

        cache_lookup_counter.labels(outcome=outcome).inc()
        log_cache_lookup(
            current_user_id,
            outcome,
            age_ms=entry.age_ms(self.clock()) if entry is not None else None,
        )
        return entry if outcome == "hit" else None

    async def get(self, current_user_id: str) -> Optional[DashboardSnapshot]:
        entry = await self.lookup(current_user_id)
        return entry.snapshot if entry is not None else None

    async def state(self, current_user_id: str) -> CacheState:
        entry = await self._load_entry()
        if entry is None:
            return CacheState.EMPTY
        if entry.is_stale(current_user_id, self.clock(), self.ttl_ms):
            return CacheState.STALE
        return CacheState.FRESH

    async def put(
        self, snapshot: DashboardSnapshot, owner_user_id: str, captured_at_ms: Optional[int] = None
    ) -> bool:
        """
        Overwrite the slot (last writer wins).

        Returns False when the snapshot could only be kept in memory.
        """
        if captured_at_ms is None:
            captured_at_ms = self.clock()
        entry = CacheEntry(snapshot=snapshot, captured_at_ms=captured_at_ms, owner_user_id=owner_user_id)
        self._entry = entry

        try:
            await self.store.set(self.key, encode_entry(entry))
        except CacheWriteError as e:
            cache_write_failures_counter.inc()
            logging.error(
                f"Dashboard cache write failed: {e}",
                extra={"cache_key": self.key, "user_id": owner_user_id},
            )
            return False
        return True

    async def clear(self) -> None:
        """Best-effort removal of the slot"""
        self._entry = None
        try:
            await self.store.delete(self.key)
        except CacheWriteError as e:
            cache_write_failures_counter.inc()
            logging.warning(f"Dashboard cache delete failed: {e}", extra={"cache_key": self.key})
