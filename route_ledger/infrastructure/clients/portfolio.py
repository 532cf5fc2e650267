"""Route API HTTP client for fetching raw client/installment records"""

import logging
from datetime import date
from typing import Any, List

import httpx

from route_ledger.config import settings
from route_ledger.domain.aggregation import build_snapshot
from route_ledger.domain.classification import classify_all
from route_ledger.domain.exceptions import DataSourceError
from route_ledger.domain.models import DashboardSnapshot
from route_ledger.domain.records import ParsedRecords, parse_client_records
from route_ledger.infrastructure.observability.metrics import portfolio_fetch_failures_counter, record_rejections


def extract_client_rows(payload: Any) -> List[Any]:
    """
    Pull the list of raw client records out of a response body.

    Known shapes:
    - {"success": true, "data": [...]}
    - [...]
    - {"vendas": [...]} or {"clientes": [...]}
    An explicit failure flag or an unknown object means "no clients".
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        raise DataSourceError(f"Unexpected response body type: {type(payload).__name__}")

    if payload.get("success") and isinstance(payload.get("data"), list):
        return payload["data"]
    if payload.get("success") is False or payload.get("error") or payload.get("message"):
        return []
    for key in ("vendas", "clientes"):
        if isinstance(payload.get(key), list):
            return payload[key]

    logging.info("Unknown response shape from route API, treating as empty", extra={"keys": sorted(payload)})
    return []


class PortfolioClient:
    """Client for the external route/portfolio API"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.portfolio_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_client_records(self, user_id: str, route_id: str | None = None) -> ParsedRecords:
        """
        Fetch the raw client records visible to a user, optionally for one route.

        Malformed records are rejected individually and counted.

        Raises:
            DataSourceError: On timeout, HTTP errors, or a non-JSON response
        """
        params = {"user_id": user_id}
        if route_id is not None:
            params["route_id"] = route_id

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.get(f"{self.base_url}/portfolio/clients", params=params)
                response.raise_for_status()
                rows = extract_client_rows(response.json())

            except httpx.TimeoutException as e:
                portfolio_fetch_failures_counter.inc()
                raise DataSourceError(f"Route API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                portfolio_fetch_failures_counter.inc()
                raise DataSourceError(f"Route API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                portfolio_fetch_failures_counter.inc()
                raise DataSourceError(f"Route API unreachable: {e}") from e
            except ValueError as e:
                portfolio_fetch_failures_counter.inc()
                raise DataSourceError("Route API returned a non-JSON body") from e
            except DataSourceError:
                portfolio_fetch_failures_counter.inc()
                raise

        parsed = parse_client_records(rows)
        record_rejections(len(parsed.rejected))
        return parsed

    async def fetch_dashboard_snapshot(self, user_id: str) -> DashboardSnapshot:
        """Fetch all of a user's clients and fold them into a dashboard snapshot"""
        parsed = await self.get_client_records(user_id)
        return build_snapshot(
            classify_all(parsed.records),
            today=date.today(),
            long_overdue_days=settings.long_overdue_days,
            debtors_limit=settings.top_debtors_limit,
        )
