"""Unit tests for the route API client"""

import httpx
import pytest
from decimal import Decimal
from route_ledger.domain.exceptions import DataSourceError
from route_ledger.infrastructure.clients.portfolio import PortfolioClient, extract_client_rows


def make_client(handler) -> PortfolioClient:
    return PortfolioClient(base_url="http://route-api.test", timeout=1.0, transport=httpx.MockTransport(handler))


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"success": True, "data": [{"a": 1}]}, [{"a": 1}]),
        ([{"a": 1}, {"b": 2}], [{"a": 1}, {"b": 2}]),
        ({"clientes": [{"a": 1}]}, [{"a": 1}]),
        ({"vendas": []}, []),
        ({"success": False, "message": "Nenhuma venda"}, []),
        ({"something": "else"}, []),
    ],
)
def test_extract_client_rows_shapes(payload, expected):
    assert extract_client_rows(payload) == expected


def test_extract_client_rows_rejects_scalars():
    with pytest.raises(DataSourceError):
        extract_client_rows("<html>")


async def test_get_client_records_parses_and_rejects(raw_record):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = request.url
        return httpx.Response(200, json={"success": True, "data": [raw_record, {"clientId": "broken"}]})

    parsed = await make_client(handler).get_client_records("user1", route_id="r9")

    assert seen["url"].path == "/portfolio/clients"
    assert seen["url"].params["user_id"] == "user1"
    assert seen["url"].params["route_id"] == "r9"
    assert [r.client_id for r in parsed.records] == ["c-100"]
    assert len(parsed.rejected) == 1


async def test_http_error_raises_data_source_error():
    client = make_client(lambda request: httpx.Response(502, text="bad gateway"))
    with pytest.raises(DataSourceError, match="502"):
        await client.get_client_records("user1")


async def test_non_json_body_raises_data_source_error():
    client = make_client(lambda request: httpx.Response(200, text="<html>maintenance</html>"))
    with pytest.raises(DataSourceError):
        await client.get_client_records("user1")


async def test_timeout_raises_data_source_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(DataSourceError, match="timeout"):
        await make_client(handler).get_client_records("user1")


async def test_fetch_dashboard_snapshot(raw_record):
    overdue = dict(
        raw_record,
        clientId="c-200",
        overdueBucket={"count": 1, "totalAmount": 50, "items": [{"amount": 50, "dueDate": "2020-01-01"}]},
    )
    client = make_client(lambda request: httpx.Response(200, json=[raw_record, overdue]))

    snapshot = await client.fetch_dashboard_snapshot("user1")

    assert snapshot.metrics.count_upcoming == 1
    assert snapshot.metrics.count_delinquent == 1
    assert snapshot.metrics.total_overdue == Decimal("50")
    assert snapshot.alerts.clients_long_overdue == 1
    assert snapshot.alerts.top_debtors[0].client_id == "c-200"
