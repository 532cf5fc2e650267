"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Iterable, Tuple
from route_ledger.domain.aggregation import build_snapshot
from route_ledger.domain.classification import classify
from route_ledger.domain.models import ClassifiedClient, ClientRecord, Installment, InstallmentBucket

TODAY = date(2025, 6, 15)

Items = Iterable[Tuple[str, date]]


def bucket(items: Items = ()) -> InstallmentBucket:
    return InstallmentBucket.from_items(tuple(Installment(amount=Decimal(a), due_date=d) for a, d in items))


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def make_client() -> Callable[..., ClassifiedClient]:
    """Factory for classified clients from (amount, due_date) tuples per bucket"""

    def _make(
        client_id: str = "c1",
        name: str = "Ana Souza",
        paid: Items = (),
        overdue: Items = (),
        upcoming: Items = (),
        phone: str | None = None,
    ) -> ClassifiedClient:
        record = ClientRecord(
            client_id=client_id,
            display_name=name,
            contact_phone=phone,
            paid_bucket=bucket(paid),
            overdue_bucket=bucket(overdue),
            upcoming_bucket=bucket(upcoming),
        )
        return classify(record)

    return _make


@pytest.fixture
def sample_clients(make_client) -> list[ClassifiedClient]:
    """A small route: one of each status, in non-alphabetical order"""
    past = TODAY - timedelta(days=40)
    future = TODAY + timedelta(days=20)
    return [
        make_client("c1", "Carlos Lima", paid=[("150.00", past)], upcoming=[("150.00", future)]),
        make_client("c2", "ana souza", paid=[("200.00", past), ("200.00", past)]),
        make_client("c3", "Bruno Dias", paid=[("100.00", past)], overdue=[("300.00", past)]),
        make_client("c4", "Érica Alves"),
        make_client("c5", "Beatriz Rocha", upcoming=[("80.00", future)]),
    ]


@pytest.fixture
def raw_record() -> dict:
    """Wire-format record as returned by the route API"""
    return {
        "clientId": "c-100",
        "displayName": "Maria Oliveira",
        "contactPhone": "5511999990000",
        "paidBucket": {
            "count": 1,
            "totalAmount": 120.5,
            "items": [{"amount": 120.5, "dueDate": "2025-05-10"}],
        },
        "overdueBucket": {"count": 0, "totalAmount": 0, "items": []},
        "upcomingBucket": {
            "count": 2,
            "totalAmount": 241,
            "items": [
                {"amount": 120.5, "dueDate": "2025-07-10"},
                {"amount": 120.5, "dueDate": "2025-08-10"},
            ],
        },
    }


class FakeClock:
    """Controllable epoch-ms clock"""

    def __init__(self, now: int = 1_750_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def snapshot(sample_clients, today):
    return build_snapshot(sample_clients, today)
