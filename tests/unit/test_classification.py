"""Unit tests for the installment classifier"""

import pytest
from datetime import date
from decimal import Decimal
from route_ledger.domain.classification import classify, classify_all, derive_status
from route_ledger.domain.models import ClientRecord, InstallmentBucket, PaymentStatus

D = date(2025, 1, 1)


def test_overdue_wins_over_everything(make_client):
    """A single overdue installment marks the client delinquent"""
    client = make_client(
        paid=[("100", D)] * 5,
        overdue=[("1", D)],
        upcoming=[("100", D)] * 3,
    )
    assert client.status == PaymentStatus.DELINQUENT


def test_upcoming_beats_paid(make_client):
    client = make_client(paid=[("100", D)], upcoming=[("100", D)])
    assert client.status == PaymentStatus.UPCOMING


def test_only_paid_is_on_time(make_client):
    client = make_client(paid=[("100", D), ("50", D)])
    assert client.status == PaymentStatus.ON_TIME


def test_all_empty_is_no_installments(make_client):
    assert make_client().status == PaymentStatus.NO_INSTALLMENTS


def test_classification_ignores_amounts():
    """Summary-only buckets: count drives status even when the total is zero"""
    record = ClientRecord(
        client_id="x",
        display_name="X",
        overdue_bucket=InstallmentBucket(count=1, total_amount=Decimal("0")),
        paid_bucket=InstallmentBucket(count=0, total_amount=Decimal("999")),
    )
    assert derive_status(record) == PaymentStatus.DELINQUENT


def test_classify_does_not_touch_record(make_client):
    client = make_client(paid=[("10", D)])
    again = classify(client.record)
    assert again == client
    assert again.record is client.record


def test_classified_client_is_immutable(make_client):
    client = make_client()
    with pytest.raises(AttributeError):
        client.status = PaymentStatus.DELINQUENT


def test_classify_all_preserves_order(make_client):
    records = [make_client(client_id=str(i)).record for i in range(5)]
    assert [c.client_id for c in classify_all(records)] == ["0", "1", "2", "3", "4"]
