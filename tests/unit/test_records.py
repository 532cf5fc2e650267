"""Unit tests for raw record parsing and validation"""

import pytest
from datetime import date
from decimal import Decimal
from route_ledger.domain.exceptions import MalformedRecordError
from route_ledger.domain.records import parse_client_record, parse_client_records


def test_parse_camel_case_record(raw_record):
    record = parse_client_record(raw_record)

    assert record.client_id == "c-100"
    assert record.display_name == "Maria Oliveira"
    assert record.contact_phone == "5511999990000"
    assert record.paid_bucket.count == 1
    assert record.paid_bucket.total_amount == Decimal("120.5")
    assert record.upcoming_bucket.items[0].due_date == date(2025, 7, 10)
    assert record.overdue_bucket.is_empty


def test_missing_contact_phone_is_tolerated(raw_record):
    del raw_record["contactPhone"]
    assert parse_client_record(raw_record).contact_phone is None


def test_parse_legacy_field_names():
    """Older route API deployments send Portuguese field names"""
    raw = {
        "cliente_id": 42,
        "nomeCliente": "João Pereira",
        "parcelasPagas": {"quantidade": 0, "valor": 0, "parcelas": []},
        "parcelasVencidas": {
            "quantidade": 1,
            "valor": 15000.0,
            "parcelas": [{"valor": 15000.0, "dataVencimento": "2025-02-10T03:00:00.000Z"}],
        },
        "parcelasAVencer": {"quantidade": 0, "valor": 0, "parcelas": []},
    }
    record = parse_client_record(raw)

    assert record.client_id == "42"
    assert record.display_name == "João Pereira"
    assert record.overdue_bucket.count == 1
    assert record.overdue_bucket.total_amount == Decimal("15000")
    assert record.overdue_bucket.items[0].due_date == date(2025, 2, 10)


def test_bucket_summary_recomputed_from_items(raw_record):
    """Declared count/total that disagree with the items are not trusted"""
    raw_record["upcomingBucket"]["count"] = 7
    raw_record["upcomingBucket"]["totalAmount"] = 1
    record = parse_client_record(raw_record)

    assert record.upcoming_bucket.count == 2
    assert record.upcoming_bucket.total_amount == Decimal("241.0")


def test_summary_only_bucket_kept(raw_record):
    raw_record["paidBucket"] = {"count": 3, "totalAmount": 300}
    record = parse_client_record(raw_record)

    assert record.paid_bucket.count == 3
    assert record.paid_bucket.total_amount == Decimal("300")
    assert record.paid_bucket.items == ()


@pytest.mark.parametrize(
    "mutate",
    [
        lambda r: r.pop("overdueBucket"),
        lambda r: r.pop("displayName"),
        lambda r: r.pop("clientId"),
        lambda r: r["paidBucket"].update(count=-1, items=None),
        lambda r: r["paidBucket"]["items"][0].update(amount=-5),
        lambda r: r["upcomingBucket"]["items"][0].update(dueDate="not-a-date"),
    ],
    ids=["missing-bucket", "missing-name", "missing-id", "negative-count", "negative-amount", "bad-date"],
)
def test_malformed_record_rejected(raw_record, mutate):
    mutate(raw_record)
    with pytest.raises(MalformedRecordError):
        parse_client_record(raw_record)


def test_rejection_keeps_client_id(raw_record):
    raw_record.pop("paidBucket")
    with pytest.raises(MalformedRecordError) as exc_info:
        parse_client_record(raw_record)
    assert exc_info.value.client_id == "c-100"


def test_batch_skips_bad_records(raw_record):
    """One bad record must not take down the whole batch"""
    bad = dict(raw_record, clientId="bad")
    bad.pop("overdueBucket")
    parsed = parse_client_records([raw_record, bad, "not an object", dict(raw_record, clientId="c-101")])

    assert [r.client_id for r in parsed.records] == ["c-100", "c-101"]
    assert len(parsed.rejected) == 2
    assert parsed.rejected[0].client_id == "bad"
