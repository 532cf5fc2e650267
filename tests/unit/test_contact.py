"""Unit tests for installment details exposed to outbound contact"""

from datetime import timedelta
from decimal import Decimal
from route_ledger.domain.contact import overdue_details, upcoming_preview


def test_overdue_details_oldest_first_with_days_late(make_client, today):
    client = make_client(
        overdue=[("50.00", today - timedelta(days=3)), ("80.00", today - timedelta(days=40))],
    )
    details = overdue_details(client, today)

    assert [d.days_late for d in details] == [40, 3]
    assert details[0].amount == Decimal("80.00")
    assert details[0].due_date == today - timedelta(days=40)


def test_overdue_details_empty_for_clean_client(make_client, today):
    assert overdue_details(make_client(paid=[("10", today)]), today) == []


def test_upcoming_preview_limits_and_counts_rest(make_client, today):
    dates = [today + timedelta(days=30 * i) for i in (4, 1, 3, 2, 5)]
    client = make_client(upcoming=[("10", d) for d in dates])
    preview = upcoming_preview(client)

    assert [i.due_date for i in preview.items] == sorted(dates)[:3]
    assert preview.remaining == 2
