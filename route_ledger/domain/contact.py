"""Installment details handed to the outbound contact collaborator"""

from datetime import date
from typing import List

from route_ledger.domain.models import ClassifiedClient, OverdueInstallment, UpcomingPreview
from route_ledger.utils.date_utils import days_between


def overdue_details(client: ClassifiedClient, today: date) -> List[OverdueInstallment]:
    """Overdue installments with days late, oldest first"""
    items = sorted(client.overdue_bucket.items, key=lambda i: i.due_date)
    return [
        OverdueInstallment(
            amount=item.amount,
            due_date=item.due_date,
            days_late=max(days_between(item.due_date, today), 0),
        )
        for item in items
    ]


def upcoming_preview(client: ClassifiedClient, limit: int = 3) -> UpcomingPreview:
    """
    Next `limit` upcoming installments in due-date order.

    `remaining` is based on the bucket count, which may exceed the number of
    items the data source sent.
    """
    items = sorted(client.upcoming_bucket.items, key=lambda i: i.due_date)[:limit]
    return UpcomingPreview(items=tuple(items), remaining=max(client.upcoming_bucket.count - len(items), 0))
