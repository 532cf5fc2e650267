"""Portfolio aggregation - counts, totals, delinquency rate and dashboard alerts"""

from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Iterable, Sequence

from route_ledger.domain.models import (
    ZERO,
    ClassifiedClient,
    DashboardSnapshot,
    DebtorSummary,
    PaymentStatus,
    PortfolioAlerts,
    PortfolioMetrics,
)
from route_ledger.utils.date_utils import days_between
from route_ledger.utils.text import name_sort_key

HUNDRED = Decimal("100")


def delinquency_rate(total_paid: Decimal, total_overdue: Decimal) -> Decimal:
    """
    Overdue amount as a percentage of realized (paid + overdue) amount.

    Upcoming amounts are deliberately left out of the denominator: the rate
    reflects payment behaviour so far, not pending obligations.
    Returns 0 when nothing has been paid or become overdue.
    """
    base = total_paid + total_overdue
    if base == ZERO:
        return ZERO
    return total_overdue / base * HUNDRED


def aggregate(clients: Iterable[ClassifiedClient]) -> PortfolioMetrics:
    """
    Fold classified clients into portfolio metrics.

    Each client increments exactly one status counter based on its
    precomputed status. Totals are summed over all clients regardless of
    status, so a delinquent client's paid history still counts as paid.
    """
    counts: Counter = Counter()
    total_paid = ZERO
    total_overdue = ZERO
    total_upcoming = ZERO

    for client in clients:
        counts[client.status] += 1
        total_paid += client.paid_bucket.total_amount
        total_overdue += client.overdue_bucket.total_amount
        total_upcoming += client.upcoming_bucket.total_amount

    return PortfolioMetrics(
        count_on_time=counts[PaymentStatus.ON_TIME],
        count_upcoming=counts[PaymentStatus.UPCOMING],
        count_delinquent=counts[PaymentStatus.DELINQUENT],
        count_no_installments=counts[PaymentStatus.NO_INSTALLMENTS],
        total_paid=total_paid,
        total_overdue=total_overdue,
        total_upcoming=total_upcoming,
        delinquency_rate_pct=delinquency_rate(total_paid, total_overdue),
    )


def top_debtors(clients: Iterable[ClassifiedClient], limit: int = 5) -> list[DebtorSummary]:
    """Clients with overdue amounts, largest first (ties broken by name)"""
    debtors = [
        DebtorSummary(
            client_id=c.client_id,
            display_name=c.display_name,
            overdue_amount=c.overdue_bucket.total_amount,
        )
        for c in clients
        if c.overdue_bucket.total_amount > ZERO
    ]
    debtors.sort(key=lambda d: (-d.overdue_amount, name_sort_key(d.display_name)))
    return debtors[:limit]


def build_alerts(
    clients: Sequence[ClassifiedClient],
    today: date,
    long_overdue_days: int = 30,
    debtors_limit: int = 5,
) -> PortfolioAlerts:
    """
    Operational alerts for the dashboard.

    - installments due today: upcoming items whose due date is today
    - long overdue clients: clients with an overdue item more than
      `long_overdue_days` days late
    - top debtors by overdue amount
    """
    due_today = sum(
        1 for c in clients for item in c.upcoming_bucket.items if item.due_date == today
    )
    long_overdue = sum(
        1
        for c in clients
        if any(days_between(item.due_date, today) > long_overdue_days for item in c.overdue_bucket.items)
    )
    return PortfolioAlerts(
        installments_due_today=due_today,
        clients_long_overdue=long_overdue,
        top_debtors=tuple(top_debtors(clients, limit=debtors_limit)),
    )


def build_snapshot(
    clients: Sequence[ClassifiedClient],
    today: date,
    long_overdue_days: int = 30,
    debtors_limit: int = 5,
) -> DashboardSnapshot:
    """Metrics and alerts for the dashboard, ready to be cached"""
    return DashboardSnapshot(
        metrics=aggregate(clients),
        alerts=build_alerts(clients, today, long_overdue_days=long_overdue_days, debtors_limit=debtors_limit),
    )
