"""Cohort selection for report export"""

from dataclasses import replace
from typing import Callable, Dict, Sequence

from route_ledger.domain.aggregation import aggregate
from route_ledger.domain.models import ClassifiedClient, Cohort, ReportKind
from route_ledger.utils.text import name_sort_key

_MEMBERSHIP: Dict[ReportKind, Callable[[ClassifiedClient], bool]] = {
    ReportKind.FULL: lambda c: True,
    # Only paid installments: nothing overdue, nothing still to come
    ReportKind.RECEIVED: lambda c: (
        c.paid_bucket.count > 0 and c.overdue_bucket.count == 0 and c.upcoming_bucket.count == 0
    ),
    ReportKind.UPCOMING: lambda c: c.upcoming_bucket.count > 0 and c.overdue_bucket.count == 0,
    ReportKind.DELINQUENT: lambda c: c.overdue_bucket.count > 0,
}


def select_cohort(clients: Sequence[ClassifiedClient], report_kind: ReportKind) -> Cohort:
    """
    Select the clients for a report and recompute metrics for them.

    Members are sorted by display name. Counts and totals always describe
    the cohort itself. The delinquency rate does too, except for the
    DELINQUENT report, whose rate describes the whole portfolio's exposure
    (global paid + overdue), not just the printed names.
    """
    belongs = _MEMBERSHIP[report_kind]
    members = sorted((c for c in clients if belongs(c)), key=lambda c: name_sort_key(c.display_name))
    metrics = aggregate(members)

    if report_kind == ReportKind.DELINQUENT:
        portfolio = aggregate(clients)
        metrics = replace(metrics, delinquency_rate_pct=portfolio.delinquency_rate_pct)

    return Cohort(report_kind=report_kind, members=tuple(members), metrics=metrics)
