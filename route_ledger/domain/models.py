"""Domain models - immutable dataclasses representing a route's client portfolio"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

ZERO = Decimal("0")


class PaymentStatus(str, Enum):
    """Mutually exclusive payment status of a client"""

    ON_TIME = "on_time"
    UPCOMING = "upcoming"
    DELINQUENT = "delinquent"
    NO_INSTALLMENTS = "no_installments"


class StatusFilter(str, Enum):
    """Status predicate accepted by the filter engine"""

    ALL = "all"
    ON_TIME = "on_time"
    UPCOMING = "upcoming"
    DELINQUENT = "delinquent"


class ReportKind(str, Enum):
    """Report types that select a cohort for export"""

    FULL = "full"
    RECEIVED = "received"
    UPCOMING = "upcoming"
    DELINQUENT = "delinquent"

    @property
    def title(self) -> str:
        return _REPORT_TITLES[self]


_REPORT_TITLES = {
    ReportKind.FULL: "Full Report",
    ReportKind.RECEIVED: "Received Payments Report",
    ReportKind.UPCOMING: "Upcoming Installments Report",
    ReportKind.DELINQUENT: "Delinquency Report",
}


@dataclass(frozen=True)
class Installment:
    """Single installment as fetched from the data source"""

    amount: Decimal
    due_date: date


@dataclass(frozen=True)
class InstallmentBucket:
    """
    Count + total + items for one installment category (paid, overdue, upcoming).

    Invariant: count == len(items) and total_amount == sum of item amounts
    whenever items are known. Summary-only buckets (items not sent by the
    data source) carry an empty items tuple.
    """

    count: int = 0
    total_amount: Decimal = ZERO
    items: Tuple[Installment, ...] = ()

    @classmethod
    def from_items(cls, items: Tuple[Installment, ...]) -> "InstallmentBucket":
        return cls(
            count=len(items),
            total_amount=sum((i.amount for i in items), ZERO),
            items=tuple(items),
        )

    @property
    def is_empty(self) -> bool:
        return self.count == 0


@dataclass(frozen=True)
class ClientRecord:
    """Raw input unit: one client of a route with its three installment buckets"""

    client_id: str
    display_name: str
    paid_bucket: InstallmentBucket = field(default_factory=InstallmentBucket)
    overdue_bucket: InstallmentBucket = field(default_factory=InstallmentBucket)
    upcoming_bucket: InstallmentBucket = field(default_factory=InstallmentBucket)
    contact_phone: Optional[str] = None


@dataclass(frozen=True)
class ClassifiedClient:
    """ClientRecord plus its derived status. Never patched in place."""

    record: ClientRecord
    status: PaymentStatus

    @property
    def client_id(self) -> str:
        return self.record.client_id

    @property
    def display_name(self) -> str:
        return self.record.display_name

    @property
    def contact_phone(self) -> Optional[str]:
        return self.record.contact_phone

    @property
    def paid_bucket(self) -> InstallmentBucket:
        return self.record.paid_bucket

    @property
    def overdue_bucket(self) -> InstallmentBucket:
        return self.record.overdue_bucket

    @property
    def upcoming_bucket(self) -> InstallmentBucket:
        return self.record.upcoming_bucket


@dataclass(frozen=True)
class PortfolioMetrics:
    """Counts, totals and delinquency rate folded over a sequence of classified clients"""

    count_on_time: int = 0
    count_upcoming: int = 0
    count_delinquent: int = 0
    count_no_installments: int = 0
    total_paid: Decimal = ZERO
    total_overdue: Decimal = ZERO
    total_upcoming: Decimal = ZERO
    delinquency_rate_pct: Decimal = ZERO

    @property
    def client_count(self) -> int:
        return self.count_on_time + self.count_upcoming + self.count_delinquent + self.count_no_installments

    @property
    def grand_total(self) -> Decimal:
        return self.total_paid + self.total_overdue + self.total_upcoming


@dataclass(frozen=True)
class DebtorSummary:
    """Client ranked by outstanding overdue amount"""

    client_id: str
    display_name: str
    overdue_amount: Decimal


@dataclass(frozen=True)
class PortfolioAlerts:
    """Operational alerts shown next to the dashboard metrics"""

    installments_due_today: int = 0
    clients_long_overdue: int = 0
    top_debtors: Tuple[DebtorSummary, ...] = ()


@dataclass(frozen=True)
class DashboardSnapshot:
    """Payload stored in the dashboard cache"""

    metrics: PortfolioMetrics
    alerts: PortfolioAlerts = field(default_factory=PortfolioAlerts)


@dataclass(frozen=True)
class Cohort:
    """Subset of clients selected for a report, with metrics recomputed for it"""

    report_kind: ReportKind
    members: Tuple[ClassifiedClient, ...]
    metrics: PortfolioMetrics

    @property
    def title(self) -> str:
        return self.report_kind.title


@dataclass(frozen=True)
class OverdueInstallment:
    """Overdue installment exposed to the outbound contact collaborator"""

    amount: Decimal
    due_date: date
    days_late: int


@dataclass(frozen=True)
class UpcomingPreview:
    """Next few upcoming installments plus how many are left out"""

    items: Tuple[Installment, ...]
    remaining: int
