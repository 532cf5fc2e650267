"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, Field
from datetime import date
from decimal import Decimal
from typing import Any, List, Optional

from route_ledger.config import settings
from route_ledger.domain.models import PaymentStatus, ReportKind, StatusFilter


class ClientBatchRequest(BaseModel):
    """Raw client records; each one is validated individually"""

    clients: List[Any] = Field(default_factory=list)


class FilterRequest(ClientBatchRequest):
    """Request body for POST /v1/portfolio/filter"""

    status: StatusFilter = StatusFilter.ALL
    search: str = ""


class InstallmentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    amount: Decimal
    due_date: date


class BucketSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    count: int
    total_amount: Decimal
    items: List[InstallmentSchema]


class ClassifiedClientSchema(BaseModel):
    """Client with its derived payment status"""

    model_config = ConfigDict(from_attributes=True)

    client_id: str
    display_name: str
    contact_phone: Optional[str] = None
    status: PaymentStatus
    paid_bucket: BucketSchema
    overdue_bucket: BucketSchema
    upcoming_bucket: BucketSchema


class MetricsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    count_on_time: int
    count_upcoming: int
    count_delinquent: int
    count_no_installments: int
    client_count: int
    total_paid: Decimal
    total_overdue: Decimal
    total_upcoming: Decimal
    grand_total: Decimal
    delinquency_rate_pct: Decimal


class ClassifyResponse(BaseModel):
    """Response for POST /v1/portfolio/classify"""

    clients: List[ClassifiedClientSchema]
    metrics: MetricsSchema
    rejected: int


class FilterResponse(BaseModel):
    """Filtered view plus the metrics of the whole (unfiltered) list"""

    clients: List[ClassifiedClientSchema]
    matched: int
    total: int
    metrics: MetricsSchema
    rejected: int = 0
    # Callers wait this long after the last keystroke before filtering again
    debounce_ms: int = settings.search_debounce_ms


class CohortResponse(BaseModel):
    """Report payload handed to the document renderer"""

    report_kind: ReportKind
    title: str
    members: List[ClassifiedClientSchema]
    metrics: MetricsSchema
    rejected: int = 0


class DebtorSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    client_id: str
    display_name: str
    overdue_amount: Decimal


class AlertsSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    installments_due_today: int
    clients_long_overdue: int
    top_debtors: List[DebtorSchema]


class DashboardResponse(BaseModel):
    """Response for GET /v1/dashboard"""

    user_id: str
    source: str
    captured_at_ms: Optional[int] = None
    revalidating: bool
    last_refresh_error: Optional[str] = None
    metrics: MetricsSchema
    alerts: AlertsSchema


class OverdueInstallmentSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    amount: Decimal
    due_date: date
    days_late: int


class UpcomingPreviewSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    items: List[InstallmentSchema]
    remaining: int


class ContactResponse(BaseModel):
    """Installment details for contacting one client about their balance"""

    client: ClassifiedClientSchema
    overdue: List[OverdueInstallmentSchema]
    upcoming: UpcomingPreviewSchema
