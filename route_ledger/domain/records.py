"""Parsing and validation of raw client records from the remote data source"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from route_ledger.domain.exceptions import MalformedRecordError
from route_ledger.domain.models import ZERO, ClientRecord, Installment, InstallmentBucket


class InstallmentPayload(BaseModel):
    """Wire shape of a single installment"""

    model_config = ConfigDict(extra="ignore")

    amount: Decimal = Field(..., ge=0, validation_alias=AliasChoices("amount", "valor"))
    due_date: date = Field(..., validation_alias=AliasChoices("dueDate", "due_date", "dataVencimento"))

    @field_validator("due_date", mode="before")
    @classmethod
    def _date_part(cls, value: Any) -> Any:
        # Timestamps like "2025-01-15T03:00:00.000Z" only contribute their calendar date
        if isinstance(value, str) and len(value) > 10:
            return value[:10]
        return value


class BucketPayload(BaseModel):
    """Wire shape of an installment bucket"""

    model_config = ConfigDict(extra="ignore")

    count: Optional[int] = Field(None, ge=0, validation_alias=AliasChoices("count", "quantidade"))
    total_amount: Optional[Decimal] = Field(
        None, ge=0, validation_alias=AliasChoices("totalAmount", "total_amount", "valor")
    )
    items: Optional[List[InstallmentPayload]] = Field(None, validation_alias=AliasChoices("items", "parcelas"))


class ClientRecordPayload(BaseModel):
    """
    Wire shape of a client record.

    Accepts the camelCase field names as well as the legacy names still
    returned by older deployments of the route API.
    """

    model_config = ConfigDict(extra="ignore")

    client_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("clientId", "client_id", "clienteId", "cliente_id", "parcelamentoId"),
    )
    display_name: str = Field(..., validation_alias=AliasChoices("displayName", "display_name", "nomeCliente"))
    contact_phone: Optional[str] = Field(
        None, validation_alias=AliasChoices("contactPhone", "contact_phone", "celular")
    )
    paid_bucket: BucketPayload = Field(..., validation_alias=AliasChoices("paidBucket", "paid_bucket", "parcelasPagas"))
    overdue_bucket: BucketPayload = Field(
        ..., validation_alias=AliasChoices("overdueBucket", "overdue_bucket", "parcelasVencidas")
    )
    upcoming_bucket: BucketPayload = Field(
        ..., validation_alias=AliasChoices("upcomingBucket", "upcoming_bucket", "parcelasAVencer")
    )

    @field_validator("client_id", "contact_phone", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


@dataclass(frozen=True)
class ParsedRecords:
    """Accepted records plus the rejections collected along the way"""

    records: Tuple[ClientRecord, ...]
    rejected: Tuple[MalformedRecordError, ...]


def _to_bucket(payload: BucketPayload, bucket_name: str, client_id: str) -> InstallmentBucket:
    """Build a bucket, recomputing count/total from items when items are present"""
    if payload.items is None:
        return InstallmentBucket(count=payload.count or 0, total_amount=payload.total_amount or ZERO)

    bucket = InstallmentBucket.from_items(
        tuple(Installment(amount=item.amount, due_date=item.due_date) for item in payload.items)
    )
    count_mismatch = payload.count is not None and payload.count != bucket.count
    total_mismatch = payload.total_amount is not None and payload.total_amount != bucket.total_amount
    if count_mismatch or total_mismatch:
        logging.warning(
            "Bucket summary disagrees with its items, recomputed",
            extra={
                "client_id": client_id,
                "bucket": bucket_name,
                "declared_count": payload.count,
                "declared_total": str(payload.total_amount),
                "items_count": bucket.count,
                "items_total": str(bucket.total_amount),
            },
        )
    return bucket


def parse_client_record(raw: Mapping[str, Any]) -> ClientRecord:
    """
    Validate one raw record and convert it to a ClientRecord.

    Raises:
        MalformedRecordError: missing bucket/name/id, negative amounts or counts,
            unparseable dates
    """
    if not isinstance(raw, Mapping):
        raise MalformedRecordError(f"Expected an object, got {type(raw).__name__}")

    try:
        payload = ClientRecordPayload.model_validate(dict(raw))
    except ValidationError as e:
        client_id = raw.get("clientId") or raw.get("clienteId") or raw.get("client_id") or raw.get("cliente_id")
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise MalformedRecordError(
            f"Invalid client record ({', '.join(fields)})",
            client_id=str(client_id) if client_id is not None else None,
        ) from e

    return ClientRecord(
        client_id=payload.client_id,
        display_name=payload.display_name,
        contact_phone=payload.contact_phone,
        paid_bucket=_to_bucket(payload.paid_bucket, "paid", payload.client_id),
        overdue_bucket=_to_bucket(payload.overdue_bucket, "overdue", payload.client_id),
        upcoming_bucket=_to_bucket(payload.upcoming_bucket, "upcoming", payload.client_id),
    )


def parse_client_records(raws: Iterable[Any]) -> ParsedRecords:
    """
    Parse a batch of raw records, rejecting malformed ones individually.

    A bad record never aborts the batch: it is logged and left out.
    """
    records: List[ClientRecord] = []
    rejected: List[MalformedRecordError] = []

    for index, raw in enumerate(raws):
        try:
            records.append(parse_client_record(raw))
        except MalformedRecordError as e:
            logging.warning(
                f"Rejected client record: {e}",
                extra={"record_index": index, "client_id": e.client_id},
            )
            rejected.append(e)

    return ParsedRecords(records=tuple(records), rejected=tuple(rejected))
