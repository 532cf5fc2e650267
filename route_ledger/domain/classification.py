"""Installment classifier - the single place where payment status is derived"""

from typing import Iterable, List

from route_ledger.domain.models import ClassifiedClient, ClientRecord, PaymentStatus


def derive_status(record: ClientRecord) -> PaymentStatus:
    """
    Derive a client's payment status from its bucket counts.

    Priority (worst status wins, first match):
    1. any overdue installment  -> DELINQUENT
    2. any upcoming installment -> UPCOMING
    3. any paid installment     -> ON_TIME
    4. otherwise                -> NO_INSTALLMENTS

    Only counts are inspected; amounts feed aggregation, not classification.
    """
    if record.overdue_bucket.count > 0:
        return PaymentStatus.DELINQUENT
    if record.upcoming_bucket.count > 0:
        return PaymentStatus.UPCOMING
    if record.paid_bucket.count > 0:
        return PaymentStatus.ON_TIME
    return PaymentStatus.NO_INSTALLMENTS


def classify(record: ClientRecord) -> ClassifiedClient:
    """Wrap a record with its derived status"""
    return ClassifiedClient(record=record, status=derive_status(record))


def classify_all(records: Iterable[ClientRecord]) -> List[ClassifiedClient]:
    return [classify(record) for record in records]
