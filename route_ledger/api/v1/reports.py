"""Report endpoints - cohort selection for document export"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from route_ledger.api.v1.schemas import ClassifiedClientSchema, ClientBatchRequest, CohortResponse, MetricsSchema
from route_ledger.api.dependencies import get_portfolio_client, get_request_id
from route_ledger.domain.classification import classify_all
from route_ledger.domain.cohorts import select_cohort
from route_ledger.domain.exceptions import DataSourceError
from route_ledger.domain.models import Cohort, ReportKind
from route_ledger.domain.records import parse_client_records
from route_ledger.infrastructure.clients.portfolio import PortfolioClient
from route_ledger.infrastructure.observability.metrics import record_rejections

router = APIRouter()


def _cohort_response(cohort: Cohort, rejected: int) -> CohortResponse:
    return CohortResponse(
        report_kind=cohort.report_kind,
        title=cohort.title,
        members=[ClassifiedClientSchema.model_validate(c) for c in cohort.members],
        metrics=MetricsSchema.model_validate(cohort.metrics),
        rejected=rejected,
    )


@router.post("/reports/{kind}", response_model=CohortResponse)
def build_report(kind: ReportKind, request_body: ClientBatchRequest):
    """
    Select the cohort for a report from supplied client records.

    The output carries no markup; rendering is done by the caller.
    """
    parsed = parse_client_records(request_body.clients)
    record_rejections(len(parsed.rejected))
    cohort = select_cohort(classify_all(parsed.records), kind)
    return _cohort_response(cohort, len(parsed.rejected))


@router.get("/routes/{route_id}/reports/{kind}", response_model=CohortResponse)
async def build_route_report(
    route_id: str,
    kind: ReportKind,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    portfolio_client: PortfolioClient = Depends(get_portfolio_client),
):
    """Select a report cohort from a route's clients fetched from the route API"""
    request_id = get_request_id(request)

    try:
        parsed = await portfolio_client.get_client_records(user_id, route_id=route_id)
    except DataSourceError as e:
        logging.error(f"Route API error: {e}", extra={"request_id": request_id, "route_id": route_id})
        raise HTTPException(status_code=503, detail="Route service unavailable, try again")

    cohort = select_cohort(classify_all(parsed.records), kind)
    logging.info(
        "Report cohort selected",
        extra={
            "request_id": request_id,
            "route_id": route_id,
            "report_kind": kind.value,
            "members": len(cohort.members),
        },
    )
    return _cohort_response(cohort, len(parsed.rejected))
