"""Portfolio endpoints - classify, aggregate and filter client records"""

import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from route_ledger.api.v1.schemas import (
    ClassifiedClientSchema,
    ClassifyResponse,
    ClientBatchRequest,
    ContactResponse,
    FilterRequest,
    FilterResponse,
    MetricsSchema,
    OverdueInstallmentSchema,
    UpcomingPreviewSchema,
)
from route_ledger.api.dependencies import get_portfolio_client, get_request_id
from route_ledger.domain.aggregation import aggregate
from route_ledger.domain.classification import classify_all
from route_ledger.domain.contact import overdue_details, upcoming_preview
from route_ledger.domain.exceptions import DataSourceError
from route_ledger.domain.filtering import filter_clients
from route_ledger.domain.models import StatusFilter
from route_ledger.domain.records import parse_client_records
from route_ledger.infrastructure.clients.portfolio import PortfolioClient
from route_ledger.infrastructure.observability.metrics import record_rejections

router = APIRouter()


@router.post("/portfolio/classify", response_model=ClassifyResponse)
def classify_portfolio(request_body: ClientBatchRequest):
    """
    Classify raw client records and aggregate portfolio metrics.

    Malformed records are left out and counted in `rejected`.
    """
    parsed = parse_client_records(request_body.clients)
    record_rejections(len(parsed.rejected))
    clients = classify_all(parsed.records)

    return ClassifyResponse(
        clients=[ClassifiedClientSchema.model_validate(c) for c in clients],
        metrics=MetricsSchema.model_validate(aggregate(clients)),
        rejected=len(parsed.rejected),
    )


@router.post("/portfolio/filter", response_model=FilterResponse)
def filter_portfolio(request_body: FilterRequest):
    """Filter classified clients by status and name search"""
    parsed = parse_client_records(request_body.clients)
    record_rejections(len(parsed.rejected))
    clients = classify_all(parsed.records)
    matched = filter_clients(clients, request_body.status, request_body.search)

    return FilterResponse(
        clients=[ClassifiedClientSchema.model_validate(c) for c in matched],
        matched=len(matched),
        total=len(clients),
        metrics=MetricsSchema.model_validate(aggregate(clients)),
        rejected=len(parsed.rejected),
    )


@router.get("/routes/{route_id}/clients", response_model=FilterResponse)
async def list_route_clients(
    route_id: str,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    status: StatusFilter = Query(StatusFilter.ALL),
    search: str = Query(""),
    portfolio_client: PortfolioClient = Depends(get_portfolio_client),
):
    """
    Fetch a route's clients from the route API, then classify and filter them.

    Metrics always describe the whole route, not the filtered view.
    """
    request_id = get_request_id(request)

    try:
        parsed = await portfolio_client.get_client_records(user_id, route_id=route_id)
    except DataSourceError as e:
        logging.error(f"Route API error: {e}", extra={"request_id": request_id, "route_id": route_id})
        raise HTTPException(status_code=503, detail="Route service unavailable, try again")

    clients = classify_all(parsed.records)
    matched = filter_clients(clients, status, search)

    return FilterResponse(
        clients=[ClassifiedClientSchema.model_validate(c) for c in matched],
        matched=len(matched),
        total=len(clients),
        metrics=MetricsSchema.model_validate(aggregate(clients)),
        rejected=len(parsed.rejected),
    )


@router.get("/routes/{route_id}/clients/{client_id}/contact", response_model=ContactResponse)
async def get_client_contact(
    route_id: str,
    client_id: str,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    as_of: Optional[date] = Query(None, description="Day to count days late from (default: today)"),
    portfolio_client: PortfolioClient = Depends(get_portfolio_client),
):
    """
    Overdue installments (oldest first, with days late) and the next upcoming
    ones for a single client, as shown before calling or messaging them.
    """
    request_id = get_request_id(request)

    try:
        parsed = await portfolio_client.get_client_records(user_id, route_id=route_id)
    except DataSourceError as e:
        logging.error(f"Route API error: {e}", extra={"request_id": request_id, "route_id": route_id})
        raise HTTPException(status_code=503, detail="Route service unavailable, try again")

    client = next((c for c in classify_all(parsed.records) if c.client_id == client_id), None)
    if client is None:
        raise HTTPException(status_code=404, detail=f"Client {client_id} not found on route {route_id}")

    today = as_of or date.today()
    return ContactResponse(
        client=ClassifiedClientSchema.model_validate(client),
        overdue=[OverdueInstallmentSchema.model_validate(d) for d in overdue_details(client, today)],
        upcoming=UpcomingPreviewSchema.model_validate(upcoming_preview(client)),
    )
