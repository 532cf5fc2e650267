"""GET /v1/dashboard - stale-while-revalidate dashboard metrics"""

import logging
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request

from route_ledger.api.v1.schemas import AlertsSchema, DashboardResponse, MetricsSchema
from route_ledger.api.dependencies import get_refreshers, get_request_id
from route_ledger.cache.refresher import RefresherPool
from route_ledger.domain.exceptions import DataSourceError

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    background_tasks: BackgroundTasks,
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    refreshers: RefresherPool = Depends(get_refreshers),
):
    """
    Dashboard metrics for a user.

    Flow:
    1. Cached snapshot for this user and younger than the TTL: return it at once
       and revalidate after the response is sent
    2. Otherwise wait for a fresh snapshot from the route API
    3. Nothing cached and the fetch failed: 503, the client offers a retry
    """
    request_id = get_request_id(request)
    refresher = refreshers.for_user(user_id)

    try:
        view = await refresher.open(user_id, spawn_revalidation=False)
    except DataSourceError as e:
        logging.warning(f"Dashboard unavailable: {e}", extra={"request_id": request_id, "user_id": user_id})
        raise HTTPException(
            status_code=503,
            detail="Dashboard data unavailable, retry later",
            headers={"Retry-After": "5"},
        )

    if view.revalidating:
        background_tasks.add_task(refresher.revalidate, user_id)

    return DashboardResponse(
        user_id=user_id,
        source=view.source,
        captured_at_ms=view.captured_at_ms,
        revalidating=view.revalidating,
        last_refresh_error=str(refresher.last_error) if refresher.last_error else None,
        metrics=MetricsSchema.model_validate(view.snapshot.metrics),
        alerts=AlertsSchema.model_validate(view.snapshot.alerts),
    )
