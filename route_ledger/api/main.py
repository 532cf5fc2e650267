"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from route_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from route_ledger.api.v1 import dashboard, portfolio, reports
from route_ledger.cache.dashboard import DashboardCache
from route_ledger.cache.refresher import RefresherPool
from route_ledger.infrastructure.clients.portfolio import PortfolioClient
from route_ledger.infrastructure.database.repositories import SqlKeyValueStore
from route_ledger.infrastructure.database.session import init_db
from route_ledger.infrastructure.observability.logging import setup_logging
from route_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app(refreshers: RefresherPool | None = None) -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Route Ledger",
        description="Installment classification, portfolio metrics and report cohorts for sales routes",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    if refreshers is None:
        init_db()
        refreshers = RefresherPool(
            cache=DashboardCache(SqlKeyValueStore()),
            fetch_snapshot=PortfolioClient().fetch_dashboard_snapshot,
        )
    app.state.refreshers = refreshers

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(portfolio.router, prefix="/v1", tags=["portfolio"])
    app.include_router(reports.router, prefix="/v1", tags=["reports"])
    app.include_router(dashboard.router, prefix="/v1", tags=["dashboard"])

    return app
