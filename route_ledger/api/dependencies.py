"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from route_ledger.cache.refresher import RefresherPool
from route_ledger.infrastructure.clients.portfolio import PortfolioClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_portfolio_client() -> PortfolioClient:
    """Provide route API client instance"""
    return PortfolioClient()


def get_refreshers(request: Request) -> RefresherPool:
    """Per-user dashboard refreshers owned by this application instance"""
    return request.app.state.refreshers
