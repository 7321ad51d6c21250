"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from banking_service.api.middleware import RequestIDMiddleware, MetricsMiddleware
from banking_service.api.v1 import accounts, loans, notifications, transactions, transfers
from banking_service.infrastructure.observability.logging import setup_logging
from banking_service.config import settings

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Banking Service",
        description="Accounts, transfers, loan simulation and loan requests",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

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
    app.include_router(accounts.router, prefix="/v1", tags=["accounts"])
    app.include_router(transfers.router, prefix="/v1", tags=["transfers"])
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(notifications.router, prefix="/v1", tags=["notifications"])

    return app


app = create_app()
