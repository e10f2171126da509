"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from bagayi_gateway.api.middleware import RequestIDMiddleware, MetricsMiddleware
from bagayi_gateway.api.v1 import history, routing, transfers
from bagayi_gateway.infrastructure.observability.logging import setup_logging
from bagayi_gateway.config import settings

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Bagayi Transfer Gateway",
        description="Transfer routing, M-Pesa channel resolution and transfer creation",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Static /transfers/* paths register before /transfers/{transfer_id}
    app.include_router(routing.router, prefix="/v1", tags=["routing"])
    app.include_router(history.router, prefix="/v1", tags=["history"])
    app.include_router(transfers.router, prefix="/v1", tags=["transfers"])

    return app


app = create_app()
