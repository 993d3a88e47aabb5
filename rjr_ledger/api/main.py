"""FastAPI application factory"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from rjr_ledger.api.middleware import RequestIDMiddleware, MetricsMiddleware
from rjr_ledger.api.v1 import documents, drafts, installments, payments
from rjr_ledger.infrastructure.observability.logging import setup_logging
from rjr_ledger.infrastructure.database.session import init_db
from rjr_ledger.config import settings

# Setup structured logging
setup_logging(settings.log_level, service=settings.service_name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="RJR Ledger",
        description="Installment schedules, financial documents and payments",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(documents.router, prefix="/v1", tags=["documents"])
    app.include_router(payments.router, prefix="/v1", tags=["payments"])
    app.include_router(drafts.router, prefix="/v1", tags=["drafts"])

    return app


app = create_app()
