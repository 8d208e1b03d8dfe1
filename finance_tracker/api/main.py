"""FastAPI application factory"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from finance_tracker.api.middleware import RequestIDMiddleware, MetricsMiddleware
from finance_tracker.api.v1 import analytics, cards, category_rules, installments, setting, transactions
from finance_tracker.infrastructure.database.models import Base
from finance_tracker.infrastructure.database.session import engine
from finance_tracker.infrastructure.observability.logging import setup_logging
from finance_tracker.domain.exceptions import StorageError
from finance_tracker.config import settings

# Setup structured logging
setup_logging(settings.log_level, settings.service_name)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Finance Tracker",
        description="Card transactions, budgets and billing-period spending analytics",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logging.error(f"Stored data is invalid: {exc}", extra={"path": request.url.path})
        return JSONResponse(status_code=500, content={"detail": "Stored data is invalid"})

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(transactions.router, prefix="/v1", tags=["transactions"])
    app.include_router(cards.router, prefix="/v1", tags=["cards"])
    app.include_router(category_rules.router, prefix="/v1", tags=["category-rules"])
    app.include_router(installments.router, prefix="/v1", tags=["installments"])
    app.include_router(setting.router, prefix="/v1", tags=["settings"])
    app.include_router(analytics.router, prefix="/v1", tags=["analytics"])

    return app


app = create_app()
