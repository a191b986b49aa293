"""FastAPI application factory"""

import uvicorn
from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from loanbook.api.middleware import MetricsMiddleware, RequestIDMiddleware
from loanbook.api.v1 import cashflow, loans, reminders
from loanbook.config import settings
from loanbook.infrastructure.observability.logging import setup_logging

# Setup structured logging
setup_logging(settings.log_level)


def create_app() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Loan Book Engine",
        description="Upfront interest, payment status and cashflow projection for a lending book",
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

    app.include_router(loans.router, prefix="/v1", tags=["loans"])
    app.include_router(cashflow.router, prefix="/v1", tags=["cashflow"])
    app.include_router(reminders.router, prefix="/v1", tags=["reminders"])

    return app


app = create_app()


def run_server(host: str = settings.host, port: int = settings.port, debug: bool = False):
    """Run the API under uvicorn"""
    uvicorn.run(
        "loanbook.api.main:app",
        host=host,
        port=port,
        reload=debug,
        log_config=None,
    )


if __name__ == "__main__":
    run_server()
