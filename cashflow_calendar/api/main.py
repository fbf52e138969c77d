"""FastAPI application factory"""

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from cashflow_calendar.api.middleware import MetricsMiddleware, RequestIDMiddleware
from cashflow_calendar.api.v1 import collisions, forecast, scenario
from cashflow_calendar.config import settings
from cashflow_calendar.infrastructure.observability.logging import setup_logging

setup_logging(settings.log_level, verbose=settings.calendar_verbose)

V1_ROUTERS = [
    (forecast.router, "forecast"),
    (scenario.router, "scenario"),
    (collisions.router, "collisions"),
]


def create_app() -> FastAPI:
    """Build the service: middleware, health/metrics, then the /v1 engine routes"""
    app = FastAPI(
        title="Cash-Flow Calendar",
        description="Day-by-day balance forecasts, bill collisions and affordability checks",
        version="0.1.0",
    )

    # Last added runs first, so request IDs exist before metrics are recorded
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    def health_check():
        return {
            "status": "ok",
            "service": settings.service_name,
            "default_horizon_days": settings.default_horizon_days,
            "default_safety_buffer_cents": settings.default_safety_buffer_cents,
        }

    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    for router, tag in V1_ROUTERS:
        app.include_router(router, prefix="/v1", tags=[tag])

    return app


app = create_app()
