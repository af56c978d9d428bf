from typing import Optional

import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, HTTPException

from ..config import AppSettings
from ..logging import init_logging
from ..services.forecast_service import ForecastService, build_forecast_service
from .middleware import RequestIDMiddleware, generic_exception_handler, http_exception_handler
from .routes import forecast, health, warning


def create_app(settings: Optional[AppSettings] = None, service: Optional[ForecastService] = None) -> FastAPI:
    settings = settings or AppSettings()
    init_logging(settings.log_level, app_name=settings.app_name, app_env=settings.app_env)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        app.state.forecast_service.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "health", "description": "Service health and uptime"},
            {"name": "forecast", "description": "Aggregated weather forecast"},
            {"name": "warning", "description": "Active weather warnings"},
        ],
    )

    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(health.router, prefix="/health", tags=["health"])
    app.include_router(forecast.router, prefix="/v1/forecast", tags=["forecast"])
    app.include_router(warning.router, prefix="/v1/warning", tags=["warning"])

    app.state.settings = settings
    app.state.start_time = time.time()
    # Services are built eagerly so tests without lifespan still work
    app.state.forecast_service = service or build_forecast_service(settings)

    return app


if __name__ == "__main__":
    import uvicorn

    s = AppSettings()
    uvicorn.run(create_app(s), host=s.host, port=s.port)
