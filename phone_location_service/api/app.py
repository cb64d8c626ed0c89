"""FastAPI application factory and configuration."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from phone_location_service import __version__
from phone_location_service.api import pages
from phone_location_service.api.dependencies import get_lookup_service
from phone_location_service.api.middleware import (
    CorrelationIdMiddleware,
    ErrorHandlingMiddleware,
    LoggingMiddleware,
)
from phone_location_service.config.logging import LoggingService, setup_logging
from phone_location_service.config.settings import Settings, settings as default_settings
from phone_location_service.models.schemas import (
    ErrorResponse,
    HealthCheckResponse,
    LookupResult,
)
from phone_location_service.presentation import views
from phone_location_service.services.location_lookup_service import (
    LocationLookupError,
    LocationLookupService,
)
from phone_location_service.services.location_resolver import MockLocationResolver
from phone_location_service.services.sources import (
    Clock,
    RandomSource,
    SystemClock,
    SystemRandomSource,
)

logger = logging.getLogger(__name__)
logging_service = LoggingService(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"

METHOD_NOT_ALLOWED_MESSAGE = "Method not allowed. Use POST to track location."


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    setup_logging()
    logging_service.log_operation(
        "info",
        "Phone Location Service starting up...",
        operation="service_startup",
        delay_min_ms=app.state.settings.lookup_delay_min_ms,
        delay_max_ms=app.state.settings.lookup_delay_max_ms
    )

    yield

    logging_service.log_operation(
        "info",
        "Phone Location Service shutting down...",
        operation="service_shutdown"
    )


def build_templates() -> Jinja2Templates:
    templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
    templates.env.filters.update({
        "accuracy_level": views.accuracy_level,
        "confidence_level": views.confidence_level,
        "accuracy_circle_px": views.accuracy_circle_px,
        "format_timestamp": views.format_timestamp,
        "country_flag": views.country_flag,
        "coordinates": views.format_coordinates,
    })
    return templates


def create_app(app_settings: Optional[Settings] = None, clock: Optional[Clock] = None,
               random_source: Optional[RandomSource] = None) -> FastAPI:
    """Create and configure FastAPI application.

    Each application builds its own resolver, so the default bucket's base
    location is drawn once per application instance.
    """
    app_settings = app_settings or default_settings
    clock = clock or SystemClock()
    random_source = random_source or SystemRandomSource(app_settings.random_seed)

    app = FastAPI(
        title="Phone Location Service",
        description="Educational demo that simulates phone number location lookups",
        version=__version__,
        lifespan=lifespan,
    )

    resolver = MockLocationResolver(
        random_source=random_source,
        clock=clock,
        jitter_degrees=app_settings.location_jitter_degrees,
    )
    app.state.settings = app_settings
    app.state.clock = clock
    app.state.lookup_service = LocationLookupService(
        resolver,
        clock=clock,
        random_source=random_source,
        delay_min_ms=app_settings.lookup_delay_min_ms,
        delay_max_ms=app_settings.lookup_delay_max_ms,
    )
    app.state.templates = build_templates()

    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", response_model=HealthCheckResponse)
    async def health_check():
        """Health check endpoint."""
        logging_service.log_operation(
            "debug",
            "Health check requested",
            operation="health_check"
        )
        return HealthCheckResponse(status="healthy", version=__version__)

    @app.post(
        "/track-location",
        response_model=LookupResult,
        responses={
            400: {"model": ErrorResponse, "description": "Missing or invalid phone number"},
            500: {"model": ErrorResponse, "description": "Unexpected lookup failure"}
        }
    )
    async def track_location(
        request: Request,
        service: LocationLookupService = Depends(get_lookup_service)
    ):
        """Simulate a location lookup for ``{"phoneNumber": "..."}``."""
        try:
            payload = await request.json()
        except ValueError:
            payload = None

        phone_number = payload.get("phoneNumber") if isinstance(payload, dict) else None

        try:
            return await service.track_location(phone_number)
        except ValueError as e:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": str(e)}
            )
        except LocationLookupError as e:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": str(e)}
            )

    @app.api_route(
        "/track-location",
        methods=["GET", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"],
        include_in_schema=False
    )
    async def track_location_method_not_allowed(request: Request):
        logging_service.log_operation(
            "warning",
            "Unsupported method on lookup route",
            operation="track_location",
            method=request.method
        )
        return JSONResponse(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            content={"error": METHOD_NOT_ALLOWED_MESSAGE},
            headers={"Allow": "POST"}
        )

    app.include_router(pages.router)

    return app


# Create the application instance
app = create_app()
