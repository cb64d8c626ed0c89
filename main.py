"""Main entry point for the Phone Location Service."""

import uvicorn
from phone_location_service.config.settings import settings
from phone_location_service.config.logging import setup_logging


def main():
    """Run the FastAPI application."""
    setup_logging()

    uvicorn.run(
        "phone_location_service.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
        log_config=None,  # Use our custom logging configuration
    )


if __name__ == "__main__":
    main()
