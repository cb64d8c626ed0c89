"""Dependency providers for API routes."""

from fastapi import Request

from phone_location_service.services.location_lookup_service import LocationLookupService


def get_lookup_service(request: Request) -> LocationLookupService:
    """Get the LocationLookupService bound to the running application."""
    return request.app.state.lookup_service
