"""Business logic for simulated location lookups."""

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

__all__ = [
    "LocationLookupError",
    "LocationLookupService",
    "MockLocationResolver",
    "Clock",
    "RandomSource",
    "SystemClock",
    "SystemRandomSource",
]
