"""Location lookup service with request-level business logic."""

import logging
from typing import Any, Optional

from phone_location_service.config.logging import LoggingService
from phone_location_service.models.schemas import LookupResult
from phone_location_service.services.location_resolver import MockLocationResolver
from phone_location_service.services.phone_validator import validate_phone_number
from phone_location_service.services.sources import (
    Clock,
    RandomSource,
    SystemClock,
    SystemRandomSource,
)

logger = logging.getLogger(__name__)
logging_service = LoggingService(__name__)

PHONE_REQUIRED_MESSAGE = "Phone number is required"
INVALID_FORMAT_MESSAGE = (
    "Invalid phone number format. Please include country code (e.g., +1-555-123-4567)"
)
LOOKUP_FAILED_MESSAGE = "Internal server error during location lookup"


class LocationLookupError(RuntimeError):
    """Raised when resolution fails for reasons the caller cannot fix."""


class LocationLookupService:
    """Service layer for simulated phone location lookups."""

    def __init__(self, resolver: MockLocationResolver, clock: Optional[Clock] = None,
                 random_source: Optional[RandomSource] = None,
                 delay_min_ms: int = 1000, delay_max_ms: int = 3000):
        """Initialize service with its collaborators.

        Args:
            resolver: Resolver producing the mock results
            clock: Clock used for the artificial delay
            random_source: Source for the delay duration
            delay_min_ms: Shortest artificial delay
            delay_max_ms: Upper bound (exclusive) of the artificial delay
        """
        if delay_max_ms < delay_min_ms:
            raise ValueError("delay_max_ms must not be lower than delay_min_ms")
        self.resolver = resolver
        self.clock = clock or SystemClock()
        self.random_source = random_source or SystemRandomSource()
        self.delay_min_ms = delay_min_ms
        self.delay_max_ms = delay_max_ms

    def next_delay_seconds(self) -> float:
        """Draw the duration of the simulated network query."""
        span = self.delay_max_ms - self.delay_min_ms
        return (self.delay_min_ms + self.random_source.random() * span) / 1000

    async def simulate_network_delay(self) -> float:
        delay = self.next_delay_seconds()
        await self.clock.sleep(delay)
        return delay

    async def track_location(self, phone_number: Any) -> LookupResult:
        """Look up the simulated location of a phone number.

        Args:
            phone_number: Number as received from the caller

        Returns:
            LookupResult for the number

        Raises:
            ValueError: If the number is missing or not in international format
            LocationLookupError: If resolution fails unexpectedly
        """
        if not phone_number or not isinstance(phone_number, str):
            logging_service.log_operation(
                "warning",
                "Lookup rejected: phone number missing",
                operation="track_location",
                error=PHONE_REQUIRED_MESSAGE
            )
            raise ValueError(PHONE_REQUIRED_MESSAGE)

        normalized = validate_phone_number(phone_number)
        if normalized is None:
            logging_service.log_operation(
                "warning",
                "Lookup rejected: invalid phone format",
                phone=phone_number,
                operation="track_location",
                error=INVALID_FORMAT_MESSAGE
            )
            raise ValueError(INVALID_FORMAT_MESSAGE)

        delay = await self.simulate_network_delay()

        try:
            result = self.resolver.resolve(phone_number, normalized)
        except Exception as e:
            logging_service.log_error(
                "Unexpected error during location lookup",
                e,
                phone=normalized,
                operation="track_location"
            )
            raise LocationLookupError(LOOKUP_FAILED_MESSAGE) from e

        logging_service.log_lookup(
            normalized,
            success=True,
            city=result.location.city,
            delay_ms=round(delay * 1000, 2)
        )
        return result
