"""Mock location resolver.

Each recognized country bucket has one static location and carrier. Every
resolution returns a copy of the bucket's location with fresh jitter; the
static records themselves are never modified.
"""

import logging
from typing import Dict, NamedTuple, Optional

from phone_location_service.models.schemas import (
    CarrierRecord,
    LegalRecord,
    LocationRecord,
    LookupResult,
)
from phone_location_service.services.sources import (
    Clock,
    RandomSource,
    SystemClock,
    SystemRandomSource,
    isoformat_utc,
)

logger = logging.getLogger(__name__)

DEFAULT_BUCKET = "default"

ACCURACY_MIN_METERS = 50
ACCURACY_MAX_METERS = 150  # exclusive

# Spread of the default bucket's one-time base offset, in degrees.
DEFAULT_BASE_SPREAD = 0.1


class CountryBucket(NamedTuple):
    code: str
    location: LocationRecord
    carrier: CarrierRecord


COUNTRY_BUCKETS: Dict[str, CountryBucket] = {
    "+1": CountryBucket(
        "+1",
        LocationRecord(
            latitude=40.7829,
            longitude=-73.9654,
            accuracy=150,
            address="350 5th Ave",
            city="New York",
            country="United States",
        ),
        CarrierRecord(name="Verizon Wireless", network="5G", type="Mobile"),
    ),
    "+44": CountryBucket(
        "+44",
        LocationRecord(
            latitude=51.5074,
            longitude=-0.1278,
            accuracy=200,
            address="10 Downing Street",
            city="London",
            country="United Kingdom",
        ),
        CarrierRecord(name="EE Limited", network="4G LTE", type="Mobile"),
    ),
    "+33": CountryBucket(
        "+33",
        LocationRecord(
            latitude=48.8566,
            longitude=2.3522,
            accuracy=120,
            address="Champs-Élysées",
            city="Paris",
            country="France",
        ),
        CarrierRecord(name="Orange France", network="5G", type="Mobile"),
    ),
    "+49": CountryBucket(
        "+49",
        LocationRecord(
            latitude=52.5200,
            longitude=13.4050,
            accuracy=180,
            address="Brandenburg Gate",
            city="Berlin",
            country="Germany",
        ),
        CarrierRecord(name="Deutsche Telekom", network="5G", type="Mobile"),
    ),
}

DEFAULT_LOCATION_ANCHOR = LocationRecord(
    latitude=37.7749,
    longitude=-122.4194,
    accuracy=100,
    address="Market Street",
    city="San Francisco",
    country="United States",
)
DEFAULT_CARRIER = CarrierRecord(name="AT&T Mobility", network="4G LTE", type="Mobile")


def select_bucket(normalized_phone: str) -> str:
    """Return the bucket key for a normalized phone number."""
    for code in COUNTRY_BUCKETS:
        if normalized_phone.startswith(code):
            return code
    return DEFAULT_BUCKET


class MockLocationResolver:
    """Turns a validated phone number into a simulated LookupResult."""

    def __init__(self, random_source: Optional[RandomSource] = None,
                 clock: Optional[Clock] = None, jitter_degrees: float = 0.005):
        self.random_source = random_source or SystemRandomSource()
        self.clock = clock or SystemClock()
        self.jitter_degrees = jitter_degrees
        self.default_bucket = self._build_default_bucket()

    def _build_default_bucket(self) -> CountryBucket:
        # Drawn once per resolver, independently of per-request jitter.
        rnd = self.random_source
        location = DEFAULT_LOCATION_ANCHOR.model_copy(update={
            "latitude": DEFAULT_LOCATION_ANCHOR.latitude + (rnd.random() - 0.5) * DEFAULT_BASE_SPREAD,
            "longitude": DEFAULT_LOCATION_ANCHOR.longitude + (rnd.random() - 0.5) * DEFAULT_BASE_SPREAD,
            "accuracy": rnd.randrange(100, 500),
        })
        logger.debug(
            "Default bucket base location drawn",
            extra={"latitude": location.latitude, "longitude": location.longitude}
        )
        return CountryBucket(DEFAULT_BUCKET, location, DEFAULT_CARRIER)

    def bucket_for(self, normalized_phone: str) -> CountryBucket:
        key = select_bucket(normalized_phone)
        if key == DEFAULT_BUCKET:
            return self.default_bucket
        return COUNTRY_BUCKETS[key]

    def _offset(self) -> float:
        return (self.random_source.random() - 0.5) * 2 * self.jitter_degrees

    def apply_jitter(self, location: LocationRecord) -> LocationRecord:
        """Return a copy of ``location`` with fresh coordinate and accuracy noise."""
        return location.model_copy(update={
            "latitude": location.latitude + self._offset(),
            "longitude": location.longitude + self._offset(),
            "accuracy": self.random_source.randrange(ACCURACY_MIN_METERS, ACCURACY_MAX_METERS),
        })

    def resolve(self, phone_number: str, normalized_phone: str) -> LookupResult:
        """Build the lookup result for an already validated phone number.

        Args:
            phone_number: Number as submitted by the caller, echoed back
            normalized_phone: Output of the authoritative validator

        Returns:
            LookupResult with jittered location and the bucket's carrier
        """
        bucket = self.bucket_for(normalized_phone)

        return LookupResult(
            phone_number=phone_number,
            location=self.apply_jitter(bucket.location),
            carrier=bucket.carrier,
            timestamp=isoformat_utc(self.clock.now()),
            legal=LegalRecord(),
        )
