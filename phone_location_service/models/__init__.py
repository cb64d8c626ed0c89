"""Data models for the phone location service."""

from .schemas import (
    LocationRecord,
    CarrierRecord,
    LegalRecord,
    LookupResult,
    ErrorResponse,
    HealthCheckResponse,
    LocationReport,
    SearchDetails,
)

__all__ = [
    "LocationRecord",
    "CarrierRecord",
    "LegalRecord",
    "LookupResult",
    "ErrorResponse",
    "HealthCheckResponse",
    "LocationReport",
    "SearchDetails",
]
