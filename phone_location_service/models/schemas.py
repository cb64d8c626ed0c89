"""Pydantic models for phone location service."""

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEMO_DATA_SOURCE = "Simulated Demo Data"

REPORT_DISCLAIMER = (
    "This is simulated data for demonstration purposes only. "
    "Real location tracking requires proper legal authorization."
)


class LocationRecord(BaseModel):
    """Approximate position attached to a lookup."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy: int = Field(..., ge=0, description="Accuracy radius in meters")
    address: str
    city: str
    country: str


class CarrierRecord(BaseModel):
    """Carrier metadata served for a country bucket."""

    model_config = ConfigDict(frozen=True)

    name: str
    network: str
    type: str


class LegalRecord(BaseModel):
    """Legal disclaimer. Lookups are never authorized."""

    model_config = ConfigDict(frozen=True)

    authorized: Literal[False] = False
    source: str = DEMO_DATA_SOURCE


class LookupResult(BaseModel):
    """Complete payload returned by a location lookup."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    phone_number: str = Field(..., alias="phoneNumber")
    location: LocationRecord
    carrier: CarrierRecord
    timestamp: str = Field(..., description="ISO-8601 time of resolution")
    legal: LegalRecord = Field(default_factory=LegalRecord)

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: str) -> str:
        try:
            datetime.fromisoformat(v.replace("Z", "+00:00"))
        except ValueError:
            raise ValueError("Timestamp must be an ISO-8601 date and time")
        return v


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str = Field(..., description="Human-readable error message")


class HealthCheckResponse(BaseModel):
    """Response model for health check endpoint."""

    status: str = Field(..., description="Service status")
    version: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class SearchDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    phone_number: str = Field(..., alias="phoneNumber")
    timestamp: str
    legal: LegalRecord


class LocationReport(BaseModel):
    """Downloadable report built from a displayed lookup result."""

    model_config = ConfigDict(populate_by_name=True)

    search_details: SearchDetails = Field(..., alias="searchDetails")
    location_data: LocationRecord = Field(..., alias="locationData")
    carrier_info: CarrierRecord = Field(..., alias="carrierInfo")
    disclaimer: str = REPORT_DISCLAIMER
