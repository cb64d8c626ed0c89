"""Helpers that turn lookup results into what the page displays."""

import math
import re
from datetime import datetime, timezone
from typing import Dict, List, NamedTuple, Optional

from phone_location_service.models.schemas import (
    LocationReport,
    LookupResult,
    SearchDetails,
)

EARTH_RADIUS_KM = 6371.0

HIGH_PRECISION_MAX_METERS = 100
MEDIUM_PRECISION_MAX_METERS = 500
MAX_ACCURACY_CIRCLE_PX = 200

UNKNOWN_FLAG = "🌍"

COUNTRY_FLAGS: Dict[str, str] = {
    "United States": "🇺🇸",
    "Canada": "🇨🇦",
    "United Kingdom": "🇬🇧",
    "France": "🇫🇷",
    "Germany": "🇩🇪",
    "Japan": "🇯🇵",
    "China": "🇨🇳",
    "India": "🇮🇳",
    "Australia": "🇦🇺",
    "Brazil": "🇧🇷",
    "Russia": "🇷🇺",
    "Spain": "🇪🇸",
    "Italy": "🇮🇹",
    "Netherlands": "🇳🇱",
    "Sweden": "🇸🇪",
}


class ExampleNumber(NamedTuple):
    number: str
    label: str


EXAMPLE_NUMBERS: List[ExampleNumber] = [
    ExampleNumber("+1-555-123-4567", "US Example"),
    ExampleNumber("+44-20-7946-0958", "UK Example"),
    ExampleNumber("+33-1-42-86-83-26", "France Example"),
]


def calculate_distance_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Great-circle distance between two points using the haversine formula."""
    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2)
    a = min(a, 1.0)  # rounding can overshoot for antipodal points
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_from_viewer(result: LookupResult, latitude: Optional[float],
                         longitude: Optional[float]) -> Optional[float]:
    if latitude is None or longitude is None:
        return None
    return calculate_distance_km(latitude, longitude, result.location.latitude, result.location.longitude)


def accuracy_level(accuracy: float) -> str:
    if accuracy <= HIGH_PRECISION_MAX_METERS:
        return "High"
    if accuracy <= MEDIUM_PRECISION_MAX_METERS:
        return "Medium"
    return "Low"


def confidence_level(accuracy: float) -> str:
    return {
        "High": "High (95%)",
        "Medium": "Medium (80%)",
        "Low": "Low (60%)",
    }[accuracy_level(accuracy)]


def accuracy_circle_px(accuracy: float) -> float:
    return min(accuracy / 5, MAX_ACCURACY_CIRCLE_PX)


def parse_timestamp(timestamp: str) -> datetime:
    moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def format_timestamp(timestamp: str) -> str:
    """Render an ISO-8601 timestamp like ``May 01, 2024, 12:30:00 PM UTC``."""
    moment = parse_timestamp(timestamp).astimezone(timezone.utc)
    return moment.strftime("%b %d, %Y, %I:%M:%S %p UTC")


def format_relative_time(timestamp: str, now: datetime) -> str:
    """Describe how long ago a lookup happened, relative to ``now``."""
    moment = parse_timestamp(timestamp)
    diff_minutes = math.floor((now - moment).total_seconds() / 60)
    diff_hours = math.floor(diff_minutes / 60)
    diff_days = math.floor(diff_hours / 24)

    if diff_minutes < 1:
        return "Just now"
    if diff_minutes < 60:
        return f"{diff_minutes}m ago"
    if diff_hours < 24:
        return f"{diff_hours}h ago"
    if diff_days < 7:
        return f"{diff_days}d ago"

    label = f"{moment.strftime('%b')} {moment.day}"
    if moment.year != now.year:
        label += f", {moment.year}"
    return label


def country_flag(country: str) -> str:
    return COUNTRY_FLAGS.get(country, UNKNOWN_FLAG)


def format_coordinates(result: LookupResult) -> str:
    return f"{result.location.latitude:.6f}, {result.location.longitude:.6f}"


def build_report(result: LookupResult) -> LocationReport:
    """Assemble the downloadable report for a displayed result."""
    return LocationReport(
        search_details=SearchDetails(
            phone_number=result.phone_number,
            timestamp=result.timestamp,
            legal=result.legal,
        ),
        location_data=result.location,
        carrier_info=result.carrier,
    )


def report_filename(result: LookupResult) -> str:
    digits = re.sub(r"[^0-9]", "", result.phone_number)
    return f"location-report-{digits}.json"
