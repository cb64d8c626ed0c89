"""Server-rendered demo page.

The page owns the search history. It is serialized into a hidden field and
posted back with every form submission, so the server never stores it.
"""

import logging
import math
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import ValidationError

from phone_location_service import __version__
from phone_location_service.api.dependencies import get_lookup_service
from phone_location_service.config.logging import LoggingService
from phone_location_service.models.schemas import LookupResult
from phone_location_service.presentation.history import SearchHistory
from phone_location_service.presentation.views import (
    EXAMPLE_NUMBERS,
    build_report,
    distance_from_viewer,
    format_relative_time,
    report_filename,
)
from phone_location_service.services.location_lookup_service import (
    LocationLookupError,
    LocationLookupService,
)
from phone_location_service.services.phone_validator import (
    UNKNOWN_COUNTRY,
    detect_country,
    format_for_submission,
    is_valid_client_input,
)

logger = logging.getLogger(__name__)
logging_service = LoggingService(__name__)

router = APIRouter(include_in_schema=False)

CLIENT_INVALID_MESSAGE = "Please enter a valid phone number with country code"
NO_REPORT_MESSAGE = "No lookup result available for a report"

EXAMPLE_PHONE_NUMBERS = frozenset(example.number for example in EXAMPLE_NUMBERS)


def _parse_coordinate(value: str, bound: float) -> Optional[float]:
    try:
        coordinate = float(value) if value else None
    except ValueError:
        return None
    if coordinate is None or not math.isfinite(coordinate) or abs(coordinate) > bound:
        return None
    return coordinate


def _parse_index(action: str) -> Optional[int]:
    _, _, raw_index = action.partition(":")
    try:
        return int(raw_index)
    except ValueError:
        return None


def render_page(request: Request, history: SearchHistory, *, phone_number: str = "",
                result: Optional[LookupResult] = None, form_error: Optional[str] = None,
                lookup_error: Optional[str] = None, viewer_latitude: Optional[float] = None,
                viewer_longitude: Optional[float] = None,
                status_code: int = status.HTTP_200_OK) -> HTMLResponse:
    """Render the demo page for the given page state."""
    now = request.app.state.clock.now()
    detected = detect_country(phone_number) if phone_number else UNKNOWN_COUNTRY

    context: Dict[str, Any] = {
        "version": __version__,
        "phone_number": phone_number,
        "detected_country": None if detected == UNKNOWN_COUNTRY else detected,
        "form_error": form_error,
        "lookup_error": lookup_error,
        "result": result,
        "result_json": result.model_dump_json(by_alias=True) if result else "",
        "history": [
            (index, entry, format_relative_time(entry.timestamp, now))
            for index, entry in enumerate(history)
        ],
        "history_json": history.to_json(),
        "distance_km": distance_from_viewer(result, viewer_latitude, viewer_longitude) if result else None,
        "viewer_latitude": viewer_latitude,
        "viewer_longitude": viewer_longitude,
        "examples": EXAMPLE_NUMBERS,
    }
    return request.app.state.templates.TemplateResponse(
        request, "index.html", context, status_code=status_code
    )


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    """Render the empty demo page."""
    history = SearchHistory(limit=request.app.state.settings.history_limit)
    return render_page(request, history)


@router.post("/", response_class=HTMLResponse)
async def submit(
    request: Request,
    action: str = Form("search"),
    phone_number: str = Form(""),
    history: str = Form(""),
    viewer_latitude: str = Form(""),
    viewer_longitude: str = Form(""),
    service: LocationLookupService = Depends(get_lookup_service)
):
    """Handle the page's search, example, history selection and clear actions."""
    search_history = SearchHistory.from_json(history, limit=request.app.state.settings.history_limit)
    page = {
        "phone_number": phone_number,
        "viewer_latitude": _parse_coordinate(viewer_latitude, 90),
        "viewer_longitude": _parse_coordinate(viewer_longitude, 180),
    }

    if action == "clear":
        logging_service.log_operation("info", "Search history cleared", operation="history_clear",
                                      entries=len(search_history))
        return render_page(request, search_history.clear(), **page)

    if action.startswith("example:"):
        _, _, example = action.partition(":")
        if example in EXAMPLE_PHONE_NUMBERS:
            page["phone_number"] = example
        return render_page(request, search_history, **page)

    if action.startswith("select:"):
        index = _parse_index(action)
        selected = search_history.get(index) if index is not None else None
        if selected is None:
            return render_page(request, search_history, lookup_error="That search is no longer in the history",
                               **page)
        return render_page(request, search_history, result=selected, **page)

    if not phone_number.strip() or not is_valid_client_input(phone_number):
        return render_page(request, search_history, form_error=CLIENT_INVALID_MESSAGE, **page)

    submitted = format_for_submission(phone_number)
    try:
        result = await service.track_location(submitted)
    except (ValueError, LocationLookupError) as e:
        return render_page(request, search_history, lookup_error=str(e), **page)

    return render_page(request, search_history.add(result), result=result, **page)


@router.post("/report")
async def download_report(result: str = Form("")):
    """Serve the displayed lookup result as a downloadable JSON report."""
    try:
        lookup = LookupResult.model_validate_json(result)
    except ValidationError:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": NO_REPORT_MESSAGE}
        )

    report = build_report(lookup)
    return JSONResponse(
        content=report.model_dump(mode="json", by_alias=True),
        headers={"Content-Disposition": f'attachment; filename="{report_filename(lookup)}"'}
    )
