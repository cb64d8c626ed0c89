"""Page-side presentation: search history and display helpers."""

from phone_location_service.presentation.history import SearchHistory

__all__ = ["SearchHistory"]
