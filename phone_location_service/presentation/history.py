"""Session-scoped search history."""

import logging
from typing import Iterable, Iterator, List, Optional

from pydantic import TypeAdapter, ValidationError

from phone_location_service.models.schemas import LookupResult

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10

_history_adapter = TypeAdapter(List[LookupResult])


class SearchHistory:
    """Ordered, newest-first list of completed lookups.

    Instances are immutable: ``add`` and ``clear`` return new histories, so
    a history can be handed to templates by value. Nothing is kept on the
    server; the page round-trips the serialized history with every form post.
    """

    def __init__(self, entries: Iterable[LookupResult] = (), limit: int = DEFAULT_HISTORY_LIMIT):
        if limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self._entries = tuple(entries)[:limit]

    def add(self, result: LookupResult) -> "SearchHistory":
        return SearchHistory((result,) + self._entries, limit=self.limit)

    def clear(self) -> "SearchHistory":
        return SearchHistory(limit=self.limit)

    def get(self, index: int) -> Optional[LookupResult]:
        """Return the entry at ``index`` or None when out of range."""
        if 0 <= index < len(self._entries):
            return self._entries[index]
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LookupResult]:
        return iter(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def to_json(self) -> str:
        return _history_adapter.dump_json(list(self._entries), by_alias=True).decode("utf-8")

    @classmethod
    def from_json(cls, raw: Optional[str], limit: int = DEFAULT_HISTORY_LIMIT) -> "SearchHistory":
        """Rebuild a history carried by the page.

        Empty or malformed input yields an empty history.
        """
        if not raw:
            return cls(limit=limit)
        try:
            entries = _history_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Discarding malformed search history",
                extra={"error": str(e), "operation": "history_restore"}
            )
            return cls(limit=limit)
        return cls(entries, limit=limit)
