from collections import deque
from typing import Deque, List

from models.event_log import EventLogEntry

RECENT_LIMIT = 50


class EventLog:
    """Append-only record of status transitions, newest first."""

    def __init__(self, retention: int = 1000):
        self._entries: Deque[EventLogEntry] = deque(maxlen=max(retention, RECENT_LIMIT))

    def append(self, entry: EventLogEntry) -> None:
        self._entries.appendleft(entry)

    def recent(self, limit: int = RECENT_LIMIT) -> List[EventLogEntry]:
        limit = max(0, min(limit, RECENT_LIMIT))
        return [entry for _, entry in zip(range(limit), self._entries)]

    def for_site(self, site_id: str) -> List[EventLogEntry]:
        return [entry for entry in self._entries if entry.website_id == site_id]

    def reset(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
