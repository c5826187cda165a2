"""In-memory cache entry for an app's insight groups."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from telemetry_client.insights import InsightGroup


@dataclass(frozen=True)
class CacheEntry:
    """Groups of one app together with the time they were loaded.

    Both fields live and die together: an app either has an entry or it
    does not.
    """

    groups: list[InsightGroup]
    loaded_at: datetime

    def is_stale(self, now: datetime, stale_after: timedelta) -> bool:
        return self.loaded_at < now - stale_after
