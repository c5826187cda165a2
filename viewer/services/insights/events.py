"""Change notifications for observers of the insight cache."""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from uuid import UUID

from loguru import logger


class ChangeTopic(StrEnum):
    """Observable parts of the insight service."""

    INSIGHT_GROUPS = "insight_groups"
    LOADING = "loading"
    SELECTION = "selection"


@dataclass(frozen=True)
class ChangeEvent:
    topic: ChangeTopic
    app_id: UUID | None = None


ChangeHandler = Callable[[ChangeEvent], None]


class ChangeNotifier:
    """In-process callback registry; handlers run synchronously on publish."""

    def __init__(self):
        self._subscribers: dict[str, tuple[ChangeTopic | None, ChangeHandler]] = {}

    def subscribe(self, handler: ChangeHandler, topic: ChangeTopic | None = None) -> str:
        """Register a handler for one topic, or for all topics when `topic` is None."""
        token = str(uuid.uuid4())
        self._subscribers[token] = (topic, handler)
        return token

    def unsubscribe(self, token: str) -> None:
        self._subscribers.pop(token, None)

    def publish(self, topic: ChangeTopic, app_id: UUID | None = None) -> ChangeEvent:
        event = ChangeEvent(topic=topic, app_id=app_id)
        # Copy so handlers may (un)subscribe while we iterate
        for wanted, handler in list(self._subscribers.values()):
            if wanted is not None and wanted != topic:
                continue
            try:
                handler(event)
            except Exception:
                logger.exception("Change handler failed for {}", topic)
        return event

    def __len__(self) -> int:
        return len(self._subscribers)
