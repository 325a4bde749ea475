"""
app/domain/analytics_event.py

Real-time analytics event pushed to dashboard subscribers.
"""

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal["submission", "review", "decision", "publication", "metrics_update"]

EVENT_TYPES: frozenset[str] = frozenset(
    {"submission", "review", "decision", "publication", "metrics_update"}
)

_BASE36_ALPHABET = string.digits + string.ascii_lowercase
_ID_SUFFIX_LENGTH = 9


def generate_event_id() -> str:
    """
    Return ``"<epoch-millis>-<9 base36 chars>"``.

    Unique enough within one process; not meant to be unguessable.
    """
    millis = time.time_ns() // 1_000_000
    suffix = "".join(random.choices(_BASE36_ALPHABET, k=_ID_SUFFIX_LENGTH))
    return f"{millis}-{suffix}"


@dataclass(frozen=True)
class AnalyticsEvent:
    """
    One notification delivered on the event bus.

    ``data`` is an opaque payload; for ``metrics_update`` events it holds
    the freshly computed metrics.
    """

    type: EventType
    journal_id: str
    data: dict[str, Any] = field(default_factory=dict)
    submission_id: str | None = None
    id: str = field(default_factory=generate_event_id)
    timestamp: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    def __post_init__(self) -> None:
        if self.type not in EVENT_TYPES:
            raise ValueError(
                f"Unknown analytics event type {self.type!r}. Valid types: {sorted(EVENT_TYPES)}"
            )
