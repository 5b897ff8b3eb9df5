"""MetricHistory: bounded rolling record of metric snapshots for sparklines."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from archsim.models.metrics import MetricSnapshot


@dataclass
class HistoryEntry:
    """A metric snapshot stamped with the tick that produced it."""

    timestamp: str
    tick: int
    traffic_load: float
    metrics: MetricSnapshot


class MetricHistory:
    """Keeps the most recent *max_size* snapshots, oldest first."""

    def __init__(self, max_size: int = 30) -> None:
        self._entries: deque[HistoryEntry] = deque(maxlen=max_size)

    @property
    def max_size(self) -> int:
        return self._entries.maxlen

    def push(self, tick: int, traffic_load: float, metrics: MetricSnapshot) -> None:
        """Record *metrics*; the oldest entry is dropped once the history is full."""
        self._entries.append(
            HistoryEntry(
                timestamp=datetime.now(timezone.utc).isoformat(),
                tick=tick,
                traffic_load=traffic_load,
                metrics=metrics,
            )
        )

    def series(self, field: str) -> list[Any]:
        """Values of one MetricSnapshot field across the history."""
        if field not in MetricSnapshot.model_fields:
            raise KeyError(f"Unknown metric: {field}")
        return [getattr(e.metrics, field) for e in self._entries]

    def get_history(self, count: Optional[int] = None) -> list[dict[str, Any]]:
        """Return the last *count* entries (all when ``None``) as dicts, oldest first."""
        entries = list(self._entries)
        if count is not None:
            entries = entries[-count:] if count > 0 else []
        return [
            {
                "timestamp": e.timestamp,
                "tick": e.tick,
                "traffic_load": e.traffic_load,
                "metrics": e.metrics.model_dump(),
            }
            for e in entries
        ]

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
