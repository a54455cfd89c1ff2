from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional

SCHEDULE_GENERATED = "schedule_generated"
PARTICIPANT_ADDED = "participant_added"
PARTICIPANT_REMOVED = "participant_removed"
PARTICIPANT_REGENERATED = "participant_regenerated"
SCHEDULE_CLEARED = "schedule_cleared"
STORE_DEGRADED = "store_degraded"

EVENTS = frozenset(
    {
        SCHEDULE_GENERATED,
        PARTICIPANT_ADDED,
        PARTICIPANT_REMOVED,
        PARTICIPANT_REGENERATED,
        SCHEDULE_CLEARED,
        STORE_DEGRADED,
    }
)

LOG_FILENAME = "schedule_events.jsonl"


def _utc_stamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


class ScheduleEventLog:
    """Append-only JSONL audit trail of schedule mutations.

    One line per event: `{"ts_utc", "event", "payload"}`. Only the events in
    `EVENTS` are accepted, so the trail stays queryable by name.
    """

    def __init__(self, log_dir: str | Path) -> None:
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.path = self.log_dir / LOG_FILENAME

    def log(self, event: str, payload: Mapping[str, Any]) -> None:
        if event not in EVENTS:
            raise ValueError(f"Unknown schedule event {event!r}")
        line = json.dumps({"ts_utc": _utc_stamp(), "event": event, "payload": dict(payload)}, ensure_ascii=False)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")

    def records(self, event: Optional[str] = None) -> Iterator[Dict[str, Any]]:
        """Yields logged records in write order, optionally only one event kind."""
        if not self.path.exists():
            return
        with self.path.open("r", encoding="utf-8") as f:
            for line in f:
                if not line.strip():
                    continue
                rec = json.loads(line)
                if event is None or rec["event"] == event:
                    yield rec
