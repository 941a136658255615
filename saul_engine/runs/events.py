"""Append-only session events stream."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any

from ..utils import now_utc_iso


@dataclass
class EventWriter:
    """JSONL log for one CLI session.

    Every line carries the session id, a per-session sequence number and the
    provider/model the session was started with, so callers only pass what
    is specific to the event.
    """

    path: Path
    session_id: str
    provider: str = ""
    model: str | None = None
    _seq: int = field(default=0, repr=False, init=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, init=False)

    def emit(self, event_type: str, **payload: Any) -> dict[str, Any]:
        with self._lock:
            self._seq += 1
            event: dict[str, Any] = {
                "seq": self._seq,
                "ts": now_utc_iso(),
                "type": event_type,
                "session_id": self.session_id,
                "provider": self.provider,
            }
            if self.model:
                event["model"] = self.model
            event.update(payload)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(f"{json.dumps(event)}\n")
        return event


class NullEventWriter:
    """Drop-in writer used when no events path was requested."""

    session_id = ""

    def emit(self, event_type: str, **payload: Any) -> dict[str, Any]:
        return {"type": event_type, **payload}
