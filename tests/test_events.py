from __future__ import annotations

import json
from pathlib import Path

from saul_engine.runs.events import EventWriter, NullEventWriter


def test_event_writer(tmp_path: Path) -> None:
    path = tmp_path / "events.jsonl"
    writer = EventWriter(path, "session-123", provider="dryrun")
    writer.emit("session_started", interactive=False)
    writer.emit("version_saved", path="/tmp/a.svg")
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    payload = json.loads(lines[0])
    assert payload["type"] == "session_started"
    assert payload["session_id"] == "session-123"
    assert "ts" in payload
    assert payload["provider"] == "dryrun"


def test_null_event_writer_writes_nothing(tmp_path: Path) -> None:
    writer = NullEventWriter()
    event = writer.emit("generation_started", action="generate")
    assert event == {"type": "generation_started", "action": "generate"}
    assert list(tmp_path.iterdir()) == []


def test_event_writer_stamps_session_fields(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "events.jsonl"
    writer = EventWriter(path, "s-1", provider="claude", model="claude-sonnet-4-5-20250929")
    writer.emit("generation_started", action="modify")
    writer.emit("generation_completed", action="modify", output_tokens=7)

    first, second = (json.loads(line) for line in path.read_text(encoding="utf-8").splitlines())
    assert (first["seq"], second["seq"]) == (1, 2)
    assert first["provider"] == second["provider"] == "claude"
    assert first["model"] == "claude-sonnet-4-5-20250929"
    assert second["output_tokens"] == 7


def test_event_writer_omits_unknown_model(tmp_path: Path) -> None:
    path = tmp_path / "events.jsonl"
    EventWriter(path, "s-2", provider="broken").emit("session_started")
    payload = json.loads(path.read_text(encoding="utf-8"))
    assert "model" not in payload
    assert payload["provider"] == "broken"
