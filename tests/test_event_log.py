"""Tests for the append-only audit log and its JSONL persistence."""

import json
from pathlib import Path

import pytest

from jobmarket.persistence.event_log import EventKind, EventLog, EventRecord


def _event(
    event_id: str = "EVT-00000001",
    kind: EventKind = EventKind.JOB_CREATED,
    job_id: int = 1,
    height: int = 100,
) -> EventRecord:
    return EventRecord.create(
        event_id=event_id,
        event_kind=kind,
        actor_id="client-1",
        payload={"job_id": job_id},
        block_height=height,
    )


class TestEventRecord:
    def test_hash_is_deterministic(self) -> None:
        assert _event().event_hash == _event().event_hash
        assert _event().event_hash.startswith("sha256:")

    def test_hash_covers_payload(self) -> None:
        assert _event(job_id=1).event_hash != _event(job_id=2).event_hash

    def test_to_dict(self) -> None:
        data = _event().to_dict()
        assert data["event_kind"] == "job_created"
        assert data["block_height"] == 100
        assert data["payload"] == {"job_id": 1}


class TestEventLogInMemory:
    def test_append_and_count(self) -> None:
        log = EventLog()
        log.append(_event("E1"))
        log.append(_event("E2"))
        assert log.count == 2
        assert log.last_event.event_id == "E2"

    def test_empty_log(self) -> None:
        log = EventLog()
        assert log.count == 0
        assert log.last_event is None

    def test_duplicate_id_rejected(self) -> None:
        log = EventLog()
        log.append(_event("E1"))
        with pytest.raises(ValueError, match="Duplicate event ID"):
            log.append(_event("E1"))
        assert log.count == 1

    def test_filter_by_kind(self) -> None:
        log = EventLog()
        log.append(_event("E1", EventKind.JOB_CREATED))
        log.append(_event("E2", EventKind.BID_PLACED))
        assert [e.event_id for e in log.events(EventKind.BID_PLACED)] == ["E2"]
        assert len(log.events()) == 2

    def test_events_for_job(self) -> None:
        log = EventLog()
        log.append(_event("E1", job_id=1))
        log.append(_event("E2", job_id=2))
        log.append(_event("E3", EventKind.BID_PLACED, job_id=1))
        assert [e.event_id for e in log.events_for_job(1)] == ["E1", "E3"]

    def test_events_since(self) -> None:
        log = EventLog()
        log.append(_event("E1", height=100))
        log.append(_event("E2", EventKind.BID_PLACED, height=120))
        log.append(_event("E3", EventKind.JOB_CANCELLED, height=130))
        assert [e.event_id for e in log.events_since(120)] == ["E2", "E3"]
        assert [e.event_id for e in log.events_since(120, EventKind.JOB_CANCELLED)] == ["E3"]


class TestEventLogPersistence:
    def test_reload(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        log = EventLog(storage_path=path)
        log.append(_event("E1"))
        log.append(_event("E2", EventKind.BID_PLACED))

        reloaded = EventLog(storage_path=path)
        assert reloaded.count == 2
        assert reloaded.events()[1].event_kind == EventKind.BID_PLACED
        assert reloaded.events()[0].event_hash == log.events()[0].event_hash

    def test_one_line_per_event(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        log = EventLog(storage_path=path)
        log.append(_event("E1"))
        log.append(_event("E2"))
        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert json.loads(lines[0])["event_id"] == "E1"

    def test_tampered_record_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        EventLog(storage_path=path).append(_event("E1"))
        data = json.loads(path.read_text(encoding="utf-8"))
        data["payload"]["job_id"] = 99
        path.write_text(json.dumps(data) + "\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Integrity check failed"):
            EventLog(storage_path=path)

    def test_duplicate_on_recovery_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        line = json.dumps(_event("E1").to_dict())
        path.write_text(line + "\n" + line + "\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Duplicate event ID on recovery"):
            EventLog(storage_path=path)

    def test_blank_lines_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "events.jsonl"
        path.write_text("\n" + json.dumps(_event("E1").to_dict()) + "\n\n", encoding="utf-8")
        assert EventLog(storage_path=path).count == 1

    def test_failed_write_leaves_log_unchanged(self, tmp_path: Path) -> None:
        path = tmp_path / "missing-dir" / "events.jsonl"
        log = EventLog(storage_path=path)
        with pytest.raises(OSError):
            log.append(_event("E1"))
        assert log.count == 0
