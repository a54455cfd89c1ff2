import json

import pytest

from compressibility_study import logger as events
from compressibility_study.logger import ScheduleEventLog


def test_log_appends_jsonl(tmp_path):
    log = ScheduleEventLog(tmp_path / "logs")
    log.log(events.PARTICIPANT_ADDED, {"record_id": 4, "seed": 123})
    log.log(events.PARTICIPANT_REMOVED, {"record_id": 2})

    lines = log.path.read_text(encoding="utf-8").splitlines()
    assert log.path.name == "schedule_events.jsonl"
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["event"] == "participant_added"
    assert first["payload"] == {"record_id": 4, "seed": 123}
    assert first["ts_utc"].endswith("Z")
    assert [r["event"] for r in log.records()] == ["participant_added", "participant_removed"]


def test_unknown_event_is_rejected(tmp_path):
    log = ScheduleEventLog(tmp_path)
    with pytest.raises(ValueError):
        log.log("participant_renamed", {})
    assert list(log.records()) == []


def test_records_filter_by_event(tmp_path):
    log = ScheduleEventLog(tmp_path)
    log.log(events.SCHEDULE_GENERATED, {"participants": 2})
    log.log(events.PARTICIPANT_ADDED, {"record_id": 3})
    log.log(events.PARTICIPANT_ADDED, {"record_id": 4})
    added = list(log.records(events.PARTICIPANT_ADDED))
    assert [r["payload"]["record_id"] for r in added] == [3, 4]
    assert list(log.records(events.SCHEDULE_CLEARED)) == []


def test_records_on_empty_log(tmp_path):
    assert list(ScheduleEventLog(tmp_path / "fresh").records()) == []
