import httpx
import pytest

from compressibility_study.config import StudyConfig
from compressibility_study.logger import ScheduleEventLog
from compressibility_study.service import StudyService
from compressibility_study.storage import HttpDocumentStore, LocalFileStore, ScheduleRepository


def _service(tmp_path, primary=None):
    repo = ScheduleRepository(LocalFileStore(tmp_path / "data.json"), primary=primary)
    return StudyService(repo, logger=ScheduleEventLog(tmp_path / "logs"))


def _events(service):
    return [r["event"] for r in service.logger.records()]


def test_generate_persists_and_logs(tmp_path):
    service = _service(tmp_path)
    sched = service.generate(2, process_random=lambda: 0.5)
    assert service.current() == sched
    assert [p.random_seed for p in sched.participants] == [500000, 500000]
    rec = list(service.logger.records())[0]
    assert rec["event"] == "schedule_generated"
    assert rec["payload"] == {"participants": 2, "seeds": [500000, 500000]}


def test_mutations_round_trip_through_storage(tmp_path):
    service = _service(tmp_path)
    service.generate(3, process_random=lambda: 0.1)

    after_add = service.add_participant(seed=42)
    assert service.current() == after_add
    assert after_add.summary.total_participants == 4

    after_remove = service.remove_participant(1)
    assert [p.record_id for p in service.current().participants] == [1, 2, 3]
    assert after_remove.participant(3).random_seed == 42

    after_regen = service.regenerate_participant(3, seed=43)
    assert service.current().participant(3).random_seed == 43
    assert after_regen.summary == after_remove.summary

    assert _events(service) == [
        "schedule_generated",
        "participant_added",
        "participant_removed",
        "participant_regenerated",
    ]


def test_mutation_without_schedule_raises(tmp_path):
    service = _service(tmp_path)
    with pytest.raises(ValueError):
        service.add_participant()
    with pytest.raises(ValueError):
        service.remove_participant(1)


def test_invalid_count_stores_nothing(tmp_path):
    service = _service(tmp_path)
    with pytest.raises(ValueError):
        service.generate(0)
    assert service.current() is None


def test_degraded_store_keeps_local_copy(tmp_path):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    primary = HttpDocumentStore("https://store.test/doc", client=httpx.Client(transport=httpx.MockTransport(handler)))
    service = _service(tmp_path, primary=primary)
    with pytest.raises(httpx.HTTPError):
        service.generate(1, process_random=lambda: 0.5)
    assert _events(service) == ["store_degraded"]
    # load falls back to the local copy written before the error surfaced
    loaded = service.current()
    assert loaded is not None
    assert loaded.participants[0].random_seed == 500000


def test_clear(tmp_path):
    service = _service(tmp_path)
    service.generate(1, process_random=lambda: 0.5)
    service.clear()
    assert service.current() is None
    assert _events(service)[-1] == "schedule_cleared"


def test_from_config(tmp_path):
    cfg = StudyConfig(local_path=str(tmp_path / "s.json"), log_dir=str(tmp_path / "logs"))
    service = StudyService.from_config(cfg)
    assert service.repository.primary is None
    assert service.logger is not None
    service.generate(1, process_random=lambda: 0.3)
    assert (tmp_path / "s.json").exists()
    assert (tmp_path / "logs" / "schedule_events.jsonl").exists()

    remote = StudyService.from_config(StudyConfig(remote_url="https://store.test/doc", local_path=str(tmp_path / "r.json"), log_dir=None))
    assert isinstance(remote.repository.primary, HttpDocumentStore)
    assert remote.repository.primary.timeout == 10.0
    assert remote.logger is None
