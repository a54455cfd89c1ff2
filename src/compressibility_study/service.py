from __future__ import annotations

from typing import Any, Callable, Dict, Optional

import httpx

from .config import StudyConfig
from . import logger as events
from .logger import ScheduleEventLog
from .models import Schedule
from .schedule import add_participant, generate_schedule, regenerate_participant, remove_participant
from .storage import HttpDocumentStore, LocalFileStore, ScheduleRepository


class StudyService:
    """Entry points used by the UI layer: load, mutate, store, log.

    Every mutation replaces the persisted schedule wholesale.
    """

    def __init__(self, repository: ScheduleRepository, *, logger: Optional[ScheduleEventLog] = None) -> None:
        self.repository = repository
        self.logger = logger

    @classmethod
    def from_config(cls, cfg: StudyConfig) -> "StudyService":
        cfg.validate()
        primary = None
        if cfg.remote_url:
            primary = HttpDocumentStore(cfg.remote_url, timeout=cfg.remote_timeout_s, headers=cfg.remote_headers)
        repo = ScheduleRepository(LocalFileStore(cfg.local_path), primary=primary)
        logger = ScheduleEventLog(cfg.log_dir) if cfg.log_dir else None
        return cls(repo, logger=logger)

    def _log(self, event: str, payload: Dict[str, Any]) -> None:
        if self.logger is not None:
            self.logger.log(event, payload)

    def _save(self, schedule: Schedule, event: str, payload: Dict[str, Any]) -> Schedule:
        try:
            self.repository.store(schedule)
        except httpx.HTTPError as exc:
            self._log(events.STORE_DEGRADED, {"event": event, "error": f"{type(exc).__name__}: {exc}"})
            raise
        self._log(event, payload)
        return schedule

    def current(self) -> Optional[Schedule]:
        return self.repository.load()

    def _require_current(self) -> Schedule:
        schedule = self.current()
        if schedule is None:
            raise ValueError("No schedule found; generate one first")
        return schedule

    def generate(self, n: int, *, process_random: Optional[Callable[[], float]] = None) -> Schedule:
        schedule = generate_schedule(n, process_random=process_random)
        return self._save(
            schedule,
            events.SCHEDULE_GENERATED,
            {"participants": n, "seeds": [p.random_seed for p in schedule.participants]},
        )

    def add_participant(self, *, seed: Optional[int] = None) -> Schedule:
        schedule = add_participant(self._require_current(), seed=seed)
        added = schedule.participants[-1]
        return self._save(schedule, events.PARTICIPANT_ADDED, {"record_id": added.record_id, "seed": added.random_seed})

    def remove_participant(self, record_id: int) -> Schedule:
        before = self._require_current()
        seed = before.participant(record_id).random_seed
        schedule = remove_participant(before, record_id)
        return self._save(schedule, events.PARTICIPANT_REMOVED, {"record_id": record_id, "seed": seed})

    def regenerate_participant(self, record_id: int, *, seed: Optional[int] = None) -> Schedule:
        before = self._require_current()
        old_seed = before.participant(record_id).random_seed
        schedule = regenerate_participant(before, record_id, seed=seed)
        new_seed = schedule.participant(record_id).random_seed
        return self._save(
            schedule,
            events.PARTICIPANT_REGENERATED,
            {"record_id": record_id, "old_seed": old_seed, "seed": new_seed},
        )

    def clear(self) -> None:
        self.repository.clear()
        self._log(events.SCHEDULE_CLEARED, {})
