from __future__ import annotations

import math
import random as _ambient
from dataclasses import replace
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from .assignment import assign_participant
from .models import (
    MAX_PARTICIPANTS,
    MEASUREMENTS_PER_PARTICIPANT,
    MEASUREMENTS_PER_SESSION,
    Participant,
    Schedule,
    ScheduleSummary,
)
from .randomization import RandomSource, time_seeded_source

SEED_RANGE = 1_000_000


def validate_participant_count(n: object) -> int:
    if isinstance(n, bool) or not isinstance(n, int):
        raise ValueError(f"participant count must be an integer, got {n!r}")
    if not (1 <= n <= MAX_PARTICIPANTS):
        raise ValueError(f"participant count must be in [1, {MAX_PARTICIPANTS}], got {n}")
    return n


def compute_summary(participants: Sequence[Participant]) -> ScheduleSummary:
    n = len(participants)
    return ScheduleSummary(
        total_participants=n,
        measurements_per_session=MEASUREMENTS_PER_SESSION,
        measurements_per_participant=MEASUREMENTS_PER_PARTICIPANT,
        total_measurements=MEASUREMENTS_PER_PARTICIPANT * n,
    )


def draw_ambient_seed() -> int:
    """Fresh seed from the process-wide `random` module (not reproducible)."""
    return _ambient.randrange(SEED_RANGE)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def generate_schedule(
    n: int,
    *,
    process_random: Optional[RandomSource] = None,
    now: Optional[str] = None,
) -> Schedule:
    """Generates a schedule for `n` participants.

    Per-participant seeds are drawn as floor(process_random() * 1_000_000).
    The process stream is time-seeded by default, so a whole batch is never
    reproduced; each participant is reproducible from its stored seed.
    """
    validate_participant_count(n)
    if process_random is None:
        process_random = time_seeded_source()

    participants: List[Participant] = []
    for record_id in range(1, n + 1):
        seed = int(math.floor(process_random() * SEED_RANGE))
        participants.append(assign_participant(record_id, seed))

    return Schedule(
        generated_at=now or _utc_now_iso(),
        participants=tuple(participants),
        summary=compute_summary(participants),
    )


def add_participant(schedule: Schedule, *, seed: Optional[int] = None) -> Schedule:
    n = len(schedule.participants)
    if n >= MAX_PARTICIPANTS:
        raise ValueError(f"cannot add participant: schedule already has {MAX_PARTICIPANTS}")
    if seed is None:
        seed = draw_ambient_seed()
    participants = schedule.participants + (assign_participant(n + 1, seed),)
    return replace(schedule, participants=participants, summary=compute_summary(participants))


def remove_participant(schedule: Schedule, record_id: int) -> Schedule:
    """Drops one participant and renumbers the rest 1..N-1.

    Seeds and sessions travel with each participant; only record ids change.
    """
    schedule.participant(record_id)
    kept = [p for p in schedule.participants if p.record_id != record_id]
    participants = tuple(replace(p, record_id=i) for i, p in enumerate(kept, start=1))
    return replace(schedule, participants=participants, summary=compute_summary(participants))


def regenerate_participant(schedule: Schedule, record_id: int, *, seed: Optional[int] = None) -> Schedule:
    old = schedule.participant(record_id)
    if seed is None:
        seed = draw_ambient_seed()
    fresh = replace(assign_participant(record_id, seed), extras=old.extras)
    participants = tuple(fresh if p.record_id == record_id else p for p in schedule.participants)
    # participant count is unchanged, so is the summary
    return replace(schedule, participants=participants)
