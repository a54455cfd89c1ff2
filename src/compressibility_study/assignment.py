from __future__ import annotations

import copy
from dataclasses import replace

from .models import BALL, BALLOON, MODALITIES, MODEL_TYPES, SESSIONS_PER_PARTICIPANT, Participant, catalog_ids
from .randomization import SeededRandomSource, shuffle
from .sessions import build_session


def assign_participant(record_id: int, seed: int) -> Participant:
    """Derives a participant's full schedule from a single seed.

    Draw order is fixed: modality order, model-type order, ball order,
    balloon order, then the palpation reshuffles inside session 1. Sessions
    2 and 3 are copies of session 1; nothing is re-randomized.
    """
    random = SeededRandomSource(seed)

    modality_order = shuffle(MODALITIES, random)
    model_type_order = shuffle(MODEL_TYPES, random)
    ball_order = shuffle(catalog_ids(BALL), random)
    balloon_order = shuffle(catalog_ids(BALLOON), random)

    base = build_session(1, modality_order, model_type_order, ball_order, balloon_order, random)
    sessions = (base,) + tuple(
        replace(copy.deepcopy(base), session_number=n) for n in range(2, SESSIONS_PER_PARTICIPANT + 1)
    )
    return Participant(record_id=int(record_id), random_seed=int(seed), sessions=sessions)
