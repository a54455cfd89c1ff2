from __future__ import annotations

from typing import List, Sequence, Tuple

from .models import REPETITIONS, AssignedModel, Measurement
from .randomization import RandomSource, shuffle


def _measurement(rep: int, position: int, model: AssignedModel) -> Measurement:
    return Measurement(
        repetition=rep,
        model_order=position,
        model_id=model.id,
        model_name=model.name,
        color=model.color,
    )


def fixed_cycle_measurements(
    models: Sequence[AssignedModel], *, repetitions: int = REPETITIONS
) -> Tuple[Measurement, ...]:
    """Repeat the assigned model order unchanged in every repetition."""
    out: List[Measurement] = []
    for rep in range(1, repetitions + 1):
        for pos, model in enumerate(models, start=1):
            out.append(_measurement(rep, pos, model))
    return tuple(out)


def randomized_cycle_measurements(
    models: Sequence[AssignedModel], random: RandomSource, *, repetitions: int = REPETITIONS
) -> Tuple[Measurement, ...]:
    """Reshuffle the models independently for every repetition.

    Each repetition draws len(models) - 1 values from `random`, so successive
    repetitions continue the same stream rather than restarting it.
    """
    out: List[Measurement] = []
    for rep in range(1, repetitions + 1):
        indices = shuffle(range(len(models)), random)
        for pos, idx in enumerate(indices, start=1):
            out.append(_measurement(rep, pos, models[idx]))
    return tuple(out)
