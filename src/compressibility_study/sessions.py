from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from .cycles import fixed_cycle_measurements, randomized_cycle_measurements
from .models import (
    BALL,
    BALLOON,
    CATALOGS,
    MEASUREMENTS_PER_SESSION,
    MODALITIES,
    MODEL_TYPES,
    PALPATION,
    AssignedModel,
    ModalityBlock,
    ModelSpec,
    ModelTypeBlock,
    Session,
)
from .randomization import RandomSource


def _check_permutation(label: str, order: Sequence[str], expected: Sequence[str]) -> None:
    if len(order) != len(expected) or set(order) != set(expected):
        raise ValueError(f"{label} must be a permutation of {list(expected)}, got {list(order)}")


def resolve_models(model_type: str, ids: Sequence[str]) -> Tuple[AssignedModel, ...]:
    """Looks up display name and color for each id, numbering them in order."""
    catalog: Dict[str, ModelSpec] = {m.id: m for m in CATALOGS[model_type]}
    out: List[AssignedModel] = []
    for pos, model_id in enumerate(ids, start=1):
        spec = catalog.get(model_id)
        if spec is None:
            raise ValueError(f"Unknown {model_type} model id: {model_id!r}")
        out.append(AssignedModel(id=spec.id, name=spec.name, order=pos, color=spec.color))
    return tuple(out)


def _block(
    model_type: str,
    models: Tuple[AssignedModel, ...],
    *,
    modality: str,
    model_type_order: Sequence[str],
    random: RandomSource,
) -> ModelTypeBlock:
    # palpation reshuffles every cycle, ultrasound keeps the assigned order
    if modality == PALPATION:
        measurements = randomized_cycle_measurements(models, random)
    else:
        measurements = fixed_cycle_measurements(models)
    return ModelTypeBlock(
        model_type=model_type,
        order=1 if model_type_order[0] == model_type else 2,
        models=models,
        measurements=measurements,
    )


def build_session(
    session_number: int,
    modality_order: Sequence[str],
    model_type_order: Sequence[str],
    ball_order: Sequence[str],
    balloon_order: Sequence[str],
    random: RandomSource,
) -> Session:
    """Assembles one session: modality blocks -> model-type blocks -> measurements.

    Within each modality the ball block is generated before the balloon block,
    regardless of `model_type_order`; the stream position depends on it.
    """
    _check_permutation("modality_order", modality_order, MODALITIES)
    _check_permutation("model_type_order", model_type_order, MODEL_TYPES)
    ball_models = resolve_models(BALL, ball_order)
    balloon_models = resolve_models(BALLOON, balloon_order)
    _check_permutation("ball_order", ball_order, [m.id for m in CATALOGS[BALL]])
    _check_permutation("balloon_order", balloon_order, [m.id for m in CATALOGS[BALLOON]])

    modalities: List[ModalityBlock] = []
    for pos, modality in enumerate(modality_order, start=1):
        ball_block = _block(BALL, ball_models, modality=modality, model_type_order=model_type_order, random=random)
        balloon_block = _block(
            BALLOON, balloon_models, modality=modality, model_type_order=model_type_order, random=random
        )
        modalities.append(ModalityBlock(modality=modality, order=pos, ball_block=ball_block, balloon_block=balloon_block))

    return Session(
        session_number=session_number,
        modality_order=tuple(modality_order),
        model_type_order=tuple(model_type_order),
        ball_order=tuple(ball_order),
        balloon_order=tuple(balloon_order),
        modalities=tuple(modalities),
        total_measurements=MEASUREMENTS_PER_SESSION,
    )
