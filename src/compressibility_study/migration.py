"""Load-time upgrades of older persisted schedule documents.

Each step recognizes one legacy shape and returns an upgraded copy. Steps are
plain data in `MIGRATION_STEPS`; `migrate_schedule` applies them until none
matches. Fields a step does not know about are carried over unchanged.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, Sequence

Document = Dict[str, Any]

SPHERE_NAME_TO_COLOR: Dict[str, Dict[str, str]] = {
    "Sphere 1": {"name": "Yellow", "color": "#EAB308"},
    "Sphere 2": {"name": "Green", "color": "#22C55E"},
    "Sphere 3": {"name": "Red", "color": "#EF4444"},
    "Sphere 4": {"name": "Blue", "color": "#3B82F6"},
}
DEFAULT_BALL_COLORS: Dict[str, str] = {"1": "#EAB308", "2": "#22C55E", "3": "#EF4444", "4": "#3B82F6"}
FALLBACK_COLOR = "#888888"


@dataclass(frozen=True)
class MigrationStep:
    name: str
    applies: Callable[[Document], bool]
    upgrade: Callable[[Document], Document]


def _sessions(doc: Document) -> Iterator[Dict[str, Any]]:
    for participant in doc.get("participants") or []:
        for session in participant.get("sessions") or []:
            yield session


def _blocks(doc: Document, key: str) -> Iterator[Dict[str, Any]]:
    for session in _sessions(doc):
        for modality in session.get("modalities") or []:
            block = modality.get(key)
            if block:
                yield block


def _p_to_b(model_id: str) -> str:
    return "B" + model_id[1:] if model_id.startswith("P") else model_id


def _default_color(model_id: str) -> str:
    return DEFAULT_BALL_COLORS.get(str(model_id)[1:], FALLBACK_COLOR)


# balloonPointOrder -> balloonOrder


def _has_balloon_point_order(doc: Document) -> bool:
    return any("balloonPointOrder" in s and "balloonOrder" not in s for s in _sessions(doc))


def _rename_balloon_point_order(doc: Document) -> Document:
    out = copy.deepcopy(doc)
    for session in _sessions(out):
        if "balloonPointOrder" in session and "balloonOrder" not in session:
            session["balloonOrder"] = [_p_to_b(i) for i in session.pop("balloonPointOrder")]
    return out


# "Sphere N" names -> color names


def _has_sphere_names(doc: Document) -> bool:
    for block in _blocks(doc, "ballBlock"):
        if any(m.get("name") in SPHERE_NAME_TO_COLOR for m in block.get("models") or []):
            return True
        if any(m.get("modelName") in SPHERE_NAME_TO_COLOR for m in block.get("measurements") or []):
            return True
    return False


def _sphere_names_to_colors(doc: Document) -> Document:
    out = copy.deepcopy(doc)
    for block in _blocks(out, "ballBlock"):
        for model in block.get("models") or []:
            info = SPHERE_NAME_TO_COLOR.get(model.get("name"))
            if info:
                model.update(info)
        for meas in block.get("measurements") or []:
            info = SPHERE_NAME_TO_COLOR.get(meas.get("modelName"))
            if info:
                meas["modelName"] = info["name"]
                meas["color"] = info["color"]
    return out


# ball entries without a color


def _has_colorless_balls(doc: Document) -> bool:
    for block in _blocks(doc, "ballBlock"):
        if any(not m.get("color") for m in block.get("models") or []):
            return True
        if any(not m.get("color") for m in block.get("measurements") or []):
            return True
    return False


def _add_default_colors(doc: Document) -> Document:
    out = copy.deepcopy(doc)
    for block in _blocks(out, "ballBlock"):
        for model in block.get("models") or []:
            if not model.get("color"):
                model["color"] = _default_color(model.get("id", ""))
        for meas in block.get("measurements") or []:
            if not meas.get("color"):
                meas["color"] = _default_color(meas.get("modelId", ""))
    return out


# pressure balloons (P1..P4, "NN mmHg") -> named balloons (B1..B4)


def _has_pressure_balloons(doc: Document) -> bool:
    for block in _blocks(doc, "balloonBlock"):
        for model in block.get("models") or []:
            if str(model.get("id", "")).startswith("P") or ("pressure" in model and "name" not in model):
                return True
        for meas in block.get("measurements") or []:
            if str(meas.get("modelId", "")).startswith("P") or "mmHg" in str(meas.get("modelName", "")):
                return True
    return False


def _pressure_to_named_balloons(doc: Document) -> Document:
    out = copy.deepcopy(doc)
    for block in _blocks(out, "balloonBlock"):
        models = []
        for model in block.get("models") or []:
            new_id = _p_to_b(str(model.get("id", "")))
            if "pressure" in model and "name" not in model:
                model = {k: v for k, v in model.items() if k != "pressure"}
                model["name"] = f"Balloon {new_id[1:]}"
            model["id"] = new_id
            models.append(model)
        block["models"] = models
        for meas in block.get("measurements") or []:
            new_id = _p_to_b(str(meas.get("modelId", "")))
            meas["modelId"] = new_id
            if "mmHg" in str(meas.get("modelName", "")):
                meas["modelName"] = f"Balloon {new_id[1:]}"
    return out


MIGRATION_STEPS: Sequence[MigrationStep] = (
    MigrationStep("balloon_point_order", _has_balloon_point_order, _rename_balloon_point_order),
    MigrationStep("sphere_names_to_colors", _has_sphere_names, _sphere_names_to_colors),
    MigrationStep("default_ball_colors", _has_colorless_balls, _add_default_colors),
    MigrationStep("pressure_to_named_balloons", _has_pressure_balloons, _pressure_to_named_balloons),
)


def migrate_schedule(doc: Any, *, steps: Sequence[MigrationStep] = MIGRATION_STEPS, max_passes: int = 10) -> Any:
    """Upgrades a raw schedule document to the current shape.

    Input that is not a schedule document is returned as is. Raises ValueError
    if the steps keep matching after `max_passes` full passes.
    """
    if not isinstance(doc, dict) or not doc.get("participants"):
        return doc
    for _ in range(max_passes):
        applied = False
        for step in steps:
            if step.applies(doc):
                doc = step.upgrade(doc)
                applied = True
        if not applied:
            return doc
    raise ValueError(f"schedule migration did not converge after {max_passes} passes")
