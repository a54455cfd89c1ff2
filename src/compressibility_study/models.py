from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

REPETITIONS = 5
MODELS_PER_TYPE = 4
SESSIONS_PER_PARTICIPANT = 3
MEASUREMENTS_PER_SESSION = 80
MEASUREMENTS_PER_PARTICIPANT = MEASUREMENTS_PER_SESSION * SESSIONS_PER_PARTICIPANT
MAX_PARTICIPANTS = 50

ULTRASOUND = "ultrasound"
PALPATION = "palpation"
BALL = "ball"
BALLOON = "balloon"

MODALITIES: Tuple[str, str] = (ULTRASOUND, PALPATION)
MODEL_TYPES: Tuple[str, str] = (BALL, BALLOON)


@dataclass(frozen=True)
class ModelSpec:
    id: str
    name: str
    color: Optional[str] = None


BALL_MODELS: Tuple[ModelSpec, ...] = (
    ModelSpec("S1", "Yellow", "#EAB308"),
    ModelSpec("S2", "Green", "#22C55E"),
    ModelSpec("S3", "Red", "#EF4444"),
    ModelSpec("S4", "Blue", "#3B82F6"),
)

BALLOON_MODELS: Tuple[ModelSpec, ...] = (
    ModelSpec("B1", "Balloon 1"),
    ModelSpec("B2", "Balloon 2"),
    ModelSpec("B3", "Balloon 3"),
    ModelSpec("B4", "Balloon 4"),
)

CATALOGS: Dict[str, Tuple[ModelSpec, ...]] = {BALL: BALL_MODELS, BALLOON: BALLOON_MODELS}


def catalog_ids(model_type: str) -> Tuple[str, ...]:
    return tuple(m.id for m in CATALOGS[model_type])


def _with_color(d: Dict[str, Any], color: Optional[str]) -> Dict[str, Any]:
    # absent colors are omitted, never serialized as null
    if color:
        d["color"] = color
    return d


def _unconsumed(d: Mapping[str, Any], known: Tuple[str, ...]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if k not in known}


def _merge_extras(d: Dict[str, Any], extras: Mapping[str, Any]) -> Dict[str, Any]:
    # modelled keys win over a stale copy carried in extras
    for k, v in extras.items():
        d.setdefault(k, v)
    return d


@dataclass(frozen=True)
class AssignedModel:
    """A catalog model placed at a 1-based position for one session."""

    id: str
    name: str
    order: int
    color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"id": self.id, "name": self.name}
        _with_color(d, self.color)
        d["order"] = self.order
        return d

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "AssignedModel":
        return cls(id=str(d["id"]), name=str(d["name"]), order=int(d["order"]), color=d.get("color"))


@dataclass(frozen=True)
class Measurement:
    repetition: int
    model_order: int
    model_id: str
    model_name: str
    color: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "repetition": self.repetition,
            "modelOrder": self.model_order,
            "modelId": self.model_id,
            "modelName": self.model_name,
        }
        return _with_color(d, self.color)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Measurement":
        return cls(
            repetition=int(d["repetition"]),
            model_order=int(d["modelOrder"]),
            model_id=str(d["modelId"]),
            model_name=str(d["modelName"]),
            color=d.get("color"),
        )


@dataclass(frozen=True)
class ModelTypeBlock:
    model_type: str
    order: int
    models: Tuple[AssignedModel, ...]
    measurements: Tuple[Measurement, ...]

    def repetition(self, rep: int) -> Tuple[Measurement, ...]:
        return tuple(m for m in self.measurements if m.repetition == rep)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "modelType": self.model_type,
            "order": self.order,
            "models": [m.to_dict() for m in self.models],
            "measurements": [m.to_dict() for m in self.measurements],
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ModelTypeBlock":
        return cls(
            model_type=str(d["modelType"]),
            order=int(d["order"]),
            models=tuple(AssignedModel.from_dict(m) for m in d["models"]),
            measurements=tuple(Measurement.from_dict(m) for m in d["measurements"]),
        )


@dataclass(frozen=True)
class ModalityBlock:
    modality: str
    order: int
    ball_block: ModelTypeBlock
    balloon_block: ModelTypeBlock

    def blocks_in_order(self) -> Tuple[ModelTypeBlock, ModelTypeBlock]:
        if self.ball_block.order <= self.balloon_block.order:
            return (self.ball_block, self.balloon_block)
        return (self.balloon_block, self.ball_block)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "modality": self.modality,
            "order": self.order,
            "ballBlock": self.ball_block.to_dict(),
            "balloonBlock": self.balloon_block.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ModalityBlock":
        return cls(
            modality=str(d["modality"]),
            order=int(d["order"]),
            ball_block=ModelTypeBlock.from_dict(d["ballBlock"]),
            balloon_block=ModelTypeBlock.from_dict(d["balloonBlock"]),
        )


@dataclass(frozen=True)
class Session:
    session_number: int
    modality_order: Tuple[str, ...]
    model_type_order: Tuple[str, ...]
    ball_order: Tuple[str, ...]
    balloon_order: Tuple[str, ...]
    modalities: Tuple[ModalityBlock, ...]
    total_measurements: int = MEASUREMENTS_PER_SESSION
    extras: Dict[str, Any] = field(default_factory=dict)

    _KEYS = (
        "sessionNumber",
        "modalityOrder",
        "modelTypeOrder",
        "ballSphereOrder",
        "balloonOrder",
        "modalities",
        "totalMeasurements",
    )

    def count_measurements(self) -> int:
        return sum(
            len(mb.ball_block.measurements) + len(mb.balloon_block.measurements) for mb in self.modalities
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "sessionNumber": self.session_number,
            "modalityOrder": list(self.modality_order),
            "modelTypeOrder": list(self.model_type_order),
            "ballSphereOrder": list(self.ball_order),
            "balloonOrder": list(self.balloon_order),
            "modalities": [m.to_dict() for m in self.modalities],
            "totalMeasurements": self.total_measurements,
        }
        return _merge_extras(d, self.extras)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Session":
        return cls(
            session_number=int(d["sessionNumber"]),
            modality_order=tuple(d["modalityOrder"]),
            model_type_order=tuple(d["modelTypeOrder"]),
            ball_order=tuple(d["ballSphereOrder"]),
            balloon_order=tuple(d["balloonOrder"]),
            modalities=tuple(ModalityBlock.from_dict(m) for m in d["modalities"]),
            total_measurements=int(d.get("totalMeasurements", MEASUREMENTS_PER_SESSION)),
            extras=_unconsumed(d, cls._KEYS),
        )


@dataclass(frozen=True)
class Participant:
    record_id: int
    random_seed: int
    sessions: Tuple[Session, ...]
    extras: Dict[str, Any] = field(default_factory=dict)

    _KEYS = ("recordId", "randomSeed", "sessions")

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "recordId": self.record_id,
            "randomSeed": self.random_seed,
            "sessions": [s.to_dict() for s in self.sessions],
        }
        return _merge_extras(d, self.extras)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Participant":
        return cls(
            record_id=int(d["recordId"]),
            random_seed=int(d["randomSeed"]),
            sessions=tuple(Session.from_dict(s) for s in d["sessions"]),
            extras=_unconsumed(d, cls._KEYS),
        )


@dataclass(frozen=True)
class ScheduleSummary:
    total_participants: int
    measurements_per_session: int = MEASUREMENTS_PER_SESSION
    measurements_per_participant: int = MEASUREMENTS_PER_PARTICIPANT
    total_measurements: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalParticipants": self.total_participants,
            "measurementsPerSession": self.measurements_per_session,
            "measurementsPerParticipant": self.measurements_per_participant,
            "totalMeasurements": self.total_measurements,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "ScheduleSummary":
        return cls(
            total_participants=int(d["totalParticipants"]),
            measurements_per_session=int(d["measurementsPerSession"]),
            measurements_per_participant=int(d["measurementsPerParticipant"]),
            total_measurements=int(d["totalMeasurements"]),
        )


@dataclass(frozen=True)
class Schedule:
    """Top-level aggregate; the single root of a study's randomization.

    `extras` holds document keys this version does not model, so they
    survive a load/store round-trip.
    """

    generated_at: str
    participants: Tuple[Participant, ...]
    summary: ScheduleSummary
    extras: Dict[str, Any] = field(default_factory=dict)

    _KEYS = ("generatedAt", "participants", "summary")

    def participant(self, record_id: int) -> Participant:
        for p in self.participants:
            if p.record_id == record_id:
                return p
        raise ValueError(f"No participant with record id {record_id}")

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "generatedAt": self.generated_at,
            "participants": [p.to_dict() for p in self.participants],
            "summary": self.summary.to_dict(),
        }
        return _merge_extras(d, self.extras)

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "Schedule":
        return cls(
            generated_at=str(d["generatedAt"]),
            participants=tuple(Participant.from_dict(p) for p in d["participants"]),
            summary=ScheduleSummary.from_dict(d["summary"]),
            extras=_unconsumed(d, cls._KEYS),
        )
