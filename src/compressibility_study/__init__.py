"""compressibility_study

Reproducible, stratified randomization schedules for the compressibility
measurement study (ultrasound vs palpation, ball vs balloon models).

The package exposes:
- Mulberry32 seeded stream and Fisher-Yates shuffle
- participant assignment (four randomization layers, three identical sessions)
- schedule generation and pure mutations (add, remove + renumber, regenerate)
- persistence with a remote primary and a local fallback, plus load-time migration
- JSON / CSV / Markdown exports and an order-balance table
"""

from .assignment import assign_participant
from .balance import max_imbalance, order_balance
from .config import StudyConfig, check_access, load_config
from .cycles import fixed_cycle_measurements, randomized_cycle_measurements
from .export import flatten_measurements, to_csv, to_json, to_markdown_summary, write_exports
from .logger import ScheduleEventLog
from .migration import MIGRATION_STEPS, migrate_schedule
from .models import (
    BALL_MODELS,
    BALLOON_MODELS,
    MAX_PARTICIPANTS,
    Measurement,
    ModalityBlock,
    ModelTypeBlock,
    Participant,
    Schedule,
    ScheduleSummary,
    Session,
)
from .randomization import SeededRandomSource, shuffle, time_seeded_source
from .schedule import add_participant, compute_summary, generate_schedule, regenerate_participant, remove_participant
from .service import StudyService
from .sessions import build_session
from .storage import HttpDocumentStore, LocalFileStore, ScheduleRepository

__version__ = "0.1.0"

__all__ = [
    "SeededRandomSource",
    "shuffle",
    "time_seeded_source",
    "fixed_cycle_measurements",
    "randomized_cycle_measurements",
    "build_session",
    "assign_participant",
    "generate_schedule",
    "add_participant",
    "remove_participant",
    "regenerate_participant",
    "compute_summary",
    "BALL_MODELS",
    "BALLOON_MODELS",
    "MAX_PARTICIPANTS",
    "Measurement",
    "ModelTypeBlock",
    "ModalityBlock",
    "Session",
    "Participant",
    "Schedule",
    "ScheduleSummary",
    "MIGRATION_STEPS",
    "migrate_schedule",
    "LocalFileStore",
    "HttpDocumentStore",
    "ScheduleRepository",
    "StudyService",
    "StudyConfig",
    "load_config",
    "check_access",
    "ScheduleEventLog",
    "to_json",
    "to_csv",
    "to_markdown_summary",
    "flatten_measurements",
    "write_exports",
    "order_balance",
    "max_imbalance",
]
