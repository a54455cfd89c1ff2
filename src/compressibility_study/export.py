from __future__ import annotations

import json
from datetime import date as _date
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from .models import Schedule

CSV_COLUMNS = [
    "Participant ID",
    "Random Seed",
    "Session",
    "Modality",
    "Modality Order",
    "Model Type",
    "Model Type Order",
    "Repetition",
    "Model Position",
    "Model ID",
    "Model Name",
    "Measurement Number",
]

ARROW = " → "


def to_json(schedule: Schedule) -> str:
    return json.dumps(schedule.to_dict(), indent=2, ensure_ascii=False)


def flatten_measurements(schedule: Schedule) -> pd.DataFrame:
    """One row per measurement, blocks in each session's model-type order.

    Measurement Number runs across the whole schedule, starting at 1.
    """
    rows: List[Dict[str, Any]] = []
    number = 0
    for participant in schedule.participants:
        for session in participant.sessions:
            for mb in session.modalities:
                for block in mb.blocks_in_order():
                    for m in block.measurements:
                        number += 1
                        rows.append(
                            {
                                "Participant ID": participant.record_id,
                                "Random Seed": participant.random_seed,
                                "Session": session.session_number,
                                "Modality": mb.modality,
                                "Modality Order": mb.order,
                                "Model Type": block.model_type,
                                "Model Type Order": block.order,
                                "Repetition": m.repetition,
                                "Model Position": m.model_order,
                                "Model ID": m.model_id,
                                "Model Name": m.model_name,
                                "Measurement Number": number,
                            }
                        )
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def to_csv(schedule: Schedule) -> str:
    return flatten_measurements(schedule).to_csv(index=False, lineterminator="\n")


def _format_generated(generated_at: str) -> str:
    try:
        return datetime.fromisoformat(generated_at.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M:%S %Z").strip()
    except ValueError:
        return generated_at


def to_markdown_summary(schedule: Schedule) -> str:
    s = schedule.summary
    lines = [
        "# Experiment Randomization Summary",
        "",
        f"Generated: {_format_generated(schedule.generated_at)}",
        "",
        "## Participant Counts",
        f"- Total: {s.total_participants}",
        "",
        "## Measurement Counts",
        f"- Per Session: {s.measurements_per_session}",
        f"- Per Participant: {s.measurements_per_participant}",
        f"- Total: {s.total_measurements}",
        "",
        "## Participant Randomization Details",
        "",
    ]
    for p in schedule.participants:
        session = p.sessions[0]
        lines += [
            f"### Participant #{p.record_id}",
            f"- Random Seed: {p.random_seed}",
            f"- Modality Order: {ARROW.join(session.modality_order)}",
            f"- Model Type Order: {ARROW.join(session.model_type_order)}",
            f"- Ball Sphere Order: {ARROW.join(session.ball_order)}",
            f"- Balloon Order: {ARROW.join(session.balloon_order)}",
            "",
        ]
    return "\n".join(lines)


def write_exports(schedule: Schedule, out_dir: str | Path, *, date: Optional[str] = None) -> Dict[str, Path]:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    stamp = date or _date.today().isoformat()
    paths = {
        "json": out_dir / f"experiment_data_{stamp}.json",
        "csv": out_dir / f"experiment_data_{stamp}.csv",
        "markdown": out_dir / f"experiment_summary_{stamp}.md",
    }
    paths["json"].write_text(to_json(schedule), encoding="utf-8")
    paths["csv"].write_text(to_csv(schedule), encoding="utf-8")
    paths["markdown"].write_text(to_markdown_summary(schedule), encoding="utf-8")
    return paths
