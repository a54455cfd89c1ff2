from __future__ import annotations

import math
from typing import Dict, List

import numpy as np
import pandas as pd

from .models import Schedule

LAYERS: Dict[str, str] = {
    "modality": "modality_order",
    "model_type": "model_type_order",
    "ball": "ball_order",
    "balloon": "balloon_order",
}

# orderings each layer can take: 2!, 2!, 4!, 4!
POSSIBLE_ORDERINGS: Dict[str, int] = {"modality": 2, "model_type": 2, "ball": math.factorial(4), "balloon": math.factorial(4)}


def order_balance(schedule: Schedule) -> pd.DataFrame:
    """Counts how often each ordering was assigned, per randomization layer.

    Descriptive only: no test statistic is computed.
    """
    rows: List[Dict[str, object]] = []
    for p in schedule.participants:
        session = p.sessions[0]
        for layer, attr in LAYERS.items():
            rows.append({"layer": layer, "ordering": " > ".join(getattr(session, attr))})
    if not rows:
        return pd.DataFrame(columns=["layer", "ordering", "count", "share"])

    df = pd.DataFrame(rows)
    table = df.groupby(["layer", "ordering"]).size().reset_index(name="count")
    table["share"] = table["count"] / float(len(schedule.participants))
    return table.sort_values(["layer", "count", "ordering"], ascending=[True, False, True]).reset_index(drop=True)


def max_imbalance(table: pd.DataFrame, layer: str) -> float:
    """Largest |observed - expected| count over all orderings of `layer`.

    Orderings never assigned count as zero.
    """
    if layer not in POSSIBLE_ORDERINGS:
        raise ValueError(f"Unknown layer: {layer!r}")
    sub = table[table["layer"] == layer]
    n = float(sub["count"].sum())
    k = POSSIBLE_ORDERINGS[layer]
    expected = n / k
    observed = np.zeros(k, dtype=float)
    observed[: len(sub)] = sub["count"].to_numpy(dtype=float)
    return float(np.max(np.abs(observed - expected)))
