#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import pandas as pd  # noqa: E402

from compressibility_study.balance import max_imbalance, order_balance  # noqa: E402
from compressibility_study.config import StudyConfig, check_access, load_config  # noqa: E402
from compressibility_study.export import to_markdown_summary, write_exports  # noqa: E402
from compressibility_study.models import Schedule  # noqa: E402
from compressibility_study.service import StudyService  # noqa: E402


def _plot_balance(table: pd.DataFrame, out_png: Path) -> None:
    layers = ["modality", "model_type", "ball", "balloon"]
    fig, axes = plt.subplots(2, 2, figsize=(12, 8))
    for ax, layer in zip(axes.ravel(), layers):
        sub = table[table["layer"] == layer]
        ax.bar(sub["ordering"], sub["count"].to_numpy())
        ax.set_title(layer, fontsize=12)
        ax.tick_params(axis="x", labelrotation=60, labelsize=7)
        ax.grid(True, axis="y", alpha=0.3, linestyle="--")
    fig.tight_layout()
    out_png.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_png, dpi=140)
    plt.close(fig)


def _require(schedule: Schedule | None) -> Schedule:
    if schedule is None:
        raise SystemExit("No schedule found. Run 'generate' first.")
    return schedule


def _gate(cfg: StudyConfig, password: str | None) -> None:
    if cfg.access_secret is None:
        raise SystemExit("Configuration error - access secret not set")
    if not check_access(cfg.access_secret, password or ""):
        raise SystemExit("Incorrect password")


def main() -> int:
    ap = argparse.ArgumentParser(description="Generate and maintain the study randomization schedule.")
    ap.add_argument("--config", type=str, default="docs/study.yaml", help="Study config YAML.")
    ap.add_argument("--password", type=str, default=None, help="Shared access secret.")
    sub = ap.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Replace the schedule with a freshly generated one.")
    g.add_argument("--participants", type=int, required=True, help="Number of participants (1-50).")
    sub.add_parser("add", help="Append one participant.")
    r = sub.add_parser("remove", help="Remove a participant and renumber the rest.")
    r.add_argument("--id", type=int, required=True)
    rg = sub.add_parser("regenerate", help="Re-randomize one participant with a new seed.")
    rg.add_argument("--id", type=int, required=True)
    sub.add_parser("show", help="Print the Markdown summary.")
    ex = sub.add_parser("export", help="Write JSON, CSV and Markdown exports.")
    ex.add_argument("--out-dir", type=str, default="_study_out")
    b = sub.add_parser("balance", help="Order-balance table across participants.")
    b.add_argument("--plot", type=str, default="", help="Optional PNG output path.")
    sub.add_parser("clear", help="Delete the stored schedule.")

    args = ap.parse_args()
    cfg = load_config(args.config)
    _gate(cfg, args.password)
    service = StudyService.from_config(cfg)

    try:
        if args.cmd == "generate":
            schedule = service.generate(int(args.participants))
            print(f"Generated {schedule.summary.total_participants} participants "
                  f"({schedule.summary.total_measurements} measurements).")
        elif args.cmd == "add":
            schedule = service.add_participant()
            p = schedule.participants[-1]
            print(f"Added participant #{p.record_id} (seed {p.random_seed}).")
        elif args.cmd == "remove":
            schedule = service.remove_participant(int(args.id))
            print(f"Removed participant #{args.id}; {schedule.summary.total_participants} remain.")
        elif args.cmd == "regenerate":
            schedule = service.regenerate_participant(int(args.id))
            print(f"Participant #{args.id} now uses seed {schedule.participant(int(args.id)).random_seed}.")
        elif args.cmd == "show":
            print(to_markdown_summary(_require(service.current())))
        elif args.cmd == "export":
            paths = write_exports(_require(service.current()), args.out_dir)
            print(json.dumps({k: str(v) for k, v in paths.items()}, indent=2))
        elif args.cmd == "balance":
            table = order_balance(_require(service.current()))
            print(table.to_string(index=False))
            for layer in ("modality", "model_type", "ball", "balloon"):
                print(f"max imbalance [{layer}]: {max_imbalance(table, layer):.2f}")
            if args.plot:
                _plot_balance(table, Path(args.plot))
        elif args.cmd == "clear":
            service.clear()
            print("Schedule cleared.")
    except ValueError as exc:
        raise SystemExit(str(exc))
    except httpx.HTTPError as exc:
        raise SystemExit(f"Remote store unavailable, local copy updated: {exc}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
