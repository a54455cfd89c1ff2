import importlib.util
import json
import sys
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "tools" / "manage_schedule.py"


def _load_cli():
    spec = importlib.util.spec_from_file_location("manage_schedule", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def cli(tmp_path, monkeypatch):
    monkeypatch.delenv("STUDY_ACCESS_SECRET", raising=False)
    cfg = tmp_path / "study.yaml"
    cfg.write_text(
        f"local_path: {tmp_path / 'data.json'}\nlog_dir: {tmp_path / 'logs'}\naccess_secret: letmein\n",
        encoding="utf-8",
    )
    module = _load_cli()

    def run(*args, password="letmein"):
        argv = ["manage_schedule.py", "--config", str(cfg)]
        if password is not None:
            argv += ["--password", password]
        monkeypatch.setattr(sys, "argv", argv + list(args))
        return module.main()

    return run


def test_generate_show_remove_clear(cli, tmp_path, capsys):
    assert cli("generate", "--participants", "2") == 0
    assert "Generated 2 participants (480 measurements)." in capsys.readouterr().out

    assert cli("show") == 0
    out = capsys.readouterr().out
    assert "### Participant #1" in out
    assert "### Participant #2" in out

    assert cli("remove", "--id", "1") == 0
    assert "1 remain" in capsys.readouterr().out

    assert cli("clear") == 0
    assert not (tmp_path / "data.json").exists()
    with pytest.raises(SystemExit):
        cli("show")

    events = [json.loads(line)["event"] for line in (tmp_path / "logs" / "schedule_events.jsonl").read_text().splitlines()]
    assert events == ["schedule_generated", "participant_removed", "schedule_cleared"]


def test_export_and_balance_plot(cli, tmp_path, capsys):
    cli("generate", "--participants", "3")
    capsys.readouterr()

    out_dir = tmp_path / "exports"
    assert cli("export", "--out-dir", str(out_dir)) == 0
    paths = json.loads(capsys.readouterr().out)
    assert set(paths) == {"json", "csv", "markdown"}
    for p in paths.values():
        assert Path(p).exists()

    png = tmp_path / "balance.png"
    assert cli("balance", "--plot", str(png)) == 0
    assert "max imbalance [modality]" in capsys.readouterr().out
    assert png.exists()


def test_wrong_password_is_refused(cli, tmp_path):
    with pytest.raises(SystemExit) as exc:
        cli("generate", "--participants", "2", password="guess")
    assert "Incorrect password" in str(exc.value)
    assert not (tmp_path / "data.json").exists()


def test_missing_password_is_refused(cli):
    with pytest.raises(SystemExit):
        cli("show", password=None)


def test_invalid_participant_count_exits(cli, tmp_path):
    with pytest.raises(SystemExit):
        cli("generate", "--participants", "51")
    assert not (tmp_path / "data.json").exists()
