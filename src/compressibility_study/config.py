from __future__ import annotations

import hmac
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

SECRET_ENV_VAR = "STUDY_ACCESS_SECRET"


@dataclass(frozen=True)
class StudyConfig:
    """Deployment settings for one study.

    Only storage, logging and the access secret are configurable; the
    randomization design itself is fixed.
    """

    remote_url: Optional[str] = None
    remote_timeout_s: float = 10.0
    remote_headers: Dict[str, str] = field(default_factory=dict)
    local_path: str = "compressibility-study-data.json"
    log_dir: Optional[str] = "_study_log"
    access_secret: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        if d["access_secret"]:
            d["access_secret"] = "***"
        return d

    def validate(self) -> None:
        if self.remote_timeout_s <= 0:
            raise ValueError("remote_timeout_s must be positive")
        if not self.local_path:
            raise ValueError("local_path must be non-empty")
        if self.remote_url is not None and not str(self.remote_url).startswith(("http://", "https://")):
            raise ValueError("remote_url must be an http(s) URL")


def load_config(path: str | Path | None = None) -> StudyConfig:
    """Reads a YAML config; missing file or path gives the defaults.

    The access secret falls back to the STUDY_ACCESS_SECRET environment
    variable when the file does not set it.
    """
    data: Dict[str, Any] = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"config must be a mapping, got {type(data).__name__}")

    known = {f.name for f in fields(StudyConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {unknown}")

    if not data.get("access_secret"):
        data["access_secret"] = os.environ.get(SECRET_ENV_VAR) or None
    if "remote_headers" in data:
        data["remote_headers"] = {str(k): str(v) for k, v in (data["remote_headers"] or {}).items()}
    if "remote_timeout_s" in data:
        data["remote_timeout_s"] = float(data["remote_timeout_s"])

    cfg = StudyConfig(**data)
    cfg.validate()
    return cfg


def check_access(secret: Optional[str], attempt: str) -> bool:
    """Compares the attempt with the shared secret. No secret means no access."""
    if not secret:
        return False
    return hmac.compare_digest(secret.encode("utf-8"), str(attempt).encode("utf-8"))
