from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Tuple

import httpx

from .migration import migrate_schedule
from .models import Schedule

DEFAULT_TIMEOUT_S = 10.0


class DocumentStore(Protocol):
    def read_document(self) -> Optional[Dict[str, Any]]: ...

    def write_document(self, doc: Mapping[str, Any]) -> None: ...

    def clear(self) -> None: ...


class LocalFileStore:
    """Single JSON document on local disk, used as the fallback store."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def read_document(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except ValueError:
            # corrupt content counts as no schedule
            return None

    def write_document(self, doc: Mapping[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(doc, indent=2, ensure_ascii=False), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class HttpDocumentStore:
    """Remote JSON document addressed by one URL (GET / PUT / DELETE).

    `timeout` bounds each request as a whole, from connect to the last byte of
    the body, not just each httpx phase. Transport errors, timeouts and error
    statuses surface as httpx.HTTPError.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_S,
        headers: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.url = url
        self.timeout = float(timeout)
        self._clock = clock
        self._client = client or httpx.Client(timeout=self.timeout, headers=dict(headers or {}))

    def _send(self, method: str, *, payload: Any = None, missing_ok: bool = False) -> Tuple[int, bytes]:
        deadline = self._clock() + self.timeout
        with self._client.stream(method, self.url, json=payload, timeout=self.timeout) as resp:
            self._check_deadline(deadline, resp.request)
            if missing_ok and resp.status_code == 404:
                return resp.status_code, b""
            resp.raise_for_status()
            chunks = []
            for chunk in resp.iter_bytes():
                chunks.append(chunk)
                self._check_deadline(deadline, resp.request)
            return resp.status_code, b"".join(chunks)

    def _check_deadline(self, deadline: float, request: httpx.Request) -> None:
        if self._clock() >= deadline:
            raise httpx.ReadTimeout(f"{request.method} {self.url} exceeded {self.timeout:g}s", request=request)

    def read_document(self) -> Optional[Dict[str, Any]]:
        status, body = self._send("GET", missing_ok=True)
        if status == 404:
            return None
        try:
            return json.loads(body)
        except ValueError:
            return None

    def write_document(self, doc: Mapping[str, Any]) -> None:
        self._send("PUT", payload=dict(doc))

    def clear(self) -> None:
        # a missing document is already cleared
        self._send("DELETE", missing_ok=True)

    def close(self) -> None:
        self._client.close()


def _migrate_and_decode(doc: Any) -> Tuple[Optional[Dict[str, Any]], Optional[Schedule]]:
    if doc is None:
        return None, None
    try:
        migrated = migrate_schedule(doc)
        return migrated, Schedule.from_dict(migrated)
    except (KeyError, TypeError, ValueError, AttributeError):
        return None, None


def decode_schedule(doc: Any) -> Optional[Schedule]:
    """Migrates and decodes a raw document; anything undecodable is None."""
    return _migrate_and_decode(doc)[1]


class ScheduleRepository:
    """Loads and stores the current schedule, primary first, local as fallback.

    A successful primary write is mirrored to the local store. When the
    primary fails the local store is written anyway and the original error is
    re-raised so callers can see they are running degraded.
    """

    def __init__(self, local: DocumentStore, primary: Optional[DocumentStore] = None) -> None:
        self.local = local
        self.primary = primary

    def load(self) -> Optional[Schedule]:
        if self.primary is None:
            return decode_schedule(self.local.read_document())
        try:
            doc = self.primary.read_document()
        except httpx.HTTPError:
            return decode_schedule(self.local.read_document())
        migrated, schedule = _migrate_and_decode(doc)
        if schedule is not None:
            # mirror the raw document so fields the model does not carry survive
            self.local.write_document(migrated)
        return schedule

    def store(self, schedule: Schedule) -> None:
        doc = schedule.to_dict()
        if self.primary is not None:
            try:
                self.primary.write_document(doc)
            except httpx.HTTPError:
                self.local.write_document(doc)
                raise
        self.local.write_document(doc)

    def clear(self) -> None:
        if self.primary is not None:
            try:
                self.primary.clear()
            except httpx.HTTPError:
                self.local.clear()
                raise
        self.local.clear()
