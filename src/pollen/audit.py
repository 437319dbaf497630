from __future__ import annotations

import getpass
import json
import os
import platform
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .console import warn
from .errors import PollenError


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def ensure_audit_log(log_path: Path | None) -> None:
    if log_path is None:
        return
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("a", encoding="utf-8"):
            pass
    except OSError as exc:
        raise PollenError(f"Cannot write audit log {log_path}: {exc.strerror or exc}") from exc


def write_audit_event(log_path: Path | None, event: str, **fields: Any) -> None:
    # Never raises; callers may be midway through a multi-step device change.
    if log_path is None:
        return

    try:
        payload: dict[str, Any] = {
            "ts": utc_now(),
            "event": event,
            "user": getpass.getuser(),
            "host": platform.node(),
            "pid": os.getpid(),
        }
        payload.update(fields)

        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload, sort_keys=True, default=str) + "\n")
    except (OSError, KeyError) as exc:
        reason = getattr(exc, "strerror", None) or exc
        warn(f"Could not record {event} in audit log {log_path}: {reason}")


def read_audit_events(log_path: Path) -> list[dict[str, Any]]:
    if not log_path.exists():
        raise FileNotFoundError(log_path)

    events: list[dict[str, Any]] = []
    with log_path.open("r", encoding="utf-8") as f:
        for lineno, raw in enumerate(f, start=1):
            raw = raw.strip()
            if not raw:
                continue
            try:
                events.append(json.loads(raw))
            except json.JSONDecodeError as exc:
                raise RuntimeError(f"invalid JSON on line {lineno}: {exc}") from exc
    return events
