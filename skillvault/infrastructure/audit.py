"""Append-only audit trail for destructive store maintenance.

Writes newline-delimited JSON entries. Thread-safe via a module-level lock.
"""
import json
import threading
from datetime import datetime, timezone
from pathlib import Path

_LOCK = threading.Lock()


def log_event(log_file: str | Path, action: str, subject: str | None,
              payload: dict | None = None) -> None:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    entry = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "action": action,
        "subject": subject,
        "payload": payload or {},
    }
    with _LOCK:
        with open(path, "a", encoding="utf-8", errors="backslashreplace") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")
