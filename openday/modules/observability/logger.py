"""
modules/observability/logger.py
-------------------------------
Performance log for the planning components, one JSON object per line.

Every planner entry point times itself and calls

    _perf_logger.performance("route_planner.build_route", _t0, legs=3)

which appends

    {"timestamp": ..., "event_type": "PERFORMANCE",
     "payload": {"component": ..., "duration_ms": ..., "legs": 3}}

to <LOGS_DIR>/<stream>.jsonl (default: logs/performance.jsonl next to the
openday package). STRUCTURED_LOGGING=false turns every call into a no-op and
no file is ever opened.
"""

from __future__ import annotations

import json
import os
import threading
import time
from datetime import datetime, timezone
from pathlib import Path

from openday import config

_LOGS_DIR: Path = (
    Path(config.LOGS_DIR) if config.LOGS_DIR
    else Path(__file__).resolve().parents[3] / "logs"
)


class StructuredLogger:
    """Thread-safe, append-only JSONL writer shared by the planners."""

    def __init__(
        self,
        logs_dir: Path | str | None = None,
        enabled: bool | None = None,
        stream: str = "performance",
    ) -> None:
        self.path = (Path(logs_dir) if logs_dir else _LOGS_DIR) / f"{stream}.jsonl"
        self._enabled = config.STRUCTURED_LOGGING if enabled is None else enabled
        self._lock = threading.Lock()
        self._fh = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    def log(self, event_type: str, payload: dict) -> None:
        if not self._enabled:
            return
        line = json.dumps(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "event_type": event_type,
                "payload": payload,
            },
            default=str,
            ensure_ascii=False,
        )
        with self._lock:
            if self._fh is None:
                os.makedirs(self.path.parent, exist_ok=True)
                self._fh = open(self.path, "a", encoding="utf-8")  # noqa: SIM115
            self._fh.write(line + "\n")
            self._fh.flush()

    def performance(self, component: str, started: float, **extra) -> None:
        """Log how long *component* took since ``started`` (a perf_counter value)."""
        payload = {
            "component": component,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        }
        payload.update(extra)
        self.log("PERFORMANCE", payload)

    def close(self) -> None:
        with self._lock:
            if self._fh is not None:
                self._fh.close()
                self._fh = None
