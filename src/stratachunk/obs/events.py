"""Run event emitter writing one NDJSON line per chunking event."""

import json
import os
import time
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from ..core.logging import log


class EventLevel(str, Enum):
    """Event levels for structured logging."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    DEBUG = "debug"


class EventAction(str, Enum):
    """Standard event actions."""

    START = "start"
    COMPLETE = "complete"
    ERROR = "error"


_STATUS = {
    EventAction.START: "START",
    EventAction.COMPLETE: "END",
    EventAction.ERROR: "FAIL",
}


class EventEmitter:
    """Event emitter following the ``<log_dir>/<run_id>/events.ndjson`` convention.

    Use as a context manager; events emitted outside the ``with`` block are
    dropped.
    """

    def __init__(
        self,
        run_id: str,
        phase: str = "chunk",
        component: str = "chunker",
        log_dir: Optional[str] = None,
    ):
        self.run_id = run_id
        self.phase = phase
        self.component = component
        self.pid = os.getpid()
        self.worker_id = f"{self.component}-{self.pid}"

        self.log_dir = Path(log_dir) if log_dir else Path("var/logs")
        self.run_log_dir = self.log_dir / run_id
        self.events_path = self.run_log_dir / "events.ndjson"

        self._file: Optional[TextIO] = None
        self._start_time = time.time()

    def __enter__(self):
        self.run_log_dir.mkdir(parents=True, exist_ok=True)
        self._file = open(self.events_path, "a", encoding="utf-8")
        self._start_time = time.time()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._file:
            self._file.close()
            self._file = None

    def elapsed_ms(self) -> int:
        return int((time.time() - self._start_time) * 1000)

    def _emit(
        self,
        action: EventAction,
        level: EventLevel = EventLevel.INFO,
        duration_ms: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        """Emit a structured event using the canonical schema."""
        if not self._file:
            return

        counts: Dict[str, int] = kwargs.get("counts") or {
            "docs": int(kwargs.get("docs", 0) or 0),
            "chunks": int(kwargs.get("chunks", 0) or 0),
        }

        event = {
            "ts": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": level.value.upper(),
            "stage": self.phase,
            "component": self.component,
            "worker_id": self.worker_id,
            "rid": self.run_id,
            "op": kwargs.get("op") or f"{self.phase}.{action.value}",
            "status": _STATUS[action],
            "duration_ms": duration_ms,
            "counts": counts,
            "doc_id": kwargs.get("doc_id"),
            "strategy": kwargs.get("strategy"),
            "reason": kwargs.get("reason"),
        }

        try:
            self._file.write(
                json.dumps({k: v for k, v in event.items() if v is not None}) + "\n"
            )
            self._file.flush()
        except OSError as e:
            # Never break chunking on observability errors
            log.warning("events.write_failed", path=str(self.events_path), error=str(e))

    def chunk_start(self, doc_id: str, strategy: str, **kwargs: Any) -> None:
        """Emit chunk.start event."""
        self._emit(
            EventAction.START, doc_id=doc_id, strategy=strategy, docs=1, **kwargs
        )

    def chunk_complete(self, doc_id: str, chunks: int, **kwargs: Any) -> None:
        """Emit chunk.complete event."""
        self._emit(
            EventAction.COMPLETE,
            duration_ms=self.elapsed_ms(),
            doc_id=doc_id,
            counts={"docs": 1, "chunks": chunks},
            **kwargs,
        )

    def error(self, message: str, **kwargs: Any) -> None:
        """Emit error event."""
        self._emit(
            EventAction.ERROR,
            level=EventLevel.ERROR,
            duration_ms=self.elapsed_ms(),
            reason=message,
            **kwargs,
        )
