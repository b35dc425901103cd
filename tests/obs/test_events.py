"""Tests for run event emission."""

import json

import pytest

from stratachunk.obs.events import EventEmitter

pytestmark = pytest.mark.unit


def read_events(path):
    return [json.loads(line) for line in path.read_text().splitlines() if line]


class TestEventEmitter:
    def test_events_follow_logging_convention(self, tmp_path):
        emitter = EventEmitter("run-1", log_dir=str(tmp_path / "logs"))

        with emitter:
            emitter.chunk_start("doc.md", "BY_HEADER")
            emitter.chunk_complete("doc.md", 3)
            emitter.error("boom", doc_id="doc.md")

        path = tmp_path / "logs" / "run-1" / "events.ndjson"
        assert emitter.events_path == path
        start, complete, error = read_events(path)

        assert start["op"] == "chunk.start"
        assert start["status"] == "START"
        assert start["rid"] == "run-1"
        assert start["stage"] == "chunk"
        assert start["component"] == "chunker"
        assert start["worker_id"] == f"chunker-{emitter.pid}"
        assert start["strategy"] == "BY_HEADER"
        assert start["counts"] == {"docs": 1, "chunks": 0}
        assert start["ts"].endswith("Z")

        assert complete["status"] == "END"
        assert complete["counts"] == {"docs": 1, "chunks": 3}
        assert complete["duration_ms"] >= 0

        assert error["level"] == "ERROR"
        assert error["status"] == "FAIL"
        assert error["reason"] == "boom"

    def test_events_outside_context_are_dropped(self, tmp_path):
        emitter = EventEmitter("run-2", log_dir=str(tmp_path / "logs"))

        emitter.chunk_start("doc.md", "BY_HEADER")

        assert not emitter.events_path.exists()

    def test_runs_append(self, tmp_path):
        for _ in range(2):
            with EventEmitter("run-3", log_dir=str(tmp_path)) as emitter:
                emitter.chunk_complete("doc.md", 1)

        assert len(read_events(tmp_path / "run-3" / "events.ndjson")) == 2
