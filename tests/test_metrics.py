"""Tests for JSONL metrics."""

import json

from configs.config import Config
from utils.metrics import Timer, incr


class TestMetrics:
    """Test counter and timer records."""

    def test_incr_writes_line(self, isolated_observability, monkeypatch):
        """Enabled counters append one JSON line each."""
        monkeypatch.setattr(Config, "METRICS_ENABLED", True)
        incr("walk.unit_failure", code="RANGE_NOT_REACHABLE", minor=5)
        incr("walk.unit_failure", code="GRAPH_ADAPTER_FAILURE", minor=4)
        lines = (isolated_observability / "metrics" / "metrics.log").read_text().splitlines()
        records = [json.loads(line) for line in lines]
        assert [r["code"] for r in records] == ["RANGE_NOT_REACHABLE", "GRAPH_ADAPTER_FAILURE"]
        assert records[0]["metric"] == "walk.unit_failure"

    def test_timer_records_latency(self, isolated_observability, monkeypatch):
        """Timer emits a .latency_s sample with its labels."""
        monkeypatch.setattr(Config, "METRICS_ENABLED", True)
        with Timer("walk.plan", minor=5):
            pass
        record = json.loads((isolated_observability / "metrics" / "metrics.log").read_text())
        assert record["metric"] == "walk.plan.latency_s"
        assert record["minor"] == 5
        assert record["value"] >= 0

    def test_disabled_writes_nothing(self, isolated_observability):
        """Disabled metrics do not touch the filesystem."""
        incr("noop")
        assert not (isolated_observability / "metrics").exists()
