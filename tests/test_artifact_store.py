"""Tests for artifact persistence."""

import json
import os

from cache.artifact_store import ArtifactStore
from configs.config import Config
from utils.changelog_models import (
    CommitChange,
    MinorVersionReport,
    PatchReport,
    ReleaseReport,
    UnitDiagnostic,
    WalkState,
)


def sample_report() -> ReleaseReport:
    commit = CommitChange(
        summary="Fix crash (#5)",
        pr_id=5,
        changed_packages={"web", "core"},
        commit_hash="a" * 40,
        head_index=0,
    )
    return ReleaseReport(
        version={
            5: MinorVersionReport(
                version=5,
                state=WalkState.OPEN,
                patches=[PatchReport(version=0, published=False, commits=[commit])],
            ),
            4: MinorVersionReport(version=4, state=WalkState.CLOSED, patches=[]),
        },
        diagnostics=[UnitDiagnostic(minor=3, code="RANGE_NOT_REACHABLE", message="x")],
    )


class TestEncoding:
    """Test pretty and compact encodings."""

    def test_pretty_is_indented(self, tmp_path):
        """Pretty mode writes multi-line JSON."""
        text = ArtifactStore(output_dir=str(tmp_path), pretty=True).encode(sample_report(), last_updated="t")
        assert "\n  " in text

    def test_compact_has_no_whitespace(self, tmp_path):
        """Compact mode has no separators padding."""
        text = ArtifactStore(output_dir=str(tmp_path), pretty=False).encode(sample_report(), last_updated="t")
        assert "\n" not in text
        assert ": " not in text

    def test_keys_and_packages_sorted(self, tmp_path):
        """Minor keys and package sets serialize in sorted order."""
        data = json.loads(ArtifactStore(output_dir=str(tmp_path)).encode(sample_report(), last_updated="t"))
        assert list(data["version"]) == ["4", "5"]
        commit = data["version"]["5"]["patches"][0]["commits"][0]
        assert commit["changed_packages"] == ["core", "web"]
        assert data["last_updated"] == "t"

    def test_mode_flag_from_config(self, tmp_path, monkeypatch):
        """Without an explicit flag the Config mode is used."""
        monkeypatch.setattr(Config, "ARTIFACT_PRETTY", False)
        assert ArtifactStore(output_dir=str(tmp_path)).pretty is False


class TestSaveLoad:
    """Test whole-file overwrite and reload."""

    def test_save_then_load(self, tmp_path):
        """A saved report loads back equal."""
        store = ArtifactStore(output_dir=str(tmp_path / "out"))
        store.save(sample_report(), last_updated="2026-01-01T00:00:00+00:00")
        last_updated, report = store.load()
        assert last_updated == "2026-01-01T00:00:00+00:00"
        assert report.model_dump() == sample_report().model_dump()

    def test_overwrite_replaces_whole_file(self, tmp_path):
        """A second save fully replaces the first artifact."""
        store = ArtifactStore(output_dir=str(tmp_path))
        store.save(sample_report())
        store.save(ReleaseReport())
        _, report = store.load()
        assert report.version == {}
        assert [n for n in os.listdir(tmp_path) if n.startswith(".tmp_")] == []

    def test_non_atomic_save(self, tmp_path, monkeypatch):
        """Plain writes are used when atomic writes are disabled."""
        monkeypatch.setattr(Config, "ARTIFACT_ATOMIC_WRITES", False)
        store = ArtifactStore(output_dir=str(tmp_path))
        path = store.save(sample_report())
        assert os.path.exists(path)

    def test_load_missing(self, tmp_path):
        """No artifact yet loads as None."""
        assert ArtifactStore(output_dir=str(tmp_path)).load() is None
