"""
Brief: Shared pytest fixtures, including an in-memory revision graph.

Inputs:
  - None

Outputs:
  - FakeGraph: RevisionGraph implementation driven entirely by test data
  - fixtures: graph, walker_settings, isolated observability roots
"""

import itertools
import os
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

import pytest

# Ensure the repository root is on sys.path so top-level packages import in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from clients.git_graph import GraphAdapterFailure, TagRef  # noqa: E402
from configs.config import Config  # noqa: E402
from utils.changelog_models import WalkerSettings  # noqa: E402


@dataclass
class FakeCommit:
    sha: str
    summary: str
    parents: List[str]
    files: Set[str] = field(default_factory=set)


class FakeGraph:
    """
    Brief: Minimal RevisionGraph backed by dictionaries.

    Commits are appended on a mainline; ``diff_paths`` returns the files
    registered for the commit regardless of which parent is passed.
    """

    def __init__(self):
        self.commits: Dict[str, FakeCommit] = {}
        self.refs: List[TagRef] = []
        self.head: Optional[str] = None
        self.broken: Set[str] = set()
        self.calls: List[str] = []
        self._ids = itertools.count(1)

    def commit(self, summary: str, files=(), parents=None, move_head: bool = True) -> str:
        sha = f"{next(self._ids):040x}"
        if parents is None:
            parents = [self.head] if self.head else []
        self.commits[sha] = FakeCommit(sha, summary, list(parents), set(files))
        if move_head:
            self.head = sha
        return sha

    def tag(self, name: str, sha: str, annotated: bool = False, namespace: str = "refs/tags/") -> None:
        if annotated:
            ref = TagRef(namespace + name, "tag", f"tag-{name}", "commit", sha)
        else:
            ref = TagRef(namespace + name, "commit", sha, "commit", sha)
        self.refs.append(ref)

    def _check(self, sha: str) -> FakeCommit:
        if sha in self.broken:
            raise GraphAdapterFailure(f"corrupt object {sha[:8]}")
        return self.commits[sha]

    # RevisionGraph protocol

    def tag_refs(self) -> List[TagRef]:
        self.calls.append("tag_refs")
        return list(self.refs)

    def tip(self) -> str:
        return self.head

    def first_parent(self, commit: str) -> Optional[str]:
        parents = self._check(commit).parents
        return parents[0] if parents else None

    def diff_paths(self, commit: str, parent: str) -> Set[str]:
        return set(self._check(commit).files)

    def summary(self, commit: str) -> str:
        return self._check(commit).summary

    def hash(self, commit: str) -> str:
        return self._check(commit).sha


@pytest.fixture
def graph():
    return FakeGraph()


@pytest.fixture
def walker_settings():
    return WalkerSettings(package_root="packages", version_prefix="v0.", minor_versions=[5])


@pytest.fixture(autouse=True)
def isolated_observability(tmp_path, monkeypatch):
    """Keep metrics and diagnostics logs out of the working tree."""
    monkeypatch.setattr(Config, "METRICS_ENABLED", False)
    monkeypatch.setattr(Config, "METRICS_ROOT", str(tmp_path / "metrics"))
    monkeypatch.setattr(Config, "DIAGNOSTICS_ROOT", str(tmp_path / "diagnostics"))
    return tmp_path


def build_release_line(graph: FakeGraph, minor: int = 5, patches: int = 2, per_patch: int = 2) -> List[str]:
    """
    Brief: Lay out a linear history with tags v0.<minor>.0 .. v0.<minor>.<patches-1>.

    Outputs:
      - list of tagged commit shas, in tag order
    """
    tagged = []
    graph.commit("Initial commit", ["README.md"])
    for patch in range(patches):
        for i in range(per_patch):
            graph.commit(f"Work {patch}.{i} (#{100 * (patch + 1) + i})", [f"packages/pkg{i}/src/lib.rs"])
        tagged.append(graph.commit(f"Release 0.{minor}.{patch}", ["Cargo.toml"]))
        graph.tag(f"v0.{minor}.{patch}", tagged[-1])
    return tagged
