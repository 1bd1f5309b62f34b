#!/usr/bin/env python3
"""Changed-file extraction for single commits.

Each commit is diffed against its first parent. Pre- and post-image paths are
both kept, so a rename contributes the old and the new path.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from typing import Dict, Iterable, Optional, Set

from clients.git_graph import RevisionGraph

logger = logging.getLogger(__name__)


class ChangeExtractor:
    def __init__(self, graph: RevisionGraph) -> None:
        self.graph = graph

    def changed_files(self, commit: str) -> Set[str]:
        parent = self.graph.first_parent(commit)
        if parent is None:
            # Root of history: nothing to diff against
            logger.debug(f"Commit {commit[:8]} has no parent; no changes recorded")
            return set()
        return set(self.graph.diff_paths(commit, parent))

    def changed_files_many(
        self, commits: Iterable[str], executor: Optional[Executor] = None
    ) -> Dict[str, Set[str]]:
        """Extract changed files for several commits, keyed by commit id.

        The executor must only be given when the graph tolerates concurrent reads.
        """
        commits = list(commits)
        if executor is None:
            return {c: self.changed_files(c) for c in commits}
        results = executor.map(self.changed_files, commits)
        return dict(zip(commits, results))
