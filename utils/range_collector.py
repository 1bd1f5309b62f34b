#!/usr/bin/env python3
"""First-parent range collection between two revisions."""

import logging
from typing import List

from clients.git_graph import RevisionGraph

logger = logging.getLogger(__name__)


class RangeNotReachable(Exception):
    """Raised when ``start`` is not a first-parent ancestor of ``end``."""
    def __init__(self, message: str, code: str = "RANGE_NOT_REACHABLE") -> None:
        super().__init__(message)
        self.code = code


class RevisionRangeCollector:
    def __init__(self, graph: RevisionGraph) -> None:
        self.graph = graph

    def collect(self, end: str, start: str) -> List[str]:
        """Walk first parents from ``end`` back to ``start``, both included.

        Args:
            end: Newest commit of the range
            start: Oldest commit of the range; must lie on end's first-parent chain

        Returns:
            Commit ids newest-first; reverse for chronological order

        Raises:
            RangeNotReachable: If the root is reached without meeting ``start``
        """
        commits: List[str] = []
        current = end
        while current is not None:
            commits.append(current)
            if current == start:
                logger.debug(f"Collected {len(commits)} commits from {end[:8]} back to {start[:8]}")
                return commits
            current = self.graph.first_parent(current)

        raise RangeNotReachable(
            f"{start[:12]} is not a first-parent ancestor of {end[:12]} "
            f"(walked {len(commits)} commits to the root)"
        )
