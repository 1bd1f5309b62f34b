#!/usr/bin/env python3
"""Resolve symbolic version tags to commit ids."""

import logging
from typing import Dict, List, Optional

from clients.git_graph import RevisionGraph, TagRef

logger = logging.getLogger(__name__)


class TagNotFound(Exception):
    """Raised when a required tag has no matching ref."""
    def __init__(self, message: str, code: str = "TAG_NOT_FOUND") -> None:
        super().__init__(message)
        self.code = code


def tag_matches(ref_path: str, tag_name: str) -> bool:
    """Exact trailing-name match, allowing namespaced ref paths.

    Example:
        tag_matches("refs/tags/release/v0.5.1", "v0.5.1")  # True
        tag_matches("refs/tags/v0.5.10", "v0.5.1")         # False
    """
    return ref_path == tag_name or ref_path.endswith("/" + tag_name)


def peel_to_commit(ref: TagRef) -> Optional[str]:
    if ref.object_type == "commit":
        return ref.object_id
    if ref.object_type == "tag" and ref.target_type == "commit":
        return ref.target_id
    return None


class TagResolver:
    """Looks up tags by name against a snapshot of the graph's tag refs.

    Refs are enumerated once per resolver in lexicographic path order, so the
    same graph state always resolves a name to the same commit.
    """

    def __init__(self, graph: RevisionGraph) -> None:
        self.graph = graph
        self._refs: Optional[List[TagRef]] = None
        self._resolved: Dict[str, Optional[str]] = {}

    def _tag_refs(self) -> List[TagRef]:
        if self._refs is None:
            self._refs = sorted(self.graph.tag_refs(), key=lambda r: r.path)
        return self._refs

    def resolve(self, tag_name: str) -> Optional[str]:
        if tag_name in self._resolved:
            return self._resolved[tag_name]

        commit_id = None
        for ref in self._tag_refs():
            if not tag_matches(ref.path, tag_name):
                continue
            commit_id = peel_to_commit(ref)
            if commit_id is not None:
                break
            logger.debug(f"Tag {ref.path} does not point at a commit ({ref.target_type}); skipping")

        if commit_id is None:
            logger.debug(f"No tag found for {tag_name}")
        self._resolved[tag_name] = commit_id
        return commit_id

    def require(self, tag_name: str) -> str:
        commit_id = self.resolve(tag_name)
        if commit_id is None:
            raise TagNotFound(f"Tag {tag_name} not found")
        return commit_id
