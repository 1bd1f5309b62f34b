#!/usr/bin/env python3
"""Patch-probing walk over one minor version line.

Probing starts at ``<prefix><minor>.0`` and steps through patch numbers while
the next patch tag exists. Each step becomes a published ``PatchReport``. When
the lookahead tag is missing, the line is either closed by the next minor's
``.0`` tag, or the work since the last tag up to the tip becomes the in-flight
patch.

Planning (tag lookups only) is split from collection (graph walks and diffs)
so that patches can be collected as independent units.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from clients.git_graph import RevisionGraph
from utils.change_extractor import ChangeExtractor
from utils.changelog_models import (
    CommitChange,
    MinorVersionReport,
    PatchReport,
    WalkerSettings,
    WalkState,
)
from utils.package_mapper import PackageMapper
from utils.pr_identifier import extract_pr_id
from utils.range_collector import RevisionRangeCollector
from utils.tag_resolver import TagResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatchPlan:
    minor: int
    version: int
    start_id: str
    end_id: str
    published: bool


@dataclass
class MinorPlan:
    minor: int
    state: WalkState
    patches: List[PatchPlan] = field(default_factory=list)


class VersionWalker:
    def __init__(self, graph: RevisionGraph, settings: WalkerSettings) -> None:
        self.graph = graph
        self.settings = settings
        self.resolver = TagResolver(graph)
        self.collector = RevisionRangeCollector(graph)
        self.extractor = ChangeExtractor(graph)
        self.mapper = PackageMapper(settings.package_root)

    def plan(self, minor: int) -> MinorPlan:
        """Resolve the tag boundaries of every patch in a minor line."""
        tag = self.settings.tag_name
        start_id = self.resolver.resolve(tag(minor, 0))
        if start_id is None:
            logger.info(f"No {tag(minor, 0)} tag; minor version {minor} has not started")
            return MinorPlan(minor=minor, state=WalkState.NOT_STARTED)

        plans: List[PatchPlan] = []
        patch = 0
        while True:
            end_id = self.resolver.resolve(tag(minor, patch + 1))
            if end_id is not None:
                plans.append(PatchPlan(minor, patch, start_id, end_id, published=True))
                start_id = end_id
                patch += 1
                continue

            if self.resolver.resolve(tag(minor + 1, 0)) is not None:
                logger.debug(f"{tag(minor + 1, 0)} exists; minor version {minor} is closed at patch {patch}")
                return MinorPlan(minor=minor, state=WalkState.CLOSED, patches=plans)

            tip = self.graph.tip()
            logger.debug(f"No {tag(minor, patch + 1)} or {tag(minor + 1, 0)}; patch {patch} is in flight up to {tip[:8]}")
            plans.append(PatchPlan(minor, patch, start_id, tip, published=False))
            return MinorPlan(minor=minor, state=WalkState.OPEN, patches=plans)

    def collect_patch(self, plan: PatchPlan) -> PatchReport:
        """Collect and assemble the commits of one planned patch.

        The lower boundary is the previous release's tagged commit and belongs
        to that release, so it is not repeated here.
        """
        newest_first = self.collector.collect(plan.end_id, plan.start_id)
        chronological = list(reversed(newest_first))[1:]

        changed = self.extractor.changed_files_many(chronological)

        commits: List[CommitChange] = []
        for commit in chronological:
            if self.graph.first_parent(commit) is None:
                continue
            paths = changed[commit]
            summary = self.graph.summary(commit)
            commits.append(
                CommitChange(
                    summary=summary,
                    pr_id=extract_pr_id(summary),
                    changed_packages=self.mapper.map(paths),
                    commit_hash=self.graph.hash(commit),
                    head_index=len(commits),
                )
            )

        logger.info(
            f"✓ {self.settings.tag_name(plan.minor, plan.version)}: {len(commits)} commits "
            f"({'published' if plan.published else 'in flight'})"
        )
        return PatchReport(version=plan.version, published=plan.published, commits=commits)

    def walk(self, minor: int) -> MinorVersionReport:
        plan = self.plan(minor)
        patches = [self.collect_patch(p) for p in plan.patches]
        return MinorVersionReport(version=minor, state=plan.state, patches=patches)
