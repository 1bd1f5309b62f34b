#!/usr/bin/env python3
"""Pydantic models for the reconstructed changelog.

This module defines the nested report handed to the artifact store: minor
release lines, their patch releases, and the commits merged into each patch.
"""

from enum import Enum
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field, field_serializer

from configs.config import Config


class WalkState(str, Enum):
    """Terminal state of a minor version walk."""
    CLOSED = "closed"
    OPEN = "open"
    NOT_STARTED = "not_started"


class WalkerSettings(BaseModel):
    """Explicit settings for the version walker and report assembler."""

    package_root: str = Field("packages", description="Directory holding the top-level packages")
    version_prefix: str = Field("v0.", description="Tag prefix placed before '<minor>.<patch>'")
    minor_versions: List[int] = Field(default_factory=list, description="Minor versions of interest")

    model_config = {"extra": "ignore"}

    @classmethod
    def from_config(cls) -> "WalkerSettings":
        return cls(**Config.get_walker_config())

    def tag_name(self, minor: int, patch: int) -> str:
        return f"{self.version_prefix}{minor}.{patch}"


class CommitChange(BaseModel):
    """A single first-parent commit inside a patch release."""

    summary: str = Field(..., description="First line of the commit message")
    pr_id: Optional[int] = Field(None, description="Originating pull request number, if any")
    changed_packages: Set[str] = Field(
        default_factory=set,
        description="Top-level packages touched by the commit's diff"
    )
    commit_hash: str = Field(..., description="Full commit SHA")
    head_index: int = Field(..., ge=0, description="Position from the oldest commit after the lower tag")

    @field_serializer("changed_packages")
    def _sorted_packages(self, value: Set[str]) -> List[str]:
        return sorted(value)


class PatchReport(BaseModel):
    """Commits landed for one patch version."""

    version: int = Field(..., ge=0, description="Patch number")
    published: bool = Field(..., description="Whether the upper bound is a release tag")
    commits: List[CommitChange] = Field(default_factory=list)


class MinorVersionReport(BaseModel):
    """All patch releases of one minor version line."""

    version: int = Field(..., ge=0, description="Minor number")
    state: WalkState = Field(..., description="How probing for this line terminated")
    patches: List[PatchReport] = Field(default_factory=list)


class UnitDiagnostic(BaseModel):
    """Failure reason for a minor version or patch unit that was dropped."""

    minor: int
    patch: Optional[int] = None
    code: str
    message: str
    completed_patches: int = 0


class ReleaseReport(BaseModel):
    """Root artifact: minor number to minor version report."""

    version: Dict[int, MinorVersionReport] = Field(default_factory=dict)
    diagnostics: List[UnitDiagnostic] = Field(default_factory=list)

    def minor(self, minor: int) -> Optional[MinorVersionReport]:
        return self.version.get(minor)
