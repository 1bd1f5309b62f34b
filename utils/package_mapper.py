#!/usr/bin/env python3
"""Map changed file paths to top-level package names."""

from pathlib import PurePosixPath
from typing import Iterable, Optional, Set, Tuple


class PackageMapper:
    """Attributes files under ``package_root`` to the directory right below it.

    ``packages/foo/src/bar.rs`` maps to ``foo``; paths outside the root map to
    nothing. Matching is case-sensitive on whole path components.
    """

    def __init__(self, package_root: str = "packages") -> None:
        self.root_parts: Tuple[str, ...] = PurePosixPath(package_root).parts
        if not self.root_parts:
            raise ValueError("package_root must name at least one directory")

    def package_of(self, path: str) -> Optional[str]:
        parts = PurePosixPath(path).parts
        depth = len(self.root_parts)
        if len(parts) <= depth or parts[:depth] != self.root_parts:
            return None
        return parts[depth]

    def map(self, paths: Iterable[str]) -> Set[str]:
        packages = set()
        for path in paths:
            name = self.package_of(path)
            if name:
                packages.add(name)
        return packages
