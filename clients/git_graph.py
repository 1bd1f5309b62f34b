#!/usr/bin/env python3
"""Read-only revision graph adapter backed by GitPython.

The reconstruction core only talks to the ``RevisionGraph`` protocol; this
module supplies the git implementation and normalizes backend errors into
``GraphAdapterFailure``.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Protocol, Set

from git import Repo
from git.exc import BadName, BadObject, GitError

logger = logging.getLogger(__name__)


class GraphAdapterFailure(Exception):
	"""Raised when the revision graph backend cannot answer a read."""
	def __init__(self, message: str, code: str = "GRAPH_ADAPTER_FAILURE", *, cause: Exception | None = None) -> None:
		super().__init__(message)
		self.code = code
		self.cause = cause


@dataclass(frozen=True)
class TagRef:
	"""A tag ref as stored, plus the object it peels to."""
	path: str
	object_type: str
	object_id: str
	target_type: str
	target_id: str


class RevisionGraph(Protocol):
	def tag_refs(self) -> List[TagRef]: ...

	def tip(self) -> str: ...

	def first_parent(self, commit: str) -> Optional[str]: ...

	def diff_paths(self, commit: str, parent: str) -> Set[str]: ...

	def summary(self, commit: str) -> str: ...

	def hash(self, commit: str) -> str: ...


@contextmanager
def _guard(op: str, ref: str = "") -> Iterator[None]:
	try:
		yield
	except (GitError, BadName, BadObject, ValueError, OSError) as e:
		where = f" ({ref})" if ref else ""
		raise GraphAdapterFailure(f"git {op} failed{where}: {e}", cause=e) from e


class GitRevisionGraph:
	"""RevisionGraph over a local git repository.

	A ``git.Repo`` keeps persistent cat-file processes, so one instance must not
	be shared between threads; open one per worker instead.
	"""

	def __init__(self, path: str) -> None:
		self.path = path
		with _guard("open", path):
			self._repo = Repo(path)
		logger.debug(f"Opened revision graph at {path}")

	def tag_refs(self) -> List[TagRef]:
		refs: List[TagRef] = []
		with _guard("tag listing"):
			for tag in self._repo.tags:
				obj = tag.object
				target = obj
				while target.type == "tag":
					target = target.object
				refs.append(
					TagRef(
						path=tag.path,
						object_type=obj.type,
						object_id=obj.hexsha,
						target_type=target.type,
						target_id=target.hexsha,
					)
				)
		refs.sort(key=lambda r: r.path)
		return refs

	def tip(self) -> str:
		with _guard("head lookup"):
			return self._repo.head.commit.hexsha

	def first_parent(self, commit: str) -> Optional[str]:
		with _guard("parent lookup", commit):
			parents = self._repo.commit(commit).parents
		return parents[0].hexsha if parents else None

	def diff_paths(self, commit: str, parent: str) -> Set[str]:
		paths: Set[str] = set()
		with _guard("tree diff", commit):
			parent_commit = self._repo.commit(parent)
			diff = parent_commit.diff(self._repo.commit(commit))
			for delta in diff:
				# Renames carry both sides
				if delta.a_path:
					paths.add(delta.a_path)
				if delta.b_path:
					paths.add(delta.b_path)
		return paths

	def summary(self, commit: str) -> str:
		with _guard("commit lookup", commit):
			summary = self._repo.commit(commit).summary
		if isinstance(summary, bytes):
			summary = summary.decode("utf-8", errors="replace")
		return summary

	def hash(self, commit: str) -> str:
		with _guard("commit lookup", commit):
			return self._repo.commit(commit).hexsha

	def close(self) -> None:
		self._repo.close()
