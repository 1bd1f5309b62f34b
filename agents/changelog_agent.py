#!/usr/bin/env python3
"""Changelog agent: rebuilds the per-release commit report from tag history.

This agent walks every minor version line of interest, collects the
first-parent commits of each patch release, and saves the assembled
report as a single JSON artifact for the status page.
"""

import logging
import sys
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from dotenv import load_dotenv

# Load environment variables from .env file before Config is read
load_dotenv()

from cache.artifact_store import ArtifactStore  # noqa: E402
from clients.git_graph import GitRevisionGraph, GraphAdapterFailure, RevisionGraph  # noqa: E402
from configs.config import Config  # noqa: E402
from utils.changelog_models import (  # noqa: E402
	MinorVersionReport,
	PatchReport,
	ReleaseReport,
	UnitDiagnostic,
	WalkerSettings,
)
from utils.diagnostics_log import record_unit_failure  # noqa: E402
from utils.metrics import Timer, incr  # noqa: E402
from utils.range_collector import RangeNotReachable  # noqa: E402
from utils.version_walker import MinorPlan, PatchPlan, VersionWalker  # noqa: E402

# Set up logging
logger = logging.getLogger(__name__)

# Failures that drop a single unit instead of the whole run
UNIT_FAILURES = (RangeNotReachable, GraphAdapterFailure)


class ChangelogAgent:
	"""Assembles a ReleaseReport with a bounded worker pool.

	Minor versions are planned in parallel (tag lookups only), then every
	planned patch is collected as its own task. Each worker thread opens its
	own revision graph handle through ``graph_factory``.
	"""

	def __init__(
		self,
		repo_path: Optional[str] = None,
		settings: Optional[WalkerSettings] = None,
		graph_factory: Optional[Callable[[], RevisionGraph]] = None,
		max_workers: Optional[int] = None,
		diagnostics_root: Optional[str] = None,
	):
		"""Initialize the changelog agent.

		Args:
			repo_path: Path of the git repository (defaults to Config.CHANGELOG_REPO_PATH)
			settings: Walker settings (defaults to values from Config)
			graph_factory: Callable returning a RevisionGraph; called once per worker thread
			max_workers: Worker pool size (defaults to Config.MAX_WORKERS)
			diagnostics_root: Directory for the unit failure log
		"""
		self.repo_path = repo_path or Config.CHANGELOG_REPO_PATH
		self.settings = settings or WalkerSettings.from_config()
		self._graph_factory = graph_factory or (lambda: GitRevisionGraph(self.repo_path))
		self.max_workers = max(1, int(max_workers or Config.MAX_WORKERS))
		self.diagnostics_root = diagnostics_root
		self._local = threading.local()
		self._opened: List[RevisionGraph] = []
		self._opened_lock = threading.Lock()
		logger.info("Changelog agent initialized")

	def _graph(self) -> RevisionGraph:
		graph = getattr(self._local, "graph", None)
		if graph is None:
			graph = self._graph_factory()
			self._local.graph = graph
			with self._opened_lock:
				self._opened.append(graph)
		return graph

	def _plan(self, minor: int) -> MinorPlan:
		with Timer("walk.plan", minor=minor):
			return VersionWalker(self._graph(), self.settings).plan(minor)

	def _collect(self, plan: PatchPlan) -> PatchReport:
		with Timer("walk.collect", minor=plan.minor, patch=plan.version):
			return VersionWalker(self._graph(), self.settings).collect_patch(plan)

	def _failure(self, minor: int, patch: Optional[int], error: Exception, completed: int) -> UnitDiagnostic:
		code = getattr(error, "code", "UNKNOWN")
		where = f"minor {minor}" if patch is None else f"minor {minor} patch {patch}"
		logger.error(f"Dropping {where}: {error}")
		incr("walk.unit_failure", code=code, minor=minor)
		diagnostic = UnitDiagnostic(
			minor=minor, patch=patch, code=code, message=str(error), completed_patches=completed
		)
		record_unit_failure(diagnostic, root=self.diagnostics_root)
		return diagnostic

	def build_report(self, minors: Optional[Iterable[int]] = None) -> ReleaseReport:
		"""Reconstruct the release report for the given minor versions.

		Args:
			minors: Minor versions to walk (defaults to settings.minor_versions)

		Returns:
			A fresh ReleaseReport. Failed minor versions are absent and listed in diagnostics.

		Raises:
			Exception: Anything other than a unit failure propagates unchanged
		"""
		wanted = sorted(set(self.settings.minor_versions if minors is None else minors))
		logger.info(f"Reconstructing release report for minor versions {wanted}")

		plans: Dict[int, MinorPlan] = {}
		collected: Dict[Tuple[int, int], PatchReport] = {}
		failures: Dict[int, List[Tuple[Optional[int], Exception]]] = {}

		with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="changelog") as pool:
			plan_futures = {pool.submit(self._plan, minor): minor for minor in wanted}
			for future in as_completed(plan_futures):
				minor = plan_futures[future]
				try:
					plans[minor] = future.result()
				except UNIT_FAILURES as e:
					failures.setdefault(minor, []).append((None, e))

			patch_futures = {
				pool.submit(self._collect, patch_plan): patch_plan
				for minor in sorted(plans)
				for patch_plan in plans[minor].patches
			}
			for future in as_completed(patch_futures):
				patch_plan = patch_futures[future]
				try:
					collected[(patch_plan.minor, patch_plan.version)] = future.result()
				except UNIT_FAILURES as e:
					failures.setdefault(patch_plan.minor, []).append((patch_plan.version, e))

		report = ReleaseReport()
		for minor in wanted:
			if minor in failures:
				completed = sum(1 for (m, _) in collected if m == minor)
				ordered = sorted(failures[minor], key=lambda f: -1 if f[0] is None else f[0])
				for patch, error in ordered:
					report.diagnostics.append(self._failure(minor, patch, error, completed))
				continue
			plan = plans[minor]
			patches = [collected[(minor, p.version)] for p in sorted(plan.patches, key=lambda p: p.version)]
			report.version[minor] = MinorVersionReport(version=minor, state=plan.state, patches=patches)

		logger.info(
			f"✓ Release report assembled: {len(report.version)} minor versions, "
			f"{len(report.diagnostics)} dropped units"
		)
		return report

	def close(self) -> None:
		"""Close every graph handle opened by worker threads."""
		with self._opened_lock:
			for graph in self._opened:
				close = getattr(graph, "close", None)
				if close is not None:
					close()
			self._opened.clear()
		logger.info("Changelog agent closed")


def print_report_summary(report: ReleaseReport, last_updated: Optional[str] = None) -> None:
	"""Print a compact summary of a release report.

	Args:
		report: Assembled release report
		last_updated: Timestamp of the saved artifact, if known
	"""
	if last_updated:
		print(f"Last updated: {last_updated}")

	for minor in sorted(report.version):
		line = report.version[minor]
		print(f"Minor 0.{minor} ({line.state.value}): {len(line.patches)} patches")
		for patch in line.patches:
			marker = "published" if patch.published else "in flight"
			print(f"  0.{minor}.{patch.version} [{marker}] {len(patch.commits)} commits")
			for commit in sorted(patch.commits, key=lambda c: c.head_index):
				pr = f"#{commit.pr_id}" if commit.pr_id is not None else "-"
				packages = ", ".join(sorted(commit.changed_packages)) or "none"
				print(f"    {commit.commit_hash[:8]} {pr:>7} {commit.summary} [{packages}]")

	for diag in report.diagnostics:
		where = f"0.{diag.minor}" if diag.patch is None else f"0.{diag.minor}.{diag.patch}"
		print(f"Dropped {where}: {diag.code} - {diag.message}")


def main():
	"""CLI entry point for the changelog agent."""
	import argparse

	parser = argparse.ArgumentParser(
		description="Changelog Agent - Rebuild per-release commit reports from tag history",
		formatter_class=argparse.RawDescriptionHelpFormatter,
		epilog="""
Examples:
  python -m agents.changelog_agent --repo ../dioxus --minor 4 --minor 5
  python -m agents.changelog_agent --repo ../dioxus --compact --json --no-save
  python -m agents.changelog_agent show --output-dir data
		"""
	)

	sub = parser.add_subparsers(dest="command")
	parser.add_argument("--repo", required=False, help="Path to the git repository")
	parser.add_argument("--minor", type=int, action="append", help="Minor version to walk (repeatable)")
	parser.add_argument("--package-root", required=False, help="Directory holding the top-level packages")
	parser.add_argument("--prefix", required=False, help="Tag prefix, e.g. v0.")
	parser.add_argument("--output-dir", required=False, help="Directory for the JSON artifact")
	parser.add_argument("--pretty", dest="pretty", action="store_true", default=None, help="Pretty-print the artifact")
	parser.add_argument("--compact", dest="pretty", action="store_false", help="Write a compact artifact")
	parser.add_argument("--workers", type=int, required=False, help="Worker pool size")
	parser.add_argument("--json", action="store_true", help="Print the report JSON instead of a summary")
	parser.add_argument("--no-save", action="store_true", help="Do not write the artifact")
	parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

	show = sub.add_parser("show", help="Summarize a saved artifact")
	show.add_argument("--output-dir", required=False)

	args = parser.parse_args()

	# Set up logging
	log_level = logging.DEBUG if args.verbose else logging.INFO
	logging.basicConfig(
		level=log_level,
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
	)

	# GitPython is chatty at debug level
	if not args.verbose:
		logging.getLogger("git").setLevel(logging.WARNING)

	agent = None
	try:
		if args.command == "show":
			store = ArtifactStore(output_dir=args.output_dir)
			loaded = store.load()
			if loaded is None:
				print(f"Error: no artifact at {store.path}", file=sys.stderr)
				sys.exit(1)
			last_updated, report = loaded
			print_report_summary(report, last_updated)
			sys.exit(0)

		walker_config = Config.get_walker_config()
		if args.package_root:
			walker_config["package_root"] = args.package_root
		if args.prefix:
			walker_config["version_prefix"] = args.prefix
		if args.minor:
			walker_config["minor_versions"] = args.minor
		settings = WalkerSettings(**walker_config)

		agent = ChangelogAgent(repo_path=args.repo, settings=settings, max_workers=args.workers)
		with Timer("report.build", minors=",".join(str(m) for m in settings.minor_versions)):
			report = agent.build_report()

		store = ArtifactStore(output_dir=args.output_dir, pretty=args.pretty)
		if not args.no_save:
			path = store.save(report)
			logger.info(f"✓ Saved release report to {path}")

		if args.json:
			print(store.encode(report))
		else:
			print_report_summary(report)
		sys.exit(1 if report.diagnostics and not report.version else 0)

	except GraphAdapterFailure as e:
		# Backend failure outside a walk unit
		print(f"Error: {e}", file=sys.stderr)
		if args.verbose:
			logger.exception("Detailed error information:")
		sys.exit(1)

	except KeyboardInterrupt:
		print("\nOperation cancelled by user", file=sys.stderr)
		sys.exit(1)

	except Exception as e:
		# Unexpected error
		print(f"Unexpected error: {e}", file=sys.stderr)
		if args.verbose:
			logger.exception("Detailed error information:")
		else:
			print("Use --verbose for more details", file=sys.stderr)
		sys.exit(1)

	finally:
		if agent:
			agent.close()


if __name__ == "__main__":
	main()
