import os
from typing import Dict, Any, List


def _int_list(raw: str) -> List[int]:
	return [int(part) for part in raw.split(",") if part.strip()]


class Config:
	"""Configuration for the changelog reconstruction agent."""

	# Repository under study
	CHANGELOG_REPO_PATH = os.getenv("CHANGELOG_REPO_PATH", ".")
	PACKAGE_ROOT = os.getenv("PACKAGE_ROOT", "packages")
	VERSION_PREFIX = os.getenv("VERSION_PREFIX", "v0.")
	MINOR_VERSIONS = _int_list(os.getenv("MINOR_VERSIONS", "4,5"))

	# Artifact output
	OUTPUT_DIR = os.getenv("OUTPUT_DIR", "data")
	ARTIFACT_NAME = os.getenv("ARTIFACT_NAME", "commits.json")
	# Pretty JSON for development, compact for production
	ARTIFACT_PRETTY = bool(int(os.getenv("ARTIFACT_PRETTY", "1")))
	ARTIFACT_ATOMIC_WRITES = bool(int(os.getenv("ARTIFACT_ATOMIC_WRITES", "1")))

	# Worker pool
	MAX_WORKERS = int(os.getenv("MAX_WORKERS", "4"))

	# Observability
	METRICS_ROOT = os.getenv("METRICS_ROOT", ".cache/changelog/metrics")
	METRICS_ENABLED = bool(int(os.getenv("METRICS_ENABLED", "1")))
	DIAGNOSTICS_ROOT = os.getenv("DIAGNOSTICS_ROOT", ".cache/changelog/diagnostics")

	@classmethod
	def get_walker_config(cls) -> Dict[str, Any]:
		"""Get tag-walking configuration."""
		return {
			"package_root": cls.PACKAGE_ROOT,
			"version_prefix": cls.VERSION_PREFIX,
			"minor_versions": list(cls.MINOR_VERSIONS),
		}

	@classmethod
	def get_output_config(cls) -> Dict[str, Any]:
		"""Get artifact persistence configuration.

		Returns:
			Mapping with output directory, artifact file name, pretty flag, and atomic flag.
		"""
		return {
			"output_dir": cls.OUTPUT_DIR,
			"artifact_name": cls.ARTIFACT_NAME,
			"pretty": cls.ARTIFACT_PRETTY,
			"atomic": cls.ARTIFACT_ATOMIC_WRITES,
		}

	@classmethod
	def observability(cls) -> Dict[str, Any]:
		return {
			"metrics_root": cls.METRICS_ROOT,
			"metrics_enabled": cls.METRICS_ENABLED,
			"diagnostics_root": cls.DIAGNOSTICS_ROOT,
		}
