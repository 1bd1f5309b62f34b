#!/usr/bin/env python3
from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from configs.config import Config
from utils.changelog_models import ReleaseReport


class ArtifactStore:
	"""Whole-file persistence of the release report.

	The artifact is overwritten on every save, never patched in place.
	"""

	def __init__(self, output_dir: str = None, artifact_name: str = None, pretty: Optional[bool] = None) -> None:
		cfg = Config.get_output_config()
		self.output_dir = output_dir or cfg["output_dir"]
		self.artifact_name = artifact_name or cfg["artifact_name"]
		self.pretty = cfg["pretty"] if pretty is None else bool(pretty)
		self.atomic = bool(cfg.get("atomic", True))

	@property
	def path(self) -> str:
		return os.path.join(self.output_dir, self.artifact_name)

	def encode(self, report: ReleaseReport, last_updated: str = None) -> str:
		# Minor keys sort numerically so identical graphs give identical bytes
		envelope: Dict[str, Any] = {
			"last_updated": last_updated or datetime.now(timezone.utc).isoformat(),
			"version": {str(k): report.version[k].model_dump(mode="json") for k in sorted(report.version)},
			"diagnostics": [d.model_dump(mode="json") for d in report.diagnostics],
		}
		if self.pretty:
			return json.dumps(envelope, indent=2, ensure_ascii=False)
		return json.dumps(envelope, separators=(",", ":"), ensure_ascii=False)

	def save(self, report: ReleaseReport, last_updated: str = None) -> str:
		text = self.encode(report, last_updated=last_updated)
		os.makedirs(self.output_dir, exist_ok=True)
		if not self.atomic:
			with open(self.path, "w", encoding="utf-8") as f:
				f.write(text)
			return self.path
		# Atomic via temp file and rename
		tmp_fd, tmp_path = tempfile.mkstemp(dir=self.output_dir, prefix=".tmp_", suffix=".json")
		try:
			with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
				f.write(text)
				f.flush()
				os.fsync(f.fileno())
			os.replace(tmp_path, self.path)
		except BaseException:
			if os.path.exists(tmp_path):
				os.remove(tmp_path)
			raise
		return self.path

	def load(self) -> Optional[tuple]:
		"""Read the artifact back.

		Returns:
			(last_updated, ReleaseReport) or None if no artifact exists yet
		"""
		if not os.path.exists(self.path):
			return None
		with open(self.path, "r", encoding="utf-8") as f:
			data = json.load(f)
		last_updated = data.pop("last_updated", None)
		return last_updated, ReleaseReport.model_validate(data)
