#!/usr/bin/env python3
"""Append-only diagnostics log for dropped reconstruction units."""

from __future__ import annotations

import json
import os
import threading
import time
from pathlib import Path

from configs.config import Config
from utils.changelog_models import UnitDiagnostic

_write_lock = threading.Lock()


def record_unit_failure(diagnostic: UnitDiagnostic, root: str | None = None) -> Path:
    """Append a single JSON line describing why a unit was dropped.

    Fields: ts, minor, patch, code, message, completed_patches
    """
    path = Path(root or Config.DIAGNOSTICS_ROOT) / f"minor#{diagnostic.minor}.diagnostics.log"
    path.parent.mkdir(parents=True, exist_ok=True)
    record = {"ts": int(time.time()), **diagnostic.model_dump()}
    line = json.dumps(record, separators=(",", ":")) + "\n"
    with _write_lock:
        with open(path, "a", encoding="utf-8") as f:
            f.write(line)
            f.flush()
            os.fsync(f.fileno())
    return path
