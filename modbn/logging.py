"""
Structured logging for bignum sessions.

Produces:
  - manifest.json: One-time session metadata (version, config, host info)
  - ops.jsonl: One record per traced engine operation
  - failures.jsonl: One record per failed engine operation
"""

import json
import hashlib
import os
import platform
import subprocess
import sys
import time
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Any, Optional

import numpy as np


@dataclass
class SessionManifest:
    """Session-level metadata, saved once per session."""
    session_id: str
    timestamp: str
    version: str
    git_commit: str
    config_hash: str
    node_name: str
    python_version: str
    numpy_version: str
    config: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def save(self, path: Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)


def _get_git_commit() -> str:
    """Get current git commit hash, or 'unknown'."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True, text=True, timeout=5,
        )
        return result.stdout.strip() if result.returncode == 0 else "unknown"
    except (OSError, subprocess.SubprocessError):
        return "unknown"


def _config_hash(config: Dict[str, Any]) -> str:
    """Deterministic hash of config dict."""
    s = json.dumps(config, sort_keys=True, default=str)
    return hashlib.sha256(s.encode()).hexdigest()[:16]


def create_manifest(
    config: Dict[str, Any],
    session_id: Optional[str] = None,
) -> SessionManifest:
    """Create a SessionManifest with auto-detected metadata."""
    from . import __version__

    return SessionManifest(
        session_id=session_id or f"bn_{int(time.time())}",
        timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
        version=__version__,
        git_commit=_get_git_commit(),
        config_hash=_config_hash(config),
        node_name=os.environ.get("HOSTNAME", platform.node()),
        python_version=sys.version,
        numpy_version=np.__version__,
        config=config,
    )


class OpLogger:
    """Structured JSONL logger for engine operations.

    Writes two files:
      - ops.jsonl       (every traced operation)
      - failures.jsonl  (operations that raised)
    """

    def __init__(self, output_dir: Path, flush_every: int = 100):
        self.output_dir = Path(output_dir)
        self.flush_every = flush_every

        self.output_dir.mkdir(parents=True, exist_ok=True)

        self._ops_path = self.output_dir / "ops.jsonl"
        self._failures_path = self.output_dir / "failures.jsonl"

        # Append mode so several sessions can share a directory
        self._ops_f = open(self._ops_path, 'a')
        self._failures_f = open(self._failures_path, 'a')

        self._ops_count = 0
        self._failures_count = 0

    def log_op(self, record: Dict[str, Any]):
        """Log one completed operation."""
        record["timestamp"] = time.time()
        self._ops_f.write(json.dumps(record, default=str) + "\n")
        self._ops_count += 1

        if self._ops_count % self.flush_every == 0:
            self._ops_f.flush()

    def log_failure(self, record: Dict[str, Any]):
        """Log a failed operation."""
        record["timestamp"] = time.time()
        self._failures_f.write(json.dumps(record, default=str) + "\n")
        self._failures_f.flush()
        self._failures_count += 1

    def close(self):
        """Flush and close all log files."""
        for f in [self._ops_f, self._failures_f]:
            if not f.closed:
                f.flush()
                f.close()

    @property
    def summary(self) -> Dict[str, int]:
        return {
            "ops_logged": self._ops_count,
            "failures_logged": self._failures_count,
        }

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
