"""Progress Checkpoint Module

Persistent ``jobKey -> "done" | "failed"`` map that makes image pipeline
runs incremental and resumable. The file is rewritten after every job, so
an interrupted run loses at most the job in flight.

One progress file per shard; concurrent runs against the same file are
not supported.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, Optional

from .models import JobStatus

logger = logging.getLogger(__name__)


def progress_path_for(base: str | Path, shard: Optional[str]) -> Path:
    """``progress.json`` -> ``progress.even.json`` for a sharded run."""
    base = Path(base)
    if not shard:
        return base
    return base.with_name(f"{base.stem}.{shard}{base.suffix}")


class ProgressStore:
    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._entries: Dict[str, JobStatus] = {}

    def load(self) -> "ProgressStore":
        """Read the checkpoint; a missing or unreadable file starts empty."""
        try:
            with self.path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
        except FileNotFoundError:
            logger.debug("No progress file at %s; starting fresh", self.path)
            raw = {}
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Progress file %s is corrupt; starting fresh", self.path)
            raw = {}

        if not isinstance(raw, dict):
            logger.warning("Progress file %s is not an object; starting fresh", self.path)
            raw = {}

        self._entries = {}
        for key, value in raw.items():
            try:
                self._entries[key] = JobStatus(value)
            except ValueError:
                logger.warning("Ignoring unknown status %r for %s", value, key)
        return self

    def status(self, key: str) -> Optional[JobStatus]:
        return self._entries.get(key)

    def is_done(self, key: str) -> bool:
        return self._entries.get(key) == JobStatus.DONE

    def mark(self, key: str, status: JobStatus) -> None:
        """Record ``status`` for ``key`` and flush to disk immediately."""
        self._entries[key] = JobStatus(status)
        self.save()

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {key: status.value for key, status in self._entries.items()}
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        os.replace(tmp_path, self.path)

    def failed_count(self) -> int:
        return sum(1 for status in self._entries.values() if status == JobStatus.FAILED)

    def as_dict(self) -> Dict[str, str]:
        return {key: status.value for key, status in self._entries.items()}

    def __len__(self) -> int:
        return len(self._entries)
