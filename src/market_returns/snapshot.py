"""Persisted dataset snapshot (the single most recent fetch).

Written with temp-write -> fsync -> rename so readers never observe a
partial file. The bytes are exactly ``Dataset.to_json()``, the same body the
live API serves.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from market_returns.core.exceptions import SnapshotError
from market_returns.core.models import Dataset

logger = logging.getLogger(__name__)


def save_snapshot(dataset: Dataset, path: str | Path) -> Path:
    """Atomically write ``dataset`` to ``path``, replacing any previous snapshot."""
    target = Path(path)
    content = dataset.to_json()
    tmp_path: str | None = None
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            suffix=".tmp", prefix=f"{target.stem}_", dir=target.parent
        )
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, target)
        tmp_path = None
    except OSError as e:
        raise SnapshotError(
            f"Failed to write snapshot: {e}",
            context={"path": str(target), "operation": "write"},
        ) from e
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)

    logger.info("Snapshot written to %s (%d bytes)", target, len(content))
    return target


def read_snapshot_bytes(path: str | Path) -> bytes:
    """Raw snapshot bytes, for serving without re-serializing."""
    target = Path(path)
    try:
        return target.read_bytes()
    except FileNotFoundError as e:
        raise SnapshotError(
            f"Snapshot not found: {target}",
            context={"path": str(target), "operation": "read"},
        ) from e
    except OSError as e:
        raise SnapshotError(
            f"Failed to read snapshot: {e}",
            context={"path": str(target), "operation": "read"},
        ) from e


def load_snapshot(path: str | Path) -> Dataset:
    """Read and validate a snapshot."""
    raw = read_snapshot_bytes(path)
    try:
        return Dataset.from_json(raw)
    except ValidationError as e:
        raise SnapshotError(
            f"Snapshot is not a valid dataset: {e.error_count()} error(s)",
            context={"path": str(path), "operation": "read"},
        ) from e
