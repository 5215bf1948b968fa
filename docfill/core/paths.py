"""Filesystem helpers for the docfill workspace layout."""

# Module responsibilities:
# - Create the uploads/out/tmp folders on demand.
# - Produce collision-resistant stamps for per-request file names.

from __future__ import annotations

import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict


def ensure_work_dirs(base: Path) -> Dict[str, Path]:
    """Ensure the working directory structure exists.

    Args:
        base: Root directory for request staging and outputs.

    Returns:
        Mapping with keys ``base``, ``uploads``, ``out``, ``tmp``.
    """

    paths = {
        "base": base,
        "uploads": base / "uploads",
        "out": base / "out",
        "tmp": base / "tmp",
    }
    for path in paths.values():
        path.mkdir(parents=True, exist_ok=True)
    return paths


def unique_stamp() -> str:
    """Return a microsecond timestamp with a random suffix, e.g. ``20240510_101500_123456_1a2b3c4d``."""

    return f"{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}_{uuid.uuid4().hex[:8]}"
