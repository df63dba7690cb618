"""Local file I/O utilities."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def write_json_local(payload: Any, path: str | Path) -> Path:
    """
    Write a JSON document to a local file, replacing any previous version.

    The document is written to a temporary file in the same directory and
    then moved over the target, so readers never see a half-written file.

    Args:
        payload: JSON-serializable object to write
        path: Destination file path

    Returns:
        Path to the written file.

    Raises:
        OSError: If the directory can't be created or the file can't be written.
    """
    filepath = Path(path)
    filepath.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{filepath.name}.", suffix=".tmp", dir=filepath.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False, indent=2) + "\n")
        os.replace(tmp_name, filepath)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.debug("Wrote %s", filepath)
    return filepath
