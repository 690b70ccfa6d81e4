"""Atomic output of rendered files.

Text is written to a temporary file next to the target and moved into place
with :func:`os.replace`, so a failed run never leaves a partial file behind.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)


def write_output(text: str, path: str | Path) -> Path:
    """Write ``text`` to ``path`` atomically, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        "w",
        encoding="utf-8",
        dir=path.parent,
        prefix=f".{path.name}.",
        suffix=".tmp",
        delete=False,
    ) as temp_file:
        temp_path = temp_file.name
        try:
            temp_file.write(text)
        except BaseException:
            temp_file.close()
            os.unlink(temp_path)
            raise
    os.replace(temp_path, path)
    logger.info("Wrote %s", path)
    return path


__all__ = ["write_output"]
