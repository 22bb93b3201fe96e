from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import requests

logger = logging.getLogger(__name__)


def fetch_document(url: str, dest: Path, timeout_s: float = 30.0) -> Path:
    """
    Download the published results document to `dest`.
    The file is written to a temp file first and moved into place.
    """
    logger.info("fetching %s", url)
    r = requests.get(url, timeout=timeout_s)
    r.raise_for_status()

    dest.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=dest.parent, suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(r.content)
        os.replace(tmp, dest)
    except OSError:
        if os.path.exists(tmp):
            os.unlink(tmp)
        raise
    logger.info("saved %d bytes to %s", len(r.content), dest)
    return dest
