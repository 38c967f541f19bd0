from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


@contextmanager
def discard_when_done(path: str | Path) -> Iterator[Path]:
    """Yield the uploaded file path and delete the file on every exit path."""

    path = Path(path)
    try:
        yield path
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not delete temporary upload %s: %s", path, e)
