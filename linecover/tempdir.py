"""Creation of uniquely named temporary directories."""

from __future__ import annotations

import os
import secrets
import tempfile
from pathlib import Path


def create_temp_dir(max_tries: int = 100) -> Path:
    """Create a new directory with a random hexadecimal name in the temp directory.

    Raises RuntimeError if no free name is found after ``max_tries`` retries.
    """
    base = Path(tempfile.gettempdir())
    tries = 0
    while True:
        path = base / f"{secrets.randbits(64):x}"
        try:
            os.mkdir(path)
            return path
        except FileExistsError:
            if tries == max_tries:
                raise RuntimeError("could not find non-existing directory") from None
            tries += 1