from __future__ import annotations

import os
from pathlib import Path

CHECKPOINT_DIR = ".ipynb_checkpoints"
NOTEBOOK_SUFFIX = ".ipynb"

_PRUNED = {CHECKPOINT_DIR, ".git"}


def find_notebooks(root: str | Path) -> list[Path]:
    """
    Return every notebook under ``root`` as a path relative to ``root``.

    Checkpoint directories are pruned from the walk, so autosave snapshots are
    never returned. Results are sorted to keep the execution order stable.
    """
    base = Path(root)
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames[:] = [d for d in dirnames if d not in _PRUNED]
        for name in filenames:
            if name.endswith(NOTEBOOK_SUFFIX):
                found.append((Path(dirpath) / name).relative_to(base))
    return sorted(found, key=lambda p: p.as_posix())
