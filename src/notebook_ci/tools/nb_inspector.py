from __future__ import annotations

from pathlib import Path
from typing import Any

import nbformat


def summarize_notebook(path: str | Path) -> dict[str, Any]:
    """
    Return a small summary of a notebook:
    - cell counts per type
    - kernel name, if recorded
    Unreadable notebooks are reported with an ``error`` key instead of raising.
    """
    try:
        nb = nbformat.read(str(path), as_version=4)
    except Exception as exc:  # nbformat raises several unrelated types on bad JSON
        return {"path": str(path), "error": str(exc)}
    counts: dict[str, int] = {}
    for cell in nb.cells:
        ctype = str(cell.get("cell_type"))
        counts[ctype] = counts.get(ctype, 0) + 1
    kernelspec = nb.metadata.get("kernelspec", {}) or {}
    return {
        "path": str(path),
        "cells": len(nb.cells),
        "by_type": counts,
        "kernel": kernelspec.get("name"),
    }
