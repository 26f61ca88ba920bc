from __future__ import annotations

import logging
from pathlib import Path
import subprocess

logger = logging.getLogger(__name__)

# Conventional "command not found" status, used when the tool cannot be launched.
LAUNCH_FAILED = 127


def nbconvert_command(jupyter: str, notebook_name: str, to: str, timeout_secs: int) -> list[str]:
    return [
        jupyter,
        "nbconvert",
        "--ExecutePreprocessor.allow_errors=True",
        f"--ExecutePreprocessor.timeout={int(timeout_secs)}",
        "--to",
        to,
        "--execute",
        notebook_name,
    ]


def execute_notebook(
    jupyter: str,
    notebook: Path,
    log_file: Path,
    to: str = "notebook",
    timeout_secs: int = 1200,
) -> int:
    """Execute ``notebook`` in its own directory, writing all tool output to ``log_file``.

    Returns the tool's exit status. The status is informational only: callers
    decide success by looking for the rendered artifact.
    """
    cmd = nbconvert_command(jupyter, notebook.name, to, timeout_secs)
    logger.debug("%s (cwd=%s)", " ".join(cmd), notebook.parent)
    with log_file.open("w", encoding="utf-8") as fh:
        try:
            proc = subprocess.run(
                cmd, cwd=notebook.parent, stdout=fh, stderr=subprocess.STDOUT, text=True
            )
        except OSError as exc:
            fh.write(f"failed to launch {jupyter!r}: {exc}\n")
            return LAUNCH_FAILED
    return proc.returncode
