from __future__ import annotations

import logging
from pathlib import Path
import subprocess

from ..errors import GitError

logger = logging.getLogger(__name__)


def git(args: list[str], cwd: Path, check: bool = False) -> subprocess.CompletedProcess[str]:
    """Run ``git <args>`` in ``cwd`` and return the finished process.

    stdout and stderr are captured. With ``check=True`` a non-zero exit
    raises :class:`GitError` carrying the combined output.
    """
    cmd = ["git", *args]
    logger.debug("%s (cwd=%s)", " ".join(cmd), cwd)
    proc = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
    if check and proc.returncode != 0:
        raise GitError(cmd, proc.returncode, (proc.stdout or "") + (proc.stderr or ""))
    return proc


def clone(remote_url: str, dest: Path) -> subprocess.CompletedProcess[str]:
    return git(["clone", remote_url, dest.name], cwd=dest.parent)


def checkout(repo_dir: Path, branch: str) -> subprocess.CompletedProcess[str]:
    return git(["checkout", branch], cwd=repo_dir)


def current_branch(repo_dir: Path) -> str:
    proc = git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=repo_dir)
    return proc.stdout.strip() if proc.returncode == 0 else ""


def describe_failure(proc: subprocess.CompletedProcess[str]) -> str:
    out = ((proc.stdout or "") + (proc.stderr or "")).strip()
    return f"{' '.join(proc.args)} exited with {proc.returncode}" + (f": {out}" if out else "")
