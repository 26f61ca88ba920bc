from __future__ import annotations

import logging
from pathlib import Path
import shutil
from typing import Any

from ...config import RunConfig
from ...errors import CheckoutError, CloneError, SetupError
from ...tools import git

logger = logging.getLogger(__name__)


def prepare_workspace(cfg: RunConfig, base: Path | None = None) -> tuple[Path, str]:
    """Clone ``cfg.repo`` fresh into the workspace and check out the branch.

    Any previous clone of the same name is deleted first. Returns the absolute
    clone directory and the branch it is on.
    """
    workspace = (base or Path.cwd()) / cfg.workspace
    workspace.mkdir(parents=True, exist_ok=True)
    repo_dir = (workspace / cfg.repo_dir_name).resolve()
    if repo_dir.parent != workspace.resolve():
        raise SetupError(f"Refusing to use {repo_dir} as a clone: it is outside {workspace}")

    if repo_dir.exists():
        logger.info("Removing previous clone at %s", repo_dir)
        shutil.rmtree(repo_dir)

    logger.info("Cloning %s into the %s workspace", cfg.repo, cfg.workspace)
    proc = git.clone(cfg.remote_url, repo_dir)
    if not repo_dir.is_dir():
        raise CloneError(f"Failed to clone {cfg.repo}! {git.describe_failure(proc)}")

    if cfg.branch:
        co = git.checkout(repo_dir, cfg.branch)
        if co.returncode != 0:
            msg = f"Could not check out {cfg.branch!r}: {git.describe_failure(co)}"
            if cfg.strict_checkout:
                raise CheckoutError(msg)
            logger.warning("%s; continuing on the cloned branch", msg)

    branch = git.current_branch(repo_dir)
    logger.info("Testing %s on branch %s", repo_dir.name, branch or "(unknown)")
    return repo_dir, branch


def workspace_node(state: dict[str, Any]) -> dict[str, Any]:
    cfg: RunConfig = state["run_config"]
    repo_dir, branch = prepare_workspace(cfg)
    return {"repo_dir": str(repo_dir), "working_branch": branch}
