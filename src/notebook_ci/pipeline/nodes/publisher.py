from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ...config import RunConfig
from ...errors import GitError
from ...tools import git
from ...tools.badges import BADGE_DIR
from ..schemas import RunResults

logger = logging.getLogger(__name__)


def publish_results(cfg: RunConfig, repo_dir: Path, results: RunResults) -> bool:
    """Replace the output branch with exactly this run's badges, outputs and logs.

    The branch is recreated as an orphan every time, so nothing from earlier
    runs or from the tested branch survives in its tree. Returns ``True`` when
    the branch was pushed.
    """
    target = cfg.target_branch
    logger.info("Committing the rendered outputs to the orphan branch %r", target)

    # Usually fails because the branch does not exist yet.
    git.git(["branch", "-D", target], cwd=repo_dir)

    git.git(["checkout", "--orphan", target], cwd=repo_dir, check=True)
    git.git(["rm", "-r", "-f", "-q", "--ignore-unmatch", "."], cwd=repo_dir, check=True)
    if (repo_dir / BADGE_DIR).exists():
        git.git(["add", BADGE_DIR], cwd=repo_dir, check=True)
    outputs = [p.as_posix() for p in results.outputs]
    if outputs:
        git.git(["add", "-f", "--", *outputs], cwd=repo_dir, check=True)
    log_dirs = [p.as_posix() for p in results.log_dirs]
    if log_dirs:
        git.git(["add", "-f", "--", *log_dirs], cwd=repo_dir, check=True)
    git.git(["commit", "-q", "-m", cfg.commit_message], cwd=repo_dir, check=True)

    pushed = False
    if cfg.push:
        logger.info("Force-pushing %r to origin as %s", target, cfg.username)
        proc = git.git(["push", "-q", "-f", "origin", target], cwd=repo_dir)
        if proc.returncode == 0:
            pushed = True
        else:
            logger.error("Push failed: %s", git.describe_failure(proc))

    status = git.git(["status"], cwd=repo_dir)
    logger.info("git status of %s:\n%s", repo_dir.name, status.stdout.rstrip())
    return pushed


def publisher_node(state: dict[str, Any]) -> dict[str, Any]:
    cfg: RunConfig = state["run_config"]
    results: RunResults = state.get("results") or RunResults()
    try:
        pushed = publish_results(cfg, Path(state["repo_dir"]), results)
    except GitError as exc:
        logger.error("Publishing failed: %s", exc)
        return {"published": False, "pushed": False}
    return {"published": True, "pushed": pushed}
