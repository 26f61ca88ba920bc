from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from ...config import RunConfig
from ...tools.badges import BADGE_DIR, copy_badge, fetch_badges
from ...tools.discovery import find_notebooks
from ...tools.nbconvert import execute_notebook
from ..schemas import NotebookRun, Outcome, RunResults, classify

logger = logging.getLogger(__name__)


def run_notebook(cfg: RunConfig, repo_dir: Path, notebook: Path, badge_dir: Path) -> NotebookRun:
    """Execute one notebook (given relative to ``repo_dir``) and badge the result."""
    stem = notebook.stem
    rel_dir = notebook.parent
    log_dir = rel_dir / "log"
    log_file = log_dir / f"{stem}.log"
    output = rel_dir / f"{stem}.{cfg.output_ext}"

    (repo_dir / log_dir).mkdir(parents=True, exist_ok=True)
    rc = execute_notebook(
        cfg.jupyter,
        repo_dir / notebook,
        repo_dir / log_file,
        to=cfg.output_format,
        timeout_secs=cfg.timeout_secs,
    )

    outcome = classify(repo_dir / output)
    if outcome is Outcome.PASSING:
        logger.info("SUCCESS: %s produced.", output.as_posix())
    else:
        logger.warning(
            "WARNING: %s was not created, read the log in %s for details.",
            output.as_posix(),
            log_file.as_posix(),
        )
    badge = copy_badge(badge_dir, outcome is Outcome.PASSING, repo_dir / log_dir / f"{stem}.svg")

    return NotebookRun(
        notebook=notebook,
        output=output,
        log_dir=log_dir,
        log_file=log_file,
        badge=badge.relative_to(repo_dir) if badge else None,
        outcome=outcome,
        returncode=rc,
    )


def run_notebooks(cfg: RunConfig, repo_dir: Path) -> RunResults:
    if cfg.html:
        logger.info("Making static HTML pages from the notebooks:")
    else:
        logger.info("Rendering the notebooks:")

    badge_dir = repo_dir / BADGE_DIR
    fetch_badges(badge_dir, cfg.badge_url)

    notebooks = find_notebooks(repo_dir)
    for nb in notebooks:
        logger.info("  %s", nb.as_posix())

    results = RunResults()
    for nb in notebooks:
        results.add(run_notebook(cfg, repo_dir, nb, badge_dir))
    logger.info("%d of %d notebooks rendered", len(results.outputs), len(results.runs))
    return results


def runner_node(state: dict[str, Any]) -> dict[str, Any]:
    cfg: RunConfig = state["run_config"]
    results = run_notebooks(cfg, Path(state["repo_dir"]))
    return {"results": results}
