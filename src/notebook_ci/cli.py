from __future__ import annotations

from collections.abc import Callable
import logging
from pathlib import Path
import shutil
from typing import Any, Optional, TypeVar

import click
import typer

from .config import (
    DEFAULT_CONFIG_PATH,
    DEFAULT_CONFIG_YAML,
    build_run_config,
    load_file_config,
    resolve_repo,
)
from .errors import SetupError, UsageError
from .pipeline.graph import build_graph
from .tools.discovery import find_notebooks
from .tools.nb_inspector import summarize_notebook

app = typer.Typer(help="notebook-ci: occasional integration and testing for notebook repos")

# Sub-typer for config utilities
config_app = typer.Typer(help="Configuration commands")
app.add_typer(config_app, name="config")

logger = logging.getLogger(__name__)

# ---- B008-safe Typer option defaults (avoid calling typer.Option in signature) ----
CONFIG_OPT = typer.Option(DEFAULT_CONFIG_PATH, "--config", help="YAML config file")
VERBOSE_OPT = typer.Option(False, "--verbose", "-v")

F = TypeVar("F", bound=Callable[..., Any])


def typed_command(*dargs: Any, **dkwargs: Any) -> Callable[[F], F]:
    """A typed wrapper around app.command to avoid mypy 'Untyped decorator' errors."""
    dec = app.command(*dargs, **dkwargs)

    def _decorator(fn: F) -> F:
        dec(fn)
        return fn

    return _decorator


def typed_command_for(app_obj: typer.Typer, *dargs: Any, **dkwargs: Any) -> Callable[[F], F]:
    """Same as typed_command, but for a provided Typer instance (e.g., subcommands)."""
    dec = app_obj.command(*dargs, **dkwargs)

    def _decorator(fn: F) -> F:
        dec(fn)
        return fn

    return _decorator


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        force=True,
    )


def _usage_exit(ctx: typer.Context, message: str | None = None) -> None:
    typer.echo(ctx.get_help())
    if message:
        typer.echo(f"\nError: {message}", err=True)
    raise typer.Exit(code=1)


@typed_command(name="run", context_settings={"help_option_names": []})
def run_cmd(
    ctx: typer.Context,
    repo_args: Optional[list[str]] = typer.Argument(
        None, metavar="REPO", help="Repository to test, e.g. LSSTDESC/DC2-analysis"
    ),
    repo: Optional[str] = typer.Option(None, "--repo", "-r", help="Repository, as an option"),
    branch: Optional[str] = typer.Option(
        None, "--branch", "-b", help="Branch to test; outputs still go to 'rendered'"
    ),
    jupyter: Optional[str] = typer.Option(
        None, "--jupyter", "-j", help="Full path to the jupyter executable"
    ),
    username: Optional[str] = typer.Option(
        None, "--username", "-u", envvar="GITHUB_USERNAME", show_envvar=True
    ),
    key: Optional[str] = typer.Option(
        None, "--key", "-k", envvar="GITHUB_API_KEY", show_envvar=True
    ),
    no_commit: bool = typer.Option(
        False, "--no-commit", "-n", help="Only run the notebooks, do not commit any output"
    ),
    push: bool = typer.Option(False, "--push", help="Force push the results to the output branch"),
    html: bool = typer.Option(False, "--html", help="Make HTML outputs instead"),
    config: Path = CONFIG_OPT,
    verbose: bool = VERBOSE_OPT,
    help_: bool = typer.Option(False, "--help", "-h", help="Print this help and exit"),
) -> None:
    """
    Clone REPO, execute every notebook in it and publish the results.

    Rendered notebooks (or HTML pages with --html), per-notebook logs and
    passing/failing badges are committed to a fresh orphan branch named
    'rendered' (or 'html'), which --push force-pushes to GitHub for web
    display. The clone lives in a hidden workspace under the current
    directory and is replaced on every run.

    Examples:

        nbci run LSSTDESC/DC2-analysis --jupyter /opt/anaconda/bin/jupyter

        nbci run LSSTDESC/DC2-analysis --push -u me -k $TOKEN
    """
    if help_:
        _usage_exit(ctx)
    _setup_logging(verbose)

    file_cfg = load_file_config(config)
    try:
        repo_name = resolve_repo(list(repo_args or []), repo)
        cfg = build_run_config(
            file_cfg,
            repo=repo_name,
            branch=branch,
            jupyter=jupyter or file_cfg.get("jupyter") or shutil.which("jupyter"),
            username=username,
            key=key,
            commit=not no_commit,
            push=push,
            html=html,
        )
    except UsageError as exc:
        _usage_exit(ctx, str(exc))
        return

    logger.info("Welcome to notebook-ci: occasional integration and testing")
    if cfg.push:
        logger.info("with deployment via GitHub as %s", cfg.username)

    try:
        final_state: dict[str, Any] = build_graph().invoke({"run_config": cfg})
    except SetupError as exc:
        typer.echo(f"{exc} Abort!", err=True)
        raise typer.Exit(code=1) from exc

    results = final_state.get("results")
    if results is not None:
        typer.echo(f"{len(results.outputs)}/{len(results.runs)} notebooks rendered")
        for r in results.failed:
            typer.echo(f"  failed: {r.notebook.as_posix()} (log: {r.log_file.as_posix()})")
    if cfg.commit and not final_state.get("published"):
        typer.echo(f"Could not commit to the {cfg.target_branch!r} branch, see the log above.")
    typer.echo("notebook-ci finished!")
    if final_state.get("pushed"):
        typer.echo(f"View results at https://github.com/{cfg.repo}/tree/{cfg.target_branch}/")
    elif cfg.push:
        typer.echo("Push failed, results were only committed locally.")


@typed_command(name="discover")
def discover_cmd(path: Path = typer.Argument(Path("."))) -> None:
    """List the notebooks `run` would execute under PATH."""
    for nb in find_notebooks(path):
        summary = summarize_notebook(path / nb)
        if "error" in summary:
            typer.echo(f"{nb.as_posix()}  (unreadable: {summary['error']})")
            continue
        kinds = ", ".join(f"{k}={v}" for k, v in sorted(summary["by_type"].items()))
        typer.echo(f"{nb.as_posix()}  cells={summary['cells']} {kinds}".rstrip())


# -----------------------
# config subcommands
# -----------------------


@typed_command_for(config_app, name="init")
def config_init(
    path: Path = typer.Argument(DEFAULT_CONFIG_PATH),
    overwrite: bool = typer.Option(False, "--overwrite"),
) -> None:
    """Create a default config file at configs/default.yaml."""
    if path.exists() and not overwrite:
        typer.echo(f"Config already exists at {path}. Use --overwrite to replace.")
        raise typer.Exit(code=1)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(DEFAULT_CONFIG_YAML)
    typer.echo(f"Wrote {path}")


def main() -> None:
    """Console entry point; every usage error exits 1, like the ones raised by `run`."""
    try:
        rv = app(standalone_mode=False)
    except click.exceptions.UsageError as exc:
        if exc.ctx is not None:
            typer.echo(exc.ctx.get_help())
        typer.echo(f"\nError: {exc.format_message()}", err=True)
        raise SystemExit(1) from exc
    except click.exceptions.Abort as exc:
        raise SystemExit(1) from exc
    except click.ClickException as exc:
        exc.show()
        raise SystemExit(exc.exit_code) from exc
    raise SystemExit(rv if isinstance(rv, int) else 0)


if __name__ == "__main__":
    main()
