from __future__ import annotations

from collections.abc import Callable, Iterator
import logging
from pathlib import Path
import stat
import subprocess
import sys

import nbformat as nbf
import pytest

PASSING_SVG = b"<svg>passing</svg>"
FAILING_SVG = b"<svg>failing</svg>"

# Stand-in for `jupyter`: only understands `nbconvert ... --to FMT --execute NAME`.
# Behaviour is chosen by the notebook's metadata key `fake_run`:
#   ok (default) -> renders;  error -> renders but reports a cell error;
#   timeout -> exits 1 without rendering.
_FAKE_JUPYTER = """#!{python}
import json, pathlib, sys, os
args = sys.argv[1:]
print("argv:", " ".join(args))
print("cwd:", os.getcwd())
to = args[args.index("--to") + 1]
src = pathlib.Path(args[-1])
nb = json.loads(src.read_text())
mode = nb.get("metadata", {{}}).get("fake_run", "ok")
if mode == "timeout":
    print("TimeoutError: Cell execution timed out", file=sys.stderr)
    sys.exit(1)
ext = "html" if to == "HTML" else "nbconvert.ipynb"
out = src.parent / (src.stem + "." + ext)
out.write_text("rendered " + src.name)
if mode == "error":
    print("ZeroDivisionError recorded in output", file=sys.stderr)
"""


def _git(args: list[str], cwd: Path) -> str:
    proc = subprocess.run(["git", *args], cwd=cwd, capture_output=True, text=True, check=True)
    return proc.stdout


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for k, v in {
        "GIT_AUTHOR_NAME": "nbci-test",
        "GIT_AUTHOR_EMAIL": "nbci@example.com",
        "GIT_COMMITTER_NAME": "nbci-test",
        "GIT_COMMITTER_EMAIL": "nbci@example.com",
        "GIT_CONFIG_NOSYSTEM": "1",
    }.items():
        monkeypatch.setenv(k, v)
    monkeypatch.delenv("GITHUB_USERNAME", raising=False)
    monkeypatch.delenv("GITHUB_API_KEY", raising=False)


@pytest.fixture(autouse=True)
def _restore_logging() -> Iterator[None]:
    # `nbci run` reconfigures the root logger onto CliRunner's streams
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def git() -> Callable[[list[str], Path], str]:
    return _git


@pytest.fixture
def make_nb() -> Callable[..., Path]:
    def _make(path: Path, fake_run: str = "ok") -> Path:
        nb = nbf.v4.new_notebook()
        nb.cells = [nbf.v4.new_code_cell("x = 1\nprint(x)")]
        nb.metadata["fake_run"] = fake_run
        path.parent.mkdir(parents=True, exist_ok=True)
        nbf.write(nb, str(path))
        return path

    return _make


@pytest.fixture
def fake_jupyter(tmp_path: Path) -> Path:
    p = tmp_path / "bin" / "jupyter"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(_FAKE_JUPYTER.format(python=sys.executable))
    p.chmod(p.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return p


@pytest.fixture
def offline_badges(monkeypatch: pytest.MonkeyPatch) -> None:
    def _fetch(badge_dir: Path, base_url: str, client: object = None) -> list[Path]:
        badge_dir.mkdir(parents=True, exist_ok=True)
        (badge_dir / "passing.svg").write_bytes(PASSING_SVG)
        (badge_dir / "failing.svg").write_bytes(FAILING_SVG)
        return [badge_dir / "failing.svg", badge_dir / "passing.svg"]

    monkeypatch.setattr("notebook_ci.pipeline.nodes.runner.fetch_badges", _fetch)


@pytest.fixture
def remote_factory(tmp_path: Path, make_nb: Callable[..., Path]) -> Callable[..., Path]:
    """Build a bare repo at ``remotes/<repo>.git`` whose main branch holds ``notebooks``.

    ``notebooks`` maps relative paths to a ``fake_run`` mode. Returns the bare repo.
    """

    def _make(repo: str = "owner/proj", notebooks: dict[str, str] | None = None) -> Path:
        work = tmp_path / "work" / repo
        work.mkdir(parents=True, exist_ok=True)
        _git(["init", "-q", "-b", "main"], work)
        for rel, mode in (notebooks or {"a.ipynb": "ok"}).items():
            make_nb(work / rel, mode)
        (work / "README.md").write_text("notebooks\n")
        (work / ".gitignore").write_text("*.nbconvert.ipynb\n*.html\nlog/\n")
        _git(["add", "-A"], work)
        _git(["commit", "-q", "-m", "initial"], work)
        _git(["branch", "dev"], work)
        bare = tmp_path / "remotes" / f"{repo}.git"
        bare.parent.mkdir(parents=True, exist_ok=True)
        _git(["clone", "-q", "--bare", str(work), str(bare)], tmp_path)
        return bare

    return _make


@pytest.fixture
def remote_template(tmp_path: Path) -> str:
    return str(tmp_path / "remotes" / "{repo}.git")
