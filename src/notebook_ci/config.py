from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Any, cast

from omegaconf import OmegaConf
from pydantic import BaseModel, ConfigDict, SecretStr, ValidationError, field_validator, model_validator

from .errors import UsageError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("configs/default.yaml")

DEFAULTS: dict[str, Any] = {
    "workspace": ".nbci",
    "remote_template": "git@github.com:{repo}.git",
    "badge_url": "https://raw.githubusercontent.com/LSSTDESC/beavis-ci/master/badges/",
    "timeout_secs": 1200,
    "commit_message": "pushed rendered notebooks and log files",
    "strict_checkout": False,
    "jupyter": None,
    "branch": None,
}

DEFAULT_CONFIG_YAML = """\
# notebook-ci - default config

# Hidden directory (relative to where nbci runs) holding the clones
workspace: .nbci

# Clone address; {repo} is replaced by owner/name
remote_template: "git@github.com:{repo}.git"

# Where passing.svg and failing.svg are downloaded from
badge_url: https://raw.githubusercontent.com/LSSTDESC/beavis-ci/master/badges/

# Per-cell execution timeout handed to nbconvert
timeout_secs: 1200

commit_message: pushed rendered notebooks and log files

# Abort when --branch cannot be checked out (default: warn and continue)
strict_checkout: false

# jupyter: /path/to/bin/jupyter
# branch: main
"""


def load_file_config(path: Path = DEFAULT_CONFIG_PATH) -> dict[str, Any]:
    """Return built-in defaults merged with the YAML file at ``path``, if any."""
    base = OmegaConf.create(DEFAULTS)
    if path.exists():
        try:
            base = OmegaConf.merge(base, OmegaConf.load(str(path)))
        except Exception as exc:  # omegaconf/yaml raise assorted types on bad input
            logger.warning("Ignoring unreadable config %s: %s", path, exc)
    obj: Any = OmegaConf.to_container(base, resolve=True)
    return cast(dict[str, Any], obj) if isinstance(obj, dict) else dict(DEFAULTS)


class RunConfig(BaseModel):
    """Immutable settings for one run."""

    model_config = ConfigDict(frozen=True)

    repo: str
    branch: str | None = None
    jupyter: str
    html: bool = False
    commit: bool = True
    push: bool = False
    username: str | None = None
    key: SecretStr | None = None
    workspace: Path = Path(DEFAULTS["workspace"])
    remote_template: str = DEFAULTS["remote_template"]
    badge_url: str = DEFAULTS["badge_url"]
    timeout_secs: int = DEFAULTS["timeout_secs"]
    commit_message: str = DEFAULTS["commit_message"]
    strict_checkout: bool = False

    @field_validator("repo")
    @classmethod
    def _repo_has_name(cls, v: str) -> str:
        v = v.strip().strip("/")
        parts = v.split("/")
        if not v or any(p in ("", ".", "..") for p in parts):
            raise ValueError("repository must look like owner/name")
        return v

    @field_validator("timeout_secs")
    @classmethod
    def _positive_timeout(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeout_secs must be positive")
        return v

    @model_validator(mode="after")
    def _push_needs_credentials(self) -> RunConfig:
        if self.push and not (self.username and self.key and self.key.get_secret_value()):
            raise ValueError("No GITHUB_API_KEY and/or GITHUB_USERNAME set, giving up.")
        return self

    @property
    def repo_dir_name(self) -> str:
        return PurePosixPath(self.repo).name

    @property
    def remote_url(self) -> str:
        return self.remote_template.format(repo=self.repo)

    @property
    def target_branch(self) -> str:
        return "html" if self.html else "rendered"

    @property
    def output_format(self) -> str:
        return "HTML" if self.html else "notebook"

    @property
    def output_ext(self) -> str:
        return "html" if self.html else "nbconvert.ipynb"


def resolve_repo(positional: list[str], option: str | None) -> str:
    """Pick the repository identifier, rejecting missing or ambiguous input."""
    if len(positional) > 1:
        raise UsageError(f"expected one repository, got {len(positional)}: {' '.join(positional)}")
    if positional and option:
        raise UsageError("give the repository either positionally or with --repo, not both")
    repo = option or (positional[0] if positional else "")
    if not repo:
        raise UsageError("no repository given")
    return repo


def build_run_config(file_cfg: dict[str, Any], **cli: Any) -> RunConfig:
    """Combine CLI values over file values into a validated :class:`RunConfig`.

    CLI values that are ``None`` fall through to the file (or built-in default).
    Validation problems are re-raised as :class:`UsageError`.
    """
    merged: dict[str, Any] = {k: v for k, v in file_cfg.items() if k in RunConfig.model_fields}
    merged.update({k: v for k, v in cli.items() if v is not None})
    if not merged.get("jupyter"):
        raise UsageError("no jupyter executable found on PATH; pass --jupyter")
    try:
        return RunConfig(**merged)
    except ValidationError as exc:
        msgs = "; ".join(str(e.get("msg", "")).removeprefix("Value error, ") for e in exc.errors())
        raise UsageError(msgs) from exc
