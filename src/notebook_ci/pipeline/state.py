from __future__ import annotations

from typing import TypedDict

from ..config import RunConfig
from .schemas import RunResults


class State(TypedDict, total=False):
    run_config: RunConfig

    repo_dir: str
    working_branch: str
    results: RunResults
    published: bool
    pushed: bool
