from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class Outcome(str, Enum):
    PASSING = "passing"
    FAILING = "failing"


def classify(output: Path) -> Outcome:
    """A run passes iff its rendered artifact exists.

    The tool's exit status and any cell errors recorded inside the notebook are
    ignored: a notebook that executes partially but still renders is passing.
    """
    return Outcome.PASSING if output.exists() else Outcome.FAILING


class NotebookRun(BaseModel):
    """One executed notebook. Paths are relative to the clone root."""

    notebook: Path
    output: Path
    log_dir: Path
    log_file: Path
    badge: Path | None = None
    outcome: Outcome
    returncode: int

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.PASSING


class RunResults(BaseModel):
    runs: list[NotebookRun] = Field(default_factory=list)

    def add(self, run: NotebookRun) -> None:
        self.runs.append(run)

    @property
    def outputs(self) -> list[Path]:
        return [r.output for r in self.runs if r.passed]

    @property
    def log_dirs(self) -> list[Path]:
        seen: list[Path] = []
        for r in self.runs:
            if r.log_dir not in seen:
                seen.append(r.log_dir)
        return seen

    @property
    def failed(self) -> list[NotebookRun]:
        return [r for r in self.runs if not r.passed]
