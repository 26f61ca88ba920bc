from __future__ import annotations


class NotebookCIError(Exception):
    """Base class for errors that abort a run."""


class UsageError(NotebookCIError):
    """Bad or missing command-line input; reported with the help text."""


class SetupError(NotebookCIError):
    """The workspace could not be prepared."""


class CloneError(SetupError):
    pass


class CheckoutError(SetupError):
    pass


class GitError(NotebookCIError):
    def __init__(self, cmd: list[str], returncode: int, output: str) -> None:
        self.cmd = cmd
        self.returncode = returncode
        self.output = output
        super().__init__(f"{' '.join(cmd)} exited with {returncode}: {output.strip()}")
