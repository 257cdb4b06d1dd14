from __future__ import annotations

from pathlib import Path


class GitPersonaError(Exception):
    """Base error for gitpersona failures that cross a module boundary."""


class MissingStoreError(GitPersonaError):
    def __init__(self, path: Path) -> None:
        super().__init__(
            "Identity store not found.\n"
            f"Expected file: {path}\n"
            "Run 'gitpersona provision' to register your identities, then commit again."
        )
        self.path = path


class GitCommandError(GitPersonaError):
    def __init__(self, args: list[str], returncode: int, stderr: str) -> None:
        detail = stderr.strip() or f"exit code {returncode}"
        super().__init__(f"git command failed ({' '.join(args)}): {detail}")
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr


class TerminalUnavailableError(GitPersonaError):
    pass


class PromptClosedError(EOFError):
    pass
