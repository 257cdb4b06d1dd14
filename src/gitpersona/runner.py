from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(Protocol):
    def run(self, args: Sequence[str], *, cwd: Path | None = None) -> CommandResult: ...


class SubprocessRunner:
    def run(self, args: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        try:
            completed = subprocess.run(
                list(args),
                cwd=str(cwd) if cwd is not None else None,
                check=False,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                stdin=subprocess.DEVNULL,
            )
        except FileNotFoundError as exc:
            LOGGER.error(
                "Command not found: %s",
                args[0] if args else "",
                extra={"category": "command"},
            )
            return CommandResult(returncode=127, stderr=str(exc))
        if completed.returncode != 0:
            LOGGER.debug(
                "Command exited with %s: %s",
                completed.returncode,
                " ".join(args),
                extra={"category": "command"},
            )
        return CommandResult(
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )
