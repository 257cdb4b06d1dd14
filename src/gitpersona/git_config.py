from __future__ import annotations

import logging
from pathlib import Path

from .errors import GitCommandError
from .runner import CommandRunner, SubprocessRunner

LOGGER = logging.getLogger(__name__)

SCOPES = ("local", "global")


class GitConfig:
    def __init__(
        self,
        runner: CommandRunner | None = None,
        *,
        git: str = "git",
        cwd: Path | None = None,
    ) -> None:
        self._runner = runner or SubprocessRunner()
        self._git = git
        self._cwd = cwd

    def _args(self, *rest: str) -> list[str]:
        return [self._git, *rest]

    def get(self, key: str, *, scope: str | None = None) -> str:
        args = ["config"]
        if scope is not None:
            if scope not in SCOPES:
                raise ValueError(f"Unsupported git config scope: {scope}")
            args.append(f"--{scope}")
        args += ["--get", key]
        result = self._runner.run(self._args(*args), cwd=self._cwd)
        # exit code 1 means the key is unset
        if not result.ok:
            return ""
        return result.stdout.strip()

    def set(self, key: str, value: str, *, scope: str = "local") -> None:
        if scope not in SCOPES:
            raise ValueError(f"Unsupported git config scope: {scope}")
        args = self._args("config", f"--{scope}", key, value)
        result = self._runner.run(args, cwd=self._cwd)
        if not result.ok:
            raise GitCommandError(args, result.returncode, result.stderr)

    def unset(self, key: str, *, scope: str = "local") -> None:
        if scope not in SCOPES:
            raise ValueError(f"Unsupported git config scope: {scope}")
        args = self._args("config", f"--{scope}", "--unset", key)
        result = self._runner.run(args, cwd=self._cwd)
        # exit code 5 means the key was not set
        if not result.ok and result.returncode != 5:
            raise GitCommandError(args, result.returncode, result.stderr)

    def current_identity(self) -> tuple[str, str]:
        return self.get("user.name"), self.get("user.email")

    def _restore_local(self, key: str, value: str) -> None:
        try:
            if value:
                self.set(key, value, scope="local")
            else:
                self.unset(key, scope="local")
        except GitCommandError as exc:
            LOGGER.error("Could not restore %s: %s", key, exc, extra={"category": "git"})

    def apply_identity(self, name: str, email: str) -> None:
        """Write name and email to the local config, both or neither."""
        previous_name = self.get("user.name", scope="local")
        self.set("user.name", name, scope="local")
        try:
            self.set("user.email", email, scope="local")
        except GitCommandError:
            self._restore_local("user.name", previous_name)
            raise
        LOGGER.info(
            "Repository identity updated",
            extra={"category": "git"},
        )

    def get_hooks_path(self) -> str:
        return self.get("core.hooksPath", scope="global")

    def set_hooks_path(self, path: Path) -> None:
        self.set("core.hooksPath", path.as_posix(), scope="global")
        LOGGER.info("Global hooks path set to %s", path, extra={"category": "git"})
