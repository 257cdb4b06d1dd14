from __future__ import annotations

import io
import os
from pathlib import Path
from typing import Sequence

import pytest

from gitpersona.runner import CommandResult
from gitpersona.store import IdentityStore
from gitpersona.terminal import Terminal


@pytest.fixture(autouse=True)
def _isolate_runtime_dirs(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate tests from user-specific directories and keep logs/data in temp."""
    data_dir = tmp_path / "data"
    root_dir = tmp_path / "Root"
    data_dir.mkdir(parents=True, exist_ok=True)
    root_dir.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("GITPERSONA_DATA_DIR", str(data_dir))
    monkeypatch.setenv("GITPERSONA_ROOT", str(root_dir))
    monkeypatch.delenv("GITPERSONA_STORE_FILE", raising=False)
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "LocalAppData"))
    if "USERPROFILE" not in os.environ:
        monkeypatch.setenv("USERPROFILE", str(tmp_path))


class FakeGitRunner:
    """Answers the handful of git commands gitpersona issues."""

    def __init__(self, *, local: dict[str, str] | None = None, global_: dict[str, str] | None = None) -> None:
        self.local = dict(local or {})
        self.global_ = dict(global_ or {})
        self.calls: list[list[str]] = []
        self.fail_writes = False
        self.fail_keys: set[str] = set()

    def run(self, args: Sequence[str], *, cwd: Path | None = None) -> CommandResult:
        argv = list(args)
        self.calls.append(argv)
        rest = argv[1:]
        if rest[:1] != ["config"]:
            return CommandResult(returncode=1, stderr="unsupported")
        rest = rest[1:]
        scope = None
        if rest and rest[0] in ("--local", "--global"):
            scope = rest[0][2:]
            rest = rest[1:]
        if rest and rest[0] == "--get":
            key = rest[1]
            if scope == "local":
                value = self.local.get(key)
            elif scope == "global":
                value = self.global_.get(key)
            else:
                value = self.local.get(key, self.global_.get(key))
            if value is None:
                return CommandResult(returncode=1)
            return CommandResult(returncode=0, stdout=f"{value}\n")
        if rest and rest[0] == "--unset":
            target = self.global_ if scope == "global" else self.local
            if target.pop(rest[1], None) is None:
                return CommandResult(returncode=5)
            return CommandResult(returncode=0)
        if len(rest) == 2:
            if self.fail_writes or rest[0] in self.fail_keys:
                return CommandResult(returncode=255, stderr="error: could not lock config file")
            target = self.global_ if scope == "global" else self.local
            target[rest[0]] = rest[1]
            return CommandResult(returncode=0)
        return CommandResult(returncode=1, stderr="unsupported")

    @property
    def writes(self) -> list[list[str]]:
        return [call for call in self.calls if "--get" not in call and call[1:2] == ["config"]]


def make_terminal(*lines: str) -> tuple[Terminal, io.StringIO]:
    output = io.StringIO()
    reader = io.StringIO("".join(f"{line}\n" for line in lines))
    return Terminal(reader, output), output


@pytest.fixture
def git_runner() -> FakeGitRunner:
    return FakeGitRunner(local={"user.name": "Old Name", "user.email": "old@example.com"})


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "identities.txt"


@pytest.fixture
def two_identity_store(store_path: Path) -> IdentityStore:
    store_path.parent.mkdir(parents=True, exist_ok=True)
    store_path.write_text(
        "1:Alice Work:alice@work.com:Work\n2:Alice Home:alice@home.org:Personal\n",
        encoding="utf-8",
    )
    return IdentityStore(store_path)
