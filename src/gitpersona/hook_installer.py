from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from .git_config import GitConfig
from .io_utils import atomic_write_text, read_text_safe

LOGGER = logging.getLogger(__name__)

HOOK_NAME = "pre-commit"
SHEBANG = "#!/bin/sh"
START_MARKER = "# >>> gitpersona >>>"
END_MARKER = "# <<< gitpersona <<<"


def replace_marked_section(
    text: str,
    section: str,
    *,
    start_marker: str = START_MARKER,
    end_marker: str = END_MARKER,
) -> str:
    """Return ``text`` with the marker-delimited block set to ``section``.

    The block (markers included) is replaced in place when both markers are
    present in order; otherwise it is appended. Applying the same section twice
    yields the same text.
    """
    body = section.strip("\n")
    block = f"{start_marker}\n{body}\n{end_marker}\n"
    start = text.find(start_marker)
    end = text.find(end_marker, start + len(start_marker)) if start != -1 else -1
    if start != -1 and end != -1:
        tail_start = end + len(end_marker)
        if text.startswith("\r\n", tail_start):
            tail_start += 2
        elif text.startswith("\n", tail_start):
            tail_start += 1
        return text[:start] + block + text[tail_start:]
    if text and not text.endswith("\n"):
        text += "\n"
    return text + block


def build_hook_section(python_executable: str) -> str:
    python_path = Path(python_executable).as_posix()
    return "\n".join(
        [
            "# Choose the commit identity for this repository.",
            f'"{python_path}" -m gitpersona select || exit $?',
        ]
    )


def render_hook(existing: str, python_executable: str) -> str:
    base = existing if existing.strip() else f"{SHEBANG}\n"
    return replace_marked_section(base, build_hook_section(python_executable))


def _make_executable(path: Path) -> None:
    try:
        mode = path.stat().st_mode
        os.chmod(path, mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    except OSError as exc:
        LOGGER.warning("Failed to mark hook executable: %s", exc, extra={"category": "install"})


def install_hook(hooks_dir: Path, git_config: GitConfig, python_executable: str) -> Path:
    hooks_dir.mkdir(parents=True, exist_ok=True)
    hook_path = hooks_dir / HOOK_NAME
    existing = read_text_safe(hook_path, context="pre-commit hook")
    updated = render_hook(existing, python_executable)
    if updated != existing:
        atomic_write_text(hook_path, updated)
        LOGGER.info("Hook written to %s", hook_path, extra={"category": "install"})
    _make_executable(hook_path)
    if git_config.get_hooks_path() != hooks_dir.as_posix():
        git_config.set_hooks_path(hooks_dir)
    return hook_path
