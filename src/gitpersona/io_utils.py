from __future__ import annotations

import logging
import os
import uuid
from pathlib import Path


LOGGER = logging.getLogger(__name__)


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    temp_name = f".{path.name}.{os.getpid()}.{uuid.uuid4().hex}.tmp"
    temp_path = path.with_name(temp_name)
    try:
        with temp_path.open("w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, path)
    finally:
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass


def append_line_durable(path: Path, line: str, *, encoding: str = "utf-8") -> None:
    # one write call per line; a killed process never leaves half a record
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = line.rstrip("\r\n") + "\n"
    needs_separator = False
    if path.exists() and path.stat().st_size > 0:
        with path.open("rb") as existing:
            existing.seek(-1, os.SEEK_END)
            needs_separator = existing.read(1) not in (b"\n", b"\r")
    if needs_separator:
        payload = "\n" + payload
    with path.open("a", encoding=encoding, newline="") as handle:
        handle.write(payload)
        handle.flush()
        os.fsync(handle.fileno())


def read_text_safe(
    path: Path,
    *,
    encoding: str = "utf-8",
    default: str = "",
    context: str | None = None,
) -> str:
    try:
        return path.read_text(encoding=encoding)
    except FileNotFoundError:
        return default
    except Exception as exc:
        label = context or str(path)
        LOGGER.warning(
            "Failed to read %s: %s",
            label,
            exc,
            extra={"category": "io"},
        )
        return default
