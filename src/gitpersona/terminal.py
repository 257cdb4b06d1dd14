from __future__ import annotations

import logging
import sys
from typing import TextIO

from .errors import PromptClosedError, TerminalUnavailableError

LOGGER = logging.getLogger(__name__)


def _device_names() -> tuple[str, str]:
    if sys.platform == "win32":
        return "CONIN$", "CONOUT$"
    return "/dev/tty", "/dev/tty"


class Terminal:
    """Line-oriented prompt/response channel.

    Git runs hooks with stdin detached from the user, so the hook talks to the
    controlling terminal device directly. Tests pass any pair of text streams.
    """

    def __init__(self, reader: TextIO, writer: TextIO, *, owns_streams: bool = False) -> None:
        self._reader = reader
        self._writer = writer
        self._owns_streams = owns_streams

    @classmethod
    def open_controlling(cls) -> "Terminal":
        input_name, output_name = _device_names()
        try:
            reader = open(input_name, "r", encoding="utf-8", errors="replace")
        except OSError as exc:
            raise TerminalUnavailableError(f"Cannot open {input_name}: {exc}") from exc
        try:
            writer = open(output_name, "w", encoding="utf-8", errors="replace")
        except OSError as exc:
            reader.close()
            raise TerminalUnavailableError(f"Cannot open {output_name}: {exc}") from exc
        return cls(reader, writer, owns_streams=True)

    def write(self, text: str = "") -> None:
        self._writer.write(text + "\n")
        self._writer.flush()

    def ask(self, message: str) -> str:
        self._writer.write(message)
        self._writer.flush()
        line = self._reader.readline()
        if line == "":
            raise PromptClosedError("terminal input closed")
        return line.rstrip("\r\n")

    def close(self) -> None:
        if not self._owns_streams:
            return
        for stream in (self._reader, self._writer):
            try:
                stream.close()
            except OSError as exc:
                LOGGER.debug("Failed to close terminal stream: %s", exc, extra={"category": "io"})

    def __enter__(self) -> "Terminal":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()
