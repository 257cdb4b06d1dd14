from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable

from .config import AppConfig, default_config, get_config_path, load_app_config
from .errors import MissingStoreError, TerminalUnavailableError
from .git_config import GitConfig
from .logging_setup import setup_logging
from .runner import CommandRunner
from .selector import IdentitySelector
from .store import IdentityStore
from .terminal import Terminal
from . import __version_label__

LOGGER = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def load_config_or_default() -> AppConfig:
    config_path = get_config_path()
    try:
        return load_app_config(config_path)
    except Exception as exc:
        sys.stderr.write(
            "gitpersona: configuration error, using defaults.\n"
            f"Config file: {config_path}\n"
            f"Details: {exc}\n"
        )
        return default_config()


def setup_app_logging(config: AppConfig) -> None:
    setup_logging(
        config.log_file,
        log_level=config.log_level,
        log_console_level=config.log_console_level,
        log_console_enabled=config.log_console_enabled,
        log_max_bytes=config.log_max_bytes,
        log_backup_count=config.log_backup_count,
        log_run_files_keep=config.log_run_files_keep,
        app_version=__version_label__,
        repository=str(Path.cwd()),
    )


def _require_store(store: IdentityStore) -> None:
    if not store.exists():
        raise MissingStoreError(store.path)


def run_selector(
    config: AppConfig,
    *,
    runner: CommandRunner | None = None,
    terminal_factory: Callable[[], Terminal] = Terminal.open_controlling,
) -> int:
    store = IdentityStore(Path(config.store_file))
    try:
        _require_store(store)
    except MissingStoreError as exc:
        LOGGER.error("Identity store missing; commit blocked", extra={"category": "selector"})
        sys.stderr.write(f"{exc}\n")
        return EXIT_FAILURE

    try:
        terminal = terminal_factory()
    except TerminalUnavailableError as exc:
        LOGGER.warning(
            "No terminal available, keeping current identity: %s",
            exc,
            extra={"category": "selector"},
        )
        sys.stderr.write("gitpersona: no terminal available; keeping current identity.\n")
        return EXIT_OK

    git_config = GitConfig(runner, git=config.git_executable)
    with terminal:
        try:
            IdentitySelector(store, git_config, terminal).run()
        except MissingStoreError as exc:
            terminal.write(str(exc))
            return EXIT_FAILURE
        except KeyboardInterrupt:
            terminal.write("")
            LOGGER.info("Identity selection interrupted", extra={"category": "shutdown"})
            return EXIT_INTERRUPTED
    return EXIT_OK


def main() -> int:
    config = load_config_or_default()
    setup_app_logging(config)
    return run_selector(config)


if __name__ == "__main__":
    raise SystemExit(main())
