from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import yaml

from .collection import collect_identities, collect_identity
from .config import (
    CONFIG_FILE_NAME,
    AppConfig,
    default_config_values,
    ensure_local_config_from_template,
    get_config_path,
)
from .entrypoint import load_config_or_default, run_selector, setup_app_logging
from .errors import GitCommandError
from .git_config import GitConfig
from .hook_installer import install_hook
from .store import IdentityStore
from .terminal import Terminal

LOGGER = logging.getLogger(__name__)

COMMANDS = ["select", "provision", "list", "add", "install-hook", "init-config"]


def _console() -> Terminal:
    return Terminal(sys.stdin, sys.stdout)


def _store(config: AppConfig) -> IdentityStore:
    return IdentityStore(Path(config.store_file))


def _format_records(store: IdentityStore) -> list[str]:
    return [
        f"{record.ordinal}) {record.label} - {record.full_name} <{record.email}>"
        for record in store.load()
    ]


def cmd_provision(config: AppConfig, *, reset: bool, terminal: Terminal) -> int:
    """Collect the initial set of identities."""
    store = _store(config)
    if store.exists() and not reset:
        terminal.write(f"Identity store already exists: {store.path}")
        terminal.write("Use 'gitpersona provision --reset' to replace it, or 'gitpersona add'.")
        return 1
    if reset:
        store.reset()

    terminal.write("Register the identities you commit with.")
    try:
        added = collect_identities(store, terminal)
    except EOFError:
        terminal.write("")
        terminal.write("Provisioning aborted.")
        added = []
    if not added and not store.load():
        LOGGER.error("Provisioning finished without identities", extra={"category": "store"})
        terminal.write("No identities registered.")
        return 1
    terminal.write(f"Identities saved to {store.path}")
    return 0


def cmd_list(config: AppConfig, *, terminal: Terminal) -> int:
    """Print the stored identities in file order."""
    store = _store(config)
    if not store.exists():
        terminal.write(f"Identity store not found: {store.path}")
        return 1
    lines = _format_records(store)
    if not lines:
        terminal.write("Identity store has no valid entries.")
        return 1
    for line in lines:
        terminal.write(line)
    return 0


def cmd_add(config: AppConfig, *, terminal: Terminal) -> int:
    """Append one identity to the store."""
    try:
        collect_identity(_store(config), terminal)
    except EOFError:
        terminal.write("")
        terminal.write("Nothing added.")
        return 1
    return 0


def cmd_install_hook(
    config: AppConfig,
    *,
    terminal: Terminal,
    git_config: GitConfig | None = None,
) -> int:
    """Install the pre-commit hook and point the global hooks path at it."""
    git_config = git_config or GitConfig(git=config.git_executable)
    existing = git_config.get_hooks_path()
    hooks_dir = Path(existing).expanduser() if existing else Path(config.hooks_dir)
    try:
        hook_path = install_hook(hooks_dir, git_config, sys.executable)
    except GitCommandError as exc:
        terminal.write(f"Failed to configure git: {exc}")
        return 1
    terminal.write(f"Hook installed: {hook_path}")
    if not _store(config).exists():
        terminal.write("Next step: run 'gitpersona provision' to register identities.")
    return 0


def cmd_init_config(*, terminal: Terminal, config_path: Path | None = None) -> int:
    """Write config.local.yaml from the bundled template."""
    config_path = config_path or get_config_path()
    if ensure_local_config_from_template(config_path):
        terminal.write(f"Config created: {config_path}")
        return 0
    if config_path.exists() and config_path.read_text(encoding="utf-8").strip():
        terminal.write(f"Config already exists: {config_path}")
        return 0
    # template is not shipped inside wheels
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        yaml.safe_dump(default_config_values(), sort_keys=False, allow_unicode=True),
        encoding="utf-8",
    )
    terminal.write(f"Config created with defaults: {config_path}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitpersona",
        description="Per-repository git commit identity switcher",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default="select",
        choices=COMMANDS,
        help="Command to run (default: select, as used by the pre-commit hook).",
    )
    parser.add_argument(
        "--reset",
        action="store_true",
        help=f"With provision: remove the existing identity store first ({CONFIG_FILE_NAME} is kept).",
    )
    return parser


def _cli_main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    config = load_config_or_default()
    setup_app_logging(config)
    LOGGER.debug("Command: %s", args.command, extra={"category": "cli"})

    if args.command == "select":
        return run_selector(config)

    terminal = _console()
    try:
        if args.command == "provision":
            return cmd_provision(config, reset=args.reset, terminal=terminal)
        if args.command == "list":
            return cmd_list(config, terminal=terminal)
        if args.command == "add":
            return cmd_add(config, terminal=terminal)
        if args.command == "install-hook":
            return cmd_install_hook(config, terminal=terminal)
        if args.command == "init-config":
            return cmd_init_config(terminal=terminal)
    except KeyboardInterrupt:
        terminal.write("")
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(_cli_main())
