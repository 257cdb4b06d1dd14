from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from .errors import GitCommandError, MissingStoreError
from .git_config import GitConfig
from .collection import collect_identity
from .store import IdentityRecord, IdentityStore, find_record, find_record_by_email
from .terminal import Terminal

LOGGER = logging.getLogger(__name__)

ADD_CHOICES = {"a"}


class SelectorState(Enum):
    AWAITING_CHOICE = "awaiting_choice"
    APPLIED = "applied"
    DEFERRED = "deferred"
    ADDING = "adding"


@dataclass(frozen=True)
class SelectionResult:
    state: SelectorState
    record: IdentityRecord | None = None


def next_state(
    choice: str,
    records: Sequence[IdentityRecord],
) -> tuple[SelectorState, IdentityRecord | None]:
    value = choice.strip()
    if not value:
        return SelectorState.DEFERRED, None
    if value.lower() in ADD_CHOICES:
        return SelectorState.ADDING, None
    record = find_record(records, value)
    if record is not None:
        return SelectorState.APPLIED, record
    return SelectorState.AWAITING_CHOICE, None


def render_menu(
    records: Sequence[IdentityRecord],
    *,
    current_name: str,
    current_email: str,
) -> list[str]:
    match = find_record_by_email(records, current_email)
    current = f"{current_name or '(unset)'} <{current_email or '(unset)'}>"
    if match is not None:
        current = f"{current} [{match.label}]"
    lines = [
        "Commit identity for this repository",
        f"Current: {current}",
        "",
    ]
    lines.extend(f"  {record.ordinal}) {record.label} ({record.email})" for record in records)
    lines.append("  a) Add new identity")
    lines.append("  (Enter) Keep current")
    return lines


class IdentitySelector:
    def __init__(
        self,
        store: IdentityStore,
        git_config: GitConfig,
        terminal: Terminal,
        *,
        collect: Callable[[IdentityStore, Terminal], IdentityRecord] = collect_identity,
    ) -> None:
        self._store = store
        self._git = git_config
        self._terminal = terminal
        self._collect = collect

    def _prompt(self, records: Sequence[IdentityRecord]) -> str:
        current_name, current_email = self._git.current_identity()
        for line in render_menu(records, current_name=current_name, current_email=current_email):
            self._terminal.write(line)
        try:
            return self._terminal.ask("Choice: ")
        except EOFError:
            LOGGER.warning("Terminal closed at menu prompt", extra={"category": "selector"})
            return ""

    def run(self) -> SelectionResult:
        if not self._store.exists():
            raise MissingStoreError(self._store.path)

        while True:
            records = self._store.load()
            state, record = next_state(self._prompt(records), records)

            if state is SelectorState.DEFERRED:
                self._terminal.write("Keeping current identity.")
                LOGGER.info("Identity left unchanged", extra={"category": "selector"})
                return SelectionResult(state)

            if state is SelectorState.APPLIED and record is not None:
                try:
                    self._git.apply_identity(record.full_name, record.email)
                except GitCommandError as exc:
                    LOGGER.error(
                        "Failed to apply identity %s: %s",
                        record.ordinal,
                        exc,
                        extra={"category": "git"},
                    )
                    self._terminal.write(f"Failed to apply identity: {exc}")
                    self._terminal.write("Keeping current identity.")
                    return SelectionResult(SelectorState.DEFERRED)
                self._terminal.write(f"Committing as '{record.label}' ({record.full_name}).")
                LOGGER.info(
                    "Identity %s applied (%s)",
                    record.ordinal,
                    record.label,
                    extra={"category": "selector"},
                )
                return SelectionResult(state, record)

            if state is SelectorState.ADDING:
                try:
                    self._collect(self._store, self._terminal)
                except EOFError:
                    LOGGER.warning("Terminal closed while adding identity", extra={"category": "selector"})
                    self._terminal.write("Keeping current identity.")
                    return SelectionResult(SelectorState.DEFERRED)
                continue

            self._terminal.write("Invalid choice.")
