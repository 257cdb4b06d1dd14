from __future__ import annotations

import logging

from .store import IdentityRecord, IdentityStore
from .terminal import Terminal
from .validation_utils import is_blank, is_valid_email

LOGGER = logging.getLogger(__name__)

ADD_ANOTHER_CHOICES = {"a"}


def _ask_required(terminal: Terminal, message: str, error: str) -> str:
    while True:
        value = terminal.ask(message)
        if not is_blank(value):
            return value.strip()
        terminal.write(error)


def _ask_email(terminal: Terminal) -> str:
    while True:
        value = terminal.ask("Email: ").strip()
        if not value:
            terminal.write("Email is required.")
            continue
        if not is_valid_email(value):
            terminal.write("Invalid email (expected user@domain.tld).")
            continue
        return value


def collect_identity(store: IdentityStore, terminal: Terminal) -> IdentityRecord:
    terminal.write("New identity")
    label = _ask_required(terminal, "Label (e.g. Work, Personal): ", "Label is required.")
    full_name = _ask_required(terminal, "Full name: ", "Full name is required.")
    email = _ask_email(terminal)
    record = store.add(full_name=full_name, email=email, label=label)
    terminal.write(f"Saved identity {record.ordinal}) {record.label} ({record.email})")
    return record


def collect_identities(store: IdentityStore, terminal: Terminal) -> list[IdentityRecord]:
    added: list[IdentityRecord] = []
    while True:
        added.append(collect_identity(store, terminal))
        answer = terminal.ask("Add another identity? (a = yes, Enter = done): ").strip().lower()
        if answer not in ADD_ANOTHER_CHOICES:
            break
    LOGGER.info("Collected %s identities", len(added), extra={"category": "store"})
    return added
