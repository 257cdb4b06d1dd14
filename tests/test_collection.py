from __future__ import annotations

from pathlib import Path

import pytest

from conftest import make_terminal
from gitpersona.collection import collect_identities, collect_identity
from gitpersona.errors import PromptClosedError
from gitpersona.store import IdentityStore


def test_collect_identity_reprompts_until_fields_valid(store_path: Path) -> None:
    store = IdentityStore(store_path)
    terminal, output = make_terminal(
        "",
        "   ",
        "Work",
        "",
        "Alice Work",
        "",
        "alice@work",
        "alice@work.c",
        "alice@work.com",
    )

    record = collect_identity(store, terminal)

    assert record.ordinal == "1"
    assert (record.label, record.full_name, record.email) == ("Work", "Alice Work", "alice@work.com")
    text = output.getvalue()
    assert text.count("Label is required.") == 2
    assert text.count("Full name is required.") == 1
    assert text.count("Email is required.") == 1
    assert text.count("Invalid email") == 2
    assert store_path.read_text(encoding="utf-8") == "1:Alice Work:alice@work.com:Work\n"


def test_collect_identities_adds_another_on_a(store_path: Path) -> None:
    store = IdentityStore(store_path)
    terminal, _output = make_terminal(
        "Work", "Alice Work", "alice@work.com", "A",
        "Personal", "Alice Home", "alice@home.org", "n",
    )

    added = collect_identities(store, terminal)

    assert [record.ordinal for record in added] == ["1", "2"]
    assert store_path.read_text(encoding="utf-8").splitlines() == [
        "1:Alice Work:alice@work.com:Work",
        "2:Alice Home:alice@home.org:Personal",
    ]


def test_collect_identities_stops_on_enter(store_path: Path) -> None:
    terminal, _output = make_terminal("Work", "Alice", "alice@work.com", "")

    added = collect_identities(IdentityStore(store_path), terminal)

    assert len(added) == 1


def test_collect_identity_raises_when_terminal_closes(store_path: Path) -> None:
    store = IdentityStore(store_path)
    terminal, _output = make_terminal("Work", "Alice")

    with pytest.raises(PromptClosedError):
        collect_identity(store, terminal)

    assert store.exists() is False
