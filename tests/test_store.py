from __future__ import annotations

from pathlib import Path

from gitpersona.store import (
    IdentityRecord,
    IdentityStore,
    find_record,
    find_record_by_email,
    parse_record_line,
)


def test_load_missing_file_returns_empty(store_path: Path) -> None:
    store = IdentityStore(store_path)

    assert store.exists() is False
    assert store.load() == []


def test_load_preserves_file_order(two_identity_store: IdentityStore) -> None:
    records = two_identity_store.load()

    assert [record.ordinal for record in records] == ["1", "2"]
    assert records[1] == IdentityRecord("2", "Alice Home", "alice@home.org", "Personal")


def test_load_skips_malformed_lines(store_path: Path) -> None:
    store_path.parent.mkdir(parents=True, exist_ok=True)
    store_path.write_text(
        "1:Alice Work:alice@work.com:Work\n"
        "garbage line\n"
        "\n"
        "2:only:three\n"
        "3:Alice Home:alice@home.org:Personal\n",
        encoding="utf-8",
    )

    records = IdentityStore(store_path).load()

    assert [record.ordinal for record in records] == ["1", "3"]


def test_ordinal_taken_verbatim_from_file(store_path: Path) -> None:
    store_path.parent.mkdir(parents=True, exist_ok=True)
    store_path.write_text("7:A:a@b.co:First\n7:B:b@b.co:Second\n", encoding="utf-8")
    store = IdentityStore(store_path)

    assert [record.ordinal for record in store.load()] == ["7", "7"]
    found = store.find("7")
    assert found is not None
    assert found.label == "First"
    assert store.find("1") is None


def test_add_assigns_next_ordinal_and_appends_one_line(two_identity_store: IdentityStore) -> None:
    before = two_identity_store.path.read_text(encoding="utf-8").splitlines()

    record = two_identity_store.add(full_name="Alice C", email="alice@client.io", label="Client")

    after = two_identity_store.path.read_text(encoding="utf-8").splitlines()
    assert record.ordinal == "3"
    assert len(after) == len(before) + 1
    assert after[-1] == "3:Alice C:alice@client.io:Client"


def test_append_creates_file(store_path: Path) -> None:
    store = IdentityStore(store_path)

    store.add(full_name="Bob", email="bob@example.com", label="Main")

    assert store_path.read_text(encoding="utf-8") == "1:Bob:bob@example.com:Main\n"


def test_append_after_missing_trailing_newline(store_path: Path) -> None:
    store_path.parent.mkdir(parents=True, exist_ok=True)
    store_path.write_text("1:Bob:bob@example.com:Main", encoding="utf-8")
    store = IdentityStore(store_path)

    store.add(full_name="Bob W", email="bob@work.com", label="Work")

    assert store_path.read_text(encoding="utf-8").splitlines() == [
        "1:Bob:bob@example.com:Main",
        "2:Bob W:bob@work.com:Work",
    ]


def test_find_by_email_returns_first_match(two_identity_store: IdentityStore) -> None:
    record = two_identity_store.find_by_email("alice@home.org")

    assert record is not None
    assert record.label == "Personal"
    assert two_identity_store.find_by_email("nobody@example.com") is None
    assert two_identity_store.find_by_email("") is None


def test_parse_record_line_keeps_colons_in_label() -> None:
    record = parse_record_line("1:Alice:alice@work.com:Work: team A")

    assert record is not None
    assert record.label == "Work: team A"


def test_reset_removes_file(two_identity_store: IdentityStore) -> None:
    assert two_identity_store.reset() is True
    assert two_identity_store.exists() is False
    assert two_identity_store.reset() is False


def test_undecodable_line_does_not_hide_other_records(store_path: Path) -> None:
    store_path.parent.mkdir(parents=True, exist_ok=True)
    store_path.write_bytes(
        b"1:Alice Work:alice@work.com:Work\n2:Jos\xe9:jose@home.org:Personal\n"
    )
    store = IdentityStore(store_path)

    records = store.load()

    assert [record.ordinal for record in records] == ["1", "2"]
    assert records[0].full_name == "Alice Work"
    assert records[1].email == "jose@home.org"
    assert records[1].full_name == "Jos\ufffd"
    assert store.next_ordinal() == "3"


def test_add_after_undecodable_line_keeps_ordinals_unique(store_path: Path) -> None:
    store_path.parent.mkdir(parents=True, exist_ok=True)
    store_path.write_bytes(b"1:Jos\xe9:jose@home.org:Personal\n")

    record = IdentityStore(store_path).add(full_name="Bob", email="bob@example.com", label="Main")

    assert record.ordinal == "2"


def test_find_helpers_return_first_match() -> None:
    records = [
        IdentityRecord("1", "A", "same@example.com", "First"),
        IdentityRecord("1", "B", "same@example.com", "Second"),
    ]

    assert find_record(records, " 1 ").label == "First"
    assert find_record(records, "01") is None
    assert find_record_by_email(records, "same@example.com").label == "First"
    assert find_record_by_email(records, "  ") is None
