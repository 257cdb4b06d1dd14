from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from .io_utils import append_line_durable

LOGGER = logging.getLogger(__name__)

FIELD_SEPARATOR = ":"
FIELD_COUNT = 4
STORE_ENCODING = "utf-8"


@dataclass(frozen=True)
class IdentityRecord:
    ordinal: str
    full_name: str
    email: str
    label: str

    def to_line(self) -> str:
        return FIELD_SEPARATOR.join((self.ordinal, self.full_name, self.email, self.label))


def parse_record_line(line: str) -> IdentityRecord | None:
    """Parse one ``ordinal:fullName:email:label`` line.

    Returns ``None`` for lines with fewer than four fields. Colons are not
    escaped; anything past the third separator is kept as the label.
    """
    text = line.rstrip("\r\n")
    parts = text.split(FIELD_SEPARATOR, FIELD_COUNT - 1)
    if len(parts) < FIELD_COUNT:
        return None
    ordinal, full_name, email, label = parts
    return IdentityRecord(
        ordinal=ordinal.strip(),
        full_name=full_name,
        email=email,
        label=label,
    )


def find_record(records: Iterable[IdentityRecord], ordinal: str) -> IdentityRecord | None:
    """First record whose ordinal equals ``ordinal`` exactly."""
    wanted = ordinal.strip()
    for record in records:
        if record.ordinal == wanted:
            return record
    return None


def find_record_by_email(records: Iterable[IdentityRecord], email: str) -> IdentityRecord | None:
    wanted = email.strip()
    if not wanted:
        return None
    for record in records:
        if record.email == wanted:
            return record
    return None


class IdentityStore:
    """Per-user list of commit identities backed by a plain text file.

    Records keep file order. Lookups scan top to bottom and return the first
    match, so a hand-edited file with repeated ordinals resolves to the
    earliest line.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> list[IdentityRecord]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return []
        records: list[IdentityRecord] = []
        skipped = 0
        undecodable = 0
        # decoded per line so one bad byte only affects its own record
        for raw_line in raw.splitlines():
            try:
                line = raw_line.decode(STORE_ENCODING)
            except UnicodeDecodeError:
                undecodable += 1
                line = raw_line.decode(STORE_ENCODING, errors="replace")
            record = parse_record_line(line)
            if record is None:
                if line.strip():
                    skipped += 1
                continue
            records.append(record)
        if undecodable:
            LOGGER.warning(
                "%s identity line(s) are not valid %s; invalid bytes replaced",
                undecodable,
                STORE_ENCODING,
                extra={"category": "store"},
            )
        if skipped:
            LOGGER.debug(
                "Skipped %s malformed identity line(s)",
                skipped,
                extra={"category": "store"},
            )
        return records

    def next_ordinal(self) -> str:
        return str(len(self.load()) + 1)

    def append(self, record: IdentityRecord) -> None:
        append_line_durable(self._path, record.to_line())
        LOGGER.info(
            "Identity %s appended (%s)",
            record.ordinal,
            record.label,
            extra={"category": "store"},
        )

    def add(self, full_name: str, email: str, label: str) -> IdentityRecord:
        record = IdentityRecord(
            ordinal=self.next_ordinal(),
            full_name=full_name.strip(),
            email=email.strip(),
            label=label.strip(),
        )
        self.append(record)
        return record

    def find(self, ordinal: str) -> IdentityRecord | None:
        return find_record(self.load(), ordinal)

    def find_by_email(self, email: str) -> IdentityRecord | None:
        return find_record_by_email(self.load(), email)

    def reset(self) -> bool:
        if not self.exists():
            return False
        self._path.unlink()
        LOGGER.info("Identity store removed for reconfiguration", extra={"category": "store"})
        return True
