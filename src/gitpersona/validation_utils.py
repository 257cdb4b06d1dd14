from __future__ import annotations

import re

EMAIL_SHAPE_RE = re.compile(r"[^@\s]+@[^@\s]+\.[A-Za-z]{2,}")


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def is_valid_email(value: str | None) -> bool:
    if is_blank(value):
        return False
    return EMAIL_SHAPE_RE.fullmatch(value.strip()) is not None

