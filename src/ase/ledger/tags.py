# src/ase/ledger/tags.py
from __future__ import annotations

"""32-byte tags.

Work types, burn purposes, ritual ids, gathering ids and community roles are
opaque 32-byte words. Inside the ledger they are stored as canonical
"0x" + 64 lowercase hex digit strings so they stay JSON-friendly and compare
by value.

Accepted inputs:
  - bytes / bytearray (<= 32 bytes), right-padded with zeros
  - "0x..." hex strings (<= 64 digits, even length), right-padded
  - any other text, UTF-8 encoded (<= 32 bytes), right-padded
  - None / "" -> the zero tag
"""

from typing import Any

from ase.runtime.errors import ApplyError

TAG_BYTES: int = 32
ZERO_TAG: str = "0x" + "00" * TAG_BYTES


def _invalid(value: Any, why: str) -> ApplyError:
    return ApplyError("invalid_payload", "InvalidTag", {"value": repr(value)[:80], "why": why})


def to_tag(value: Any) -> str:
    if value is None:
        return ZERO_TAG

    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            return ZERO_TAG
        if s[:2].lower() == "0x":
            digits = s[2:]
            if len(digits) % 2 != 0:
                raise _invalid(value, "odd_hex_length")
            try:
                raw = bytes.fromhex(digits)
            except ValueError:
                raise _invalid(value, "bad_hex") from None
        else:
            raw = s.encode("utf-8")
    else:
        raise _invalid(value, "unsupported_type")

    if len(raw) > TAG_BYTES:
        raise _invalid(value, "too_long")

    return "0x" + raw.ljust(TAG_BYTES, b"\x00").hex()


def is_zero_tag(tag: str) -> bool:
    return to_tag(tag) == ZERO_TAG


def tag_text(tag: str) -> str:
    """Best-effort display form: the UTF-8 text a tag was built from, else the hex."""
    t = to_tag(tag)
    raw = bytes.fromhex(t[2:]).rstrip(b"\x00")
    try:
        s = raw.decode("utf-8")
    except UnicodeDecodeError:
        return t
    return s if s.isprintable() else t


__all__ = ["TAG_BYTES", "ZERO_TAG", "to_tag", "is_zero_tag", "tag_text"]
