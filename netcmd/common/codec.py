"""
Hex text <-> payload bytes.

Users author payloads as hex, e.g. ``"A0 B1 C2"`` or ``"a0:b1:c2"``. Whitespace
and the separators ``: - ,`` are ignored, digits are case-insensitive and the
digit count must be even. Inbound datagrams are rendered back as lowercase
pairs separated by single spaces.
"""

from __future__ import annotations

import re

from netcmd.common.errors import DecodeError

_SEPARATORS = re.compile(r"[\s:,\-]+")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def encode(hex_text: str) -> bytes:
    """Decode user hex text into the raw bytes that go on the wire."""
    digits = _SEPARATORS.sub("", hex_text or "")
    for pos, ch in enumerate(digits):
        if ch not in _HEX_DIGITS:
            raise DecodeError(f"invalid hex character {ch!r} at digit {pos}")
    if len(digits) % 2:
        raise DecodeError(f"odd number of hex digits ({len(digits)})")
    return bytes.fromhex(digits)


def decode(payload: bytes) -> str:
    """Render bytes as ``"a0 b1 c2"`` for display."""
    return bytes(payload).hex(" ")


def normalize(hex_text: str) -> str:
    return decode(encode(hex_text))
