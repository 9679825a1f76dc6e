from __future__ import annotations

import random

import pytest

from netcmd.common import codec
from netcmd.common.errors import DecodeError


@pytest.mark.unit
@pytest.mark.parametrize(
    "text, expected",
    [
        ("A0 B1 C2", b"\xa0\xb1\xc2"),
        ("a0b1c2", b"\xa0\xb1\xc2"),
        ("  A0\tb1\nC2  ", b"\xa0\xb1\xc2"),
        ("a0:b1-c2,d3", b"\xa0\xb1\xc2\xd3"),
        ("00 FF", b"\x00\xff"),
    ],
)
def test_encode_accepts_separators_and_case(text: str, expected: bytes):
    assert codec.encode(text) == expected


@pytest.mark.unit
@pytest.mark.parametrize("text", ["", "   ", "\n\t"])
def test_encode_empty_is_empty_payload(text: str):
    assert codec.encode(text) == b""


@pytest.mark.unit
@pytest.mark.parametrize("text", ["A", "A0B", "a0 b1 c"])
def test_encode_rejects_odd_digit_count(text: str):
    with pytest.raises(DecodeError, match="odd"):
        codec.encode(text)


@pytest.mark.unit
@pytest.mark.parametrize("text", ["zz", "A0 G1", "0x10", "a0;b1"])
def test_encode_rejects_non_hex(text: str):
    with pytest.raises(DecodeError, match="invalid hex character"):
        codec.encode(text)


@pytest.mark.unit
def test_decode_renders_lowercase_pairs():
    assert codec.decode(b"\xa0\xb1\xc2") == "a0 b1 c2"
    assert codec.decode(b"\x00\x0f") == "00 0f"
    assert codec.decode(b"") == ""


@pytest.mark.unit
def test_normalize_regroups_user_text():
    assert codec.normalize("A0B1 c2") == "a0 b1 c2"


@pytest.mark.unit
def test_random_payloads_survive_display_and_back():
    rng = random.Random(1234)
    for _ in range(50):
        payload = bytes(rng.randrange(256) for _ in range(rng.randrange(0, 64)))
        assert codec.encode(codec.decode(payload)) == payload
