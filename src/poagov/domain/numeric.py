"""Hex / ABI numeric conversions shared by the RPC adapter and the decoders."""

from __future__ import annotations

import re
from datetime import datetime, timezone

from .errors import DecodeError, MalformedHex

U64_MAX = (1 << 64) - 1
_HEX_DIGITS = re.compile(r"[0-9a-fA-F]+")


def _strip_0x(s: str) -> str:
    return s[2:] if s[:2].lower() == "0x" else s


def hex_to_u64(s: str) -> int:
    """Parse an optionally 0x-prefixed hex quantity into an unsigned 64-bit int."""
    if not isinstance(s, str):
        raise MalformedHex(f"expected a hex string, got {s!r}")
    h = _strip_0x(s.strip())
    if not _HEX_DIGITS.fullmatch(h):
        raise MalformedHex(f"not a hex quantity: {s!r}")
    n = int(h, 16)
    if n > U64_MAX:
        raise MalformedHex(f"hex quantity does not fit in 64 bits: {s!r}")
    return n


def hex_to_bytes(s: str) -> bytes:
    """Decode 0x-prefixed hex data (eth_call results, topics)."""
    if not isinstance(s, str):
        raise MalformedHex(f"expected hex data, got {s!r}")
    h = _strip_0x(s.strip())
    try:
        return bytes.fromhex(h)
    except ValueError:
        raise MalformedHex(f"not hex data: {s[:80]!r}") from None


def low_u64(n: int) -> int:
    """Low 64 bits of an integer; negative ints yield their two's-complement bits."""
    return n & U64_MAX


def u256_to_timestamp(n: int) -> datetime:
    """Unix seconds held in a uint256 -> UTC datetime (only the low 64 bits are used)."""
    secs = low_u64(n)
    try:
        return datetime.fromtimestamp(secs, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        raise DecodeError(f"timestamp out of range: {secs}") from None


def reinterpret_signed_vote_progress(raw: int, total_voters: int) -> int:
    """
    Some contracts report the vote progress as a uint although it goes negative
    when votes against outnumber votes for. A low-64-bit value above the number
    of voters is read as a two's-complement negative.
    """
    v = low_u64(raw)
    if v <= total_voters:
        return v
    return v - (1 << 64)
