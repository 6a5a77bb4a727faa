"""
Deterministic canonical encoding primitives.

These helpers are intended for hashing/signing boundaries: account identifiers,
uint256 amounts and nonces, canonical JSON for snapshots, and domain separation
prefixes for commitments.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any

from eth_utils import to_checksum_address


UINT256_MAX = (1 << 256) - 1

# Address = str  # 20-byte account identifier, 0x-prefixed, EIP-55 checksummed
ZERO_ADDRESS = "0x" + "00" * 20

_HEX_CHARS_RE = re.compile(r"^[0-9a-fA-F]+$")


def canonical_address(value: Any, *, name: str = "account") -> str:
    """
    Canonicalize a 20-byte address to its EIP-55 checksum form.

    Accepts 0x-prefixed hex (any case) or raw 20 bytes. Mixed-case input is not
    checksum-validated; it is normalized like any other hex string.
    """
    if isinstance(value, (bytes, bytearray)):
        raw = bytes(value)
        if len(raw) != 20:
            raise ValueError(f"{name} must be 20 bytes")
        return to_checksum_address(raw)
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str or bytes")
    s = value.strip()
    if not s.lower().startswith("0x"):
        raise ValueError(f"{name} must be a 0x-prefixed 20-byte hex string")
    body = s[2:]
    if len(body) != 40 or not _HEX_CHARS_RE.fullmatch(body):
        raise ValueError(f"{name} must be a 0x-prefixed 20-byte hex string")
    return to_checksum_address("0x" + body.lower())


def is_zero_address(value: str) -> bool:
    # All-digit hex has no checksum casing.
    return canonical_address(value) == ZERO_ADDRESS


def require_uint256(value: Any, *, name: str) -> int:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value < 0 or value > UINT256_MAX:
        raise ValueError(f"{name} must fit in uint256: {value!r}")
    return int(value)


def _reject_floats(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical encoding")
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError("dict keys must be str for canonical encoding")
            _reject_floats(v)
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _reject_floats(item)


def canonical_json_bytes(value: Any) -> bytes:
    """
    Canonical JSON encoding for hashing.

    Rules:
    - UTF-8
    - sort_keys=True
    - separators=(',', ':') (no whitespace)
    - allow_nan=False
    - floats rejected (to avoid representation ambiguity)
    """
    _reject_floats(value)
    text = json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """
    Create a domain separation prefix.

    The output is ASCII-only and NUL-terminated to make concatenation unambiguous.
    """
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label:
        raise ValueError("label must not contain NUL")
    try:
        label_bytes = label.encode("ascii")
    except UnicodeEncodeError as exc:
        raise ValueError("label must be ASCII") from exc
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return b"mintgate:" + label_bytes + b":v" + str(version).encode("ascii") + b"\x00"


def hex_to_bytes(value: str, *, name: str) -> bytes:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a str")
    s = value.strip()
    if s.lower().startswith("0x"):
        s = s[2:]
    if not s:
        raise ValueError(f"{name} must be non-empty hex")
    if len(s) % 2 != 0:
        raise ValueError(f"{name} must have an even number of hex chars")
    if not _HEX_CHARS_RE.fullmatch(s):
        raise ValueError(f"{name} must be valid hex")
    return bytes.fromhex(s)
