"""
Canonical encoding primitives for signed vault messages.

Signed deposit authorizations are hashed over these encodings, so they must be
byte-for-byte stable across platforms and Python versions.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any


_HEX_RE = re.compile(r"^[0-9a-f]+$")


def _reject_non_canonical(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical encoding")
    if isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError("dict keys must be str for canonical encoding")
            _reject_non_canonical(v)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _reject_non_canonical(item)


def canonical_json_bytes(value: Any) -> bytes:
    """
    UTF-8 JSON with sorted keys, no whitespace, no NaN and no floats.
    """
    _reject_non_canonical(value)
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """
    ASCII, NUL-terminated domain separation prefix: `vault:<label>:v<version>\\0`.
    """
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if "\x00" in label or not label.isascii():
        raise ValueError("label must be ASCII without NUL")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    return f"vault:{label}:v{version}".encode("ascii") + b"\x00"


def signing_digest(label: str, payload: Any, *, version: int = 1) -> bytes:
    """sha256(domain_sep(label) || canonical_json(payload))."""
    return hashlib.sha256(domain_sep_bytes(label, version=version) + canonical_json_bytes(payload)).digest()


def canonical_hex_fixed_allow_0x(hex_str: str, *, nbytes: int, name: str) -> str:
    """Lowercase, 0x-prefixed form of a fixed-size hex string (prefix optional on input)."""
    if not isinstance(hex_str, str):
        raise TypeError(f"{name} must be a str")
    s = hex_str.strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    if len(s) != 2 * nbytes or not _HEX_RE.fullmatch(s):
        raise ValueError(f"{name} must be {nbytes} bytes of hex")
    return "0x" + s


def hex_to_bytes_fixed(hex_str: str, *, nbytes: int, name: str) -> bytes:
    return bytes.fromhex(canonical_hex_fixed_allow_0x(hex_str, nbytes=nbytes, name=name)[2:])
