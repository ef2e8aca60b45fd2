"""
Canonical byte encoding for ledger hashing.

Two ledger states holding the same entries must hash to the same root no
matter how they were built, so everything that reaches `sha256_hex` goes
through `canonical_json_bytes` first.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


CANONICAL_ENCODING_VERSION = 1

_DOMAIN_PREFIX = b"lockwrap:"


def _check_str(s: str) -> None:
    # Lone surrogates have no UTF-8 encoding.
    if any(0xD800 <= ord(ch) <= 0xDFFF for ch in s):
        raise TypeError("surrogate code points cannot be canonically encoded")


def _check_value(value: Any) -> None:
    """Reject anything without a single unambiguous JSON form."""
    if isinstance(value, float):
        raise TypeError("floats cannot be canonically encoded; use integer amounts")
    if isinstance(value, str):
        _check_str(value)
    elif isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise TypeError(f"mapping keys must be str, got {type(key).__name__}")
            _check_str(key)
            _check_value(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _check_value(item)


def canonical_json_bytes(value: Any) -> bytes:
    """UTF-8 JSON with sorted keys, no whitespace, no NaN and no floats."""
    _check_value(value)
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """`lockwrap:<label>:v<version>` followed by a NUL terminator."""
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if not label.isascii() or "\x00" in label:
        raise ValueError(f"label must be ASCII without NUL: {label!r}")
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        raise ValueError(f"version must be a positive int: {version!r}")
    return _DOMAIN_PREFIX + f"{label}:v{version}".encode("ascii") + b"\x00"
