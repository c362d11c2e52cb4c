from __future__ import annotations

import re
from typing import Any

import base58
from eth_utils import keccak, to_bytes
from hexbytes import HexBytes

from .exceptions import SigningError

TRON_ADDRESS_PREFIX = b"\x41"

_UINT8_TOKEN = re.compile(r"\+?[0-9]+")


def strip_0x(s: str) -> str:
    s = s.strip()
    if s.startswith("0x") or s.startswith("0X"):
        return s[2:]
    return s


def parse_hex(value: str) -> bytes:
    try:
        return bytes.fromhex(strip_0x(value))
    except ValueError as e:
        raise SigningError(f"invalid hex string: {value!r}") from e


def try_parse_hex(value: str) -> bytes | None:
    try:
        return parse_hex(value)
    except SigningError:
        return None


def parse_bytes(value: Any) -> bytes:
    if value is None:
        return b""
    if isinstance(value, HexBytes):
        return bytes(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return parse_hex(value)
    raise SigningError(f"unsupported bytes type: {type(value)}")


def bytes_to_hex(b: bytes) -> str:
    return bytes(b).hex()


def bytes_to_0x_hex(b: bytes) -> str:
    return "0x" + bytes(b).hex()


def parse_byte_csv(text: str) -> bytes:
    """Parse ``"1,2,3"`` into bytes, silently dropping tokens that are not 0..255."""
    out = bytearray()
    for token in text.split(","):
        if not _UINT8_TOKEN.fullmatch(token):
            continue
        digits = token.lstrip("+").lstrip("0") or "0"
        if len(digits) > 3:
            continue
        value = int(digits, 10)
        if value > 0xFF:
            continue
        out.append(value)
    return bytes(out)


def keccak256(*chunks: bytes) -> bytes:
    return keccak(b"".join(chunks))


def eth_to_tron_address(eth_address: str) -> str:
    raw = to_bytes(hexstr=eth_address)
    if len(raw) != 20:
        raise SigningError("address must be 20 bytes")
    return base58.b58encode_check(TRON_ADDRESS_PREFIX + raw).decode("ascii")


def public_key_to_tron_address(public_key: bytes) -> str:
    """``public_key`` is the 64-byte uncompressed key without the 0x04 marker."""
    if len(public_key) != 64:
        raise SigningError(f"expected 64-byte public key, got {len(public_key)}")
    return base58.b58encode_check(TRON_ADDRESS_PREFIX + keccak(public_key)[12:]).decode("ascii")
