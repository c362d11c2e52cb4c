from __future__ import annotations

import hashlib

import pytest
from eth_utils import keccak

from tron_wallet_sdk.exceptions import InvalidChainIdError, MessageEncodingError
from tron_wallet_sdk.models import MessageEncoding
from tron_wallet_sdk.signing import (
    bind_chain_id,
    decode_chain_id,
    double_sha256,
    message_digest_v1,
    message_digest_v2,
    message_payload_v2,
    signed_message_prefix,
    transaction_digest,
)

RAW_TX = bytes.fromhex(
    "0a02d1a72208f1b3c8e9a4d5e6f74088e6c3a0e8305a65080112610a2d747970652e676f6f676c65617069"
)


def _sha256d(b: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(b).digest()).digest()


def test_double_sha256_matches_hashlib() -> None:
    assert double_sha256(b"") == _sha256d(b"")
    assert double_sha256(RAW_TX) == _sha256d(RAW_TX)
    assert len(double_sha256(RAW_TX)) == 32


def test_transaction_digest_without_chain_id() -> None:
    assert transaction_digest(RAW_TX) == _sha256d(RAW_TX)
    assert transaction_digest(RAW_TX, "") == _sha256d(RAW_TX)


def test_transaction_digest_with_chain_id_manual_equivalence() -> None:
    chain_id = "41e9d79cc47518930bc322d9bf7cddd260a0260a8d"
    manual = _sha256d(_sha256d(RAW_TX) + bytes.fromhex(chain_id))
    assert transaction_digest(RAW_TX, chain_id) == manual
    assert transaction_digest(RAW_TX, "0x" + chain_id) == manual


def test_chain_binding_changes_digest() -> None:
    assert transaction_digest(RAW_TX, "") != transaction_digest(RAW_TX, "01")


def test_digest_is_deterministic() -> None:
    assert transaction_digest(RAW_TX, "01") == transaction_digest(RAW_TX, "01")
    assert message_digest_v1("hello") == message_digest_v1("hello")
    assert message_digest_v2("1,2,3", MessageEncoding.BYTE_ARRAY_CSV) == message_digest_v2(
        "1,2,3", MessageEncoding.BYTE_ARRAY_CSV
    )


def test_invalid_chain_id_is_ignored_by_default() -> None:
    assert decode_chain_id("zz") is None
    assert decode_chain_id("abc") is None
    assert transaction_digest(RAW_TX, "not-hex") == _sha256d(RAW_TX)
    base = _sha256d(RAW_TX)
    assert bind_chain_id(base, "xyz") == base


def test_invalid_chain_id_raises_in_strict_mode() -> None:
    with pytest.raises(InvalidChainIdError):
        transaction_digest(RAW_TX, "not-hex", strict=True)
    # valid ids are unaffected by strict mode
    assert transaction_digest(RAW_TX, "01", strict=True) == transaction_digest(RAW_TX, "01")


def test_signed_message_prefix() -> None:
    assert signed_message_prefix(32) == b"\x19TRON Signed Message:\n32"
    assert signed_message_prefix(5, "Nile") == b"\x19Nile Signed Message:\n5"
    with pytest.raises(MessageEncodingError):
        signed_message_prefix(1, "Trön")


def test_message_digest_v1_manual_equivalence() -> None:
    prefix = b"\x19TRON Signed Message:\n32"
    assert message_digest_v1("hello") == keccak(prefix + b"hello")
    assert message_digest_v1("你好") == keccak(prefix + "你好".encode("utf-8"))


def test_message_digest_v1_prefix_is_fixed() -> None:
    prefix = b"\x19TRON Signed Message:\n32"
    short, long_ = "a", "a much longer message than thirty two bytes in total"
    assert message_digest_v1(short) == keccak(prefix + short.encode())
    assert message_digest_v1(long_) == keccak(prefix + long_.encode())


def test_message_digest_v2_utf8_announces_true_length() -> None:
    assert message_digest_v2("hi") == keccak(b"\x19TRON Signed Message:\n2hi")
    assert message_digest_v2("hi", MessageEncoding.UTF8_STRING) == message_digest_v2("hi")


def test_message_digest_v2_differs_from_v1() -> None:
    assert message_digest_v2("hello") != message_digest_v1("hello")


def test_message_payload_v2_hex() -> None:
    assert message_payload_v2("deadbeef", MessageEncoding.HEX_STRING) == b"\xde\xad\xbe\xef"
    assert message_payload_v2("0xdeadbeef", MessageEncoding.HEX_STRING) == b"\xde\xad\xbe\xef"
    assert message_digest_v2("0xdeadbeef", MessageEncoding.HEX_STRING) == keccak(
        b"\x19TRON Signed Message:\n4\xde\xad\xbe\xef"
    )
    with pytest.raises(MessageEncodingError):
        message_payload_v2("0xnothex", MessageEncoding.HEX_STRING)


def test_message_payload_v2_csv_drops_bad_tokens() -> None:
    assert message_payload_v2("1,2,300,x", MessageEncoding.BYTE_ARRAY_CSV) == b"\x01\x02"
    assert message_digest_v2("1,2,300,x", MessageEncoding.BYTE_ARRAY_CSV) == keccak(
        b"\x19TRON Signed Message:\n2\x01\x02"
    )


def test_message_payload_v2_accepts_string_tag() -> None:
    assert message_payload_v2("0,255", "byte_array_csv") == b"\x00\xff"  # type: ignore[arg-type]


def test_message_digest_v2_custom_chain_name() -> None:
    assert message_digest_v2("hi", chain_name="Nile") == keccak(b"\x19Nile Signed Message:\n2hi")
