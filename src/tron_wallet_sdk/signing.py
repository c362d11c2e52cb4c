from __future__ import annotations

import hashlib
import logging
from typing import Callable

from eth_keys import keys
from eth_keys.exceptions import BadSignature, ValidationError

from .encoding import (
    keccak256,
    parse_byte_csv,
    public_key_to_tron_address,
    try_parse_hex,
)
from .exceptions import InvalidChainIdError, MessageEncodingError, SigningFailedError
from .models import DEFAULT_CHAIN_NAME, SIGNATURE_LENGTH, MessageEncoding

logger = logging.getLogger(__name__)

DIGEST_LENGTH = 32
# v1 always announces 32 bytes, whatever the payload length.
LEGACY_MESSAGE_LENGTH = 32
RECOVERY_ID_OFFSET = 27


def double_sha256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def decode_chain_id(chain_id: str, *, strict: bool = False) -> bytes | None:
    """Decode a hex chain id, or return None when it should be treated as absent."""
    if not chain_id:
        return None
    decoded = try_parse_hex(chain_id)
    if decoded is None:
        if strict:
            raise InvalidChainIdError(chain_id)
        logger.warning("ignoring undecodable chain id %r", chain_id)
        return None
    return decoded


def bind_chain_id(digest: bytes, chain_id: str, *, strict: bool = False) -> bytes:
    chain_bytes = decode_chain_id(chain_id, strict=strict)
    if chain_bytes is None:
        return digest
    return double_sha256(digest + chain_bytes)


def transaction_digest(raw: bytes, chain_id: str = "", *, strict: bool = False) -> bytes:
    return bind_chain_id(double_sha256(raw), chain_id, strict=strict)


def signed_message_prefix(length: int, chain_name: str = DEFAULT_CHAIN_NAME) -> bytes:
    prefix = f"\x19{chain_name} Signed Message:\n{length}"
    try:
        return prefix.encode("ascii")
    except UnicodeEncodeError as e:
        raise MessageEncodingError(f"message prefix is not ASCII: {prefix!r}") from e


def message_digest_v1(text: str, chain_name: str = DEFAULT_CHAIN_NAME) -> bytes:
    person_data = bytes.fromhex(text.encode("utf-8").hex())
    prefix = signed_message_prefix(LEGACY_MESSAGE_LENGTH, chain_name)
    return keccak256(prefix, person_data)


def _utf8_payload(text: str) -> bytes:
    return text.encode("utf-8")


def _hex_payload(text: str) -> bytes:
    decoded = try_parse_hex(text)
    if decoded is None:
        raise MessageEncodingError("message is not valid hex")
    return decoded


_V2_PAYLOADS: dict[MessageEncoding, Callable[[str], bytes]] = {
    MessageEncoding.UTF8_STRING: _utf8_payload,
    MessageEncoding.HEX_STRING: _hex_payload,
    MessageEncoding.BYTE_ARRAY_CSV: parse_byte_csv,
}


def message_payload_v2(text: str, encoding: MessageEncoding) -> bytes:
    return _V2_PAYLOADS[MessageEncoding(encoding)](text)


def message_digest_v2(
    text: str,
    encoding: MessageEncoding = MessageEncoding.UTF8_STRING,
    chain_name: str = DEFAULT_CHAIN_NAME,
) -> bytes:
    payload = message_payload_v2(text, encoding)
    prefix = signed_message_prefix(len(payload), chain_name)
    return keccak256(prefix, payload)


def normalize_signature(signature: bytes) -> bytes:
    """Map an Ethereum-style ``v`` of 27/28 onto the 0/1 recovery id."""
    if len(signature) != SIGNATURE_LENGTH:
        raise SigningFailedError(
            f"signature must be {SIGNATURE_LENGTH} bytes, got {len(signature)}"
        )
    sig = bytearray(signature)
    if sig[64] >= RECOVERY_ID_OFFSET:
        sig[64] -= RECOVERY_ID_OFFSET
    return bytes(sig)


def recover_address(digest: bytes, signature: bytes) -> str:
    if len(digest) != DIGEST_LENGTH:
        raise SigningFailedError(f"digest must be {DIGEST_LENGTH} bytes")
    try:
        sig = keys.Signature(normalize_signature(signature))
        public_key = sig.recover_public_key_from_msg_hash(digest)
    except (BadSignature, ValidationError) as e:
        raise SigningFailedError("cannot recover signer from signature") from e
    return public_key_to_tron_address(public_key.to_bytes())
