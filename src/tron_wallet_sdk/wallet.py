from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Optional

from pydantic import ValidationError

from .encoding import bytes_to_0x_hex, bytes_to_hex
from .exceptions import (
    AccountNotFoundError,
    MalformedTransactionError,
    SigningError,
    SigningFailedError,
    WalletCreationError,
)
from .models import (
    CreateAccountResult,
    DerivationKind,
    MessageEncoding,
    SignType,
    Transaction,
    WalletSettings,
)
from .secret import scoped_secret, scrub
from .signer import Account, KeyStore
from .signing import (
    bind_chain_id,
    double_sha256,
    message_digest_v1,
    message_digest_v2,
    normalize_signature,
    transaction_digest,
)

logger = logging.getLogger(__name__)


def resolve_account(accounts: Sequence[Account], address: str) -> Account:
    for account in accounts:
        if account.address == address:
            return account
    raise AccountNotFoundError(address)


class WalletCore:
    """Signs transactions and messages with accounts held by a ``KeyStore``."""

    def __init__(
        self,
        key_store: KeyStore,
        *,
        settings: WalletSettings | Mapping[str, Any] | None = None,
    ) -> None:
        self._key_store = key_store
        cfg = (
            settings
            if isinstance(settings, WalletSettings)
            else WalletSettings.model_validate(settings or {})
        )
        self._settings = cfg.normalized()

    @property
    def settings(self) -> WalletSettings:
        return self._settings

    @property
    def key_store(self) -> KeyStore:
        return self._key_store

    def _sign_digest(self, digest: bytes, account: Account, password: str) -> bytes:
        with scoped_secret(password) as secret:
            try:
                raw = self._key_store.sign_hash(digest, account, secret)
            except SigningFailedError:
                raise
            except Exception as e:  # noqa: BLE001
                raise SigningFailedError(f"key store failed to sign for {account.address}") from e
        return normalize_signature(raw)

    # transactions

    def sign_raw_transaction(
        self,
        raw: bytes,
        password: str,
        address: str,
        chain_id: str = "",
    ) -> bytes:
        account = resolve_account(self._key_store.accounts, address)
        digest = transaction_digest(raw, chain_id, strict=self._settings.strict_chain_id)
        logger.debug("signing raw transaction for %s", address)
        return self._sign_digest(digest, account, password)

    def sign_transaction(
        self,
        transaction: Transaction | Mapping[str, Any],
        password: str,
        address: str,
        chain_id: str = "",
    ) -> Transaction:
        """Sign a structured transaction and append the signature to it.

        Only the first contract is signed; the call returns right after it.
        """
        account = resolve_account(self._key_store.accounts, address)
        try:
            tx = (
                transaction
                if isinstance(transaction, Transaction)
                else Transaction.model_validate(transaction)
            )
        except ValidationError as e:
            raise MalformedTransactionError("cannot parse transaction") from e

        if not tx.raw_data_hex:
            raise MalformedTransactionError("transaction has no raw data")
        if not tx.raw_data.contract:
            raise MalformedTransactionError("transaction has no contracts")

        base = double_sha256(tx.raw_data_hex)
        digest = bind_chain_id(base, chain_id, strict=self._settings.strict_chain_id)
        logger.debug(
            "signing transaction %s (%d contracts) for %s",
            tx.tx_id or "<no id>",
            len(tx.raw_data.contract),
            address,
        )
        tx.signature.append(self._sign_digest(digest, account, password))
        return tx

    # messages

    def sign_message(self, message: str, password: str, address: str) -> str:
        return self.sign_typed_string(message, password, address, SignType.MESSAGE)

    def sign_message_v2(
        self,
        message: str,
        password: str,
        address: str,
        encoding: MessageEncoding = MessageEncoding.UTF8_STRING,
    ) -> str:
        return self.sign_typed_string(message, password, address, SignType.MESSAGE_V2, encoding)

    def sign_typed_string(
        self,
        message: str,
        password: str,
        address: str,
        sign_type: SignType = SignType.MESSAGE,
        encoding: MessageEncoding = MessageEncoding.UTF8_STRING,
    ) -> str:
        """Return the hex signature, or an empty string if anything fails."""
        chain_name = self._settings.chain_name
        try:
            sign_type = SignType(sign_type)
            account = resolve_account(self._key_store.accounts, address)
            if sign_type is SignType.MESSAGE_V2:
                digest = message_digest_v2(message, encoding, chain_name)
            else:
                digest = message_digest_v1(message, chain_name)
            signature = self._sign_digest(digest, account, password)
        except ValueError as e:
            logger.warning("message signing failed for %s: %s", address, type(e).__name__)
            return ""

        if sign_type is SignType.MESSAGE_V2 or self._settings.message_v1_0x_prefix:
            return bytes_to_0x_hex(signature)
        return bytes_to_hex(signature)

    # accounts

    def create_account(
        self,
        password: str,
        derivation: DerivationKind = DerivationKind.HD_WALLET,
        completion: Optional[Callable[[CreateAccountResult], None]] = None,
    ) -> Optional[Account]:
        """Create an account in the key store.

        With ``completion`` set, the result is delivered to it before this
        returns and failures are reported there instead of raised.
        """
        error: WalletCreationError | None = None
        try:
            with scoped_secret(password) as secret:
                account = self._key_store.create_account(secret, DerivationKind(derivation))
        except WalletCreationError as e:
            error = e
        except Exception as e:  # noqa: BLE001
            error = WalletCreationError("failed to create wallet")
            error.__cause__ = e

        if error is not None:
            if completion is None:
                raise error
            completion(CreateAccountResult(error=error))
            return None

        logger.debug("created account %s", account.address)
        if completion is not None:
            completion(CreateAccountResult(account=account))
        return account

    def export_private_key(self, password: str, address: str) -> str:
        for account in self._key_store.accounts:
            if account.address != address:
                continue
            try:
                with scoped_secret(password) as secret:
                    exported = self._key_store.export_private_key(account, secret)
            except SigningError:
                continue
            key = exported if isinstance(exported, bytearray) else bytearray(exported)
            try:
                return bytes_to_hex(key)
            finally:
                scrub(key)
        return ""

    def export_mnemonic(self, password: str, address: str) -> str:
        for account in self._key_store.accounts:
            if account.address != address:
                continue
            try:
                with scoped_secret(password) as secret:
                    return self._key_store.export_mnemonic(account, secret)
            except SigningError:
                continue
        return ""
