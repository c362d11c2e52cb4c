from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol, runtime_checkable

from eth_account import Account as EthAccount
from eth_account.hdaccount.mnemonic import Mnemonic

from .encoding import eth_to_tron_address
from .exceptions import (
    SigningFailedError,
    WalletCreationError,
    WrongPasswordOrCorruptKeyError,
)
from .models import DerivationKind
from .secret import scrub

logger = logging.getLogger(__name__)

EthAccount.enable_unaudited_hdwallet_features()

TRON_DERIVATION_PATH = "m/44'/195'/0'/0/0"
MNEMONIC_ENTROPY_BYTES = 32

Password = str | bytes | bytearray


@dataclass(frozen=True)
class Account:
    address: str  # base58check, "T..."
    derivation: DerivationKind = DerivationKind.PRIVATE_KEY


@runtime_checkable
class KeyStore(Protocol):
    @property
    def accounts(self) -> Sequence[Account]:
        ...

    def sign_hash(self, digest: bytes, account: Account, password: Password) -> bytes:
        """Sign a 32-byte digest with the account's key; 65 bytes, r || s || v."""

    def create_account(self, password: Password, derivation: DerivationKind) -> Account:
        ...

    def export_private_key(self, account: Account, password: Password) -> bytes:
        ...

    def export_mnemonic(self, account: Account, password: Password) -> str:
        ...


@dataclass
class _Entry:
    account: Account
    keyfile: dict[str, Any]
    entropy_keyfile: Optional[dict[str, Any]] = field(default=None, repr=False)


class LocalKeyStore:
    """In-memory key store over eth_account encrypted keyfiles.

    HD accounts keep their mnemonic entropy in a second keyfile envelope under
    the same password, so ``export_mnemonic`` can rebuild the phrase.
    """

    def __init__(self, *, kdf: str | None = None, iterations: int | None = None) -> None:
        self._kdf = kdf
        self._iterations = iterations
        self._entries: list[_Entry] = []

    @property
    def accounts(self) -> Sequence[Account]:
        return tuple(e.account for e in self._entries)

    def _encrypt(self, secret: bytes, password: Password) -> dict[str, Any]:
        return EthAccount.encrypt(
            secret,
            password,  # type: ignore[arg-type]
            kdf=self._kdf,  # type: ignore[arg-type]
            iterations=self._iterations,
        )

    def _decrypt(self, keyfile: dict[str, Any], password: Password) -> bytearray:
        try:
            return bytearray(EthAccount.decrypt(keyfile, password))  # type: ignore[arg-type]
        except ValueError as e:
            raise WrongPasswordOrCorruptKeyError("wrong password or corrupt key") from e

    def _entry_for(self, account: Account) -> _Entry:
        for entry in self._entries:
            if entry.account.address == account.address:
                return entry
        raise SigningFailedError(f"account not held by this key store: {account.address}")

    def import_private_key(
        self,
        private_key: str | bytes,
        password: Password,
    ) -> Account:
        try:
            acct = EthAccount.from_key(private_key)
        except Exception as e:  # noqa: BLE001
            raise WalletCreationError("invalid private key") from e
        account = Account(address=eth_to_tron_address(acct.address))
        self._entries.append(_Entry(account=account, keyfile=self._encrypt(acct.key, password)))
        logger.debug("imported account %s", account.address)
        return account

    def create_account(
        self,
        password: Password,
        derivation: DerivationKind = DerivationKind.HD_WALLET,
    ) -> Account:
        derivation = DerivationKind(derivation)
        if derivation is DerivationKind.PRIVATE_KEY:
            acct = EthAccount.create()
            account = Account(address=eth_to_tron_address(acct.address), derivation=derivation)
            self._entries.append(_Entry(account=account, keyfile=self._encrypt(acct.key, password)))
            logger.debug("created private key account %s", account.address)
            return account

        entropy = bytearray(os.urandom(MNEMONIC_ENTROPY_BYTES))
        try:
            phrase = Mnemonic().to_mnemonic(bytes(entropy))
            acct = EthAccount.from_mnemonic(phrase, account_path=TRON_DERIVATION_PATH)
            account = Account(address=eth_to_tron_address(acct.address), derivation=derivation)
            entry = _Entry(
                account=account,
                keyfile=self._encrypt(acct.key, password),
                entropy_keyfile=self._encrypt(bytes(entropy), password),
            )
        finally:
            scrub(entropy)
        self._entries.append(entry)
        logger.debug("created hd account %s", account.address)
        return account

    def sign_hash(self, digest: bytes, account: Account, password: Password) -> bytes:
        if len(digest) != 32:
            raise SigningFailedError("digest must be 32 bytes")
        key = self._decrypt(self._entry_for(account).keyfile, password)
        try:
            signed = EthAccount.unsafe_sign_hash(digest, bytes(key))
        finally:
            scrub(key)
        return bytes(signed.signature)

    def export_private_key(self, account: Account, password: Password) -> bytes:
        key = self._decrypt(self._entry_for(account).keyfile, password)
        try:
            return bytes(key)
        finally:
            scrub(key)

    def export_mnemonic(self, account: Account, password: Password) -> str:
        entry = self._entry_for(account)
        if entry.entropy_keyfile is None:
            raise SigningFailedError(f"account has no mnemonic: {account.address}")
        entropy = self._decrypt(entry.entropy_keyfile, password)
        try:
            return Mnemonic().to_mnemonic(bytes(entropy))
        finally:
            scrub(entropy)
