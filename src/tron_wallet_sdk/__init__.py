from .exceptions import (
    AccountNotFoundError,
    ConfigurationError,
    InvalidChainIdError,
    MalformedTransactionError,
    MessageEncodingError,
    SigningError,
    SigningFailedError,
    WalletCreationError,
    WrongPasswordOrCorruptKeyError,
)
from .models import (
    CreateAccountResult,
    DerivationKind,
    MessageEncoding,
    SignType,
    Transaction,
    TransactionContract,
    TransactionRawData,
    WalletSettings,
)
from .signer import Account, KeyStore, LocalKeyStore
from .signing import (
    message_digest_v1,
    message_digest_v2,
    normalize_signature,
    recover_address,
    transaction_digest,
)
from .wallet import WalletCore, resolve_account

__all__ = [
    "Account",
    "AccountNotFoundError",
    "ConfigurationError",
    "CreateAccountResult",
    "DerivationKind",
    "InvalidChainIdError",
    "KeyStore",
    "LocalKeyStore",
    "MalformedTransactionError",
    "MessageEncoding",
    "MessageEncodingError",
    "SignType",
    "SigningError",
    "SigningFailedError",
    "Transaction",
    "TransactionContract",
    "TransactionRawData",
    "WalletCore",
    "WalletCreationError",
    "WalletSettings",
    "WrongPasswordOrCorruptKeyError",
    "message_digest_v1",
    "message_digest_v2",
    "normalize_signature",
    "recover_address",
    "resolve_account",
    "transaction_digest",
]
