from __future__ import annotations


class ConfigurationError(ValueError):
    pass


class SigningError(ValueError):
    pass


class SigningFailedError(SigningError):
    """The key store could not produce a signature for the request."""


class AccountNotFoundError(SigningFailedError):
    def __init__(self, address: str) -> None:
        super().__init__(f"no account for address: {address!r}")
        self.address = address


class WrongPasswordOrCorruptKeyError(SigningFailedError):
    pass


class MalformedTransactionError(SigningError):
    pass


class InvalidChainIdError(SigningError):
    def __init__(self, chain_id: str) -> None:
        super().__init__(f"invalid hex chain id: {chain_id!r}")
        self.chain_id = chain_id


class MessageEncodingError(SigningError):
    pass


class WalletCreationError(SigningError):
    pass
