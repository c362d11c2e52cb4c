from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.functional_serializers import PlainSerializer
from pydantic.functional_validators import AfterValidator, BeforeValidator

from .encoding import bytes_to_hex, parse_bytes
from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .signer import Account

DEFAULT_CHAIN_NAME = "TRON"
SIGNATURE_LENGTH = 65


def _validate_signature_len(v: bytes) -> bytes:
    if len(v) != SIGNATURE_LENGTH:
        raise ValueError(f"expected {SIGNATURE_LENGTH} bytes")
    return v


HexData = Annotated[
    bytes,
    BeforeValidator(parse_bytes),
    PlainSerializer(bytes_to_hex, return_type=str, when_used="json"),
]
SignatureBytes = Annotated[
    bytes,
    BeforeValidator(parse_bytes),
    AfterValidator(_validate_signature_len),
    PlainSerializer(bytes_to_hex, return_type=str, when_used="json"),
]


class MessageEncoding(str, Enum):
    UTF8_STRING = "utf8_string"
    HEX_STRING = "hex_string"
    BYTE_ARRAY_CSV = "byte_array_csv"


class SignType(str, Enum):
    MESSAGE = "message"
    MESSAGE_V2 = "message_v2"


class DerivationKind(str, Enum):
    HD_WALLET = "hierarchical_deterministic"
    PRIVATE_KEY = "private_key"


class SDKModel(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )


class WalletSettings(SDKModel):
    chain_name: str = DEFAULT_CHAIN_NAME
    strict_chain_id: bool = False
    message_v1_0x_prefix: bool = False

    def normalized(self) -> WalletSettings:
        name = self.chain_name.strip()
        if not name:
            raise ConfigurationError("chain_name cannot be empty")
        if not name.isascii():
            raise ConfigurationError(f"chain_name must be ASCII: {name!r}")
        return self.model_copy(update={"chain_name": name})


class TransactionContract(SDKModel):
    type: str
    parameter: Optional[dict[str, Any]] = None
    permission_id: Optional[int] = Field(default=None, alias="Permission_id")


class TransactionRawData(SDKModel):
    contract: list[TransactionContract] = Field(default_factory=list)
    ref_block_bytes: Optional[str] = None
    ref_block_hash: Optional[str] = None
    expiration: Optional[int] = None
    timestamp: Optional[int] = None
    fee_limit: Optional[int] = None
    data: Optional[str] = None


class Transaction(SDKModel):
    tx_id: Optional[str] = Field(default=None, alias="txID")
    raw_data: TransactionRawData
    raw_data_hex: HexData
    signature: list[SignatureBytes] = Field(default_factory=list)
    visible: Optional[bool] = None


@dataclass(frozen=True)
class CreateAccountResult:
    account: Optional[Account] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None
