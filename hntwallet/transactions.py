"""Blockchain transaction messages and the envelope that carries them."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Dict, List, Optional, Type, TypeVar, Union

from hntwallet.codec import WalletError, from_b64, to_b64
from hntwallet.protobuf import WIRE_LENGTH, WIRE_VARINT, encode_field, iter_fields

_U64_LIMIT = 1 << 64
_I64_LIMIT = 1 << 63

_M = TypeVar("_M", bound="_Message")


def _spec(number: int, kind: str, message: Optional[type] = None) -> dict:
    return {"pb": (number, kind, message)}


def _uint(number: int):
    return field(default=0, metadata=_spec(number, "uint"))


def _int(number: int):
    return field(default=0, metadata=_spec(number, "int"))


def _bool(number: int):
    return field(default=False, metadata=_spec(number, "bool"))


def _bytes(number: int):
    return field(default=b"", metadata=_spec(number, "bytes"))


def _string(number: int):
    return field(default="", metadata=_spec(number, "string"))


def _bytes_list(number: int):
    return field(default_factory=list, metadata=_spec(number, "bytes*"))


def _message_list(number: int, message: type):
    return field(default_factory=list, metadata=_spec(number, "msg*", message))


def _optional(number: int, kind: str, message: Optional[type] = None):
    return field(default=None, metadata=_spec(number, kind, message))


def _encode_value(number: int, kind: str, value) -> bytes:
    if kind in ("uint", "int", "bool"):
        return encode_field(number, int(value)) if value else b""
    if kind in ("bytes", "string"):
        return encode_field(number, value) if value else b""
    if kind == "bytes*":
        return b"".join(encode_field(number, bytes(item)) for item in value)
    if kind == "msg*":
        return b"".join(encode_field(number, item.encode()) for item in value)
    if value is None:
        return b""
    if kind == "opt_msg":
        return encode_field(number, value.encode())
    return encode_field(number, value)


def _decode_value(kind: str, message: Optional[type], wire_type: int, raw):
    if kind in ("uint", "int", "bool", "opt_uint"):
        if wire_type != WIRE_VARINT:
            raise WalletError("unexpected wire type for integer field")
        if kind == "bool":
            return bool(raw)
        if kind == "int" and raw >= _I64_LIMIT:
            return raw - _U64_LIMIT
        return raw
    if wire_type != WIRE_LENGTH:
        raise WalletError("unexpected wire type for length-delimited field")
    if kind == "string":
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as err:
            raise WalletError("invalid utf-8 in string field") from err
    if kind in ("msg*", "opt_msg"):
        return message.decode(raw)
    return raw


class _Message:
    """Encoding shared by all dataclass messages."""

    def encode(self) -> bytes:
        """Serialize to protocol buffer bytes."""
        specs = sorted(fields(self), key=lambda f: f.metadata["pb"][0])
        return b"".join(
            _encode_value(f.metadata["pb"][0], f.metadata["pb"][1], getattr(self, f.name))
            for f in specs
        )

    @classmethod
    def decode(cls: Type[_M], data: bytes) -> _M:
        """Parse protocol buffer bytes, skipping unknown fields."""
        by_number = {f.metadata["pb"][0]: f for f in fields(cls)}
        values: dict = {}
        for number, wire_type, raw in iter_fields(data):
            spec = by_number.get(number)
            if spec is None:
                continue
            _, kind, message = spec.metadata["pb"]
            value = _decode_value(kind, message, wire_type, raw)
            if kind.endswith("*"):
                values.setdefault(spec.name, []).append(value)
            else:
                values[spec.name] = value
        return cls(**values)


@dataclass
class BlockchainVarV1(_Message):
    name: str = _string(1)
    type: str = _string(2)
    value: bytes = _bytes(3)


@dataclass
class Payment(_Message):
    payee: bytes = _bytes(1)
    amount: int = _uint(2)
    memo: int = _uint(3)
    max: bool = _bool(4)
    token_type: int = _uint(5)


@dataclass
class BlockchainTxnPaymentV1(_Message):
    payer: bytes = _bytes(1)
    payee: bytes = _bytes(2)
    amount: int = _uint(3)
    fee: int = _uint(4)
    nonce: int = _uint(5)
    signature: bytes = _bytes(6)


@dataclass
class BlockchainTxnPaymentV2(_Message):
    payer: bytes = _bytes(1)
    payments: List[Payment] = _message_list(2, Payment)
    fee: int = _uint(3)
    nonce: int = _uint(4)
    signature: bytes = _bytes(5)


@dataclass
class BlockchainTxnCreateHtlcV1(_Message):
    payer: bytes = _bytes(1)
    payee: bytes = _bytes(2)
    address: bytes = _bytes(3)
    hashlock: bytes = _bytes(4)
    timelock: int = _uint(5)
    amount: int = _uint(6)
    fee: int = _uint(7)
    signature: bytes = _bytes(8)
    nonce: int = _uint(9)


@dataclass
class BlockchainTxnRedeemHtlcV1(_Message):
    payee: bytes = _bytes(1)
    address: bytes = _bytes(2)
    preimage: bytes = _bytes(3)
    fee: int = _uint(4)
    signature: bytes = _bytes(5)


@dataclass
class BlockchainTxnSecurityExchangeV1(_Message):
    payer: bytes = _bytes(1)
    payee: bytes = _bytes(2)
    amount: int = _uint(3)
    fee: int = _uint(4)
    nonce: int = _uint(5)
    signature: bytes = _bytes(6)


@dataclass
class BlockchainTxnTokenBurnV1(_Message):
    payer: bytes = _bytes(1)
    payee: bytes = _bytes(2)
    amount: int = _uint(3)
    nonce: int = _uint(4)
    signature: bytes = _bytes(5)
    fee: int = _uint(6)
    memo: int = _uint(7)


@dataclass
class BlockchainTxnAddGatewayV1(_Message):
    owner: bytes = _bytes(1)
    gateway: bytes = _bytes(2)
    owner_signature: bytes = _bytes(3)
    gateway_signature: bytes = _bytes(4)
    payer: bytes = _bytes(5)
    payer_signature: bytes = _bytes(6)
    staking_fee: int = _uint(7)
    fee: int = _uint(8)


@dataclass
class BlockchainTxnAssertLocationV1(_Message):
    gateway: bytes = _bytes(1)
    owner: bytes = _bytes(2)
    payer: bytes = _bytes(3)
    gateway_signature: bytes = _bytes(4)
    owner_signature: bytes = _bytes(5)
    payer_signature: bytes = _bytes(6)
    location: str = _string(7)
    nonce: int = _uint(8)
    staking_fee: int = _uint(9)
    fee: int = _uint(10)


@dataclass
class BlockchainTxnAssertLocationV2(_Message):
    gateway: bytes = _bytes(1)
    owner: bytes = _bytes(2)
    payer: bytes = _bytes(3)
    owner_signature: bytes = _bytes(4)
    payer_signature: bytes = _bytes(5)
    location: str = _string(6)
    nonce: int = _uint(7)
    gain: int = _int(8)
    elevation: int = _int(9)
    staking_fee: int = _uint(10)
    fee: int = _uint(11)


@dataclass
class BlockchainTxnOuiV1(_Message):
    owner: bytes = _bytes(1)
    addresses: List[bytes] = _bytes_list(2)
    filter: bytes = _bytes(3)
    requested_subnet_size: int = _uint(4)
    payer: bytes = _bytes(5)
    staking_fee: int = _uint(6)
    fee: int = _uint(7)
    owner_signature: bytes = _bytes(8)
    payer_signature: bytes = _bytes(9)
    oui: int = _uint(10)


@dataclass
class BlockchainTxnVarsV1(_Message):
    vars: List[BlockchainVarV1] = _message_list(1, BlockchainVarV1)
    version_predicate: int = _uint(2)
    proof: bytes = _bytes(3)
    master_key: bytes = _bytes(4)
    key_proof: bytes = _bytes(5)
    cancels: List[bytes] = _bytes_list(6)
    unsets: List[bytes] = _bytes_list(7)
    nonce: int = _uint(8)
    multi_keys: List[bytes] = _bytes_list(9)
    multi_proofs: List[bytes] = _bytes_list(10)
    multi_key_proofs: List[bytes] = _bytes_list(11)


@dataclass
class BlockchainTxnTransferHotspotV1(_Message):
    gateway: bytes = _bytes(1)
    seller: bytes = _bytes(2)
    buyer: bytes = _bytes(3)
    seller_signature: bytes = _bytes(4)
    buyer_signature: bytes = _bytes(5)
    buyer_nonce: int = _uint(6)
    amount_to_seller: int = _uint(7)
    fee: int = _uint(8)


@dataclass
class BlockchainTxnTransferHotspotV2(_Message):
    gateway: bytes = _bytes(1)
    owner: bytes = _bytes(2)
    owner_signature: bytes = _bytes(3)
    new_owner: bytes = _bytes(4)
    fee: int = _uint(5)
    nonce: int = _uint(6)


@dataclass
class BlockchainTxnStakeValidatorV1(_Message):
    address: bytes = _bytes(1)
    owner: bytes = _bytes(2)
    stake: int = _uint(3)
    fee: int = _uint(4)
    owner_signature: bytes = _bytes(5)


@dataclass
class BlockchainTxnUnstakeValidatorV1(_Message):
    address: bytes = _bytes(1)
    owner: bytes = _bytes(2)
    owner_signature: bytes = _bytes(3)
    fee: int = _uint(4)
    stake_amount: int = _uint(5)
    stake_release_height: int = _uint(6)


@dataclass
class BlockchainTxnTransferValidatorStakeV1(_Message):
    old_address: bytes = _bytes(1)
    new_address: bytes = _bytes(2)
    old_owner: bytes = _bytes(3)
    new_owner: bytes = _bytes(4)
    old_owner_signature: bytes = _bytes(5)
    new_owner_signature: bytes = _bytes(6)
    fee: int = _uint(7)
    stake_amount: int = _uint(8)
    payment_amount: int = _uint(9)


@dataclass
class _UpdateXor(_Message):
    index: int = _uint(1)
    filter: bytes = _bytes(2)


@dataclass
class _UpdateRouters(_Message):
    router_addresses: List[bytes] = _bytes_list(1)


@dataclass
class BlockchainTxnRoutingV1(_Message):
    """Routing update; exactly one of the update fields is normally set."""

    oui: int = _uint(1)
    owner: bytes = _bytes(2)
    new_xor: Optional[bytes] = _optional(3, "opt_bytes")
    update_xor: Optional[_UpdateXor] = _optional(4, "opt_msg", _UpdateXor)
    update_routers: Optional[_UpdateRouters] = _optional(5, "opt_msg", _UpdateRouters)
    request_subnet: Optional[int] = _optional(6, "opt_uint")
    fee: int = _uint(7)
    nonce: int = _uint(8)
    signature: bytes = _bytes(9)
    staking_fee: int = _uint(10)


@dataclass
class BlockchainTxnPriceOracleV1(_Message):
    public_key: bytes = _bytes(1)
    price: int = _uint(2)
    block_height: int = _uint(3)
    signature: bytes = _bytes(4)


Transaction = Union[
    BlockchainTxnAddGatewayV1,
    BlockchainTxnAssertLocationV1,
    BlockchainTxnCreateHtlcV1,
    BlockchainTxnOuiV1,
    BlockchainTxnPaymentV1,
    BlockchainTxnRedeemHtlcV1,
    BlockchainTxnRoutingV1,
    BlockchainTxnSecurityExchangeV1,
    BlockchainTxnVarsV1,
    BlockchainTxnTokenBurnV1,
    BlockchainTxnPaymentV2,
    BlockchainTxnPriceOracleV1,
    BlockchainTxnTransferHotspotV1,
    BlockchainTxnAssertLocationV2,
    BlockchainTxnStakeValidatorV1,
    BlockchainTxnUnstakeValidatorV1,
    BlockchainTxnTransferValidatorStakeV1,
    BlockchainTxnTransferHotspotV2,
]

_ENVELOPE_NUMBERS: Dict[type, int] = {
    BlockchainTxnAddGatewayV1: 1,
    BlockchainTxnAssertLocationV1: 2,
    BlockchainTxnCreateHtlcV1: 4,
    BlockchainTxnOuiV1: 7,
    BlockchainTxnPaymentV1: 8,
    BlockchainTxnRedeemHtlcV1: 11,
    BlockchainTxnRoutingV1: 13,
    BlockchainTxnSecurityExchangeV1: 14,
    BlockchainTxnVarsV1: 15,
    BlockchainTxnTokenBurnV1: 17,
    BlockchainTxnPaymentV2: 20,
    BlockchainTxnPriceOracleV1: 25,
    BlockchainTxnTransferHotspotV1: 27,
    BlockchainTxnAssertLocationV2: 29,
    BlockchainTxnStakeValidatorV1: 31,
    BlockchainTxnUnstakeValidatorV1: 32,
    BlockchainTxnTransferValidatorStakeV1: 33,
    BlockchainTxnTransferHotspotV2: 39,
}
_ENVELOPE_TYPES: Dict[int, type] = {number: cls for cls, number in _ENVELOPE_NUMBERS.items()}


@dataclass
class BlockchainTxn:
    """Envelope holding one transaction, or none."""

    txn: Optional[Transaction] = None

    def encode(self) -> bytes:
        """Serialize the envelope to protocol buffer bytes."""
        if self.txn is None:
            return b""
        try:
            number = _ENVELOPE_NUMBERS[type(self.txn)]
        except KeyError:
            raise WalletError("unsupported transaction") from None
        return encode_field(number, self.txn.encode())

    @classmethod
    def decode(cls, data: bytes) -> BlockchainTxn:
        """Parse an envelope; unknown transaction kinds are skipped."""
        txn = None
        for number, wire_type, raw in iter_fields(data):
            txn_type = _ENVELOPE_TYPES.get(number)
            if txn_type is None:
                continue
            if wire_type != WIRE_LENGTH:
                raise WalletError("unexpected wire type for transaction")
            txn = txn_type.decode(raw)
        return cls(txn)

    def to_b64(self) -> str:
        return to_b64(self.encode())

    @classmethod
    def from_b64(cls, text: str) -> BlockchainTxn:
        return cls.decode(from_b64(text))


_T = TypeVar("_T")


def in_envelope(txn: Transaction) -> BlockchainTxn:
    """Wrap a transaction in an envelope."""
    if type(txn) not in _ENVELOPE_NUMBERS:
        raise WalletError("unsupported transaction")
    return BlockchainTxn(txn)


def from_envelope(envelope: BlockchainTxn, txn_type: Type[_T]) -> _T:
    """Take a transaction of the given type out of an envelope."""
    if not isinstance(envelope.txn, txn_type):
        raise WalletError("unsupported transaction")
    return envelope.txn