"""Minimal protocol buffer wire-format encoding and decoding."""

from __future__ import annotations

from typing import Iterator, Tuple, Union

from hntwallet.codec import WalletError

_U64_LIMIT = 1 << 64
_MAX_VARINT_LENGTH = 10

WIRE_VARINT = 0
WIRE_FIXED64 = 1
WIRE_LENGTH = 2
WIRE_FIXED32 = 5


def encode_varint(value: int) -> bytes:
    """Encode an integer as a varint; negatives use 64-bit two's complement."""
    if value < 0:
        value += _U64_LIMIT
    if not 0 <= value < _U64_LIMIT:
        raise ValueError(f"{value} does not fit in 64 bits")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def decode_varint(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """Decode a varint at ``offset``; return the value and the offset after it."""
    value = 0
    for shift_index in range(_MAX_VARINT_LENGTH):
        if offset >= len(data):
            raise WalletError("truncated varint")
        byte = data[offset]
        offset += 1
        value |= (byte & 0x7F) << (7 * shift_index)
        if not byte & 0x80:
            if value >= _U64_LIMIT:
                raise WalletError("varint overflow")
            return value, offset
    raise WalletError("varint is too long")


def encode_field(number: int, value: Union[int, bool, bytes, str]) -> bytes:
    """Encode one field: integers as varints, bytes and text length-delimited."""
    if number < 1:
        raise ValueError("field number must be positive")
    if isinstance(value, (bool, int)):
        return encode_varint(number << 3 | WIRE_VARINT) + encode_varint(int(value))
    if isinstance(value, str):
        value = value.encode("utf-8")
    payload = bytes(value)
    return encode_varint(number << 3 | WIRE_LENGTH) + encode_varint(len(payload)) + payload


def iter_fields(data: bytes) -> Iterator[Tuple[int, int, Union[int, bytes]]]:
    """Yield ``(field number, wire type, value)`` for each field in a message."""
    data = bytes(data)
    offset = 0
    while offset < len(data):
        key, offset = decode_varint(data, offset)
        number, wire_type = key >> 3, key & 0x07
        if number == 0:
            raise WalletError("invalid field number 0")
        if wire_type == WIRE_VARINT:
            value, offset = decode_varint(data, offset)
            yield number, wire_type, value
        elif wire_type == WIRE_LENGTH:
            length, offset = decode_varint(data, offset)
            end = offset + length
            if end > len(data):
                raise WalletError("truncated length-delimited field")
            yield number, wire_type, data[offset:end]
            offset = end
        elif wire_type in (WIRE_FIXED64, WIRE_FIXED32):
            size = 8 if wire_type == WIRE_FIXED64 else 4
            end = offset + size
            if end > len(data):
                raise WalletError("truncated fixed-width field")
            yield number, wire_type, int.from_bytes(data[offset:end], "little")
            offset = end
        else:
            raise WalletError(f"unsupported wire type {wire_type}")