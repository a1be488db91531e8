"""Error type and the text encodings used by the wallet: base64 and base58check."""

from __future__ import annotations

import base64
import binascii
import hashlib
import re

_U64_LIMIT = 1 << 64
_B58_ALPHABET = "123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz"
_B58_INDEX = {char: index for index, char in enumerate(_B58_ALPHABET)}
_B58_VERSION = 0
_CHECKSUM_LENGTH = 4
_URL_SAFE_NO_PAD = re.compile(r"[A-Za-z0-9_-]*")


class WalletError(Exception):
    """Raised when a wallet operation cannot be completed."""


def to_b64(data: bytes) -> str:
    """Encode bytes as padded standard base64."""
    return base64.b64encode(bytes(data)).decode("ascii")


def to_b64_url(data: bytes) -> str:
    """Encode bytes as URL-safe base64 without padding."""
    return base64.urlsafe_b64encode(bytes(data)).rstrip(b"=").decode("ascii")


def from_b64(text: str) -> bytes:
    """Decode padded standard base64."""
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as err:
        raise WalletError(f"invalid base64: {err}") from err


def from_b64_url(text: str) -> bytes:
    """Decode URL-safe base64 written without padding."""
    if not _URL_SAFE_NO_PAD.fullmatch(text) or len(text) % 4 == 1:
        raise WalletError("invalid url-safe base64")
    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as err:
        raise WalletError(f"invalid url-safe base64: {err}") from err


def u64_to_b64(value: int) -> str:
    """Encode an unsigned 64-bit integer as base64 of its little-endian bytes."""
    if not 0 <= value < _U64_LIMIT:
        raise ValueError(f"{value} is not an unsigned 64-bit integer")
    return to_b64(value.to_bytes(8, "little"))


def u64_from_b64(text: str) -> int:
    """Decode base64 holding exactly eight little-endian bytes."""
    decoded = from_b64(text)
    if len(decoded) != 8:
        raise WalletError(f"expected 8 bytes, found {len(decoded)}")
    return int.from_bytes(decoded, "little")


def _checksum(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()[:_CHECKSUM_LENGTH]


def _b58encode(data: bytes) -> str:
    number = int.from_bytes(data, "big")
    digits = []
    while number:
        number, remainder = divmod(number, 58)
        digits.append(_B58_ALPHABET[remainder])
    leading_zeros = len(data) - len(data.lstrip(b"\0"))
    return "1" * leading_zeros + "".join(reversed(digits))


def _b58decode(text: str) -> bytes:
    number = 0
    for char in text:
        try:
            number = number * 58 + _B58_INDEX[char]
        except KeyError:
            raise WalletError(f"invalid base58 character {char!r}") from None
    leading_ones = len(text) - len(text.lstrip("1"))
    body = number.to_bytes((number.bit_length() + 7) // 8, "big")
    return b"\0" * leading_ones + body


def to_b58check(data: bytes) -> str:
    """Encode bytes as base58 with a four byte double-SHA256 checksum."""
    payload = bytes(data)
    return _b58encode(payload + _checksum(payload))


def from_b58check(text: str) -> bytes:
    """Decode base58check text whose payload starts with version byte 0."""
    raw = _b58decode(text)
    if len(raw) < _CHECKSUM_LENGTH:
        raise WalletError("base58check data is too short")
    payload, checksum = raw[:-_CHECKSUM_LENGTH], raw[-_CHECKSUM_LENGTH:]
    if _checksum(payload) != checksum:
        raise WalletError("invalid base58check checksum")
    if not payload:
        raise WalletError("base58check data has no version byte")
    if payload[0] != _B58_VERSION:
        raise WalletError(f"invalid base58check version {payload[0]}")
    return payload