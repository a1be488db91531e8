"""Password stretching with PBKDF2-HMAC-SHA256 or Argon2id."""

from __future__ import annotations

import hashlib
import secrets
import struct
from dataclasses import dataclass
from typing import BinaryIO, Union

from nacl.exceptions import CryptoError
from nacl.pwhash import argon2id

from hntwallet.codec import WalletError

PBKDF2_DEFAULT_ITERATIONS = 1_000_000

_PBKDF2_SALT_LENGTH = 8
_ARGON2_SALT_LENGTH = argon2id.SALTBYTES
_U32 = struct.Struct("<I")


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    buffer = bytearray()
    while len(buffer) < size:
        chunk = stream.read(size - len(buffer))
        if not chunk:
            raise WalletError("unexpected end of stream")
        buffer += chunk
    return bytes(buffer)


def _read_u32(stream: BinaryIO) -> int:
    (value,) = _U32.unpack(_read_exact(stream, _U32.size))
    return value


def _pack_u32(value: int) -> bytes:
    if not 0 <= value < 1 << 32:
        raise WalletError(f"{value} does not fit in 32 bits")
    return _U32.pack(value)


@dataclass(frozen=True)
class Pbkdf2:
    """PBKDF2-HMAC-SHA256 with an eight byte salt."""

    salt: bytes
    iterations: int

    def __post_init__(self) -> None:
        if len(self.salt) != _PBKDF2_SALT_LENGTH:
            raise ValueError(f"salt must be {_PBKDF2_SALT_LENGTH} bytes")

    @classmethod
    def with_iterations(cls, iterations: int) -> Pbkdf2:
        """Create a hasher with a fresh random salt."""
        return cls(secrets.token_bytes(_PBKDF2_SALT_LENGTH), iterations)

    def hash(self, password: bytes, length: int) -> bytes:
        """Stretch a password into a key of the given length."""
        try:
            return hashlib.pbkdf2_hmac(
                "sha256", bytes(password), self.salt, self.iterations, dklen=length
            )
        except (ValueError, OverflowError) as err:
            raise WalletError("Failed to hash password") from err

    @classmethod
    def read(cls, stream: BinaryIO) -> Pbkdf2:
        salt = _read_exact(stream, _PBKDF2_SALT_LENGTH)
        return cls(salt, _read_u32(stream))

    def write(self, stream: BinaryIO) -> None:
        stream.write(self.salt + _pack_u32(self.iterations))

    def __str__(self) -> str:
        return "Pbkdf2"


@dataclass(frozen=True)
class Argon2id13:
    """Argon2id with a sixteen byte salt and explicit limits."""

    salt: bytes
    ops_limit: int
    mem_limit: int

    def __post_init__(self) -> None:
        if len(self.salt) != _ARGON2_SALT_LENGTH:
            raise ValueError(f"salt must be {_ARGON2_SALT_LENGTH} bytes")

    @classmethod
    def with_limits(cls, ops_limit: int, mem_limit: int) -> Argon2id13:
        """Create a hasher with a fresh random salt."""
        return cls(secrets.token_bytes(_ARGON2_SALT_LENGTH), ops_limit, mem_limit)

    def hash(self, password: bytes, length: int) -> bytes:
        """Stretch a password into a key of the given length."""
        try:
            return argon2id.kdf(
                length,
                bytes(password),
                self.salt,
                opslimit=self.ops_limit,
                memlimit=self.mem_limit,
            )
        except (CryptoError, ValueError, TypeError) as err:
            raise WalletError("Failed to hash password") from err

    @classmethod
    def read(cls, stream: BinaryIO) -> Argon2id13:
        salt = _read_exact(stream, _ARGON2_SALT_LENGTH)
        mem_limit = _read_u32(stream)
        ops_limit = _read_u32(stream)
        return cls(salt, ops_limit, mem_limit)

    def write(self, stream: BinaryIO) -> None:
        stream.write(self.salt + _pack_u32(self.mem_limit) + _pack_u32(self.ops_limit))

    def __str__(self) -> str:
        return "Argon2id13"


PwHash = Union[Pbkdf2, Argon2id13]


def pbkdf2(iterations: int) -> Pbkdf2:
    """PBKDF2 hasher with the given iteration count and a random salt."""
    return Pbkdf2.with_iterations(iterations)


def pbkdf2_default() -> Pbkdf2:
    """PBKDF2 hasher with the default iteration count."""
    return Pbkdf2.with_iterations(PBKDF2_DEFAULT_ITERATIONS)


def argon2id13_default() -> Argon2id13:
    """Argon2id hasher with the sensitive operation and memory limits."""
    return Argon2id13.with_limits(argon2id.OPSLIMIT_SENSITIVE, argon2id.MEMLIMIT_SENSITIVE)