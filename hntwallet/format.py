"""Wallet key-derivation formats: a plain stretched password, or one sharded with Shamir shares."""

from __future__ import annotations

import hashlib
import hmac
import secrets
from dataclasses import dataclass, field, replace
from typing import BinaryIO, List

from hntwallet.codec import WalletError
from hntwallet.pwhash import PwHash
from hntwallet.shamir import combine_keyshares, create_keyshares

_DERIVED_KEY_LENGTH = 32
_KEY_SHARE_LENGTH = 33


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    buffer = bytearray()
    while len(buffer) < size:
        chunk = stream.read(size - len(buffer))
        if not chunk:
            raise WalletError("unexpected end of stream")
        buffer += chunk
    return bytes(buffer)


@dataclass(frozen=True)
class KeyShare:
    """One 33-byte Shamir key share."""

    data: bytes = bytes(_KEY_SHARE_LENGTH)

    def __post_init__(self) -> None:
        if len(self.data) != _KEY_SHARE_LENGTH:
            raise WalletError(f"key share must be {_KEY_SHARE_LENGTH} bytes")

    @classmethod
    def from_bytes(cls, data: bytes) -> KeyShare:
        return cls(bytes(data))

    def __bytes__(self) -> bytes:
        return self.data


@dataclass
class Basic:
    """The key is the stretched password itself."""

    pwhash: PwHash

    def derive_key(self, password: bytes) -> bytes:
        """Derive the 32-byte encryption key."""
        return self.pwhash.hash(password, _DERIVED_KEY_LENGTH)

    def read(self, stream: BinaryIO) -> None:
        """Basic wallets carry no format data."""

    def write(self, stream: BinaryIO) -> None:
        """Basic wallets carry no format data."""


@dataclass
class Sharded:
    """The key combines the stretched password with a key split into Shamir shares."""

    key_share_count: int
    recovery_threshold: int
    pwhash: PwHash
    key_shares: List[KeyShare] = field(default_factory=list)

    def derive_key(self, password: bytes) -> bytes:
        """Derive the 32-byte encryption key, creating key shares when there are none."""
        stretched = self.pwhash.hash(password, _DERIVED_KEY_LENGTH)
        if not self.key_shares:
            sss_key = secrets.token_bytes(_DERIVED_KEY_LENGTH)
            self.key_shares = [
                KeyShare.from_bytes(share)
                for share in create_keyshares(
                    sss_key, self.key_share_count, self.recovery_threshold
                )
            ]
        elif len(self.key_shares) < self.recovery_threshold:
            raise WalletError("not enough keyshares to recover key")
        else:
            try:
                sss_key = combine_keyshares(bytes(share) for share in self.key_shares)
            except WalletError as err:
                raise WalletError("Failed to combine keyshares") from err
        return hmac.new(sss_key, stretched, hashlib.sha256).digest()

    def shards(self) -> List[Sharded]:
        """One shard per key share, each carrying the same parameters."""
        return [replace(self, key_shares=[share]) for share in self.key_shares]

    def absorb(self, other: Sharded) -> None:
        """Take over the key shares of a congruent shard."""
        if (
            self.key_share_count != other.key_share_count
            or self.recovery_threshold != other.recovery_threshold
        ):
            raise WalletError("Shards are not congruent")
        self.key_shares.extend(other.key_shares)

    def read(self, stream: BinaryIO) -> None:
        """Read shard parameters and append the stored key share."""
        self.key_share_count, self.recovery_threshold = _read_exact(stream, 2)
        self.key_shares.append(KeyShare.from_bytes(_read_exact(stream, _KEY_SHARE_LENGTH)))

    def write(self, stream: BinaryIO) -> None:
        """Write a shard holding exactly one key share."""
        if len(self.key_shares) != 1:
            raise WalletError("Invalid number of key shares in shard")
        header = bytes([self.key_share_count, self.recovery_threshold])
        stream.write(header + bytes(self.key_shares[0]))


def basic(pwhash: PwHash) -> Basic:
    """A basic format using the given password hasher."""
    return Basic(pwhash)


def sharded(key_share_count: int, recovery_threshold: int, pwhash: PwHash) -> Sharded:
    """A sharded format with no key shares yet."""
    return Sharded(key_share_count, recovery_threshold, pwhash)


def sharded_default(pwhash: PwHash) -> Sharded:
    """A sharded format of five shares, any three of which recover the key."""
    return sharded(5, 3, pwhash)