"""Key types, networks, public keys and signing keypairs (Ed25519 and compact P-256)."""

from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from enum import IntEnum
from typing import BinaryIO

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from nacl.exceptions import BadSignatureError, CryptoError
from nacl.signing import SigningKey, VerifyKey

from hntwallet.codec import WalletError, from_b58check, to_b58check

_PUBLIC_KEY_LENGTH = 33
_SECRET_LENGTH = 32
_ED25519_PUBLIC_LENGTH = 32

_P256_P = 2**256 - 2**224 + 2**192 + 2**96 - 1
_P256_B = 0x5AC635D8AA3A93E7B3EBBD55769886BC651D06B0CC53B0F63BCE3C3E27D2604B


class KeyType(IntEnum):
    """Kind of key, stored in the low bits of a key tag."""

    ECC_COMPACT = 0
    ED25519 = 1
    MULTISIG = 2


class Network(IntEnum):
    """Network, stored in the high bits of a key tag."""

    MAINNET = 0x00
    TESTNET = 0x10


def _split_tag(tag: int) -> tuple[KeyType, Network]:
    try:
        return KeyType(tag & 0x0F), Network(tag & 0xF0)
    except ValueError:
        raise WalletError(f"invalid key tag {tag}") from None


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    buffer = bytearray()
    while len(buffer) < size:
        chunk = stream.read(size - len(buffer))
        if not chunk:
            raise WalletError("unexpected end of stream")
        buffer += chunk
    return bytes(buffer)


def _is_compact(y: int) -> bool:
    return y < _P256_P - y


def _ecc_public_from_x(x: int) -> ec.EllipticCurvePublicKey:
    if x >= _P256_P:
        raise WalletError("invalid compact public key")
    rhs = (pow(x, 3, _P256_P) - 3 * x + _P256_B) % _P256_P
    y = pow(rhs, (_P256_P + 1) // 4, _P256_P)
    if y * y % _P256_P != rhs:
        raise WalletError("invalid compact public key")
    y = min(y, _P256_P - y)
    return ec.EllipticCurvePublicNumbers(x, y, ec.SECP256R1()).public_key()


@dataclass(frozen=True)
class PublicKey:
    """A tagged public key: one tag byte followed by 32 key bytes."""

    data: bytes

    def __post_init__(self) -> None:
        data = bytes(self.data)
        object.__setattr__(self, "data", data)
        if not data:
            raise WalletError("empty public key")
        key_type, _ = _split_tag(data[0])
        if key_type is KeyType.MULTISIG:
            raise WalletError(f"unsupported key type {data[0]}")
        if len(data) != _PUBLIC_KEY_LENGTH:
            raise WalletError(f"public key must be {_PUBLIC_KEY_LENGTH} bytes")
        if key_type is KeyType.ECC_COMPACT:
            _ecc_public_from_x(int.from_bytes(data[1:], "big"))

    @property
    def key_type(self) -> KeyType:
        return _split_tag(self.data[0])[0]

    @property
    def network(self) -> Network:
        return _split_tag(self.data[0])[1]

    @classmethod
    def from_bytes(cls, data: bytes) -> PublicKey:
        return cls(bytes(data))

    @classmethod
    def from_b58(cls, text: str) -> PublicKey:
        """Parse the base58check form of a public key."""
        return cls.from_bytes(from_b58check(text)[1:])

    def __bytes__(self) -> bytes:
        return self.data

    def __str__(self) -> str:
        return to_b58check(b"\0" + self.data)

    def verify(self, message: bytes, signature: bytes) -> None:
        """Check a signature over a message, raising WalletError if it is invalid."""
        message, signature = bytes(message), bytes(signature)
        if self.key_type is KeyType.ED25519:
            try:
                VerifyKey(self.data[1:]).verify(message, signature)
            except (BadSignatureError, CryptoError, ValueError) as err:
                raise WalletError("invalid signature") from err
        else:
            public = _ecc_public_from_x(int.from_bytes(self.data[1:], "big"))
            try:
                public.verify(signature, message, ec.ECDSA(hashes.SHA256()))
            except (InvalidSignature, ValueError) as err:
                raise WalletError("invalid signature") from err

    @classmethod
    def read(cls, stream: BinaryIO) -> PublicKey:
        tag = _read_exact(stream, 1)
        key_type, _ = _split_tag(tag[0])
        if key_type is KeyType.MULTISIG:
            raise WalletError(f"unsupported key type {tag[0]}")
        return cls(tag + _read_exact(stream, _PUBLIC_KEY_LENGTH - 1))

    def write(self, stream: BinaryIO) -> None:
        stream.write(self.data)


def _ecc_private(secret: bytes) -> ec.EllipticCurvePrivateKey:
    try:
        return ec.derive_private_key(int.from_bytes(secret, "big"), ec.SECP256R1())
    except ValueError as err:
        raise WalletError("invalid ecc secret") from err


@dataclass(frozen=True)
class Keypair:
    """A secret key with its public key, for one key type and network."""

    key_type: KeyType
    network: Network
    secret: bytes = field(repr=False)
    public_key: PublicKey = field(init=False)

    def __post_init__(self) -> None:
        key_type = KeyType(self.key_type)
        network = Network(self.network)
        secret = bytes(self.secret)
        if len(secret) != _SECRET_LENGTH:
            raise WalletError(f"secret must be {_SECRET_LENGTH} bytes")
        tag = bytes([network | key_type])
        if key_type is KeyType.ED25519:
            public = bytes(SigningKey(secret).verify_key)
        elif key_type is KeyType.ECC_COMPACT:
            numbers = _ecc_private(secret).public_key().public_numbers()
            if not _is_compact(numbers.y):
                raise WalletError("ecc key is not compact")
            public = numbers.x.to_bytes(32, "big")
        else:
            raise WalletError(f"invalid key type {key_type}")
        object.__setattr__(self, "key_type", key_type)
        object.__setattr__(self, "network", network)
        object.__setattr__(self, "secret", secret)
        object.__setattr__(self, "public_key", PublicKey(tag + public))

    @classmethod
    def generate(
        cls, key_type: KeyType = KeyType.ED25519, network: Network = Network.MAINNET
    ) -> Keypair:
        """Generate a fresh random keypair."""
        if key_type == KeyType.ECC_COMPACT:
            while True:
                private = ec.generate_private_key(ec.SECP256R1())
                if _is_compact(private.public_key().public_numbers().y):
                    scalar = private.private_numbers().private_value
                    return cls(key_type, network, scalar.to_bytes(32, "big"))
        if key_type == KeyType.ED25519:
            return cls(key_type, network, secrets.token_bytes(_SECRET_LENGTH))
        raise WalletError(f"invalid key type {key_type}")

    @classmethod
    def from_entropy(cls, key_type: KeyType, network: Network, entropy: bytes) -> Keypair:
        """Recreate a keypair from its 32 bytes of secret entropy."""
        return cls(key_type, network, bytes(entropy))

    def sign(self, message: bytes) -> bytes:
        """Sign a message with the secret key."""
        message = bytes(message)
        if self.key_type is KeyType.ED25519:
            return SigningKey(self.secret).sign(message).signature
        return _ecc_private(self.secret).sign(message, ec.ECDSA(hashes.SHA256()))

    def _keypair_bytes(self) -> bytes:
        tag = self.public_key.data[:1]
        if self.key_type is KeyType.ED25519:
            return tag + self.secret + self.public_key.data[1:]
        return tag + self.secret

    @classmethod
    def read(cls, stream: BinaryIO) -> Keypair:
        tag = _read_exact(stream, 1)[0]
        key_type, network = _split_tag(tag)
        if key_type is KeyType.ED25519:
            body = _read_exact(stream, _SECRET_LENGTH + _ED25519_PUBLIC_LENGTH)
            keypair = cls(key_type, network, body[:_SECRET_LENGTH])
            if keypair.public_key.data[1:] != body[_SECRET_LENGTH:]:
                raise WalletError("ed25519 keypair public key does not match secret")
            return keypair
        if key_type is KeyType.ECC_COMPACT:
            return cls(key_type, network, _read_exact(stream, _SECRET_LENGTH))
        raise WalletError(f"invalid key type {tag}")

    def write(self, stream: BinaryIO) -> None:
        stream.write(self._keypair_bytes())
        self.public_key.write(stream)