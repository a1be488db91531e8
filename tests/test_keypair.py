import io

import pytest

from hntwallet.codec import WalletError
from hntwallet.keypair import Keypair, KeyType, Network, PublicKey

RFC_SEED = bytes.fromhex("9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60")
RFC_PUBLIC = bytes.fromhex("d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a")
RFC_SIGNATURE = bytes.fromhex(
    "e5564300c360ac729086e2cc806e828a84877f1eb8e5d974d873e065224901555f"
    "b8821590a33bacc61e39701cf9b46bd25bf5f0595bbe24655141438e7a100b"
)


@pytest.mark.parametrize("key_type", [KeyType.ED25519, KeyType.ECC_COMPACT])
def test_roundtrip_keypair(key_type):
    keypair = Keypair.generate(key_type, Network.MAINNET)
    buffer = io.BytesIO()
    keypair.write(buffer)
    buffer.seek(0)
    assert Keypair.read(buffer) == keypair


@pytest.mark.parametrize("key_type", [KeyType.ED25519, KeyType.ECC_COMPACT])
def test_roundtrip_public_key(key_type):
    keypair = Keypair.generate(key_type, Network.MAINNET)
    buffer = io.BytesIO()
    keypair.public_key.write(buffer)
    buffer.seek(0)
    assert PublicKey.read(buffer) == keypair.public_key


@pytest.mark.parametrize("key_type", [KeyType.ED25519, KeyType.ECC_COMPACT])
def test_roundtrip_b58_public_key(key_type):
    keypair = Keypair.generate(key_type, Network.MAINNET)
    assert PublicKey.from_b58(str(keypair.public_key)) == keypair.public_key


def test_ed25519_known_vector():
    keypair = Keypair.from_entropy(KeyType.ED25519, Network.MAINNET, RFC_SEED)
    assert bytes(keypair.public_key) == b"\x01" + RFC_PUBLIC
    assert keypair.sign(b"") == RFC_SIGNATURE


@pytest.mark.parametrize("key_type", [KeyType.ED25519, KeyType.ECC_COMPACT])
def test_sign_and_verify(key_type):
    keypair = Keypair.generate(key_type, Network.MAINNET)
    signature = keypair.sign(b"message")
    keypair.public_key.verify(b"message", signature)
    with pytest.raises(WalletError):
        keypair.public_key.verify(b"other", signature)


def test_testnet_tag():
    keypair = Keypair.generate(KeyType.ED25519, Network.TESTNET)
    assert keypair.public_key.network is Network.TESTNET
    assert keypair.public_key.key_type is KeyType.ED25519
    assert bytes(keypair.public_key)[0] == Network.TESTNET | KeyType.ED25519


def test_from_entropy_is_deterministic():
    first = Keypair.from_entropy(KeyType.ED25519, Network.MAINNET, RFC_SEED)
    second = Keypair.from_entropy(KeyType.ED25519, Network.MAINNET, RFC_SEED)
    assert first == second


def test_read_multisig_keypair_fails():
    with pytest.raises(WalletError):
        Keypair.read(io.BytesIO(bytes([KeyType.MULTISIG]) + bytes(64)))


def test_read_truncated_fails():
    with pytest.raises(WalletError):
        Keypair.read(io.BytesIO(b"\x01" + bytes(10)))


def test_public_key_wrong_length():
    with pytest.raises(WalletError):
        PublicKey.from_bytes(b"\x01" + bytes(5))


def test_invalid_tag():
    with pytest.raises(WalletError):
        PublicKey.from_bytes(b"\x07" + bytes(32))