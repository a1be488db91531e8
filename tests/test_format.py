import io

import pytest

from hntwallet.codec import WalletError
from hntwallet.format import Basic, KeyShare, Sharded, basic, sharded, sharded_default
from hntwallet.pwhash import Pbkdf2

PASSWORD = b"password"
OTHER_PASSWORD = b"secret"


@pytest.fixture
def hasher():
    return Pbkdf2(salt=b"\x07" * 8, iterations=1)


def test_key_share_round_trip():
    data = bytes(range(33))
    assert bytes(KeyShare.from_bytes(data)) == data


def test_key_share_default_is_zero():
    assert bytes(KeyShare()) == bytes(33)


@pytest.mark.parametrize("data", [b"", bytes(32), bytes(34)])
def test_key_share_rejects_bad_length(data):
    with pytest.raises(WalletError):
        KeyShare.from_bytes(data)


def test_basic_key_is_stretched_password(hasher):
    fmt = basic(hasher)
    key = fmt.derive_key(PASSWORD)
    assert len(key) == 32
    assert key == hasher.hash(PASSWORD, 32)
    assert fmt.derive_key(OTHER_PASSWORD) != key


def test_basic_read_write_carry_no_data(hasher):
    fmt = Basic(hasher)
    stream = io.BytesIO(b"rest")
    fmt.write(stream)
    assert stream.getvalue() == b"rest"
    stream.seek(0)
    fmt.read(stream)
    assert stream.read() == b"rest"


def test_sharded_default_parameters(hasher):
    fmt = sharded_default(hasher)
    assert (fmt.key_share_count, fmt.recovery_threshold) == (5, 3)
    assert fmt.key_shares == []


def test_sharded_creates_shares_and_is_stable(hasher):
    fmt = sharded(5, 3, hasher)
    key = fmt.derive_key(PASSWORD)
    assert len(key) == 32
    assert len(fmt.key_shares) == 5
    assert fmt.derive_key(PASSWORD) == key
    assert fmt.derive_key(OTHER_PASSWORD) != key


def test_sharded_key_differs_from_basic(hasher):
    assert sharded(5, 3, hasher).derive_key(PASSWORD) != basic(hasher).derive_key(PASSWORD)


def test_shards_hold_one_share_each(hasher):
    fmt = sharded(5, 3, hasher)
    fmt.derive_key(PASSWORD)
    shards = fmt.shards()
    assert len(shards) == 5
    assert [shard.key_shares for shard in shards] == [[share] for share in fmt.key_shares]
    assert all(shard.recovery_threshold == 3 for shard in shards)


def test_absorbed_shards_recover_key(hasher):
    fmt = sharded(5, 3, hasher)
    key = fmt.derive_key(PASSWORD)
    first, second, third, fourth, _ = fmt.shards()
    first.absorb(third)
    first.absorb(fourth)
    assert first.derive_key(PASSWORD) == key
    second.absorb(fourth)
    with pytest.raises(WalletError, match="not enough keyshares"):
        second.derive_key(PASSWORD)


def test_absorb_rejects_incongruent(hasher):
    with pytest.raises(WalletError, match="not congruent"):
        sharded(5, 3, hasher).absorb(sharded(4, 3, hasher))


def test_duplicate_shares_fail_to_combine(hasher):
    fmt = sharded(5, 3, hasher)
    fmt.derive_key(PASSWORD)
    shard = fmt.shards()[0]
    shard.absorb(fmt.shards()[0])
    shard.absorb(fmt.shards()[0])
    with pytest.raises(WalletError, match="Failed to combine keyshares"):
        shard.derive_key(PASSWORD)


def test_shard_write_read_round_trip(hasher):
    fmt = sharded(5, 3, hasher)
    fmt.derive_key(PASSWORD)
    shard = fmt.shards()[2]
    stream = io.BytesIO()
    shard.write(stream)
    data = stream.getvalue()
    assert len(data) == 35
    assert data[:2] == bytes([5, 3])
    restored = Sharded(0, 0, hasher)
    restored.read(io.BytesIO(data))
    assert restored == shard


def test_shard_write_requires_single_share(hasher):
    fmt = sharded(5, 3, hasher)
    fmt.derive_key(PASSWORD)
    with pytest.raises(WalletError):
        fmt.write(io.BytesIO())


def test_shard_read_short_stream(hasher):
    with pytest.raises(WalletError):
        Sharded(0, 0, hasher).read(io.BytesIO(bytes(10)))