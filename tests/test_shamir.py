from itertools import combinations

import pytest

from hntwallet.codec import WalletError
from hntwallet.shamir import combine_keyshares, create_keyshares

KEY = bytes(range(32))


def test_share_shape():
    shares = create_keyshares(KEY, 5, 3)
    assert len(shares) == 5
    assert all(len(share) == 33 for share in shares)
    assert [share[0] for share in shares] == [1, 2, 3, 4, 5]


def test_all_shares_recover_key():
    assert combine_keyshares(create_keyshares(KEY, 5, 3)) == KEY


@pytest.mark.parametrize("subset", list(combinations(range(5), 3)))
def test_any_threshold_subset_recovers_key(subset):
    shares = create_keyshares(KEY, 5, 3)
    assert combine_keyshares([shares[i] for i in subset]) == KEY


def test_too_few_shares_do_not_recover_key():
    shares = create_keyshares(KEY, 5, 3)
    assert combine_keyshares(shares[:2]) != KEY


def test_threshold_one_shares_hold_the_key():
    shares = create_keyshares(KEY, 3, 1)
    assert all(share[1:] == KEY for share in shares)


def test_shares_are_randomised():
    runs = [create_keyshares(KEY, 3, 2) for _ in range(5)]
    first_shares = {shares[0] for shares in runs}
    assert len(first_shares) > 1
    assert [combine_keyshares(shares[:2]) for shares in runs] == [KEY] * 5


@pytest.mark.parametrize("key", [b"", bytes(31), bytes(33)])
def test_rejects_bad_key_length(key):
    with pytest.raises(WalletError):
        create_keyshares(key, 3, 2)


@pytest.mark.parametrize("count, threshold", [(3, 4), (3, 0), (0, 0), (256, 2)])
def test_rejects_bad_parameters(count, threshold):
    with pytest.raises(WalletError):
        create_keyshares(KEY, count, threshold)


def test_combine_rejects_empty():
    with pytest.raises(WalletError):
        combine_keyshares([])


def test_combine_rejects_duplicates():
    share = create_keyshares(KEY, 3, 2)[0]
    with pytest.raises(WalletError):
        combine_keyshares([share, share])


def test_combine_rejects_bad_length():
    with pytest.raises(WalletError):
        combine_keyshares([b"\x01" + bytes(31)])


def test_combine_rejects_zero_index():
    with pytest.raises(WalletError):
        combine_keyshares([bytes(33)])