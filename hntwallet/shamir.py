"""Shamir secret sharing of 32-byte keys over GF(2^8)."""

from __future__ import annotations

import secrets
from functools import reduce
from operator import xor
from typing import Iterable, List

from hntwallet.codec import WalletError

_KEY_LENGTH = 32
_SHARE_LENGTH = _KEY_LENGTH + 1


def _gf_tables() -> tuple[list[int], list[int]]:
    exp: list[int] = []
    log = [0] * 256
    value = 1
    for power in range(255):
        exp.append(value)
        log[value] = power
        value ^= value << 1
        if value & 0x100:
            value ^= 0x11B
    return exp + exp, log


_EXP, _LOG = _gf_tables()


def _mul(a: int, b: int) -> int:
    if a == 0 or b == 0:
        return 0
    return _EXP[_LOG[a] + _LOG[b]]


def _div(a: int, b: int) -> int:
    if a == 0:
        return 0
    return _EXP[_LOG[a] - _LOG[b] + 255]


def _evaluate(coefficients: bytes, x: int) -> int:
    return reduce(lambda acc, coefficient: _mul(acc, x) ^ coefficient, reversed(coefficients), 0)


def create_keyshares(key: bytes, count: int, threshold: int) -> List[bytes]:
    """Split a 32-byte key into ``count`` shares, any ``threshold`` of which recover it.

    Each share is 33 bytes: its index followed by 32 share bytes.
    """
    key = bytes(key)
    if len(key) != _KEY_LENGTH:
        raise WalletError(f"key must be {_KEY_LENGTH} bytes")
    if not 1 <= count <= 255:
        raise WalletError("share count must be between 1 and 255")
    if not 1 <= threshold <= count:
        raise WalletError("threshold must be between 1 and the share count")
    polynomials = [bytes([secret]) + secrets.token_bytes(threshold - 1) for secret in key]
    return [
        bytes([x]) + bytes(_evaluate(poly, x) for poly in polynomials)
        for x in range(1, count + 1)
    ]


def combine_keyshares(shares: Iterable[bytes]) -> bytes:
    """Recover the 32-byte key from a set of shares."""
    shares = [bytes(share) for share in shares]
    if not shares:
        raise WalletError("no keyshares given")
    if any(len(share) != _SHARE_LENGTH for share in shares):
        raise WalletError(f"keyshares must be {_SHARE_LENGTH} bytes")
    xs = [share[0] for share in shares]
    if 0 in xs:
        raise WalletError("keyshare index must not be zero")
    if len(set(xs)) != len(xs):
        raise WalletError("duplicate keyshares")

    bases = []
    for xj in xs:
        basis = 1
        for xm in xs:
            if xm != xj:
                basis = _mul(basis, _div(xm, xm ^ xj))
        bases.append(basis)

    columns = zip(*(share[1:] for share in shares))
    return bytes(
        reduce(xor, (_mul(y, basis) for y, basis in zip(column, bases)), 0)
        for column in columns
    )