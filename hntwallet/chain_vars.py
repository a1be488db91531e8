"""Building chain-variable transactions from command-line style settings."""

from __future__ import annotations

import json
from itertools import groupby
from typing import Any, Iterable, Mapping, Optional

from hntwallet.codec import WalletError
from hntwallet.keypair import PublicKey
from hntwallet.transactions import BlockchainTxnVarsV1, BlockchainVarV1

_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1
_U64_LIMIT = 1 << 64
_U32_MAX = (1 << 32) - 1


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid JSON constant {name}")


def _float_text(value: float) -> str:
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, exponent = text.split("e")
    if mantissa.endswith(".0"):
        mantissa = mantissa[:-2]
    return f"{mantissa}e{int(exponent)}"


def parse_var_set(text: str) -> BlockchainVarV1:
    """Parse ``name=value`` where the value is JSON, typing the variable by its value."""
    pos = text.find("=")
    if pos < 0:
        raise WalletError(f"invalid KEY=value: missing `=`  in `{text}`")
    name = text[:pos]
    try:
        value = json.loads(text[pos + 1 :], parse_constant=_reject_constant)
    except ValueError as err:
        raise WalletError(f"invalid value in `{text}`: {err}") from err

    if isinstance(value, int) and not isinstance(value, bool):
        if _I64_MIN <= value <= _I64_MAX:
            return BlockchainVarV1(name=name, type="int", value=str(value).encode())
        if not 0 <= value < _U64_LIMIT:
            value = float(value)
    if isinstance(value, float):
        return BlockchainVarV1(name=name, type="float", value=_float_text(value).encode())
    if isinstance(value, str):
        return BlockchainVarV1(name=name, type="string", value=value.encode("utf-8"))
    return BlockchainVarV1(name=name, type="atom", value=text.encode("utf-8"))


def _next_nonce(current_vars: Mapping[str, Any]) -> int:
    if "nonce" not in current_vars:
        return 0
    current = current_vars["nonce"]
    if isinstance(current, bool) or not isinstance(current, int) or not 0 <= current < _U64_LIMIT:
        current = 0
    if current + 1 > _U32_MAX:
        raise WalletError(f"nonce {current} does not fit in 32 bits")
    return current + 1


def build_vars_txn(
    sets: Iterable[BlockchainVarV1],
    unsets: Iterable[str],
    cancels: Iterable[str],
    keys: Iterable[PublicKey],
    nonce: Optional[int],
    current_vars: Mapping[str, Any],
) -> BlockchainTxnVarsV1:
    """A chain-variable transaction; without a nonce, one past the chain's current nonce."""
    return BlockchainTxnVarsV1(
        vars=list(sets),
        nonce=_next_nonce(current_vars) if nonce is None else nonce,
        unsets=[name.encode("utf-8") for name in unsets],
        cancels=[name.encode("utf-8") for name in cancels],
        multi_keys=[key for key, _ in groupby(bytes(k) for k in keys)],
    )