"""JSON views of chain-variable transactions."""

from __future__ import annotations

import math
import re
from typing import Any, Dict, List, Optional

from hntwallet.codec import WalletError, to_b64_url
from hntwallet.keypair import PublicKey
from hntwallet.transactions import BlockchainTxnVarsV1, BlockchainVarV1

_I64_MIN = -(1 << 63)
_I64_MAX = (1 << 63) - 1
_INT_TEXT = re.compile(r"[+-]?[0-9]+")


def maybe_b58(data: bytes) -> Optional[str]:
    """The base58 form of a public key, or None for empty data."""
    if not data:
        return None
    return str(PublicKey.from_bytes(data))


def maybe_b64_url(data: bytes) -> Optional[str]:
    """URL-safe base64 of the data, or None for empty data."""
    if not data:
        return None
    return to_b64_url(data)


def _utf8(data: bytes) -> str:
    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError as err:
        raise WalletError(f"invalid utf-8: {err}") from err


def _parse_int(text: str) -> int:
    if not _INT_TEXT.fullmatch(text):
        raise WalletError(f"invalid integer {text!r}")
    value = int(text)
    if not _I64_MIN <= value <= _I64_MAX:
        raise WalletError(f"integer {text!r} does not fit in 64 bits")
    return value


def _parse_float(text: str) -> Optional[float]:
    if not text or text != text.strip() or "_" in text:
        raise WalletError(f"invalid float {text!r}")
    try:
        value = float(text)
    except ValueError as err:
        raise WalletError(f"invalid float {text!r}") from err
    # Non-finite numbers have no JSON form and become null.
    return value if math.isfinite(value) else None


def var_to_json(var: BlockchainVarV1) -> Dict[str, Any]:
    """A chain variable as a JSON object with its value decoded by type."""
    text = _utf8(var.value) if var.type in ("int", "float", "string", "atom") else None
    if var.type == "int":
        value: Any = _parse_int(text)
    elif var.type == "float":
        value = _parse_float(text)
    elif var.type in ("string", "atom"):
        value = text
    else:
        raise WalletError(f"Invalid variable {var!r}")
    return {"name": var.name, "type": var.type, "value": value}


def _strings(entries: List[bytes]) -> List[str]:
    return [_utf8(entry) for entry in entries]


def _b58s(entries: List[bytes]) -> List[str]:
    return [str(PublicKey.from_bytes(entry)) for entry in entries]


def _b64_urls(entries: List[bytes]) -> List[str]:
    return [to_b64_url(entry) for entry in entries]


def vars_txn_to_json(txn: BlockchainTxnVarsV1) -> Dict[str, Any]:
    """A chain-variable transaction as a JSON object."""
    return {
        "type": "vars_v1",
        "version_predicate": txn.version_predicate,
        "nonce": txn.nonce,
        "proof": maybe_b64_url(txn.proof),
        "master_key": maybe_b58(txn.master_key),
        "key_proof": maybe_b64_url(txn.key_proof),
        "vars": [var_to_json(var) for var in txn.vars],
        "unsets": _strings(txn.unsets),
        "cancels": _strings(txn.cancels),
        "multi_keys": _b58s(txn.multi_keys),
        "multi_proofs": _b64_urls(txn.multi_proofs),
        "multi_key_proofs": _b64_urls(txn.multi_key_proofs),
    }