"""Signing and verifying transactions, and finding who pays for them."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

from hntwallet.codec import WalletError
from hntwallet.keypair import Keypair, PublicKey
from hntwallet.transactions import (
    BlockchainTxn,
    BlockchainTxnAddGatewayV1,
    BlockchainTxnAssertLocationV1,
    BlockchainTxnAssertLocationV2,
    BlockchainTxnCreateHtlcV1,
    BlockchainTxnOuiV1,
    BlockchainTxnPaymentV1,
    BlockchainTxnPaymentV2,
    BlockchainTxnPriceOracleV1,
    BlockchainTxnRedeemHtlcV1,
    BlockchainTxnRoutingV1,
    BlockchainTxnSecurityExchangeV1,
    BlockchainTxnStakeValidatorV1,
    BlockchainTxnTokenBurnV1,
    BlockchainTxnTransferHotspotV1,
    BlockchainTxnTransferHotspotV2,
    BlockchainTxnTransferValidatorStakeV1,
    BlockchainTxnUnstakeValidatorV1,
    BlockchainTxnVarsV1,
)

_SIGNATURE_FIELDS: Dict[type, Tuple[str, ...]] = {
    BlockchainTxnPriceOracleV1: ("signature",),
    BlockchainTxnPaymentV1: ("signature",),
    BlockchainTxnPaymentV2: ("signature",),
    BlockchainTxnCreateHtlcV1: ("signature",),
    BlockchainTxnRedeemHtlcV1: ("signature",),
    BlockchainTxnAddGatewayV1: ("owner_signature", "payer_signature", "gateway_signature"),
    BlockchainTxnAssertLocationV1: ("owner_signature", "payer_signature", "gateway_signature"),
    BlockchainTxnAssertLocationV2: ("owner_signature", "payer_signature"),
    BlockchainTxnOuiV1: ("owner_signature", "payer_signature"),
    BlockchainTxnSecurityExchangeV1: ("signature",),
    BlockchainTxnTokenBurnV1: ("signature",),
    BlockchainTxnVarsV1: ("proof", "key_proof", "multi_proofs", "multi_key_proofs"),
    BlockchainTxnTransferHotspotV1: ("buyer_signature", "seller_signature"),
    BlockchainTxnTransferHotspotV2: ("owner_signature",),
    BlockchainTxnStakeValidatorV1: ("owner_signature",),
    BlockchainTxnUnstakeValidatorV1: ("owner_signature",),
    BlockchainTxnTransferValidatorStakeV1: ("old_owner_signature", "new_owner_signature"),
    BlockchainTxnRoutingV1: ("signature",),
}


def _signing_payload(txn: Any) -> bytes:
    try:
        names = _SIGNATURE_FIELDS[type(txn)]
    except KeyError:
        raise WalletError("unsupported transaction") from None
    cleared = {name: type(getattr(txn, name))() for name in names}
    return replace(txn, **cleared).encode()


def sign_txn(txn: Any, keypair: Keypair) -> bytes:
    """Sign a transaction with all its signature fields left empty."""
    return keypair.sign(_signing_payload(txn))


def verify_txn(txn: Any, public_key: PublicKey, signature: bytes) -> None:
    """Check a transaction signature, raising WalletError if it does not hold."""
    public_key.verify(_signing_payload(txn), signature)


_PAYER_FIELDS: Dict[type, str] = {
    BlockchainTxnAddGatewayV1: "payer",
    BlockchainTxnAssertLocationV1: "payer",
    BlockchainTxnCreateHtlcV1: "payer",
    BlockchainTxnPaymentV1: "payer",
    BlockchainTxnPaymentV2: "payer",
    BlockchainTxnOuiV1: "payer",
    BlockchainTxnTokenBurnV1: "payer",
    BlockchainTxnTransferHotspotV1: "buyer",
}


def txn_payer(envelope: BlockchainTxn) -> Optional[PublicKey]:
    """The key that pays for an enveloped transaction, or None when there is none."""
    try:
        name = _PAYER_FIELDS[type(envelope.txn)]
    except KeyError:
        raise WalletError("Unsupported transaction") from None
    data = getattr(envelope.txn, name)
    if not data:
        return None
    try:
        return PublicKey.from_bytes(data)
    except WalletError:
        return None