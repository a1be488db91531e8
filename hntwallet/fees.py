"""Transaction fees and staking fees, priced in data credits."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from hntwallet.codec import WalletError
from hntwallet.transactions import (
    BlockchainTxnAddGatewayV1,
    BlockchainTxnAssertLocationV1,
    BlockchainTxnAssertLocationV2,
    BlockchainTxnCreateHtlcV1,
    BlockchainTxnOuiV1,
    BlockchainTxnPaymentV1,
    BlockchainTxnPaymentV2,
    BlockchainTxnRedeemHtlcV1,
    BlockchainTxnRoutingV1,
    BlockchainTxnSecurityExchangeV1,
    BlockchainTxnStakeValidatorV1,
    BlockchainTxnTokenBurnV1,
    BlockchainTxnTransferHotspotV1,
    BlockchainTxnTransferHotspotV2,
    BlockchainTxnTransferValidatorStakeV1,
    BlockchainTxnUnstakeValidatorV1,
    in_envelope,
)

LEGACY_STAKING_FEE = 1
LEGACY_TXN_FEE = 0

TXN_FEE_SIGNATURE_SIZE = 64


class StakingMode(Enum):
    """How a hotspot takes part in the network; decides its staking fees."""

    FULL = "full"
    DATA_ONLY = "dataonly"
    LIGHT = "light"


@dataclass(frozen=True)
class TxnFeeConfig:
    """Chain variables that govern transaction and staking fees."""

    txn_fees: bool
    txn_fee_multiplier: int
    staking_fee_txn_oui_v1: int
    staking_fee_txn_oui_v1_per_address: int
    staking_fee_txn_add_gateway_v1: int = 4_000_000
    staking_fee_txn_add_dataonly_gateway_v1: int = 1_000_000
    staking_fee_txn_add_light_gateway_v1: int = 4_000_000
    staking_fee_txn_assert_location_v1: int = 1_000_000
    staking_fee_txn_assert_location_dataonly_gateway_v1: int = 500_000
    staking_fee_txn_assert_location_light_gateway_v1: int = 1_000_000

    @classmethod
    def legacy(cls) -> TxnFeeConfig:
        """Fees as they were before transaction fees were switched on."""
        return cls(
            txn_fees=False,
            txn_fee_multiplier=0,
            staking_fee_txn_oui_v1=LEGACY_STAKING_FEE,
            staking_fee_txn_oui_v1_per_address=0,
            staking_fee_txn_add_gateway_v1=LEGACY_STAKING_FEE,
            staking_fee_txn_add_dataonly_gateway_v1=LEGACY_STAKING_FEE,
            staking_fee_txn_add_light_gateway_v1=LEGACY_STAKING_FEE,
            staking_fee_txn_assert_location_v1=LEGACY_STAKING_FEE,
            staking_fee_txn_assert_location_dataonly_gateway_v1=LEGACY_STAKING_FEE,
            staking_fee_txn_assert_location_light_gateway_v1=LEGACY_STAKING_FEE,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TxnFeeConfig:
        """Build a config from chain variables; unknown keys are ignored."""
        names = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {k: v for k, v in data.items() if k in names}
        try:
            return cls(**values)
        except TypeError as err:
            raise WalletError(f"invalid fee configuration: {err}") from err

    def dc_payload_size(self) -> int:
        """Number of payload bytes one data credit pays for."""
        return 24 if self.txn_fees else 1


def calculate_txn_fee(payload_size: int, config: TxnFeeConfig) -> int:
    """Data credits needed for a payload, before the fee multiplier."""
    dc_payload_size = config.dc_payload_size()
    if payload_size <= dc_payload_size:
        return 1
    return -(-payload_size // dc_payload_size)


# Signature fields to fill with placeholder bytes, and whether the
# transaction has an optional payer whose signature follows the payer field.
_FEE_SPECS: Dict[type, Tuple[Tuple[str, ...], bool]] = {
    BlockchainTxnPaymentV1: (("signature",), False),
    BlockchainTxnPaymentV2: (("signature",), False),
    BlockchainTxnCreateHtlcV1: (("signature",), False),
    BlockchainTxnRedeemHtlcV1: (("signature",), False),
    BlockchainTxnSecurityExchangeV1: (("signature",), False),
    BlockchainTxnTokenBurnV1: (("signature",), False),
    BlockchainTxnAddGatewayV1: (("owner_signature", "gateway_signature"), True),
    BlockchainTxnAssertLocationV1: (("owner_signature", "gateway_signature"), True),
    BlockchainTxnAssertLocationV2: (("owner_signature",), True),
    BlockchainTxnOuiV1: (("owner_signature",), True),
    BlockchainTxnTransferHotspotV1: (("buyer_signature", "seller_signature"), False),
    BlockchainTxnTransferHotspotV2: (("owner_signature",), False),
    BlockchainTxnStakeValidatorV1: (("owner_signature",), False),
    BlockchainTxnUnstakeValidatorV1: (("owner_signature",), False),
    BlockchainTxnTransferValidatorStakeV1: (
        ("old_owner_signature", "new_owner_signature"),
        False,
    ),
    BlockchainTxnRoutingV1: (("signature",), False),
}


def txn_fee(txn: Any, config: TxnFeeConfig) -> int:
    """Transaction fee in data credits for a transaction once it is signed."""
    try:
        signature_fields, has_payer = _FEE_SPECS[type(txn)]
    except KeyError:
        raise WalletError("unsupported transaction") from None
    placeholder = bytes(TXN_FEE_SIGNATURE_SIZE)
    changes: Dict[str, Any] = {"fee": 0}
    changes.update({name: placeholder for name in signature_fields})
    if has_payer:
        changes["payer_signature"] = placeholder if txn.payer else b""
    sized = replace(txn, **changes)
    payload_size = len(in_envelope(sized).encode())
    return calculate_txn_fee(payload_size, config) * config.txn_fee_multiplier


_MODE_FEE_FIELDS: Dict[type, Dict[StakingMode, str]] = {
    BlockchainTxnAddGatewayV1: {
        StakingMode.FULL: "staking_fee_txn_add_gateway_v1",
        StakingMode.DATA_ONLY: "staking_fee_txn_add_dataonly_gateway_v1",
        StakingMode.LIGHT: "staking_fee_txn_add_light_gateway_v1",
    },
    BlockchainTxnAssertLocationV2: {
        StakingMode.FULL: "staking_fee_txn_assert_location_v1",
        StakingMode.DATA_ONLY: "staking_fee_txn_assert_location_dataonly_gateway_v1",
        StakingMode.LIGHT: "staking_fee_txn_assert_location_light_gateway_v1",
    },
}


def txn_mode_staking_fee(txn: Any, mode: StakingMode, config: TxnFeeConfig) -> int:
    """Staking fee for a hotspot transaction in the given staking mode."""
    try:
        by_mode = _MODE_FEE_FIELDS[type(txn)]
    except KeyError:
        raise WalletError("unsupported transaction") from None
    return getattr(config, by_mode[StakingMode(mode)])


def txn_staking_fee(txn: Any, config: TxnFeeConfig) -> int:
    """Staking fee in data credits for a transaction."""
    if type(txn) in _MODE_FEE_FIELDS:
        return txn_mode_staking_fee(txn, StakingMode.FULL, config)
    if isinstance(txn, BlockchainTxnAssertLocationV1):
        return config.staking_fee_txn_assert_location_v1
    if isinstance(txn, BlockchainTxnOuiV1):
        return (
            config.staking_fee_txn_oui_v1
            + txn.requested_subnet_size * config.staking_fee_txn_oui_v1_per_address
        )
    if isinstance(txn, BlockchainTxnRoutingV1):
        if txn.request_subnet is None:
            return 0
        return txn.request_subnet * config.staking_fee_txn_oui_v1_per_address
    raise WalletError("unsupported transaction")