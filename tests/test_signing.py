from dataclasses import replace

import pytest

from hntwallet.codec import WalletError
from hntwallet.keypair import Keypair, KeyType, Network
from hntwallet.signing import sign_txn, txn_payer, verify_txn
from hntwallet.transactions import (
    BlockchainTxn,
    BlockchainTxnAddGatewayV1,
    BlockchainTxnPaymentV1,
    BlockchainTxnTransferHotspotV1,
    BlockchainTxnVarsV1,
    BlockchainVarV1,
    Payment,
)


@pytest.fixture
def payer():
    return Keypair.generate()


@pytest.fixture
def payment(payer):
    payee = Keypair.generate()
    return BlockchainTxnPaymentV1(
        payer=bytes(payer.public_key),
        payee=bytes(payee.public_key),
        amount=10_000,
        nonce=1,
    )


def test_sign_then_verify(payer, payment):
    signature = sign_txn(payment, payer)
    verify_txn(payment, payer.public_key, signature)
    assert len(signature) == 64


def test_signature_ignores_signature_field(payer, payment):
    signature = sign_txn(payment, payer)
    signed = replace(payment, signature=signature)
    assert sign_txn(signed, payer) == signature
    verify_txn(signed, payer.public_key, signature)
    assert payment.signature == b""


def test_verify_rejects_changed_transaction(payer, payment):
    signature = sign_txn(payment, payer)
    with pytest.raises(WalletError):
        verify_txn(replace(payment, amount=10_001), payer.public_key, signature)


def test_verify_rejects_other_key(payer, payment):
    signature = sign_txn(payment, payer)
    with pytest.raises(WalletError):
        verify_txn(payment, Keypair.generate().public_key, signature)


def test_ecc_compact_sign_and_verify(payment):
    keypair = Keypair.generate(KeyType.ECC_COMPACT, Network.MAINNET)
    signature = sign_txn(payment, keypair)
    verify_txn(payment, keypair.public_key, signature)
    with pytest.raises(WalletError):
        verify_txn(replace(payment, nonce=2), keypair.public_key, signature)


def test_vars_proofs_are_not_signed(payer):
    txn = BlockchainTxnVarsV1(
        vars=[BlockchainVarV1(name="a", type="int", value=b"1")], nonce=3
    )
    signature = sign_txn(txn, payer)
    proven = replace(txn, proof=signature, multi_proofs=[signature])
    verify_txn(proven, payer.public_key, signature)
    assert proven.multi_proofs == [signature]


def test_add_gateway_signatures_cleared(payer):
    txn = BlockchainTxnAddGatewayV1(
        owner=bytes(payer.public_key), gateway=bytes(Keypair.generate().public_key)
    )
    signature = sign_txn(txn, payer)
    signed = replace(
        txn, owner_signature=signature, gateway_signature=b"\x02" * 64, payer_signature=b"\x03"
    )
    verify_txn(signed, payer.public_key, signature)
    assert sign_txn(signed, payer) == signature


def test_sign_unsupported_message(payer):
    with pytest.raises(WalletError):
        sign_txn(Payment(amount=1), payer)


def test_payer_of_payment(payer, payment):
    assert txn_payer(BlockchainTxn(payment)) == payer.public_key


def test_payer_absent():
    txn = BlockchainTxnAddGatewayV1(owner=bytes(Keypair.generate().public_key))
    assert txn_payer(BlockchainTxn(txn)) is None


def test_payer_invalid_bytes():
    txn = BlockchainTxnPaymentV1(payer=b"\x01\x02\x03")
    assert txn_payer(BlockchainTxn(txn)) is None


def test_payer_of_transfer_is_buyer(payer):
    txn = BlockchainTxnTransferHotspotV1(
        buyer=bytes(payer.public_key), seller=bytes(Keypair.generate().public_key)
    )
    assert txn_payer(BlockchainTxn(txn)) == payer.public_key


def test_payer_unsupported():
    with pytest.raises(WalletError):
        txn_payer(BlockchainTxn(BlockchainTxnVarsV1()))
    with pytest.raises(WalletError):
        txn_payer(BlockchainTxn())