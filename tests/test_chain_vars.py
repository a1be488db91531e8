import pytest

from hntwallet.chain_vars import build_vars_txn, parse_var_set
from hntwallet.codec import WalletError
from hntwallet.keypair import Keypair
from hntwallet.transactions import BlockchainVarV1
from hntwallet.txn_json import var_to_json


def test_parse_int():
    assert parse_var_set("foo=1") == BlockchainVarV1(name="foo", type="int", value=b"1")


def test_parse_negative_int():
    assert parse_var_set("foo=-3") == BlockchainVarV1(name="foo", type="int", value=b"-3")


def test_parse_float():
    assert parse_var_set("foo=1.5") == BlockchainVarV1(name="foo", type="float", value=b"1.5")


def test_parse_string():
    assert parse_var_set('foo="bar"') == BlockchainVarV1(name="foo", type="string", value=b"bar")


@pytest.mark.parametrize("text", ["foo=true", "foo=null", "foo=[1]", "foo=18446744073709551615"])
def test_parse_atom_keeps_whole_text(text):
    var = parse_var_set(text)
    assert var.name == "foo"
    assert var.type == "atom"
    assert var.value == text.encode()


@pytest.mark.parametrize("text", ["foo", "foo=bar", "foo=", "foo=NaN"])
def test_parse_errors(text):
    with pytest.raises(WalletError):
        parse_var_set(text)


def test_parse_then_json_round_trip():
    assert var_to_json(parse_var_set("count=42")) == {"name": "count", "type": "int", "value": 42}
    assert var_to_json(parse_var_set('label="hi"'))["value"] == "hi"
    assert var_to_json(parse_var_set("ratio=1.5"))["value"] == 1.5


def test_nonce_from_current_vars():
    txn = build_vars_txn([], [], [], [], None, {"nonce": 4})
    assert txn.nonce == 5


def test_nonce_missing_is_zero():
    assert build_vars_txn([], [], [], [], None, {}).nonce == 0


def test_nonce_not_a_number_counts_as_zero():
    assert build_vars_txn([], [], [], [], None, {"nonce": "x"}).nonce == 1


def test_explicit_nonce_wins():
    assert build_vars_txn([], [], [], [], 7, {"nonce": 4}).nonce == 7


def test_nonce_overflow():
    with pytest.raises(WalletError):
        build_vars_txn([], [], [], [], None, {"nonce": 2**32 - 1})


def test_fields_and_consecutive_key_dedup():
    first = Keypair.generate().public_key
    second = Keypair.generate().public_key
    var = parse_var_set("a=1")
    txn = build_vars_txn([var], ["old"], ["gone"], [first, first, second, first], 1, {})
    assert txn.vars == [var]
    assert txn.unsets == [b"old"]
    assert txn.cancels == [b"gone"]
    assert txn.multi_keys == [bytes(first), bytes(second), bytes(first)]
    assert txn.proof == b""