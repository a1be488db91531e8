import pytest

from hntwallet.codec import WalletError
from hntwallet.protobuf import decode_varint, encode_field, encode_varint, iter_fields


def test_varint_known_value():
    assert encode_varint(300) == b"\xac\x02"


@pytest.mark.parametrize("value", [0, 1, 127, 128, 300, 2**32, 2**64 - 1])
def test_varint_roundtrip(value):
    encoded = encode_varint(value)
    assert decode_varint(encoded, 0) == (value, len(encoded))


def test_negative_varint_uses_twos_complement():
    assert encode_varint(-1) == encode_varint(2**64 - 1)


def test_varint_out_of_range():
    with pytest.raises(ValueError):
        encode_varint(2**64)


def test_decode_varint_offset():
    data = b"\xff" + encode_varint(300)
    assert decode_varint(data, 1) == (300, 3)


def test_truncated_varint():
    with pytest.raises(WalletError):
        decode_varint(b"\x80", 0)


def test_encode_int_field():
    assert encode_field(1, 150) == b"\x08\x96\x01"


def test_encode_string_field():
    assert encode_field(2, "testing") == b"\x12\x07testing"


def test_iter_fields_roundtrip():
    data = encode_field(1, 150) + encode_field(2, b"abc") + encode_field(3, True)
    assert list(iter_fields(data)) == [(1, 0, 150), (2, 2, b"abc"), (3, 0, 1)]


def test_iter_fields_truncated():
    data = encode_field(2, b"abcdef")[:-2]
    with pytest.raises(WalletError):
        list(iter_fields(data))


def test_iter_fields_rejects_field_zero():
    with pytest.raises(WalletError):
        list(iter_fields(b"\x00\x01"))