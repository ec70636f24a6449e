import logging

import pytest
from web3 import Web3

from catena.encoding import decode_text, normalize_hash, prep_arg, prep_bytes, prep_int
from catena.errors import InvalidArgumentType


def test_short_string_pads_to_width_and_decodes_back():
    encoded = prep_bytes("TEST ORG", 32, "organization")
    assert len(encoded) == 32
    assert encoded.startswith(b"TEST ORG")
    assert decode_text(encoded) == "TEST ORG"


def test_long_string_truncates_to_exact_width_with_warning(caplog):
    value = "A VERY LONG COMMENT THAT DOES NOT FIT"
    with caplog.at_level(logging.WARNING, logger="catena"):
        encoded = prep_bytes(value, 16, "comment")
    assert encoded == value.encode()[:16]
    assert "Truncating" in caplog.text


def test_truncation_is_deterministic():
    assert prep_bytes("x" * 40, 32) == prep_bytes("x" * 40, 32)


def test_number_is_stringified_before_encoding():
    assert prep_bytes(333770, 16) == b"333770".ljust(16, b"\x00")
    assert prep_bytes(1.5, 16) == b"1.5".ljust(16, b"\x00")


def test_hex_string_is_decoded_not_text_encoded():
    assert prep_bytes("0x4142", 4) == b"AB\x00\x00"


def test_empty_string_is_all_zero_bytes():
    assert prep_bytes("", 16) == bytes(16)
    assert decode_text(bytes(16)) == ""


@pytest.mark.parametrize("value", [{"a": 1}, ["x"], None, True])
def test_bytes_rejects_unsupported_values(value):
    with pytest.raises(InvalidArgumentType) as exc:
        prep_bytes(value, 32, "purpose")
    assert exc.value.name == "purpose"
    assert exc.value.abi_type == "bytes32"


def test_raw_bytes_are_padded_or_truncated():
    raw = bytes.fromhex("ab" * 32)
    assert prep_bytes(raw, 32, "agreementHash") == raw
    assert prep_bytes(bytearray(b"AB"), 4) == b"AB\x00\x00"
    assert prep_bytes(raw, 16) == raw[:16]


def test_bytes_rejects_invalid_hex():
    with pytest.raises(InvalidArgumentType):
        prep_bytes("0xzz", 4)


def test_bytes_rejects_text_that_is_not_utf8():
    # json.load yields lone surrogates from "\ud800" escapes
    with pytest.raises(InvalidArgumentType) as exc:
        prep_bytes("\ud800", 32, "organization")
    assert exc.value.name == "organization"
    assert "UTF-8" in exc.value.message


def test_string_param_rejects_number():
    with pytest.raises(InvalidArgumentType):
        prep_arg("string", 42, "label")
    assert prep_arg("string", "42", "label") == "42"


def test_prep_int_accepts_digit_strings_and_checks_range():
    assert prep_int("42", "uint256") == 42
    assert prep_int(7.0, "uint8") == 7
    with pytest.raises(InvalidArgumentType):
        prep_int(-1, "uint256")
    with pytest.raises(InvalidArgumentType):
        prep_int(256, "uint8")
    with pytest.raises(InvalidArgumentType):
        prep_int(True, "uint256")
    with pytest.raises(InvalidArgumentType):
        prep_int("abc", "uint256")
    assert prep_int(-128, "int8") == -128


def test_address_is_checksummed():
    lower = "0x" + "ab" * 20
    assert prep_arg("address", lower) == Web3.to_checksum_address(lower)
    with pytest.raises(InvalidArgumentType):
        prep_arg("address", "0x1234")


def test_array_elements_are_coerced():
    signatories = ["0x" + "ab" * 20, "0x" + "cd" * 20]
    result = prep_arg("address[]", signatories, "signatories")
    assert result == [Web3.to_checksum_address(a) for a in signatories]
    with pytest.raises(InvalidArgumentType) as exc:
        prep_arg("address[]", ["0x" + "ab" * 20, "nope"], "signatories")
    assert exc.value.name == "signatories[1]"
    with pytest.raises(InvalidArgumentType):
        prep_arg("address[]", "0x" + "ab" * 20)


def test_bool_requires_bool():
    assert prep_arg("bool", False) is False
    with pytest.raises(InvalidArgumentType):
        prep_arg("bool", 0)


def test_normalize_hash():
    raw = bytes.fromhex("ab" * 32)
    assert normalize_hash(raw) == "0x" + "ab" * 32
    assert normalize_hash("0x" + "AB" * 32) == "0x" + "ab" * 32
    assert normalize_hash("cd" * 32) == "0x" + "cd" * 32
    with pytest.raises(InvalidArgumentType):
        normalize_hash("0x1234")


def test_decode_text_accepts_hex_strings():
    assert decode_text("0x" + b"C".hex()) == "C"
    assert decode_text(None) == ""
