"""Tests for core.words and core.dictionary."""

import pytest

from core.dictionary import DICTIONARY_SIZE, STANDARD_DICTIONARY, WORD_INDEX
from core.errors import ChecksumMismatch, MalformedResponse, UnknownWord
from core.words import checksum, decode_words, encode_words, format_words


def _words_from_stream(stream: int) -> list:
    return [STANDARD_DICTIONARY[(stream >> s) & 0x7FF] for s in range(55, -1, -11)]


# ── Dictionary ────────────────────────────────────────────────────────────────

def test_dictionary_shape() -> None:
    assert len(STANDARD_DICTIONARY) == DICTIONARY_SIZE
    assert len(WORD_INDEX) == DICTIONARY_SIZE
    assert all(1 <= len(w) <= 4 and w.isupper() for w in STANDARD_DICTIONARY)


def test_dictionary_order_anchors() -> None:
    assert STANDARD_DICTIONARY[0] == "A"
    assert STANDARD_DICTIONARY[571] == "ABED"   # first four-letter word
    assert STANDARD_DICTIONARY[2047] == "YOKE"
    assert WORD_INDEX["ROME"] == STANDARD_DICTIONARY.index("ROME")


# ── Checksum ──────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "hex_value,expected",
    [
        ("0000000000000000", 0),
        ("0000000000000001", 1),
        ("0000000000000003", 3),
        ("0000000000000004", 1),
        ("c000000000000000", 3),
        ("ffffffffffffffff", 0),   # 32 * 3 = 96
    ],
)
def test_checksum(hex_value: str, expected: int) -> None:
    assert checksum(bytes.fromhex(hex_value)) == expected


def test_checksum_rejects_wrong_size() -> None:
    with pytest.raises(ValueError):
        checksum(b"\x00" * 9)


# ── Encoding ──────────────────────────────────────────────────────────────────

def test_encode_zero() -> None:
    assert encode_words(bytes(8)) == ("A",) * 6


def test_encode_all_ones() -> None:
    # Last group holds the final 9 value bits followed by checksum 00
    assert encode_words(b"\xff" * 8) == ("YOKE",) * 5 + ("YEAR",)


def test_encode_rfc_vector() -> None:
    value = bytes.fromhex("D1854218EBBB0B51")
    assert encode_words(value) == ("ROME", "MUG", "FRED", "SCAN", "LIVE", "LACE")
    assert format_words(value) == "ROME MUG FRED SCAN LIVE LACE"


def test_encode_rejects_wrong_size() -> None:
    with pytest.raises(ValueError):
        encode_words(b"\x01\x02")


# ── Decoding ──────────────────────────────────────────────────────────────────

@pytest.mark.parametrize(
    "hex_value",
    ["0000000000000000", "ffffffffffffffff", "5bf075d9959d036f", "8000000000000001"],
)
def test_decode_inverts_encode(hex_value: str) -> None:
    value = bytes.fromhex(hex_value)
    assert decode_words(encode_words(value)) == value


def test_decode_is_case_insensitive() -> None:
    value = bytes.fromhex("4F296A74FE1567EC")
    assert decode_words("aura Aloe hUrL wing berg WAIT") == value
    assert decode_words(["aura", "aloe", "hurl", "wing", "berg", "wait"]) == value


def test_decode_unknown_word() -> None:
    with pytest.raises(UnknownWord) as excinfo:
        decode_words("ROME MUG FRED SCAN LIVE XYZZY")
    assert excinfo.value.word == "XYZZY"
    assert excinfo.value.position == 5


def test_decode_no_prefix_matching() -> None:
    # "ROM" is not a word even though "ROME" is
    with pytest.raises(UnknownWord):
        decode_words("ROM MUG FRED SCAN LIVE LACE")


@pytest.mark.parametrize("lookalike", ["LıVE", "lıve", "ſO", "ﬁb"])
def test_decode_rejects_non_ascii_lookalikes(lookalike: str) -> None:
    # Unicode upper-casing would turn these into LIVE, SO and FIB
    with pytest.raises(UnknownWord) as excinfo:
        decode_words(["ROME", "MUG", "FRED", "SCAN", lookalike, "LACE"])
    assert excinfo.value.position == 4


def test_decode_bad_checksum_bits() -> None:
    with pytest.raises(ChecksumMismatch):
        decode_words("A A A A A ABE")


def test_decode_flipped_value_bit() -> None:
    with pytest.raises(ChecksumMismatch):
        decode_words("ABE A A A A A")


def test_every_single_value_bit_flip_is_detected() -> None:
    value = bytes.fromhex("D1854218EBBB0B51")
    stream = (int.from_bytes(value, "big") << 2) | checksum(value)
    for bit in range(2, 66):
        with pytest.raises(ChecksumMismatch):
            decode_words(_words_from_stream(stream ^ (1 << bit)))


@pytest.mark.parametrize("phrase", ["ROME MUG FRED SCAN LIVE", "A A A A A A A", ""])
def test_decode_wrong_word_count(phrase: str) -> None:
    with pytest.raises(MalformedResponse, match="6 words"):
        decode_words(phrase)
