"""
Six-word encoding of OTP values (RFC 2289 §6, Appendix D dictionary).

The 64-bit value is followed by a 2-bit checksum, and the resulting 66 bits
are split into six 11-bit indices into :data:`STANDARD_DICTIONARY`.
"""

from typing import Sequence, Tuple, Union

from core.dictionary import STANDARD_DICTIONARY, WORD_INDEX
from core.errors import ChecksumMismatch, MalformedResponse, UnknownWord
from core.fold import OTP_SIZE

WORD_COUNT = 6
WORD_BITS = 11
_WORD_MASK = (1 << WORD_BITS) - 1


def checksum(value: bytes) -> int:
    """Sum the thirty-two 2-bit groups of the 64-bit value, modulo 4."""
    n = int.from_bytes(_check_size(value), "big")
    total = 0
    while n:
        total += n & 0b11
        n >>= 2
    return total & 0b11


def encode_words(value: bytes) -> Tuple[str, ...]:
    """
    Encode an 8-byte OTP value as six dictionary words.

    Args:
        value: 8-byte OTP value.

    Returns:
        Six uppercase words, most significant first.
    """
    stream = (int.from_bytes(_check_size(value), "big") << 2) | checksum(value)
    shifts = range(WORD_BITS * (WORD_COUNT - 1), -1, -WORD_BITS)
    return tuple(STANDARD_DICTIONARY[(stream >> s) & _WORD_MASK] for s in shifts)


def decode_words(words: Union[str, Sequence[str]]) -> bytes:
    """
    Decode six dictionary words back to the 8-byte OTP value.

    Args:
        words: Six words, either as a sequence or as one whitespace-separated
               string.  Case is ignored.

    Returns:
        The 8-byte value.

    Raises:
        MalformedResponse: If there are not exactly six words.
        UnknownWord:       If a word is not in the standard dictionary.
        ChecksumMismatch:  If the checksum bits do not match the value.
    """
    if isinstance(words, str):
        words = words.split()
    if len(words) != WORD_COUNT:
        raise MalformedResponse(f"Expected {WORD_COUNT} words, got {len(words)}.")

    stream = 0
    for position, word in enumerate(words):
        # Case folding is ASCII-only; "lıve" must not match "LIVE"
        index = WORD_INDEX.get(word.strip().upper()) if word.isascii() else None
        if index is None:
            raise UnknownWord(word, position)
        stream = (stream << WORD_BITS) | index

    value = (stream >> 2).to_bytes(OTP_SIZE, "big")
    if stream & 0b11 != checksum(value):
        raise ChecksumMismatch("Word phrase checksum does not match its value.")
    return value


def format_words(value: bytes) -> str:
    """Encode ``value`` and join the words with single spaces."""
    return " ".join(encode_words(value))


def _check_size(value: bytes) -> bytes:
    if len(value) != OTP_SIZE:
        raise ValueError(f"OTP value must be {OTP_SIZE} bytes, got {len(value)}.")
    return value
