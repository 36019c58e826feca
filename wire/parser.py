"""
Parse and build OTP challenge and response strings.

Reference: RFC 2289 (challenge format) and RFC 2243 (extended responses).

Challenge::

    otp-md5 499 ke1234 ext

Responses::

    hex:5bf0 75d9 959d 036f
    word:BOND FOGY DRAB NE RISE MART
    init-hex:5bf0 75d9 959d 036f:md5 499 ke1235:3712 dcb4 aa53 16c1
    init-word:BOND FOGY DRAB NE RISE MART:md5 499 ke1235:RED HERD NOW BEAN PA BURG

Parsing only checks the grammar.  Hex values are decoded, but word phrases
are kept as text until :meth:`WordPhrase.to_bytes` is called.
"""

import re
from dataclasses import dataclass
from typing import Sequence, Tuple, Type, Union

from core.digest import Algorithm, HashAlgorithm
from core.errors import MalformedChallenge, MalformedInit, MalformedResponse
from core.otp import is_valid_seed
from core.utils import decode_hex, format_hex
from core.words import WORD_COUNT, decode_words, encode_words

# ── Constants ────────────────────────────────────────────────────────────────

MAX_CHALLENGE_LENGTH = 128
MAX_RESPONSE_LENGTH = 256

CHALLENGE_PREFIX = "otp-"
EXT_TOKEN = "ext"

_ALG_RE = re.compile(r"[a-z0-9_-]+")
_DIGITS_RE = re.compile(r"[0-9]+")


# ── Data model ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Challenge:
    """Parsed representation of an ``otp-<alg> <count> <seed> [ext]`` string."""

    hash_alg: str           # lowercased, e.g. "md5"
    hash_count: int         # sequence number
    seed: str               # as received; hashing lowercases it
    has_ext_flag: bool = False
    extensions: Tuple[str, ...] = ()    # ids listed after "ext,"


@dataclass(frozen=True)
class RawHex:
    """An OTP value given in hex."""

    value: bytes

    def to_bytes(self) -> bytes:
        return self.value


@dataclass(frozen=True)
class WordPhrase:
    """An OTP value given as six dictionary words (not yet decoded)."""

    text: str

    @property
    def words(self) -> Tuple[str, ...]:
        return tuple(self.text.split())

    def to_bytes(self) -> bytes:
        """
        Decode the phrase.

        Raises:
            UnknownWord:      If a word is not in the dictionary.
            ChecksumMismatch: If the checksum bits are wrong.
        """
        return decode_words(self.words)


HexOrWords = Union[RawHex, WordPhrase]


@dataclass(frozen=True)
class PlainResponse:
    """A ``hex:`` or ``word:`` response."""

    otp: HexOrWords


@dataclass(frozen=True)
class InitResponse:
    """An ``init-hex:`` / ``init-word:`` response that re-initialises the chain."""

    current: HexOrWords
    new: HexOrWords
    new_alg: str
    new_seq_num: int
    new_seed: str


Response = Union[PlainResponse, InitResponse]


# ── Challenge ─────────────────────────────────────────────────────────────────

def parse_challenge(text: str) -> Challenge:
    """
    Parse and validate an OTP challenge.

    Args:
        text: Challenge string, e.g. ``"otp-md5 499 ke1234 ext"``.

    Returns:
        Populated :class:`Challenge`.

    Raises:
        MalformedChallenge: If any part of the challenge is invalid.
    """
    text = text.strip()
    if len(text) > MAX_CHALLENGE_LENGTH:
        raise MalformedChallenge(
            f"Challenge is longer than {MAX_CHALLENGE_LENGTH} characters."
        )

    tokens = text.split()
    if len(tokens) not in (3, 4):
        raise MalformedChallenge(
            f"Expected 'otp-<alg> <count> <seed> [ext]', got {len(tokens)} token(s)."
        )

    head = tokens[0].lower()
    if not head.startswith(CHALLENGE_PREFIX):
        raise MalformedChallenge(f"Challenge must start with '{CHALLENGE_PREFIX}'.")
    hash_alg = head[len(CHALLENGE_PREFIX):]
    if not _ALG_RE.fullmatch(hash_alg):
        raise MalformedChallenge(f"Invalid hash algorithm name '{hash_alg}'.")

    if not _DIGITS_RE.fullmatch(tokens[1]):
        raise MalformedChallenge(f"Sequence number '{tokens[1]}' is not a decimal number.")
    hash_count = int(tokens[1])

    seed = tokens[2]
    if not is_valid_seed(seed):
        raise MalformedChallenge(f"Seed '{seed}' must be 1-16 alphanumeric characters.")

    has_ext_flag = False
    extensions: Tuple[str, ...] = ()
    if len(tokens) == 4:
        ext_parts = tokens[3].lower().split(",")
        if ext_parts[0] != EXT_TOKEN:
            raise MalformedChallenge(f"Unexpected trailing token '{tokens[3]}'.")
        has_ext_flag = True
        extensions = tuple(p for p in ext_parts[1:] if p)

    return Challenge(
        hash_alg=hash_alg,
        hash_count=hash_count,
        seed=seed,
        has_ext_flag=has_ext_flag,
        extensions=extensions,
    )


def build_challenge(
    hash_alg: Union[str, HashAlgorithm],
    hash_count: int,
    seed: str,
    ext: bool = False,
    extensions: Sequence[str] = (),
) -> str:
    """Build a challenge string from individual parameters."""
    text = f"{CHALLENGE_PREFIX}{_alg_name(hash_alg)} {hash_count} {seed}"
    if ext or extensions:
        text += " " + ",".join([EXT_TOKEN, *extensions])
    return text


# ── Responses ─────────────────────────────────────────────────────────────────

def parse_response(text: str) -> Response:
    """
    Parse any OTP response.

    Args:
        text: ``hex:``, ``word:``, ``init-hex:`` or ``init-word:`` string.

    Returns:
        :class:`PlainResponse` or :class:`InitResponse`.

    Raises:
        MalformedResponse: If a plain response is invalid.
        MalformedInit:     If an init response is invalid.
    """
    kind, body = _split_type(text, MalformedResponse)
    if kind == "hex":
        return PlainResponse(_parse_hex(body, MalformedResponse))
    if kind == "word":
        return PlainResponse(_parse_words(body, MalformedResponse))
    if kind in ("init-hex", "init-word"):
        return _parse_init(kind, body)
    raise MalformedResponse(f"Unknown response type '{kind}'.")


def parse_init(text: str) -> InitResponse:
    """
    Parse an ``init-hex:`` or ``init-word:`` response.

    Raises:
        MalformedInit: If the string is not a valid init response.
    """
    kind, body = _split_type(text, MalformedInit)
    if kind not in ("init-hex", "init-word"):
        raise MalformedInit(f"Expected an init-hex or init-word response, got '{kind}'.")
    return _parse_init(kind, body)


def build_response(value: bytes, words: bool = False) -> str:
    """Build a ``hex:`` or ``word:`` response for an 8-byte OTP value."""
    if words:
        return "word:" + " ".join(encode_words(value))
    return "hex:" + format_hex(value)


def build_init_response(
    current: bytes,
    new: bytes,
    new_alg: Union[str, HashAlgorithm],
    new_seq_num: int,
    new_seed: str,
    words: bool = False,
) -> str:
    """Build an init response replacing the chain with ``new_alg``/``new_seq_num``/``new_seed``."""
    encode = (lambda v: " ".join(encode_words(v))) if words else format_hex
    kind = "init-word" if words else "init-hex"
    params = f"{_alg_name(new_alg)} {new_seq_num} {new_seed}"
    return f"{kind}:{encode(current)}:{params}:{encode(new)}"


# ── Internals ─────────────────────────────────────────────────────────────────

def _split_type(text: str, error: Type[MalformedResponse]) -> Tuple[str, str]:
    text = text.strip()
    if len(text) > MAX_RESPONSE_LENGTH:
        raise error(f"Response is longer than {MAX_RESPONSE_LENGTH} characters.")
    kind, sep, body = text.partition(":")
    if not sep:
        raise error("Response has no 'type:' prefix.")
    return kind.strip().lower(), body


def _parse_hex(body: str, error: Type[MalformedResponse]) -> RawHex:
    try:
        return RawHex(decode_hex(body))
    except ValueError as exc:
        raise error(str(exc)) from exc


def _parse_words(body: str, error: Type[MalformedResponse]) -> WordPhrase:
    words = body.split()
    if len(words) != WORD_COUNT:
        raise error(f"Expected {WORD_COUNT} words, got {len(words)}.")
    return WordPhrase(" ".join(words))


def _parse_init(kind: str, body: str) -> InitResponse:
    sections = body.split(":")
    if len(sections) != 3:
        raise MalformedInit(
            "Expected '<current>:<alg> <seq> <seed>:<new>', "
            f"got {len(sections)} section(s)."
        )
    current_text, params_text, new_text = sections

    params = params_text.split()
    if len(params) != 3:
        raise MalformedInit(f"Expected '<alg> <seq> <seed>', got {params_text.strip()!r}.")
    new_alg, seq, new_seed = params
    new_alg = new_alg.lower()
    if not _ALG_RE.fullmatch(new_alg):
        raise MalformedInit(f"Invalid hash algorithm name '{new_alg}'.")
    if not _DIGITS_RE.fullmatch(seq):
        raise MalformedInit(f"Sequence number '{seq}' is not a decimal number.")
    if not is_valid_seed(new_seed):
        raise MalformedInit(f"Seed '{new_seed}' must be 1-16 alphanumeric characters.")

    parse_half = _parse_hex if kind == "init-hex" else _parse_words
    return InitResponse(
        current=parse_half(current_text, MalformedInit),
        new=parse_half(new_text, MalformedInit),
        new_alg=new_alg,
        new_seq_num=int(seq),
        new_seed=new_seed,
    )


def _alg_name(alg: Union[str, HashAlgorithm]) -> str:
    if isinstance(alg, Algorithm):
        return alg.value
    if isinstance(alg, str):
        return alg.lower()
    return alg.name
