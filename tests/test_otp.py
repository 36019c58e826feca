"""Tests for core.otp."""

import logging

import pytest

from core.digest import Algorithm, GenericDigest, digest
from core.errors import InvalidCount, InvalidSeed, UnsupportedAlgorithm
from core.fold import fold
from core.otp import (
    MAX_HASH_COUNT,
    compute_otp,
    is_valid_seed,
    validate_seed,
    verify_otp,
)
from core.words import decode_words, encode_words


# ── RFC 2289 Appendix C test vectors ──────────────────────────────────────────
# (algorithm, passphrase, seed, count, hex, words)

_RFC_VECTORS = [
    ("md4", "This is a test.", "TeSt", 0, "D1854218EBBB0B51", "ROME MUG FRED SCAN LIVE LACE"),
    ("md4", "This is a test.", "TeSt", 1, "63473EF01CD0B444", "CARD SAD MINI RYE COL KIN"),
    ("md4", "This is a test.", "TeSt", 99, "C5E612776E6C237A", "NOTE OUT IBIS SINK NAVE MODE"),
    ("md4", "AbCdEfGhIjK", "alpha1", 0, "50076F47EB1ADE4E", "AWAY SEN ROOK SALT LICE MAP"),
    ("md4", "AbCdEfGhIjK", "alpha1", 1, "65D20D1949B5F7AB", "CHEW GRIM WU HANG BUCK SAID"),
    ("md4", "AbCdEfGhIjK", "alpha1", 99, "D150C82CCE6F62D1", "ROIL FREE COG HUNK WAIT COCA"),
    ("md4", "OTP's are good", "correct", 0, "849C79D4F6F55388", "FOOL STEM DONE TOOL BECK NILE"),
    ("md4", "OTP's are good", "correct", 1, "8C0992FB250847B1", "GIST AMOS MOOT AIDS FOOD SEEM"),
    ("md4", "OTP's are good", "correct", 99, "3F3BF4B4145FD74B", "TAG SLOW NOV MIN WOOL KENO"),
    ("md5", "This is a test.", "TeSt", 0, "9E876134D90499DD", "INCH SEA ANNE LONG AHEM TOUR"),
    ("md5", "This is a test.", "TeSt", 1, "7965E05436F5029F", "EASE OIL FUM CURE AWRY AVIS"),
    ("md5", "This is a test.", "TeSt", 99, "50FE1962C4965880", "BAIL TUFT BITS GANG CHEF THY"),
    ("md5", "AbCdEfGhIjK", "alpha1", 0, "87066DD9644BF206", "FULL PEW DOWN ONCE MORT ARC"),
    ("md5", "AbCdEfGhIjK", "alpha1", 1, "7CD34C1040ADD14B", "FACT HOOF AT FIST SITE KENT"),
    ("md5", "AbCdEfGhIjK", "alpha1", 99, "5AA37A81F212146C", "BODE HOP JAKE STOW JUT RAP"),
    ("md5", "OTP's are good", "correct", 0, "F205753943DE4CF9", "ULAN NEW ARMY FUSE SUIT EYED"),
    ("md5", "OTP's are good", "correct", 1, "DDCDAC956F234937", "SKIM CULT LOB SLAM POE HOWL"),
    ("md5", "OTP's are good", "correct", 99, "B203E28FA525BE47", "LONG IVY JULY AJAR BOND LEE"),
    ("sha1", "This is a test.", "TeSt", 0, "BB9E6AE1979D8FF4", "MILT VARY MAST OK SEES WENT"),
    ("sha1", "This is a test.", "TeSt", 1, "63D936639734385B", "CART OTTO HIVE ODE VAT NUT"),
    ("sha1", "This is a test.", "TeSt", 99, "87FEC7768B73CCF9", "GAFF WAIT SKID GIG SKY EYED"),
    ("sha1", "AbCdEfGhIjK", "alpha1", 0, "AD85F658EBE383C9", "LEST OR HEEL SCOT ROB SUIT"),
    ("sha1", "AbCdEfGhIjK", "alpha1", 1, "D07CE229B5CF119B", "RITE TAKE GELD COST TUNE RECK"),
    ("sha1", "AbCdEfGhIjK", "alpha1", 99, "27BC71035AAF3DC6", "MAY STAR TIN LYON VEDA STAN"),
    ("sha1", "OTP's are good", "correct", 0, "D51F3E99BF8E6F0B", "RUST WELT KICK FELL TAIL FRAU"),
    ("sha1", "OTP's are good", "correct", 1, "82AEB52D943774E4", "FLIT DOSE ALSO MEW DRUM DEFY"),
    ("sha1", "OTP's are good", "correct", 99, "4F296A74FE1567EC", "AURA ALOE HURL WING BERG WAIT"),
]


@pytest.mark.parametrize("alg,passphrase,seed,count,hex_value,words", _RFC_VECTORS)
def test_rfc2289_vectors(
    alg: str, passphrase: str, seed: str, count: int, hex_value: str, words: str
) -> None:
    value = compute_otp(alg, passphrase, seed, count)
    assert value == bytes.fromhex(hex_value), f"{alg} {seed} {count}: got {value.hex()}"
    assert " ".join(encode_words(value)) == words
    assert decode_words(words) == value


def test_zero_count_known_vector() -> None:
    value = compute_otp(Algorithm.MD4, "This is a test.", "TeSt", 0)
    assert value.hex() == "d1854218ebbb0b51"


def test_compute_is_deterministic() -> None:
    a = compute_otp("sha1", "correct horse battery", "seed42", 17)
    b = compute_otp("sha1", "correct horse battery", "seed42", 17)
    assert a == b
    assert len(a) == 8


def test_seed_is_case_insensitive() -> None:
    assert compute_otp("md5", "This is a test.", "TeSt", 3) == compute_otp(
        "md5", "This is a test.", "test", 3
    )


def test_algorithm_name_is_case_insensitive() -> None:
    assert compute_otp("MD5", "This is a test.", "TeSt", 0).hex() == "9e876134d90499dd"


def test_bytes_passphrase_matches_str() -> None:
    assert compute_otp("md5", b"This is a test.", "TeSt", 1) == compute_otp(
        "md5", "This is a test.", "TeSt", 1
    )


def test_each_step_hashes_previous_value() -> None:
    previous = compute_otp("md4", "AbCdEfGhIjK", "alpha1", 4)
    current = compute_otp("md4", "AbCdEfGhIjK", "alpha1", 5)
    assert fold(Algorithm.MD4, digest(Algorithm.MD4, previous)) == current


# ── Pluggable digests ─────────────────────────────────────────────────────────

def test_generic_digest_matches_builtin_for_16_byte_output() -> None:
    wrapped = GenericDigest("mymd5", lambda data: digest(Algorithm.MD5, data))
    assert compute_otp(wrapped, "This is a test.", "TeSt", 99).hex() == "50fe1962c4965880"


def test_generic_digest_via_lookup() -> None:
    from cryptography.hazmat.primitives import hashes

    def lookup(name: str):
        if name == "sha256":
            return GenericDigest.from_hash_algorithm(name, hashes.SHA256())
        return None

    value = compute_otp("sha256", "This is a test.", "TeSt", 10, get_digest=lookup)
    assert len(value) == 8
    assert value == compute_otp("SHA256", "This is a test.", "test", 10, get_digest=lookup)


def test_unknown_algorithm_raises() -> None:
    with pytest.raises(UnsupportedAlgorithm, match="sha256"):
        compute_otp("sha256", "This is a test.", "TeSt", 0)


# ── Validation ────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("seed", ["", "ke 1234", "ke-1234", "a" * 17, "séed"])
def test_invalid_seed_raises(seed: str) -> None:
    assert not is_valid_seed(seed)
    with pytest.raises(InvalidSeed):
        compute_otp("md5", "This is a test.", seed, 0)


def test_validate_seed_lowercases() -> None:
    assert validate_seed("KE1234") == "ke1234"
    assert validate_seed("a" * 16) == "a" * 16


def test_negative_count_raises() -> None:
    with pytest.raises(InvalidCount, match="non-negative"):
        compute_otp("md5", "This is a test.", "TeSt", -1)


def test_count_above_ceiling_raises() -> None:
    with pytest.raises(InvalidCount, match=str(MAX_HASH_COUNT)):
        compute_otp("md5", "This is a test.", "TeSt", MAX_HASH_COUNT + 1)


def test_custom_ceiling() -> None:
    with pytest.raises(InvalidCount):
        compute_otp("md5", "This is a test.", "TeSt", 6, max_count=5)
    assert len(compute_otp("md5", "This is a test.", "TeSt", 6, max_count=None)) == 8


def test_short_passphrase_warns(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="core.otp"):
        compute_otp("md5", "short", "TeSt", 0)
    assert "outside the interoperable range" in caplog.text


def test_normal_passphrase_does_not_warn(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="core.otp"):
        compute_otp("md5", "This is a test.", "TeSt", 0)
    assert caplog.records == []


# ── Verification ──────────────────────────────────────────────────────────────

def test_verify_otp_accepts_predecessor() -> None:
    stored = bytes.fromhex("7965E05436F5029F")      # md5 TeSt count 1
    candidate = bytes.fromhex("9E876134D90499DD")   # md5 TeSt count 0
    assert verify_otp(candidate, stored, "md5")


def test_verify_otp_sha1_chain() -> None:
    stored = compute_otp("sha1", "OTP's are good", "correct", 50)
    candidate = compute_otp("sha1", "OTP's are good", "correct", 49)
    assert verify_otp(candidate, stored, Algorithm.SHA1)


def test_verify_otp_rejects_wrong_value() -> None:
    stored = bytes.fromhex("7965E05436F5029F")
    assert not verify_otp(bytes(8), stored, "md5")


def test_verify_otp_rejects_replay() -> None:
    stored = bytes.fromhex("7965E05436F5029F")
    assert not verify_otp(stored, stored, "md5")


def test_verify_otp_rejects_wrong_length() -> None:
    assert not verify_otp(b"\x00" * 7, bytes(8), "md5")
