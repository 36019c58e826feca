"""
One-Time Password generation and verification following RFC 2289.
"""

import hmac
import logging
import re
from typing import Optional, Union

from core.digest import Algorithm, DigestLookup, HashAlgorithm, digest, resolve_algorithm
from core.errors import InvalidCount, InvalidSeed
from core.fold import OTP_SIZE, fold

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────────────────

MAX_SEED_LENGTH = 16
MAX_HASH_COUNT = 10_000     # ceiling for counts taken from untrusted challenges
MIN_PASSPHRASE_LENGTH = 10  # RFC 2289 §6: generators MUST support 10..63
MAX_PASSPHRASE_LENGTH = 63

_SEED_RE = re.compile(r"[A-Za-z0-9]{1,%d}" % MAX_SEED_LENGTH)


# ── Seeds ─────────────────────────────────────────────────────────────────────

def is_valid_seed(seed: str) -> bool:
    """Return True if ``seed`` is 1-16 ASCII alphanumerics."""
    return _SEED_RE.fullmatch(seed) is not None


def validate_seed(seed: str) -> str:
    """
    Check a seed and return it lowercased.

    Raises:
        InvalidSeed: If the seed is empty, longer than 16 characters or
            contains anything other than ASCII letters and digits.
    """
    if not is_valid_seed(seed):
        raise InvalidSeed(
            f"Seed must be 1-{MAX_SEED_LENGTH} alphanumeric characters, got {seed!r}."
        )
    return seed.lower()


# ── Generation ────────────────────────────────────────────────────────────────

def compute_otp(
    algorithm: Union[str, HashAlgorithm],
    passphrase: Union[str, bytes],
    seed: str,
    count: int,
    get_digest: Optional[DigestLookup] = None,
    max_count: Optional[int] = MAX_HASH_COUNT,
) -> bytes:
    """
    Compute the 64-bit OTP value for ``seed``/``passphrase`` at ``count``.

    The seed (lowercased) and passphrase are concatenated, hashed and
    folded; the folded value is then hashed and folded ``count`` more times.

    Args:
        algorithm:  ``Algorithm``, ``GenericDigest`` or a name such as ``"md5"``.
        passphrase: Secret pass phrase; ``str`` is encoded as UTF-8.
        seed:       Challenge seed, case-insensitive.
        count:      Sequence number from the challenge.
        get_digest: Lookup for algorithm names that are not built in.
        max_count:  Largest accepted ``count``; None disables the check.

    Returns:
        The 8-byte OTP value.

    Raises:
        UnsupportedAlgorithm: If the algorithm cannot be resolved.
        InvalidSeed:          If the seed is malformed.
        InvalidCount:         If ``count`` is negative or above ``max_count``.
    """
    alg = resolve_algorithm(algorithm, get_digest)
    seed = validate_seed(seed)
    if count < 0:
        raise InvalidCount(f"Count must be non-negative, got {count}.")
    if max_count is not None and count > max_count:
        raise InvalidCount(f"Count {count} exceeds the maximum of {max_count}.")

    secret = passphrase.encode("utf-8") if isinstance(passphrase, str) else bytes(passphrase)
    if not MIN_PASSPHRASE_LENGTH <= len(secret) <= MAX_PASSPHRASE_LENGTH:
        logger.warning(
            "Pass phrase length %d is outside the interoperable range %d-%d.",
            len(secret),
            MIN_PASSPHRASE_LENGTH,
            MAX_PASSPHRASE_LENGTH,
        )

    logger.debug("Computing OTP: alg=%s seed=%s count=%d", _name(alg), seed, count)
    value = fold(alg, digest(alg, seed.encode("ascii") + secret))
    for _ in range(count):
        value = fold(alg, digest(alg, value))
    return value


def _name(alg: HashAlgorithm) -> str:
    return alg.value if isinstance(alg, Algorithm) else alg.name


# ── Verification ──────────────────────────────────────────────────────────────

def verify_otp(
    candidate: bytes,
    stored: bytes,
    algorithm: Union[str, HashAlgorithm],
    get_digest: Optional[DigestLookup] = None,
) -> bool:
    """
    Check a response against the last accepted OTP (RFC 2289 §8).

    The server keeps the value it accepted at sequence ``n``.  A valid
    response for sequence ``n - 1`` hashes and folds to exactly that value.

    Args:
        candidate: 8-byte value decoded from the client's response.
        stored:    8-byte value last accepted for this user.
        algorithm: Hash algorithm of the user's chain.
        get_digest: Lookup for algorithm names that are not built in.

    Returns:
        True if ``candidate`` is the predecessor of ``stored``.  On success
        the caller should store ``candidate`` in place of ``stored``.
    """
    if len(candidate) != OTP_SIZE or len(stored) != OTP_SIZE:
        return False
    alg = resolve_algorithm(algorithm, get_digest)
    next_value = fold(alg, digest(alg, candidate))
    return hmac.compare_digest(next_value, stored)
