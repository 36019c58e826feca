"""
Digest folding (RFC 2289 §6 and Appendix A).

Every hash step reduces its output to 64 bits before the next step.
"""

from typing import Union

from core.digest import DIGEST_SIZES, Algorithm, GenericDigest, HashAlgorithm, resolve_algorithm
from core.errors import FoldLengthMismatch

OTP_SIZE = 8


def fold_md(raw: bytes) -> bytes:
    """
    XOR-fold ``raw`` onto 8 bytes, byte ``i`` landing on ``i % 8``.

    For a 16-byte MD4/MD5 digest this is ``raw[:8] XOR raw[8:]``.  Longer
    inputs fold every following 8-byte chunk in the same way, and a short
    final chunk behaves as if zero-padded.
    """
    if len(raw) < OTP_SIZE:
        raise FoldLengthMismatch(
            f"Cannot fold {len(raw)} bytes; at least {OTP_SIZE} are required."
        )
    out = bytearray(raw[:OTP_SIZE])
    for i in range(OTP_SIZE, len(raw)):
        out[i % OTP_SIZE] ^= raw[i]
    return bytes(out)


def fold_sha1(raw: bytes) -> bytes:
    """
    Fold a 20-byte SHA1 digest as in RFC 2289 Appendix A.

    Reading the digest as five big-endian words w0..w4, the result is
    ``w0 ^ w2 ^ w4`` followed by ``w1 ^ w3``, each written little-endian.
    """
    if len(raw) != DIGEST_SIZES[Algorithm.SHA1]:
        raise FoldLengthMismatch(f"SHA1 digest must be 20 bytes, got {len(raw)}.")
    folded = fold_md(raw)
    return folded[3::-1] + folded[7:3:-1]


def fold(algorithm: Union[str, HashAlgorithm], raw: bytes) -> bytes:
    """
    Reduce a raw digest to the 8-byte OTP value using the rule for ``algorithm``.

    Names are resolved as in :func:`core.digest.resolve_algorithm`, so
    ``"SHA1"`` folds the same way as ``Algorithm.SHA1``.

    Raises:
        UnsupportedAlgorithm: If ``algorithm`` is a name that is not built in.
        FoldLengthMismatch:   If ``raw`` has the wrong size for a standard
            algorithm, or is shorter than 8 bytes for a generic one.
    """
    alg = resolve_algorithm(algorithm)
    if isinstance(alg, GenericDigest):
        return fold_md(raw)
    if alg is Algorithm.SHA1:
        return fold_sha1(raw)
    expected = DIGEST_SIZES[alg]
    if len(raw) != expected:
        raise FoldLengthMismatch(
            f"{alg.value.upper()} digest must be {expected} bytes, got {len(raw)}."
        )
    return fold_md(raw)
