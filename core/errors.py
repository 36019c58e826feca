"""
Error types raised by the OTP engine, word codec and wire parser.

Every error derives from :class:`OTPError`, itself a ``ValueError``, so
callers that only care about "bad input" can catch ``ValueError``.
"""

from typing import Optional


class OTPError(ValueError):
    """Base class for all OTP failures."""


# ── Hashing ───────────────────────────────────────────────────────────────────

class UnsupportedAlgorithm(OTPError):
    """The hash algorithm name is neither built in nor supplied by the caller."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unsupported hash algorithm '{name}'.")
        self.name = name


class InvalidSeed(OTPError):
    """The seed is empty, too long, or not purely alphanumeric."""


class InvalidCount(OTPError):
    """The iteration count is negative or above the configured ceiling."""


class FoldLengthMismatch(OTPError):
    """A raw digest cannot be folded to 8 bytes."""


# ── Word codec ────────────────────────────────────────────────────────────────

class UnknownWord(OTPError):
    """A word is not in the standard dictionary."""

    def __init__(self, word: str, position: Optional[int] = None) -> None:
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Word '{word}'{where} is not in the standard dictionary.")
        self.word = word
        self.position = position


class ChecksumMismatch(OTPError):
    """The two checksum bits of a word phrase do not match its value."""


# ── Wire grammar ──────────────────────────────────────────────────────────────

class MalformedChallenge(OTPError):
    """Text is not a valid ``otp-<alg> <count> <seed> [ext]`` challenge."""


class MalformedResponse(OTPError):
    """Text is not a valid ``hex:`` or ``word:`` response."""


class MalformedInit(MalformedResponse):
    """Text is not a valid ``init-hex:`` or ``init-word:`` response."""
