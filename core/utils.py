"""
Utility helpers for otpkey.
"""

import re

from core.fold import OTP_SIZE

_HEX_RE = re.compile(r"[0-9A-Fa-f]{%d}" % (OTP_SIZE * 2))
_SPACE_RE = re.compile(r"[ \t]+")


# ── Hex ───────────────────────────────────────────────────────────────────────

def normalize_hex(text: str) -> str:
    """
    Normalise a hex OTP: strip spaces and tabs, lowercase.

    Args:
        text: Raw hex string, e.g. ``"5Bf0 75d9 959d 036f"``.

    Returns:
        16 lowercase hex characters.

    Raises:
        ValueError: If the result is not exactly 16 hex digits.
    """
    compact = _SPACE_RE.sub("", text.strip())
    if not _HEX_RE.fullmatch(compact):
        raise ValueError(
            f"Hex OTP must be {OTP_SIZE * 2} hexadecimal digits, got {compact!r}."
        )
    return compact.lower()


def decode_hex(text: str) -> bytes:
    """Decode a (possibly grouped) hex OTP to its 8 raw bytes."""
    return bytes.fromhex(normalize_hex(text))


def format_hex(value: bytes, group: int = 4) -> str:
    """
    Format an OTP value as lowercase hex, grouped for readability.

    Example::

        >>> format_hex(bytes.fromhex("5bf075d9959d036f"))
        "5bf0 75d9 959d 036f"

    Args:
        value: 8-byte OTP value.
        group: Hex digits per group; 0 disables grouping.

    Returns:
        Hex string.
    """
    digits = value.hex()
    if group <= 0:
        return digits
    return " ".join(digits[i : i + group] for i in range(0, len(digits), group))
