"""
otpkey – entry point.

Usage
-----
    python main.py key "otp-md5 499 ke1234 ext" [--words]
    python main.py key "otp-md5 499 ke1234" --init "otp-sha1 499 ke1235"
    python main.py verify "otp-md5 499 ke1234" "hex:5bf0 75d9 959d 036f" --last <hex>

Or, if installed as a package:
    otpkey ...
"""

import argparse
import getpass
import logging
import sys
from typing import List, Optional

from core.otp import MAX_HASH_COUNT, compute_otp, verify_otp
from core.utils import decode_hex
from wire.parser import (
    PlainResponse,
    build_init_response,
    build_response,
    parse_challenge,
    parse_response,
)

logger = logging.getLogger("otpkey")

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_ERROR = 2

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


# ── Logging setup ─────────────────────────────────────────────────────────────

def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    # Keep seeds and counts out of the log unless something is wrong
    logging.getLogger("core.otp").setLevel(logging.WARNING)


# ── Commands ──────────────────────────────────────────────────────────────────

def _cmd_key(args: argparse.Namespace) -> int:
    """Compute the response to a challenge from the user's pass phrase."""
    challenge = parse_challenge(args.challenge)
    passphrase = getpass.getpass("Enter secret pass phrase: ")
    current = compute_otp(
        challenge.hash_alg,
        passphrase,
        challenge.seed,
        challenge.hash_count,
        max_count=args.max_count,
    )

    if args.init is None:
        print(build_response(current, words=args.words))
        return EXIT_OK

    new_challenge = parse_challenge(args.init)
    new_passphrase = getpass.getpass("Enter new secret pass phrase: ")
    if new_passphrase != getpass.getpass("Again new secret pass phrase: "):
        logger.error("Pass phrases do not match.")
        return EXIT_ERROR
    new = compute_otp(
        new_challenge.hash_alg,
        new_passphrase,
        new_challenge.seed,
        new_challenge.hash_count,
        max_count=args.max_count,
    )
    print(
        build_init_response(
            current,
            new,
            new_challenge.hash_alg,
            new_challenge.hash_count,
            new_challenge.seed,
            words=args.words,
        )
    )
    return EXIT_OK


def _cmd_verify(args: argparse.Namespace) -> int:
    """Check a response against the last accepted OTP value."""
    challenge = parse_challenge(args.challenge)
    response = parse_response(args.response)
    stored = decode_hex(args.last)

    current = response.otp if isinstance(response, PlainResponse) else response.current
    if not verify_otp(current.to_bytes(), stored, challenge.hash_alg):
        print("FAIL")
        return EXIT_REJECTED

    logger.info("Response accepted for seed %s at sequence %d.", challenge.seed, challenge.hash_count)
    print("OK")
    return EXIT_OK


# ── Main ──────────────────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="otpkey", description="Compute and verify RFC 2289 one-time passwords."
    )
    parser.add_argument(
        "--log-level", default="WARNING", type=str.upper, choices=LOG_LEVELS,
        help="Logging level (default WARNING)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    key = sub.add_parser("key", help="Compute the response to a challenge")
    key.add_argument("challenge", help='Challenge, e.g. "otp-md5 499 ke1234"')
    key.add_argument("--words", action="store_true", help="Answer with six words instead of hex")
    key.add_argument("--init", metavar="CHALLENGE", help="Re-initialise to this new challenge")
    key.add_argument(
        "--max-count", type=int, default=MAX_HASH_COUNT,
        help=f"Largest sequence number to accept (default {MAX_HASH_COUNT})",
    )
    key.set_defaults(func=_cmd_key)

    verify = sub.add_parser("verify", help="Verify a response against the last accepted OTP")
    verify.add_argument("challenge", help="Challenge that was issued")
    verify.add_argument("response", help='Response, e.g. "hex:5bf0 75d9 959d 036f"')
    verify.add_argument("--last", required=True, help="Last accepted OTP value in hex")
    verify.set_defaults(func=_cmd_verify)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    _setup_logging(args.log_level)
    try:
        return args.func(args)
    except ValueError as exc:
        logger.error("%s", exc)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
