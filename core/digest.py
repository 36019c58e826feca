"""
Digest adapter for the OTP hash chain (RFC 2289 §5).

Three algorithms are registered with IANA for OTP: MD4, MD5 and SHA1.  Any
other digest can be plugged in through :class:`GenericDigest`.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Union

from Crypto.Hash import MD4
from cryptography.hazmat.primitives import hashes

from core.errors import UnsupportedAlgorithm

logger = logging.getLogger(__name__)


class Algorithm(str, Enum):
    """Hash algorithms defined for OTP."""

    MD4 = "md4"
    MD5 = "md5"
    SHA1 = "sha1"


# Raw digest sizes in bytes.
DIGEST_SIZES: dict[str, int] = {
    Algorithm.MD4: 16,
    Algorithm.MD5: 16,
    Algorithm.SHA1: 20,
}


@dataclass(frozen=True)
class GenericDigest:
    """
    A caller-supplied digest.

    Attributes:
        name: Algorithm name as it appears in challenges (e.g. ``"sha256"``).
        func: Function mapping input bytes to the raw digest bytes.
    """

    name: str
    func: Callable[[bytes], bytes]

    @classmethod
    def from_hash_algorithm(
        cls, name: str, algorithm: hashes.HashAlgorithm
    ) -> "GenericDigest":
        """Wrap a ``cryptography`` hash algorithm instance, e.g. ``hashes.SHA256()``."""
        return cls(name=name.lower(), func=lambda data: _hash(algorithm, data))


HashAlgorithm = Union[Algorithm, GenericDigest]

# get_digest(name) may return a GenericDigest, a bare function, or None.
DigestLookup = Callable[[str], Optional[Union[GenericDigest, Callable[[bytes], bytes]]]]


def _hash(algorithm: hashes.HashAlgorithm, data: bytes) -> bytes:
    h = hashes.Hash(algorithm)
    h.update(data)
    return h.finalize()


def _md4(data: bytes) -> bytes:
    return MD4.new(data).digest()


def _md5(data: bytes) -> bytes:
    return _hash(hashes.MD5(), data)


def _sha1(data: bytes) -> bytes:
    return _hash(hashes.SHA1(), data)


_ALG_MAP: dict[str, Callable[[bytes], bytes]] = {
    Algorithm.MD4: _md4,
    Algorithm.MD5: _md5,
    Algorithm.SHA1: _sha1,
}


def resolve_algorithm(
    name: Union[str, HashAlgorithm],
    get_digest: Optional[DigestLookup] = None,
) -> HashAlgorithm:
    """
    Turn an algorithm name into something :func:`digest` accepts.

    Args:
        name:       Name from a challenge (``"md5"``, ``"SHA1"``...), or an
                    already resolved algorithm which is returned unchanged.
        get_digest: Optional lookup for non-standard names.

    Returns:
        An :class:`Algorithm` member or a :class:`GenericDigest`.

    Raises:
        UnsupportedAlgorithm: If no implementation is known for ``name``.
    """
    if isinstance(name, (Algorithm, GenericDigest)):
        return name

    key = name.strip().lower()
    try:
        return Algorithm(key)
    except ValueError:
        pass

    found = get_digest(key) if get_digest is not None else None
    if found is None:
        raise UnsupportedAlgorithm(name)
    if isinstance(found, GenericDigest):
        return found
    logger.debug("Using caller-supplied digest for '%s'", key)
    return GenericDigest(name=key, func=found)


def digest(algorithm: Union[str, HashAlgorithm], data: bytes) -> bytes:
    """
    Hash ``data`` with ``algorithm`` and return the raw digest.

    Raises:
        UnsupportedAlgorithm: If ``algorithm`` is a name that is not built in.
    """
    alg = resolve_algorithm(algorithm)
    if isinstance(alg, GenericDigest):
        return bytes(alg.func(data))
    return _ALG_MAP[alg](data)
