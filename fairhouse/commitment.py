"""Hash commitments for the commit-reveal protocol.

A player publishes ``commit(secret)`` when placing a bet and discloses the
secret at reveal time. The same SHA3-256 function seeds every game's random
stream, so an auditor only needs the public reveal value to recompute results.
"""

import secrets

from cryptography.hazmat.primitives import constant_time, hashes

DIGEST_SIZE = 32


def sha3_256(*chunks: bytes) -> bytes:
    """SHA3-256 over the concatenation of ``chunks``."""
    digest = hashes.Hash(hashes.SHA3_256())
    for chunk in chunks:
        digest.update(chunk)
    return digest.finalize()


def commit(secret: bytes) -> bytes:
    """Return the 32-byte commitment digest for ``secret``."""
    return sha3_256(bytes(secret))


def commit_hex(secret: bytes) -> str:
    return commit(secret).hex()


def verify(secret: bytes, digest: bytes) -> bool:
    """Check ``secret`` against a stored commitment.

    Never raises: wrong types and length mismatches count as a failed check.
    """
    if not isinstance(secret, (bytes, bytearray)):
        return False
    if not isinstance(digest, (bytes, bytearray)) or len(digest) != DIGEST_SIZE:
        return False
    return constant_time.bytes_eq(commit(secret), bytes(digest))


def generate_secret() -> bytes:
    """Fresh 32-byte reveal value for a new bet."""
    return secrets.token_bytes(DIGEST_SIZE)
