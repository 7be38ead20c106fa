"""Two-party commit-reveal randomness (player + house).

Both sides commit to SHA-256 of a secret, reveal it, and the final random
value is derived from the XOR of the two secrets, so neither party alone picks
the result. Settlement does not use this yet: games are seeded by the player's
reveal only.
"""

from cryptography.hazmat.primitives import hashes

U64_BYTES = 8


def _sha256(*chunks: bytes) -> bytes:
    digest = hashes.Hash(hashes.SHA256())
    for chunk in chunks:
        digest.update(chunk)
    return digest.finalize()


def _decode(secret_hex: str, label: str) -> bytes:
    try:
        return bytes.fromhex(secret_hex)
    except ValueError as e:
        raise ValueError(f"Invalid {label} hex: {e}") from e


def compute_commit(secret: bytes) -> str:
    """Hex SHA-256 commitment of a raw secret."""
    return _sha256(secret).hex()


def verify_commit(secret_hex: str, commit_hex: str) -> bool:
    """Check a hex secret against a hex commitment, ignoring case.

    Raises:
        ValueError: If ``secret_hex`` is not valid hex
    """
    secret = _decode(secret_hex, "secret")
    return compute_commit(secret) == commit_hex.lower()


def compute_random(player_secret_hex: str, house_secret_hex: str) -> int:
    """64-bit random value from both revealed secrets.

    The shorter secret is zero-padded before the XOR; the first eight bytes
    of SHA-256 over the result are read little-endian.
    """
    player = _decode(player_secret_hex, "player secret")
    house = _decode(house_secret_hex, "house secret")

    size = max(len(player), len(house))
    combined = bytes(
        a ^ b for a, b in zip(player.ljust(size, b"\0"), house.ljust(size, b"\0"))
    )
    return int.from_bytes(_sha256(combined)[:U64_BYTES], "little")


def random_in_range(random: int, maximum: int) -> int:
    """Reduce ``random`` into ``[0, maximum)``; 0 when ``maximum`` is 0."""
    if maximum == 0:
        return 0
    return random % maximum


def expand_random(seed: int, count: int) -> list[int]:
    """Derive ``count`` further 64-bit values by chained hashing."""
    results = []
    current = seed
    for i in range(count):
        digest = _sha256(
            current.to_bytes(U64_BYTES, "little"),
            i.to_bytes(U64_BYTES, "little"),
        )
        current = int.from_bytes(digest[:U64_BYTES], "little")
        results.append(current)
    return results
