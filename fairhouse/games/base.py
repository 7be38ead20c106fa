"""Shared building blocks for the outcome calculators."""

from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict

from fairhouse.commitment import DIGEST_SIZE, sha3_256

U32_MAX = 2**32 - 1

# Unsigned decimal, optional leading plus sign
_U32_PATTERN = re.compile(r"\+?[0-9]+")


class GameType(str, Enum):
    ROULETTE = "Roulette"
    PLINKO = "Plinko"
    MINES = "Mines"
    WHEEL = "Wheel"

    @classmethod
    def parse(cls, value: str) -> GameType:
        """Look up a game by name, ignoring case."""
        for game in cls:
            if game.value.lower() == value.strip().lower():
                return game
        raise ValueError(f"Unknown game type: {value}")


class GameResult(BaseModel):
    """Outcome of one calculator run. ``multiplier`` is in hundredths (100 = 1x)."""

    model_config = ConfigDict(frozen=True)

    description: str
    multiplier: int


def game_digest(reveal: bytes, tag: bytes) -> bytes:
    """Domain-separated random stream: SHA3-256(reveal || tag)."""
    return sha3_256(bytes(reveal), tag)


def read_u32(digest: bytes, offset: int = 0) -> int:
    """Big-endian 4-byte window starting at ``offset``, wrapping around the digest."""
    window = bytes(digest[(offset + j) % DIGEST_SIZE] for j in range(4))
    return int.from_bytes(window, "big")


def parse_u32(text: str | None, default: int) -> int:
    """Parse an unsigned 32-bit integer, returning ``default`` when malformed."""
    if text is None or not _U32_PATTERN.fullmatch(text):
        return default
    value = int(text)
    return value if value <= U32_MAX else default
