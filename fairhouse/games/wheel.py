"""Spin wheel with eight fixed segments."""

from .base import GameResult, game_digest, read_u32

TAG = b"wheel"

# (multiplier, label) per segment. Labels are the legacy display text.
SEGMENTS = (
    (200, "1x"),
    (150, "0.5x"),
    (300, "2x"),
    (0, "0x"),
    (500, "4x"),
    (200, "1x"),
    (1000, "9x"),
    (100, "0x"),
)
SEGMENT_DEGREES = 360 // len(SEGMENTS)


def calculate_outcome(reveal: bytes, game_params: str) -> GameResult:
    """Wheel ignores ``game_params``; the angle is display-only."""
    value = read_u32(game_digest(reveal, TAG))
    segment = value % len(SEGMENTS)
    multiplier, label = SEGMENTS[segment]
    angle = segment * SEGMENT_DEGREES + value % SEGMENT_DEGREES
    return GameResult(
        description=f"Wheel: Segment {segment} ({label}), Angle {angle}°",
        multiplier=multiplier,
    )
