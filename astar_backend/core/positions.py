"""
Fractional ordering for records.

Records carry a float position; inserting between two neighbours takes the
midpoint so no other row has to move.

Dependencies: None (pure domain layer)
System role: Record ordering arithmetic
"""

DEFAULT_POSITION = 65536.0
POSITION_INCREMENT = 65536.0
MIN_GAP = 1e-9


def validate_position(position: float) -> float:
    if position <= 0:
        raise ValueError("Position must be positive")
    return float(position)


def next_position(last_position: float | None) -> float:
    """Position after the current last row (DEFAULT_POSITION for an empty table)."""
    if last_position is None:
        return DEFAULT_POSITION
    return last_position + POSITION_INCREMENT


def position_between(before: float | None, after: float | None) -> float:
    """
    Position strictly between two neighbours.

    Args:
        before: Position of the preceding row (None at the top)
        after: Position of the following row (None at the bottom)

    Returns:
        float: New position
    """
    if before is None and after is None:
        return DEFAULT_POSITION
    if before is None:
        return after / 2
    if after is None:
        return before + POSITION_INCREMENT
    return (before + after) / 2


def needs_rebalance(before: float | None, after: float | None) -> bool:
    """True when the gap between neighbours is too small for another midpoint."""
    if before is None or after is None:
        return False
    return abs(after - before) < MIN_GAP


def spaced_positions(count: int) -> list[float]:
    """Evenly spaced positions for `count` rows, used when reordering."""
    return [DEFAULT_POSITION + i * POSITION_INCREMENT for i in range(count)]
