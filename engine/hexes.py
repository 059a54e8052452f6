"""Hex grid geometry: cube coordinates, distance, line drawing, offset conversion.

Cube coordinates (q, r, s) always satisfy q + r + s = 0, so only q and r are
stored. The rectangular terrain grid uses the "odd-q" offset layout where a
GridPosition's y is the column (q) and x is the row.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator

from models.world import GridPosition


@dataclass(frozen=True)
class Hex:
    """Immutable hex in cube coordinates. Hashable, so usable as a dict key."""
    q: int
    r: int

    @property
    def s(self) -> int:
        """The implicit third cube coordinate."""
        return -self.q - self.r

    def __add__(self, other: Hex) -> Hex:
        return Hex(self.q + other.q, self.r + other.r)

    def __sub__(self, other: Hex) -> Hex:
        return Hex(self.q - other.q, self.r - other.r)

    def __repr__(self) -> str:
        return f"Hex({self.q}, {self.r}, {self.s})"


def hex_length(h: Hex) -> int:
    """Distance from the origin to h."""
    return (abs(h.q) + abs(h.r) + abs(h.s)) // 2


def hex_distance(a: Hex, b: Hex) -> int:
    """Number of hex steps between a and b: (|dq| + |dr| + |ds|) / 2.

    Args:
        a: First hex.
        b: Second hex.

    Returns:
        The hex-metric distance.
    """
    return hex_length(a - b)


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def _round_half_up(value: float) -> int:
    # Built-in round() is banker's rounding; a line through a hex edge
    # must always resolve to the same side.
    return math.floor(value + 0.5)


def cube_round(frac_q: float, frac_r: float, frac_s: float) -> Hex:
    """Round fractional cube coordinates to the nearest valid hex.

    Each component is rounded independently, then the one with the largest
    rounding error is recomputed from the other two so that q + r + s = 0.

    Args:
        frac_q: Fractional q.
        frac_r: Fractional r.
        frac_s: Fractional s.

    Returns:
        The nearest Hex.
    """
    q = _round_half_up(frac_q)
    r = _round_half_up(frac_r)
    s = _round_half_up(frac_s)

    q_diff = abs(q - frac_q)
    r_diff = abs(r - frac_r)
    s_diff = abs(s - frac_s)

    if q_diff > r_diff and q_diff > s_diff:
        q = -r - s
    elif r_diff > s_diff:
        r = -q - s
    # Otherwise s absorbs the error and is implicit in Hex.

    return Hex(q, r)


def hex_linedraw(start: Hex, end: Hex) -> list[Hex]:
    """Hexes on the straight line from start to end, both inclusive.

    Interpolates in cube space at N = distance(start, end) equal steps and
    rounds every sample to a hex.

    Args:
        start: First hex of the line.
        end: Last hex of the line.

    Returns:
        N + 1 hexes, beginning with start and ending with end.
    """
    n = hex_distance(start, end)
    if n == 0:
        return [start]

    line = []
    for i in range(n + 1):
        t = i / n
        line.append(cube_round(
            _lerp(start.q, end.q, t),
            _lerp(start.r, end.r, t),
            _lerp(start.s, end.s, t),
        ))
    return line


def hex_spiral(center: Hex, radius: int) -> Iterator[Hex]:
    """Yield every hex within radius of center (a filled hexagon)."""
    for dq in range(-radius, radius + 1):
        r_low = max(-radius, -dq - radius)
        r_high = min(radius, -dq + radius)
        for dr in range(r_low, r_high + 1):
            yield center + Hex(dq, dr)


def grid_to_hex(pos: GridPosition) -> Hex:
    """Convert an odd-q offset position (x=row, y=col) to a cube hex."""
    q = pos.y
    r = pos.x - (pos.y - (pos.y & 1)) // 2
    return Hex(q, r)


def hex_to_grid(h: Hex) -> GridPosition:
    """Convert a cube hex to an odd-q offset position (x=row, y=col)."""
    col = h.q
    row = h.r + (h.q - (h.q & 1)) // 2
    return GridPosition(x=row, y=col)
