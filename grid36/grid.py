#!/usr/bin/env python3
# grid36/grid.py
"""
Grid36 constants and integer index math.

The domain is a square of 6^9 metres in the SIRGAS 2000 / Brazil Albers
plane. At depth 9 one full-resolution index unit is one metre. Each symbol of
a tile ID encodes one base-6 digit of the column index (i) and one of the row
index (j), most significant first.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Dict, FrozenSet, Tuple

from grid36.errors import InvalidDepthError, InvalidTileIdError

__all__ = [
    "BASE",
    "MAX_DEPTH",
    "POW6",
    "SYMBOL_GRID",
    "SYMBOL_POSITIONS",
    "ALPHABET",
    "RESERVED_ID",
    "RESERVED_ORIGIN_INDEX",
    "FILLER_SYMBOL",
    "REFERENCE_X",
    "REFERENCE_Y",
    "DomainBounds",
    "DOMAIN",
    "check_depth",
    "tile_size_for_depth",
    "xy_to_ij",
    "ij_to_xy",
    "encode_ij",
    "decode_origin",
]

BASE = 6
MAX_DEPTH = 9
POW6: Tuple[int, ...] = tuple(BASE ** k for k in range(MAX_DEPTH + 1))

# Row 0 is the top of the cell (largest local j).
SYMBOL_GRID: Tuple[Tuple[str, ...], ...] = (
    ("Z", "G", "H", "I", "J", "K"),
    ("Y", "F", "4", "5", "6", "L"),
    ("X", "E", "3", "0", "7", "M"),
    ("W", "D", "2", "1", "8", "N"),
    ("V", "C", "B", "A", "9", "O"),
    ("U", "T", "S", "R", "Q", "P"),
)

SYMBOL_POSITIONS: Dict[str, Tuple[int, int]] = {
    sym: (col, row)
    for row, symbols in enumerate(SYMBOL_GRID)
    for col, sym in enumerate(symbols)
}

ALPHABET: FrozenSet[str] = frozenset(SYMBOL_POSITIONS)

# "0" is a real glyph, so this looks like a normal depth-9 ID. It is not.
RESERVED_ID = "0" * MAX_DEPTH
FILLER_SYMBOL = SYMBOL_GRID[0][0]
# Fixed origin index reported for RESERVED_ID; not derived from its bounds.
RESERVED_ORIGIN_INDEX = (10077695, 10077695)

# Reference marker ("marco zero"), the centre of the domain.
REFERENCE_X = 5646767.0
REFERENCE_Y = 9567023.0


@dataclass(frozen=True)
class DomainBounds:
    """Planar region covered by the index (metres, half-open on the max side)."""

    x_min: float
    y_min: float
    x_max: float
    y_max: float

    def __post_init__(self):
        if self.width != POW6[MAX_DEPTH] or self.height != POW6[MAX_DEPTH]:
            raise ValueError(
                f"domain must be a {POW6[MAX_DEPTH]} m square, "
                f"got {self.width} x {self.height}"
            )

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def side(self) -> int:
        return int(min(self.width, self.height))

    def contains(self, x: float, y: float) -> bool:
        return self.x_min <= x < self.x_max and self.y_min <= y < self.y_max

    def clamp(self, x: float, y: float, eps: float = 1e-9) -> Tuple[float, float]:
        """Clamp into [min, max - eps] on both axes."""
        x = max(self.x_min, min(self.x_max - eps, x))
        y = max(self.y_min, min(self.y_max - eps, y))
        return x, y


DOMAIN = DomainBounds(
    x_min=607919.0,
    y_min=4528175.0,
    x_max=10685615.0,
    y_max=14605871.0,
)


def check_depth(depth) -> int:
    # bool is an int subclass; True is not a depth
    if isinstance(depth, bool) or not isinstance(depth, numbers.Integral):
        raise InvalidDepthError(depth, MAX_DEPTH)
    if not 1 <= depth <= MAX_DEPTH:
        raise InvalidDepthError(depth, MAX_DEPTH)
    return int(depth)


def tile_size_for_depth(depth: int, domain: DomainBounds = DOMAIN) -> float:
    """
    Side length in metres of a tile at `depth`.
    Uses the smaller axis extent so tiles stay square.
    """
    depth = check_depth(depth)
    sx = domain.width / POW6[depth]
    sy = domain.height / POW6[depth]
    return min(sx, sy)


def xy_to_ij(x: float, y: float, domain: DomainBounds = DOMAIN) -> Tuple[int, int, bool]:
    """
    Planar point to full-resolution index pair.
    Returns (i, j, outside) where outside flags a point that had to be clamped.
    """
    outside = not domain.contains(x, y)
    cx, cy = domain.clamp(x, y)
    n = domain.side
    i = int(math.floor(cx - domain.x_min))
    j = int(math.floor(cy - domain.y_min))
    i = max(0, min(n - 1, i))
    j = max(0, min(n - 1, j))
    return i, j, outside


def ij_to_xy(i: int, j: int, domain: DomainBounds = DOMAIN) -> Tuple[float, float]:
    """Centre of the full-resolution cell (i, j) in planar metres."""
    return domain.x_min + (i + 0.5), domain.y_min + (j + 0.5)


def encode_ij(i: int, j: int, depth: int) -> str:
    """Encode a full-resolution index pair to a tile ID of `depth` symbols."""
    depth = check_depth(depth)
    n = POW6[MAX_DEPTH]
    if not (0 <= i < n and 0 <= j < n):
        raise ValueError(f"index out of range: i={i}, j={j}, n={n}")

    code = []
    for k in range(MAX_DEPTH - 1, MAX_DEPTH - 1 - depth, -1):
        d_i = (i // POW6[k]) % BASE
        d_j = (j // POW6[k]) % BASE
        d_i = max(0, min(BASE - 1, d_i))
        d_j = max(0, min(BASE - 1, d_j))
        code.append(SYMBOL_GRID[BASE - 1 - d_j][d_i])
    return "".join(code)


def decode_origin(code: str) -> Tuple[int, int, int]:
    """
    Decode symbols to (i0, j0, scale): the tile's lower-left full-resolution
    index and its side in index units. `code` must already be upper-case.
    """
    if not 1 <= len(code) <= MAX_DEPTH:
        raise InvalidTileIdError(code, f"length must be 1..{MAX_DEPTH}, got {len(code)}")

    i = j = 0
    for ch in code:
        pos = SYMBOL_POSITIONS.get(ch)
        if pos is None:
            raise InvalidTileIdError(code, f"symbol {ch!r} is not in the Grid36 alphabet")
        col, row = pos
        i = i * BASE + col
        j = j * BASE + (BASE - 1 - row)

    scale = POW6[MAX_DEPTH - len(code)]
    return i * scale, j * scale, scale
