#!/usr/bin/env python3
# grid36/curve.py
"""
Gilbert curve (generalized Hilbert curve) ordering for rectangular grids.
Used to list the 6x6 children of a tile so that neighbours in the list are
neighbours on the ground.
"""

from __future__ import annotations

from typing import Dict, Iterator, List, Tuple

__all__ = ["gilbert_order", "GilbertCurve", "GILBERT_6X6"]

Cell = Tuple[int, int]


def _sgn(v: int) -> int:
    return (v > 0) - (v < 0)


def _generate(x: int, y: int, ax: int, ay: int, bx: int, by: int) -> Iterator[Cell]:
    w = abs(ax + ay)
    h = abs(bx + by)
    dax, day = _sgn(ax), _sgn(ay)  # major direction
    dbx, dby = _sgn(bx), _sgn(by)  # orthogonal direction

    if h == 1:
        for _ in range(w):
            yield x, y
            x, y = x + dax, y + day
        return
    if w == 1:
        for _ in range(h):
            yield x, y
            x, y = x + dbx, y + dby
        return

    ax2, ay2 = ax // 2, ay // 2
    bx2, by2 = bx // 2, by // 2
    w2 = abs(ax2 + ay2)
    h2 = abs(bx2 + by2)

    if 2 * w > 3 * h:
        # long case: split in two along the major axis
        if (w2 % 2) and w > 2:
            ax2, ay2 = ax2 + dax, ay2 + day
        yield from _generate(x, y, ax2, ay2, bx, by)
        yield from _generate(x + ax2, y + ay2, ax - ax2, ay - ay2, bx, by)
    else:
        # standard case: one step up, one long horizontal, one step down
        if (h2 % 2) and h > 2:
            bx2, by2 = bx2 + dbx, by2 + dby
        yield from _generate(x, y, bx2, by2, ax2, ay2)
        yield from _generate(x + bx2, y + by2, ax, ay, bx - bx2, by - by2)
        yield from _generate(
            x + (ax - dax) + (bx2 - dbx),
            y + (ay - day) + (by2 - dby),
            -bx2, -by2, -(ax - ax2), -(ay - ay2),
        )


def gilbert_order(width: int, height: int) -> List[Cell]:
    """Cells (x, y) of a width x height grid in curve order, starting at (0, 0)."""
    if width < 1 or height < 1:
        raise ValueError(f"grid must be at least 1x1, got {width}x{height}")
    if width >= height:
        return list(_generate(0, 0, width, 0, 0, height))
    return list(_generate(0, 0, 0, height, width, 0))


GILBERT_6X6: Tuple[Cell, ...] = tuple(gilbert_order(6, 6))


class GilbertCurve:
    """Index <-> cell lookup over a base x base grid."""

    def __init__(self, base: int = 6):
        self.base = base
        self.order = gilbert_order(base, base)
        self._index: Dict[Cell, int] = {cell: n for n, cell in enumerate(self.order)}

    def point_to_index(self, x: int, y: int) -> int:
        if not (0 <= x < self.base and 0 <= y < self.base):
            raise ValueError(f"cell ({x}, {y}) outside [0, {self.base - 1}]")
        return self._index[(x, y)]

    def index_to_point(self, index: int) -> Cell:
        if not 0 <= index < len(self.order):
            raise ValueError(f"index must be in [0, {len(self.order) - 1}], got {index}")
        return self.order[index]

    def __len__(self) -> int:
        return len(self.order)
