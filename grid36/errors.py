#!/usr/bin/env python3
# grid36/errors.py
"""
Error taxonomy for Grid36.

Every failure is local to a single call. The three error kinds mean
"no tile produced"; OutOfDomainWarning means "tile produced but approximate".
"""

__all__ = [
    "Grid36Error",
    "ConversionError",
    "InvalidDepthError",
    "InvalidTileIdError",
    "OutOfDomainWarning",
]


class Grid36Error(ValueError):
    """Base class for all Grid36 failures."""


class ConversionError(Grid36Error):
    """Projection received or produced a non-finite coordinate."""

    def __init__(self, message: str, *coords: float):
        super().__init__(message)
        self.coords = coords


class InvalidDepthError(Grid36Error):
    def __init__(self, depth, max_depth: int = 9):
        super().__init__(f"depth must be an integer in [1, {max_depth}], got {depth!r}")
        self.depth = depth


class InvalidTileIdError(Grid36Error):
    def __init__(self, tile_id, reason: str):
        super().__init__(f"invalid tile ID {tile_id!r}: {reason}")
        self.tile_id = tile_id
        self.reason = reason


class OutOfDomainWarning(UserWarning):
    """Point fell outside the domain bounds and was clamped to the edge cell."""
