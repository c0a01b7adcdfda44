#!/usr/bin/env python3
# grid36/tiles.py
"""
Grid36 tile encoding, decoding and depth adjustment.

Public entry points:

    encode_tile(lon, lat, depth)      -> TileRecord
    decode_tile(tile_id)              -> TileRecord
    adjust_tile_depth(tile_id, depth) -> str
    project_to_plane(lon, lat)        -> PlanarPoint

All functions are pure and safe to call from any thread. Every call takes an
optional `projection`; the process default is used when omitted.
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Optional, Tuple

from grid36.curve import GILBERT_6X6
from grid36.errors import ConversionError, Grid36Error, InvalidTileIdError, OutOfDomainWarning
from grid36.geodesy import Projection, default_projection
from grid36.grid import (
    BASE,
    DOMAIN,
    MAX_DEPTH,
    RESERVED_ID,
    RESERVED_ORIGIN_INDEX,
    FILLER_SYMBOL,
    REFERENCE_X,
    REFERENCE_Y,
    SYMBOL_GRID,
    check_depth,
    decode_origin,
    encode_ij,
    ij_to_xy,
    xy_to_ij,
)

__all__ = [
    "GeoPoint",
    "PlanarPoint",
    "Bounds",
    "TileRecord",
    "TileSearchResult",
    "project_to_plane",
    "project_to_geo",
    "encode_tile",
    "encode_planar",
    "decode_tile",
    "adjust_tile_depth",
    "is_valid_tile_id",
    "normalize_tile_id",
    "search_tile",
    "parent_tile",
    "child_tiles",
]

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoPoint:
    lon: float
    lat: float


@dataclass(frozen=True)
class PlanarPoint:
    x: float
    y: float


@dataclass(frozen=True)
class Bounds:
    x_min: float
    y_min: float
    x_max: float
    y_max: float

    def contains(self, x: float, y: float) -> bool:
        return self.x_min <= x < self.x_max and self.y_min <= y < self.y_max


@dataclass(frozen=True)
class TileRecord:
    """Everything derivable from a tile ID, plus the encode-side domain flag."""

    id: str
    depth: int
    tile_size: float
    origin_index: Tuple[int, int]
    centroid: PlanarPoint
    centroid_geo: Optional[GeoPoint]
    bounds: Bounds
    outside_domain: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TileSearchResult:
    """Lookup of a tile by ID: lower-left corner and centre in both systems."""

    record: TileRecord
    corner: PlanarPoint
    corner_geo: GeoPoint

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -------------------------
# Projection
# -------------------------

def project_to_plane(lon: float, lat: float, projection: Optional[Projection] = None) -> PlanarPoint:
    """Raises ConversionError for non-finite input or output."""
    x, y = (projection or default_projection()).to_plane(lon, lat)
    return PlanarPoint(x, y)


def project_to_geo(x: float, y: float, projection: Optional[Projection] = None) -> GeoPoint:
    lon, lat = (projection or default_projection()).to_geo(x, y)
    return GeoPoint(lon, lat)


# -------------------------
# Tile ID helpers
# -------------------------

def _upper_code(tile_id) -> str:
    if not isinstance(tile_id, str):
        raise InvalidTileIdError(tile_id, "not a string")
    # str.upper() may change length outside ASCII ("ß" -> "SS")
    if not tile_id.isascii():
        raise InvalidTileIdError(tile_id, "contains non-ASCII characters")
    return tile_id.upper()


def normalize_tile_id(tile_id) -> str:
    """Upper-case and validate; raises InvalidTileIdError."""
    code = _upper_code(tile_id)
    if code == RESERVED_ID:
        return code
    # decode_origin performs the length and alphabet checks
    decode_origin(code)
    return code


def is_valid_tile_id(tile_id) -> bool:
    try:
        normalize_tile_id(tile_id)
    except InvalidTileIdError:
        return False
    return True


# -------------------------
# Decode
# -------------------------

def _reference_record(centroid_geo) -> TileRecord:
    cx, cy = REFERENCE_X + 0.5, REFERENCE_Y + 0.5
    return TileRecord(
        id=RESERVED_ID,
        depth=MAX_DEPTH,
        tile_size=1.0,
        origin_index=RESERVED_ORIGIN_INDEX,
        centroid=PlanarPoint(cx, cy),
        centroid_geo=centroid_geo(cx, cy),
        bounds=Bounds(REFERENCE_X, REFERENCE_Y, REFERENCE_X + 1.0, REFERENCE_Y + 1.0),
    )


def decode_tile(tile_id: str, projection: Optional[Projection] = None, geo: bool = True) -> TileRecord:
    """
    Decode a tile ID (case-insensitive) to its geometry.
    Set geo=False to skip back-projecting the centroid.
    Raises InvalidTileIdError for empty, over-long or out-of-alphabet IDs.
    """
    def centroid_geo(x: float, y: float) -> Optional[GeoPoint]:
        return project_to_geo(x, y, projection) if geo else None

    code = _upper_code(tile_id)
    if code == RESERVED_ID:
        return _reference_record(centroid_geo)

    i0, j0, scale = decode_origin(code)
    half = scale // 2
    cx, cy = ij_to_xy(i0 + half, j0 + half)
    x0 = DOMAIN.x_min + i0
    y0 = DOMAIN.y_min + j0

    return TileRecord(
        id=code,
        depth=len(code),
        tile_size=float(scale),
        origin_index=(i0, j0),
        centroid=PlanarPoint(cx, cy),
        centroid_geo=centroid_geo(cx, cy),
        bounds=Bounds(x0, y0, x0 + scale, y0 + scale),
    )


# -------------------------
# Encode
# -------------------------

def encode_planar(
    x: float,
    y: float,
    depth: int,
    projection: Optional[Projection] = None,
    geo: bool = True,
    warn: bool = False,
) -> TileRecord:
    """
    Encode an already-projected point. Points outside the domain are clamped
    to the nearest edge cell and flagged with outside_domain=True.
    """
    depth = check_depth(depth)
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ConversionError(f"non-finite planar input x={x!r} y={y!r}", x, y)
    i, j, outside = xy_to_ij(x, y)
    if outside:
        log.debug("point (%.3f, %.3f) outside domain, clamped to (%d, %d)", x, y, i, j)
        if warn:
            warnings.warn(
                f"point ({x:.3f}, {y:.3f}) is outside the Grid36 domain; clamped",
                OutOfDomainWarning,
                stacklevel=3,
            )

    code = encode_ij(i, j, depth)
    # Geometry always comes from decode so the two never disagree.
    rec = decode_tile(code, projection, geo=geo)
    if outside:
        rec = replace(rec, outside_domain=True)
    return rec


def encode_tile(
    lon: float,
    lat: float,
    depth: int = MAX_DEPTH,
    projection: Optional[Projection] = None,
    warn: bool = False,
) -> TileRecord:
    """
    Encode a geographic point at `depth` (1..9).
    Raises InvalidDepthError before any projection work, and ConversionError
    when the point cannot be projected.
    """
    depth = check_depth(depth)
    p = project_to_plane(lon, lat, projection)
    return encode_planar(p.x, p.y, depth, projection, warn=warn)


# -------------------------
# Depth adjustment
# -------------------------

def adjust_tile_depth(tile_id: str, new_depth: int) -> str:
    """
    Change a tile ID's precision.

    Coarsening truncates and is exact. Refining is best-effort: it returns the
    child at `new_depth` that contains the parent's centroid, which is one of
    many possible children. The centroid is re-encoded in planar metres
    rather than via lon/lat; under an exact projection both pick the same
    child. If refinement fails the ID is padded with the filler symbol, and
    the result carries no geometric meaning.
    """
    new_depth = check_depth(new_depth)
    code = normalize_tile_id(tile_id)
    depth = len(code)

    if new_depth == depth:
        return code
    if new_depth < depth:
        return code[:new_depth]

    try:
        rec = decode_tile(code, geo=False)
        refined = encode_planar(rec.centroid.x, rec.centroid.y, new_depth, geo=False)
        return refined.id
    except Grid36Error as exc:
        log.warning("refining %s to depth %d failed (%s); padding", code, new_depth, exc)
        return code + FILLER_SYMBOL * (new_depth - depth)


# -------------------------
# Search & hierarchy
# -------------------------

def search_tile(tile_id: str, projection: Optional[Projection] = None) -> TileSearchResult:
    """Look a tile up by ID, adding the geographic lower-left corner."""
    rec = decode_tile(tile_id, projection)
    corner = PlanarPoint(rec.bounds.x_min, rec.bounds.y_min)
    return TileSearchResult(
        record=rec,
        corner=corner,
        corner_geo=project_to_geo(corner.x, corner.y, projection),
    )


def parent_tile(tile_id: str) -> Optional[str]:
    """ID of the containing tile, or None at depth 1."""
    code = normalize_tile_id(tile_id)
    if len(code) == 1:
        return None
    return code[:-1]


def child_tiles(tile_id: str) -> List[str]:
    """
    The 36 children of a tile, listed along a Gilbert curve over the 6x6
    sub-grid so that consecutive children share an edge.
    """
    code = normalize_tile_id(tile_id)
    if len(code) >= MAX_DEPTH:
        return []
    return [code + SYMBOL_GRID[BASE - 1 - dj][di] for di, dj in GILBERT_6X6]
