#!/usr/bin/env python3
# grid36/geodesy.py
"""
Geodesy utilities for Grid36.
Handles conversions between longitude/latitude and the SIRGAS 2000 / Brazil
Albers Equal-Area Conic plane (easting/northing in metres).

Three strategies are available:

- PyprojAlbers: exact, backed by PROJ through pyproj.
- ManualAlbers: closed-form ellipsoidal Albers forward and its iterative
  inverse. Agrees with PROJ to well under a millimetre.
- LinearApproximation: 111320 m per degree on both axes, anchored at the
  false origin. Only good near (-54, -12); error grows with distance.

Projection wraps a primary strategy and an optional fallback. Non-finite
input is rejected up front. A primary that raises or returns non-finite
output is logged and the fallback is tried.
"""

from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional, Tuple

import numpy as np
from pyproj import Transformer
from pyproj.exceptions import ProjError

from grid36.errors import ConversionError

__all__ = [
    "AlbersParams",
    "SIRGAS_ALBERS",
    "SIRGAS_ALBERS_PROJ4",
    "ProjectionStrategy",
    "PyprojAlbers",
    "ManualAlbers",
    "LinearApproximation",
    "Projection",
    "STRATEGIES",
    "make_projection",
    "default_projection",
]

log = logging.getLogger(__name__)

# Degree length used by the linear approximation.
METERS_PER_DEGREE = 111320.0


@dataclass(frozen=True)
class AlbersParams:
    lat0: float  # latitude of false origin
    lon0: float  # longitude of false origin
    lat1: float  # first standard parallel
    lat2: float  # second standard parallel
    false_easting: float
    false_northing: float
    semi_major: float
    inv_flattening: float

    @property
    def flattening(self) -> float:
        return 1.0 / self.inv_flattening

    @property
    def eccentricity(self) -> float:
        f = self.flattening
        return math.sqrt(2 * f - f * f)


SIRGAS_ALBERS = AlbersParams(
    lat0=-12.0,
    lon0=-54.0,
    lat1=-2.0,
    lat2=-22.0,
    false_easting=5000000.0,
    false_northing=10000000.0,
    semi_major=6378137.0,          # GRS 1980
    inv_flattening=298.257222101,
)

SIRGAS_ALBERS_PROJ4 = (
    "+proj=aea +lat_0=-12 +lon_0=-54 +lat_1=-2 +lat_2=-22 "
    "+x_0=5000000 +y_0=10000000 +ellps=GRS80 +towgs84=0,0,0,0,0,0,0 "
    "+units=m +no_defs"
)


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


# ----------------------------
# Strategies
# ----------------------------

class ProjectionStrategy:
    """Interface for all projection backends."""
    name: str = "base"
    exact: bool = False

    def to_plane(self, lon: float, lat: float) -> Tuple[float, float]:
        raise NotImplementedError

    def to_geo(self, x: float, y: float) -> Tuple[float, float]:
        raise NotImplementedError

    def to_plane_array(self, lons, lats) -> Tuple[np.ndarray, np.ndarray]:
        """Vector form of to_plane. Backends override when they can do better."""
        lons = np.asarray(lons, dtype=np.float64)
        lats = np.asarray(lats, dtype=np.float64)
        xs = np.empty_like(lons)
        ys = np.empty_like(lats)
        for k, (lon, lat) in enumerate(zip(lons.flat, lats.flat)):
            xs.flat[k], ys.flat[k] = self.to_plane(float(lon), float(lat))
        return xs, ys

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class PyprojAlbers(ProjectionStrategy):
    """
    Exact transform through PROJ.
    Transformers are kept per thread; pyproj objects must not be shared.
    """

    name = "pyproj"
    exact = True

    def __init__(self, proj4: str = SIRGAS_ALBERS_PROJ4, geographic: str = "EPSG:4326"):
        self.proj4 = proj4
        self.geographic = geographic
        self._local = threading.local()

    def _transformers(self) -> Tuple[Transformer, Transformer]:
        pair = getattr(self._local, "pair", None)
        if pair is None:
            fwd = Transformer.from_crs(self.geographic, self.proj4, always_xy=True)
            inv = Transformer.from_crs(self.proj4, self.geographic, always_xy=True)
            pair = self._local.pair = (fwd, inv)
        return pair

    def to_plane(self, lon: float, lat: float) -> Tuple[float, float]:
        fwd, _ = self._transformers()
        x, y = fwd.transform(lon, lat, errcheck=True)
        return float(x), float(y)

    def to_geo(self, x: float, y: float) -> Tuple[float, float]:
        _, inv = self._transformers()
        lon, lat = inv.transform(x, y, errcheck=True)
        return float(lon), float(lat)

    def to_plane_array(self, lons, lats) -> Tuple[np.ndarray, np.ndarray]:
        fwd, _ = self._transformers()
        xs, ys = fwd.transform(
            np.asarray(lons, dtype=np.float64),
            np.asarray(lats, dtype=np.float64),
        )
        return np.asarray(xs, dtype=np.float64), np.asarray(ys, dtype=np.float64)


class ManualAlbers(ProjectionStrategy):
    """
    Ellipsoidal Albers Equal-Area Conic (Snyder, USGS PP 1395, eqs. 14-1..14-21).
    The cone constant is negative here since both standard parallels are south.
    """

    name = "albers"
    exact = True
    max_iter = 25
    tolerance = 1e-12

    def __init__(self, params: AlbersParams = SIRGAS_ALBERS):
        self.p = params
        self.e = params.eccentricity
        self.e2 = self.e * self.e
        phi0 = math.radians(params.lat0)
        phi1 = math.radians(params.lat1)
        phi2 = math.radians(params.lat2)
        m1 = self._m(phi1)
        m2 = self._m(phi2)
        q0 = self._q(phi0)
        q1 = self._q(phi1)
        q2 = self._q(phi2)
        self.n = (m1 * m1 - m2 * m2) / (q2 - q1)
        self.C = m1 * m1 + self.n * q1
        self.rho0 = (params.semi_major / self.n) * math.sqrt(self.C - self.n * q0)
        self.lam0 = math.radians(params.lon0)

    def _m(self, phi: float) -> float:
        s = math.sin(phi)
        return math.cos(phi) / math.sqrt(1 - self.e2 * s * s)

    def _q(self, phi: float) -> float:
        e = self.e
        s = math.sin(phi)
        return (1 - self.e2) * (
            s / (1 - self.e2 * s * s)
            - (1 / (2 * e)) * math.log((1 - e * s) / (1 + e * s))
        )

    def to_plane(self, lon: float, lat: float) -> Tuple[float, float]:
        a = self.p.semi_major
        q = self._q(math.radians(lat))
        radicand = self.C - self.n * q
        if radicand < 0:
            return math.nan, math.nan
        rho = (a / self.n) * math.sqrt(radicand)
        theta = self.n * (math.radians(lon) - self.lam0)
        x = self.p.false_easting + rho * math.sin(theta)
        y = self.p.false_northing + self.rho0 - rho * math.cos(theta)
        return x, y

    def to_geo(self, x: float, y: float) -> Tuple[float, float]:
        a = self.p.semi_major
        n = self.n
        dx = x - self.p.false_easting
        dy = self.rho0 - (y - self.p.false_northing)
        sign = 1.0 if n > 0 else -1.0
        rho = sign * math.hypot(dx, dy)
        theta = math.atan2(sign * dx, sign * dy)
        q = (self.C - (rho * n / a) ** 2) / n

        lon = math.degrees(self.lam0 + theta / n)
        lat = self._phi_from_q(q)
        return lon, math.degrees(lat)

    def _phi_from_q(self, q: float) -> float:
        # Pole limit of q; beyond it the iteration below diverges.
        e = self.e
        q_pole = 1 - ((1 - self.e2) / (2 * e)) * math.log((1 - e) / (1 + e))
        if abs(abs(q) - q_pole) < 1e-12:
            return math.copysign(math.pi / 2, q)
        if abs(q) > q_pole:
            return math.nan

        phi = math.asin(max(-1.0, min(1.0, q / 2)))
        for _ in range(self.max_iter):
            s = math.sin(phi)
            c = math.cos(phi)
            one = 1 - self.e2 * s * s
            dphi = (one * one / (2 * c)) * (
                q / (1 - self.e2)
                - s / one
                + (1 / (2 * e)) * math.log((1 - e * s) / (1 + e * s))
            )
            phi += dphi
            if abs(dphi) < self.tolerance:
                return phi
        return math.nan


class LinearApproximation(ProjectionStrategy):
    """
    Flat approximation anchored at the false origin.
    Cheap, and only meaningful near the projection centre.
    """

    name = "linear"
    exact = False

    def __init__(self, params: AlbersParams = SIRGAS_ALBERS, meters_per_degree: float = METERS_PER_DEGREE):
        self.p = params
        self.k = meters_per_degree

    def to_plane(self, lon: float, lat: float) -> Tuple[float, float]:
        x = self.p.false_easting + (lon - self.p.lon0) * self.k
        y = self.p.false_northing + (lat - self.p.lat0) * self.k
        return x, y

    def to_geo(self, x: float, y: float) -> Tuple[float, float]:
        lon = self.p.lon0 + (x - self.p.false_easting) / self.k
        lat = self.p.lat0 + (y - self.p.false_northing) / self.k
        return lon, lat


STRATEGIES = {
    "pyproj": PyprojAlbers,
    "albers": ManualAlbers,
    "linear": LinearApproximation,
}


# ----------------------------
# Projection with fallback
# ----------------------------

class Projection:
    """Primary strategy with an optional fallback, tried in that order."""

    def __init__(self, primary: ProjectionStrategy, fallback: Optional[ProjectionStrategy] = None):
        self.primary = primary
        self.fallback = fallback

    @property
    def strategies(self) -> Tuple[ProjectionStrategy, ...]:
        if self.fallback is None:
            return (self.primary,)
        return (self.primary, self.fallback)

    def _run(self, op: str, a: float, b: float) -> Tuple[float, float]:
        last_error: Optional[Exception] = None
        for strategy in self.strategies:
            try:
                u, v = getattr(strategy, op)(a, b)
            except (ProjError, ArithmeticError, ValueError) as exc:
                last_error = exc
                log.warning("%s.%s(%r, %r) failed: %s", strategy.name, op, a, b, exc)
                continue
            if _finite(u, v):
                return u, v
            log.warning("%s.%s(%r, %r) returned non-finite (%r, %r)", strategy.name, op, a, b, u, v)

        raise ConversionError(
            f"{op}({a!r}, {b!r}) produced no finite result"
            + (f": {last_error}" if last_error else ""),
            a, b,
        )

    def to_plane(self, lon: float, lat: float) -> Tuple[float, float]:
        """(lon, lat) degrees -> (easting, northing) metres."""
        if not _finite(lon, lat):
            raise ConversionError(f"non-finite geographic input lon={lon!r} lat={lat!r}", lon, lat)
        return self._run("to_plane", lon, lat)

    def to_geo(self, x: float, y: float) -> Tuple[float, float]:
        """(easting, northing) metres -> (lon, lat) degrees."""
        if not _finite(x, y):
            raise ConversionError(f"non-finite planar input x={x!r} y={y!r}", x, y)
        return self._run("to_geo", x, y)

    def to_plane_array(self, lons, lats) -> Tuple[np.ndarray, np.ndarray]:
        """
        Vector forward projection. Fails as a whole when any input or
        output is non-finite; no per-element fallback.
        """
        lons = np.asarray(lons, dtype=np.float64)
        lats = np.asarray(lats, dtype=np.float64)
        if lons.shape != lats.shape:
            raise ValueError(f"shape mismatch: {lons.shape} vs {lats.shape}")
        if not (np.isfinite(lons).all() and np.isfinite(lats).all()):
            raise ConversionError("non-finite geographic input in array")
        xs, ys = self.primary.to_plane_array(lons, lats)
        if not (np.isfinite(xs).all() and np.isfinite(ys).all()):
            raise ConversionError("projection produced non-finite output in array")
        return xs, ys

    def __repr__(self) -> str:
        names = "->".join(s.name for s in self.strategies)
        return f"<Projection {names}>"


def make_projection(strategy: str = "pyproj", fallback: Optional[str] = "albers") -> Projection:
    """Build a Projection from strategy names (see STRATEGIES)."""
    try:
        primary = STRATEGIES[strategy]()
        secondary = STRATEGIES[fallback]() if fallback else None
    except KeyError as exc:
        raise ValueError(f"unknown projection strategy {exc.args[0]!r}") from None
    return Projection(primary, secondary)


@lru_cache(maxsize=1)
def default_projection() -> Projection:
    """Process-wide default: PROJ first, closed-form Albers if PROJ fails."""
    return make_projection("pyproj", "albers")
