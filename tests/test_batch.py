import math

import numpy as np
import pytest

from grid36.batch import encode_array, encode_planar_array
from grid36.errors import ConversionError, InvalidDepthError
from grid36.geodesy import ManualAlbers, Projection
from grid36.grid import DOMAIN
from grid36.tiles import encode_planar, encode_tile

LONS = [-47.8825, -46.6333, -43.1729, -60.0217, -38.5014, -51.2177, -54.0]
LATS = [-15.7942, -23.5505, -22.9068, -3.1190, -3.7172, -30.0346, -12.0]


@pytest.mark.parametrize("depth", [1, 4, 9])
def test_encode_array_matches_scalar(depth):
    manual = Projection(ManualAlbers())
    res = encode_array(LONS, LATS, depth, manual)
    assert len(res) == len(LONS)
    for k, (lon, lat) in enumerate(zip(LONS, LATS)):
        rec = encode_tile(lon, lat, depth, manual)
        assert res.ids[k] == rec.id
        assert bool(res.outside[k]) == rec.outside_domain


def test_encode_array_default_projection():
    res = encode_array(LONS, LATS, 6)
    assert res.ids.dtype == np.dtype("<U9")
    assert all(len(s) == 6 for s in res.ids)
    assert not res.outside.any()


def test_planar_array_edges():
    xs = [DOMAIN.x_min, DOMAIN.x_max, DOMAIN.x_min - 100.0, 5646767.0]
    ys = [DOMAIN.y_min, DOMAIN.y_max, DOMAIN.y_min, 9567023.0]
    res = encode_planar_array(xs, ys, 9)
    assert list(res.ids) == [
        encode_planar(x, y, 9, geo=False).id for x, y in zip(xs, ys)
    ]
    assert list(res.outside) == [False, True, True, False]
    assert res.i[1] == DOMAIN.side - 1
    assert res.ids[0] == "U" * 9
    assert res.ids[1] == "K" * 9


def test_planar_array_keeps_shape():
    xs = np.full((2, 3), 5646767.0)
    ys = np.full((2, 3), 9567023.0)
    res = encode_planar_array(xs, ys, 2)
    assert res.ids.shape == (2, 3)
    assert (res.ids == "0U").all()


def test_encode_array_rejects_bad_input():
    with pytest.raises(InvalidDepthError):
        encode_array(LONS, LATS, 0)
    with pytest.raises(ConversionError):
        encode_array([math.nan], [0.0], 3)
    with pytest.raises(ValueError):
        encode_array([1.0, 2.0], [1.0], 3)


@pytest.mark.parametrize("xs,ys", [
    ([math.nan], [9567023.0]),
    ([5646767.0, 5646767.0], [9567023.0, math.inf]),
])
def test_planar_array_rejects_non_finite(xs, ys):
    with pytest.raises(ConversionError):
        encode_planar(xs[-1], ys[-1], 3, geo=False)
    with pytest.raises(ConversionError):
        encode_planar_array(xs, ys, 3)


def test_planar_array_rejects_shape_mismatch():
    with pytest.raises(ValueError):
        encode_planar_array([1.0, 2.0], [1.0], 3)
