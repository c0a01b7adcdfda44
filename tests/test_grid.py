import pytest

from grid36.errors import InvalidDepthError, InvalidTileIdError
from grid36.grid import (
    ALPHABET,
    DOMAIN,
    MAX_DEPTH,
    POW6,
    SYMBOL_GRID,
    SYMBOL_POSITIONS,
    DomainBounds,
    check_depth,
    decode_origin,
    encode_ij,
    ij_to_xy,
    tile_size_for_depth,
    xy_to_ij,
)


def test_symbol_grid_is_a_36_symbol_bijection():
    flat = [s for row in SYMBOL_GRID for s in row]
    assert len(flat) == 36
    assert len(set(flat)) == 36
    assert ALPHABET == set("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ")
    for sym, (col, row) in SYMBOL_POSITIONS.items():
        assert SYMBOL_GRID[row][col] == sym


def test_domain_is_square_power_of_six():
    assert DOMAIN.width == POW6[9] == 10077696
    assert DOMAIN.height == POW6[9]
    assert DOMAIN.side == 10077696


def test_domain_rejects_non_square_extent():
    with pytest.raises(ValueError):
        DomainBounds(0.0, 0.0, 100.0, 100.0)


@pytest.mark.parametrize("bad", [0, 10, -1, 2.5, "3", None, True])
def test_check_depth_rejects(bad):
    with pytest.raises(InvalidDepthError):
        check_depth(bad)


def test_tile_size_shrinks_by_six_per_level():
    sizes = [tile_size_for_depth(d) for d in range(1, MAX_DEPTH + 1)]
    assert sizes[0] == 1679616
    assert sizes[-1] == 1
    for a, b in zip(sizes, sizes[1:]):
        assert a == b * 6


def test_xy_to_ij_lower_corner_is_inside():
    assert xy_to_ij(DOMAIN.x_min, DOMAIN.y_min) == (0, 0, False)


def test_xy_to_ij_upper_edge_clamps_into_last_cell():
    i, j, outside = xy_to_ij(DOMAIN.x_max, DOMAIN.y_max)
    assert (i, j) == (DOMAIN.side - 1, DOMAIN.side - 1)
    assert outside


def test_xy_to_ij_far_outside_clamps():
    i, j, outside = xy_to_ij(-1e9, 1e12)
    assert (i, j) == (0, DOMAIN.side - 1)
    assert outside


def test_ij_to_xy_is_cell_centre():
    assert ij_to_xy(0, 0) == (DOMAIN.x_min + 0.5, DOMAIN.y_min + 0.5)


def test_encode_ij_corners():
    n = DOMAIN.side
    assert encode_ij(0, 0, 1) == "U"
    assert encode_ij(n - 1, 0, 1) == "P"
    assert encode_ij(0, n - 1, 1) == "Z"
    assert encode_ij(n - 1, n - 1, 9) == "K" * 9
    assert encode_ij(0, 0, 9) == "U" * 9


def test_encode_ij_rejects_out_of_range_index():
    with pytest.raises(ValueError):
        encode_ij(DOMAIN.side, 0, 3)


def test_decode_origin_single_symbols():
    scale = POW6[8]
    assert decode_origin("U") == (0, 0, scale)
    assert decode_origin("Z") == (0, 5 * scale, scale)
    assert decode_origin("P") == (5 * scale, 0, scale)
    assert decode_origin("0") == (3 * scale, 3 * scale, scale)


@pytest.mark.parametrize("i,j", [(0, 0), (1, 2), (5038848, 5038848), (10077695, 123456), (777777, 9999999)])
def test_encode_decode_origin_is_exact(i, j):
    for depth in range(1, MAX_DEPTH + 1):
        code = encode_ij(i, j, depth)
        i0, j0, scale = decode_origin(code)
        assert scale == POW6[MAX_DEPTH - depth]
        assert (i0, j0) == (i // scale * scale, j // scale * scale)


@pytest.mark.parametrize("code", ["", "U" * 10, "U-", "u", "ÇA", "A B"])
def test_decode_origin_rejects(code):
    with pytest.raises(InvalidTileIdError):
        decode_origin(code)
