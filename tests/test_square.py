import numpy as np
import pytest

from PyCornelius.geometry_element import TopologyError
from PyCornelius.square import Square

DX = [0.0, 0.0, 1.0, 1.0]


def _square(corners, value=0.5, dx=DX):
    sq = Square()
    sq.init_square(np.array(corners, dtype=float), (0, 1), (0.0, 0.0), dx)
    sq.construct_lines(value)
    return sq


def _endpoints(line):
    return {tuple(np.round(line.start_point[2:], 12)), tuple(np.round(line.end_point[2:], 12))}


def test_no_lines_without_crossing():
    assert _square([[0.0, 0.1], [0.2, 0.3]]).get_number_lines() == 0
    assert _square([[0.6, 0.7], [0.8, 0.9]]).get_number_lines() == 0


def test_split_along_first_axis():
    sq = _square([[0.0, 0.0], [1.0, 1.0]])
    assert sq.get_number_lines() == 1
    assert not sq.is_ambiguous()
    line = sq.get_lines()[0]
    assert _endpoints(line) == {(0.5, 0.0), (0.5, 1.0)}
    # normal points away from the low corners at x1 = 0
    np.testing.assert_allclose(line.normal, [0.0, 0.0, 1.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(line.centroid, [0.0, 0.0, 0.5, 0.5], atol=1e-12)


def test_single_high_corner():
    sq = _square([[0.0, 0.0], [0.0, 1.0]])
    assert sq.get_number_lines() == 1
    line = sq.get_lines()[0]
    # midpoints of the two edges adjacent to the high corner
    assert _endpoints(line) == {(1.0, 0.5), (0.5, 1.0)}
    np.testing.assert_allclose(line.outside_point[2:], [1 / 3, 1 / 3])
    np.testing.assert_allclose(line.normal[2:], [0.5, 0.5], atol=1e-12)


def test_cut_positions_are_interpolated_and_scaled():
    sq = _square([[0.0, 0.0], [1.0, 1.0]], value=0.25, dx=[0.0, 0.0, 2.0, 3.0])
    line = sq.get_lines()[0]
    assert _endpoints(line) == {(0.5, 0.0), (0.5, 3.0)}


def test_corner_on_threshold():
    # the corner on the threshold counts as above, the cut is placed just next to it
    sq = _square([[0.5, 0.0], [0.0, 0.0]])
    assert sq.get_number_lines() == 1
    line = sq.get_lines()[0]
    for p in (line.start_point, line.end_point):
        assert np.linalg.norm(p[2:]) < 1e-8
    assert np.abs(line.start_point - line.end_point).sum() > 0.0


def test_ambiguous_middle_above():
    # middle value 0.5 > 0.4 agrees with corner (0,0): the low corners are cut off
    sq = _square([[1.0, 0.0], [0.0, 1.0]], value=0.4)
    assert sq.is_ambiguous()
    assert sq.get_number_lines() == 2
    first, second = sq.get_lines()
    assert _endpoints(first) == {(0.6, 0.0), (1.0, 0.4)}
    assert _endpoints(second) == {(0.0, 0.6), (0.4, 1.0)}
    np.testing.assert_allclose(first.outside_point[2:], [1.0, 0.0])
    np.testing.assert_allclose(second.outside_point[2:], [0.0, 1.0])


def test_ambiguous_middle_below():
    # middle value below the threshold: the high corners are cut off
    sq = _square([[1.0, 0.0], [0.0, 0.9]], value=0.5)
    assert sq.is_ambiguous()
    first, second = sq.get_lines()
    assert (0.5, 0.0) in _endpoints(first) and (0.0, 0.5) in _endpoints(first)
    np.testing.assert_allclose(first.outside_point[2:], [0.5, 0.5])
    np.testing.assert_allclose(second.outside_point[2:], [0.5, 0.5])


def test_ambiguous_middle_on_threshold():
    # tie: the default pairing cuts off corners (0,0) and (1,1)
    sq = _square([[1.0, 0.0], [0.0, 1.0]], value=0.5)
    assert sq.is_ambiguous()
    first, second = sq.get_lines()
    assert _endpoints(first) == {(0.5, 0.0), (0.0, 0.5)}
    assert _endpoints(second) == {(1.0, 0.5), (0.5, 1.0)}


@pytest.mark.parametrize(
    "corners, value",
    [
        ([[0.0, 0.0], [0.0, 1.0]], 0.5),
        ([[1.0, 0.2], [0.3, 0.1]], 0.5),
        ([[1.0, 0.0], [0.0, 1.0]], 0.4),
        ([[1.0, 0.0], [0.0, 0.9]], 0.5),
        ([[0.2, 0.8], [0.9, 0.1]], 0.5),
    ],
)
def test_normals_point_away_from_outside(corners, value):
    sq = _square(corners, value=value)
    assert sq.get_number_lines() > 0
    for line in sq.get_lines():
        assert np.dot(line.normal, line.outside_point - line.centroid) <= 0.0


def test_reinitialization_resets_state():
    sq = _square([[1.0, 0.0], [0.0, 1.0]], value=0.4)
    assert sq.is_ambiguous()
    sq.init_square(np.zeros((2, 2)), (0, 1), (0.0, 0.0), DX)
    sq.construct_lines(0.5)
    assert not sq.is_ambiguous()
    assert sq.get_number_lines() == 0


def test_topology_error_on_inconsistent_cuts():
    sq = Square()
    sq.init_square(np.zeros((2, 2)), (0, 1), (0.0, 0.0), DX)
    for _ in range(4):
        sq._add_cut(0.0, 0.0)
    with pytest.raises(TopologyError):
        sq._add_cut(0.0, 0.0)


if __name__ == "__main__":
    test_split_along_first_axis()
    test_single_high_corner()
    test_ambiguous_middle_above()
