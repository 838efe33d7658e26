import numpy as np
import pytest

from PyCornelius.geometry_element import TopologyError
from PyCornelius.hypercube import Hypercube
from PyCornelius.polyhedron import tetrahedron_volume

DX = np.ones(4)


def _hypercube(corners, value=0.5):
    hc = Hypercube()
    hc.init_hypercube(np.asarray(corners, dtype=float), DX)
    hc.construct_polyhedra(value)
    return hc


@pytest.fixture
def single_low_corner():
    corners = np.ones((2, 2, 2, 2))
    corners[0, 0, 0, 0] = 0.0
    return corners


def test_tetrahedron_volume():
    # unit tetrahedron in the hyperplane x0 = 0
    n = tetrahedron_volume(
        np.array([0.0, 1.0, 0.0, 0.0]),
        np.array([0.0, 0.0, 1.0, 0.0]),
        np.array([0.0, 0.0, 0.0, 1.0]),
    )
    np.testing.assert_allclose(np.abs(n), [1 / 6, 0.0, 0.0, 0.0], atol=1e-14)
    # orthogonal to the spanning vectors
    m = np.array([[1.0, 2.0, 0.5, 0.0], [0.0, 1.0, 3.0, 1.0], [2.0, 0.0, 1.0, 1.0]])
    n = tetrahedron_volume(*m)
    np.testing.assert_allclose(m @ n, 0.0, atol=1e-12)


def test_single_corner(single_low_corner):
    hc = _hypercube(single_low_corner)
    assert not hc.is_ambiguous()
    assert hc.get_number_polyhedra() == 1
    polyhedron = hc.get_polyhedra()[0]
    # one triangle in each of the four hyperfaces touching the low corner
    assert polyhedron.get_number_polygons() == 4
    assert polyhedron.get_number_tetrahedrons() == 12
    np.testing.assert_allclose(polyhedron.centroid, np.full(4, 0.125))
    np.testing.assert_allclose(polyhedron.normal, np.full(4, 1 / 48))


def test_single_high_corner_flips_normal(single_low_corner):
    hc = _hypercube(1.0 - single_low_corner)
    polyhedron = hc.get_polyhedra()[0]
    np.testing.assert_allclose(polyhedron.centroid, np.full(4, 0.125))
    np.testing.assert_allclose(polyhedron.normal, np.full(4, -1 / 48))


def test_opposite_corners_are_ambiguous(single_low_corner):
    corners = single_low_corner
    corners[1, 1, 1, 1] = 0.0
    hc = _hypercube(corners)
    assert hc.is_ambiguous()
    assert hc.get_number_polyhedra() == 2
    first, second = hc.get_polyhedra()
    assert first.get_number_polygons() == second.get_number_polygons() == 4
    centroids = sorted(p.centroid[0] for p in (first, second))
    np.testing.assert_allclose(centroids, [0.125, 0.875])
    for polyhedron in (first, second):
        expected = np.full(4, 1 / 48) if polyhedron.centroid[0] < 0.5 else np.full(4, -1 / 48)
        np.testing.assert_allclose(polyhedron.normal, expected)


def test_too_small_epsilon_raises_topology_error(single_low_corner):
    corners = single_low_corner
    corners[1, 1, 1, 1] = 0.0
    # no polygon can be joined to another one
    hc = Hypercube(epsilon=-1.0)
    hc.init_hypercube(corners, DX)
    with pytest.raises(TopologyError):
        hc.construct_polyhedra(0.5)


def test_ambiguous_hypercube_with_near_threshold_corner(single_low_corner):
    corners = single_low_corner
    corners[1, 1, 1, 1] = 0.5 - 1e-12
    hc = _hypercube(corners)
    assert hc.is_ambiguous()
    assert hc.get_number_polyhedra() == 2
    first, second = hc.get_polyhedra()
    assert first.get_number_polygons() == second.get_number_polygons() == 4
    np.testing.assert_allclose(first.centroid, np.full(4, 0.125))
    np.testing.assert_allclose(first.normal, np.full(4, 1 / 48))


def test_planar_field_normal():
    # f = x0 + x1 + x2 + x3 crosses 2 in the middle of the hypercube
    idx = np.indices((2, 2, 2, 2)).sum(axis=0).astype(float)
    hc = _hypercube(idx, value=1.5)
    assert not hc.is_ambiguous()
    assert hc.get_number_polyhedra() == 1
    normal = hc.get_polyhedra()[0].normal
    assert np.all(normal > 0.0)
    np.testing.assert_allclose(normal / np.linalg.norm(normal), np.full(4, 0.5))


def test_uniform_hypercube_has_no_polyhedra():
    hc = _hypercube(np.ones((2, 2, 2, 2)))
    assert hc.get_number_polyhedra() == 0


if __name__ == "__main__":
    test_tetrahedron_volume()
    test_planar_field_normal()
