import logging

import numpy as np

import PyCornelius
from PyCornelius.geometry_element import (
    GeometryElement,
    DIM,
    EPSILON,
    TopologyError,
    flip_normal_if_needed,
)
from PyCornelius.line import Line
from PyCornelius.polygon import Polygon

logger = logging.getLogger(PyCornelius.__name__)

INV_SIX = 1.0 / 6.0


def tetrahedron_volume(v1: np.ndarray, v2: np.ndarray, v3: np.ndarray) -> np.ndarray:
    """Normal vector of the tetrahedron spanned by three 4-vectors.

    The components are the cofactors of the 3x4 matrix ``(v1, v2, v3)``
    divided by six, i.e. the generalized cross product. Its length is the
    volume of the tetrahedron.
    """
    m = np.vstack((v1, v2, v3))
    return INV_SIX * np.array(
        [(-1) ** k * np.linalg.det(np.delete(m, k, axis=1)) for k in range(DIM)]
    )


class Polyhedron(GeometryElement):
    """Closed collection of polygons bounding a piece of a three dimensional
    hypersurface in four dimensions.

    Every edge of every polygon forms a tetrahedron together with the
    centroid of its polygon and the centroid of the polyhedron. Centroid and
    normal are volume weighted sums over these tetrahedra.

    Parameters
    ----------
    epsilon : float, default EPSILON
        Tolerance for two points to be considered the same.
    """

    MAX_POLYGONS = 24

    def __init__(self, epsilon: float = EPSILON):
        super().__init__()
        self.epsilon = epsilon
        self.polygons: list[Polygon] = []
        self.number_tetrahedrons = 0

    def init_polyhedron(self):
        self.polygons.clear()
        self.number_tetrahedrons = 0
        self.reset()

    def get_number_polygons(self) -> int:
        return len(self.polygons)

    def get_number_tetrahedrons(self) -> int:
        return self.number_tetrahedrons

    def get_polygons(self) -> list[Polygon]:
        return self.polygons

    def lines_are_connected(self, line1: Line, line2: Line) -> bool:
        """True if any endpoint of ``line1`` coincides with any endpoint of
        ``line2``."""
        for p1 in (line1.start_point, line1.end_point):
            for p2 in (line2.start_point, line2.end_point):
                if np.abs(p1 - p2).sum() <= self.epsilon:
                    return True
        return False

    def add_polygon(self, new_polygon: Polygon, perform_no_check: bool = False) -> bool:
        """Adds a polygon if it shares an edge point with a polygon already
        in the polyhedron.

        Returns
        -------
        bool
            True if the polygon was added.
        """
        if not self.polygons or perform_no_check:
            self.polygons.append(new_polygon)
            self.number_tetrahedrons += new_polygon.get_number_lines()
            return True
        for polygon in self.polygons:
            for new_line in new_polygon.get_lines():
                for line in polygon.get_lines():
                    if self.lines_are_connected(new_line, line):
                        self.polygons.append(new_polygon)
                        self.number_tetrahedrons += new_polygon.get_number_lines()
                        return True
        return False

    def _edges(self):
        """Yields (start, end, outside point, polygon centroid) of all edges."""
        for polygon in self.polygons:
            polygon_centroid = polygon.centroid
            for line in polygon.get_lines():
                yield line.start_point, line.end_point, line.outside_point, polygon_centroid

    def _calculate_centroid(self):
        if self.number_tetrahedrons == 0:
            msg = "Polyhedron: cannot compute the centroid without polygons"
            logger.error(msg)
            raise TopologyError(msg)
        mean_values = np.zeros(DIM)
        for start, end, _, _ in self._edges():
            mean_values += start + end
        mean_values /= 2.0 * self.number_tetrahedrons

        sum_up = np.zeros(DIM)
        sum_down = 0.0
        for start, end, _, polygon_centroid in self._edges():
            cm_i = 0.25 * (start + end + polygon_centroid + mean_values)
            n = tetrahedron_volume(
                start - mean_values, end - mean_values, polygon_centroid - mean_values
            )
            volume = np.linalg.norm(n)
            sum_up += volume * cm_i
            sum_down += volume
        if sum_down <= 0.0:
            # degenerate, all tetrahedra are flat
            self._centroid[:] = mean_values
            return
        self._centroid[:] = sum_up / sum_down

    def _calculate_normal(self):
        centroid = self.centroid
        self._normal[:] = 0.0
        for start, end, outside, polygon_centroid in self._edges():
            n = tetrahedron_volume(
                start - centroid, end - centroid, polygon_centroid - centroid
            )
            flip_normal_if_needed(n, outside - centroid)
            self._normal += n
