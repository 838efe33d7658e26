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

logger = logging.getLogger(PyCornelius.__name__)


class Polygon(GeometryElement):
    """Closed chain of lines bounding a piece of a two dimensional surface.

    The polygon lives on a three dimensional cube in which the coordinate
    ``const_i`` is constant; ``x1``, ``x2`` and ``x3`` are the free
    coordinates. Centroid and normal are obtained by triangulating every
    edge against the centroid.

    Parameters
    ----------
    epsilon : float, default EPSILON
        Tolerance for two endpoints to be considered the same point.
    """

    MAX_LINES = 24

    def __init__(self, epsilon: float = EPSILON):
        super().__init__()
        self.epsilon = epsilon
        self.lines: list[Line] = []
        self.const_i = 0
        self.x1, self.x2, self.x3 = 1, 2, 3

    def init_polygon(self, const_i: int):
        self.const_i = const_i
        self.x1, self.x2, self.x3 = [i for i in range(DIM) if i != const_i]
        self.lines.clear()
        self.reset()

    @property
    def free_indices(self) -> list[int]:
        return [self.x1, self.x2, self.x3]

    def get_number_lines(self) -> int:
        return len(self.lines)

    def get_lines(self) -> list[Line]:
        return self.lines

    def add_line(self, new_line: Line, perform_no_check: bool = False) -> bool:
        """Adds a line if it continues the chain of the polygon.

        The line is accepted if its start or end point coincides with the end
        point of the last line. If its end point matches, the line is
        flipped so that the chain stays oriented head to tail.

        Parameters
        ----------
        new_line : Line
            Candidate line.
        perform_no_check : bool, default False
            Append without checking connectivity.

        Returns
        -------
        bool
            True if the line was added.
        """
        if not self.lines or perform_no_check:
            self.lines.append(new_line)
            return True
        last_end_point = self.lines[-1].end_point
        difference1 = np.abs(new_line.start_point - last_end_point).sum()
        difference2 = np.abs(new_line.end_point - last_end_point).sum()
        if difference1 < self.epsilon or difference2 < self.epsilon:
            # the end point wins when both ends touch the chain
            if difference2 < self.epsilon:
                new_line.flip_start_end()
            self.lines.append(new_line)
            return True
        return False

    def _check_valid(self):
        if len(self.lines) < 3:
            msg = f"Polygon: cannot form a polygon from {len(self.lines)} lines"
            logger.error(msg)
            raise TopologyError(msg)

    def _calculate_centroid(self):
        self._check_valid()
        starts = np.array([line.start_point for line in self.lines])
        ends = np.array([line.end_point for line in self.lines])
        mean_values = (starts.sum(axis=0) + ends.sum(axis=0)) / (2.0 * len(self.lines))
        if len(self.lines) == 3:
            self._centroid[:] = mean_values
            return

        free = self.free_indices
        a = starts - mean_values
        b = ends - mean_values
        areas = 0.5 * np.linalg.norm(np.cross(a[:, free], b[:, free]), axis=1)
        triangle_centroids = (starts + ends + mean_values) / 3.0
        sum_down = areas.sum()
        if sum_down <= 0.0:
            # degenerate polygon, every triangle has zero area
            self._centroid[:] = mean_values
            return
        self._centroid[:] = (areas[:, None] * triangle_centroids).sum(axis=0) / sum_down

    def _calculate_normal(self):
        centroid = self.centroid
        free = self.free_indices
        self._normal[:] = 0.0
        normal = np.zeros(DIM)
        for line in self.lines:
            a = line.start_point - centroid
            b = line.end_point - centroid
            normal[:] = 0.0
            normal[free] = 0.5 * np.cross(a[free], b[free])
            flip_normal_if_needed(normal, line.outside_point - centroid)
            self._normal += normal

    def print(self, file, position):
        """Writes the triangles of the polygon as rows of absolute points.

        Every row holds the two endpoints of one edge followed by the
        centroid, i.e. ``x1 y1 z1 x2 y2 z2 cx cy cz``.

        Parameters
        ----------
        file : file-like
            Text stream to write to.
        position : array-like
            Absolute position of the cell in ambient coordinates.
        """
        position = np.asarray(position, dtype=float)
        free = self.free_indices
        centroid = self.centroid
        for line in self.lines:
            row = np.concatenate(
                (
                    position[free] + line.start_point[free],
                    position[free] + line.end_point[free],
                    position[free] + centroid[free],
                )
            )
            file.write(" ".join(f"{v:.10g}" for v in row) + "\n")
