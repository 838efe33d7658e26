import logging

import numpy as np

import PyCornelius
from PyCornelius.geometry_element import DIM, STEPS, EPSILON, TopologyError
from PyCornelius.line import Line
from PyCornelius.polygon import Polygon
from PyCornelius.square import Square

logger = logging.getLogger(PyCornelius.__name__)


class Cube:
    """Three dimensional cell (marching cubes).

    The cube is split into its six faces, the lines found on the faces are
    collected and connected to one or more polygons. The cube lives on a
    hyperface of a four dimensional cell where the coordinate ``const_i``
    takes the value ``const_value``; its own axes are the remaining
    coordinates ``x1 < x2 < x3``.

    Parameters
    ----------
    epsilon : float, default EPSILON
        Tolerance used when chaining lines into polygons.
    """

    NSQUARES = 6
    MAX_POLYGONS = 8

    def __init__(self, epsilon: float = EPSILON):
        self.epsilon = epsilon
        self.cube = np.zeros((STEPS, STEPS, STEPS))
        self.squares = [Square() for _ in range(self.NSQUARES)]
        self.polygons = [Polygon(epsilon) for _ in range(self.MAX_POLYGONS)]
        self.lines: list[Line] = []
        self.dx = np.zeros(DIM)
        self.const_i = 0
        self.const_value = 0.0
        self.x1, self.x2, self.x3 = 1, 2, 3
        self.number_polygons = 0
        self.ambiguous = False

    def init_cube(self, cu, const_i: int, const_value: float, dx):
        """Resets the cube for a new query.

        Parameters
        ----------
        cu : array-like of shape (2, 2, 2)
            Corner values, axes ordered as ``x1, x2, x3``.
        const_i : int
            Ambient coordinate which is constant on this cube.
        const_value : float
            Value of the constant coordinate.
        dx : array-like of shape (4,)
            Cell edge lengths in ambient coordinates.
        """
        self.cube[:] = cu
        self.const_i = const_i
        self.const_value = const_value
        self.dx[:] = dx
        self.x1, self.x2, self.x3 = [i for i in range(DIM) if i != const_i]
        self.lines.clear()
        self.number_polygons = 0
        self.ambiguous = False

    def is_ambiguous(self) -> bool:
        return self.ambiguous

    def get_number_lines(self) -> int:
        return len(self.lines)

    def get_number_polygons(self) -> int:
        return self.number_polygons

    def get_polygons(self) -> list[Polygon]:
        return self.polygons[: self.number_polygons]

    def split_to_squares(self):
        """Initializes the six faces, two for every free coordinate."""
        number_squares = 0
        for axis, i in enumerate((self.x1, self.x2, self.x3)):
            c_i = (self.const_i, i)
            for j in range(STEPS):
                c_v = (self.const_value, j * self.dx[i])
                self.squares[number_squares].init_square(
                    np.take(self.cube, j, axis=axis), c_i, c_v, self.dx
                )
                number_squares += 1

    def check_ambiguity(self, number_lines: int, value: float):
        """Marks the cube ambiguous if any face is ambiguous or if the lines
        may form two separate triangles at opposite corners."""
        if any(square.is_ambiguous() for square in self.squares):
            self.ambiguous = True
            return
        if number_lines == 6:
            number_points_below_value = int(np.count_nonzero(self.cube < value))
            if number_points_below_value > 4:
                number_points_below_value = 8 - number_points_below_value
            if number_points_below_value == 2:
                self.ambiguous = True

    def _next_polygon(self) -> Polygon:
        if self.number_polygons >= len(self.polygons):
            self.polygons.append(Polygon(self.epsilon))
        polygon = self.polygons[self.number_polygons]
        polygon.init_polygon(self.const_i)
        return polygon

    def construct_polygons(self, value: float):
        """Finds the polygons where the field crosses ``value``."""
        self.split_to_squares()
        self.lines.clear()
        self.number_polygons = 0
        for square in self.squares:
            square.construct_lines(value)
            self.lines.extend(square.get_lines())

        number_lines = len(self.lines)
        # only possible for the hyperfaces of a hypercube
        if number_lines == 0:
            return

        self.check_ambiguity(number_lines, value)
        if not self.ambiguous:
            # a single polygon; the order of the lines does not matter
            polygon = self._next_polygon()
            for line in self.lines:
                polygon.add_line(line, perform_no_check=True)
            self.number_polygons += 1
            return

        logger.debug(f"Ambiguous cube with {number_lines} lines")
        not_used = [True] * number_lines
        used = 0
        while used < number_lines:
            if number_lines - used < 3:
                msg = f"Cube: cannot construct a polygon from {number_lines - used} lines"
                logger.error(msg)
                raise TopologyError(msg)
            polygon = self._next_polygon()
            added = True
            while added:
                added = False
                for i, line in enumerate(self.lines):
                    if not_used[i] and polygon.add_line(line):
                        not_used[i] = False
                        used += 1
                        added = True
                        # rescan from the beginning
                        break
            self.number_polygons += 1
