import logging

import numpy as np

import PyCornelius
from PyCornelius.geometry_element import (
    DIM,
    STEPS,
    ALMOST_ZERO,
    ALMOST_ONE,
    TopologyError,
)
from PyCornelius.line import Line

logger = logging.getLogger(PyCornelius.__name__)


class Square:
    """Two dimensional cell (marching squares base case).

    The corner values are stored as ``points[i][j]`` where ``i`` runs along
    the first free coordinate ``x1`` and ``j`` along the second free
    coordinate ``x2``. The square lives on a face of a higher dimensional
    cell on which the coordinates ``const_i`` take the values
    ``const_value``.

    Edges are searched in the order

    - edge 0: (0,0) -> (1,0)
    - edge 1: (0,0) -> (0,1)
    - edge 2: (1,0) -> (1,1)
    - edge 3: (0,1) -> (1,1)

    so that consecutive cuts ``(0, 1)`` and ``(2, 3)`` cut off the corners
    (0,0) and (1,1) respectively. This is the default pairing in the
    ambiguous four-cut case.
    """

    MAX_CUTS = 4
    MAX_LINES = 2

    def __init__(self):
        self.points = np.zeros((STEPS, STEPS))
        self.cuts = np.zeros((self.MAX_CUTS, 2))
        self.out = np.zeros((self.MAX_LINES, 2))
        self.lines = [Line() for _ in range(self.MAX_LINES)]
        self.dx = np.zeros(DIM)
        self.const_i = (0, 1)
        self.const_value = (0.0, 0.0)
        self.x1 = 2
        self.x2 = 3
        self.number_cuts = 0
        self.number_lines = 0
        self.ambiguous = False
        # scratch buffers for line construction
        self._points_temp = np.zeros((2, DIM))
        self._out_temp = np.zeros(DIM)

    def init_square(self, sq, c_i, c_v, dx):
        """Resets the square for a new query.

        Parameters
        ----------
        sq : array-like of shape (2, 2)
            Corner values.
        c_i : tuple of int
            Coordinate indices which are constant on this square.
        c_v : tuple of float
            Values of the constant coordinates.
        dx : array-like of shape (4,)
            Cell edge lengths in ambient coordinates.
        """
        self.points[:] = sq
        self.const_i = tuple(c_i)
        self.const_value = tuple(c_v)
        self.dx[:] = dx
        self.x1, self.x2 = [i for i in range(DIM) if i not in self.const_i]
        self.number_cuts = 0
        self.number_lines = 0
        self.ambiguous = False

    def is_ambiguous(self) -> bool:
        return self.ambiguous

    def get_number_lines(self) -> int:
        return self.number_lines

    def get_lines(self) -> list[Line]:
        return self.lines[: self.number_lines]

    def construct_lines(self, value: float):
        """Finds the lines where the field crosses ``value``."""
        p = self.points
        mask = (
            int(p[0, 0] >= value)
            | int(p[0, 1] >= value) << 1
            | int(p[1, 0] >= value) << 2
            | int(p[1, 1] >= value) << 3
        )
        self.number_lines = 0
        if mask == 0 or mask == 15:
            return

        self._ends_of_edge(value)
        if self.number_cuts > 0:
            self._find_outside(value)

        # cuts (0, 1) form the first line, cuts (2, 3) the second one
        for i in range(0, self.number_cuts, 2):
            self._place(self._points_temp[0], self.cuts[i])
            self._place(self._points_temp[1], self.cuts[i + 1])
            self._place(self._out_temp, self.out[i // 2])
            self.lines[self.number_lines].init_line(
                self._points_temp, self._out_temp, self.const_i
            )
            self.number_lines += 1

    def _place(self, target, local):
        """Writes face local coordinates into an ambient coordinate vector."""
        target[self.x1] = local[0]
        target[self.x2] = local[1]
        target[self.const_i[0]] = self.const_value[0]
        target[self.const_i[1]] = self.const_value[1]

    def _add_cut(self, a, b):
        if self.number_cuts >= self.MAX_CUTS:
            msg = "Square: more than four cut points found"
            logger.error(msg)
            raise TopologyError(msg)
        self.cuts[self.number_cuts] = (a, b)
        self.number_cuts += 1

    def _ends_of_edge(self, value: float):
        """Finds the cut points on the four edges by linear interpolation."""
        p = self.points
        dx1 = self.dx[self.x1]
        dx2 = self.dx[self.x2]
        self.number_cuts = 0

        # (corner a, corner b, position along the edge -> local coordinates)
        edges = (
            ((0, 0), (1, 0), lambda t: (t * dx1, 0.0)),
            ((0, 0), (0, 1), lambda t: (0.0, t * dx2)),
            ((1, 0), (1, 1), lambda t: (dx1, t * dx2)),
            ((0, 1), (1, 1), lambda t: (t * dx1, dx2)),
        )
        for a, b, to_local in edges:
            va = p[a]
            vb = p[b]
            if (va - value) * (vb - value) < 0:
                self._add_cut(*to_local((va - value) / (va - vb)))
            elif va == value and vb < value:
                self._add_cut(*to_local(ALMOST_ZERO))
            elif vb == value and va < value:
                self._add_cut(*to_local(ALMOST_ONE))

        if self.number_cuts not in (0, 2, 4):
            msg = f"Square: found {self.number_cuts} cut points, expected 0, 2 or 4"
            logger.error(msg)
            raise TopologyError(msg)

    def _find_outside(self, value: float):
        """Finds the outside points of the lines and orders the cuts.

        With four cuts the square is ambiguous and the value in the middle of
        the square decides which pair of diagonal corners is cut off. A middle
        value exactly at the threshold keeps the default pairing.
        """
        p = self.points
        dx1 = self.dx[self.x1]
        dx2 = self.dx[self.x2]

        if self.number_cuts == 4:
            self.ambiguous = True
            value_middle = 0.25 * p.sum()
            # same side as corner (0,0): connect it through the middle, i.e.
            # cut off corners (1,0) and (0,1) instead
            if (p[0, 0] < value and value_middle < value) or (
                p[0, 0] > value and value_middle > value
            ):
                self.cuts[[1, 2]] = self.cuts[[2, 1]]

            if value_middle < value:
                self.out[0] = (0.5 * dx1, 0.5 * dx2)
                self.out[1] = (0.5 * dx1, 0.5 * dx2)
            elif p[0, 0] < value:
                self.out[0] = (0.0, 0.0)
                self.out[1] = (dx1, dx2)
            else:
                self.out[0] = (dx1, 0.0)
                self.out[1] = (0.0, dx2)
            return

        below = np.argwhere(p < value)
        if below.size == 0:
            self.out[0] = 0.0
            return
        self.out[0] = below.mean(axis=0) * (dx1, dx2)
