import logging

import numpy as np

import PyCornelius
from PyCornelius.cube import Cube
from PyCornelius.geometry_element import DIM, STEPS, EPSILON, TopologyError
from PyCornelius.polygon import Polygon
from PyCornelius.polyhedron import Polyhedron

logger = logging.getLogger(PyCornelius.__name__)


class Hypercube:
    """Four dimensional cell (marching hypercubes).

    The hypercube is split into its eight cubic hyperfaces, the polygons of
    the hyperfaces are collected and connected into one or more polyhedra.

    Parameters
    ----------
    epsilon : float, default EPSILON
        Tolerance used when connecting polygons.
    """

    NCUBES = 8
    MAX_POLYHEDRA = 10

    def __init__(self, epsilon: float = EPSILON):
        self.epsilon = epsilon
        self.hypercube = np.zeros((STEPS,) * 4)
        self.cubes = [Cube(epsilon) for _ in range(self.NCUBES)]
        self.polyhedra = [Polyhedron(epsilon) for _ in range(self.MAX_POLYHEDRA)]
        self.polygons: list[Polygon] = []
        self.dx = np.zeros(DIM)
        self.number_polyhedra = 0
        self.ambiguous = False

    def init_hypercube(self, hc, dx):
        self.hypercube[:] = hc
        self.dx[:] = dx
        self.polygons.clear()
        self.number_polyhedra = 0
        self.ambiguous = False

    def is_ambiguous(self) -> bool:
        return self.ambiguous

    def get_number_polyhedra(self) -> int:
        return self.number_polyhedra

    def get_polyhedra(self) -> list[Polyhedron]:
        return self.polyhedra[: self.number_polyhedra]

    def split_to_cubes(self, value: float) -> int:
        """Initializes the eight hyperfaces.

        Returns
        -------
        int
            Number of corners below ``value``.
        """
        cube_index = 0
        for i in range(DIM):
            for j in range(STEPS):
                self.cubes[cube_index].init_cube(
                    np.take(self.hypercube, j, axis=i), i, j * self.dx[i], self.dx
                )
                cube_index += 1
        return int(np.count_nonzero(self.hypercube < value))

    def check_ambiguity(self, number_points_below_value: int):
        if any(cube.is_ambiguous() for cube in self.cubes):
            self.ambiguous = True
            return
        number_lines = sum(cube.get_number_lines() for cube in self.cubes)
        if number_points_below_value > 8:
            number_points_below_value = 16 - number_points_below_value
        if number_lines == 24 and number_points_below_value == 2:
            self.ambiguous = True

    def _next_polyhedron(self) -> Polyhedron:
        if self.number_polyhedra >= len(self.polyhedra):
            self.polyhedra.append(Polyhedron(self.epsilon))
        polyhedron = self.polyhedra[self.number_polyhedra]
        polyhedron.init_polyhedron()
        return polyhedron

    def construct_polyhedra(self, value: float):
        """Finds the polyhedra where the field crosses ``value``."""
        number_points_below_value = self.split_to_cubes(value)
        self.polygons.clear()
        self.number_polyhedra = 0
        for cube in self.cubes:
            cube.construct_polygons(value)
            self.polygons.extend(cube.get_polygons())

        number_polygons = len(self.polygons)
        if number_polygons == 0:
            return

        self.check_ambiguity(number_points_below_value)
        if not self.ambiguous:
            polyhedron = self._next_polyhedron()
            for polygon in self.polygons:
                polyhedron.add_polygon(polygon, perform_no_check=True)
            self.number_polyhedra += 1
            return

        logger.debug(f"Ambiguous hypercube with {number_polygons} polygons")
        not_used = [True] * number_polygons
        used = 0
        while used < number_polygons:
            if number_polygons - used < 3:
                msg = (
                    "Hypercube: cannot construct a polyhedron from "
                    f"{number_polygons - used} polygons"
                )
                logger.error(msg)
                raise TopologyError(msg)
            polyhedron = self._next_polyhedron()
            added = True
            while added:
                added = False
                for i, polygon in enumerate(self.polygons):
                    if not_used[i] and polyhedron.add_polygon(polygon):
                        not_used[i] = False
                        used += 1
                        added = True
                        break
            self.number_polyhedra += 1
