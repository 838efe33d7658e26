"""
Cornelius Surface Finder
========================

Entry point of the kernel. A ``Cornelius`` object is initialized once for a
dimension, a threshold and the cell edge lengths and then queried cell by
cell. After every query the number of surface elements and their centroids
and normals can be read out.

Coordinates returned by the accessors are local to the cell, i.e. relative
to the corner ``(0, ..., 0)`` of the queried array, and have as many
components as the initialized dimension. The normals point away from the
region below the threshold; their length is the length (2D), area (3D) or
volume (4D) of the surface element.

Examples
--------
>>> from PyCornelius.cornelius import Cornelius
>>> cor = Cornelius()
>>> cor.init(3, 0.5, [1.0, 1.0, 1.0])
>>> cube = [[[0.0, 1.0], [1.0, 1.0]], [[1.0, 1.0], [1.0, 1.0]]]
>>> cor.find_surface_3d(cube)
>>> cor.get_number_elements()
1
"""

import logging
import os

import numpy as np

import PyCornelius
from PyCornelius.cube import Cube
from PyCornelius.geometry_element import DIM, STEPS, EPSILON, CorneliusError
from PyCornelius.hypercube import Hypercube
from PyCornelius.square import Square

logger = logging.getLogger(PyCornelius.__name__)

__all__ = ["Cornelius"]


class Cornelius:
    """Finds the surface elements of single grid cells in 2, 3 or 4
    dimensions.

    The object owns one square, one cube and one hypercube which are reused
    for every query. It keeps no global state, so independent instances can
    be used in parallel workers; a single instance is not thread safe.

    Parameters
    ----------
    epsilon : float, default EPSILON
        Tolerance for two points to be considered the same when connecting
        lines and polygons of ambiguous cells.
    """

    MAX_ELEMENTS = 10

    def __init__(self, epsilon: float = EPSILON):
        self.epsilon = epsilon
        self.number_elements = 0
        self.cube_dimension = 0
        self.value = 0.0
        self.dx = np.zeros(DIM)
        self.initialized = False
        self.ambiguous = False
        self.normals = np.zeros((self.MAX_ELEMENTS, DIM))
        self.centroids = np.zeros((self.MAX_ELEMENTS, DIM))

        self.cube_2d = Square()
        self.cube_3d = Cube(epsilon)
        self.cube_4d = Hypercube(epsilon)

        self.print_initialized = False
        self._output_file = None
        self._owns_output_file = False

    def init(self, dimension: int, value: float, dx):
        """Initializes the surface finder.

        Parameters
        ----------
        dimension : int
            Dimension of the cells, 2, 3 or 4.
        value : float
            Threshold value of the surface.
        dx : sequence of float
            Cell edge lengths, one per axis of the corner arrays. A sequence
            of four values is accepted as well, in which case the first
            ``dimension`` values are used and the rest is padding.
        """
        if dimension not in (2, 3, 4):
            msg = f"Cornelius: dimension must be 2, 3 or 4, got {dimension}"
            logger.error(msg)
            raise CorneliusError(msg)
        dx = np.asarray(dx, dtype=float).reshape(-1)
        if dx.shape[0] == DIM and dimension != DIM:
            dx = dx[:dimension]
        if dx.shape[0] != dimension:
            msg = (
                f"Cornelius: expected {dimension} cell edge lengths, "
                f"got {dx.shape[0]}"
            )
            logger.error(msg)
            raise CorneliusError(msg)

        self.cube_dimension = dimension
        self.value = float(value)
        # the leading coordinates of lower dimensional cells are held at 0
        self.dx[:] = 0.0
        self.dx[DIM - dimension :] = dx
        self.number_elements = 0
        self.ambiguous = False
        self.initialized = True
        logger.debug(
            f"Cornelius initialized: dimension {dimension}, value {self.value}, "
            f"dx {dx.tolist()}"
        )

    def init_print_cornelius(self, target):
        """Opens a sink for the triangles of 3D surface elements.

        Parameters
        ----------
        target : str, os.PathLike or file-like
            File name to open for writing, or an already open text stream.
        """
        self.close_print_cornelius()
        if isinstance(target, (str, os.PathLike)):
            self._output_file = open(target, "w")
            self._owns_output_file = True
        else:
            self._output_file = target
            self._owns_output_file = False
        self.print_initialized = True

    def close_print_cornelius(self):
        if self._owns_output_file and self._output_file is not None:
            self._output_file.close()
        self._output_file = None
        self._owns_output_file = False
        self.print_initialized = False

    def _check_query(self, dimension: int, cu) -> np.ndarray:
        if not self.initialized or self.cube_dimension != dimension:
            msg = f"Cornelius not initialized for {dimension}D case."
            logger.error(msg)
            raise CorneliusError(msg)
        cu = np.asarray(cu, dtype=float)
        if cu.shape != (STEPS,) * dimension:
            msg = (
                f"Cornelius: expected corner values of shape {(STEPS,) * dimension}, "
                f"got {cu.shape}"
            )
            logger.error(msg)
            raise CorneliusError(msg)
        return cu

    def _is_not_crossed(self, cu: np.ndarray) -> bool:
        # all corners on the same side of the threshold
        value_greater = np.count_nonzero(cu >= self.value)
        return value_greater == 0 or value_greater == cu.size

    def _store_elements(self, elements):
        self.number_elements = len(elements)
        if self.number_elements > self.normals.shape[0]:
            self.normals = np.zeros((self.number_elements, DIM))
            self.centroids = np.zeros((self.number_elements, DIM))
        for i, element in enumerate(elements):
            self.normals[i] = element.normal
            self.centroids[i] = element.centroid

    def find_surface_2d(self, cu):
        """Finds the surface lines of a square of shape (2, 2)."""
        cu = self._check_query(2, cu)
        self.cube_2d.init_square(cu, (0, 1), (0.0, 0.0), self.dx)
        self.cube_2d.construct_lines(self.value)
        self.ambiguous = self.cube_2d.is_ambiguous()
        self._store_elements(self.cube_2d.get_lines())

    def find_surface_3d(self, cu):
        """Finds the surface polygons of a cube of shape (2, 2, 2)."""
        self._surface_3d(cu, None)

    def find_surface_3d_print(self, cu, position):
        """Like :meth:`find_surface_3d`, but also writes the triangles of
        the found polygons to the sink opened by
        :meth:`init_print_cornelius`.

        Parameters
        ----------
        cu : array-like of shape (2, 2, 2)
            Corner values.
        position : sequence of 3 floats
            Absolute position of corner ``(0, 0, 0)``.
        """
        self._surface_3d(cu, position)

    def _surface_3d(self, cu, position):
        cu = self._check_query(3, cu)
        self.ambiguous = False
        if self._is_not_crossed(cu):
            self.number_elements = 0
            return
        self.cube_3d.init_cube(cu, 0, 0.0, self.dx)
        self.cube_3d.construct_polygons(self.value)
        self.ambiguous = self.cube_3d.is_ambiguous()
        polygons = self.cube_3d.get_polygons()
        self._store_elements(polygons)
        if position is not None and self.print_initialized:
            position_4d = np.zeros(DIM)
            position_4d[1:] = np.asarray(position, dtype=float).reshape(-1)
            for polygon in polygons:
                polygon.print(self._output_file, position_4d)

    def find_surface_4d(self, cu):
        """Finds the surface polyhedra of a hypercube of shape (2, 2, 2, 2)."""
        cu = self._check_query(4, cu)
        self.ambiguous = False
        if self._is_not_crossed(cu):
            self.number_elements = 0
            return
        self.cube_4d.init_hypercube(cu, self.dx)
        self.cube_4d.construct_polyhedra(self.value)
        self.ambiguous = self.cube_4d.is_ambiguous()
        self._store_elements(self.cube_4d.get_polyhedra())

    def get_number_elements(self) -> int:
        return self.number_elements

    def is_ambiguous(self) -> bool:
        """Ambiguity of the last queried cell."""
        return self.ambiguous

    def _check_index(self, index_surface_element: int, component: int):
        if not (
            0 <= index_surface_element < self.number_elements
            and 0 <= component < self.cube_dimension
        ):
            raise IndexError(
                "Cornelius error: asking for an element which does not exist."
            )

    def get_centroid_element(self, index_surface_element: int, element_centroid: int):
        self._check_index(index_surface_element, element_centroid)
        offset = DIM - self.cube_dimension
        return float(self.centroids[index_surface_element, element_centroid + offset])

    def get_normal_element(self, index_surface_element: int, element_normal: int):
        self._check_index(index_surface_element, element_normal)
        offset = DIM - self.cube_dimension
        return float(self.normals[index_surface_element, element_normal + offset])

    def get_centroids(self) -> list[list[float]]:
        offset = DIM - self.cube_dimension
        return self.centroids[: self.number_elements, offset:].tolist()

    def get_normals(self) -> list[list[float]]:
        offset = DIM - self.cube_dimension
        return self.normals[: self.number_elements, offset:].tolist()
