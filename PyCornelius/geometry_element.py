"""
Geometry Element Base
=====================

Shared building blocks of the surface finding hierarchy.

All points handled by the kernel live in a four component ambient coordinate
system. Lower dimensional cells simply keep the leading coordinates constant,
so lines, polygons and polyhedra can share one representation.

Classes
-------
GeometryElement
    Abstract base for anything that owns a lazily computed centroid and
    normal (``Line``, ``Polygon``, ``Polyhedron``).
CorneliusError
    Raised on invalid use of the kernel (wrong dimension, missing init).
TopologyError
    Raised when the cut primitives of a cell cannot be assembled.

Constants
---------
DIM
    Dimension of the ambient coordinate system.
EPSILON
    Tolerance for point coincidence (sum of absolute coordinate differences).
ALMOST_ZERO, ALMOST_ONE
    Relative edge positions used when a corner sits exactly on the threshold.
"""

from abc import ABC, abstractmethod
import logging

import numpy as np

import PyCornelius

logger = logging.getLogger(PyCornelius.__name__)

DIM = 4
STEPS = 2
EPSILON = 1e-10
ALMOST_ZERO = 1e-9
ALMOST_ONE = 1.0 - ALMOST_ZERO


class CorneliusError(RuntimeError):
    """Invalid use of the surface finder, e.g. querying an uninitialized
    instance or a cell of the wrong dimension."""


class TopologyError(CorneliusError):
    """The cut primitives of a cell do not form closed surface elements."""


def flip_normal_if_needed(normal: np.ndarray, v_out: np.ndarray) -> np.ndarray:
    """Flips ``normal`` in place if it points towards ``v_out``.

    Parameters
    ----------
    normal : np.ndarray
        Normal vector, modified in place.
    v_out : np.ndarray
        Vector from the element towards a point outside of the surface
        (below the threshold).

    Returns
    -------
    np.ndarray
        The (possibly flipped) normal.
    """
    if np.dot(normal, v_out) > 0.0:
        normal *= -1.0
    return normal


class GeometryElement(ABC):
    """Abstract base class of the elements of a surface.

    A geometry element is built in two phases. First the topology is
    assembled (``init_*`` and ``add_*`` methods of the subclasses), then the
    derived quantities are evaluated on first access and cached until the
    element is re-initialized.

    Notes
    -----
    Subclasses must implement:
    - ``_calculate_centroid()``: fill ``self._centroid``
    - ``_calculate_normal()``: fill ``self._normal``
    """

    def __init__(self):
        self._centroid = np.zeros(DIM)
        self._normal = np.zeros(DIM)
        self.centroid_calculated = False
        self.normal_calculated = False

    def reset(self):
        """Invalidates the cached centroid and normal."""
        self.centroid_calculated = False
        self.normal_calculated = False

    @property
    def centroid(self) -> np.ndarray:
        if not self.centroid_calculated:
            self._calculate_centroid()
            self.centroid_calculated = True
        return self._centroid

    @property
    def normal(self) -> np.ndarray:
        if not self.normal_calculated:
            self._calculate_normal()
            self.normal_calculated = True
        return self._normal

    @abstractmethod
    def _calculate_centroid(self):
        pass

    @abstractmethod
    def _calculate_normal(self):
        pass
