import numpy as np

from PyCornelius.geometry_element import GeometryElement, DIM, flip_normal_if_needed


class Line(GeometryElement):
    """Oriented line segment on a two dimensional face.

    The segment lies in the plane spanned by the two free coordinates
    ``x1`` and ``x2``; the remaining coordinates ``const_i`` are constant on
    the face the line was found on. ``outside_point`` is a point of the face
    where the field is below the threshold and is used to orient normals.
    """

    def __init__(self):
        super().__init__()
        self.start_point = np.zeros(DIM)
        self.end_point = np.zeros(DIM)
        self.outside_point = np.zeros(DIM)
        self.const_i = (0, 1)
        self.x1 = 2
        self.x2 = 3

    def init_line(self, points, outside, const_i):
        """(Re)initializes the line.

        Parameters
        ----------
        points : array-like of shape (2, 4)
            Start and end point in ambient coordinates.
        outside : array-like of shape (4,)
            A point below the threshold on the same face.
        const_i : tuple of int
            The two coordinate indices which are constant on the face.
        """
        self.start_point[:] = points[0]
        self.end_point[:] = points[1]
        self.outside_point[:] = outside
        self.const_i = tuple(const_i)
        self.x1, self.x2 = [i for i in range(DIM) if i not in self.const_i]
        self.reset()

    def flip_start_end(self):
        """Swaps start and end point (in place, without reallocation)."""
        tmp = self.start_point.copy()
        self.start_point[:] = self.end_point
        self.end_point[:] = tmp

    def _calculate_centroid(self):
        self._centroid[:] = 0.5 * (self.start_point + self.end_point)

    def _calculate_normal(self):
        self._normal[:] = 0.0
        self._normal[self.x1] = -(self.end_point[self.x2] - self.start_point[self.x2])
        self._normal[self.x2] = self.end_point[self.x1] - self.start_point[self.x1]
        v_out = self.outside_point - self.start_point
        flip_normal_if_needed(self._normal, v_out)

    def __repr__(self):
        return (
            f"Line(start={self.start_point.tolist()}, end={self.end_point.tolist()})"
        )
