"""
Surface Finder
==============

Walks a scalar field sampled on the nodes of a regular grid and collects the
surface elements of every crossed cell.

The crossed cells are found for the whole grid at once with torch, then every
crossed cell is handed to a ``Cornelius`` object. The cell-local centroids
are shifted to absolute coordinates and auxiliary fields (flow velocity,
energy density, ...) are interpolated multilinearly at the centroids.

Cells are independent of each other, so the list of crossed cells can be
split (e.g. with ``torch.tensor_split``) and processed by several workers,
each with its own ``SurfaceFinder``; the partial results are combined with
``+``.
"""

import itertools
import logging

import numpy as np
import torch
from tqdm import tqdm

import PyCornelius
from PyCornelius.cornelius import Cornelius
from PyCornelius.geometry_element import EPSILON
from PyCornelius.utils import HypersurfaceSettings

logger = logging.getLogger(PyCornelius.__name__)

__all__ = ["SurfaceElements", "SurfaceFinder", "write_hypersurface"]


class SurfaceElements:
    """Surface elements found on a grid.

    Attributes
    ----------
    centroids : np.ndarray
        Absolute centroids, shape (K, d).
    normals : np.ndarray
        Normal vectors, shape (K, d).
    cells : np.ndarray
        Index of the cell every element was found in, shape (K, d).
    aux : dict of str to np.ndarray
        Auxiliary field values at the centroids, each of shape (K,).
    """

    centroids: np.ndarray
    normals: np.ndarray
    cells: np.ndarray
    aux: dict[str, np.ndarray]

    def __init__(self, centroids, normals, cells, aux=None):
        self.centroids = centroids
        self.normals = normals
        self.cells = cells
        self.aux = aux if aux is not None else {}

    def __len__(self):
        return self.centroids.shape[0]

    @property
    def stacked(self) -> np.ndarray:
        """Centroids, normals and auxiliary values as one table."""
        columns = [self.centroids, self.normals]
        columns += [values.reshape(-1, 1) for values in self.aux.values()]
        return np.hstack(columns)

    def __add__(self, other):
        if self.aux.keys() != other.aux.keys():
            raise ValueError("Cannot combine surface elements with different aux fields")
        return SurfaceElements(
            centroids=np.vstack((self.centroids, other.centroids)),
            normals=np.vstack((self.normals, other.normals)),
            cells=np.vstack((self.cells, other.cells)),
            aux={
                name: np.concatenate((values, other.aux[name]))
                for name, values in self.aux.items()
            },
        )


class SurfaceFinder:
    """Finds the hypersurface of a sampled field.

    Parameters
    ----------
    field : np.ndarray or torch.Tensor
        Field values on the grid nodes, 2 to 4 dimensional (e.g. axes
        ``tau, x, y``).
    threshold : float
        Value of the field on the surface.
    spacing : sequence of float
        Distance of neighbouring nodes along every axis.
    origin : sequence of float, optional
        Absolute position of node ``(0, ..., 0)``. Defaults to zeros.
    aux_fields : dict of str to array, optional
        Additional fields with the same shape as ``field`` which are
        interpolated at the centroids of the surface elements.
    epsilon : float, default EPSILON
        Tolerance for point coincidence, passed to ``Cornelius``.

    Examples
    --------
    >>> import numpy as np
    >>> t = np.linspace(0.0, 1.0, 5)
    >>> field = np.add.outer(t, t)
    >>> finder = SurfaceFinder(field, threshold=1.0, spacing=[0.25, 0.25])
    >>> elements = finder.find_hypersurface()
    """

    def __init__(
        self,
        field: np.ndarray | torch.Tensor,
        threshold: float,
        spacing,
        origin=None,
        aux_fields: dict | None = None,
        epsilon: float = EPSILON,
    ):
        self.field = torch.as_tensor(field, dtype=torch.float64)
        self.dimension = self.field.dim()
        if self.dimension not in (2, 3, 4):
            raise ValueError(
                f"Field must be 2, 3 or 4 dimensional, got {self.dimension} dimensions"
            )
        if any(n < 2 for n in self.field.shape):
            raise ValueError(
                f"Field needs at least two nodes along every axis, got {tuple(self.field.shape)}"
            )
        self.threshold = float(threshold)

        self.spacing = np.asarray(spacing, dtype=float).reshape(-1)
        if self.spacing.shape[0] != self.dimension:
            raise ValueError(
                f"Expected {self.dimension} spacings, got {self.spacing.shape[0]}"
            )
        if np.any(self.spacing <= 0.0):
            raise ValueError("Grid spacing must be positive")

        if origin is None:
            origin = np.zeros(self.dimension)
        self.origin = np.asarray(origin, dtype=float).reshape(-1)
        if self.origin.shape[0] != self.dimension:
            raise ValueError(
                f"Expected {self.dimension} origin coordinates, got {self.origin.shape[0]}"
            )

        self.aux_fields = {}
        for name, values in (aux_fields or {}).items():
            values = torch.as_tensor(values, dtype=torch.float64)
            if values.shape != self.field.shape:
                raise ValueError(
                    f"Aux field '{name}' has shape {tuple(values.shape)}, "
                    f"field has shape {tuple(self.field.shape)}"
                )
            self.aux_fields[name] = values.detach().cpu().numpy()

        self._field_np = self.field.detach().cpu().numpy()
        self.epsilon = epsilon
        self.cornelius = Cornelius(epsilon)
        self.cornelius.init(self.dimension, self.threshold, self.spacing)

    @classmethod
    def from_settings(cls, field, settings: HypersurfaceSettings, aux_fields=None):
        return cls(
            field,
            threshold=settings["threshold"],
            spacing=settings["spacing"],
            origin=settings.get("origin"),
            aux_fields=aux_fields,
            epsilon=settings.get("epsilon", EPSILON),
        )

    @property
    def number_cells(self) -> tuple[int, ...]:
        return tuple(n - 1 for n in self.field.shape)

    def find_crossed_cells(self) -> torch.Tensor:
        """Indices of all cells whose corners are not all on the same side
        of the threshold.

        Returns
        -------
        torch.Tensor
            Integer tensor of shape (M, d).
        """
        above = (self.field >= self.threshold).to(torch.int64)
        count = torch.zeros(self.number_cells, dtype=torch.int64)
        for shift in itertools.product((0, 1), repeat=self.dimension):
            corner = tuple(
                slice(s, s + n) for s, n in zip(shift, self.number_cells)
            )
            count += above[corner]
        crossed = (count > 0) & (count < 2**self.dimension)
        return torch.nonzero(crossed)

    def cell_corners(self, cell) -> np.ndarray:
        """Field values at the 2^d corners of a cell."""
        return self._field_np[tuple(slice(c, c + 2) for c in cell)]

    def interpolate(self, values: np.ndarray, cell, local) -> float:
        """Multilinear interpolation of node values inside a cell.

        Parameters
        ----------
        values : np.ndarray
            Node values with the shape of the field.
        cell : sequence of int
            Cell index.
        local : array-like
            Position relative to the cell corner ``(0, ..., 0)``.
        """
        t = np.clip(np.asarray(local, dtype=float) / self.spacing, 0.0, 1.0)
        corners = values[tuple(slice(c, c + 2) for c in cell)]
        result = 0.0
        for shift in itertools.product((0, 1), repeat=self.dimension):
            weight = np.prod(np.where(np.array(shift) == 1, t, 1.0 - t))
            result += weight * corners[shift]
        return float(result)

    def find_hypersurface(self, cells=None, progress: bool = False) -> SurfaceElements:
        """Collects the surface elements of the given or all crossed cells.

        Parameters
        ----------
        cells : torch.Tensor or array-like of shape (M, d), optional
            Cells to process. Defaults to :meth:`find_crossed_cells`.
        progress : bool, default False
            Show a progress bar.
        """
        if cells is None:
            cells = self.find_crossed_cells()
        cells = torch.as_tensor(cells, dtype=torch.int64).reshape(-1, self.dimension)
        find_surface = {
            2: self.cornelius.find_surface_2d,
            3: self.cornelius.find_surface_3d,
            4: self.cornelius.find_surface_4d,
        }[self.dimension]

        centroids = []
        normals = []
        element_cells = []
        aux = {name: [] for name in self.aux_fields}
        for cell in tqdm(cells.tolist(), desc="Finding hypersurface", disable=not progress):
            find_surface(self.cell_corners(cell))
            n_elements = self.cornelius.get_number_elements()
            if n_elements == 0:
                continue
            cell_position = self.origin + np.asarray(cell) * self.spacing
            local_centroids = np.asarray(self.cornelius.get_centroids())
            centroids.append(cell_position + local_centroids)
            normals.append(np.asarray(self.cornelius.get_normals()))
            element_cells.append(np.tile(cell, (n_elements, 1)))
            for name, values in self.aux_fields.items():
                aux[name].extend(
                    self.interpolate(values, cell, local) for local in local_centroids
                )

        d = self.dimension
        elements = SurfaceElements(
            centroids=np.vstack(centroids) if centroids else np.zeros((0, d)),
            normals=np.vstack(normals) if normals else np.zeros((0, d)),
            cells=np.vstack(element_cells) if element_cells else np.zeros((0, d), dtype=int),
            aux={name: np.asarray(values, dtype=float) for name, values in aux.items()},
        )
        logger.info(
            f"Found {len(elements)} surface elements in {cells.shape[0]} cells"
        )
        return elements


def write_hypersurface(filename, elements: SurfaceElements):
    """Writes surface elements as a plain text table.

    Every row holds the centroid, the normal and the auxiliary values of one
    element. The column names are written as a commented header line.
    """
    d = elements.centroids.shape[1]
    names = [f"x{i}" for i in range(d)] + [f"dsigma{i}" for i in range(d)]
    names += list(elements.aux.keys())
    np.savetxt(
        filename,
        elements.stacked.reshape(-1, len(names)),
        fmt="%18.8e",
        header=" ".join(names),
    )
    logger.debug(f"Saved {len(elements)} surface elements to '{filename}'")
