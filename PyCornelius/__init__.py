"""
PyCornelius - Hypersurface Finding on Regular Grids
===================================================

PyCornelius extracts the surface of constant value (e.g. a constant
temperature freeze-out surface) of a scalar field sampled on a regular grid
in 2, 3 or 4 dimensions. Every grid cell is processed independently: the
cell is decomposed into its faces, cut points are found by linear
interpolation along the edges, ambiguous configurations are resolved and the
resulting lines, polygons or polyhedra are reported with their centroid and
their outward pointing normal vector (length, area or volume vector).

Key Components
--------------

Kernel
    - ``PyCornelius.cornelius``: ``Cornelius`` entry point, per-cell queries
    - ``PyCornelius.square``, ``PyCornelius.cube``, ``PyCornelius.hypercube``:
      2D, 3D and 4D cells
    - ``PyCornelius.line``, ``PyCornelius.polygon``, ``PyCornelius.polyhedron``:
      surface elements with lazily computed centroid and normal

Grid
    - ``PyCornelius.surface_finder``: walks a sampled field and collects the
      surface elements of all crossed cells

Output
    - ``PyCornelius.export``: debug triangles to meshes, surface elements to VTK

Utilities
    - ``PyCornelius.utils``: logging configuration and settings

Examples
--------
Find the surface in a single cube::

    from PyCornelius.cornelius import Cornelius

    cor = Cornelius()
    cor.init(3, 0.5, [1.0, 1.0, 1.0])
    cor.find_surface_3d([[[0.0, 1.0], [1.0, 1.0]], [[1.0, 1.0], [1.0, 1.0]]])
    print(cor.get_centroids(), cor.get_normals())

Find the surface of a sampled field::

    from PyCornelius.surface_finder import SurfaceFinder

    finder = SurfaceFinder(temperature, threshold=0.15, spacing=[0.1, 0.2, 0.2])
    elements = finder.find_hypersurface()
"""

import PyCornelius.utils

PyCornelius.utils.configure_logging()

__version__ = "1.0.0"
__author__ = "PyCornelius developers"
