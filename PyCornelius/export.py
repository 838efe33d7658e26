import logging
import os
import pathlib

import gustaf as gus
import numpy as np
import vtk

import PyCornelius

logger = logging.getLogger(PyCornelius.__name__)


def load_printed_triangles(filename, merge_vertices=True) -> gus.Faces:
    """
    Builds a triangle mesh from the rows written by
    ``Cornelius.find_surface_3d_print``.

    Every row ``x1 y1 z1 x2 y2 z2 cx cy cz`` is one triangle (an edge of a
    polygon and the polygon centroid).

    Args:
        filename: file written by the print sink.
        merge_vertices (bool): merge coinciding vertices of neighbouring
            triangles.

    Returns:
        gus.Faces: triangle mesh.
    """
    rows = np.loadtxt(filename, ndmin=2)
    if rows.size == 0:
        return gus.Faces(vertices=np.zeros((0, 3)), faces=np.zeros((0, 3), dtype=int))
    if rows.shape[1] != 9:
        raise ValueError(
            f"Expected 9 columns per triangle row, got {rows.shape[1]} in {filename}"
        )
    vertices = rows.reshape(-1, 3)
    faces = np.arange(vertices.shape[0]).reshape(-1, 3)
    if merge_vertices:
        vertices, idx = np.unique(vertices, axis=0, return_inverse=True)
        faces = idx.reshape(-1)[faces]
    logger.debug(
        f"Loaded {faces.shape[0]} triangles with {vertices.shape[0]} vertices from {filename}"
    )
    return gus.Faces(vertices=vertices, faces=faces)


def export_triangles(filename, faces: gus.Faces):
    """
    export a triangle mesh, the format is chosen by the file extension
    """
    filepath = pathlib.Path(filename)
    if not os.path.isdir(filepath.parent):
        os.makedirs(filepath.parent)
    logger.debug(
        f"Exporting mesh with {len(faces.faces)} triangles, {len(faces.vertices)} vertices to {filepath}"
    )
    gus.io.meshio.export(str(filepath), faces)


def export_surface_elements_vtk(filename, centroids, normals):
    """
    Writes 3D surface elements as VTK polydata: one vertex per element at its
    centroid, with the normal vector as point data "normal".
    """
    centroids = np.asarray(centroids, dtype=float)
    normals = np.asarray(normals, dtype=float)
    if centroids.ndim != 2 or centroids.shape[1] != 3:
        raise ValueError(
            f"VTK export supports 3D surface elements only, got shape {centroids.shape}"
        )
    if normals.shape != centroids.shape:
        raise ValueError(
            f"Centroids {centroids.shape} and normals {normals.shape} differ in shape"
        )

    vtk_points = vtk.vtkPoints()
    vtk_cells = vtk.vtkCellArray()
    for i, c in enumerate(centroids):
        vtk_points.InsertNextPoint(c.tolist())
        vertex = vtk.vtkVertex()
        vertex.GetPointIds().SetId(0, i)
        vtk_cells.InsertNextCell(vertex)

    vectors = vtk.vtkDoubleArray()
    vectors.SetNumberOfComponents(3)
    vectors.SetName("normal")
    for n in normals:
        vectors.InsertNextTuple(n.tolist())

    polydata = vtk.vtkPolyData()
    polydata.SetPoints(vtk_points)
    polydata.SetVerts(vtk_cells)
    polydata.GetPointData().AddArray(vectors)
    polydata.GetPointData().SetActiveVectors("normal")

    writer = vtk.vtkPolyDataWriter()
    writer.SetFileName(str(filename))
    writer.SetInputData(polydata)
    writer.Write()
    logger.info(f"Surface elements saved to {filename}")
