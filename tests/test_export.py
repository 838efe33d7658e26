import io

import numpy as np
import pytest
import vtk
from vtk.util.numpy_support import vtk_to_numpy

from PyCornelius.cornelius import Cornelius
from PyCornelius.export import (
    export_surface_elements_vtk,
    export_triangles,
    load_printed_triangles,
)


@pytest.fixture
def printed_triangles(tmp_path):
    cu = np.ones((2, 2, 2))
    cu[0, 0, 0] = 0.0
    cor = Cornelius()
    cor.init(3, 0.5, [1.0, 1.0, 1.0])
    filename = tmp_path / "triangles.dat"
    cor.init_print_cornelius(filename)
    cor.find_surface_3d_print(cu, [0.0, 0.0, 0.0])
    cor.close_print_cornelius()
    return filename


def test_load_printed_triangles(printed_triangles):
    faces = load_printed_triangles(printed_triangles)
    assert faces.faces.shape == (3, 3)
    # three cut points and the shared centroid
    assert faces.vertices.shape == (4, 3)
    assert any(np.allclose(v, 1 / 6) for v in faces.vertices)

    unmerged = load_printed_triangles(printed_triangles, merge_vertices=False)
    assert unmerged.vertices.shape == (9, 3)


def test_load_rejects_wrong_columns(tmp_path):
    filename = tmp_path / "bad.dat"
    np.savetxt(filename, np.zeros((2, 6)))
    with pytest.raises(ValueError):
        load_printed_triangles(filename)


def test_export_triangles(printed_triangles, tmp_path):
    faces = load_printed_triangles(printed_triangles)
    filename = tmp_path / "mesh" / "surface.obj"
    export_triangles(filename, faces)
    assert filename.exists()


def test_export_surface_elements_vtk(tmp_path):
    centroids = np.array([[0.0, 0.0, 0.0], [1.0, 2.0, 3.0]])
    normals = np.array([[1.0, 0.0, 0.0], [0.0, 0.5, 0.5]])
    filename = tmp_path / "elements.vtk"
    export_surface_elements_vtk(filename, centroids, normals)

    reader = vtk.vtkPolyDataReader()
    reader.SetFileName(str(filename))
    reader.Update()
    polydata = reader.GetOutput()
    assert polydata.GetNumberOfPoints() == 2
    assert polydata.GetNumberOfVerts() == 2
    np.testing.assert_allclose(vtk_to_numpy(polydata.GetPoints().GetData()), centroids)
    np.testing.assert_allclose(
        vtk_to_numpy(polydata.GetPointData().GetArray("normal")), normals
    )


def test_export_surface_elements_needs_3d(tmp_path):
    with pytest.raises(ValueError):
        export_surface_elements_vtk(tmp_path / "a.vtk", np.zeros((2, 4)), np.zeros((2, 4)))
    with pytest.raises(ValueError):
        export_surface_elements_vtk(tmp_path / "b.vtk", np.zeros((2, 3)), np.zeros((1, 3)))


def test_print_rows_are_loadable_from_stream():
    cu = np.zeros((2, 2, 2))
    cu[1] = 1.0
    cor = Cornelius()
    cor.init(3, 0.25, [1.0, 1.0, 1.0])
    stream = io.StringIO()
    cor.init_print_cornelius(stream)
    cor.find_surface_3d_print(cu, [2.0, 0.0, 0.0])
    rows = np.loadtxt(io.StringIO(stream.getvalue()), ndmin=2)
    # quadrilateral at x = 2.25, one triangle per edge
    assert rows.shape == (4, 9)
    np.testing.assert_allclose(rows[:, [0, 3, 6]], 2.25)
