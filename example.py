import numpy as np
import torch

from PyCornelius.export import export_surface_elements_vtk
from PyCornelius.surface_finder import SurfaceFinder, write_hypersurface

# Gaussian temperature profile cooling down with proper time tau
tau = torch.linspace(0.6, 6.0, 28, dtype=torch.float64)
x = torch.linspace(-8.0, 8.0, 41, dtype=torch.float64)
y = torch.linspace(-8.0, 8.0, 41, dtype=torch.float64)
T, X, Y = torch.meshgrid(tau, x, y, indexing="ij")
temperature = 0.4 * (0.6 / T) ** (1 / 3) * torch.exp(-(X**2 + Y**2) / 20.0)

finder = SurfaceFinder(
    temperature,
    threshold=0.15,
    spacing=[float(tau[1] - tau[0]), float(x[1] - x[0]), float(y[1] - y[0])],
    origin=[float(tau[0]), float(x[0]), float(y[0])],
    aux_fields={"temperature": temperature},
)
elements = finder.find_hypersurface(progress=True)
print(f"{len(elements)} surface elements in {len(np.unique(elements.cells, axis=0))} cells")

write_hypersurface("freezeout_surface.dat", elements)
export_surface_elements_vtk("freezeout_surface.vtk", elements.centroids, elements.normals)
