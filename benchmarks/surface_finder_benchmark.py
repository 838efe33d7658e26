import time
import torch
import pandas as pd
from PyCornelius.surface_finder import SurfaceFinder


def spherical_field(n_nodes, dimension):
    axes = [torch.linspace(-1.0, 1.0, n_nodes, dtype=torch.float64)] * dimension
    grids = torch.meshgrid(*axes, indexing="ij")
    return sum(g**2 for g in grids)


def run_benchmark():
    grid_sizes = {2: [64, 256, 1024], 3: [16, 32, 64], 4: [8, 12, 16]}
    results = []

    print(f"{'Dim':<5} | {'Nodes':<8} | {'Cells':<10} | {'Elements':<10} | {'Time (s)':<10}")
    print("-" * 55)

    for dimension, sizes in grid_sizes.items():
        for n_nodes in sizes:
            field = spherical_field(n_nodes, dimension)
            spacing = [2.0 / (n_nodes - 1)] * dimension
            finder = SurfaceFinder(field, threshold=0.5, spacing=spacing)

            start_time = time.perf_counter()
            cells = finder.find_crossed_cells()
            elements = finder.find_hypersurface(cells)
            end_time = time.perf_counter()

            elapsed = end_time - start_time
            results.append(
                {
                    "Dimension": dimension,
                    "Nodes": n_nodes,
                    "Crossed cells": cells.shape[0],
                    "Elements": len(elements),
                    "Time": elapsed,
                }
            )
            print(
                f"{dimension:<5} | {n_nodes:<8} | {cells.shape[0]:<10} | {len(elements):<10} | {elapsed:.4f}"
            )

    return pd.DataFrame(results)


df = run_benchmark()
df["Cells per second"] = df["Crossed cells"] / df["Time"]
print("\nThroughput:")
print(df.pivot_table(index="Nodes", columns="Dimension", values="Cells per second"))
