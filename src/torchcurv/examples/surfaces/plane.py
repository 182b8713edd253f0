"""Flat square patch in the z = 0 plane.

Dimensional: 2D manifold in 3D space (open, with boundary).
"""

import torch

from torchcurv.examples.surfaces._grid import grid_cells
from torchcurv.mesh import TriangleMesh


def load(
    size: float = 2.0,
    n_points_per_side: int = 9,
    dtype: torch.dtype = torch.float32,
    device: str = "cpu",
) -> TriangleMesh:
    """Create a triangulated square centered at the origin with normals +z.

    Args:
        size: Side length of the square
        n_points_per_side: Grid resolution along each side
        dtype: Floating-point dtype of points and normals
        device: Compute device ('cpu' or 'cuda')

    Returns:
        TriangleMesh with one normal per vertex
    """
    coords = torch.linspace(-size / 2, size / 2, n_points_per_side, dtype=dtype, device=device)
    xx, yy = torch.meshgrid(coords, coords, indexing="ij")

    points = torch.stack(
        [xx.reshape(-1), yy.reshape(-1), torch.zeros_like(xx.reshape(-1))], dim=-1
    )
    normals = torch.zeros_like(points)
    normals[:, 2] = 1.0

    cells = grid_cells(n_points_per_side, n_points_per_side, device=device)

    return TriangleMesh(points=points, cells=cells, normals=normals)
