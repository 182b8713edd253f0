"""Band of a sphere between two latitudes and two longitudes.

Dimensional: 2D manifold in 3D space (open, with boundary).

The patch avoids the poles, so every interior vertex has the same grid-like
neighborhood. Normals are the exact outward sphere normals.
"""

import math

import torch

from torchcurv.examples.surfaces._grid import grid_cells
from torchcurv.mesh import TriangleMesh


def load(
    radius: float = 1.0,
    n_points_per_side: int = 17,
    polar_range: tuple[float, float] = (math.pi / 4, 3 * math.pi / 4),
    azimuth_range: tuple[float, float] = (0.0, math.pi / 2),
    dtype: torch.dtype = torch.float32,
    device: str = "cpu",
) -> TriangleMesh:
    """Create a spherical patch of the given radius centered at the origin.

    Args:
        radius: Sphere radius
        n_points_per_side: Grid resolution along each parameter direction
        polar_range: Polar angle interval (from +z), in radians
        azimuth_range: Azimuthal angle interval, in radians
        dtype: Floating-point dtype of points and normals
        device: Compute device ('cpu' or 'cuda')

    Returns:
        TriangleMesh with one outward unit normal per vertex
    """
    theta = torch.linspace(*polar_range, n_points_per_side, dtype=torch.float64, device=device)
    phi = torch.linspace(*azimuth_range, n_points_per_side, dtype=torch.float64, device=device)
    tt, pp = torch.meshgrid(theta, phi, indexing="ij")

    normals = torch.stack(
        [
            torch.sin(tt) * torch.cos(pp),
            torch.sin(tt) * torch.sin(pp),
            torch.cos(tt),
        ],
        dim=-1,
    ).reshape(-1, 3)
    points = radius * normals

    cells = grid_cells(n_points_per_side, n_points_per_side, device=device)

    return TriangleMesh(
        points=points.to(dtype), cells=cells, normals=normals.to(dtype)
    )
