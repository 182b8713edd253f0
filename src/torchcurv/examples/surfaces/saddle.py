"""Hyperbolic paraboloid z = c (x² - y²).

Dimensional: 2D manifold in 3D space (open, with boundary).

The exact Gaussian curvature of the graph of z = c (x² - y²) is

    K = -4c² / (1 + 4c²x² + 4c²y²)²

which is negative everywhere; at the origin K = -4c².
"""

import torch
import torch.nn.functional as F

from torchcurv.examples.surfaces._grid import grid_cells
from torchcurv.mesh import TriangleMesh


def load(
    size: float = 1.0,
    n_points_per_side: int = 21,
    coefficient: float = 1.0,
    dtype: torch.dtype = torch.float32,
    device: str = "cpu",
) -> TriangleMesh:
    """Create a triangulated saddle over the square [-size/2, size/2]².

    Args:
        size: Side length of the square domain
        n_points_per_side: Grid resolution along each side
        coefficient: The constant c in z = c (x² - y²)
        dtype: Floating-point dtype of points and normals
        device: Compute device ('cpu' or 'cuda')

    Returns:
        TriangleMesh with one upward unit normal per vertex
    """
    coords = torch.linspace(-size / 2, size / 2, n_points_per_side, dtype=torch.float64, device=device)
    xx, yy = torch.meshgrid(coords, coords, indexing="ij")
    x = xx.reshape(-1)
    y = yy.reshape(-1)
    z = coefficient * (x**2 - y**2)

    points = torch.stack([x, y, z], dim=-1)

    # Gradient of z - f(x, y)
    normals = F.normalize(
        torch.stack(
            [-2 * coefficient * x, 2 * coefficient * y, torch.ones_like(x)], dim=-1
        ),
        dim=-1,
    )

    cells = grid_cells(n_points_per_side, n_points_per_side, device=device)

    return TriangleMesh(
        points=points.to(dtype), cells=cells, normals=normals.to(dtype)
    )


def exact_gaussian_curvature(points: torch.Tensor, coefficient: float = 1.0) -> torch.Tensor:
    """Analytic Gaussian curvature at the (x, y) location of each point."""
    c2 = coefficient**2
    x = points[:, 0]
    y = points[:, 1]
    return -4 * c2 / (1 + 4 * c2 * x**2 + 4 * c2 * y**2) ** 2
