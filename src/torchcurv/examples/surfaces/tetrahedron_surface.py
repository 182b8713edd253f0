"""Regular tetrahedron surface in 3D space.

Dimensional: 2D manifold in 3D space (closed, no boundary).

No normals are given, so every face corner uses the face's geometric normal.
"""

import math

import torch

from torchcurv.mesh import TriangleMesh


def load(
    side_length: float = 1.0,
    dtype: torch.dtype = torch.float32,
    device: str = "cpu",
) -> TriangleMesh:
    """Create a regular tetrahedron surface centered at the origin.

    Args:
        side_length: Length of each edge
        dtype: Floating-point dtype of the points
        device: Compute device ('cpu' or 'cuda')

    Returns:
        TriangleMesh with outward face normals
    """
    # Alternate corners of a cube with edge length side_length / sqrt(2)
    a = side_length / (2 * math.sqrt(2))

    vertices = [
        [a, a, a],
        [a, -a, -a],
        [-a, a, -a],
        [-a, -a, a],
    ]

    # 4 triangular faces, counterclockwise seen from outside
    faces = [
        [0, 1, 2],
        [0, 3, 1],
        [0, 2, 3],
        [1, 3, 2],
    ]

    points = torch.tensor(vertices, dtype=dtype, device=device)
    cells = torch.tensor(faces, dtype=torch.int64, device=device)

    return TriangleMesh(points=points, cells=cells)
