"""Orthonormal tangent frames at mesh vertices.

The frame at vertex p is the 3x3 matrix with columns (a, b, n):

- n is the average vertex normal;
- a is the direction from p to its first neighbor, projected onto the plane
  orthogonal to n and normalized;
- b = normalize(n × a).

{a, b} spans the tangent plane and {a, b, n} is a right-handed orthonormal
basis of R³. Multiplying an offset ``d = p_i - p`` by the transposed frame gives
its local coordinates (u, v, h): two tangential components and the height
along the normal.
"""

from typing import TYPE_CHECKING

import torch
import torch.nn.functional as F

from torchcurv.flags import Degeneracy
from torchcurv.utilities import default_rtol, safe_eps

if TYPE_CHECKING:
    from torchcurv.mesh import TriangleMesh
    from torchcurv.neighbors import Adjacency


def first_neighbors(adjacency: "Adjacency") -> torch.Tensor:
    """Return the first neighbor of every source in the adjacency order.

    Sources without neighbors map to themselves.

    Returns:
        int64 tensor of shape (n_sources,).
    """
    source_ids = torch.arange(adjacency.n_sources, device=adjacency.offsets.device)
    if adjacency.n_total_neighbors == 0:
        return source_ids

    starts = adjacency.offsets[:-1].clamp(max=adjacency.n_total_neighbors - 1)
    return torch.where(adjacency.counts > 0, adjacency.indices[starts], source_ids)


def compute_tangent_frames(
    mesh: "TriangleMesh",
    adjacency: "Adjacency",
    normals: torch.Tensor,
    normal_flags: torch.Tensor,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Build the tangent frame (a, b, n) at every vertex.

    Args:
        mesh: Input triangle mesh.
        adjacency: Vertex neighborhoods, as returned by
            :func:`torchcurv.neighbors.get_point_to_points_adjacency`.
        normals: Average vertex normals, shape (n_points, 3).
        normal_flags: Degeneracy flags of the normal stage, shape (n_points,).

    Returns:
        Tuple of:
            - frames: Tensor of shape (n_points, 3, 3) whose columns are a, b
              and n. Vertices without a usable frame get the identity.
            - flags: ``normal_flags`` with ``NO_NEIGHBORS`` set for isolated
              vertices and ``DEGENERATE_FRAME`` set where the first neighbor
              lies (numerically) along the normal.
    """
    dtype = mesh.points.dtype
    n = normals.to(dtype)

    ### Direction from each vertex to its first neighbor
    has_neighbors = adjacency.counts > 0
    a_tilde = mesh.points[first_neighbors(adjacency)] - mesh.points  # (n_points, 3)

    ### Project onto the plane orthogonal to n
    a_projected = a_tilde - (a_tilde * n).sum(dim=-1, keepdim=True) * n
    projected_length = a_projected.norm(dim=-1)
    frame_ok = projected_length > torch.clamp(
        default_rtol(dtype) * a_tilde.norm(dim=-1), min=safe_eps(dtype)
    )

    a = F.normalize(a_projected, dim=-1, eps=safe_eps(dtype))
    b = F.normalize(torch.linalg.cross(n, a, dim=-1), dim=-1, eps=safe_eps(dtype))

    # Columns are (a, b, n)
    frames = torch.stack([a, b, n], dim=-1)  # (n_points, 3, 3)

    ### Identity fallback for vertices without a usable frame
    has_normal = normal_flags == int(Degeneracy.NONE)
    valid = has_neighbors & has_normal & frame_ok
    identity = torch.eye(3, dtype=dtype, device=frames.device).expand_as(frames)
    frames = torch.where(valid[:, None, None], frames, identity)

    flags = normal_flags.clone()
    flags[~has_neighbors] |= int(Degeneracy.NO_NEIGHBORS)
    flags[has_neighbors & has_normal & ~frame_ok] |= int(Degeneracy.DEGENERATE_FRAME)

    return frames, flags
