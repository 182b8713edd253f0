"""Average vertex normals from independently indexed corner normals.

A vertex shared by several faces may be given a different normal by each of
them. The tangent frame needs a single normal per vertex, which is the mean of
the normals of all corners referring to that vertex, renormalized to unit
length.

All corners count equally. Weighting by incident triangle area (as most
renderers do) would be more accurate on irregular meshes, but the equal-weight
mean is what the rest of the pipeline is calibrated against.
"""

from typing import TYPE_CHECKING

import torch
import torch.nn.functional as F

from torchcurv.flags import Degeneracy
from torchcurv.utilities import safe_eps

if TYPE_CHECKING:
    from torchcurv.mesh import TriangleMesh


def compute_average_normals(
    mesh: "TriangleMesh",
) -> tuple[torch.Tensor, torch.Tensor]:
    """Compute one unit normal per vertex.

    Two-phase reduction: the normals of all face corners are scatter-added into
    per-vertex buckets, then every bucket is divided by its corner count and
    normalized.

    Args:
        mesh: Input triangle mesh.

    Returns:
        Tuple of:
            - normals: Tensor of shape (n_points, 3). Unit length for every
              vertex with at least one incident corner.
            - flags: int64 tensor of shape (n_points,). ``Degeneracy.NO_NORMAL``
              is set, and the normal is a zero vector, for vertices used by no
              face and for vertices whose corner normals cancel out.

    Example:
        >>> normals, flags = compute_average_normals(mesh)
        >>> normals.norm(dim=-1)  # 1 everywhere the flags are 0
    """
    dtype = mesh.points.dtype
    device = mesh.points.device

    ### Phase 1: accumulate corner normals per vertex
    # Shape: (n_cells * 3,) and (n_cells * 3, 3)
    point_ids = mesh.cells.reshape(-1)
    corner_normals = mesh.normals[mesh.normal_indices.reshape(-1)].to(dtype)

    sums = torch.zeros((mesh.n_points, 3), dtype=dtype, device=device)
    sums.index_add_(0, point_ids, corner_normals)
    counts = torch.bincount(point_ids, minlength=mesh.n_points)

    ### Phase 2: mean, then normalize
    means = sums / counts.clamp(min=1).unsqueeze(-1).to(dtype)
    lengths = means.norm(dim=-1)
    normals = F.normalize(means, dim=-1, eps=safe_eps(dtype))

    ### Flag vertices without a usable normal
    degenerate = (counts == 0) | (lengths <= safe_eps(dtype))
    normals = torch.where(degenerate.unsqueeze(-1), torch.zeros_like(normals), normals)
    flags = torch.where(
        degenerate,
        int(Degeneracy.NO_NORMAL),
        int(Degeneracy.NONE),
    ).to(torch.int64)

    return normals, flags
