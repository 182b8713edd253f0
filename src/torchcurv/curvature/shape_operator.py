"""Shape Operator estimation from an osculating paraboloid.

At every vertex p with tangent frame (a, b, n), the surface is approximated by
the paraboloid

    h(u, v) = ½ (α u² + 2β uv + γ v²)

written in the local coordinates of the frame. Each of three chosen neighbors
p_i contributes one equation: with (u_i, v_i, h_i) = frameᵀ (p_i - p),

    [u_i²/2, u_i v_i, v_i²/2] · [α, β, γ]ᵀ = h_i.

Stacking the three rows gives the square system U X = F. Its least-squares
solution X = (UᵀU)⁻¹ UᵀF is computed from U directly, without forming UᵀU, so
the rank test on U also bounds the error of the solve. The Shape Operator in
the tangent basis is then

    S = -[[α, β],
          [β, γ]]

so that a sphere with outward normals has a positive definite S.

When UᵀU is singular (e.g. the three neighbor directions are collinear or
opposite in the tangent plane) the coefficients are undefined: the vertex gets
a zero placeholder and the ``SINGULAR_FIT`` flag rather than NaN.
"""

from typing import TYPE_CHECKING, Literal

import torch

from torchcurv.flags import Degeneracy
from torchcurv.utilities import default_rtol

if TYPE_CHECKING:
    from torchcurv.mesh import TriangleMesh
    from torchcurv.neighbors import Adjacency

NeighborOrder = Literal["index", "angular"]

# Number of neighbors sampled by the fit
N_FIT_NEIGHBORS = 3


def select_fit_neighbors(
    mesh: "TriangleMesh",
    adjacency: "Adjacency",
    frames: torch.Tensor,
    neighbor_order: NeighborOrder = "index",
) -> tuple[torch.Tensor, torch.Tensor]:
    """Pick the three neighbors used by the paraboloid fit at every vertex.

    Args:
        mesh: Input triangle mesh.
        adjacency: Vertex neighborhoods, neighbors sorted by increasing index.
        frames: Tangent frames, shape (n_points, 3, 3).
        neighbor_order: Selection rule.
            - "index": the first three neighbors by increasing vertex index.
            - "angular": neighbors are sorted by polar angle around the normal
              (ties broken by index) and the ones at positions
              ``j * k // 3`` for j = 0, 1, 2 are taken, k being the neighbor
              count. This spreads the samples around the vertex.

    Returns:
        Tuple of:
            - selected: int64 tensor of shape (n_points, 3) with the chosen
              neighbor indices. Rows of vertices with fewer than three neighbors
              are filled with the vertex's own index.
            - enough: bool tensor of shape (n_points,), True where at least
              three neighbors exist.

    Raises:
        ValueError: If ``neighbor_order`` is not one of "index", "angular".
    """
    if neighbor_order not in ("index", "angular"):
        raise ValueError(
            f"Invalid {neighbor_order=!r}. Must be one of 'index', 'angular'."
        )

    device = mesh.points.device
    counts = adjacency.counts
    enough = counts >= N_FIT_NEIGHBORS
    point_ids = torch.arange(mesh.n_points, device=device)

    if adjacency.n_total_neighbors == 0:
        return point_ids.unsqueeze(-1).expand(-1, N_FIT_NEIGHBORS).clone(), enough

    ### Order the flat neighbor list
    ordered = adjacency.indices
    if neighbor_order == "angular":
        sources = adjacency.sources
        offsets_3d = mesh.points[ordered] - mesh.points[sources]  # (n_entries, 3)
        local = torch.einsum("eij,ei->ej", frames[sources], offsets_3d)
        angles = torch.atan2(local[:, 1], local[:, 0])

        # Stable sorts: by angle, then by source; equal angles keep index order
        perm = torch.argsort(angles, stable=True)
        perm = perm[torch.argsort(sources[perm], stable=True)]
        ordered = ordered[perm]

    ### Positions of the chosen entries within each neighbor list
    j = torch.arange(N_FIT_NEIGHBORS, device=device)
    if neighbor_order == "index":
        local_positions = j.unsqueeze(0).expand(mesh.n_points, -1)
    else:
        local_positions = torch.div(
            j.unsqueeze(0) * counts.unsqueeze(-1),
            N_FIT_NEIGHBORS,
            rounding_mode="floor",
        )
    positions = (adjacency.offsets[:-1].unsqueeze(-1) + local_positions).clamp(
        max=adjacency.n_total_neighbors - 1
    )

    selected = torch.where(
        enough.unsqueeze(-1),
        ordered[positions],
        point_ids.unsqueeze(-1),
    )
    return selected, enough


def fit_paraboloids(
    offsets: torch.Tensor,
    frames: torch.Tensor,
    rtol: float,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Fit (α, β, γ) through three neighbor offsets per vertex.

    Args:
        offsets: Neighbor positions relative to the vertex, shape (n, 3, 3),
            one neighbor per row.
        frames: Tangent frames with columns (a, b, n), shape (n, 3, 3).
        rtol: Relative singular-value cutoff. U is treated as rank-deficient
            when ``s_min <= rtol * s_max``.

    Returns:
        Tuple of:
            - coefficients: Tensor of shape (n, 3) holding (α, β, γ). Zero for
              singular fits.
            - singular: bool tensor of shape (n,).
    """
    ### Local coordinates (u, v, h) of every neighbor
    local = offsets @ frames  # (n, 3 neighbors, 3 coords)
    u, v, h = local.unbind(dim=-1)

    ### Design matrix and right-hand side
    U = torch.stack([0.5 * u**2, u * v, 0.5 * v**2], dim=-1)  # (n, 3, 3)
    F = h.unsqueeze(-1)  # (n, 3, 1)

    ### Rank test
    singular_values = torch.linalg.svdvals(U)  # (n, 3), descending
    s_max = singular_values[:, 0]
    s_min = singular_values[:, -1]
    singular = (s_max <= 0) | (s_min <= rtol * s_max)

    ### Least-squares solve on the well-posed fits
    coefficients = torch.zeros(
        (len(offsets), 3), dtype=offsets.dtype, device=offsets.device
    )
    solvable = ~singular
    if solvable.any():
        coefficients[solvable] = torch.linalg.lstsq(
            U[solvable],  # (n_solvable, 3, 3)
            F[solvable],  # (n_solvable, 3, 1)
            rcond=None,
        ).solution.squeeze(-1)  # (n_solvable, 3)

    return coefficients, singular


def compute_shape_operators(
    mesh: "TriangleMesh",
    adjacency: "Adjacency",
    frames: torch.Tensor,
    frame_flags: torch.Tensor,
    neighbor_order: NeighborOrder = "index",
    singular_rtol: float | None = None,
) -> tuple[torch.Tensor, torch.Tensor]:
    """Estimate the 2x2 Shape Operator at every vertex.

    The fit is carried out in float64 and cast back to the dtype of
    ``mesh.points``.

    Args:
        mesh: Input triangle mesh.
        adjacency: Vertex neighborhoods.
        frames: Tangent frames, shape (n_points, 3, 3).
        frame_flags: Degeneracy flags of the frame stage, shape (n_points,).
        neighbor_order: Neighbor selection rule, see :func:`select_fit_neighbors`.
        singular_rtol: Relative singular-value cutoff for the rank test of U.
            Defaults to ``default_rtol(mesh.points.dtype)``.

    Returns:
        Tuple of:
            - shape_operators: Symmetric tensor of shape (n_points, 2, 2),
              expressed in the (a, b) basis of each frame. Zero for every vertex
              that could not be fitted.
            - flags: ``frame_flags`` with ``TOO_FEW_NEIGHBORS`` and
              ``SINGULAR_FIT`` added where they apply.
    """
    dtype = mesh.points.dtype
    device = mesh.points.device
    if singular_rtol is None:
        singular_rtol = default_rtol(dtype)

    selected, enough = select_fit_neighbors(
        mesh, adjacency, frames, neighbor_order=neighbor_order
    )

    flags = frame_flags.clone()
    flags[~enough] |= int(Degeneracy.TOO_FEW_NEIGHBORS)

    ### Fit only vertices with a valid frame and enough neighbors
    to_fit = enough & (frame_flags == int(Degeneracy.NONE))
    fit_ids = to_fit.nonzero().squeeze(-1)

    shape_operators = torch.zeros((mesh.n_points, 2, 2), dtype=dtype, device=device)
    if len(fit_ids) == 0:
        return shape_operators, flags

    points = mesh.points.to(torch.float64)
    offsets = points[selected[fit_ids]] - points[fit_ids].unsqueeze(1)  # (n_fit, 3, 3)
    coefficients, singular = fit_paraboloids(
        offsets, frames[fit_ids].to(torch.float64), rtol=singular_rtol
    )

    flags[fit_ids[singular]] |= int(Degeneracy.SINGULAR_FIT)

    ### S = -[[α, β], [β, γ]]
    alpha, beta, gamma = coefficients.unbind(dim=-1)
    S = -torch.stack(
        [
            torch.stack([alpha, beta], dim=-1),
            torch.stack([beta, gamma], dim=-1),
        ],
        dim=-2,
    )
    shape_operators[fit_ids] = S.to(dtype)

    return shape_operators, flags
