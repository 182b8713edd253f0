"""Full curvature pipeline.

Runs the four per-vertex passes in order, each one consuming the complete
output of the previous one:

1. neighborhoods (:func:`torchcurv.neighbors.get_point_to_points_adjacency`)
2. average normals (:func:`torchcurv.geometry.compute_average_normals`)
3. tangent frames (:func:`torchcurv.geometry.compute_tangent_frames`)
4. Shape Operators and curvatures
   (:func:`torchcurv.curvature.compute_shape_operators`,
   :func:`torchcurv.curvature.extract_curvatures`)

Every pass is a batched tensor computation over all vertices. Vertices that a
pass cannot process are reported in the ``flags`` bitmask and receive a
placeholder; the pipeline never raises on numerical degeneracy.
"""

import logging
from typing import TYPE_CHECKING

import torch
from tensordict import tensorclass

from torchcurv.curvature.extract import extract_curvatures, principal_curvatures
from torchcurv.curvature.shape_operator import NeighborOrder, compute_shape_operators
from torchcurv.flags import Degeneracy, has_flag
from torchcurv.geometry.normals import compute_average_normals
from torchcurv.geometry.tangent_frames import compute_tangent_frames
from torchcurv.neighbors import Adjacency, get_point_to_points_adjacency

if TYPE_CHECKING:
    from torchcurv.mesh import TriangleMesh

logger = logging.getLogger(__name__)


@tensorclass
class CurvatureResult:
    """Per-vertex outputs of the curvature pipeline.

    All arrays are indexed like ``mesh.points``.

    Attributes:
        neighbor_offsets: Offsets of the neighborhood adjacency, shape (n_points + 1,).
        neighbor_indices: Indices of the neighborhood adjacency, shape (total_neighbors,).
        average_normals: Unit vertex normals, shape (n_points, 3).
        tangent_frames: Frames with columns (a, b, n), shape (n_points, 3, 3).
        shape_operators: Symmetric Shape Operators, shape (n_points, 2, 2).
        gaussian_curvature: K = det(S), shape (n_points,).
        mean_curvature: H = trace(S), shape (n_points,).
        flags: Degeneracy bitmask (see :class:`torchcurv.flags.Degeneracy`),
            shape (n_points,). Zero for fully processed vertices.
    """

    neighbor_offsets: torch.Tensor  # shape: (n_points + 1,)
    neighbor_indices: torch.Tensor  # shape: (total_neighbors,)
    average_normals: torch.Tensor  # shape: (n_points, 3)
    tangent_frames: torch.Tensor  # shape: (n_points, 3, 3)
    shape_operators: torch.Tensor  # shape: (n_points, 2, 2)
    gaussian_curvature: torch.Tensor  # shape: (n_points,)
    mean_curvature: torch.Tensor  # shape: (n_points,)
    flags: torch.Tensor  # shape: (n_points,), dtype: int64

    @property
    def n_points(self) -> int:
        return self.flags.shape[0]

    @property
    def neighbors(self) -> Adjacency:
        """Vertex neighborhoods as an Adjacency."""
        return Adjacency(offsets=self.neighbor_offsets, indices=self.neighbor_indices)

    @property
    def curvature_pairs(self) -> torch.Tensor:
        """(K, H) per vertex, shape (n_points, 2)."""
        return torch.stack([self.gaussian_curvature, self.mean_curvature], dim=-1)

    @property
    def principal_curvatures(self) -> torch.Tensor:
        """Ascending eigenvalues of each Shape Operator, shape (n_points, 2)."""
        return principal_curvatures(self.shape_operators)

    @property
    def degenerate_mask(self) -> torch.Tensor:
        """True for every vertex holding a placeholder, shape (n_points,)."""
        return self.flags != int(Degeneracy.NONE)

    @property
    def n_degenerate(self) -> int:
        return int(self.degenerate_mask.sum().item())

    def flag_counts(self) -> dict[str, int]:
        """Number of vertices carrying each degeneracy flag.

        Example:
            >>> result.flag_counts()
            {'NO_NORMAL': 0, 'NO_NEIGHBORS': 0, 'DEGENERATE_FRAME': 0,
             'TOO_FEW_NEIGHBORS': 3, 'SINGULAR_FIT': 1}
        """
        return {
            flag.name: int(has_flag(self.flags, flag).sum().item())
            for flag in Degeneracy
            if flag is not Degeneracy.NONE
        }


def compute_curvature(
    mesh: "TriangleMesh",
    neighbor_order: NeighborOrder = "index",
    singular_rtol: float | None = None,
) -> CurvatureResult:
    """Estimate Gaussian and mean curvature at every vertex of a triangle mesh.

    Args:
        mesh: Input triangle mesh.
        neighbor_order: Selection rule for the three neighbors of each fit.
            "index" (default) takes the three lowest-index neighbors;
            "angular" spreads the samples by polar angle around the normal.
            Both are deterministic.
        singular_rtol: Relative singular-value cutoff below which a fit is
            flagged as singular. Defaults to a dtype-aware value.

    Returns:
        CurvatureResult with neighborhoods, average normals, tangent frames,
        Shape Operators, curvatures and degeneracy flags.

    Raises:
        ValueError: If ``neighbor_order`` is unknown.

    Example:
        >>> from torchcurv.examples.surfaces import sphere_patch
        >>> mesh = sphere_patch.load(radius=2.0)
        >>> result = compute_curvature(mesh)
        >>> result.gaussian_curvature[~result.degenerate_mask].mean()  # ≈ 0.25
    """
    if neighbor_order not in ("index", "angular"):
        raise ValueError(
            f"Invalid {neighbor_order=!r}. Must be one of 'index', 'angular'."
        )

    ### Pass 1: neighborhoods
    adjacency = get_point_to_points_adjacency(mesh)

    ### Pass 2: average normals
    normals, flags = compute_average_normals(mesh)

    ### Pass 3: tangent frames
    frames, flags = compute_tangent_frames(mesh, adjacency, normals, flags)

    ### Pass 4: Shape Operators, then curvatures
    shape_operators, flags = compute_shape_operators(
        mesh,
        adjacency,
        frames,
        flags,
        neighbor_order=neighbor_order,
        singular_rtol=singular_rtol,
    )
    gaussian_curvature, mean_curvature = extract_curvatures(shape_operators)

    result = CurvatureResult(
        neighbor_offsets=adjacency.offsets,
        neighbor_indices=adjacency.indices,
        average_normals=normals,
        tangent_frames=frames,
        shape_operators=shape_operators,
        gaussian_curvature=gaussian_curvature,
        mean_curvature=mean_curvature,
        flags=flags,
    )

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Curvature computed for %d vertices (%d degenerate): %s",
            result.n_points,
            result.n_degenerate,
            result.flag_counts(),
        )

    return result
