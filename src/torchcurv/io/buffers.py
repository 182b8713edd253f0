"""Hand-off of per-vertex results to a renderer.

Renderers that draw flat-indexed triangle lists want one attribute record per
face corner rather than per vertex. :func:`to_corner_buffers` expands the
per-vertex outputs accordingly, and :func:`normalize_for_colormap` maps a
scalar field such as Gaussian curvature onto [0, 1] for color lookup.
"""

from typing import TYPE_CHECKING

import torch
from tensordict import TensorDict

from torchcurv.utilities import safe_eps

if TYPE_CHECKING:
    from torchcurv.curvature import CurvatureResult
    from torchcurv.mesh import TriangleMesh


def to_corner_buffers(
    mesh: "TriangleMesh",
    result: "CurvatureResult | None" = None,
) -> TensorDict:
    """Expand per-vertex data into per-face-corner buffers.

    Corner ``3 * c + k`` is the k-th corner of cell c.

    Args:
        mesh: Input triangle mesh.
        result: Curvature result for ``mesh``. Computed with default settings
            if omitted.

    Returns:
        TensorDict with batch size (n_cells * 3,) and keys:
            - "positions": (n_cells * 3, 3)
            - "normals": corner normals as given by the mesh, (n_cells * 3, 3)
            - "average_normals": (n_cells * 3, 3)
            - "gaussian_curvature": (n_cells * 3,)
            - "mean_curvature": (n_cells * 3,)
            - "flags": (n_cells * 3,)
    """
    if result is None:
        result = mesh.compute_curvature()
    if result.n_points != mesh.n_points:
        raise ValueError(
            f"`result` was computed for {result.n_points} points, but the mesh has {mesh.n_points=}."
        )

    corner_points = mesh.cells.reshape(-1)
    corner_normals = mesh.normal_indices.reshape(-1)

    return TensorDict(
        {
            "positions": mesh.points[corner_points],
            "normals": mesh.normals[corner_normals],
            "average_normals": result.average_normals[corner_points],
            "gaussian_curvature": result.gaussian_curvature[corner_points],
            "mean_curvature": result.mean_curvature[corner_points],
            "flags": result.flags[corner_points],
        },
        batch_size=torch.Size([len(corner_points)]),
        device=mesh.points.device,
    )


def normalize_for_colormap(
    values: torch.Tensor,
    mask: torch.Tensor | None = None,
    symmetric: bool = False,
    quantile: float | None = None,
) -> torch.Tensor:
    """Map a scalar field linearly onto [0, 1].

    Args:
        values: Scalar field of any shape.
        mask: Boolean tensor like ``values``; only True entries define the
            range. Masked-out entries are mapped like any other value and then
            clipped. Typically ``~result.degenerate_mask``.
        symmetric: If True, the range is [-m, m] with m the largest magnitude,
            so that zero maps to 0.5 (useful for signed curvature).
        quantile: If given (in (0, 0.5)), the range is taken between the
            ``quantile`` and ``1 - quantile`` quantiles, cutting off outliers.

    Returns:
        Tensor like ``values`` with entries in [0, 1]. A constant field maps
        to 0.5.

    Example:
        >>> normalize_for_colormap(torch.tensor([-2.0, 0.0, 1.0]), symmetric=True)
        tensor([0.0000, 0.5000, 0.7500])
    """
    if quantile is not None and not 0.0 < quantile < 0.5:
        raise ValueError(f"`quantile` must lie in (0, 0.5), but got {quantile=}.")

    reference = values if mask is None else values[mask]
    if reference.numel() == 0:
        return torch.full_like(values, 0.5)
    reference = reference.to(torch.float64)

    if quantile is not None:
        low = torch.quantile(reference, quantile)
        high = torch.quantile(reference, 1.0 - quantile)
    else:
        low = reference.min()
        high = reference.max()

    if symmetric:
        high = torch.maximum(low.abs(), high.abs())
        low = -high

    span = high - low
    if span <= safe_eps(values.dtype):
        return torch.full_like(values, 0.5)

    normalized = (values.to(torch.float64) - low) / span
    return normalized.clamp(0.0, 1.0).to(values.dtype)
