"""Per-vertex differential-geometry primitives: average normals and tangent frames."""

from torchcurv.geometry.normals import compute_average_normals
from torchcurv.geometry.tangent_frames import compute_tangent_frames, first_neighbors

__all__ = [
    "compute_average_normals",
    "compute_tangent_frames",
    "first_neighbors",
]
