"""Discrete curvature from osculating paraboloids.

For every vertex, a paraboloid is fitted through three neighbors in the local
tangent frame; its coefficients give the Shape Operator S, from which

- Gaussian curvature K = det(S)
- mean curvature H = trace(S)

are read off.
"""

from torchcurv.curvature.extract import extract_curvatures, principal_curvatures
from torchcurv.curvature.pipeline import CurvatureResult, compute_curvature
from torchcurv.curvature.shape_operator import (
    compute_shape_operators,
    fit_paraboloids,
    select_fit_neighbors,
)
from torchcurv.flags import Degeneracy, decode_flags, has_flag

__all__ = [
    "CurvatureResult",
    "Degeneracy",
    "compute_curvature",
    "compute_shape_operators",
    "decode_flags",
    "extract_curvatures",
    "fit_paraboloids",
    "has_flag",
    "principal_curvatures",
    "select_fit_neighbors",
]
