"""Curvatures from Shape Operators.

If S is the 2x2 Shape Operator at a vertex:

- Gaussian curvature K = det(S), the product of the principal curvatures;
- mean curvature H = trace(S), their (unnormalized) sum.

Placeholders are propagated as-is: a zero S gives K = H = 0.
"""

import torch


def extract_curvatures(shape_operators: torch.Tensor) -> tuple[torch.Tensor, torch.Tensor]:
    """Compute Gaussian and mean curvature from Shape Operators.

    Args:
        shape_operators: Tensor of shape (..., 2, 2).

    Returns:
        Tuple (K, H) of tensors with shape (...,).

    Example:
        >>> S = torch.tensor([[[0.5, 0.0], [0.0, 0.5]]])  # sphere of radius 2
        >>> extract_curvatures(S)
        (tensor([0.2500]), tensor([1.]))
    """
    s00 = shape_operators[..., 0, 0]
    s01 = shape_operators[..., 0, 1]
    s10 = shape_operators[..., 1, 0]
    s11 = shape_operators[..., 1, 1]

    gaussian_curvature = s00 * s11 - s01 * s10
    mean_curvature = s00 + s11

    return gaussian_curvature, mean_curvature


def principal_curvatures(shape_operators: torch.Tensor) -> torch.Tensor:
    """Eigenvalues of the (symmetric) Shape Operators, in ascending order.

    Args:
        shape_operators: Tensor of shape (..., 2, 2).

    Returns:
        Tensor of shape (..., 2) holding (k_min, k_max).
    """
    return torch.linalg.eigvalsh(shape_operators)
