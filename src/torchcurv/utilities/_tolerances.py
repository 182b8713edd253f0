"""Dtype-aware numerical tolerances.

A hardcoded absolute tolerance like ``1e-10`` is wrong for meshes whose
coordinates live at a scale far from unity. The helpers here derive floors and
relative tolerances from the dtype alone.

==========  =============  ==================
dtype       ``safe_eps``   ``default_rtol``
==========  =============  ==================
float32     ~3.3e-10       ~1.2e-5
float64     ~1.2e-77       ~2.2e-14
==========  =============  ==================
"""

import torch


def safe_eps(dtype: torch.dtype) -> float:
    """Return a dtype-aware floor for preventing division by zero.

    Equal to ``torch.finfo(dtype).tiny ** 0.25``: small enough to leave any
    physically meaningful quantity untouched, large enough that
    ``1 / safe_eps(dtype) ** 2`` does not overflow.
    """
    return torch.finfo(dtype).tiny ** 0.25


def default_rtol(dtype: torch.dtype) -> float:
    """Return the relative singular-value cutoff used for rank tests.

    A matrix is treated as rank-deficient when its smallest singular value is
    at or below ``default_rtol(dtype)`` times its largest one.

    Args:
        dtype: The floating-point dtype the input geometry was given in.

    Returns:
        ``100 * torch.finfo(dtype).eps``.
    """
    return 100 * torch.finfo(dtype).eps
