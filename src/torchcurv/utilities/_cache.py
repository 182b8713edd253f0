"""Cache utilities for TensorDict-based data storage.

Derived per-vertex quantities (average normals, tangent frames, ...) are stored
in the mesh's ``point_data`` under the ``"_cache"`` key so that repeated queries
on the same mesh do not recompute them.
"""

import torch
from tensordict import TensorDict

CACHE_KEY = "_cache"


def get_cached(data: TensorDict, key: str) -> torch.Tensor | None:
    """Get a cached value from a TensorDict.

    Args:
        data: TensorDict containing potentially cached data.
        key: Name of the cached value (without the "_cache" prefix).

    Returns:
        The cached tensor if it exists, None otherwise.

    Example:
        >>> normals = get_cached(mesh.point_data, "average_normals")
        >>> if normals is None:
        ...     normals = compute_something(mesh)
    """
    return data.get((CACHE_KEY, key), None)


def set_cached(data: TensorDict, key: str, value: torch.Tensor) -> None:
    """Set a cached value in a TensorDict.

    Creates the "_cache" sub-TensorDict if it doesn't exist, then stores the
    value under ("_cache", key).

    Args:
        data: TensorDict to store the value in.
        key: Name of the cached value (without the "_cache" prefix).
        value: Tensor to cache. Its leading dimension must match the batch size
            of ``data``.
    """
    if CACHE_KEY not in data.keys():
        data[CACHE_KEY] = TensorDict(
            {}, batch_size=data.batch_size, device=data.device
        )
    data[(CACHE_KEY, key)] = value
