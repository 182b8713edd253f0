"""Per-vertex degeneracy flags.

Every stage of the curvature pipeline reports vertices it cannot process by
setting a bit in an int64 mask instead of raising or producing NaN. The mask of
the final result is the union of the bits set by all stages; zero means the
vertex was fully processed.
"""

import enum

import torch


class Degeneracy(enum.IntFlag):
    """Reasons a vertex could not be fully processed."""

    NONE = 0
    NO_NORMAL = 1  # no incident corner, or corner normals cancel out
    NO_NEIGHBORS = 2  # tangent frame needs at least one neighbor
    DEGENERATE_FRAME = 4  # first neighbor lies along the normal
    TOO_FEW_NEIGHBORS = 8  # paraboloid fit needs three neighbors
    SINGULAR_FIT = 16  # U^T U is not invertible


def decode_flags(flags: int | torch.Tensor) -> Degeneracy:
    """Turn one bitmask entry into a Degeneracy value.

    Example:
        >>> decode_flags(torch.tensor(10))
        <Degeneracy.NO_NEIGHBORS|TOO_FEW_NEIGHBORS: 10>
    """
    if isinstance(flags, torch.Tensor):
        flags = int(flags.item())
    return Degeneracy(flags)


def has_flag(flags: torch.Tensor, flag: Degeneracy) -> torch.Tensor:
    """Boolean mask of the entries of ``flags`` that have every bit of ``flag`` set."""
    return (flags & int(flag)) == int(flag)
