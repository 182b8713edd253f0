"""Neighbor and adjacency computation for triangle meshes.

All adjacency relationships are returned as Adjacency tensorclass objects using
offset-indices encoding for efficient representation of ragged arrays.
"""

from torchcurv.neighbors._adjacency import Adjacency
from torchcurv.neighbors._point_neighbors import (
    get_point_to_cells_adjacency,
    get_point_to_points_adjacency,
)

__all__ = [
    "Adjacency",
    "get_point_to_cells_adjacency",
    "get_point_to_points_adjacency",
]
