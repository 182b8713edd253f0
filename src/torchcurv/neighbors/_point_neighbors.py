"""Compute point-based adjacency relationships in triangle meshes.

This module provides functions to compute:
- Point-to-cells adjacency (star of each vertex)
- Point-to-points adjacency (the vertex neighborhoods)
"""

from typing import TYPE_CHECKING

import torch

from torchcurv.neighbors._adjacency import Adjacency

if TYPE_CHECKING:
    from torchcurv.mesh import TriangleMesh

# The three edges of a triangle, as pairs of local corner indices
_TRIANGLE_EDGES = ((0, 1), (0, 2), (1, 2))


def _empty_adjacency(n_sources: int, device: torch.device) -> Adjacency:
    return Adjacency(
        offsets=torch.zeros(n_sources + 1, dtype=torch.int64, device=device),
        indices=torch.zeros(0, dtype=torch.int64, device=device),
    )


def get_point_to_cells_adjacency(mesh: "TriangleMesh") -> Adjacency:
    """Compute the star of each vertex (all cells containing each point).

    Args:
        mesh: Input triangle mesh.

    Returns:
        Adjacency where adjacency.to_list()[i] contains all cell indices that
        contain point i, in increasing order. Isolated points have empty lists.

    Example:
        >>> points = torch.tensor([[0., 0., 0.], [1., 0., 0.], [0., 1., 0.], [1., 1., 0.]])
        >>> cells = torch.tensor([[0, 1, 2], [1, 3, 2]])
        >>> mesh = TriangleMesh(points=points, cells=cells)
        >>> get_point_to_cells_adjacency(mesh).to_list()
        [[0], [0, 1], [0, 1], [1]]
    """
    ### Handle empty mesh
    if mesh.n_cells == 0 or mesh.n_points == 0:
        return _empty_adjacency(mesh.n_points, mesh.points.device)

    ### Create (point_id, cell_id) pairs for all corners
    n_cells, n_vertices_per_cell = mesh.cells.shape
    point_ids = mesh.cells.reshape(-1)
    cell_ids = torch.arange(
        n_cells, dtype=torch.int64, device=mesh.cells.device
    ).repeat_interleave(n_vertices_per_cell)

    ### Sort by (point_id, cell_id) for grouping
    sort_indices = torch.argsort(point_ids * (n_cells + 1) + cell_ids)
    sorted_point_ids = point_ids[sort_indices]
    sorted_cell_ids = cell_ids[sort_indices]

    ### Compute offsets for each point
    offsets = torch.zeros(
        mesh.n_points + 1, dtype=torch.int64, device=mesh.cells.device
    )
    point_counts = torch.bincount(sorted_point_ids, minlength=mesh.n_points)
    offsets[1:] = torch.cumsum(point_counts, dim=0)

    return Adjacency(
        offsets=offsets,
        indices=sorted_cell_ids,
    )


def get_point_to_points_adjacency(mesh: "TriangleMesh") -> Adjacency:
    """Compute the neighborhood of every vertex.

    For each triangle (v1, v2, v3), v2 and v3 are neighbors of v1, v1 and v3
    are neighbors of v2, and v1 and v2 are neighbors of v3. Duplicates coming
    from shared edges are removed.

    The neighbors of every vertex are listed in increasing vertex index. This
    order is part of the contract: the tangent frame and the paraboloid fit
    pick specific neighbors out of it.

    Args:
        mesh: Input triangle mesh.

    Returns:
        Adjacency where adjacency.to_list()[i] contains all point indices that
        share a triangle with point i. Points used by no triangle get empty
        lists. The relation is symmetric.

    Example:
        >>> points = torch.tensor([[0., 0., 0.], [1., 0., 0.], [0.5, 1., 0.]])
        >>> cells = torch.tensor([[0, 1, 2]])
        >>> mesh = TriangleMesh(points=points, cells=cells)
        >>> get_point_to_points_adjacency(mesh).to_list()
        [[1, 2], [0, 2], [0, 1]]
    """
    ### Handle empty mesh
    if mesh.n_cells == 0 or mesh.n_points == 0:
        return _empty_adjacency(mesh.n_points, mesh.points.device)

    ### Extract the three edges of every triangle
    # Shape: (n_cells, 3, 2)
    edge_corners = torch.tensor(
        _TRIANGLE_EDGES, dtype=torch.int64, device=mesh.cells.device
    )
    cell_edges = mesh.cells[:, edge_corners]

    ### Sort vertices within each edge to canonical form
    # This ensures [3, 5] and [5, 3] are treated as the same edge
    cell_edges = torch.sort(cell_edges, dim=-1)[0]

    ### Deduplicate edges shared between triangles
    # Shape: (n_unique_edges, 2)
    unique_edges = torch.unique(cell_edges.reshape(-1, 2), dim=0)

    ### Drop self-loops from triangles with repeated vertices
    unique_edges = unique_edges[unique_edges[:, 0] != unique_edges[:, 1]]

    ### Create bidirectional edges
    # For each edge [a, b], create both [a, b] and [b, a]
    bidirectional_edges = torch.cat(
        [unique_edges, unique_edges.flip(dims=[1])],
        dim=0,
    )

    ### Sort by source vertex, then by target vertex
    sort_indices = torch.argsort(
        bidirectional_edges[:, 0] * (mesh.n_points + 1) + bidirectional_edges[:, 1]
    )
    sorted_edges = bidirectional_edges[sort_indices]

    ### Compute offsets for each point
    offsets = torch.zeros(
        mesh.n_points + 1,
        dtype=torch.int64,
        device=mesh.cells.device,
    )
    point_counts = torch.bincount(sorted_edges[:, 0], minlength=mesh.n_points)
    offsets[1:] = torch.cumsum(point_counts, dim=0)

    return Adjacency(
        offsets=offsets,
        indices=sorted_edges[:, 1],
    )
