"""Triangulation of a structured grid of points."""

import torch


def grid_cells(n_rows: int, n_cols: int, device: str = "cpu") -> torch.Tensor:
    """Split every quad of an ``n_rows`` x ``n_cols`` point grid into two triangles.

    Point (i, j) has index ``i * n_cols + j``. With rows along x and columns
    along y, triangles are oriented counterclockwise seen from +z.

    Returns:
        int64 tensor of shape (2 * (n_rows - 1) * (n_cols - 1), 3).
    """
    i, j = torch.meshgrid(
        torch.arange(n_rows - 1, device=device),
        torch.arange(n_cols - 1, device=device),
        indexing="ij",
    )
    idx = (i * n_cols + j).reshape(-1)

    lower = torch.stack([idx, idx + n_cols, idx + 1], dim=-1)
    upper = torch.stack([idx + 1, idx + n_cols, idx + n_cols + 1], dim=-1)

    return torch.stack([lower, upper], dim=1).reshape(-1, 3)


def interior_mask(n_rows: int, n_cols: int, device: str = "cpu") -> torch.Tensor:
    """Boolean mask of the grid points not on the grid's border."""
    mask = torch.zeros((n_rows, n_cols), dtype=torch.bool, device=device)
    mask[1:-1, 1:-1] = True
    return mask.reshape(-1)
