"""Pytest configuration and shared fixtures for torchcurv tests.

This module provides common test fixtures, small hand-built meshes and
assertion helpers. All functions and fixtures defined here are automatically
available to all test files without explicit imports.
"""

import pytest
import torch


### Pytest Hooks ###


def pytest_collection_modifyitems(config, items):
    """Skip tests marked with 'cuda' if CUDA is not available."""
    if torch.cuda.is_available():
        return  # CUDA available, run all tests

    skip_cuda = pytest.mark.skip(reason="CUDA not available")
    for item in items:
        if "cuda" in item.keywords:
            item.add_marker(skip_cuda)


### Mesh Generators (Standalone Functions) ###


def create_single_triangle_mesh(device: str = "cpu"):
    """One triangle in the z = 0 plane: every vertex has exactly 2 neighbors."""
    from torchcurv.mesh import TriangleMesh

    points = torch.tensor(
        [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]], device=device
    )
    cells = torch.tensor([[0, 1, 2]], device=device, dtype=torch.int64)
    return TriangleMesh(points=points, cells=cells)


def create_two_triangle_mesh(device: str = "cpu"):
    """Two triangles sharing the edge (1, 2), plus an isolated point 4."""
    from torchcurv.mesh import TriangleMesh

    points = torch.tensor(
        [
            [0.0, 0.0, 0.0],
            [1.0, 0.0, 0.0],
            [0.0, 1.0, 0.0],
            [1.0, 1.0, 0.0],
            [5.0, 5.0, 5.0],
        ],
        device=device,
    )
    cells = torch.tensor([[0, 1, 2], [1, 3, 2]], device=device, dtype=torch.int64)
    return TriangleMesh(points=points, cells=cells)


def create_collinear_fan_mesh(device: str = "cpu"):
    """Degenerate fan whose points all lie on the x axis.

    Vertex 0 has neighbors {1, 2, 3}, all along the same tangent line, so its
    paraboloid fit is singular. Vertex 2 is in the same situation.
    """
    from torchcurv.mesh import TriangleMesh

    points = torch.tensor(
        [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [2.0, 0.0, 0.0], [-1.0, 0.0, 0.0]],
        device=device,
    )
    cells = torch.tensor([[0, 1, 2], [0, 2, 3]], device=device, dtype=torch.int64)
    normals = torch.tensor([[0.0, 0.0, 1.0]], device=device)
    normal_indices = torch.zeros_like(cells)
    return TriangleMesh(
        points=points, cells=cells, normals=normals, normal_indices=normal_indices
    )


### Pytest Fixtures ###


@pytest.fixture(
    params=[
        "cpu",
        pytest.param("cuda", marks=pytest.mark.cuda),
    ]
)
def device(request):
    """Parametrize tests over all available devices (CPU, CUDA).

    CUDA tests are automatically skipped if CUDA is not available via
    the pytest_collection_modifyitems hook.
    """
    return request.param


@pytest.fixture
def single_triangle_mesh(device):
    return create_single_triangle_mesh(device=device)


@pytest.fixture
def two_triangle_mesh(device):
    return create_two_triangle_mesh(device=device)


@pytest.fixture
def collinear_fan_mesh(device):
    return create_collinear_fan_mesh(device=device)
