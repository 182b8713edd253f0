"""Tests for the sample surface meshes."""

import pytest
import torch

from torchcurv.examples import surfaces
from torchcurv.mesh import TriangleMesh


class TestSampleSurfaces:
    @pytest.mark.parametrize(
        "example_name", ["plane", "saddle", "sphere_patch", "tetrahedron_surface"]
    )
    def test_load(self, example_name, device):
        mesh = getattr(surfaces, example_name).load(device=device)

        assert isinstance(mesh, TriangleMesh)
        assert mesh.points.device.type == device
        assert mesh.points.dtype == torch.float32
        assert mesh.n_points > 0
        assert mesh.n_cells > 0

        lengths = mesh.normals.norm(dim=-1)
        assert torch.allclose(lengths, torch.ones_like(lengths), atol=1e-5)

    @pytest.mark.parametrize("example_name", ["plane", "saddle", "sphere_patch"])
    def test_grid_resolution(self, example_name):
        mesh = getattr(surfaces, example_name).load(n_points_per_side=6)

        assert mesh.n_points == 36
        assert mesh.n_cells == 2 * 5 * 5
        assert torch.equal(mesh.normal_indices, mesh.cells)

    @pytest.mark.parametrize("example_name", ["plane", "saddle", "sphere_patch"])
    def test_faces_agree_with_normals(self, example_name):
        """Face winding is consistent with the given vertex normals."""
        mesh = getattr(surfaces, example_name).load(n_points_per_side=7)
        corner_mean = mesh.corner_normals.mean(dim=1)

        assert torch.all((mesh.cell_normals * corner_mean).sum(dim=-1) > 0)

    @pytest.mark.parametrize("example_name", ["plane", "saddle", "sphere_patch"])
    def test_dtype(self, example_name):
        mesh = getattr(surfaces, example_name).load(dtype=torch.float64)

        assert mesh.points.dtype == torch.float64
        assert mesh.normals.dtype == torch.float64

    def test_sphere_patch_radius(self):
        mesh = surfaces.sphere_patch.load(radius=3.0)
        radii = mesh.points.norm(dim=-1)

        assert torch.allclose(radii, torch.full_like(radii, 3.0))

    def test_tetrahedron_edges(self):
        mesh = surfaces.tetrahedron_surface.load(side_length=2.0, dtype=torch.float64)
        corners = mesh.points[mesh.cells]
        edges = corners - corners.roll(1, dims=1)

        assert torch.allclose(edges.norm(dim=-1), torch.full((4, 3), 2.0, dtype=torch.float64))

    def test_tetrahedron_outward_normals(self):
        mesh = surfaces.tetrahedron_surface.load()
        centroids = mesh.points[mesh.cells].mean(dim=1)

        assert torch.all((mesh.cell_normals * centroids).sum(dim=-1) > 0)

    def test_saddle_exact_curvature(self):
        points = torch.tensor([[0.0, 0.0, 0.0], [0.5, 0.0, 0.25]])
        K = surfaces.saddle.exact_gaussian_curvature(points, coefficient=1.0)

        assert K[0].item() == pytest.approx(-4.0)
        assert K[1].item() == pytest.approx(-1.0)
