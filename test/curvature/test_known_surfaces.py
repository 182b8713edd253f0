"""Regression tests of the curvature estimate on surfaces with known curvature.

Tests Gaussian and mean curvature on planes, sphere patches, saddles and the
regular tetrahedron, and checks convergence on the sphere with resolution.
"""

import math

import pytest
import torch

from torchcurv.curvature import compute_curvature
from torchcurv.examples.surfaces import plane, saddle, sphere_patch, tetrahedron_surface
from torchcurv.examples.surfaces._grid import interior_mask


### Plane


class TestPlane:
    """A flat patch has zero curvature everywhere it can be estimated."""

    def test_zero_curvature_at_interior_vertices(self, device):
        n = 9
        mesh = plane.load(n_points_per_side=n, device=device)
        result = compute_curvature(mesh)
        interior = interior_mask(n, n, device=device)

        assert torch.all(result.flags[interior] == 0)
        assert torch.allclose(
            result.gaussian_curvature[interior],
            torch.zeros(int(interior.sum()), device=device),
            atol=1e-6,
        )
        assert torch.allclose(
            result.mean_curvature[interior],
            torch.zeros(int(interior.sum()), device=device),
            atol=1e-6,
        )

    def test_no_nan_anywhere(self, device):
        mesh = plane.load(device=device)
        result = compute_curvature(mesh)

        assert torch.isfinite(result.gaussian_curvature).all()
        assert torch.isfinite(result.mean_curvature).all()
        assert torch.isfinite(result.shape_operators).all()

    def test_tilted_plane(self):
        """Curvature does not depend on the plane's orientation."""
        mesh = plane.load(n_points_per_side=7, dtype=torch.float64)
        rotation = torch.linalg.matrix_exp(
            torch.tensor(
                [[0.0, -0.4, 0.9], [0.4, 0.0, -0.2], [-0.9, 0.2, 0.0]],
                dtype=torch.float64,
            )
        )
        tilted = type(mesh)(
            points=mesh.points @ rotation.T,
            cells=mesh.cells,
            normals=mesh.normals @ rotation.T,
        )
        result = compute_curvature(tilted)
        interior = interior_mask(7, 7)

        assert result.gaussian_curvature[interior].abs().max() < 1e-10
        assert result.mean_curvature[interior].abs().max() < 1e-10


### Sphere


class TestSphere:
    """A sphere of radius r has K = 1/r² and H = 2/r (outward normals)."""

    @pytest.mark.parametrize("radius", [0.5, 1.0, 3.0])
    def test_gaussian_curvature(self, device, radius):
        n = 17
        mesh = sphere_patch.load(radius=radius, n_points_per_side=n, device=device)
        result = compute_curvature(mesh)
        interior = interior_mask(n, n, device=device)

        K = result.gaussian_curvature[interior]
        expected_K = 1.0 / radius**2

        assert torch.all(K > 0)
        relative_error = (K - expected_K).abs() / expected_K
        assert relative_error.max() < 0.05

    def test_mean_curvature(self, device):
        n = 17
        radius = 2.0
        mesh = sphere_patch.load(radius=radius, n_points_per_side=n, device=device)
        result = compute_curvature(mesh)
        interior = interior_mask(n, n, device=device)

        H = result.mean_curvature[interior]
        assert torch.all(H > 0)
        assert torch.allclose(H, torch.full_like(H, 2.0 / radius), rtol=0.05)

    def test_inward_normals_flip_mean_curvature(self):
        """Reversing the normals flips H but keeps K."""
        n = 17
        outward = sphere_patch.load(n_points_per_side=n)
        inward = type(outward)(
            points=outward.points, cells=outward.cells, normals=-outward.normals
        )
        interior = interior_mask(n, n)

        out_result = compute_curvature(outward)
        in_result = compute_curvature(inward)

        assert torch.all(in_result.mean_curvature[interior] < 0)
        assert torch.allclose(
            in_result.gaussian_curvature[interior],
            out_result.gaussian_curvature[interior],
            rtol=1e-4,
        )

    def test_error_shrinks_with_resolution(self):
        radius = 1.0
        errors = []
        for n in (9, 17, 33):
            mesh = sphere_patch.load(
                radius=radius, n_points_per_side=n, dtype=torch.float64
            )
            result = compute_curvature(mesh)
            K = result.gaussian_curvature[interior_mask(n, n)]
            errors.append((K - 1.0 / radius**2).abs().max().item())

        assert errors[0] > errors[1] > errors[2]

    @pytest.mark.parametrize("neighbor_order", ["index", "angular"])
    def test_both_neighbor_orders_converge(self, neighbor_order):
        n = 33
        mesh = sphere_patch.load(n_points_per_side=n, dtype=torch.float64)
        result = compute_curvature(mesh, neighbor_order=neighbor_order)
        K = result.gaussian_curvature[interior_mask(n, n)]

        assert torch.allclose(K, torch.ones_like(K), rtol=0.02)


### Saddle


class TestSaddle:
    """The hyperbolic paraboloid has negative Gaussian curvature."""

    def test_negative_gaussian_curvature_near_saddle_point(self, device):
        n = 21
        mesh = saddle.load(size=1.0, n_points_per_side=n, device=device)
        result = compute_curvature(mesh)

        near_center = (mesh.points[:, :2].abs() <= 0.25 + 1e-6).all(dim=-1)
        assert torch.all(result.flags[near_center] == 0)
        assert torch.all(result.gaussian_curvature[near_center] < 0)

    def test_saddle_point_value(self, device):
        n = 21
        coefficient = 1.0
        mesh = saddle.load(n_points_per_side=n, coefficient=coefficient, device=device)
        result = compute_curvature(mesh)

        center = mesh.n_points // 2
        assert torch.allclose(mesh.points[center], torch.zeros(3, device=device))
        K = result.gaussian_curvature[center].item()
        H = result.mean_curvature[center].item()
        assert K == pytest.approx(-4 * coefficient**2, rel=0.05)
        assert H == pytest.approx(0.0, abs=0.05)

    def test_tracks_exact_curvature(self):
        n = 81
        mesh = saddle.load(n_points_per_side=n, dtype=torch.float64)
        result = compute_curvature(mesh)

        near_center = (mesh.points[:, :2].abs() <= 0.25 + 1e-9).all(dim=-1)
        exact = saddle.exact_gaussian_curvature(mesh.points)
        assert torch.allclose(
            result.gaussian_curvature[near_center], exact[near_center], rtol=0.2
        )


### Tetrahedron


class TestTetrahedron:
    """Every vertex of a regular tetrahedron sees the same neighborhood."""

    def test_all_vertices_equal_and_positive(self, device):
        mesh = tetrahedron_surface.load(device=device)
        result = compute_curvature(mesh)

        K = result.gaussian_curvature
        assert torch.all(result.flags == 0)
        assert torch.all(K > 0)
        assert torch.allclose(K, K[0].expand_as(K), rtol=1e-4)

    def test_closed_form(self):
        """With a = side / (2√2): S = (√3 / a) I, so K = 3 / a² and H = 2√3 / a."""
        side = 1.0
        a = side / (2 * math.sqrt(2))
        mesh = tetrahedron_surface.load(side_length=side, dtype=torch.float64)
        result = compute_curvature(mesh)

        assert torch.allclose(
            result.gaussian_curvature,
            torch.full((4,), 3 / a**2, dtype=torch.float64),
            rtol=1e-8,
        )
        assert torch.allclose(
            result.mean_curvature,
            torch.full((4,), 2 * math.sqrt(3) / a, dtype=torch.float64),
            rtol=1e-8,
        )
