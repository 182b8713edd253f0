"""Tests for per-corner render buffers and colormap normalization."""

import pytest
import torch

from torchcurv.curvature import compute_curvature
from torchcurv.examples.surfaces import plane, sphere_patch
from torchcurv.io import normalize_for_colormap, to_corner_buffers
from torchcurv.mesh import TriangleMesh


class TestToCornerBuffers:
    def test_keys_and_shapes(self, device):
        mesh = sphere_patch.load(n_points_per_side=5, device=device)
        buffers = to_corner_buffers(mesh)
        n_corners = mesh.n_cells * 3

        assert buffers.batch_size == torch.Size([n_corners])
        assert set(buffers.keys()) == {
            "positions",
            "normals",
            "average_normals",
            "gaussian_curvature",
            "mean_curvature",
            "flags",
        }
        assert buffers["positions"].shape == (n_corners, 3)
        assert buffers["gaussian_curvature"].shape == (n_corners,)

    def test_corner_order(self, two_triangle_mesh):
        """Corner 3 * c + k is corner k of cell c."""
        result = compute_curvature(two_triangle_mesh)
        buffers = to_corner_buffers(two_triangle_mesh, result)
        cells = two_triangle_mesh.cells

        for c in range(two_triangle_mesh.n_cells):
            for k in range(3):
                vertex = cells[c, k]
                corner = 3 * c + k
                assert torch.equal(
                    buffers["positions"][corner], two_triangle_mesh.points[vertex]
                )
                assert buffers["flags"][corner] == result.flags[vertex]

    def test_keeps_independent_normals(self):
        """Corner normals come from ``normal_indices``, not from the vertex."""
        points = torch.tensor(
            [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 1.0, 0.0]]
        )
        cells = torch.tensor([[0, 1, 2], [1, 3, 2]])
        normals = torch.tensor([[0.0, 0.0, 1.0], [0.0, 0.6, 0.8]])
        normal_indices = torch.tensor([[0, 0, 0], [1, 1, 1]])
        mesh = TriangleMesh(
            points=points, cells=cells, normals=normals, normal_indices=normal_indices
        )

        buffers = to_corner_buffers(mesh)

        assert torch.equal(buffers["normals"][:3], normals[0].expand(3, 3))
        assert torch.equal(buffers["normals"][3:], normals[1].expand(3, 3))
        # Vertex 1 is shared, so its average normal blends both faces
        assert torch.equal(buffers["average_normals"][1], buffers["average_normals"][3])

    def test_mismatched_result_raises(self):
        small = plane.load(n_points_per_side=3)
        large = plane.load(n_points_per_side=4)
        with pytest.raises(ValueError, match="points"):
            to_corner_buffers(small, compute_curvature(large))


class TestNormalizeForColormap:
    def test_range(self):
        values = torch.tensor([-3.0, 1.0, 2.0, 5.0])
        normalized = normalize_for_colormap(values)

        assert normalized.min().item() == pytest.approx(0.0)
        assert normalized.max().item() == pytest.approx(1.0)
        assert normalized[1].item() == pytest.approx(0.5)

    def test_symmetric_maps_zero_to_half(self):
        values = torch.tensor([-2.0, 0.0, 1.0])
        normalized = normalize_for_colormap(values, symmetric=True)

        assert torch.allclose(normalized, torch.tensor([0.0, 0.5, 0.75]))

    def test_constant_field(self):
        normalized = normalize_for_colormap(torch.full((6,), 3.0))
        assert torch.all(normalized == 0.5)

    def test_mask_excludes_placeholders(self):
        values = torch.tensor([0.0, 1.0, 2.0, 100.0])
        mask = torch.tensor([True, True, True, False])
        normalized = normalize_for_colormap(values, mask=mask)

        assert torch.allclose(normalized, torch.tensor([0.0, 0.5, 1.0, 1.0]))

    def test_quantile_clips_outliers(self):
        values = torch.cat([torch.linspace(0.0, 1.0, 101), torch.tensor([1000.0])])
        normalized = normalize_for_colormap(values, quantile=0.05)

        assert normalized[-1].item() == 1.0
        assert normalized[50].item() == pytest.approx(0.5, abs=0.05)

    @pytest.mark.parametrize("quantile", [0.0, 0.5, 0.7, -0.1])
    def test_invalid_quantile(self, quantile):
        with pytest.raises(ValueError, match="quantile"):
            normalize_for_colormap(torch.arange(4.0), quantile=quantile)

    def test_preserves_dtype_and_shape(self):
        values = torch.randn(4, 5, dtype=torch.float64)
        normalized = normalize_for_colormap(values)

        assert normalized.shape == values.shape
        assert normalized.dtype == torch.float64
        assert torch.all((normalized >= 0) & (normalized <= 1))
