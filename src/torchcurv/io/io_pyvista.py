"""Conversion between PyVista surfaces and TriangleMesh.

PyVista is an optional dependency and is imported lazily.
"""

import importlib
import warnings
from typing import TYPE_CHECKING

import numpy as np
import torch

from torchcurv.mesh import TriangleMesh

if TYPE_CHECKING:
    import pyvista

    from torchcurv.curvature import CurvatureResult


def from_pyvista(pyvista_mesh: "pyvista.PolyData") -> TriangleMesh:
    """Convert a PyVista surface to a TriangleMesh.

    Non-triangular faces are triangulated. Vertex normals are taken from the
    "Normals" point array when present; otherwise PyVista computes them.

    Args:
        pyvista_mesh: Input surface.

    Returns:
        TriangleMesh with per-vertex normals (``normal_indices == cells``), on CPU.

    Raises:
        ValueError: If the input has no faces.
    """
    pv = importlib.import_module("pyvista")

    if not isinstance(pyvista_mesh, pv.PolyData):
        pyvista_mesh = pyvista_mesh.extract_surface()

    if pyvista_mesh.n_faces_strict == 0:
        raise ValueError(
            f"Expected a surface with polygonal faces, but got {pyvista_mesh.n_faces_strict=}."
        )

    ### Ensure all faces are triangles
    if not pyvista_mesh.is_all_triangles:
        warnings.warn(
            "Input surface has non-triangular faces; triangulating.",
            stacklevel=2,
        )
        pyvista_mesh = pyvista_mesh.triangulate()

    ### Vertex normals
    if "Normals" not in pyvista_mesh.point_data:
        pyvista_mesh = pyvista_mesh.compute_normals(
            cell_normals=False,
            point_normals=True,
            split_vertices=False,
        )

    points = torch.from_numpy(np.asarray(pyvista_mesh.points)).float()
    cells = torch.from_numpy(np.asarray(pyvista_mesh.regular_faces)).long()
    normals = torch.from_numpy(np.asarray(pyvista_mesh.point_data["Normals"])).float()

    return TriangleMesh(points=points, cells=cells, normals=normals)


def to_pyvista(
    mesh: TriangleMesh,
    result: "CurvatureResult | None" = None,
) -> "pyvista.PolyData":
    """Convert a TriangleMesh to a PyVista surface.

    Args:
        mesh: Input triangle mesh.
        result: Curvature result for ``mesh``. When given, its per-vertex arrays
            are attached as point data: "average_normals", "gaussian_curvature",
            "mean_curvature" and "degeneracy_flags".

    Returns:
        pyvista.PolyData with triangular faces.
    """
    pv = importlib.import_module("pyvista")

    points_np = mesh.points.detach().cpu().numpy()
    cells_np = mesh.cells.detach().cpu().numpy()

    if mesh.n_cells == 0:
        pv_mesh = pv.PolyData(points_np)
    else:
        # PyVista padded format: [3, v0, v1, v2, 3, v0, v1, v2, ...]
        faces_array = np.column_stack(
            [np.full(len(cells_np), 3, dtype=np.int64), cells_np]
        ).ravel()
        pv_mesh = pv.PolyData(points_np, faces=faces_array)

    if result is not None:
        if result.n_points != mesh.n_points:
            raise ValueError(
                f"`result` was computed for {result.n_points} points, but the mesh has {mesh.n_points=}."
            )
        pv_mesh.point_data["average_normals"] = result.average_normals.cpu().numpy()
        pv_mesh.point_data["gaussian_curvature"] = result.gaussian_curvature.cpu().numpy()
        pv_mesh.point_data["mean_curvature"] = result.mean_curvature.cpu().numpy()
        pv_mesh.point_data["degeneracy_flags"] = result.flags.cpu().numpy()

    return pv_mesh
