from typing import TYPE_CHECKING, Literal

import torch
import torch.nn.functional as F
from tensordict import TensorDict, tensorclass

from torchcurv.utilities import get_cached, safe_eps, set_cached

if TYPE_CHECKING:
    from torchcurv.curvature.pipeline import CurvatureResult
    from torchcurv.neighbors import Adjacency


@tensorclass
class TriangleMesh:
    """Read-only triangle mesh with independently indexed vertex normals.

    Positions and normals live in two separate arrays. Every face corner refers
    to one position (through ``cells``) and one normal (through
    ``normal_indices``), so a vertex may be seen with a different normal by each
    face that uses it, as in Wavefront-style mesh data.

    Attributes:
        points: Vertex positions, shape (n_points, 3).
        cells: Position index of each face corner, shape (n_cells, 3).
        normals: Normal vectors, shape (n_normals, 3). If omitted, every corner
            uses the geometric unit normal of its face.
        normal_indices: Normal index of each face corner, shape (n_cells, 3).
            If omitted while ``normals`` is given, normals are per-vertex and
            ``normal_indices`` defaults to ``cells``.
        point_data: Per-vertex attributes, batch size (n_points,). Derived
            quantities are cached here under the "_cache" key.

    Example:
        >>> points = torch.tensor([[0., 0., 0.], [1., 0., 0.], [0., 1., 0.]])
        >>> cells = torch.tensor([[0, 1, 2]])
        >>> mesh = TriangleMesh(points=points, cells=cells)
        >>> mesh.normals
        tensor([[0., 0., 1.]])
        >>> mesh.normal_indices
        tensor([[0, 0, 0]])
    """

    points: torch.Tensor  # shape: (n_points, 3)
    cells: torch.Tensor  # shape: (n_cells, 3)
    normals: torch.Tensor = None  # shape: (n_normals, 3)  # ty: ignore
    normal_indices: torch.Tensor = None  # shape: (n_cells, 3)  # ty: ignore
    point_data: TensorDict = None  # accepts dict/None, converted to TensorDict in __post_init__  # ty: ignore

    def __post_init__(self):
        ### Validate shapes
        if self.points.ndim != 2 or self.points.shape[-1] != 3:
            raise ValueError(
                f"`points` must have shape (n_points, 3), but got {self.points.shape=}."
            )
        if self.cells.ndim != 2 or self.cells.shape[-1] != 3:
            raise ValueError(
                f"`cells` must have shape (n_cells, 3), but got {self.cells.shape=}."
            )

        ### Validate dtypes
        if not torch.is_floating_point(self.points):
            raise TypeError(
                f"`points` must have a floating-point dtype, but got {self.points.dtype=}."
            )
        if torch.is_floating_point(self.cells):
            raise TypeError(
                f"`cells` must have an int-like dtype, but got {self.cells.dtype=}."
            )
        _validate_indices("cells", self.cells, self.n_points)

        ### Fill in missing normal data
        if self.normals is None:
            if self.normal_indices is not None:
                raise ValueError(
                    "`normal_indices` was given without `normals`; "
                    "both must be given, or `normals` alone."
                )
            self.normals = _face_normals(self.points, self.cells)
            self.normal_indices = (
                torch.arange(self.n_cells, device=self.cells.device)
                .unsqueeze(-1)
                .expand(-1, 3)
                .contiguous()
            )
        elif self.normal_indices is None:
            self.normal_indices = self.cells

        ### Validate normal data
        if self.normals.ndim != 2 or self.normals.shape[-1] != 3:
            raise ValueError(
                f"`normals` must have shape (n_normals, 3), but got {self.normals.shape=}."
            )
        if not torch.is_floating_point(self.normals):
            raise TypeError(
                f"`normals` must have a floating-point dtype, but got {self.normals.dtype=}."
            )
        if self.normal_indices.shape != self.cells.shape:
            raise ValueError(
                f"`normal_indices` must have the same shape as `cells`, but got "
                f"{self.normal_indices.shape=} != {self.cells.shape=}."
            )
        if torch.is_floating_point(self.normal_indices):
            raise TypeError(
                f"`normal_indices` must have an int-like dtype, but got {self.normal_indices.dtype=}."
            )
        _validate_indices("normal_indices", self.normal_indices, len(self.normals))

        ### Initialize point data TensorDict
        if self.point_data is None:
            self.point_data = {}
        if not isinstance(self.point_data, TensorDict):
            self.point_data = TensorDict(
                dict(self.point_data),
                batch_size=torch.Size([self.n_points]),
                device=self.points.device,
            )

    @property
    def n_points(self) -> int:
        return self.points.shape[0]

    @property
    def n_cells(self) -> int:
        return self.cells.shape[0]

    @property
    def n_normals(self) -> int:
        return self.normals.shape[0]

    @property
    def cell_normals(self) -> torch.Tensor:
        """Geometric unit normal of every face, shape (n_cells, 3).

        Orientation follows the corner order (right-hand rule). Faces with zero
        area get a zero vector.
        """
        return _face_normals(self.points, self.cells)

    @property
    def corner_normals(self) -> torch.Tensor:
        """Normal vector seen by every face corner, shape (n_cells, 3, 3)."""
        return self.normals[self.normal_indices]

    def get_point_to_points_adjacency(self) -> "Adjacency":
        """Compute the neighborhood of every vertex.

        Returns:
            Adjacency where adjacency.to_list()[i] contains the vertices sharing
            a triangle with vertex i, in increasing index order.
        """
        from torchcurv.neighbors import get_point_to_points_adjacency

        return get_point_to_points_adjacency(self)

    def get_point_to_cells_adjacency(self) -> "Adjacency":
        """Compute the star of each vertex (all cells containing each point)."""
        from torchcurv.neighbors import get_point_to_cells_adjacency

        return get_point_to_cells_adjacency(self)

    @property
    def average_normals(self) -> torch.Tensor:
        """Unit average of the corner normals incident to every vertex.

        The result is cached in point_data. Vertices used by no face get a zero
        vector; see :func:`torchcurv.geometry.compute_average_normals` for the
        accompanying degeneracy flags.

        Returns:
            Tensor of shape (n_points, 3).
        """
        cached = get_cached(self.point_data, "average_normals")
        if cached is None:
            from torchcurv.geometry import compute_average_normals

            cached, _ = compute_average_normals(self)
            set_cached(self.point_data, "average_normals", cached)
        return cached

    def compute_curvature(
        self,
        neighbor_order: Literal["index", "angular"] = "index",
        singular_rtol: float | None = None,
    ) -> "CurvatureResult":
        """Run the full curvature pipeline on this mesh.

        Args:
            neighbor_order: How the three neighbors of the paraboloid fit are
                chosen. See :func:`torchcurv.curvature.compute_curvature`.
            singular_rtol: Relative singular-value cutoff below which a fit is
                flagged as singular. Defaults to a dtype-aware value.

        Returns:
            CurvatureResult holding every per-vertex array of the pipeline.
        """
        from torchcurv.curvature import compute_curvature

        return compute_curvature(
            self, neighbor_order=neighbor_order, singular_rtol=singular_rtol
        )

    def _default_curvature(self) -> tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        keys = ("gaussian_curvature", "mean_curvature", "curvature_flags")
        cached = [get_cached(self.point_data, key) for key in keys]
        if any(value is None for value in cached):
            result = self.compute_curvature()
            cached = [result.gaussian_curvature, result.mean_curvature, result.flags]
            for key, value in zip(keys, cached):
                set_cached(self.point_data, key, value)
        return tuple(cached)

    @property
    def gaussian_curvature_vertices(self) -> torch.Tensor:
        """Gaussian curvature K = det(S) at every vertex, shape (n_points,).

        Computed with the default pipeline settings and cached in point_data.
        Degenerate vertices hold 0; use :attr:`curvature_flags` to tell them
        apart from flat ones.

        Example:
            >>> from torchcurv.examples.surfaces import sphere_patch
            >>> # Sphere of radius r has K = 1/r² everywhere
            >>> mesh = sphere_patch.load(radius=2.0)
            >>> K = mesh.gaussian_curvature_vertices  # ≈ 0.25
        """
        return self._default_curvature()[0]

    @property
    def mean_curvature_vertices(self) -> torch.Tensor:
        """Mean curvature H = trace(S) at every vertex, shape (n_points,).

        This is the unnormalized sum of principal curvatures: H = 2/r on a
        sphere of radius r with outward normals.
        """
        return self._default_curvature()[1]

    @property
    def curvature_flags(self) -> torch.Tensor:
        """Degeneracy bitmask of the default curvature pipeline, shape (n_points,)."""
        return self._default_curvature()[2]


def _face_normals(points: torch.Tensor, cells: torch.Tensor) -> torch.Tensor:
    """Unit normal of each triangle, by the cross product of two edges."""
    if len(cells) == 0:
        return torch.zeros((0, 3), dtype=points.dtype, device=points.device)
    corners = points[cells]  # (n_cells, 3, 3)
    normals = torch.linalg.cross(
        corners[:, 1] - corners[:, 0],
        corners[:, 2] - corners[:, 0],
        dim=-1,
    )
    return F.normalize(normals, dim=-1, eps=safe_eps(points.dtype))


def _validate_indices(name: str, indices: torch.Tensor, size: int) -> None:
    """Raise ValueError unless every entry of ``indices`` lies in [0, size)."""
    if indices.numel() == 0:
        return
    lowest = indices.min().item()
    highest = indices.max().item()
    if lowest < 0 or highest >= size:
        raise ValueError(
            f"`{name}` must index into an array of length {size}, but got "
            f"indices in [{lowest}, {highest}]."
        )
