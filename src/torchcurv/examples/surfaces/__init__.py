"""Sample surfaces with analytic normals.

Each module exposes a ``load(...)`` function returning a TriangleMesh.
"""

from torchcurv.examples.surfaces import (
    plane,
    saddle,
    sphere_patch,
    tetrahedron_surface,
)

__all__ = [
    "plane",
    "saddle",
    "sphere_patch",
    "tetrahedron_surface",
]
