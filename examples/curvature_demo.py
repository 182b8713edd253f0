import pyvista as pv

from torchcurv.curvature import compute_curvature
from torchcurv.examples.surfaces import saddle, sphere_patch
from torchcurv.io import from_pyvista, normalize_for_colormap, to_pyvista

# Sphere from PyVista; K should be close to 1/r² = 0.25 everywhere
mesh = from_pyvista(pv.Sphere(radius=2.0, theta_resolution=60, phi_resolution=60))
result = compute_curvature(mesh)
print(result.flag_counts())

pv_mesh = to_pyvista(mesh, result)
pv_mesh.plot(scalars="gaussian_curvature", cmap="viridis")

# Saddle; K is negative, H changes sign across the diagonals
mesh = saddle.load(n_points_per_side=41)
result = compute_curvature(mesh, neighbor_order="angular")

pv_mesh = to_pyvista(mesh, result)
pv_mesh.point_data["mean_curvature_color"] = normalize_for_colormap(
    result.mean_curvature, mask=~result.degenerate_mask, symmetric=True
).numpy()
pv_mesh.plot(scalars="mean_curvature_color", cmap="coolwarm")

# Spherical patch with a per-vertex cached property
mesh = sphere_patch.load(radius=0.5, n_points_per_side=33)
pv_mesh = to_pyvista(mesh)
pv_mesh.point_data["K"] = mesh.gaussian_curvature_vertices.numpy()
pv_mesh.plot(scalars="K", cmap="viridis")
