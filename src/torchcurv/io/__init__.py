"""Hand-off to rendering code and PyVista interop."""

from torchcurv.io.buffers import normalize_for_colormap, to_corner_buffers
from torchcurv.io.io_pyvista import from_pyvista, to_pyvista

__all__ = [
    "from_pyvista",
    "normalize_for_colormap",
    "to_corner_buffers",
    "to_pyvista",
]
