from torchcurv.mesh import TriangleMesh
from torchcurv.flags import Degeneracy
from torchcurv.curvature import CurvatureResult, compute_curvature
