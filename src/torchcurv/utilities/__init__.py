"""Utility functions for torchcurv."""

from torchcurv.utilities._cache import get_cached, set_cached
from torchcurv.utilities._tolerances import default_rtol, safe_eps

__all__ = [
    "get_cached",
    "set_cached",
    "default_rtol",
    "safe_eps",
]
