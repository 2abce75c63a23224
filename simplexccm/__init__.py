"""
simplexccm: nearest-neighbor forecasting and cross mapping for nonlinear time series.

This package provides tools for:
- Shadow manifold reconstruction by delay-coordinate embedding
- Simplex projection forecasting (Sugihara & May 1990)
- Convergent Cross Mapping causality detection (Sugihara et al. 2012)
- Simulated test systems with known coupling
"""

__version__ = "0.1.0"

# Import main modules for convenient access
from . import ccm
from . import testdata

from .exceptions import (
    SimplexCCMError,
    InvalidDimensionError,
    InsufficientLibraryError,
)

# Import key functions for direct access
from .ccm import (
    embed,
    find_neighbors,
    weighted_estimate,
    simplex_projection,
    scan_convergence,
    scan_both_directions,
    CCMSession,
    find_optimal_E,
)

__all__ = [
    'ccm',
    'testdata',
    # Errors
    'SimplexCCMError',
    'InvalidDimensionError',
    'InsufficientLibraryError',
    # Core
    'embed',
    'find_neighbors',
    'weighted_estimate',
    'simplex_projection',
    'scan_convergence',
    'scan_both_directions',
    'CCMSession',
    'find_optimal_E',
]
