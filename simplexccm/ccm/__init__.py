"""
Simplex projection and Convergent Cross Mapping (CCM).

This module provides:
- Delay-coordinate embedding (shadow manifolds)
- Nearest-neighbor search with simplex weighting
- Simplex projection forecasting
- Convergence scans over library length, sequential or parallel
- Parameter selection and convergence analysis
"""

from .embedding import (
    embed,
    embed_dataframe,
)

from .neighbors import (
    distance_matrix,
    find_neighbors,
    rank_neighbors,
)

from .core import (
    simplex_weights,
    weighted_estimate,
    correlation,
    cross_map,
    forecast_target,
    simplex_projection,
)

from .workflow import (
    DEFAULT_LIB_EXPONENTS,
    library_sizes,
    scan_convergence,
    scan_both_directions,
)

from .session import CCMSession

from .parameters import (
    find_optimal_E,
    forecast_skill_by_horizon,
)

from .analysis import (
    saturating_curve,
    fit_ccm_curve,
    has_converged,
    compare_directions,
    compare_to_reference,
)

__all__ = [
    # Embedding
    'embed',
    'embed_dataframe',
    # Neighbors
    'distance_matrix',
    'find_neighbors',
    'rank_neighbors',
    # Core functions
    'simplex_weights',
    'weighted_estimate',
    'correlation',
    'cross_map',
    'forecast_target',
    'simplex_projection',
    # Workflow
    'DEFAULT_LIB_EXPONENTS',
    'library_sizes',
    'scan_convergence',
    'scan_both_directions',
    'CCMSession',
    # Parameter selection
    'find_optimal_E',
    'forecast_skill_by_horizon',
    # Analysis
    'saturating_curve',
    'fit_ccm_curve',
    'has_converged',
    'compare_directions',
    'compare_to_reference',
]
