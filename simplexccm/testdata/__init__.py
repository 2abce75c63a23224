"""
Test data generation for simplex projection and CCM demonstrations.

This module provides simulated time series with known ground truth
coupling for validating the cross-mapping kernel.
"""

from .generators import (
    make_coupled_logistic,
    make_independent_series,
    make_periodic_series,
    make_tent_map_series,
    make_test_dataframe,
)

__all__ = [
    'make_coupled_logistic',
    'make_independent_series',
    'make_periodic_series',
    'make_tent_map_series',
    'make_test_dataframe',
]
