"""
Exceptions raised by the simplex / cross-mapping kernel.
"""


class SimplexCCMError(Exception):
    """Base class for simplexccm errors."""


class InvalidDimensionError(SimplexCCMError, ValueError):
    """Embedding dimension is non-positive or not smaller than the series length."""


class InsufficientLibraryError(SimplexCCMError, ValueError):
    """Library cannot supply E+1 distinct non-self neighbors."""
