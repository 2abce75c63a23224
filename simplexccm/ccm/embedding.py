"""
Delay-coordinate embedding (shadow manifold reconstruction).

Each row of the embedded manifold is a length-E window of consecutive
samples. Row i starts at position i, so a series of length N yields N-E
rows and every row has at least one following sample available for
one-step-ahead forecasting.
"""

import numbers

import numpy as np
import pandas as pd
from typing import Union, Sequence

from ..exceptions import InvalidDimensionError


def _check_dimension(n: int, E) -> int:
    if isinstance(E, bool) or not isinstance(E, numbers.Integral):
        raise InvalidDimensionError(f"Embedding dimension must be an integer, got {E!r}")
    E = int(E)
    if E < 1:
        raise InvalidDimensionError(f"Embedding dimension must be >= 1, got E={E}")
    if E >= n:
        raise InvalidDimensionError(
            f"Embedding dimension E={E} must be smaller than the series length N={n}"
        )
    return E


def embed(series: Union[Sequence[float], np.ndarray, pd.Series], E: int) -> np.ndarray:
    """
    Build the delay-coordinate embedding of a scalar series.

    Parameters
    ----------
    series : array-like, shape (N,)
        Scalar time series
    E : int
        Embedding dimension (window length)

    Returns
    -------
    np.ndarray, shape (N - E, E)
        Row i holds series[i], series[i+1], ..., series[i+E-1].
        No normalization or centering is applied.

    Raises
    ------
    InvalidDimensionError
        If E < 1 or E >= N.
    ValueError
        If series is not one-dimensional.

    Examples
    --------
    >>> embed([1, 2, 3, 4, 5], 2).tolist()
    [[1.0, 2.0], [2.0, 3.0], [3.0, 4.0]]
    """
    x = np.asarray(series, dtype=float)
    if x.ndim != 1:
        raise ValueError(f"Expected a one-dimensional series, got shape {x.shape}")
    n = x.shape[0]
    E = _check_dimension(n, E)

    n_rows = n - E
    # Column j is the series shifted forward by j samples
    manifold = np.empty((n_rows, E), dtype=float)
    for j in range(E):
        manifold[:, j] = x[j:j + n_rows]

    return manifold


def embed_dataframe(series: Union[Sequence[float], np.ndarray, pd.Series],
                    E: int,
                    name: str = 'x') -> pd.DataFrame:
    """
    Embedding as a labelled dataframe, for display and plotting.

    Columns are named ``x(t)``, ``x(t+1)``, ... and the index is the
    starting position of each window.
    """
    manifold = embed(series, E)
    columns = [f'{name}(t)'] + [f'{name}(t+{j})' for j in range(1, E)]
    return pd.DataFrame(manifold, columns=columns)
