"""
Core simplex / cross-mapping kernel.

Neighbors found on a shadow manifold are combined with exponentially
decaying weights to estimate either a second series at the same time
indices (cross mapping) or the series itself some steps ahead (simplex
projection).
"""

import numpy as np
import pandas as pd
from typing import Union, Sequence, Optional

from .embedding import embed, _check_dimension
from .neighbors import check_library, distance_matrix, rank_neighbors


def simplex_weights(distances: np.ndarray) -> np.ndarray:
    """
    Exponential simplex weights, normalized to sum to 1.

    Weight of neighbor k is exp(-d_k / d_1), d_1 being the nearest
    neighbor distance. When d_1 == 0 every neighbor at distance 0 shares
    the weight equally and all others get 0.

    Parameters
    ----------
    distances : np.ndarray, shape (k,) or (n_queries, k)
        Neighbor distances sorted nearest first along the last axis

    Returns
    -------
    np.ndarray
        Weights with the same shape as ``distances``
    """
    d = np.asarray(distances, dtype=float)
    single = d.ndim == 1
    d = np.atleast_2d(d)

    d1 = d[:, :1]
    degenerate = d1[:, 0] == 0

    u = np.empty_like(d)
    regular = ~degenerate
    if np.any(regular):
        u[regular] = np.exp(-d[regular] / d1[regular])
    if np.any(degenerate):
        # Winner-take-all over exact duplicates
        u[degenerate] = (d[degenerate] == 0).astype(float)

    w = u / u.sum(axis=1, keepdims=True)
    return w[0] if single else w


def weighted_estimate(indices: np.ndarray,
                      distances: np.ndarray,
                      target: Union[Sequence[float], np.ndarray]) -> float:
    """
    Weighted analog estimate of target from a ranked neighbor set.

    Parameters
    ----------
    indices : np.ndarray, shape (E+1,)
        Neighbor row indices, nearest first
    distances : np.ndarray, shape (E+1,)
        Neighbor distances, nearest first
    target : array-like
        Values to combine, indexed by manifold row

    Returns
    -------
    float
        sum_k w_k * target[indices[k]]
    """
    target = np.asarray(target, dtype=float)
    w = simplex_weights(distances)
    return float(np.sum(w * target[np.asarray(indices, dtype=int)]))


def correlation(observed: np.ndarray, predicted: np.ndarray) -> float:
    """Pearson correlation, NaN when either vector is constant or too short."""
    observed = np.asarray(observed, dtype=float)
    predicted = np.asarray(predicted, dtype=float)

    if len(observed) < 2 or np.std(observed) == 0 or np.std(predicted) == 0:
        return np.nan

    return float(np.corrcoef(observed, predicted)[0, 1])


def cross_map(manifold: np.ndarray,
              target: Union[Sequence[float], np.ndarray],
              L: int,
              query_indices: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Estimate target at query rows from neighbors in the first L rows.

    Parameters
    ----------
    manifold : np.ndarray, shape (n_rows, E)
        Shadow manifold of the library variable
    target : array-like
        Variable to estimate, aligned with manifold rows (length >= L)
    L : int
        Library length
    query_indices : np.ndarray or None
        Rows to estimate, all within 0..L-1. Defaults to 0..L-E-1.

    Returns
    -------
    np.ndarray, shape (n_queries,)
        Estimates of target at the query rows

    Raises
    ------
    InsufficientLibraryError
        If the library cannot supply E+1 non-self neighbors.
    """
    manifold = np.asarray(manifold, dtype=float)
    target = np.asarray(target, dtype=float)
    E = manifold.shape[1]

    check_library(manifold.shape[0], L, E)
    if len(target) < L:
        raise ValueError(f"Target has {len(target)} values, library needs {L}")

    if query_indices is None:
        query_indices = np.arange(L - E)
    else:
        query_indices = np.asarray(query_indices, dtype=int)
        if np.any((query_indices < 0) | (query_indices >= L)):
            raise ValueError(f"Query rows must lie within the library 0..{L - 1}")

    distances = distance_matrix(manifold, L)[query_indices]
    indices, dists = rank_neighbors(distances, query_indices, E + 1)

    w = simplex_weights(dists)
    return np.sum(w * target[indices], axis=1)


def forecast_target(series: Union[Sequence[float], np.ndarray, pd.Series],
                    E: int,
                    Tp: int = 1) -> np.ndarray:
    """
    Future values aligned with manifold rows for simplex projection.

    Element i is series[i + E - 1 + Tp], the value Tp steps after the end
    of manifold row i. The result can be passed as the target of
    :func:`cross_map` or :func:`scan_convergence` with the series as source.
    """
    x = np.asarray(series, dtype=float).ravel()
    E = _check_dimension(len(x), E)

    if int(Tp) != Tp or Tp < 1:
        raise ValueError(f"Prediction horizon Tp must be a positive integer, got {Tp}")
    Tp = int(Tp)

    n_forecast = len(x) - E - Tp + 1
    if n_forecast < 1:
        raise ValueError(f"Series of length {len(x)} too short for E={E}, Tp={Tp}")

    return x[E - 1 + Tp:]


def simplex_projection(series: Union[Sequence[float], np.ndarray, pd.Series],
                       E: int,
                       Tp: int = 1,
                       lib_size: Optional[int] = None) -> pd.DataFrame:
    """
    Leave-one-out simplex projection forecast of a series from its own past.

    Every library row is forecast Tp steps ahead from its E+1 nearest
    neighbors among the other library rows.

    Parameters
    ----------
    series : array-like
        Scalar time series
    E : int
        Embedding dimension
    Tp : int, default 1
        Prediction horizon (steps ahead)
    lib_size : int or None
        Number of manifold rows used as library and queries. Defaults to
        every row that has a value Tp steps ahead.

    Returns
    -------
    pd.DataFrame
        Columns: 'time' (position of the forecast value), 'Observations',
        'Predictions'
    """
    future = forecast_target(series, E, Tp)
    manifold = embed(series, E)[:len(future)]

    L = len(future) if lib_size is None else int(lib_size)
    check_library(manifold.shape[0], L, E)

    queries = np.arange(L)
    predictions = cross_map(manifold, future, L, query_indices=queries)

    return pd.DataFrame({
        'time': queries + E - 1 + Tp,
        'Observations': future[:L],
        'Predictions': predictions,
    })
