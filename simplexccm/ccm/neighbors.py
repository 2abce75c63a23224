"""
Nearest-neighbor search on an embedded manifold.

The library is a prefix of the manifold (rows 0..L-1). Distances are
Euclidean, ranking uses a stable sort so ties are broken by row index
ascending, and the query row itself is always excluded from its own
neighbor set.
"""

import numpy as np
from typing import Tuple, Optional
from scipy.spatial.distance import cdist

from ..exceptions import InsufficientLibraryError


def check_library(n_rows: int, L: int, E: int) -> None:
    """
    Validate a library length against the manifold size and E.

    Raises
    ------
    ValueError
        If L exceeds the number of manifold rows.
    InsufficientLibraryError
        If the library cannot supply E+1 non-self neighbors (L - 1 < E + 1).
    """
    if L > n_rows:
        raise ValueError(f"Library length L={L} exceeds the {n_rows} manifold rows")
    if L - 1 < E + 1:
        raise InsufficientLibraryError(
            f"Library length L={L} cannot supply E+1={E + 1} neighbors besides the query"
        )


def distance_matrix(manifold: np.ndarray, L: int) -> np.ndarray:
    """
    Pairwise Euclidean distances between the first L manifold rows.

    Returns
    -------
    np.ndarray, shape (L, L)
        Symmetric matrix with a zero diagonal.
    """
    library = np.asarray(manifold, dtype=float)[:L]
    return cdist(library, library, metric='euclidean')


def rank_neighbors(distances: np.ndarray,
                   query_indices: np.ndarray,
                   k: int,
                   library_indices: Optional[np.ndarray] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Rank the k nearest library rows for several queries at once.

    Parameters
    ----------
    distances : np.ndarray, shape (n_queries, n_library)
        Distance from each query to each library row
    query_indices : np.ndarray, shape (n_queries,)
        Manifold row index of each query, used to drop the self-match
    k : int
        Number of neighbors to keep
    library_indices : np.ndarray or None
        Manifold row index of each library column. Defaults to
        0..n_library-1 (a prefix library).

    Returns
    -------
    indices : np.ndarray, shape (n_queries, k)
        Manifold row indices of the neighbors, nearest first
    dists : np.ndarray, shape (n_queries, k)
        Corresponding distances (non-decreasing along each row)
    """
    distances = np.array(distances, dtype=float, copy=True)
    query_indices = np.asarray(query_indices, dtype=int)
    n_library = distances.shape[1]

    if library_indices is None:
        library_indices = np.arange(n_library)
    else:
        library_indices = np.asarray(library_indices, dtype=int)

    # Self-match is removed by index, not by rank, so an exact duplicate
    # of the query stays in the neighbor set at distance 0
    is_self = library_indices[None, :] == query_indices[:, None]
    distances[is_self] = np.inf

    order = np.argsort(distances, axis=1, kind='stable')[:, :k]
    dists = np.take_along_axis(distances, order, axis=1)

    return library_indices[order], dists


def find_neighbors(manifold: np.ndarray,
                   L: int,
                   i: int,
                   E: int,
                   distances: Optional[np.ndarray] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Find the E+1 nearest neighbors of manifold row i within rows 0..L-1.

    Parameters
    ----------
    manifold : np.ndarray, shape (n_rows, E)
        Embedded manifold from :func:`embed`
    L : int
        Library length (prefix of the manifold visible to the search)
    i : int
        Query row index, 0 <= i < L
    E : int
        Embedding dimension
    distances : np.ndarray or None
        Precomputed L x L distance matrix; built if not given

    Returns
    -------
    indices : np.ndarray, shape (E+1,)
        Neighbor row indices, nearest first, never equal to i
    dists : np.ndarray, shape (E+1,)
        Neighbor distances, non-decreasing

    Raises
    ------
    InsufficientLibraryError
        If L - 1 < E + 1.
    """
    manifold = np.asarray(manifold, dtype=float)
    check_library(manifold.shape[0], L, E)

    if not 0 <= i < L:
        raise ValueError(f"Query row {i} is outside the library 0..{L - 1}")

    if distances is None:
        row = cdist(manifold[i:i + 1], manifold[:L], metric='euclidean')
    else:
        row = np.asarray(distances)[i:i + 1, :L]

    indices, dists = rank_neighbors(row, np.array([i]), E + 1)
    return indices[0], dists[0]
