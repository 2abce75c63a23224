"""
Convergence scanning for convergent cross mapping.

Cross-map skill is evaluated over a geometric schedule of library
lengths. By default libraries are deterministic prefixes of the shadow
manifold; an optional random-library mode draws seeded subsamples
instead. Library lengths are independent of each other and can be
evaluated on a process pool.
"""

import numpy as np
import pandas as pd
import multiprocessing
from tqdm import tqdm
from typing import List, Tuple, Optional, Sequence, Union
from scipy.spatial.distance import cdist

from .embedding import embed
from .neighbors import check_library, rank_neighbors
from .core import cross_map, correlation, simplex_weights
from ..exceptions import InsufficientLibraryError

# (start, stop, step) of the base-2 exponents of the library schedule
DEFAULT_LIB_EXPONENTS = (4, 11, 0.5)


def library_sizes(n: int,
                  E: int,
                  start: float = DEFAULT_LIB_EXPONENTS[0],
                  stop: float = DEFAULT_LIB_EXPONENTS[1],
                  step: float = DEFAULT_LIB_EXPONENTS[2]) -> List[int]:
    """
    Geometric library schedule L = floor(2**s), s = start, start+step, ..., stop.

    Only values with L < n - E are kept, leaving headroom for the
    embedding offset.

    Parameters
    ----------
    n : int
        Length of the source series
    E : int
        Embedding dimension
    start, stop, step : float
        Exponent range (inclusive of stop)

    Returns
    -------
    list of int
        Distinct library lengths in ascending order

    Examples
    --------
    >>> library_sizes(5000, 3, start=4, stop=6, step=1)
    [16, 32, 64]
    >>> library_sizes(20, 3)
    [16]
    """
    exponents = np.arange(start, stop + step / 2, step)
    sizes = np.unique(np.floor(2.0 ** exponents).astype(int))
    return [int(L) for L in sizes if L < n - E]


def _prefix_point(manifold: np.ndarray,
                  target: np.ndarray,
                  L: int) -> Tuple[float, float]:
    """Cross-map skill for the prefix library of length L."""
    E = manifold.shape[1]
    predictions = cross_map(manifold, target, L)
    return correlation(target[:L - E], predictions), np.nan


def _random_point(manifold: np.ndarray,
                  target: np.ndarray,
                  L: int,
                  sample: int,
                  seed_seq: np.random.SeedSequence) -> Tuple[float, float]:
    """Mean and std of cross-map skill over random libraries of length L."""
    n_rows, E = manifold.shape
    check_library(n_rows, L, E)

    rng = np.random.default_rng(seed_seq)
    queries = np.arange(n_rows)
    rhos = np.empty(sample)

    for s in range(sample):
        lib = np.sort(rng.choice(n_rows, size=L, replace=False))
        distances = cdist(manifold, manifold[lib], metric='euclidean')
        indices, dists = rank_neighbors(distances, queries, E + 1, library_indices=lib)
        predictions = np.sum(simplex_weights(dists) * target[indices], axis=1)
        rhos[s] = correlation(target[:n_rows], predictions)

    return float(np.nanmean(rhos)), float(np.nanstd(rhos))


def _scan_point_wrapper(args):
    """
    Evaluate one library length.

    Module level so it can be pickled for multiprocessing.

    Parameters
    ----------
    args : tuple
        (L, manifold, target, random_libs, sample, seed_seq)

    Returns
    -------
    tuple
        (L, rho, rho_std, error) where error is the message of an
        InsufficientLibraryError, or None
    """
    L, manifold, target, random_libs, sample, seed_seq = args

    try:
        if random_libs:
            rho, rho_std = _random_point(manifold, target, L, sample, seed_seq)
        else:
            rho, rho_std = _prefix_point(manifold, target, L)
    except InsufficientLibraryError as e:
        return L, np.nan, np.nan, str(e)

    return L, rho, rho_std, None


def scan_convergence(source: Union[Sequence[float], np.ndarray, pd.Series],
                     target: Union[Sequence[float], np.ndarray, pd.Series],
                     E: int,
                     lib_sizes: Optional[Sequence[int]] = None,
                     random_libs: bool = False,
                     sample: int = 100,
                     seed: Optional[int] = None,
                     n_jobs: int = 1,
                     verbose: bool = False) -> pd.DataFrame:
    """
    Cross-map skill of target from the shadow manifold of source vs. library length.

    For each library length L (ascending), the first L manifold rows form
    the library, rows 0..L-E-1 are estimated from their E+1 nearest
    non-self neighbors, and the estimates are correlated with
    target[0:L-E].

    Parameters
    ----------
    source : array-like
        Library variable; its shadow manifold is searched
    target : array-like
        Variable to estimate, aligned with source (same time indices).
        For simplex projection pass :func:`forecast_target` of source.
    E : int
        Embedding dimension
    lib_sizes : sequence of int or None
        Library lengths. Defaults to :func:`library_sizes`. Values with
        L >= len(source) - E or beyond the target length are dropped.
    random_libs : bool, default False
        Use `sample` random libraries of L rows per length instead of the
        prefix. Every manifold row is then a query.
    sample : int, default 100
        Random libraries per length (random_libs only)
    seed : int or None
        Seed for random libraries; same seed gives identical output
    n_jobs : int, default 1
        Worker processes; 1 runs sequentially, -1 uses all CPUs
    verbose : bool, default False
        Print progress and skipped library lengths

    Returns
    -------
    pd.DataFrame
        Columns 'LibSize' and 'rho' (plus 'rho_std' for random
        libraries), ascending in LibSize. Lengths whose library cannot
        supply E+1 neighbors are skipped, so the curve may be shorter
        than the schedule or empty.

    Raises
    ------
    InvalidDimensionError
        If E < 1 or E >= len(source).
    """
    x = np.asarray(source, dtype=float).ravel()
    y = np.asarray(target, dtype=float).ravel()

    manifold = embed(x, E)
    n_rows = min(manifold.shape[0], len(y))
    manifold = manifold[:n_rows]
    y = y[:n_rows]

    if lib_sizes is None:
        lib_sizes = library_sizes(len(x), E)
    lib_sizes = sorted({int(L) for L in lib_sizes if len(x) - E > L and L <= n_rows})

    if random_libs:
        seed_seqs = np.random.SeedSequence(seed).spawn(len(lib_sizes))
    else:
        seed_seqs = [None] * len(lib_sizes)

    args_list = [
        (L, manifold, y, random_libs, sample, seed_seq)
        for L, seed_seq in zip(lib_sizes, seed_seqs)
    ]

    if verbose:
        mode = f"{sample} random libraries" if random_libs else "prefix libraries"
        print(f"Scanning {len(lib_sizes)} library sizes (E={E}, {mode})...")

    if n_jobs == -1:
        n_jobs = multiprocessing.cpu_count()

    if n_jobs is None or n_jobs <= 1 or len(args_list) <= 1:
        results = [
            _scan_point_wrapper(args)
            for args in tqdm(args_list, desc="Library sizes", disable=not verbose)
        ]
    else:
        with multiprocessing.Pool(processes=n_jobs) as pool:
            results = list(tqdm(
                pool.imap_unordered(_scan_point_wrapper, args_list),
                total=len(args_list),
                desc="Library sizes",
                disable=not verbose
            ))

    rows = []
    for L, rho, rho_std, error in sorted(results, key=lambda r: r[0]):
        if error is not None:
            if verbose:
                print(f"  Skipping L={L}: {error}")
            continue
        row = {'LibSize': L, 'rho': rho}
        if random_libs:
            row['rho_std'] = rho_std
        rows.append(row)

    columns = ['LibSize', 'rho', 'rho_std'] if random_libs else ['LibSize', 'rho']
    curve = pd.DataFrame(rows, columns=columns)
    curve['LibSize'] = curve['LibSize'].astype(int)

    return curve


def scan_both_directions(x: Union[Sequence[float], np.ndarray, pd.Series],
                         y: Union[Sequence[float], np.ndarray, pd.Series],
                         E: int,
                         names: Tuple[str, str] = ('X', 'Y'),
                         **scan_kwargs) -> pd.DataFrame:
    """
    Convergence curves for both cross-mapping directions.

    Parameters
    ----------
    x, y : array-like
        Two series of equal length sampled at the same times
    E : int
        Embedding dimension
    names : tuple of str, default ('X', 'Y')
        Variable names used in the column labels
    **scan_kwargs
        Passed to :func:`scan_convergence`

    Returns
    -------
    pd.DataFrame
        Columns 'LibSize', '{x}:{y}' and '{y}:{x}', where 'a:b' is the
        skill of a's shadow manifold at estimating b. A library length
        skipped in one direction only shows NaN there.
    """
    x = np.asarray(x, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()
    if len(x) != len(y):
        raise ValueError(f"Series must have equal length, got {len(x)} and {len(y)}")

    x_name, y_name = names

    xy = scan_convergence(x, y, E, **scan_kwargs)
    yx = scan_convergence(y, x, E, **scan_kwargs)

    xy = xy[['LibSize', 'rho']].rename(columns={'rho': f'{x_name}:{y_name}'})
    yx = yx[['LibSize', 'rho']].rename(columns={'rho': f'{y_name}:{x_name}'})

    both = pd.merge(xy, yx, on='LibSize', how='outer').sort_values('LibSize')
    return both.reset_index(drop=True)
