"""
Parameter selection by simplex projection skill.

1. Find E: forecast the series one step ahead for each candidate E and
   choose the smallest E within n_std of the best skill.
2. Forecast horizon: skill vs. Tp for a fixed E. For chaotic dynamics
   skill decays with Tp (Sugihara & May 1990); for noise it is flat.
"""

import numpy as np
import pandas as pd
from typing import Tuple, Iterable, Optional
from tqdm import tqdm

from .core import simplex_projection, correlation


def _simplex_rho(series: np.ndarray, E: int, Tp: int, lib_size: Optional[int]) -> float:
    """Skill of one simplex projection, NaN if the parameters do not fit the series."""
    try:
        forecast = simplex_projection(series, E, Tp=Tp, lib_size=lib_size)
    except ValueError:
        # Includes InvalidDimensionError and InsufficientLibraryError
        return np.nan
    return correlation(forecast['Observations'], forecast['Predictions'])


def find_optimal_E(series,
                   E_range: Iterable[int] = range(1, 11),
                   Tp: int = 1,
                   lib_size: Optional[int] = None,
                   n_std: float = 1.0,
                   verbose: bool = True) -> Tuple[int, pd.DataFrame]:
    """
    Find the embedding dimension that best unfolds the attractor.

    Choose smallest E within n_std of maximum simplex skill.

    Parameters
    ----------
    series : array-like
        Scalar time series
    E_range : iterable of int, default range(1, 11)
        Embedding dimensions to test
    Tp : int, default 1
        Prediction horizon
    lib_size : int or None
        Library rows for each forecast (default: all available)
    n_std : float, default 1.0
        Number of standard deviations below max for threshold
    verbose : bool, default True
        Print selection details

    Returns
    -------
    E_optimal : int
        Optimal embedding dimension
    E_df : pd.DataFrame
        Columns 'E' and 'rho' for all E values tested
    """
    series = np.asarray(series, dtype=float).ravel()

    E_results = [
        {'E': int(E), 'rho': _simplex_rho(series, int(E), Tp, lib_size)}
        for E in tqdm(list(E_range), desc="E", disable=not verbose)
    ]
    E_df = pd.DataFrame(E_results, columns=['E', 'rho'])

    E_df_valid = E_df[~E_df['rho'].isna()]

    if len(E_df_valid) == 0:
        raise ValueError("No embedding dimension could be evaluated on this series")

    max_rho = E_df_valid['rho'].max()
    std_rho = E_df_valid['rho'].std() if len(E_df_valid) > 1 else 0.0

    # Threshold: within n standard deviations of max
    threshold = max_rho - n_std * std_rho

    candidates = E_df_valid[E_df_valid['rho'] >= threshold]
    E_optimal = int(candidates['E'].min())
    optimal_rho = candidates[candidates['E'] == E_optimal]['rho'].iloc[0]

    if verbose:
        print(f"Found E = {E_optimal} with ρ = {optimal_rho:.3f}")
        print(f"  Max ρ = {max_rho:.3f}, threshold = {threshold:.3f} ({n_std}σ below max)")

    return E_optimal, E_df


def forecast_skill_by_horizon(series,
                              E: int,
                              Tp_range: Iterable[int] = range(1, 11),
                              lib_size: Optional[int] = None,
                              verbose: bool = True) -> Tuple[int, pd.DataFrame]:
    """
    Simplex projection skill as a function of prediction horizon.

    Parameters
    ----------
    series : array-like
        Scalar time series
    E : int
        Embedding dimension (e.g. from find_optimal_E)
    Tp_range : iterable of int, default range(1, 11)
        Prediction horizons to test
    lib_size : int or None
        Library rows for each forecast (default: all available)
    verbose : bool, default True
        Print the best horizon

    Returns
    -------
    Tp_best : int
        Horizon with the highest skill
    Tp_df : pd.DataFrame
        Columns 'Tp' and 'rho'
    """
    series = np.asarray(series, dtype=float).ravel()

    Tp_results = [
        {'Tp': int(Tp), 'rho': _simplex_rho(series, E, int(Tp), lib_size)}
        for Tp in tqdm(list(Tp_range), desc="Tp", disable=not verbose)
    ]
    Tp_df = pd.DataFrame(Tp_results, columns=['Tp', 'rho'])

    Tp_df_valid = Tp_df[~Tp_df['rho'].isna()]
    if len(Tp_df_valid) == 0:
        raise ValueError("No prediction horizon could be evaluated on this series")

    best = Tp_df_valid.loc[Tp_df_valid['rho'].idxmax()]
    Tp_best = int(best['Tp'])

    if verbose:
        print(f"Best Tp = {Tp_best} with ρ = {best['rho']:.3f}")

    return Tp_best, Tp_df
