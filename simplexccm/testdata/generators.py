"""
Simulated time series with known causal structure.

Provides the coupled logistic maps of Sugihara et al. (2012), Fig. 3A,
uncoupled noise, exactly periodic series and the tent map used in the
simplex projection walkthrough of Sugihara & May (1990).
"""

import numpy as np
import pandas as pd
from typing import Optional, Sequence, Literal


def make_coupled_logistic(n: int = 5000,
                          rx: float = 3.8,
                          ry: float = 3.5,
                          bxy: float = 0.02,
                          byx: float = 0.1,
                          x0: float = 0.1,
                          y0: float = 0.4) -> pd.DataFrame:
    """
    Two-species coupled logistic difference equations.

    X[t] = X[t-1] * (rx - rx*X[t-1] - bxy*Y[t-1])
    Y[t] = Y[t-1] * (ry - ry*Y[t-1] - byx*X[t-1])

    With the defaults X forces Y more strongly (byx=0.1) than Y forces X
    (bxy=0.02), so Y's shadow manifold recovers X better than X's
    recovers Y.

    Parameters
    ----------
    n : int, default 5000
        Number of time points, including the initial condition
    rx, ry : float
        Growth rates
    bxy : float, default 0.02
        Effect of Y on X
    byx : float, default 0.1
        Effect of X on Y
    x0, y0 : float
        Initial values X[1], Y[1]

    Returns
    -------
    pd.DataFrame
        Columns 'time' (1..n), 'X', 'Y'
    """
    X = np.zeros(n)
    Y = np.zeros(n)
    X[0], Y[0] = x0, y0

    for t in range(1, n):
        X[t] = X[t-1] * (rx - rx * X[t-1] - bxy * Y[t-1])
        Y[t] = Y[t-1] * (ry - ry * Y[t-1] - byx * X[t-1])

    return pd.DataFrame({'time': np.arange(1, n + 1), 'X': X, 'Y': Y})


def make_independent_series(n: int = 5000,
                            distribution: Literal['uniform', 'normal'] = 'uniform',
                            seed: Optional[int] = None) -> pd.DataFrame:
    """
    Two uncoupled white-noise series (no causal link either way).

    Parameters
    ----------
    n : int, default 5000
        Number of time points
    distribution : {'uniform', 'normal'}, default 'uniform'
        Uniform draws on [0, 1) or standard normal draws
    seed : int or None
        Random seed for reproducibility

    Returns
    -------
    pd.DataFrame
        Columns 'time', 'X', 'Y'
    """
    rng = np.random.default_rng(seed)

    if distribution == 'uniform':
        X = rng.random(n)
        Y = rng.random(n)
    elif distribution == 'normal':
        X = rng.standard_normal(n)
        Y = rng.standard_normal(n)
    else:
        raise ValueError(f"Unknown distribution: {distribution}. Must be 'uniform' or 'normal'")

    return pd.DataFrame({'time': np.arange(1, n + 1), 'X': X, 'Y': Y})


def make_periodic_series(n: int,
                         pattern: Sequence[float] = (0.1, 0.5, 0.9, 0.3, 0.7)) -> np.ndarray:
    """
    Exactly periodic series repeating `pattern` (period = len(pattern)).

    Values repeat bit for bit, so analogs one period apart sit at
    distance zero on the shadow manifold.
    """
    pattern = np.asarray(pattern, dtype=float)
    reps = int(np.ceil(n / len(pattern)))
    return np.tile(pattern, reps)[:n]


def make_tent_map_series(n: int = 1000,
                         mu: float = 2.0,
                         seed: Optional[int] = None,
                         difference: bool = True,
                         burn_in: int = 100) -> np.ndarray:
    """
    Chaotic tent map series, optionally first-differenced.

    x[t+1] = mu * x[t]            if x[t] < 0.5
             mu * (1 - x[t])      otherwise

    Exact tent-map iteration with mu=2 collapses to 0 in floating point
    after ~50 steps, so each step is perturbed by a tiny uniform jitter
    and the state is kept inside (0, 1).

    Parameters
    ----------
    n : int, default 1000
        Number of returned points
    mu : float, default 2.0
        Tent height
    seed : int or None
        Random seed for the initial state and jitter
    difference : bool, default True
        Return first differences, as in Sugihara & May (1990)
    burn_in : int, default 100
        Iterations discarded before recording

    Returns
    -------
    np.ndarray, shape (n,)
    """
    rng = np.random.default_rng(seed)
    total = n + burn_in + (1 if difference else 0)

    x = np.empty(total)
    state = rng.random()
    for t in range(total):
        state = mu * state if state < 0.5 else mu * (1 - state)
        state = np.clip(state + 1e-9 * rng.standard_normal(), 1e-12, 1 - 1e-12)
        x[t] = state

    x = x[burn_in:]
    if difference:
        x = np.diff(x)
    return x


def make_test_dataframe(n: int = 5000,
                        seed: Optional[int] = None) -> pd.DataFrame:
    """
    Test dataframe with coupled, uncoupled and periodic scenarios.

    Ground truth:
    - coupled_X -> coupled_Y (strong), coupled_Y -> coupled_X (weak)
    - independent_X, independent_Y: no relationship
    - periodic: deterministic, period 5

    Parameters
    ----------
    n : int, default 5000
        Number of time points
    seed : int or None
        Random seed for the noise scenarios

    Returns
    -------
    pd.DataFrame
    """
    coupled = make_coupled_logistic(n=n)
    independent = make_independent_series(n=n, distribution='normal', seed=seed)

    return pd.DataFrame({
        'time': np.arange(1, n + 1),
        'coupled_X': coupled['X'].values,
        'coupled_Y': coupled['Y'].values,
        'independent_X': independent['X'].values,
        'independent_Y': independent['Y'].values,
        'periodic': make_periodic_series(n),
        'tent': make_tent_map_series(n, seed=seed),
    })
