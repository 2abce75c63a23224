"""
Scoped CCM analysis session.

Bundles the two series, the embedding dimension and the library schedule
so each analysis step receives them explicitly.
"""

import numpy as np
import pandas as pd
from typing import Optional, Sequence, Tuple, Dict

from .embedding import embed, _check_dimension
from .workflow import library_sizes, scan_convergence, scan_both_directions


class CCMSession:
    """
    Configuration for a pairwise convergent cross mapping analysis.

    Parameters
    ----------
    x, y : array-like
        Two series of equal length sampled at the same times
    E : int, default 3
        Embedding dimension
    lib_sizes : sequence of int or None
        Library schedule. Defaults to :func:`library_sizes` for the
        series length and E.
    names : tuple of str, default ('X', 'Y')
        Variable names
    n_jobs : int, default 1
        Worker processes per scan
    verbose : bool, default False
        Print progress

    Examples
    --------
    >>> from simplexccm.testdata import make_coupled_logistic
    >>> df = make_coupled_logistic(n=500)
    >>> session = CCMSession(df['X'], df['Y'], E=3)
    >>> curves = session.run()
    >>> list(curves.columns)
    ['LibSize', 'X:Y', 'Y:X']
    """

    def __init__(self,
                 x,
                 y,
                 E: int = 3,
                 lib_sizes: Optional[Sequence[int]] = None,
                 names: Tuple[str, str] = ('X', 'Y'),
                 n_jobs: int = 1,
                 verbose: bool = False):
        x = np.asarray(x, dtype=float).ravel()
        y = np.asarray(y, dtype=float).ravel()
        if len(x) != len(y):
            raise ValueError(f"Series must have equal length, got {len(x)} and {len(y)}")
        if names[0] == names[1]:
            raise ValueError("Variable names must differ")

        self.series = {names[0]: x, names[1]: y}
        self.names = tuple(names)
        self.E = _check_dimension(len(x), E)

        if lib_sizes is None:
            lib_sizes = library_sizes(len(x), self.E)
        self.lib_sizes = [int(L) for L in lib_sizes]

        self.n_jobs = n_jobs
        self.verbose = verbose

    def __repr__(self):
        return (f"CCMSession(names={self.names}, n={len(self)}, E={self.E}, "
                f"lib_sizes={self.lib_sizes})")

    def __len__(self):
        return len(self.series[self.names[0]])

    def manifold(self, name: str) -> np.ndarray:
        """Shadow manifold of one variable."""
        return embed(self._get(name), self.E)

    def xmap(self, source: str) -> pd.DataFrame:
        """
        Convergence curve for the shadow manifold of `source` estimating the other variable.

        Returns
        -------
        pd.DataFrame
            Columns 'LibSize' and 'rho'
        """
        target = self._other(source)
        if self.verbose:
            print(f"{source} xmap {target}")

        return scan_convergence(
            self._get(source), self._get(target), self.E,
            lib_sizes=self.lib_sizes,
            n_jobs=self.n_jobs,
            verbose=self.verbose
        )

    def run(self) -> pd.DataFrame:
        """
        Convergence curves for both directions.

        Returns
        -------
        pd.DataFrame
            Columns 'LibSize', 'X:Y', 'Y:X' (with the session's names)
        """
        x, y = (self.series[name] for name in self.names)
        return scan_both_directions(
            x, y, self.E,
            names=self.names,
            lib_sizes=self.lib_sizes,
            n_jobs=self.n_jobs,
            verbose=self.verbose
        )

    def to_dict(self) -> Dict:
        """Session parameters, without the data."""
        return {
            'names': self.names,
            'n': len(self),
            'E': self.E,
            'lib_sizes': list(self.lib_sizes),
        }

    def _get(self, name: str) -> np.ndarray:
        if name not in self.series:
            raise ValueError(f"Unknown variable '{name}'. Must be one of {self.names}")
        return self.series[name]

    def _other(self, name: str) -> str:
        self._get(name)
        a, b = self.names
        return b if name == a else a
