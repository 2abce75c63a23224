"""
Cross-validation against pyEDM's CCM.

pyEDM draws random libraries for every library size, so its curves are
comparable to scan_convergence(..., random_libs=True) rather than to the
deterministic prefix scan. A forward lag (tau=1) with Tp=0 makes pyEDM's
row t the window (x[t], x[t+1], ..., x[t+E-1]) estimating y[t], the same
rows and alignment as embed. Used for validation only; nothing in the
core depends on it.
"""

import numpy as np
import pandas as pd
from typing import Optional, Sequence

try:
    from pyEDM import CCM
    PYEDM_AVAILABLE = True
except ImportError:
    PYEDM_AVAILABLE = False


def reference_convergence(source,
                          target,
                          E: int,
                          lib_sizes: Sequence[int],
                          sample: int = 100,
                          seed: Optional[int] = None,
                          verbose: bool = False) -> pd.DataFrame:
    """
    Convergence curve of `source` xmap `target` computed by pyEDM.

    Parameters
    ----------
    source : array-like
        Library variable (shadow manifold)
    target : array-like
        Variable to estimate, same length as source
    E : int
        Embedding dimension
    lib_sizes : sequence of int
        Library sizes
    sample : int, default 100
        Random libraries per size
    seed : int or None
        pyEDM random seed
    verbose : bool, default False
        Print the call

    Returns
    -------
    pd.DataFrame
        Columns 'LibSize' and 'rho', same layout as scan_convergence
    """
    if not PYEDM_AVAILABLE:
        raise ImportError("pyEDM is required for reference comparison. Install with: pip install pyEDM")

    source = np.asarray(source, dtype=float).ravel()
    target = np.asarray(target, dtype=float).ravel()
    if len(source) != len(target):
        raise ValueError(f"Series must have equal length, got {len(source)} and {len(target)}")

    df = pd.DataFrame({
        'time': np.arange(1, len(source) + 1),
        'source': source,
        'target': target,
    })

    libsizes = ' '.join(str(int(L)) for L in sorted(lib_sizes))

    ccm_kwargs = dict(
        dataFrame=df,
        columns='source',
        target='target',
        libSizes=libsizes,
        sample=sample,
        E=E,
        tau=1,
        Tp=0,
        exclusionRadius=0,
    )
    if seed is not None:
        ccm_kwargs['seed'] = seed

    if verbose:
        print(f"pyEDM CCM: E={E}, libSizes='{libsizes}', sample={sample}")

    result = CCM(**ccm_kwargs)
    lib_means = result['LibMeans'] if isinstance(result, dict) else result

    curve = pd.DataFrame({
        'LibSize': lib_means['LibSize'].astype(int).values,
        'rho': lib_means['source:target'].astype(float).values,
    })

    return curve
