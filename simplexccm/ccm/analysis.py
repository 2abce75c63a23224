"""
Analysis of convergence curves.

Saturating-curve fits, convergence checks, comparison of the two
mapping directions and comparison against a reference implementation.
"""

import numpy as np
import pandas as pd
from typing import Optional, Dict
from scipy.optimize import curve_fit


def saturating_curve(L: np.ndarray, a: float, K: float, b: float) -> np.ndarray:
    """
    Saturating curve model for CCM convergence.

    Model: y = a*L / (K + L) + b

    Parameters
    ----------
    L : np.ndarray
        Library sizes
    a : float
        Amplitude parameter (asymptotic increase)
    K : float
        Half-saturation constant (library size at half of asymptote)
    b : float
        Baseline/offset parameter

    Returns
    -------
    np.ndarray
        Predicted values
    """
    return a * L / (K + L) + b


def fit_ccm_curve(curve: pd.DataFrame,
                  rho_col: str = 'rho',
                  lib_col: str = 'LibSize') -> Optional[Dict[str, float]]:
    """
    Fit the saturating model to a convergence curve from scan_convergence.

    The starting guess takes the rise between the smallest and largest
    library as the amplitude and the first library length reaching half of
    that rise as K. K is constrained to be positive.

    Parameters
    ----------
    curve : pd.DataFrame
        Library size and rho columns, e.g. scan_convergence output or one
        direction of scan_both_directions
    rho_col : str, default 'rho'
        Skill column
    lib_col : str, default 'LibSize'
        Library size column

    Returns
    -------
    dict or None
        - 'a', 'K', 'b': curve parameters
        - 'R2': R-squared of the fit
        - 'Lmax': largest library size
        - 'slope_tail': slope of the fitted curve at Lmax (a*K / (K + Lmax)**2)
        - 'rho_conv': mean observed rho over the last third of the curve
        - 'n_points': library sizes used
        None if fewer than 3 finite points or the fit fails.
    """
    points = curve[[lib_col, rho_col]].dropna().sort_values(lib_col)
    if len(points) < 3:
        return None

    L = points[lib_col].to_numpy(float)
    rho = points[rho_col].to_numpy(float)
    Lmax = float(L[-1])

    rise = rho[-1] - rho[0]
    half_L = L[np.argmax(rho >= rho[0] + rise / 2)]
    p0 = [max(rise, 1e-6), float(half_L), float(rho[0])]

    try:
        popt, _ = curve_fit(saturating_curve, L, rho, p0=p0,
                            bounds=([-np.inf, 0.0, -np.inf], np.inf), maxfev=10000)
    except (RuntimeError, ValueError):
        return None

    a, K, b = map(float, popt)
    ss_res = np.sum((rho - saturating_curve(L, a, K, b))**2)
    ss_tot = np.sum((rho - rho.mean())**2)

    tail = rho[-max(1, int(np.ceil(len(rho) / 3))):]

    return {
        'a': a,
        'K': K,
        'b': b,
        'R2': float(1 - ss_res / ss_tot) if ss_tot > 0 else 0.0,
        'Lmax': Lmax,
        'slope_tail': a * K / (K + Lmax)**2,
        'rho_conv': float(tail.mean()),
        'n_points': len(points),
    }


def has_converged(fit: Optional[Dict[str, float]],
                  r2_threshold: float = 0.7,
                  slope_threshold: float = 1e-3,
                  k_threshold_ratio: float = 0.8) -> bool:
    """
    Test whether a convergence curve has converged based on its fit.

    Criteria:
    - Positive amplitude (a > 0)
    - Good fit (R² > r2_threshold)
    - Positive convergence rho
    - Flat tail (slope < slope_threshold)
    - K < k_threshold_ratio * Lmax (saturates before the end)
    """
    if fit is None:
        return False

    return bool(
        fit['a'] > 0 and
        fit['R2'] > r2_threshold and
        fit['rho_conv'] > 0 and
        fit['slope_tail'] < slope_threshold and
        fit['K'] < k_threshold_ratio * fit['Lmax']
    )


def compare_directions(curves: pd.DataFrame,
                       lib_col: str = 'LibSize',
                       print_summary: bool = False) -> pd.DataFrame:
    """
    Summarize each cross-mapping direction of a two-way convergence table.

    Parameters
    ----------
    curves : pd.DataFrame
        Output of scan_both_directions or CCMSession.run: a library size
        column plus one rho column per direction ('a:b')
    lib_col : str, default 'LibSize'
        Library size column
    print_summary : bool, default False
        Print a formatted table

    Returns
    -------
    pd.DataFrame
        One row per direction with columns:
        - 'direction': column name ('a:b', a's manifold estimates b)
        - 'rho_first', 'rho_last': skill at smallest / largest library
        - 'rho_gain': rho_last - rho_first
        - 'rho_mean': mean skill over the curve
        - 'trend': slope of rho against log2(L)
        - 'converged': has_converged on the saturating fit
        sorted by rho_last, best first
    """
    rows = []

    for col in curves.columns:
        if col == lib_col:
            continue

        sub = curves[[lib_col, col]].dropna()
        L = sub[lib_col].to_numpy(float)
        rho = sub[col].to_numpy(float)

        if len(rho) == 0:
            continue

        trend = np.polyfit(np.log2(L), rho, 1)[0] if len(rho) >= 2 else np.nan

        rows.append({
            'direction': col,
            'rho_first': rho[0],
            'rho_last': rho[-1],
            'rho_gain': rho[-1] - rho[0],
            'rho_mean': float(np.mean(rho)),
            'trend': trend,
            'converged': has_converged(fit_ccm_curve(sub, rho_col=col, lib_col=lib_col)),
        })

    summary = pd.DataFrame(rows, columns=['direction', 'rho_first', 'rho_last', 'rho_gain',
                                          'rho_mean', 'trend', 'converged'])
    summary = summary.sort_values('rho_last', ascending=False).reset_index(drop=True)

    if print_summary:
        print("\n" + "="*70)
        print("CONVERGENCE SUMMARY")
        print("="*70)
        for _, row in summary.iterrows():
            print(f"{row['direction']:>12}:  ρ {row['rho_first']:.3f} -> {row['rho_last']:.3f}"
                  f"  (trend {row['trend']:+.3f}/doubling, converged={row['converged']})")
        print("="*70 + "\n")

    return summary


def compare_to_reference(curve: pd.DataFrame,
                         reference: pd.DataFrame,
                         rho_col: str = 'rho',
                         lib_col: str = 'LibSize') -> Dict:
    """
    Compare a convergence curve with a reference implementation's output.

    Parameters
    ----------
    curve : pd.DataFrame
        Output of scan_convergence
    reference : pd.DataFrame
        Reference curve with the same library size and rho columns
        (e.g. from reference.reference_convergence)
    rho_col, lib_col : str
        Column names in both frames

    Returns
    -------
    dict
        - 'table': merged frame with 'rho', 'rho_reference' and 'difference'
        - 'max_abs_diff': largest absolute difference
        - 'mean_abs_diff': mean absolute difference
        - 'correlation': correlation of the two curves (NaN if < 3 sizes)
    """
    table = pd.merge(
        curve[[lib_col, rho_col]],
        reference[[lib_col, rho_col]].rename(columns={rho_col: f'{rho_col}_reference'}),
        on=lib_col,
        how='inner'
    )
    table['difference'] = table[rho_col] - table[f'{rho_col}_reference']

    abs_diff = table['difference'].abs()
    if len(table) >= 3:
        agreement = table[[rho_col, f'{rho_col}_reference']].corr().iloc[0, 1]
    else:
        agreement = np.nan

    return {
        'table': table,
        'max_abs_diff': float(abs_diff.max()) if len(table) else np.nan,
        'mean_abs_diff': float(abs_diff.mean()) if len(table) else np.nan,
        'correlation': agreement,
    }
