"""
Simplex Projection Example

Walkthrough of Sugihara & May (1990) on the first-differenced tent map:
choose the embedding dimension by forecast skill, then show how skill
decays with the prediction horizon, the signature of chaos.
"""

import matplotlib.pyplot as plt

from simplexccm.testdata import make_tent_map_series
from simplexccm.ccm import (
    find_optimal_E,
    forecast_skill_by_horizon,
    simplex_projection,
)


def main():
    # ============================================================
    # 1. SIMULATE DATA
    # ============================================================
    print("Simulating tent map...")

    x = make_tent_map_series(n=1000, seed=1)
    print(f"Series length: {len(x)}")

    # ============================================================
    # 2. EMBEDDING DIMENSION
    # ============================================================
    print("\nSelecting embedding dimension...")

    E, E_df = find_optimal_E(x, E_range=range(1, 11), lib_size=500)
    print(E_df.to_string(index=False))

    # ============================================================
    # 3. FORECAST SKILL VS HORIZON
    # ============================================================
    print("\nForecast skill by horizon...")

    Tp_best, Tp_df = forecast_skill_by_horizon(x, E=E, Tp_range=range(1, 11), lib_size=500)
    print(Tp_df.to_string(index=False))

    predictions = simplex_projection(x, E=E, Tp=1, lib_size=500)

    # ============================================================
    # 4. PLOT
    # ============================================================
    fig, axes = plt.subplots(1, 3, figsize=(15, 4))

    axes[0].plot(E_df['E'], E_df['rho'], 'o-')
    axes[0].axvline(E, color='red', linestyle='--', alpha=0.7)
    axes[0].set_xlabel('Embedding dimension E')
    axes[0].set_ylabel('Forecast skill ρ')
    axes[0].set_title('Skill vs E (Tp=1)')

    axes[1].plot(Tp_df['Tp'], Tp_df['rho'], 'o-')
    axes[1].set_xlabel('Prediction horizon Tp')
    axes[1].set_ylabel('Forecast skill ρ')
    axes[1].set_title(f'Skill vs Tp (E={E})')

    axes[2].scatter(predictions['Observations'], predictions['Predictions'], s=8, alpha=0.5)
    axes[2].set_xlabel('Observed')
    axes[2].set_ylabel('Predicted')
    axes[2].set_title('One-step forecasts')

    for ax in axes:
        ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig('examples/simplex_projection.png', dpi=150)
    print("Plot saved to: examples/simplex_projection.png")

    print("\n" + "="*60)
    print(f"E = {E}, best horizon Tp = {Tp_best}")
    print("="*60)


if __name__ == "__main__":
    main()
