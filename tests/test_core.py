"""
Tests for simplex weighting, weighted estimates and simplex projection.
"""

import numpy as np
import pytest

from simplexccm.ccm import (
    embed,
    simplex_weights,
    weighted_estimate,
    correlation,
    cross_map,
    forecast_target,
    simplex_projection,
    scan_convergence,
)
from simplexccm.exceptions import InsufficientLibraryError
from simplexccm.testdata import make_periodic_series, make_coupled_logistic


class TestSimplexWeights:
    """Exponential weighting relative to the nearest neighbor."""

    def test_values(self):
        w = simplex_weights(np.array([1.0, 2.0, 3.0]))
        u = np.exp([-1.0, -2.0, -3.0])
        np.testing.assert_allclose(w, u / u.sum())

    def test_normalized_random(self):
        """Non-negative and summing to 1 for any positive nearest distance."""
        rng = np.random.default_rng(11)
        for _ in range(200):
            k = rng.integers(2, 10)
            d = np.sort(rng.random(k) * 10 + 1e-6)
            w = simplex_weights(d)

            assert np.all(w >= 0)
            assert abs(w.sum() - 1.0) < 1e-9
            assert np.all(np.diff(w) <= 0)

    def test_scale_invariant(self):
        d = np.array([0.5, 0.7, 2.0, 3.5])
        np.testing.assert_allclose(simplex_weights(d), simplex_weights(100 * d))

    def test_exact_duplicate_takes_all(self):
        """Zero nearest distance: winner-take-all, no NaN."""
        w = simplex_weights(np.array([0.0, 0.5, 1.0]))
        assert w.tolist() == [1.0, 0.0, 0.0]

    def test_several_duplicates_share(self):
        w = simplex_weights(np.array([0.0, 0.0, 2.0]))
        assert w.tolist() == [0.5, 0.5, 0.0]

    def test_batched(self):
        d = np.array([[1.0, 2.0, 3.0],
                      [0.0, 1.0, 1.0]])
        w = simplex_weights(d)

        assert w.shape == (2, 3)
        np.testing.assert_allclose(w[0], simplex_weights(d[0]))
        assert w[1].tolist() == [1.0, 0.0, 0.0]
        np.testing.assert_allclose(w.sum(axis=1), [1.0, 1.0])


class TestWeightedEstimate:

    def test_equal_distances_average(self):
        target = np.array([10.0, 20.0, 30.0, 40.0])
        est = weighted_estimate(np.array([2, 0]), np.array([1.0, 1.0]), target)
        assert est == pytest.approx(20.0)

    def test_weighted_sum(self):
        target = np.array([1.0, 2.0, 3.0])
        d = np.array([1.0, 2.0])
        w = simplex_weights(d)
        est = weighted_estimate(np.array([1, 2]), d, target)
        assert est == pytest.approx(w[0] * 2.0 + w[1] * 3.0)

    def test_duplicate_returns_its_target(self):
        target = np.array([5.0, -1.0, 7.0])
        est = weighted_estimate(np.array([2, 1, 0]), np.array([0.0, 0.3, 0.4]), target)
        assert est == 7.0


class TestCorrelation:

    def test_perfect(self):
        x = np.arange(10.0)
        assert correlation(x, 2 * x + 1) == pytest.approx(1.0)

    def test_constant_is_nan(self):
        assert np.isnan(correlation(np.arange(5.0), np.ones(5)))

    def test_too_short_is_nan(self):
        assert np.isnan(correlation([1.0], [2.0]))


class TestCrossMap:

    def test_default_queries(self):
        """Rows 0..L-E-1 are estimated."""
        np.random.seed(2)
        x = np.random.rand(100)
        manifold = embed(x, 3)
        estimates = cross_map(manifold, x, 40)
        assert estimates.shape == (37,)

    def test_matches_single_query_kernel(self):
        """Batched estimates equal find_neighbors + weighted_estimate per row."""
        from simplexccm.ccm import find_neighbors

        np.random.seed(5)
        x = np.random.rand(80)
        y = np.random.rand(80)
        manifold = embed(x, 2)
        estimates = cross_map(manifold, y, 30)

        for i in range(28):
            indices, dists = find_neighbors(manifold, 30, i, 2)
            assert estimates[i] == pytest.approx(weighted_estimate(indices, dists, y))

    def test_insufficient_library(self):
        manifold = embed(np.random.rand(50), 3)
        with pytest.raises(InsufficientLibraryError):
            cross_map(manifold, np.zeros(50), 4)

    def test_short_target(self):
        manifold = embed(np.random.rand(50), 3)
        with pytest.raises(ValueError):
            cross_map(manifold, np.zeros(10), 20)


class TestForecastTarget:

    def test_alignment(self):
        """Element i is the value Tp steps after the end of row i."""
        x = np.arange(10.0)
        assert forecast_target(x, 3, 1).tolist() == [3, 4, 5, 6, 7, 8, 9]
        assert forecast_target(x, 3, 2).tolist() == [4, 5, 6, 7, 8, 9]

    def test_one_step_covers_every_row(self):
        x = np.arange(25.0)
        assert len(forecast_target(x, 4, 1)) == embed(x, 4).shape[0]

    @pytest.mark.parametrize("Tp", [0, -1, 1.5])
    def test_invalid_horizon(self, Tp):
        with pytest.raises(ValueError):
            forecast_target(np.arange(10.0), 2, Tp)

    def test_too_short(self):
        with pytest.raises(ValueError):
            forecast_target(np.arange(5.0), 3, 3)


class TestSimplexProjection:
    """Forecasting a series from its own shadow manifold."""

    def test_periodic_series_is_exact(self):
        """Analogs one period apart forecast a periodic series exactly."""
        x = make_periodic_series(100)
        forecast = simplex_projection(x, E=2, Tp=1)

        assert list(forecast.columns) == ['time', 'Observations', 'Predictions']
        assert len(forecast) == 98
        np.testing.assert_allclose(forecast['Predictions'], forecast['Observations'], rtol=1e-12)
        assert correlation(forecast['Observations'], forecast['Predictions']) == pytest.approx(1.0)

    def test_time_column(self):
        x = make_periodic_series(50)
        forecast = simplex_projection(x, E=3, Tp=2)
        np.testing.assert_array_equal(forecast['Observations'].values, x[forecast['time'].values])

    @pytest.mark.parametrize("pattern, E", [
        ((0.1, 0.5, 0.9, 0.3, 0.7), 2),
        ((0.2, 0.8, 0.4, 0.1, 0.9, 0.6, 0.3), 2),
        ((0.1, 0.5, 0.9, 0.3), 1),
    ])
    def test_periodic_scan_exact_from_two_periods(self, pattern, E):
        """
        Simplex mode through the scanner on a period-p series.

        Query rows 0..L-E-1 include rows up to p-1, whose only exact analog
        is one period later, so rho = 1 needs rows up to 2p-1 in the library.
        """
        period = len(pattern)
        x = make_periodic_series(200, pattern=pattern)
        short = period + E + 2
        exact = list(range(2 * period, 2 * period + 4)) + [50, 100]
        lib_sizes = [short, 2 * period - 1] + exact
        curve = scan_convergence(x, forecast_target(x, E, 1), E, lib_sizes=lib_sizes)
        rho = curve.set_index('LibSize')['rho']

        assert rho[short] < 0.999
        assert rho[2 * period - 1] < 0.999
        for L in exact:
            assert rho[L] == pytest.approx(1.0, abs=1e-12)

    def test_chaotic_skill_decays_with_horizon(self):
        """Logistic-map forecasts lose skill as the horizon grows."""
        x = make_coupled_logistic(n=1000)['X'].values
        short = simplex_projection(x, E=2, Tp=1)
        long = simplex_projection(x, E=2, Tp=8)

        rho_short = correlation(short['Observations'], short['Predictions'])
        rho_long = correlation(long['Observations'], long['Predictions'])

        assert rho_short > 0.95
        assert rho_short > rho_long

    def test_library_size(self):
        x = make_periodic_series(100)
        forecast = simplex_projection(x, E=2, lib_size=30)
        assert len(forecast) == 30

    def test_library_too_small(self):
        with pytest.raises(InsufficientLibraryError):
            simplex_projection(np.random.rand(100), E=3, lib_size=4)
