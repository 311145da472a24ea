"""
tests/test_analysis.py - Grid expansion, marginal values and summary tables
"""

import numpy as np
import pandas as pd
import pytest

from nonmarginal_vsl.analysis import (
    MODEL_LABELS,
    build_delta_grid,
    compute_historical_gains,
    compute_marginal_values,
    run_valuation,
    summarize_unit_gain,
    to_long_format,
)
from nonmarginal_vsl.config import ModelConfig, ValuationParameters
from nonmarginal_vsl.errors import ConfigurationError, DomainError
from nonmarginal_vsl.model import ValuationModel

MODELS = ['linear', 'log', 'crra']


@pytest.fixture
def dle_df(survival_df):
    return ValuationModel().compute_life_expectancy(survival_df)


@pytest.fixture
def valuation_results(dle_df, config):
    return run_valuation(dle_df, config)


class TestDeltaGrid:

    def test_default_grid_has_101_even_points(self):
        grid = build_delta_grid(0.01)
        assert len(grid) == 101
        assert grid[0] == 0.0
        assert grid[-1] == 1.0
        np.testing.assert_allclose(np.diff(grid), 0.01)

    def test_coarse_grid(self):
        np.testing.assert_allclose(build_delta_grid(0.25), [0.0, 0.25, 0.5, 0.75, 1.0])

    @pytest.mark.parametrize("l_step", [0.0, -0.1, 1.5, 0.3])
    def test_invalid_step_raises(self, l_step):
        with pytest.raises(ConfigurationError):
            build_delta_grid(l_step)


class TestMarginalValues:

    def test_backward_difference_with_gamma_at_zero(self):
        b = np.array([0.0, 0.1, 0.19, 0.27])
        mg_b = compute_marginal_values(b, 0.1, gamma_hat=1.05)
        assert mg_b[0] == 1.05
        np.testing.assert_allclose(mg_b[1:], [1.0, 0.9, 0.8])


class TestRunValuation:

    def test_flat_grid_of_ages_by_gains(self, valuation_results):
        _, valuations = valuation_results
        assert len(valuations) == 3 * 101
        assert sorted(valuations['age'].unique()) == [20, 50, 80]
        assert valuations.groupby('age').size().tolist() == [101, 101, 101]
        for name in MODELS:
            for metric in ['b', 'mg_b', 'rel_mg_b', 'mg_v']:
                assert f'{metric}_{name}' in valuations.columns

    def test_marginal_value_at_zero_gain_is_gamma_hat(self, valuation_results):
        gamma_hat, valuations = valuation_results
        start = valuations.loc[valuations['delta_l'] == 0.0]
        assert len(start) == 3
        for name in MODELS:
            assert (start[f'mg_b_{name}'] == gamma_hat).all()
            assert (start[f'rel_mg_b_{name}'] == 1.0).all()

    def test_gamma_hat_calibrated_on_base_year(self, valuation_results, dle_df):
        gamma_hat, _ = valuation_results
        assert gamma_hat == pytest.approx(ValuationModel().calibrate(dle_df))

    def test_survival_ratio_preserved_on_grid(self, valuation_results):
        _, valuations = valuation_results
        np.testing.assert_allclose(
            valuations['s_a_tilde'] / valuations['l_a_tilde'],
            valuations['s_a'] / valuations['l_a'],
        )

    def test_linear_value_and_marginal_value(self, valuation_results):
        gamma_hat, valuations = valuation_results
        np.testing.assert_allclose(valuations['b_linear'], valuations['delta_l'] * gamma_hat)
        np.testing.assert_allclose(valuations['mg_b_linear'], gamma_hat)

    def test_concave_models_value_less(self, valuation_results):
        _, valuations = valuation_results
        gains = valuations.loc[valuations['delta_l'] > 0]
        assert (gains['b_linear'] > gains['b_log']).all()
        assert (gains['b_log'] > gains['b_crra']).all()
        assert (gains['mg_b_crra'] < gains['mg_b_log']).all()

    def test_marginal_vsl_converts_by_dle_over_survival(self, valuation_results):
        _, valuations = valuation_results
        np.testing.assert_allclose(
            valuations['mg_v_log'],
            valuations['mg_b_log'] * valuations['l_a'] / valuations['s_a'],
        )

    def test_missing_focal_age_raises(self, dle_df):
        trimmed = dle_df.loc[~((dle_df['year'] == 2015) & (dle_df['age'] == 50))]
        with pytest.raises(ConfigurationError, match="age 50"):
            run_valuation(trimmed, ModelConfig())

    def test_domain_error_names_age(self, dle_df):
        config = ModelConfig(valuation=ValuationParameters(v_hat=1e5, crra_rho=0.5))
        with pytest.raises(DomainError) as excinfo:
            run_valuation(dle_df, config)
        error = excinfo.value
        assert error.age == 20
        assert error.rho == 0.5
        assert error.delta_l > 0
        assert "age 20" in str(error)


class TestLongFormat:

    def test_one_row_per_age_gain_model(self, valuation_results):
        _, valuations = valuation_results
        long_df = to_long_format(valuations)
        assert len(long_df) == 3 * len(valuations)
        assert list(long_df['model'].unique()) == list(MODEL_LABELS.values())
        assert list(long_df.columns) == ['age', 'delta_l', 'model', 'b', 'mg_b', 'rel_mg_b', 'mg_v']

    def test_values_joined_on_age_and_gain(self, valuation_results):
        _, valuations = valuation_results
        long_df = to_long_format(valuations)
        crra = long_df.loc[long_df['model'] == 'CRRA'].reset_index(drop=True)
        np.testing.assert_allclose(crra['b'], valuations['b_crra'])
        np.testing.assert_allclose(crra['delta_l'], valuations['delta_l'])


class TestSummaries:

    def test_unit_gain_summary(self, valuation_results):
        gamma_hat, valuations = valuation_results
        summary = summarize_unit_gain(valuations, gamma_hat)

        assert list(summary.columns) == [20, 50, 80]
        assert summary.index[0] == 'DLE'
        assert 'Value, CRRA' in summary.index
        assert 'Marginal VSL, Log' in summary.index
        np.testing.assert_allclose(summary.loc['Initial VSLY'], gamma_hat)
        np.testing.assert_allclose(summary.loc['Value, Linear'], gamma_hat)
        np.testing.assert_allclose(
            summary.loc['Proportional DLE increase (%)'], 100 / summary.loc['DLE']
        )
        # DLE falls with age
        assert summary.loc['DLE', 20] > summary.loc['DLE', 50] > summary.loc['DLE', 80]

    def test_historical_gains(self, dle_df, valuation_results, config):
        gamma_hat, _ = valuation_results
        historical = compute_historical_gains(dle_df, gamma_hat, config)

        assert list(historical.index) == [20, 50, 80]
        np.testing.assert_allclose(
            historical['delta_l'], historical['l_2015'] - historical['l_1990']
        )
        # Mortality fell between the two years
        assert (historical['delta_l'] > 0).all()
        np.testing.assert_allclose(historical['b_linear'], historical['delta_l'] * gamma_hat)
        assert (historical['b_crra'] < historical['b_log']).all()
