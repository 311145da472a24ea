"""
tests/test_config.py - Parameter defaults, validation and documentation
"""

import pytest
from pydantic import ValidationError

from nonmarginal_vsl.config import (
    DataParameters,
    ModelConfig,
    PlotParameters,
    ValuationParameters,
)


class TestDefaults:

    def test_valuation_defaults(self, config):
        valuation = config.valuation
        assert valuation.v_hat == 160.0
        assert valuation.a_hat == 40
        assert valuation.beta == pytest.approx(1 / 1.03)
        assert valuation.ages == (20, 50, 80)
        assert valuation.l_step == 0.01
        assert valuation.crra_rho == 2.0

    def test_data_defaults(self, config):
        assert config.data.base_year == 2015
        assert config.data.pre_year == 1990
        assert config.data.years == (1990, 2015)

    def test_output_toggles_default_on(self, config):
        assert config.output.export_table
        assert config.output.export_figures
        assert config.output.export_csv

    def test_to_dict_has_all_categories(self, config):
        assert set(config.to_dict()) == {'valuation', 'data', 'output', 'plot'}


class TestValidation:

    def test_configuration_is_frozen(self, config):
        with pytest.raises(ValidationError):
            config.valuation.beta = 0.5

    @pytest.mark.parametrize("beta", [0.0, -0.1, 1.0, 1.5])
    def test_beta_must_lie_in_unit_interval(self, beta):
        with pytest.raises(ValidationError):
            ValuationParameters(beta=beta)

    @pytest.mark.parametrize("v_hat", [0.0, -10.0])
    def test_v_hat_must_be_positive(self, v_hat):
        with pytest.raises(ValidationError):
            ValuationParameters(v_hat=v_hat)

    def test_reference_age_within_life_table(self):
        with pytest.raises(ValidationError):
            ValuationParameters(a_hat=101)

    def test_crra_rho_cannot_be_log_model(self):
        with pytest.raises(ValidationError, match="crra_rho"):
            ValuationParameters(crra_rho=1.0)

    def test_ages_sorted_and_unique(self):
        assert ValuationParameters(ages=(80, 20, 50)).ages == (20, 50, 80)
        with pytest.raises(ValidationError):
            ValuationParameters(ages=(20, 20))
        with pytest.raises(ValidationError):
            ValuationParameters(ages=(20, 120))

    def test_reference_years_must_differ(self):
        with pytest.raises(ValidationError):
            DataParameters(base_year=2015, pre_year=2015)

    def test_axis_range_order(self):
        with pytest.raises(ValidationError):
            PlotParameters(value_ylim=(5.0, 1.0))

    def test_unknown_parameter_rejected(self):
        with pytest.raises(ValidationError):
            ValuationParameters(gamma_hat=3.0)


class TestDescribe:

    def test_describe_prints_documentation(self, config, capsys):
        config.valuation.describe('beta')
        out = capsys.readouterr().out
        assert "Parameter: beta" in out
        assert "discount" in out.lower()

    def test_describe_unknown_parameter(self, config):
        with pytest.raises(ValueError, match="Unknown parameter"):
            config.data.describe('rho')

    def test_describe_all_covers_every_category(self, capsys):
        ModelConfig().describe_all()
        out = capsys.readouterr().out
        for heading in ['# VALUATION', '# DATA', '# OUTPUT', '# PLOT']:
            assert heading in out
