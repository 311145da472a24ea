"""Valuation of non-marginal changes in mortality risk."""

from nonmarginal_vsl.analysis import (
    build_delta_grid,
    compute_historical_gains,
    compute_marginal_values,
    run_valuation,
    summarize_unit_gain,
    to_long_format,
)
from nonmarginal_vsl.config import ModelConfig
from nonmarginal_vsl.errors import (
    ConfigurationError,
    DivergenceError,
    DomainError,
    InputDataError,
    ValuationError,
)
from nonmarginal_vsl.model import (
    ValuationModel,
    compute_discounted_life_expectancy,
    hypothetical_survival,
    utility_models,
    valuation_function,
)
from nonmarginal_vsl.preprocess import LifeTableProcessor

__version__ = "0.1.0"
