#!/usr/bin/env python3
"""Model Configuration and Parameter Documentation.

This module centralizes all run parameters with their justifications,
sources, and default values using Pydantic for validation and documentation.

Key features:
- Type validation and coercion
- Immutable configuration (frozen=True)
- Rich metadata with sources and interpretation
- Programmatic access to documentation

Parameters are organized by category:
- Valuation: Calibration constants, utility curvature, delta grid
- Data: Population and reference years selected from the life table
- Output: Export toggles and table formatting
- Plot: Figure geometry and fixed axis ranges

Usage:
    >>> from nonmarginal_vsl.config import ModelConfig
    >>> config = ModelConfig()
    >>> print(config.valuation.v_hat)  # 160.0
    >>> config.valuation.describe('beta')  # Print full documentation
    >>> config = ModelConfig(data=DataParameters(iso3_code='FRA'))
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Dict, Any


class _DocumentedParameters(BaseModel):
    """Base class adding parameter documentation to a frozen parameter group."""

    model_config = {'frozen': True, 'extra': 'forbid'}

    def describe(self, param_name: str) -> None:
        """Print comprehensive documentation for a parameter.

        Args:
            param_name: Name of the parameter to describe
        """
        fields = type(self).model_fields
        if param_name not in fields:
            raise ValueError(f"Unknown parameter: {param_name}")

        field_info = fields[param_name]
        value = getattr(self, param_name)
        extra = field_info.json_schema_extra or {}

        print(f"\n{'=' * 70}")
        print(f"Parameter: {param_name}")
        print(f"{'=' * 70}")
        print(f"Value: {value}")
        if 'units' in extra:
            print(f"Units: {extra['units']}")
        print(f"\nDescription:")
        print(f"  {field_info.description}")
        if 'source' in extra:
            print(f"\nSource:")
            print(f"  {extra['source']}")
        if 'interpretation' in extra:
            print(f"\nInterpretation:")
            print(f"  {extra['interpretation']}")
        if 'notes' in extra:
            print(f"\nNotes:")
            print(f"  {extra['notes']}")
        print(f"{'=' * 70}\n")


# ============================================================================
# Valuation Parameters
# ============================================================================

class ValuationParameters(_DocumentedParameters):
    """Calibration constants and the grid of hypothetical life expectancy gains."""

    v_hat: float = Field(
        default=160.0,
        gt=0.0,
        description="Value of statistical life as a multiple of annual income at the reference age. Anchors the scale of every valuation.",
        json_schema_extra={
            'units': 'multiple of annual income',
            'source': 'VSL of roughly 160 times income for the reference population',
            'interpretation': 'Marginal willingness to pay for survival at the reference age',
        }
    )

    a_hat: int = Field(
        default=40,
        ge=0,
        le=100,
        description="Reference age at which the VSL-to-income ratio is matched when calibrating gamma_hat.",
        json_schema_extra={
            'units': 'years',
            'interpretation': 'Working-age individual whose VSL is observed',
        }
    )

    beta: float = Field(
        default=1 / 1.03,
        gt=0.0,
        lt=1.0,
        description="Annual discount factor applied to future life years (3% discount rate).",
        json_schema_extra={
            'units': 'dimensionless',
            'source': 'Standard 3% rate for discounting health outcomes',
            'interpretation': 'Weight on a life year one period ahead relative to today',
            'notes': 'beta * s_100 must stay below 1 for the terminal-age sum to converge',
        }
    )

    crra_rho: float = Field(
        default=2.0,
        gt=0.0,
        description="Relative risk aversion of the CRRA utility model. The linear (rho=0) and log (rho=1) models are always evaluated alongside it.",
        json_schema_extra={
            'units': 'dimensionless',
            'interpretation': 'Higher rho -> faster decline in the marginal value of additional life expectancy',
        }
    )

    ages: tuple[int, ...] = Field(
        default=(20, 50, 80),
        min_length=1,
        description="Focal ages for which hypothetical gains in discounted life expectancy are valued.",
        json_schema_extra={
            'units': 'years',
            'interpretation': 'Young adult, middle age and old age',
        }
    )

    l_step: float = Field(
        default=0.01,
        gt=0.0,
        le=1.0,
        description="Resolution of the grid of discounted life expectancy gains on [0, 1].",
        json_schema_extra={
            'units': 'discounted life years',
            'notes': 'The grid holds 1/l_step + 1 points, so 1/l_step must be an integer',
        }
    )

    @field_validator('crra_rho')
    @classmethod
    def validate_crra_rho(cls, v):
        """Rho of 1 is the log model; the CRRA model must differ from both special cases."""
        if v == 1.0:
            raise ValueError("crra_rho must differ from 1 (the log-utility model)")
        return v

    @field_validator('ages')
    @classmethod
    def validate_ages(cls, v):
        """Ensure focal ages are unique, sorted and within the life table."""
        if any(a < 0 or a > 100 for a in v):
            raise ValueError(f"ages must lie in [0, 100], got {v}")
        if len(set(v)) != len(v):
            raise ValueError(f"ages must be unique, got {v}")
        return tuple(sorted(v))


# ============================================================================
# Data Selection Parameters
# ============================================================================

class DataParameters(_DocumentedParameters):
    """Selection of the population and reference years from the life table."""

    iso3_code: str = Field(
        default="USA",
        min_length=3,
        max_length=3,
        description="ISO 3166-1 alpha-3 code of the population whose life table is used.",
        json_schema_extra={
            'source': 'UN World Population Prospects ISO3_code column',
        }
    )

    base_year: int = Field(
        default=2015,
        description="Year whose survival probabilities define the baseline and the calibration of gamma_hat.",
        json_schema_extra={
            'units': 'calendar year',
        }
    )

    pre_year: int = Field(
        default=1990,
        description="Comparison year used to measure the observed gain in discounted life expectancy.",
        json_schema_extra={
            'units': 'calendar year',
        }
    )

    input_file: str = Field(
        default="WPP2022_Life_Table_Complete_Medium_Both_1950-2021.csv",
        description="Life table file name inside the data directory.",
        json_schema_extra={
            'source': 'UN World Population Prospects 2022, complete (single-age) life tables',
            'notes': 'Required columns: Time, ISO3_code, AgeGrpStart, Sx',
        }
    )

    @model_validator(mode='after')
    def validate_years(self):
        if self.pre_year == self.base_year:
            raise ValueError(f"pre_year and base_year must differ, got {self.base_year}")
        return self

    @property
    def years(self) -> tuple[int, int]:
        return (self.pre_year, self.base_year)


# ============================================================================
# Output Parameters
# ============================================================================

class OutputParameters(_DocumentedParameters):
    """Toggles for exported artifacts."""

    export_table: bool = Field(
        default=True,
        description="Whether to write the LaTeX results table.",
    )

    export_figures: bool = Field(
        default=True,
        description="Whether to write the three comparison figures.",
    )

    export_csv: bool = Field(
        default=True,
        description="Whether to write the valuation grid, summary and historical gains as CSV.",
    )

    decimals: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Number of decimal digits shown in the LaTeX results table.",
    )


# ============================================================================
# Plot Parameters
# ============================================================================

class PlotParameters(_DocumentedParameters):
    """Figure geometry and fixed axis ranges for the comparison charts."""

    dpi: int = Field(
        default=300,
        gt=0,
        description="Resolution used when saving figures.",
    )

    height: float = Field(
        default=3.0,
        gt=0.0,
        description="Height of each facet in inches.",
    )

    aspect: float = Field(
        default=1.0,
        gt=0.0,
        description="Width-to-height ratio of each facet.",
    )

    value_ylim: tuple[float, float] = Field(
        default=(0.0, 8.0),
        description="Vertical axis range of the value chart.",
        json_schema_extra={'units': 'multiple of annual income'},
    )

    relative_marginal_ylim: tuple[float, float] = Field(
        default=(0.0, 1.05),
        description="Vertical axis range of the relative marginal value chart.",
        json_schema_extra={'units': 'fraction of gamma_hat'},
    )

    marginal_vsl_ylim: tuple[float, float] = Field(
        default=(0.0, 250.0),
        description="Vertical axis range of the marginal VSL-to-income chart.",
        json_schema_extra={'units': 'multiple of annual income'},
    )

    @field_validator('value_ylim', 'relative_marginal_ylim', 'marginal_vsl_ylim')
    @classmethod
    def validate_range(cls, v):
        """Ensure axis ranges are valid (min < max)."""
        if v[0] >= v[1]:
            raise ValueError(f"axis range must have min < max, got {v}")
        return v


# ============================================================================
# Main Configuration Class
# ============================================================================

class ModelConfig(BaseModel):
    """Complete run configuration with all parameter categories.

    Usage:
        >>> config = ModelConfig()
        >>> config.valuation.beta  # Access parameter value
        >>> config.valuation.describe('beta')  # Print documentation
        >>> config.to_dict()  # Get all parameters as nested dict
    """

    model_config = {'frozen': True}

    valuation: ValuationParameters = Field(
        default_factory=ValuationParameters,
        description="Valuation parameters (calibration constants and grid)"
    )

    data: DataParameters = Field(
        default_factory=DataParameters,
        description="Data selection parameters"
    )

    output: OutputParameters = Field(
        default_factory=OutputParameters,
        description="Output toggles"
    )

    plot: PlotParameters = Field(
        default_factory=PlotParameters,
        description="Plot settings"
    )

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Export all parameters as nested dictionary."""
        return {
            'valuation': self.valuation.model_dump(),
            'data': self.data.model_dump(),
            'output': self.output.model_dump(),
            'plot': self.plot.model_dump(),
        }

    def describe_all(self) -> None:
        """Print documentation for all parameters in all categories."""
        for category_name in ['valuation', 'data', 'output', 'plot']:
            category = getattr(self, category_name)
            print(f"\n{'#' * 70}")
            print(f"# {category_name.upper()}")
            print(f"{'#' * 70}")
            for param_name in type(category).model_fields.keys():
                category.describe(param_name)


if __name__ == "__main__":
    """Print all parameters when run as script."""
    config = ModelConfig()

    print("=" * 80)
    print("MODEL PARAMETERS")
    print("=" * 80)
    for category_name, params in config.to_dict().items():
        print(f"\n{category_name.upper()}")
        print("-" * 80)
        for param_name, value in params.items():
            print(f"  {param_name:25s} = {value}")
    print("=" * 80)
