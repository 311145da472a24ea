#!/usr/bin/env python3
"""
Main Execution Script for the Valuation of Non-marginal Mortality Risk Changes

Runs the full pipeline: life-table preprocessing, discounted life expectancy,
calibration of gamma_hat, valuation of hypothetical DLE gains for the focal
ages, and export of the results table, CSV files and figures.
"""

import argparse
import sys
from pathlib import Path
from typing import Dict, Optional, Union

import pandas as pd
from pydantic import ValidationError

from nonmarginal_vsl.analysis import (
    compute_historical_gains,
    run_valuation,
    summarize_unit_gain,
    to_long_format,
)
from nonmarginal_vsl.config import DataParameters, ModelConfig, OutputParameters
from nonmarginal_vsl.errors import ConfigurationError
from nonmarginal_vsl.model import ValuationModel
from nonmarginal_vsl.paths import FIGURES_DIR, OUTPUT_DIR, CommonPaths, ensure_directories_exist
from nonmarginal_vsl.plot import ValuationPlotter, export_results_table
from nonmarginal_vsl.preprocess import LifeTableProcessor


class MortalityValuationAnalysis:
    """Main analysis class that coordinates all components"""

    def __init__(self, config: Optional[ModelConfig] = None,
                 output_dir: Union[str, Path] = OUTPUT_DIR,
                 figures_dir: Union[str, Path] = FIGURES_DIR):
        """
        Initialize the analysis

        Args:
            config: Run configuration
            output_dir: Directory for tables and CSV files
            figures_dir: Directory for figures
        """
        self.config = config or ModelConfig()
        self.paths = CommonPaths(output_dir, figures_dir)
        ensure_directories_exist(self.paths.output_dir, self.paths.figures_dir)

    def _export_results(self, results: pd.DataFrame, path: Path, index: bool = False):
        """Export results to CSV file"""
        results.to_csv(path, index=index)
        print(f"Results exported to {path}")

    def run(self, survival_df: pd.DataFrame) -> Dict[str, Union[float, pd.DataFrame]]:
        """
        Run the valuation on preprocessed survival probabilities.

        Args:
            survival_df: DataFrame with columns year, age, s_a

        Returns:
            Dictionary with gamma_hat, the DLE table, the valuation grid,
            the summary table and the historical gains
        """
        valuation = self.config.valuation
        print("Computing discounted life expectancy...")
        dle_df = ValuationModel(self.config).compute_life_expectancy(survival_df)

        print(f"Valuing DLE gains at ages {', '.join(map(str, valuation.ages))}...")
        gamma_hat, valuations = run_valuation(dle_df, self.config, verbose=True)
        print(f"  gamma_hat = {gamma_hat:.4f} (V_HAT = {valuation.v_hat} at age {valuation.a_hat}, "
              f"{self.config.data.base_year})")

        summary = summarize_unit_gain(valuations, gamma_hat)
        historical = compute_historical_gains(dle_df, gamma_hat, self.config)

        output = self.config.output
        if output.export_csv:
            self._export_results(valuations, self.paths.valuation_grid)
            self._export_results(summary, self.paths.summary_table, index=True)
            self._export_results(historical, self.paths.historical_gains, index=True)
        if output.export_table:
            export_results_table(summary, self.paths.results_table, decimals=output.decimals)
        if output.export_figures:
            ValuationPlotter(self.config.plot).plot_all(to_long_format(valuations), self.paths)

        return {
            'gamma_hat': gamma_hat,
            'dle': dle_df,
            'valuations': valuations,
            'summary': summary,
            'historical': historical,
        }


def build_config(args: argparse.Namespace) -> ModelConfig:
    """
    Apply command line overrides to the default configuration.

    Raises:
        ConfigurationError: If an override fails parameter validation
    """
    data_overrides = {
        key: value for key, value in [
            ('iso3_code', args.country),
            ('base_year', args.base_year),
            ('pre_year', args.pre_year),
        ] if value is not None
    }
    try:
        return ModelConfig(
            data=DataParameters(**data_overrides),
            output=OutputParameters(
                export_table=not args.no_table,
                export_figures=not args.no_figures,
                export_csv=not args.no_csv,
            ),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def main(argv=None):
    """Main function"""
    parser = argparse.ArgumentParser(description="Valuation of non-marginal changes in mortality risk")
    parser.add_argument("--input", type=str, default=None, help="Life table CSV (defaults to the configured file in data/)")
    parser.add_argument("--country", type=str, default=None, help="ISO3 country code")
    parser.add_argument("--base_year", type=int, default=None, help="Base (calibration) year")
    parser.add_argument("--pre_year", type=int, default=None, help="Comparison year")
    parser.add_argument("--no_table", action="store_true", help="Do not export the LaTeX results table")
    parser.add_argument("--no_figures", action="store_true", help="Do not export figures")
    parser.add_argument("--no_csv", action="store_true", help="Do not export CSV results")
    parser.add_argument("--describe", action="store_true", help="Print parameter documentation and exit")
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
        if args.describe:
            config.describe_all()
            return 0

        survival_df = LifeTableProcessor(config).process(args.input)
        MortalityValuationAnalysis(config).run(survival_df)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("Analysis completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
