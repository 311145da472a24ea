#!/usr/bin/env python3
"""Plotting and table export for the valuation results.

Functions:
    format_results_table: Results table with ages grouped under an "Age" header.
    export_results_table: Write the results table as LaTeX.

ValuationPlotter draws the three comparison charts, each faceted by focal
age with one line style per utility model:
    plot_value: Value of the gain vs. delta_l
    plot_relative_marginal_value: Marginal value relative to gamma_hat vs. delta_l
    plot_marginal_vsl: Marginal VSL-to-income ratio vs. delta_l

Usage:
    >>> plotter = ValuationPlotter()
    >>> plotter.plot_all(to_long_format(valuations), paths)
"""

from pathlib import Path
from typing import Optional, Tuple, Union

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from nonmarginal_vsl.analysis import MODEL_LABELS
from nonmarginal_vsl.config import PlotParameters
from nonmarginal_vsl.paths import CommonPaths


def format_results_table(summary: pd.DataFrame) -> pd.DataFrame:
    """Group the focal-age columns under a common "Age" header."""
    table = summary.copy()
    table.columns = pd.MultiIndex.from_product([['Age'], list(summary.columns)])
    return table


def export_results_table(summary: pd.DataFrame, path: Union[str, Path], decimals: int = 2) -> str:
    """
    Write the summary table as a LaTeX tabular.

    Args:
        summary: Output of summarize_unit_gain (rows = metrics, columns = ages)
        path: Destination .tex file
        decimals: Number of decimal digits

    Returns:
        The LaTeX source that was written
    """
    table = format_results_table(summary)
    latex = table.to_latex(
        float_format=lambda x: f"{x:.{decimals}f}",
        multicolumn=True,
        multicolumn_format='c',
        escape=True,
    )
    Path(path).write_text(latex)
    print(f"Results table saved to {path}")
    return latex


class ValuationPlotter:
    """Faceted line charts comparing the linear, log and CRRA models"""

    def __init__(self, params: Optional[PlotParameters] = None):
        """
        Initialize the plotter

        Args:
            params: Figure geometry and axis ranges
        """
        self.params = params or PlotParameters()
        plt.style.use('default')
        sns.set_theme(style='whitegrid')

    def _facet_plot(self, long_df: pd.DataFrame, y: str, ylabel: str,
                    ylim: Tuple[float, float], save_path: Optional[Union[str, Path]]) -> plt.Figure:
        grid = sns.relplot(
            data=long_df, x='delta_l', y=y,
            col='age', style='model', style_order=list(MODEL_LABELS.values()),
            kind='line', color='black', errorbar=None,
            height=self.params.height, aspect=self.params.aspect,
        )
        grid.set(xlim=(0.0, 1.0), ylim=ylim)
        grid.set_axis_labels(r'$\Delta l$', ylabel)
        grid.set_titles('Age {col_name}')
        grid.legend.set_title(None)

        if save_path:
            grid.savefig(save_path, dpi=self.params.dpi, bbox_inches='tight')
            print(f"{ylabel} plot saved to {save_path}")
        plt.close(grid.figure)
        return grid.figure

    def plot_value(self, long_df: pd.DataFrame,
                   save_path: Optional[Union[str, Path]] = None) -> plt.Figure:
        """Value of the gain (multiple of income) vs. delta_l."""
        return self._facet_plot(long_df, 'b', 'Value', self.params.value_ylim, save_path)

    def plot_relative_marginal_value(self, long_df: pd.DataFrame,
                                     save_path: Optional[Union[str, Path]] = None) -> plt.Figure:
        """Marginal value relative to gamma_hat vs. delta_l."""
        return self._facet_plot(long_df, 'rel_mg_b', 'Relative marginal value',
                                self.params.relative_marginal_ylim, save_path)

    def plot_marginal_vsl(self, long_df: pd.DataFrame,
                          save_path: Optional[Union[str, Path]] = None) -> plt.Figure:
        """Marginal VSL-to-income ratio vs. delta_l."""
        return self._facet_plot(long_df, 'mg_v', 'Marginal VSL',
                                self.params.marginal_vsl_ylim, save_path)

    def plot_all(self, long_df: pd.DataFrame, paths: CommonPaths) -> None:
        """Draw and save all three charts."""
        self.plot_value(long_df, paths.value_plot)
        self.plot_relative_marginal_value(long_df, paths.relative_marginal_value_plot)
        self.plot_marginal_vsl(long_df, paths.marginal_vsl_plot)
