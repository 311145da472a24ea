#!/usr/bin/env python3
"""Centralized Path Management for the valuation pipeline.

This module provides a single source of truth for all file paths used across
the project, so the code works regardless of working directory.

Directory Structure:
    project_root/
    ├── nonmarginal_vsl/  # Python source code
    ├── data/             # Raw input life tables (user provided)
    ├── output/           # Results table and CSV exports
    └── figures/          # Generated plots

Usage:
    >>> from nonmarginal_vsl.paths import OUTPUT_DIR, DATA_DIR
    >>> df.to_csv(OUTPUT_DIR / "valuation_grid.csv")
"""

from pathlib import Path

# Project root is parent of the package directory
PROJECT_ROOT = Path(__file__).parent.parent

DATA_DIR = PROJECT_ROOT / "data"
"""Raw input data (UN WPP life tables)."""

OUTPUT_DIR = PROJECT_ROOT / "output"
"""Results table and CSV exports."""

FIGURES_DIR = PROJECT_ROOT / "figures"
"""Generated plots."""


def ensure_directories_exist(output_dir: Path = OUTPUT_DIR,
                             figures_dir: Path = FIGURES_DIR) -> None:
    """Create the output and figures directories if they don't exist.

    Does NOT create the data directory, which should contain user-provided
    raw data.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    figures_dir.mkdir(parents=True, exist_ok=True)


class CommonPaths:
    """Commonly used file paths for quick access.

    Paths are properties computed from the configured directories, so a
    runner pointed at a scratch directory writes all artifacts there.
    """

    def __init__(self, output_dir: Path = OUTPUT_DIR, figures_dir: Path = FIGURES_DIR):
        self.output_dir = Path(output_dir)
        self.figures_dir = Path(figures_dir)

    # === Tables ===
    @property
    def results_table(self) -> Path:
        """LaTeX table of unit-gain valuations by focal age."""
        return self.output_dir / "results_table.tex"

    @property
    def summary_table(self) -> Path:
        """CSV version of the results table."""
        return self.output_dir / "summary_table.csv"

    @property
    def valuation_grid(self) -> Path:
        """Full grid of valuations (age x delta_l)."""
        return self.output_dir / "valuation_grid.csv"

    @property
    def historical_gains(self) -> Path:
        """Observed DLE gains between the comparison and base years and their value."""
        return self.output_dir / "historical_gains.csv"

    # === Figures ===
    @property
    def value_plot(self) -> Path:
        """Value of the gain vs. delta_l."""
        return self.figures_dir / "value.pdf"

    @property
    def relative_marginal_value_plot(self) -> Path:
        """Relative marginal value vs. delta_l."""
        return self.figures_dir / "relative_marginal_value.pdf"

    @property
    def marginal_vsl_plot(self) -> Path:
        """Marginal VSL-to-income ratio vs. delta_l."""
        return self.figures_dir / "marginal_vsl.pdf"


if __name__ == "__main__":
    print("=" * 80)
    print("Configured Paths")
    print("=" * 80)
    print(f"\nProject Root: {PROJECT_ROOT}")
    print(f"  Data:    {DATA_DIR}")
    print(f"  Results: {OUTPUT_DIR}")
    print(f"  Figures: {FIGURES_DIR}")
    if not DATA_DIR.exists():
        print(f"\nWarning: data directory not found: {DATA_DIR}")
