#!/usr/bin/env python3
"""Analysis Module.

This module expands each focal age into a grid of hypothetical gains in
discounted life expectancy (DLE), values every grid point under the linear,
log and CRRA utility models, and derives marginal values and the summary
tables consumed by the reporting layer.

Example:
    >>> from nonmarginal_vsl.analysis import run_valuation
    >>> gamma_hat, valuations = run_valuation(dle_df, config)
    >>> valuations.loc[valuations['delta_l'] == 1.0, ['age', 'b_log']]

Output columns of the valuation grid:
    age, delta_l, l_a, s_a, l_a_tilde, s_a_tilde and, for each model m,
    b_m (value), mg_b_m (marginal value), rel_mg_b_m (mg_b_m / gamma_hat),
    mg_v_m (marginal VSL-to-income ratio)
"""

from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd
from tqdm import tqdm

from nonmarginal_vsl.config import ModelConfig
from nonmarginal_vsl.errors import ConfigurationError, DomainError
from nonmarginal_vsl.model import ValuationModel

MODEL_LABELS: Dict[str, str] = {'linear': 'Linear', 'log': 'Log', 'crra': 'CRRA'}


def build_delta_grid(l_step: float) -> np.ndarray:
    """
    Evenly spaced DLE gains on [0, 1], both endpoints included.

    Args:
        l_step: Grid resolution, 1/l_step must be an integer

    Returns:
        Array of 1/l_step + 1 gains
    """
    if not 0.0 < l_step <= 1.0:
        raise ConfigurationError(f"Grid step must lie in (0, 1], got {l_step}")
    n_steps = round(1.0 / l_step)
    if not np.isclose(n_steps * l_step, 1.0, rtol=0.0, atol=1e-9):
        raise ConfigurationError(f"Grid step {l_step} does not divide [0, 1] into whole steps")
    return np.linspace(0.0, 1.0, n_steps + 1)


def compute_marginal_values(b: np.ndarray, l_step: float, gamma_hat: float) -> np.ndarray:
    """
    Backward first difference of the value over the grid.

    mg_b[i] = (b[i] - b[i-1]) / l_step for i >= 1. The first point has no
    predecessor and takes the analytic marginal value at zero gain, gamma_hat.
    """
    b = np.asarray(b, dtype=float)
    mg_b = np.empty_like(b)
    mg_b[0] = gamma_hat
    mg_b[1:] = (b[1:] - b[:-1]) / l_step
    return mg_b


def add_marginal_values(grid_df: pd.DataFrame, models: Dict[str, float],
                        l_step: float, gamma_hat: float) -> pd.DataFrame:
    """Populate mg_b, rel_mg_b and mg_v columns in place for one focal age."""
    for name in models:
        mg_b = compute_marginal_values(grid_df[f'b_{name}'].to_numpy(), l_step, gamma_hat)
        grid_df[f'mg_b_{name}'] = mg_b
        grid_df[f'rel_mg_b_{name}'] = mg_b / gamma_hat
        # Back to a valuation of instantaneous survival probability
        grid_df[f'mg_v_{name}'] = mg_b * grid_df['l_a'] / grid_df['s_a']
    return grid_df


def run_valuation(dle_df: pd.DataFrame, config: Optional[ModelConfig] = None,
                  verbose: bool = False) -> Tuple[float, pd.DataFrame]:
    """
    Value hypothetical DLE gains for every focal age in the base year.

    gamma_hat is calibrated once from the base year and reused for all ages
    and models.

    Args:
        dle_df: Output of ValuationModel.compute_life_expectancy
        config: Run configuration. If None, uses the default ModelConfig.
        verbose: Whether to show a progress bar over focal ages

    Returns:
        Tuple of (gamma_hat, valuation grid DataFrame)

    Raises:
        ConfigurationError: If the reference or a focal age is missing from the base year
        DomainError: If a CRRA valuation leaves its domain (names age, delta_l, rho)
    """
    if config is None:
        config = ModelConfig()

    model = ValuationModel(config)
    gamma_hat = model.calibrate(dle_df)
    grid = build_delta_grid(config.valuation.l_step)

    frames = []
    for age in tqdm(config.valuation.ages, desc="Valuing focal ages", disable=not verbose):
        row = model.lookup(dle_df, model.base_year, age)
        grid_df = model.evaluate_grid(age, float(row['l_a']), float(row['s_a']), grid)
        frames.append(add_marginal_values(grid_df, model.models, config.valuation.l_step, gamma_hat))

    return gamma_hat, pd.concat(frames, ignore_index=True)


def to_long_format(valuations: pd.DataFrame) -> pd.DataFrame:
    """
    Reshape the valuation grid to one row per (age, delta_l, model).

    Columns: age, delta_l, model, b, mg_b, rel_mg_b, mg_v. The model column
    holds display labels (Linear, Log, CRRA).
    """
    frames = []
    for name, label in MODEL_LABELS.items():
        if f'b_{name}' not in valuations.columns:
            continue
        frame = valuations[['age', 'delta_l']].copy()
        frame['model'] = label
        for metric in ['b', 'mg_b', 'rel_mg_b', 'mg_v']:
            frame[metric] = valuations[f'{metric}_{name}'].to_numpy()
        frames.append(frame)
    return pd.concat(frames, ignore_index=True)


def _at_gain(valuations: pd.DataFrame, delta_l: float) -> pd.DataFrame:
    """Grid rows at one gain, indexed by focal age."""
    rows = valuations.loc[np.isclose(valuations['delta_l'], delta_l)]
    return rows.set_index('age').sort_index()


def summarize_unit_gain(valuations: pd.DataFrame, gamma_hat: float) -> pd.DataFrame:
    """
    Headline comparison of a one-unit gain in DLE, one column per focal age.

    Rows:
        DLE, proportional DLE increase, value of the unit gain per model,
        initial and marginal VSLY per model, initial and marginal VSL per model
    """
    start = _at_gain(valuations, 0.0)
    unit = _at_gain(valuations, 1.0)

    rows = {
        'DLE': unit['l_a'],
        'Proportional DLE increase (%)': 100.0 / unit['l_a'],
    }
    for name, label in MODEL_LABELS.items():
        rows[f'Value, {label}'] = unit[f'b_{name}']
    rows['Initial VSLY'] = pd.Series(gamma_hat, index=unit.index)
    for name, label in MODEL_LABELS.items():
        rows[f'Marginal VSLY, {label}'] = unit[f'mg_b_{name}']
    rows['Initial VSL'] = start['mg_v_linear']
    for name, label in MODEL_LABELS.items():
        rows[f'Marginal VSL, {label}'] = unit[f'mg_v_{name}']

    summary = pd.DataFrame(rows).T
    summary.columns.name = 'age'
    return summary


def compute_historical_gains(dle_df: pd.DataFrame, gamma_hat: float,
                             config: Optional[ModelConfig] = None) -> pd.DataFrame:
    """
    Value the DLE gain observed between the comparison year and the base year.

    The gain l_a(base_year) - l_a(pre_year) is valued at the comparison-year
    baseline with the base-year gamma_hat.

    Returns:
        DataFrame indexed by focal age with l_pre, l_base, delta_l and b_<model>
    """
    if config is None:
        config = ModelConfig()

    model = ValuationModel(config, gamma_hat=gamma_hat)
    pre_year, base_year = config.data.pre_year, config.data.base_year

    records = []
    for age in config.valuation.ages:
        pre = model.lookup(dle_df, pre_year, age)
        base = model.lookup(dle_df, base_year, age)
        delta_l = float(base['l_a'] - pre['l_a'])
        record = {
            'age': age,
            f'l_{pre_year}': float(pre['l_a']),
            f'l_{base_year}': float(base['l_a']),
            'delta_l': delta_l,
        }
        for name in model.models:
            try:
                record[f'b_{name}'] = model.value_gain(float(pre['l_a']), float(pre['s_a']), delta_l, name)
            except DomainError as e:
                raise e.with_age(age) from e
        records.append(record)

    return pd.DataFrame(records).set_index('age')
