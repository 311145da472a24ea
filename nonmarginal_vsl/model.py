#!/usr/bin/env python3
"""
Model for the valuation of non-marginal changes in mortality risk

This module implements the core numerical functions: discounted life
expectancy (DLE) by backward recursion over a period life table, calibration
of the scale parameter gamma_hat, and the closed-form valuation of a gain in
DLE under linear, log and CRRA utility.
"""

import warnings
from typing import Dict, Optional, Union

import numpy as np
import pandas as pd

from nonmarginal_vsl.config import ModelConfig
from nonmarginal_vsl.errors import (
    ConfigurationError,
    DivergenceError,
    DomainError,
    InputDataError,
)

MAX_AGE = 100
N_AGES = MAX_AGE + 1

ArrayLike = Union[float, np.ndarray]


def compute_discounted_life_expectancy(survival: Union[np.ndarray, pd.Series],
                                       beta: float,
                                       year: Optional[int] = None) -> np.ndarray:
    """
    Compute discounted life expectancy l_a for ages 0..100 of one year.

    The terminal age is an absorbing bucket with survival held constant in
    perpetuity, which gives the boundary value

        l_100 = 1 / (1 - beta * s_100)

    and younger ages follow the recurrence

        l_a = s_a * (1 + beta * l_{a+1}),   a = 99, ..., 0

    filled in strictly descending age order since each step reads l_{a+1}.

    Args:
        survival: Annual survival probabilities indexed by age (length 101)
        beta: Discount factor in (0, 1)
        year: Calendar year, only used in error messages

    Returns:
        Array of l_a indexed by age (length 101)

    Raises:
        ConfigurationError: If beta is outside (0, 1)
        InputDataError: If survival does not cover ages 0..100 or lies outside (0, 1]
        DivergenceError: If beta * s_100 >= 1
    """
    label = f"year {year}" if year is not None else "life table"
    if not 0.0 < beta < 1.0:
        raise ConfigurationError(f"Discount factor beta must lie in (0, 1), got {beta}")

    s = np.asarray(survival, dtype=float)
    if s.shape != (N_AGES,):
        raise InputDataError(f"{label}: expected survival probabilities for ages 0..{MAX_AGE}, got shape {s.shape}")
    if not np.isfinite(s).all():
        raise InputDataError(f"{label}: survival probabilities must be finite at ages {np.flatnonzero(~np.isfinite(s)).tolist()}")

    if beta * s[MAX_AGE] >= 1.0:
        raise DivergenceError(
            f"{label}: beta * s_{MAX_AGE} = {beta * s[MAX_AGE]:.6f} >= 1, "
            "discounted life expectancy at the terminal age diverges"
        )

    out_of_range = np.flatnonzero((s <= 0) | (s > 1))
    if out_of_range.size:
        raise InputDataError(f"{label}: survival probabilities outside (0, 1] at ages {out_of_range.tolist()}")

    dle = np.empty(N_AGES)
    dle[MAX_AGE] = 1.0 / (1.0 - beta * s[MAX_AGE])
    for age in range(MAX_AGE - 1, -1, -1):
        dle[age] = s[age] * (1.0 + beta * dle[age + 1])
    return dle


def hypothetical_survival(l_a: ArrayLike, s_a: ArrayLike, l_a_tilde: ArrayLike) -> ArrayLike:
    """Survival probability implied by a hypothetical DLE, keeping s/l fixed."""
    if np.any(np.asarray(l_a) <= 0):
        raise DomainError(f"Discounted life expectancy must be positive to scale survival, got {l_a}")
    return s_a * l_a_tilde / l_a


def valuation_function(l_a: ArrayLike, l_a_tilde: ArrayLike, s_a_tilde: ArrayLike,
                       gamma_hat: float, s_a_ref: float, rho: float) -> ArrayLike:
    """
    Willingness to pay (multiple of income) for raising DLE from l_a to l_a_tilde.

    rho == 0 (linear):
        b = (l_a_tilde - l_a) * gamma_hat
    rho == 1 (log utility, exact limit of the CRRA form):
        b = l_a_tilde/s_a_tilde * (1 - exp(-(l_a_tilde - l_a)/l_a_tilde * gamma_hat * s_a_ref))
    otherwise (CRRA):
        b = l_a_tilde/s_a_tilde * (1 - (1 - (1-rho)*(l_a_tilde - l_a)/l_a_tilde*gamma_hat*s_a_ref)^(1/(1-rho)))

    Args:
        l_a: Baseline discounted life expectancy
        l_a_tilde: Hypothetical discounted life expectancy (scalar or array)
        s_a_tilde: Hypothetical survival probability (scalar or array)
        gamma_hat: Calibrated scale parameter
        s_a_ref: Baseline survival probability of the focal age
        rho: Relative risk aversion

    Returns:
        Value(s) of the gain, same shape as l_a_tilde

    Raises:
        DomainError: If the CRRA base is negative (or zero with a negative exponent)
    """
    l_a_tilde = np.asarray(l_a_tilde, dtype=float)
    gain = l_a_tilde - l_a

    with warnings.catch_warnings():
        warnings.simplefilter("error", RuntimeWarning)
        try:
            if rho == 0:
                b = gain * gamma_hat
            else:
                scale = l_a_tilde / s_a_tilde
                x = gain / l_a_tilde * gamma_hat * s_a_ref
                if rho == 1:
                    b = scale * (1.0 - np.exp(-x))
                else:
                    base = 1.0 - (1.0 - rho) * x
                    exponent = 1.0 / (1.0 - rho)
                    invalid = (base < 0) | ((base == 0) & (exponent < 0))
                    if np.any(invalid):
                        delta_l = float(np.atleast_1d(gain)[np.argmax(np.atleast_1d(invalid))])
                        raise DomainError(
                            f"rho {rho}, delta_l {delta_l:.4f}: CRRA base "
                            f"{float(np.atleast_1d(base)[np.argmax(np.atleast_1d(invalid))]):.6f} "
                            f"cannot be raised to the power {exponent:.4f}",
                            delta_l=delta_l, rho=rho,
                        )
                    b = scale * (1.0 - base ** exponent)
        except RuntimeWarning as e:
            raise DomainError(f"rho {rho}: valuation is numerically undefined ({e})", rho=rho) from e

    return b if np.ndim(b) else float(b)


def utility_models(crra_rho: float = 2.0) -> Dict[str, float]:
    """Utility models evaluated side by side, in reporting order."""
    return {'linear': 0.0, 'log': 1.0, 'crra': crra_rho}


class ValuationModel:
    """Discounted life expectancy, calibration and valuation of DLE gains.

    Parameters are read from a frozen ModelConfig; gamma_hat is set once by
    calibrate() from the base year and reused for every valuation.
    """

    def __init__(self, config: Optional[ModelConfig] = None, gamma_hat: Optional[float] = None):
        """
        Args:
            config: Run configuration. If None, uses the default ModelConfig.
            gamma_hat: Previously calibrated scale parameter, if known.
        """
        if config is None:
            config = ModelConfig()
        self.config = config

        self.v_hat: float = config.valuation.v_hat  # VSL-to-income ratio at the reference age
        self.a_hat: int = config.valuation.a_hat  # Reference age
        self.beta: float = config.valuation.beta  # Discount factor
        self.base_year: int = config.data.base_year  # Calibration and baseline year
        self.models: Dict[str, float] = utility_models(config.valuation.crra_rho)
        self.gamma_hat: Optional[float] = gamma_hat

    def compute_life_expectancy(self, survival_df: pd.DataFrame) -> pd.DataFrame:
        """
        Add discounted life expectancy l_a to every (year, age) row.

        Years are computed independently. The input frame is not modified.

        Args:
            survival_df: DataFrame with columns year, age, s_a

        Returns:
            Copy of survival_df sorted by year and age with an added l_a column
        """
        required_cols = ['year', 'age', 's_a']
        missing_cols = [col for col in required_cols if col not in survival_df.columns]
        if missing_cols:
            raise InputDataError(f"survival data missing required columns: {missing_cols}")

        frames = []
        for year, year_df in survival_df.sort_values(['year', 'age']).groupby('year', sort=True):
            ages = year_df['age'].to_numpy()
            duplicated = sorted(set(year_df.loc[year_df['age'].duplicated(), 'age'].tolist()))
            if duplicated:
                raise InputDataError(f"Year {year} has more than one row for ages {duplicated}")
            if not np.array_equal(ages, np.arange(N_AGES)):
                missing = sorted(set(range(N_AGES)) - set(ages.tolist()))
                unexpected = sorted(set(ages.tolist()) - set(range(N_AGES)))
                raise InputDataError(
                    f"Year {year} does not cover ages 0..{MAX_AGE}; missing {missing}, unexpected {unexpected}"
                )

            year_df = year_df.copy()
            year_df['l_a'] = compute_discounted_life_expectancy(year_df['s_a'].to_numpy(), self.beta, year)
            frames.append(year_df)

        return pd.concat(frames, ignore_index=True)

    @staticmethod
    def lookup(dle_df: pd.DataFrame, year: int, age: int) -> pd.Series:
        """Return the (year, age) row of a DLE frame."""
        row = dle_df.loc[(dle_df['year'] == year) & (dle_df['age'] == age)]
        if row.empty:
            raise ConfigurationError(f"No discounted life expectancy for age {age} in year {year}")
        return row.iloc[0]

    def calibrate(self, dle_df: pd.DataFrame) -> float:
        """
        Calibrate gamma_hat = V_HAT / l_(A_HAT, BASE_YEAR) * s_(A_HAT, BASE_YEAR).

        The marginal value of DLE at zero gain then reproduces V_HAT at the
        reference age, since mg_v = gamma_hat * l_a / s_a.
        """
        if self.v_hat <= 0:
            raise ConfigurationError(f"V_HAT must be positive, got {self.v_hat}")

        ref = self.lookup(dle_df, self.base_year, self.a_hat)
        if ref['l_a'] <= 0:
            raise ConfigurationError(
                f"Discounted life expectancy at reference age {self.a_hat} in {self.base_year} is zero"
            )
        self.gamma_hat = float(self.v_hat / ref['l_a'] * ref['s_a'])
        return self.gamma_hat

    def _require_gamma(self) -> float:
        if self.gamma_hat is None:
            raise ConfigurationError("gamma_hat is not calibrated; call calibrate() first")
        return self.gamma_hat

    def value_gain(self, l_a: float, s_a: float, delta_l: ArrayLike, model: str) -> ArrayLike:
        """Value of raising DLE by delta_l under one named utility model."""
        if model not in self.models:
            raise ConfigurationError(f"Unknown utility model: '{model}'. Valid models: {', '.join(self.models)}")
        gamma_hat = self._require_gamma()
        l_a_tilde = l_a + np.asarray(delta_l, dtype=float)
        s_a_tilde = hypothetical_survival(l_a, s_a, l_a_tilde)
        return valuation_function(l_a, l_a_tilde, s_a_tilde, gamma_hat, s_a, self.models[model])

    def evaluate_grid(self, age: int, l_a: float, s_a: float, grid: np.ndarray) -> pd.DataFrame:
        """
        Evaluate every utility model over a grid of DLE gains for one focal age.

        Returns:
            DataFrame with columns age, delta_l, l_a, s_a, l_a_tilde, s_a_tilde
            and one b_<model> column per utility model
        """
        gamma_hat = self._require_gamma()
        grid = np.asarray(grid, dtype=float)

        try:
            l_a_tilde = l_a + grid
            s_a_tilde = hypothetical_survival(l_a, s_a, l_a_tilde)
            df = pd.DataFrame({
                'age': age,
                'delta_l': grid,
                'l_a': l_a,
                's_a': s_a,
                'l_a_tilde': l_a_tilde,       # Hypothetical DLE
                's_a_tilde': s_a_tilde,       # Implied survival, s_a_tilde / l_a_tilde = s_a / l_a
            })
            for name, rho in self.models.items():
                df[f'b_{name}'] = valuation_function(l_a, l_a_tilde, s_a_tilde, gamma_hat, s_a, rho)
        except DomainError as e:
            raise e.with_age(age) from e

        return df
