"""
tests/conftest.py - Shared fixtures

Synthetic life tables follow a Gompertz hazard m_a = A * exp(B * a), which
gives survival probabilities that decrease with age like a real period
life table. The comparison year carries 30% higher mortality at every age.
"""

import matplotlib
matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from nonmarginal_vsl.config import ModelConfig

GOMPERTZ_A = 5e-5
GOMPERTZ_B = 0.095


def gompertz_survival(mortality_scale: float = 1.0) -> np.ndarray:
    """Annual survival probabilities for ages 0..100."""
    ages = np.arange(101)
    hazard = mortality_scale * GOMPERTZ_A * np.exp(GOMPERTZ_B * ages)
    return np.exp(-hazard)


@pytest.fixture
def config():
    return ModelConfig()


@pytest.fixture
def survival_df():
    """Base year 2015 and comparison year 1990 for one population."""
    frames = []
    for year, scale in [(1990, 1.3), (2015, 1.0)]:
        frames.append(pd.DataFrame({
            'year': year,
            'age': np.arange(101),
            's_a': gompertz_survival(scale),
        }))
    return pd.concat(frames, ignore_index=True)


@pytest.fixture
def raw_life_table():
    """Life table in the UN WPP column layout with a second country and an extra year."""
    frames = []
    for iso3, scale_shift in [('USA', 1.0), ('FRA', 0.8)]:
        for year, scale in [(1990, 1.3), (2000, 1.15), (2015, 1.0)]:
            frames.append(pd.DataFrame({
                'Location': 'United States of America' if iso3 == 'USA' else 'France',
                'ISO3_code': iso3,
                'Time': year,
                'AgeGrpStart': np.arange(101),
                'Sx': gompertz_survival(scale * scale_shift),
            }))
    return pd.concat(frames, ignore_index=True)


@pytest.fixture
def life_table_csv(tmp_path, raw_life_table):
    path = tmp_path / "life_table.csv"
    raw_life_table.to_csv(path, index=False)
    return path
