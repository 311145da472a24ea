#!/usr/bin/env python3
"""
Life-table preprocessing.

Reads a UN World Population Prospects complete (single-age) life table and
reduces it to the survival probabilities used by the valuation model:
one row per (year, age) for a single population and the two reference years.

Input columns used:
    Time         calendar year
    ISO3_code    country code
    AgeGrpStart  exact age (100 is the open-ended 100+ group)
    Sx           annual survival probability

Output columns:
    year, age, s_a
"""

from pathlib import Path
from typing import Iterable, Optional, Union

import numpy as np
import pandas as pd

from nonmarginal_vsl.config import ModelConfig
from nonmarginal_vsl.errors import ConfigurationError, InputDataError
from nonmarginal_vsl.paths import DATA_DIR

REQUIRED_COLUMNS = ['Time', 'ISO3_code', 'AgeGrpStart', 'Sx']
COLUMN_NAMES = {'Time': 'year', 'AgeGrpStart': 'age', 'Sx': 's_a'}

MAX_AGE = 100
AGES = np.arange(MAX_AGE + 1)


class LifeTableProcessor:
    """Load, filter and validate period life-table survival probabilities."""

    def __init__(self, config: Optional[ModelConfig] = None, data_dir: Union[str, Path] = DATA_DIR):
        if config is None:
            config = ModelConfig()
        self.config = config
        self.data_dir = Path(data_dir)

    @staticmethod
    def load_life_table(path: Union[str, Path]) -> pd.DataFrame:
        """
        Read the raw life-table CSV.

        Raises:
            FileNotFoundError: If the file does not exist
            InputDataError: If a required column is missing
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Life table file {path} not found")

        raw = pd.read_csv(path, low_memory=False)
        missing_cols = [col for col in REQUIRED_COLUMNS if col not in raw.columns]
        if missing_cols:
            raise InputDataError(f"{path.name} missing required columns: {missing_cols}")
        return raw

    @staticmethod
    def filter_life_table(raw: pd.DataFrame, iso3_code: str, years: Iterable[int]) -> pd.DataFrame:
        """
        Keep one population and the requested years, renamed to (year, age, s_a).

        Ages above the terminal bucket are dropped: the 100+ group is already
        carried by the row at age 100.
        """
        years = list(years)
        df = raw.loc[(raw['ISO3_code'] == iso3_code) & (raw['Time'].isin(years)),
                     REQUIRED_COLUMNS].copy()
        df = df.rename(columns=COLUMN_NAMES).drop(columns='ISO3_code')
        df['year'] = df['year'].astype(int)
        df['age'] = df['age'].astype(int)
        df['s_a'] = df['s_a'].astype(float)
        df = df.loc[df['age'] <= MAX_AGE]

        # Identical duplicates are harmless, conflicting ones are not
        df = df.drop_duplicates()
        conflicts = df.loc[df.duplicated(['year', 'age'], keep=False)]
        if not conflicts.empty:
            pairs = sorted({(int(y), int(a)) for y, a in zip(conflicts['year'], conflicts['age'])})
            raise InputDataError(f"Conflicting survival probabilities for (year, age): {pairs}")

        return df.sort_values(['year', 'age']).reset_index(drop=True)

    @staticmethod
    def validate_coverage(df: pd.DataFrame, years: Iterable[int]) -> None:
        """
        Check that every requested year covers ages 0..100 with s_a in (0, 1].

        Raises:
            ConfigurationError: If a requested year is absent from the data
            InputDataError: If a year has missing ages or invalid probabilities
        """
        for year in years:
            year_df = df.loc[df['year'] == year]
            if year_df.empty:
                raise ConfigurationError(f"Year {year} not found in the filtered life table")

            missing_ages = sorted(set(AGES.tolist()) - set(year_df['age'].tolist()))
            if missing_ages:
                raise InputDataError(f"Year {year} is missing ages {missing_ages}")

            s_a = year_df['s_a']
            invalid = year_df.loc[s_a.isna() | (s_a <= 0) | (s_a > 1), 'age'].tolist()
            if invalid:
                raise InputDataError(
                    f"Year {year} has survival probabilities outside (0, 1] at ages {invalid}"
                )

    def process(self, path: Optional[Union[str, Path]] = None) -> pd.DataFrame:
        """
        Load, filter and validate the configured population and years.

        Args:
            path: Life-table CSV. Defaults to the configured file in the data directory.

        Returns:
            DataFrame with columns year, age, s_a sorted by year then age
        """
        data = self.config.data
        if path is None:
            path = self.data_dir / data.input_file
        print(f"Processing life table from {path}...")

        raw = self.load_life_table(path)
        if data.iso3_code not in set(raw['ISO3_code'].dropna()):
            raise ConfigurationError(f"Country code {data.iso3_code} not found in {Path(path).name}")

        df = self.filter_life_table(raw, data.iso3_code, data.years)
        self.validate_coverage(df, data.years)

        print(f"Processed life table: {data.iso3_code}, years {data.pre_year} and "
              f"{data.base_year}, {len(df)} records")
        return df
