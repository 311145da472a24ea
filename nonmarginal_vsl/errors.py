#!/usr/bin/env python3
"""Error taxonomy for the valuation pipeline.

Every error is fatal: the pipeline is a single offline batch computation, so
an error aborts the run with a message naming the failing year, age or model.
All classes derive from ``ValueError`` so callers that already guard model
code with ``except ValueError`` keep working.
"""

from typing import Optional


class ValuationError(ValueError):
    """Base class for all pipeline errors."""


class ConfigurationError(ValuationError):
    """A configured parameter is invalid or absent from the input data."""


class DivergenceError(ValuationError):
    """The terminal-age discounted life expectancy does not converge."""


class InputDataError(ValuationError):
    """Life-table input is incomplete or out of range."""


class DomainError(ValuationError):
    """A valuation formula was evaluated outside its domain.

    Attributes:
        age: Focal age being valued (None when not known at the raise site)
        delta_l: Increase in discounted life expectancy
        rho: Relative risk aversion of the utility model
    """

    def __init__(self, message: str, age: Optional[int] = None,
                 delta_l: Optional[float] = None, rho: Optional[float] = None):
        self.age = age
        self.delta_l = delta_l
        self.rho = rho
        super().__init__(message)

    def with_age(self, age: int) -> "DomainError":
        """Return a copy of the error that also names the focal age."""
        return DomainError(
            f"age {age}: {self.args[0]}", age=age, delta_l=self.delta_l, rho=self.rho
        )
