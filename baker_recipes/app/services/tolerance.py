"""Numeric comparison and rounding policy shared by every recipe check."""

import math
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, ConfigDict, Field

from baker_recipes.app.core.config import Settings

# Floats this large carry no fractional digits to round
_EXACT_INTEGER_LIMIT = 2.0**53


class TolerancePolicy(BaseModel):
    relative: float = Field(0.005, ge=0)
    absolute: float = Field(0.01, ge=0)
    decimal_places: int = Field(2, ge=0, le=10)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> "TolerancePolicy":
        return cls(
            relative=settings.recipe_relative_tolerance,
            absolute=settings.recipe_absolute_tolerance,
            decimal_places=settings.recipe_decimal_places,
        )

    def allowed(self, expected: float, actual: float) -> float:
        """Largest discrepancy accepted between ``expected`` and ``actual``."""
        scale = max(abs(expected), abs(actual))
        return max(self.absolute, self.relative * scale)

    def close(self, actual: float, expected: float, slack: float = 0.0) -> bool:
        """``slack`` widens the allowed discrepancy by a known rounding error."""
        if not (math.isfinite(actual) and math.isfinite(expected)):
            return False
        return abs(actual - expected) <= self.allowed(expected, actual) + slack

    def percentage_rounding_slack(self, flour_base_weight: float) -> float:
        """Weight error caused by a percentage rounded to ``decimal_places``."""
        return flour_base_weight * 0.5 * 10 ** -self.decimal_places / 100

    def round(self, value: float) -> float:
        if not math.isfinite(value) or abs(value) >= _EXACT_INTEGER_LIMIT:
            return value
        # Half-up on the decimal repr so 2.675 rounds to 2.68
        quantum = Decimal(1).scaleb(-self.decimal_places)
        return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


DEFAULT_POLICY = TolerancePolicy()
