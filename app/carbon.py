"""
Simplified Scope 1 / Scope 2 carbon footprint calculator.

Emission factors are kg CO2e per physical unit. Electricity uses the
Taiwan Power Company grid average.
"""

import math
from dataclasses import dataclass, field

SCOPE1_FACTORS = {
    "naturalGas": 2.02,   # kg CO2e / m³
    "gasoline": 2.31,     # kg CO2e / L
    "diesel": 2.68,       # kg CO2e / L
    "lpg": 1.51,          # kg CO2e / L
}

SCOPE2_FACTORS = {
    "electricity": 0.509,  # kg CO2e / kWh
}

UNIT = "kg CO2e"


@dataclass(frozen=True)
class CarbonFootprint:
    scope1: float
    scope2: float
    total: float
    breakdown: dict = field(default_factory=dict)
    unit: str = UNIT

    def to_dict(self):
        return {
            "scope1": self.scope1,
            "scope2": self.scope2,
            "total": self.total,
            "breakdown": dict(self.breakdown),
            "unit": self.unit,
        }


def parse_quantity(value):
    """Non-negative float, or 0 for absent / non-numeric input."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value) or math.isinf(value) or value < 0:
        return 0.0
    return value


def compute_footprint(inputs):
    """Scope 1 (fuels) and Scope 2 (electricity) emissions in kg CO2e.

    Sums are kept unrounded; only the returned values are rounded to 2 dp.
    """
    inputs = inputs or {}
    emissions = {}
    for source, factor in {**SCOPE1_FACTORS, **SCOPE2_FACTORS}.items():
        emissions[source] = parse_quantity(inputs.get(source)) * factor

    scope1 = sum(emissions[s] for s in SCOPE1_FACTORS)
    scope2 = sum(emissions[s] for s in SCOPE2_FACTORS)
    total = scope1 + scope2

    return CarbonFootprint(
        scope1=round(scope1, 2),
        scope2=round(scope2, 2),
        total=round(total, 2),
        breakdown={s: round(v, 2) for s, v in emissions.items()},
    )
