"""Per-serving nutrient values."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PortionValues:
    """Nutrient values for one portion; None means unknown."""

    calories: float | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None
    fiber_g: float | None = None
    sugar_g: float | None = None
