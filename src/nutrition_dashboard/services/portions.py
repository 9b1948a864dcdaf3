"""Portion size rules for scanned products."""

import re
from dataclasses import fields

from nutrition_dashboard.domain.portions import PortionValues
from nutrition_dashboard.services.aggregation import round_half_up, round_tenths

MIN_PORTION = 0.5

EXCELLENT_SCORE = 80
GOOD_SCORE = 60
FAIR_SCORE = 40

_FAVORITE_KEY_CHARS = re.compile(r"[.#$\[\]]")


def apply_portion_multiplier(base: PortionValues, multiplier: float) -> PortionValues:
    """Scale per-serving values by a portion multiplier.

    Unknown values stay unknown. Calories round to whole numbers, every other
    nutrient to one decimal place.
    """
    if multiplier <= 0:
        raise ValueError(f"multiplier must be positive, got {multiplier}")
    scaled: dict[str, float | None] = {}
    for item in fields(base):
        value = getattr(base, item.name)
        if value is None:
            scaled[item.name] = None
        elif item.name == "calories":
            scaled[item.name] = round_half_up(value * multiplier)
        else:
            scaled[item.name] = round_tenths(value * multiplier)
    return PortionValues(**scaled)


def adjust_portion(prior: float, delta: float) -> float:
    """Apply a stepper change to the multiplier, never going below half a portion."""
    return max(MIN_PORTION, round_tenths(prior + delta))


def health_score_tier(score: int) -> str:
    """Return the colour band for a product health score."""
    if score >= EXCELLENT_SCORE:
        return "excellent"
    if score >= GOOD_SCORE:
        return "good"
    if score >= FAIR_SCORE:
        return "fair"
    return "poor"


def favorite_key(product_name: str) -> str:
    """Return a store-safe key for a product name."""
    return _FAVORITE_KEY_CHARS.sub("", product_name)
