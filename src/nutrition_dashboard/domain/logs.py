"""Domain models for food log entries."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FoodLogRecord:
    """A logged food entry as read from the log store.

    Nutrient values are per logged entry, already scaled by the portion
    multiplier that was active when the entry was saved.
    """

    id: str
    timestamp_millis: int | None
    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    fiber_g: float = 0.0
    sugar_g: float | None = None
    product_name: str | None = None
    notes: str | None = None
    portions: float = 1.0
    health_score: int | None = None
    image_uri: str | None = None


@dataclass(frozen=True)
class FoodLogEntry:
    """Values written to the log store when a scan is saved or edited."""

    product_name: str
    calories: float | None
    protein_g: float | None
    carbs_g: float | None
    fat_g: float | None
    fiber_g: float | None
    sugar_g: float | None
    portions: float
    notes: str = ""
    health_score: int | None = None
    image_uri: str | None = None
