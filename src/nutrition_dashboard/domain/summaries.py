"""Aggregated views over food logs."""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class ProgressTier(Enum):
    """Coarse progress band used to pick a bar colour."""

    MET = "met"
    PARTIAL_HIGH = "partial-high"
    PARTIAL_LOW = "partial-low"
    NONE = "none"


@dataclass(frozen=True)
class NutrientTotals:
    """Summed nutrient values for a set of log records."""

    calories: float = 0
    protein_g: float = 0
    carbs_g: float = 0
    fat_g: float = 0
    fiber_g: float = 0

    def has_intake(self) -> bool:
        """Return True when any nutrient total is positive."""
        return any(
            value > 0
            for value in (
                self.calories,
                self.protein_g,
                self.carbs_g,
                self.fat_g,
                self.fiber_g,
            )
        )


@dataclass(frozen=True)
class DaySummary:
    """Totals for one local calendar day."""

    date_key: date
    label: str
    display_date: str
    totals: NutrientTotals
    record_count: int
    is_reference_day: bool = False


@dataclass(frozen=True)
class WeeklyCompletion:
    """Calorie goal completion across a week."""

    percents: tuple[int, ...]
    met_count: int
    average_percent: int


@dataclass(frozen=True)
class WeekSummary:
    """Seven day summaries, oldest first, ending at the reference day."""

    days: tuple[DaySummary, ...]
    total_log_count: int
    completion: WeeklyCompletion | None = None

    @property
    def reference_day(self) -> DaySummary:
        """Return the last (reference) day of the week."""
        return self.days[-1]


@dataclass(frozen=True)
class MacroRing:
    """Progress ring values for a single nutrient."""

    nutrient: str
    current: float
    target: float
    percent: float
    tier: ProgressTier


@dataclass(frozen=True)
class HomeDashboard:
    """Home screen view model."""

    username: str | None
    today: DaySummary
    rings: list[MacroRing]
    streak: int


@dataclass(frozen=True)
class ProfileStats:
    """Profile screen weekly activity view model."""

    week: WeekSummary
    calories_target: float
    health_score: int | None
    streak: int
    insight: str
