"""Daily and weekly nutrition aggregation over food log records.

Every function here is pure: callers pass a fresh snapshot of records on each
screen load and the totals are recomputed from scratch.
"""

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from decimal import ROUND_HALF_UP, Decimal

from nutrition_dashboard.domain.summaries import (
    DaySummary,
    NutrientTotals,
    ProgressTier,
    WeeklyCompletion,
    WeekSummary,
)

WEEK_DAYS = 7
MET_PERCENT = 100
PARTIAL_HIGH_PERCENT = 50
ON_A_ROLL_STREAK = 3
DEDICATED_ACTIVE_DAYS = 5
HABIT_LOG_COUNT = 10

_WHOLE = Decimal(1)
_TENTH = Decimal("0.1")

# Indexed Sunday=0. Sunday and Saturday share "S".
DAY_LABELS = ("S", "M", "T", "W", "T", "F", "S")

# Attribute name first, then the keys used by raw log store rows.
_TIMESTAMP_KEYS = ("timestamp_millis", "timestamp", "timestamp_ms")
_NUTRIENT_KEYS: dict[str, tuple[str, ...]] = {
    "calories": ("calories",),
    "protein_g": ("protein_g", "protein"),
    "carbs_g": ("carbs_g", "carbohydrates"),
    "fat_g": ("fat_g", "totalFat", "total_fat"),
    "fiber_g": ("fiber_g", "fiber"),
}


def coerce_number(value: object) -> float:
    """Return value as a finite float, or 0.0 when it can't be parsed."""
    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, int | float | Decimal):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(_WHOLE, rounding=ROUND_HALF_UP))


def round_tenths(value: float) -> float:
    """Round to one decimal place, halves away from zero."""
    return float(Decimal(str(value)).quantize(_TENTH, rounding=ROUND_HALF_UP))


def day_window(day: date, tz: tzinfo) -> tuple[int, int]:
    """Return the [start, end) epoch milliseconds of a local calendar day."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return _to_millis(start), _to_millis(end)


def summarize_day(
    records: Iterable[object],
    day_start: int,
    day_end: int,
    *,
    tz: tzinfo = UTC,
) -> DaySummary:
    """Sum the nutrients of records whose timestamp lies in [day_start, day_end).

    Malformed nutrient values contribute zero. Calories are rounded to an
    integer and the other totals to one decimal place.
    """
    if day_end <= day_start:
        raise ValueError(
            f"day_end ({day_end}) must be greater than day_start ({day_start})"
        )
    sums = dict.fromkeys(_NUTRIENT_KEYS, 0.0)
    count = 0
    for record in records:
        timestamp = _timestamp_of(record)
        if timestamp is None or not day_start <= timestamp < day_end:
            continue
        count += 1
        for name, keys in _NUTRIENT_KEYS.items():
            sums[name] += coerce_number(_field_of(record, keys))

    day = datetime.fromtimestamp(day_start / 1000, tz=tz).date()
    return DaySummary(
        date_key=day,
        label=day_label(day),
        display_date=f"{day:%b} {day.day}",
        totals=NutrientTotals(
            calories=round_half_up(sums["calories"]),
            protein_g=round_tenths(sums["protein_g"]),
            carbs_g=round_tenths(sums["carbs_g"]),
            fat_g=round_tenths(sums["fat_g"]),
            fiber_g=round_tenths(sums["fiber_g"]),
        ),
        record_count=count,
    )


def summarize_week(
    records: Iterable[object],
    reference_date: date,
    tz: tzinfo = UTC,
    calories_target: float | None = None,
) -> WeekSummary:
    """Summarize the seven local days ending at reference_date, oldest first."""
    snapshot = list(records)
    days = []
    for offset in range(WEEK_DAYS - 1, -1, -1):
        day = reference_date - timedelta(days=offset)
        start, end = day_window(day, tz)
        summary = summarize_day(snapshot, start, end, tz=tz)
        if offset == 0:
            summary = replace(summary, is_reference_day=True)
        days.append(summary)

    completion = None
    if calories_target is not None:
        completion = weekly_completion_stats(days, calories_target)
    return WeekSummary(
        days=tuple(days),
        total_log_count=sum(day.record_count for day in days),
        completion=completion,
    )


def day_label(day: date) -> str:
    """Return the one-letter weekday label for a date."""
    return DAY_LABELS[(day.weekday() + 1) % WEEK_DAYS]


def progress_percent(current: float, target: float) -> float:
    """Return current as a percent of target, capped at 100."""
    if target <= 0:
        raise ValueError(f"target must be positive, got {target}")
    return min(current / target * 100, MET_PERCENT)


def resolve_target(raw: object, default: float) -> float:
    """Return a usable positive target, falling back to default."""
    value = coerce_number(raw)
    if value <= 0:
        return default
    return value


def bar_color_tier(percent: float) -> ProgressTier:
    """Classify a progress percent into a display tier."""
    if percent >= MET_PERCENT:
        return ProgressTier.MET
    if percent >= PARTIAL_HIGH_PERCENT:
        return ProgressTier.PARTIAL_HIGH
    if percent > 0:
        return ProgressTier.PARTIAL_LOW
    return ProgressTier.NONE


def health_score_from_activity(day_summaries: Sequence[DaySummary]) -> int:
    """Return the share of the week with any logged intake, scaled to 0-100."""
    active_days = sum(1 for day in day_summaries if day.totals.has_intake())
    return round_half_up(active_days / WEEK_DAYS * 100)


def weekly_completion_stats(
    day_summaries: Sequence[DaySummary], calories_target: float
) -> WeeklyCompletion:
    """Return how many days met the calorie target and the average completion."""
    percents = tuple(
        round_half_up(progress_percent(day.totals.calories, calories_target))
        for day in day_summaries
    )
    return WeeklyCompletion(
        percents=percents,
        met_count=sum(1 for percent in percents if percent >= MET_PERCENT),
        average_percent=round_half_up(sum(percents) / WEEK_DAYS),
    )


def current_streak(
    records: Iterable[object], reference_date: date, tz: tzinfo = UTC
) -> int:
    """Return the number of consecutive logged days ending at reference_date.

    A reference day without logs does not break the streak yet; counting then
    starts from the previous day.
    """
    logged_days = set()
    for record in records:
        timestamp = _timestamp_of(record)
        if timestamp is None:
            continue
        logged_days.add(datetime.fromtimestamp(timestamp / 1000, tz=tz).date())

    day = reference_date
    if day not in logged_days:
        day -= timedelta(days=1)
    streak = 0
    while day in logged_days:
        streak += 1
        day -= timedelta(days=1)
    return streak


def weekly_insight(streak: int, week: WeekSummary) -> str:
    """Return the personal insight sentence for the profile screen."""
    active_days = sum(1 for day in week.days if day.totals.has_intake())
    if streak > ON_A_ROLL_STREAK:
        return (
            "You're on a roll! Keep up the consistency to reach your goals faster."
        )
    if active_days >= DEDICATED_ACTIVE_DAYS:
        return (
            "Fantastic dedication! You've been active almost every day this week."
        )
    if week.total_log_count > HABIT_LOG_COUNT:
        return (
            "Great logging habit! Detailed tracking helps identify hidden calories."
        )
    if active_days > 0:
        return "Good start! Try to log your meals consistently for better results."
    return (
        "Your insights will appear here as you track your meals "
        "and build your streak."
    )


def _to_millis(moment: datetime) -> int:
    return round(moment.timestamp() * 1000)


def _field_of(record: object, keys: tuple[str, ...]) -> object:
    if isinstance(record, Mapping):
        for key in keys:
            if key in record:
                return record[key]
        return None
    for key in keys:
        if hasattr(record, key):
            return getattr(record, key)
    return None


def _timestamp_of(record: object) -> int | None:
    raw = _field_of(record, _TIMESTAMP_KEYS)
    if isinstance(raw, bool) or raw is None:
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        try:
            raw = float(raw.strip())
        except ValueError:
            return None
    if isinstance(raw, float) and math.isfinite(raw):
        return int(raw)
    return None
