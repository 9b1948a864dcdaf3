"""Home and profile dashboards computed from the food log."""

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from uuid import UUID
from zoneinfo import ZoneInfo

from nutrition_dashboard.domain.summaries import HomeDashboard, MacroRing, ProfileStats
from nutrition_dashboard.services.aggregation import (
    bar_color_tier,
    current_streak,
    day_window,
    health_score_from_activity,
    progress_percent,
    summarize_day,
    summarize_week,
    weekly_insight,
)
from nutrition_dashboard.services.food_logs import FoodLogRepository
from nutrition_dashboard.services.user_settings import UserSettingsService


@dataclass
class DashboardService:
    """Service that turns a fresh log snapshot into screen view models."""

    log_repository: FoodLogRepository
    settings_service: UserSettingsService

    def get_home(
        self, user_id: UUID, timezone_name: str, now: datetime | None = None
    ) -> HomeDashboard:
        """Return today's totals, progress rings and streak."""
        tz = ZoneInfo(timezone_name)
        today = _local_now(tz, now).date()
        records = self.log_repository.list_logs(user_id)
        start, end = day_window(today, tz)
        summary = summarize_day(records, start, end, tz=tz)
        summary_today = replace(summary, is_reference_day=True)
        targets = self.settings_service.get_targets(user_id)
        profile = self.settings_service.get_profile(user_id)
        totals = summary.totals
        rings = [
            _ring("calories", totals.calories, targets.calories),
            _ring("protein", totals.protein_g, targets.protein_g),
            _ring("carbs", totals.carbs_g, targets.carbs_g),
            _ring("fat", totals.fat_g, targets.fat_g),
            _ring("fiber", totals.fiber_g, targets.fiber_g),
        ]
        return HomeDashboard(
            username=profile.username,
            today=summary_today,
            rings=rings,
            streak=current_streak(records, today, tz),
        )

    def get_profile_stats(
        self, user_id: UUID, timezone_name: str, now: datetime | None = None
    ) -> ProfileStats:
        """Return the trailing week with completion, score and insight."""
        tz = ZoneInfo(timezone_name)
        today = _local_now(tz, now).date()
        records = self.log_repository.list_logs(user_id)
        calories_target = self.settings_service.get_weekly_calories_target(user_id)
        week = summarize_week(records, today, tz, calories_target=calories_target)
        streak = current_streak(records, today, tz)
        active = any(day.totals.has_intake() for day in week.days)
        return ProfileStats(
            week=week,
            calories_target=calories_target,
            health_score=health_score_from_activity(week.days) if active else None,
            streak=streak,
            insight=weekly_insight(streak, week),
        )


def _ring(nutrient: str, current: float, target: float) -> MacroRing:
    percent = progress_percent(current, target)
    return MacroRing(
        nutrient=nutrient,
        current=current,
        target=target,
        percent=percent,
        tier=bar_color_tier(percent),
    )


def _local_now(tz: ZoneInfo, now: datetime | None) -> datetime:
    return (now or datetime.now(tz=UTC)).astimezone(tz)
