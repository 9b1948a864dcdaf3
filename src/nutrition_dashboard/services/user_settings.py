"""User settings service."""

from dataclasses import dataclass
from datetime import date
from typing import Protocol
from uuid import UUID

from nutrition_dashboard.domain.scans import ScanProfile
from nutrition_dashboard.domain.targets import DEFAULT_TARGET, DailyTarget, UserProfile
from nutrition_dashboard.services.aggregation import coerce_number, resolve_target

DIET_TYPES = ("Vegetarian", "Non-Vegetarian", "Vegan", "Eggetarian")
REMINDER_KEYS = ("water", "track", "protein")
DEFAULT_GOAL = "Muscle Gain"
WEEKLY_CALORIES_FALLBACK = 2000


class UserSettingsRepository(Protocol):
    """Persistence interface for user settings."""

    def get_settings(self, user_id: UUID) -> dict[str, object] | None:
        """Return the stored settings row for a user, if any."""

    def update_settings(self, user_id: UUID, values: dict[str, object]) -> None:
        """Merge values into the user's settings row."""


@dataclass
class UserSettingsService:
    """Service for user settings and daily targets."""

    repository: UserSettingsRepository
    default_timezone: str = "UTC"

    def get_timezone(self, user_id: UUID) -> str:
        """Return the user timezone or the default if unset."""
        timezone = self._settings(user_id).get("timezone")
        if isinstance(timezone, str) and timezone:
            return timezone
        return self.default_timezone

    def get_targets(self, user_id: UUID) -> DailyTarget:
        """Return stored targets with defaults for anything missing."""
        return _parse_targets(self._settings(user_id).get("calculated_limits"))

    def get_weekly_calories_target(self, user_id: UUID) -> float:
        """Return the calorie target used for the weekly completion bars.

        A stored but unusable value falls back to 2000. Without a stored value
        the daily default applies.
        """
        limits = self._settings(user_id).get("calculated_limits")
        if not isinstance(limits, dict) or limits.get("calories") is None:
            return DEFAULT_TARGET.calories
        return resolve_target(limits["calories"], WEEKLY_CALORIES_FALLBACK)

    def get_profile(self, user_id: UUID) -> UserProfile:
        """Return profile fields with defaults applied."""
        settings = self._settings(user_id)
        reminders = dict.fromkeys(REMINDER_KEYS, True)
        stored_reminders = settings.get("reminders")
        if isinstance(stored_reminders, dict):
            reminders.update(
                {key: bool(value) for key, value in stored_reminders.items()}
            )
        age = coerce_number(settings.get("age"))
        return UserProfile(
            username=_optional_str(settings.get("username")),
            age=int(age) if age > 0 else None,
            dob=_parse_date(settings.get("dob")),
            goal=_optional_str(settings.get("goal")) or DEFAULT_GOAL,
            diets=_parse_diets(settings.get("diet")),
            reminders=reminders,
            profile_image=_optional_str(settings.get("profile_image")),
            targets=_parse_targets(settings.get("calculated_limits")),
        )

    def get_scan_profile(self, user_id: UUID) -> ScanProfile:
        """Return the diet context used when analyzing scans."""
        settings = self.repository.get_settings(user_id)
        if not settings:
            return ScanProfile()
        diets = _parse_diets(settings.get("diet"))
        return ScanProfile(
            diet=", ".join(diets) if diets else ScanProfile.diet,
            goal=_optional_str(settings.get("goal")) or ScanProfile.goal,
        )

    def save_targets(  # noqa: PLR0913
        self,
        user_id: UUID,
        *,
        calories: int,
        protein: int,
        water: float,
        age: int | None = None,
        diets: list[str] | None = None,
    ) -> DailyTarget:
        """Persist edited targets, keeping other stored limits."""
        limits = self._settings(user_id).get("calculated_limits")
        merged = dict(limits) if isinstance(limits, dict) else {}
        merged.update({"calories": calories, "protein": protein, "water": water})
        values: dict[str, object] = {"calculated_limits": merged}
        if age is not None:
            values["age"] = age
        if diets is not None:
            values["diet"] = [_validate_diet(diet) for diet in diets]
        self.repository.update_settings(user_id, values)
        return _parse_targets(merged)

    def toggle_diet(self, user_id: UUID, diet: str) -> list[str]:
        """Add or remove a diet type and return the new selection."""
        _validate_diet(diet)
        diets = list(_parse_diets(self._settings(user_id).get("diet")))
        if diet in diets:
            diets = [item for item in diets if item != diet]
        else:
            diets.append(diet)
        self.repository.update_settings(user_id, {"diet": diets})
        return diets

    def toggle_reminder(self, user_id: UUID, key: str) -> dict[str, bool]:
        """Flip a reminder flag and return all reminder flags."""
        if key not in REMINDER_KEYS:
            raise ValueError(f"Unknown reminder: {key}")
        reminders = self.get_profile(user_id).reminders
        reminders[key] = not reminders[key]
        self.repository.update_settings(user_id, {"reminders": reminders})
        return reminders

    def _settings(self, user_id: UUID) -> dict[str, object]:
        return self.repository.get_settings(user_id) or {}


def _parse_targets(raw: object) -> DailyTarget:
    limits = raw if isinstance(raw, dict) else {}
    return DailyTarget(
        calories=resolve_target(limits.get("calories"), DEFAULT_TARGET.calories),
        protein_g=resolve_target(limits.get("protein"), DEFAULT_TARGET.protein_g),
        carbs_g=resolve_target(limits.get("carbohydrates"), DEFAULT_TARGET.carbs_g),
        fat_g=resolve_target(limits.get("fat"), DEFAULT_TARGET.fat_g),
        fiber_g=resolve_target(limits.get("fiber"), DEFAULT_TARGET.fiber_g),
        water_l=resolve_target(limits.get("water"), DEFAULT_TARGET.water_l),
    )


def _parse_diets(raw: object) -> tuple[str, ...]:
    if isinstance(raw, str):
        return (raw,) if raw else ()
    if isinstance(raw, list):
        return tuple(str(item) for item in raw if item)
    return ()


def _parse_date(raw: object) -> date | None:
    if not isinstance(raw, str) or not raw:
        return None
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        return None


def _optional_str(raw: object) -> str | None:
    if isinstance(raw, str) and raw:
        return raw
    return None


def _validate_diet(diet: str) -> str:
    if diet not in DIET_TYPES:
        raise ValueError(f"Unknown diet type: {diet}")
    return diet
