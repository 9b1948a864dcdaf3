"""Daily targets and user profile models."""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class DailyTarget:
    """Per-nutrient daily goals used as progress denominators."""

    calories: float = 2500
    protein_g: float = 120
    carbs_g: float = 300
    fat_g: float = 80
    fiber_g: float = 30
    water_l: float = 3.0


DEFAULT_TARGET = DailyTarget()


@dataclass(frozen=True)
class UserProfile:
    """Profile fields shown on the profile screen."""

    username: str | None
    age: int | None
    dob: date | None
    goal: str
    diets: tuple[str, ...]
    reminders: dict[str, bool]
    profile_image: str | None
    targets: DailyTarget = field(default_factory=DailyTarget)

    def display_age(self, today: date) -> int | None:
        """Return the age derived from date of birth, else the stored age."""
        if self.dob is not None:
            return calculate_age(self.dob, today)
        return self.age


def calculate_age(dob: date, today: date) -> int:
    """Return completed years between dob and today."""
    age = today.year - dob.year
    if (today.month, today.day) < (dob.month, dob.day):
        age -= 1
    return age
