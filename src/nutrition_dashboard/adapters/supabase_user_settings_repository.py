"""Supabase repository for user settings."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from nutrition_dashboard.services.user_settings import UserSettingsRepository

_COLUMNS = (
    "username, timezone, age, dob, goal, diet, profile_image, "
    "calculated_limits, reminders"
)


@dataclass
class SupabaseUserSettingsRepository(UserSettingsRepository):
    """Supabase implementation for user settings."""

    client: Client

    def get_settings(self, user_id: UUID) -> dict[str, object] | None:
        """Return the stored settings row for a user."""
        response = (
            self.client.table("user_settings")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def update_settings(self, user_id: UUID, values: dict[str, object]) -> None:
        """Upsert values into the user's settings row."""
        self.client.table("user_settings").upsert(
            {
                "user_id": str(user_id),
                **values,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="user_id",
        ).execute()
