"""Supabase repository for favourite products."""

from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from supabase import Client

from nutrition_dashboard.services.scans import FavoriteRepository


@dataclass
class SupabaseFavoriteRepository(FavoriteRepository):
    """Supabase implementation for favourites."""

    client: Client

    def get_favorite(self, user_id: UUID, key: str) -> dict[str, object] | None:
        """Return a favourite row by key."""
        response = (
            self.client.table("favorites")
            .select("name_key, product_name, calories, protein")
            .eq("user_id", str(user_id))
            .eq("name_key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def add_favorite(self, user_id: UUID, key: str, payload: dict[str, object]) -> None:
        """Insert a favourite row."""
        self.client.table("favorites").insert(
            {
                "user_id": str(user_id),
                "name_key": key,
                **payload,
                "created_at": datetime.now(tz=UTC).isoformat(),
            }
        ).execute()

    def remove_favorite(self, user_id: UUID, key: str) -> None:
        """Delete a favourite row."""
        self.client.table("favorites").delete().eq("user_id", str(user_id)).eq(
            "name_key", key
        ).execute()
