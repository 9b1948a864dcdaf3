"""Supabase repository for food logs."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from nutrition_dashboard.domain.logs import FoodLogEntry, FoodLogRecord
from nutrition_dashboard.services.aggregation import coerce_number
from nutrition_dashboard.services.food_logs import FoodLogRepository

_COLUMNS = (
    "id, timestamp_ms, product_name, calories, protein, carbohydrates, "
    "total_fat, fiber, sugar, portions, notes, health_score, image_uri"
)


@dataclass
class SupabaseFoodLogRepository(FoodLogRepository):
    """Supabase implementation for food log persistence."""

    client: Client

    def list_logs(self, user_id: UUID) -> list[FoodLogRecord]:
        """Return all food logs for a user."""
        response = (
            self.client.table("food_logs")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .order("timestamp_ms", desc=False)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def get_log(self, user_id: UUID, log_id: str) -> FoodLogRecord | None:
        """Return a food log by id."""
        response = (
            self.client.table("food_logs")
            .select(_COLUMNS)
            .eq("user_id", str(user_id))
            .eq("id", log_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_row(response.data[0])

    def create_log(
        self, user_id: UUID, timestamp_millis: int, entry: FoodLogEntry
    ) -> FoodLogRecord:
        """Insert a food log row and return it."""
        payload = {
            "user_id": str(user_id),
            "timestamp_ms": timestamp_millis,
            **_entry_payload(entry),
        }
        response = self.client.table("food_logs").insert(payload).execute()
        if not response.data:
            raise RuntimeError("Failed to create food log")
        return _parse_row(response.data[0])

    def update_log(self, user_id: UUID, log_id: str, entry: FoodLogEntry) -> None:
        """Overwrite the values of a food log row."""
        self.client.table("food_logs").update(_entry_payload(entry)).eq(
            "user_id", str(user_id)
        ).eq("id", log_id).execute()

    def delete_log(self, user_id: UUID, log_id: str) -> None:
        """Delete a food log row."""
        self.client.table("food_logs").delete().eq("user_id", str(user_id)).eq(
            "id", log_id
        ).execute()


def _entry_payload(entry: FoodLogEntry) -> dict[str, object]:
    return {
        "product_name": entry.product_name,
        "calories": entry.calories,
        "protein": entry.protein_g,
        "carbohydrates": entry.carbs_g,
        "total_fat": entry.fat_g,
        "fiber": entry.fiber_g,
        "sugar": entry.sugar_g,
        "portions": entry.portions,
        "notes": entry.notes,
        "health_score": entry.health_score,
        "image_uri": entry.image_uri,
    }


def _parse_row(row: dict[str, object]) -> FoodLogRecord:
    timestamp_raw = row.get("timestamp_ms")
    timestamp = (
        int(coerce_number(timestamp_raw)) if timestamp_raw is not None else None
    )
    sugar_raw = row.get("sugar")
    health_score_raw = row.get("health_score")
    portions = coerce_number(row.get("portions"))
    return FoodLogRecord(
        id=str(row.get("id", "")),
        timestamp_millis=timestamp,
        calories=coerce_number(row.get("calories")),
        protein_g=coerce_number(row.get("protein")),
        carbs_g=coerce_number(row.get("carbohydrates")),
        fat_g=coerce_number(row.get("total_fat")),
        fiber_g=coerce_number(row.get("fiber")),
        sugar_g=coerce_number(sugar_raw) if sugar_raw is not None else None,
        product_name=_optional_str(row.get("product_name")),
        notes=_optional_str(row.get("notes")),
        portions=portions if portions > 0 else 1.0,
        health_score=(
            int(coerce_number(health_score_raw))
            if health_score_raw is not None
            else None
        ),
        image_uri=_optional_str(row.get("image_uri")),
    )


def _optional_str(raw: object) -> str | None:
    if isinstance(raw, str) and raw:
        return raw
    return None
