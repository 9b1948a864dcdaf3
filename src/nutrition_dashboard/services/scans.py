"""Label scan analysis and saving scans to the food log."""

import base64
import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from nutrition_dashboard.domain.logs import FoodLogEntry, FoodLogRecord
from nutrition_dashboard.domain.scans import ScanAnalysis, ScanProfile
from nutrition_dashboard.services.food_logs import FoodLogRepository, LogNotFoundError
from nutrition_dashboard.services.portions import (
    adjust_portion,
    apply_portion_multiplier,
    favorite_key,
)

logger = logging.getLogger(__name__)

_NULLABLE_NUMBER = {"anyOf": [{"type": "number", "minimum": 0}, {"type": "null"}]}
_NULLABLE_STRING = {"anyOf": [{"type": "string"}, {"type": "null"}]}

SCAN_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "product_name": _NULLABLE_STRING,
        "calories": _NULLABLE_NUMBER,
        "protein_g": _NULLABLE_NUMBER,
        "carbs_g": _NULLABLE_NUMBER,
        "fat_g": _NULLABLE_NUMBER,
        "fiber_g": _NULLABLE_NUMBER,
        "sugar_g": _NULLABLE_NUMBER,
        "health_score": {"type": "integer", "minimum": 0, "maximum": 100},
        "vegetarian_status": _NULLABLE_STRING,
        "score_explanation": _NULLABLE_STRING,
        "verdict": _NULLABLE_STRING,
        "alternatives": {"type": "array", "items": {"type": "string"}},
    },
    "required": [
        "product_name",
        "calories",
        "protein_g",
        "carbs_g",
        "fat_g",
        "fiber_g",
        "sugar_g",
        "health_score",
        "vegetarian_status",
        "score_explanation",
        "verdict",
        "alternatives",
    ],
    "additionalProperties": False,
}


class VisionClient(Protocol):
    """Interface for LLM label analysis."""

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Return structured analysis data."""


class FavoriteRepository(Protocol):
    """Persistence interface for favourite products."""

    def get_favorite(self, user_id: UUID, key: str) -> dict[str, object] | None:
        """Return a favourite by key, if present."""

    def add_favorite(self, user_id: UUID, key: str, payload: dict[str, object]) -> None:
        """Store a favourite."""

    def remove_favorite(self, user_id: UUID, key: str) -> None:
        """Remove a favourite."""


class ScanValidationError(ValueError):
    """Raised when a scan can't be saved as entered."""


@dataclass
class ScanService:
    """Service that analyzes label photos and logs the result."""

    client: VisionClient
    log_repository: FoodLogRepository
    favorite_repository: FavoriteRepository
    model: str
    reasoning_effort: str | None
    store: bool

    async def analyze(self, image_bytes: bytes, profile: ScanProfile) -> ScanAnalysis:
        """Analyze a label photo for one serving of the product."""
        prompt = (
            "Read the nutrition label or identify the food in the image. "
            "Return per-serving calories and macros in grams, using null for "
            "anything not visible. Rate healthiness 0-100 for a person "
            f"following a {profile.diet} diet with the goal '{profile.goal}', "
            "explain the score briefly, and suggest healthier alternatives "
            "as 'Name: reason'."
        )
        raw = await self.client.extract(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=_to_data_url(image_bytes),
            schema=SCAN_SCHEMA,
            prompt=prompt,
        )
        return ScanAnalysis.model_validate(raw)

    def save_scan(  # noqa: PLR0913
        self,
        user_id: UUID,
        analysis: ScanAnalysis,
        *,
        product_name: str,
        multiplier: float,
        notes: str = "",
        image_uri: str | None = None,
        log_id: str | None = None,
    ) -> FoodLogRecord:
        """Save scaled values as a new log, or overwrite log_id when editing."""
        name = product_name.strip()
        if not name:
            raise ScanValidationError("Please enter a product name")
        # Stored portions are always a value the stepper could produce.
        portions = adjust_portion(multiplier, 0.0)
        scaled = apply_portion_multiplier(analysis.base_values(), portions)
        entry = FoodLogEntry(
            product_name=name,
            calories=scaled.calories,
            protein_g=scaled.protein_g,
            carbs_g=scaled.carbs_g,
            fat_g=scaled.fat_g,
            fiber_g=scaled.fiber_g,
            sugar_g=scaled.sugar_g,
            portions=portions,
            notes=notes,
            health_score=analysis.health_score,
            image_uri=image_uri,
        )
        if log_id is None:
            record = self.log_repository.create_log(
                user_id, _now_millis(), entry
            )
            logger.info(
                "Saved food log",
                extra={"user_id": str(user_id), "log_id": record.id},
            )
            return record

        if self.log_repository.get_log(user_id, log_id) is None:
            raise LogNotFoundError(log_id)
        self.log_repository.update_log(user_id, log_id, entry)
        logger.info(
            "Updated food log", extra={"user_id": str(user_id), "log_id": log_id}
        )
        updated = self.log_repository.get_log(user_id, log_id)
        if updated is None:
            raise LogNotFoundError(log_id)
        return updated

    def is_favorite(self, user_id: UUID, product_name: str) -> bool:
        """Return True when the product is saved as a favourite."""
        key = favorite_key(product_name)
        if not key:
            return False
        return self.favorite_repository.get_favorite(user_id, key) is not None

    def toggle_favorite(
        self, user_id: UUID, product_name: str, analysis: ScanAnalysis
    ) -> bool:
        """Add or remove a favourite and return the new state."""
        key = favorite_key(product_name.strip())
        if not key:
            raise ScanValidationError("Please enter a product name")
        if self.favorite_repository.get_favorite(user_id, key) is not None:
            self.favorite_repository.remove_favorite(user_id, key)
            return False
        self.favorite_repository.add_favorite(
            user_id,
            key,
            {
                "product_name": product_name.strip(),
                "calories": analysis.calories,
                "protein": analysis.protein_g,
            },
        )
        return True


def split_alternative(text: str) -> tuple[str, str]:
    """Split a 'Name: reason' suggestion into its parts."""
    name, _, reason = text.partition(":")
    return name.strip(), reason.strip()


def _now_millis() -> int:
    return round(datetime.now(tz=UTC).timestamp() * 1000)


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    """Infer a basic image MIME type from file signatures."""
    if image_bytes.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
