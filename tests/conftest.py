"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4

import pytest

from nutrition_dashboard.config import Settings
from nutrition_dashboard.containers import AppContainer
from nutrition_dashboard.domain.logs import FoodLogEntry, FoodLogRecord
from nutrition_dashboard.services.dashboard import DashboardService
from nutrition_dashboard.services.food_logs import FoodLogRepository, FoodLogService
from nutrition_dashboard.services.scans import (
    FavoriteRepository,
    ScanService,
    VisionClient,
)
from nutrition_dashboard.services.user_settings import (
    UserSettingsRepository,
    UserSettingsService,
)

SUPABASE_TEST_KEY = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
    "eyJyb2xlIjoic2VydmljZV9yb2xlIn0."
    "c2lnbmF0dXJl"
)


def millis(moment: datetime) -> int:
    """Return epoch milliseconds for an aware datetime."""
    return round(moment.timestamp() * 1000)


def make_record(moment: datetime, **values: float) -> FoodLogRecord:
    """Build a food log record logged at moment."""
    return FoodLogRecord(id=str(uuid4()), timestamp_millis=millis(moment), **values)


@dataclass
class InMemoryFoodLogRepository(FoodLogRepository):
    """In-memory food log repository for tests."""

    logs: dict[UUID, list[FoodLogRecord]] = field(default_factory=dict)

    def list_logs(self, user_id: UUID) -> list[FoodLogRecord]:
        return list(self.logs.get(user_id, []))

    def get_log(self, user_id: UUID, log_id: str) -> FoodLogRecord | None:
        for log in self.logs.get(user_id, []):
            if log.id == log_id:
                return log
        return None

    def create_log(
        self, user_id: UUID, timestamp_millis: int, entry: FoodLogEntry
    ) -> FoodLogRecord:
        record = _record_from_entry(str(uuid4()), timestamp_millis, entry)
        self.logs.setdefault(user_id, []).append(record)
        return record

    def update_log(self, user_id: UUID, log_id: str, entry: FoodLogEntry) -> None:
        logs = self.logs.get(user_id, [])
        for index, log in enumerate(logs):
            if log.id == log_id:
                logs[index] = _record_from_entry(log_id, log.timestamp_millis, entry)

    def delete_log(self, user_id: UUID, log_id: str) -> None:
        self.logs[user_id] = [
            log for log in self.logs.get(user_id, []) if log.id != log_id
        ]

    def add(self, user_id: UUID, *records: FoodLogRecord) -> None:
        self.logs.setdefault(user_id, []).extend(records)


def _record_from_entry(
    log_id: str, timestamp_millis: int | None, entry: FoodLogEntry
) -> FoodLogRecord:
    return FoodLogRecord(
        id=log_id,
        timestamp_millis=timestamp_millis,
        calories=entry.calories or 0.0,
        protein_g=entry.protein_g or 0.0,
        carbs_g=entry.carbs_g or 0.0,
        fat_g=entry.fat_g or 0.0,
        fiber_g=entry.fiber_g or 0.0,
        sugar_g=entry.sugar_g,
        product_name=entry.product_name,
        notes=entry.notes,
        portions=entry.portions,
        health_score=entry.health_score,
        image_uri=entry.image_uri,
    )


@dataclass
class InMemoryUserSettingsRepository(UserSettingsRepository):
    """In-memory user settings repository for tests."""

    rows: dict[UUID, dict[str, object]] = field(default_factory=dict)

    def get_settings(self, user_id: UUID) -> dict[str, object] | None:
        row = self.rows.get(user_id)
        return dict(row) if row is not None else None

    def update_settings(self, user_id: UUID, values: dict[str, object]) -> None:
        self.rows.setdefault(user_id, {}).update(values)


@dataclass
class InMemoryFavoriteRepository(FavoriteRepository):
    """In-memory favourites repository for tests."""

    favorites: dict[tuple[UUID, str], dict[str, object]] = field(
        default_factory=dict
    )

    def get_favorite(self, user_id: UUID, key: str) -> dict[str, object] | None:
        return self.favorites.get((user_id, key))

    def add_favorite(self, user_id: UUID, key: str, payload: dict[str, object]) -> None:
        self.favorites[(user_id, key)] = payload

    def remove_favorite(self, user_id: UUID, key: str) -> None:
        self.favorites.pop((user_id, key), None)


@dataclass
class FakeVisionClient(VisionClient):
    """Fake vision client returning a fixed payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "product_name": "Greek Yogurt",
            "calories": 240,
            "protein_g": 10.4,
            "carbs_g": 18,
            "fat_g": 12.5,
            "fiber_g": None,
            "sugar_g": 14,
            "health_score": 72,
            "vegetarian_status": "Vegetarian",
            "score_explanation": "High protein, moderate sugar.",
            "verdict": "Good snack choice.",
            "alternatives": ["Skyr: more protein, less sugar"],
        }
    )
    calls: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None

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
        self.calls.append(
            {"model": model, "image_data_url": image_data_url, "prompt": prompt}
        )
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=SUPABASE_TEST_KEY,
        api_token="api-token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def log_repository() -> InMemoryFoodLogRepository:
    return InMemoryFoodLogRepository()


@pytest.fixture
def settings_repository() -> InMemoryUserSettingsRepository:
    return InMemoryUserSettingsRepository()


@pytest.fixture
def favorite_repository() -> InMemoryFavoriteRepository:
    return InMemoryFavoriteRepository()


@pytest.fixture
def vision_client() -> FakeVisionClient:
    return FakeVisionClient()


@pytest.fixture
def scan_service(
    vision_client: FakeVisionClient,
    log_repository: InMemoryFoodLogRepository,
    favorite_repository: InMemoryFavoriteRepository,
) -> ScanService:
    return ScanService(
        client=vision_client,
        log_repository=log_repository,
        favorite_repository=favorite_repository,
        model="gpt-5.2",
        reasoning_effort="medium",
        store=False,
    )


@pytest.fixture
def container(
    settings: Settings,
    log_repository: InMemoryFoodLogRepository,
    settings_repository: InMemoryUserSettingsRepository,
    scan_service: ScanService,
) -> AppContainer:
    user_settings_service = UserSettingsService(settings_repository)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        user_settings_service=user_settings_service,
        food_log_service=FoodLogService(log_repository),
        dashboard_service=DashboardService(
            log_repository=log_repository,
            settings_service=user_settings_service,
        ),
        scan_service=scan_service,
        close_resources=close_resources,
    )

