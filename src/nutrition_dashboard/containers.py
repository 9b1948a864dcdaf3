"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_dashboard.adapters.openai_vision_client import OpenAIVisionClient
from nutrition_dashboard.adapters.supabase_favorite_repository import (
    SupabaseFavoriteRepository,
)
from nutrition_dashboard.adapters.supabase_food_log_repository import (
    SupabaseFoodLogRepository,
)
from nutrition_dashboard.adapters.supabase_user_settings_repository import (
    SupabaseUserSettingsRepository,
)
from nutrition_dashboard.config import Settings
from nutrition_dashboard.services.dashboard import DashboardService
from nutrition_dashboard.services.food_logs import FoodLogService
from nutrition_dashboard.services.scans import ScanService
from nutrition_dashboard.services.user_settings import UserSettingsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_settings_service: UserSettingsService
    food_log_service: FoodLogService
    dashboard_service: DashboardService
    scan_service: ScanService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_log_repository = SupabaseFoodLogRepository(supabase_client)
    user_settings_repository = SupabaseUserSettingsRepository(supabase_client)
    favorite_repository = SupabaseFavoriteRepository(supabase_client)
    user_settings_service = UserSettingsService(
        user_settings_repository,
        default_timezone=resolved_settings.default_timezone,
    )
    vision_client = OpenAIVisionClient.create(resolved_settings.openai_api_key)
    scan_service = ScanService(
        client=vision_client,
        log_repository=food_log_repository,
        favorite_repository=favorite_repository,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        await vision_client.close()

    return AppContainer(
        settings=resolved_settings,
        user_settings_service=user_settings_service,
        food_log_service=FoodLogService(food_log_repository),
        dashboard_service=DashboardService(
            log_repository=food_log_repository,
            settings_service=user_settings_service,
        ),
        scan_service=scan_service,
        close_resources=close_resources,
    )
