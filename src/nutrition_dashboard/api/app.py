"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from fastapi import Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder

from nutrition_dashboard.api.request_models import (
    FavoriteToggleRequest,
    PortionScaleRequest,
    SaveLogRequest,
    ScanRequest,
    TargetsUpdate,
)
from nutrition_dashboard.app_logging import configure_logging
from nutrition_dashboard.containers import AppContainer
from nutrition_dashboard.domain.portions import PortionValues
from nutrition_dashboard.services.food_logs import LogNotFoundError
from nutrition_dashboard.services.portions import (
    adjust_portion,
    apply_portion_multiplier,
    health_score_tier,
)
from nutrition_dashboard.services.scans import ScanValidationError, split_alternative

logger = logging.getLogger(__name__)


def _get_container(request: Request) -> AppContainer:
    return request.app.state.container


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    container: AppContainer = Depends(_get_container),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != container.settings.api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    protected = [Depends(require_api_token)]

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/users/{user_id}/home", dependencies=protected)
    async def home(user_id: UUID, request: Request) -> dict[str, object]:
        """Return today's totals and progress rings."""
        state_container: AppContainer = request.app.state.container
        timezone = _user_timezone(state_container, user_id)
        dashboard = state_container.dashboard_service.get_home(user_id, timezone)
        return jsonable_encoder(dashboard)

    @app.get("/users/{user_id}/profile/stats", dependencies=protected)
    async def profile_stats(user_id: UUID, request: Request) -> dict[str, object]:
        """Return the trailing week of activity."""
        state_container: AppContainer = request.app.state.container
        timezone = _user_timezone(state_container, user_id)
        stats = state_container.dashboard_service.get_profile_stats(user_id, timezone)
        return jsonable_encoder(stats)

    @app.get("/users/{user_id}/settings", dependencies=protected)
    async def get_settings(user_id: UUID, request: Request) -> dict[str, object]:
        """Return profile fields and daily targets."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.user_settings_service.get_profile(user_id)
        timezone = _user_timezone(state_container, user_id)
        today = datetime.now(tz=ZoneInfo(timezone)).date()
        return {
            **jsonable_encoder(profile),
            "display_age": profile.display_age(today),
        }

    @app.put("/users/{user_id}/settings/targets", dependencies=protected)
    async def save_targets(
        user_id: UUID, payload: TargetsUpdate, request: Request
    ) -> dict[str, object]:
        """Persist edited targets."""
        state_container: AppContainer = request.app.state.container
        try:
            targets = state_container.user_settings_service.save_targets(
                user_id,
                calories=payload.calories,
                protein=payload.protein,
                water=payload.water,
                age=payload.age,
                diets=payload.diets,
            )
        except ValueError as exc:
            raise _unprocessable(exc) from exc
        return jsonable_encoder(targets)

    @app.post("/users/{user_id}/settings/diet/{diet}", dependencies=protected)
    async def toggle_diet(
        user_id: UUID, diet: str, request: Request
    ) -> dict[str, object]:
        """Toggle a diet type."""
        state_container: AppContainer = request.app.state.container
        try:
            diets = state_container.user_settings_service.toggle_diet(user_id, diet)
        except ValueError as exc:
            raise _unprocessable(exc) from exc
        return {"diets": diets}

    @app.post("/users/{user_id}/settings/reminders/{key}", dependencies=protected)
    async def toggle_reminder(
        user_id: UUID, key: str, request: Request
    ) -> dict[str, object]:
        """Toggle a reminder flag."""
        state_container: AppContainer = request.app.state.container
        try:
            reminders = state_container.user_settings_service.toggle_reminder(
                user_id, key
            )
        except ValueError as exc:
            raise _unprocessable(exc) from exc
        return {"reminders": reminders}

    @app.post("/portions/scale", dependencies=protected)
    async def scale_portion(payload: PortionScaleRequest) -> dict[str, object]:
        """Apply a stepper change and return the values for the new multiplier."""
        multiplier = adjust_portion(payload.multiplier, payload.delta)
        base = PortionValues(**payload.base.model_dump())
        scaled = apply_portion_multiplier(base, multiplier)
        return {"multiplier": multiplier, **jsonable_encoder(scaled)}

    @app.post("/users/{user_id}/scans", dependencies=protected)
    async def analyze_scan(
        user_id: UUID, payload: ScanRequest, request: Request
    ) -> dict[str, object]:
        """Analyze a label photo."""
        state_container: AppContainer = request.app.state.container
        try:
            image_bytes = base64.b64decode(payload.image_base64, validate=True)
        except binascii.Error as exc:
            raise _unprocessable(exc) from exc
        profile = state_container.user_settings_service.get_scan_profile(user_id)
        try:
            analysis = await state_container.scan_service.analyze(image_bytes, profile)
        except Exception as exc:
            logger.exception("Scan analysis failed", extra={"user_id": str(user_id)})
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=_format_scan_error(state_container, exc),
            ) from exc
        favorite = False
        if analysis.product_name:
            favorite = state_container.scan_service.is_favorite(
                user_id, analysis.product_name
            )
        return {
            "analysis": analysis.model_dump(),
            "score_tier": health_score_tier(analysis.health_score),
            "alternatives": [
                {"name": name, "reason": reason}
                for name, reason in map(split_alternative, analysis.alternatives)
            ],
            "is_favorite": favorite,
        }

    @app.get("/users/{user_id}/logs", dependencies=protected)
    async def list_logs(user_id: UUID, request: Request) -> dict[str, object]:
        """Return all food logs, newest first."""
        state_container: AppContainer = request.app.state.container
        logs = state_container.food_log_service.list_logs(user_id)
        return {"logs": jsonable_encoder(logs)}

    @app.get("/users/{user_id}/logs/{log_id}", dependencies=protected)
    async def get_log(
        user_id: UUID, log_id: str, request: Request
    ) -> dict[str, object]:
        """Return a single food log."""
        state_container: AppContainer = request.app.state.container
        try:
            log = state_container.food_log_service.get_log(user_id, log_id)
        except LogNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        return jsonable_encoder(log)

    @app.post(
        "/users/{user_id}/logs",
        dependencies=protected,
        status_code=status.HTTP_201_CREATED,
    )
    async def save_log(
        user_id: UUID, payload: SaveLogRequest, request: Request
    ) -> dict[str, object]:
        """Save a confirmed scan as a food log."""
        state_container: AppContainer = request.app.state.container
        try:
            record = state_container.scan_service.save_scan(
                user_id,
                payload.analysis,
                product_name=payload.product_name,
                multiplier=payload.multiplier,
                notes=payload.notes,
                image_uri=payload.image_uri,
            )
        except ScanValidationError as exc:
            raise _unprocessable(exc) from exc
        return jsonable_encoder(record)

    @app.put("/users/{user_id}/logs/{log_id}", dependencies=protected)
    async def update_log(
        user_id: UUID, log_id: str, payload: SaveLogRequest, request: Request
    ) -> dict[str, object]:
        """Overwrite an existing food log with edited values."""
        state_container: AppContainer = request.app.state.container
        try:
            record = state_container.scan_service.save_scan(
                user_id,
                payload.analysis,
                product_name=payload.product_name,
                multiplier=payload.multiplier,
                notes=payload.notes,
                image_uri=payload.image_uri,
                log_id=log_id,
            )
        except ScanValidationError as exc:
            raise _unprocessable(exc) from exc
        except LogNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        return jsonable_encoder(record)

    @app.delete("/users/{user_id}/logs/{log_id}", dependencies=protected)
    async def delete_log(
        user_id: UUID, log_id: str, request: Request
    ) -> dict[str, str]:
        """Delete a food log."""
        state_container: AppContainer = request.app.state.container
        try:
            state_container.food_log_service.delete_log(user_id, log_id)
        except LogNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
        return {"status": "deleted"}

    @app.post("/users/{user_id}/favorites/toggle", dependencies=protected)
    async def toggle_favorite(
        user_id: UUID, payload: FavoriteToggleRequest, request: Request
    ) -> dict[str, bool]:
        """Add or remove a favourite product."""
        state_container: AppContainer = request.app.state.container
        try:
            favorite = state_container.scan_service.toggle_favorite(
                user_id, payload.product_name, payload.analysis
            )
        except ScanValidationError as exc:
            raise _unprocessable(exc) from exc
        return {"is_favorite": favorite}

    return app


def _user_timezone(state_container: AppContainer, user_id: UUID) -> str:
    """Return the user's timezone, falling back to the default when invalid."""
    timezone = state_container.user_settings_service.get_timezone(user_id)
    if _is_valid_timezone(timezone):
        return timezone
    logger.warning(
        "Invalid stored timezone, using default",
        extra={"user_id": str(user_id), "timezone": timezone},
    )
    return state_container.settings.default_timezone


def _is_valid_timezone(value: str) -> bool:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        return False
    return True


def _unprocessable(exc: Exception) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


def _format_scan_error(state_container: AppContainer, exc: Exception) -> str:
    """Return a user-facing scan error message with local debug info."""
    fallback = "Could not analyze image. Please try a clearer shot."
    if state_container.settings.environment == "local":
        detail = f"{type(exc).__name__}: {exc}".strip()
        if detail:
            return f"{fallback} (debug: {detail})"
    return fallback
