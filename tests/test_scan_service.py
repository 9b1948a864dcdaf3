"""Tests for the scan service."""

import asyncio
from uuid import uuid4

import pytest

from nutrition_dashboard.domain.scans import ScanAnalysis, ScanProfile
from nutrition_dashboard.services.food_logs import LogNotFoundError
from nutrition_dashboard.services.scans import (
    ScanService,
    ScanValidationError,
    _detect_mime_type,
    split_alternative,
)
from tests.conftest import (
    FakeVisionClient,
    InMemoryFavoriteRepository,
    InMemoryFoodLogRepository,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"0" * 16


def _analysis(**values: object) -> ScanAnalysis:
    return ScanAnalysis.model_validate(
        {
            "product_name": "Greek Yogurt",
            "calories": 240,
            "protein_g": 10.4,
            "carbs_g": 18,
            "fat_g": 12.5,
            "health_score": 72,
            **values,
        }
    )


def test_analyze_returns_validated_analysis(
    scan_service: ScanService, vision_client: FakeVisionClient
) -> None:
    profile = ScanProfile(diet="Vegan", goal="Weight Loss")

    analysis = asyncio.run(scan_service.analyze(PNG_BYTES, profile))

    assert analysis.product_name == "Greek Yogurt"
    assert analysis.protein_g == 10.4
    assert analysis.fiber_g is None
    assert analysis.alternatives == ["Skyr: more protein, less sugar"]
    call = vision_client.calls[0]
    assert call["model"] == "gpt-5.2"
    assert str(call["image_data_url"]).startswith("data:image/png;base64,")
    assert "Vegan diet" in str(call["prompt"])
    assert "Weight Loss" in str(call["prompt"])


def test_analyze_rejects_out_of_range_score(
    scan_service: ScanService, vision_client: FakeVisionClient
) -> None:
    vision_client.payload = {**vision_client.payload, "health_score": 140}

    with pytest.raises(ValueError):
        asyncio.run(scan_service.analyze(PNG_BYTES, ScanProfile()))


def test_save_scan_stores_scaled_values(
    scan_service: ScanService, log_repository: InMemoryFoodLogRepository
) -> None:
    user_id = uuid4()

    record = scan_service.save_scan(
        user_id,
        _analysis(),
        product_name="  Greek Yogurt ",
        multiplier=1.5,
        notes="after gym",
    )

    assert log_repository.list_logs(user_id) == [record]
    assert record.product_name == "Greek Yogurt"
    assert record.calories == 360
    assert record.protein_g == 15.6
    assert record.carbs_g == 27
    assert record.fiber_g == 0
    assert record.portions == 1.5
    assert record.notes == "after gym"
    assert record.health_score == 72
    assert record.timestamp_millis is not None


def test_save_scan_requires_product_name(scan_service: ScanService) -> None:
    with pytest.raises(ScanValidationError):
        scan_service.save_scan(
            uuid4(), _analysis(), product_name="   ", multiplier=1.0
        )


def test_save_scan_overwrites_existing_log(
    scan_service: ScanService, log_repository: InMemoryFoodLogRepository
) -> None:
    user_id = uuid4()
    original = scan_service.save_scan(
        user_id, _analysis(), product_name="Greek Yogurt", multiplier=1.0
    )

    updated = scan_service.save_scan(
        user_id,
        _analysis(),
        product_name="Greek Yogurt",
        multiplier=2.0,
        log_id=original.id,
    )

    assert updated.id == original.id
    assert updated.timestamp_millis == original.timestamp_millis
    assert updated.calories == 480
    assert len(log_repository.list_logs(user_id)) == 1


def test_save_scan_edit_of_missing_log(scan_service: ScanService) -> None:
    with pytest.raises(LogNotFoundError):
        scan_service.save_scan(
            uuid4(),
            _analysis(),
            product_name="Greek Yogurt",
            multiplier=1.0,
            log_id="missing",
        )


def test_toggle_favorite_round_trip(
    scan_service: ScanService, favorite_repository: InMemoryFavoriteRepository
) -> None:
    user_id = uuid4()

    assert scan_service.toggle_favorite(user_id, "Dr. Pepper", _analysis()) is True
    assert favorite_repository.favorites[(user_id, "Dr Pepper")] == {
        "product_name": "Dr. Pepper",
        "calories": 240,
        "protein": 10.4,
    }
    assert scan_service.is_favorite(user_id, "Dr. Pepper") is True
    assert scan_service.toggle_favorite(user_id, "Dr. Pepper", _analysis()) is False
    assert scan_service.is_favorite(user_id, "Dr. Pepper") is False


def test_toggle_favorite_requires_name(scan_service: ScanService) -> None:
    with pytest.raises(ScanValidationError):
        scan_service.toggle_favorite(uuid4(), " ", _analysis())


def test_split_alternative() -> None:
    assert split_alternative("Skyr: more protein") == ("Skyr", "more protein")
    assert split_alternative("Plain oats") == ("Plain oats", "")


@pytest.mark.parametrize(
    ("data", "mime_type"),
    [
        (b"\xff\xd8\xff\xe0rest", "image/jpeg"),
        (PNG_BYTES, "image/png"),
        (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
        (b"unknown", "image/jpeg"),
    ],
)
def test_detect_mime_type(data: bytes, mime_type: str) -> None:
    assert _detect_mime_type(data) == mime_type


def test_save_scan_rounds_multiplier_to_stepper_value(
    scan_service: ScanService,
) -> None:
    record = scan_service.save_scan(
        uuid4(), _analysis(), product_name="Greek Yogurt", multiplier=0.73
    )

    assert record.portions == 0.7
    assert record.calories == 168
    assert record.protein_g == 7.3
