"""Pydantic models for API request bodies."""

from pydantic import BaseModel, Field

from nutrition_dashboard.domain.scans import ScanAnalysis
from nutrition_dashboard.services.portions import MIN_PORTION


class TargetsUpdate(BaseModel):
    """Edited daily targets from the profile screen."""

    calories: int = Field(gt=0)
    protein: int = Field(gt=0)
    water: float = Field(gt=0)
    age: int | None = Field(default=None, ge=0)
    diets: list[str] | None = None


class PortionBase(BaseModel):
    """Per-serving values; null means unknown."""

    calories: float | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None
    fiber_g: float | None = None
    sugar_g: float | None = None


class PortionScaleRequest(BaseModel):
    """Stepper change applied to a multiplier, then used to scale values."""

    base: PortionBase
    multiplier: float = Field(default=1.0, ge=MIN_PORTION)
    delta: float = 0.0


class ScanRequest(BaseModel):
    """Base64-encoded label photo."""

    image_base64: str = Field(min_length=1)


class SaveLogRequest(BaseModel):
    """Scan result confirmed by the user."""

    analysis: ScanAnalysis
    product_name: str
    multiplier: float = Field(default=1.0, ge=MIN_PORTION)
    notes: str = ""
    image_uri: str | None = None


class FavoriteToggleRequest(BaseModel):
    """Product to add to or remove from favourites."""

    product_name: str
    analysis: ScanAnalysis
