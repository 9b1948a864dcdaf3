"""Models for label scan analysis results."""

from dataclasses import dataclass

from pydantic import BaseModel, Field

from nutrition_dashboard.domain.portions import PortionValues


class ScanAnalysis(BaseModel):
    """Structured nutrition analysis for one serving of a scanned product."""

    product_name: str | None = None
    calories: float | None = Field(default=None, ge=0)
    protein_g: float | None = Field(default=None, ge=0)
    carbs_g: float | None = Field(default=None, ge=0)
    fat_g: float | None = Field(default=None, ge=0)
    fiber_g: float | None = Field(default=None, ge=0)
    sugar_g: float | None = Field(default=None, ge=0)
    health_score: int = Field(default=0, ge=0, le=100)
    vegetarian_status: str | None = None
    score_explanation: str | None = None
    verdict: str | None = None
    alternatives: list[str] = Field(default_factory=list)

    def base_values(self) -> PortionValues:
        """Return the per-serving values used for portion scaling."""
        return PortionValues(
            calories=self.calories,
            protein_g=self.protein_g,
            carbs_g=self.carbs_g,
            fat_g=self.fat_g,
            fiber_g=self.fiber_g,
            sugar_g=self.sugar_g,
        )


@dataclass(frozen=True)
class ScanProfile:
    """Diet context passed to the vision model."""

    diet: str = "Vegetarian"
    goal: str = "General Health"
