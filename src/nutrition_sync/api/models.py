"""Pydantic models for API request bodies."""

import math

from pydantic import BaseModel, Field, field_validator

from nutrition_sync.domain.nutrition import FoodItem
from nutrition_sync.domain.units import Unit
from nutrition_sync.services.scaling import map_nutrient_leaves


def _check_nutrient(value: float) -> float:
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"nutrient values must be non-negative, got {value}")
    return value


class ConvertRequest(BaseModel):
    """Convert a value between two units."""

    value: float = Field(allow_inf_nan=False)
    from_unit: Unit
    to_unit: Unit
    density: float | None = Field(default=None, gt=0)


class DualUnitRequest(BaseModel):
    """Request metric and imperial equivalents of an amount."""

    value: float = Field(allow_inf_nan=False)
    unit: Unit


class FoodRequest(BaseModel):
    """Base body carrying a food item with non-negative nutrients."""

    food: FoodItem

    @field_validator("food")
    @classmethod
    def _nutrients_non_negative(cls, food: FoodItem) -> FoodItem:
        map_nutrient_leaves(food.nutrients, _check_nutrient)
        return food


class ScaleRequest(FoodRequest):
    """Rescale a food item to a new serving."""

    new_quantity: float = Field(ge=0, allow_inf_nan=False)
    new_unit: Unit
    density: float | None = Field(default=None, gt=0)


class NotionSaveRequest(FoodRequest):
    """Persist a food item as a new Notion page."""

    database_id: str | None = None
    serving_label: str | None = None


class NotionUpdateRequest(FoodRequest):
    """Overwrite an existing Notion page with an edited food item."""

    serving_label: str | None = None
