"""Proportional rescaling of nutrient records when a serving changes."""

import logging
import math
from collections.abc import Callable
from dataclasses import fields, is_dataclass, replace
from typing import TypeVar

from nutrition_sync.domain.errors import InvalidServingSpecification
from nutrition_sync.domain.nutrition import FoodItem, NutrientProfile
from nutrition_sync.domain.units import DEFAULT_DENSITY, Unit
from nutrition_sync.services.conversion import (
    canonical_unit,
    convert,
    to_imperial,
    to_metric,
)

_logger = logging.getLogger(__name__)

NodeT = TypeVar("NodeT")


def map_nutrient_leaves(node: NodeT, func: Callable[[float], float]) -> NodeT:
    """Return a new tree with ``func`` applied to every numeric leaf.

    Grouping nodes are rebuilt rather than shared, so the result never
    aliases any part of the input.
    """
    if not is_dataclass(node) or isinstance(node, type):
        raise TypeError(f"Expected a nutrient dataclass, got {type(node).__name__}")
    values: dict[str, object] = {}
    for node_field in fields(node):
        value = getattr(node, node_field.name)
        if is_dataclass(value):
            values[node_field.name] = map_nutrient_leaves(value, func)
        elif isinstance(value, (int, float)) and not isinstance(value, bool):
            values[node_field.name] = func(float(value))
        else:
            values[node_field.name] = value
    return type(node)(**values)


def scale_nutrients(nutrients: NutrientProfile, ratio: float) -> NutrientProfile:
    """Multiply every nutrient leaf by ``ratio``."""
    return map_nutrient_leaves(nutrients, lambda value: value * ratio)


def scale_ratio(
    original_quantity: float,
    original_unit: Unit,
    new_quantity: float,
    new_unit: Unit,
    density: float = DEFAULT_DENSITY,
) -> float:
    """Compute the multiplier between two serving specifications.

    Each amount is first projected into the canonical unit of its own
    family (g or ml) and the ratio is taken between those two figures.
    Across families this compares grams with milliliters directly, which
    is exact only for water-like foods (density 1.0).

    Raises:
        InvalidServingSpecification: If the original quantity is not a
            positive finite number.
        UnsupportedConversion: If either unit is unsupported.
    """
    _check_serving(original_quantity, original_unit)
    original_base = original_quantity * convert(
        1, original_unit, canonical_unit(original_unit), density
    )
    new_base = new_quantity * convert(1, new_unit, canonical_unit(new_unit), density)
    return new_base / original_base


def scale_food_item(
    item: FoodItem,
    new_quantity: float,
    new_unit: Unit,
    density: float = DEFAULT_DENSITY,
) -> FoodItem:
    """Return a copy of ``item`` rescaled to a new serving.

    The input is never mutated. When nothing changes the same item is
    returned. Values are not rounded here.
    """
    _check_serving(item.serving_quantity, item.serving_unit)
    if item.serving_quantity == new_quantity and item.serving_unit == new_unit:
        return item
    ratio = scale_ratio(
        item.serving_quantity, item.serving_unit, new_quantity, new_unit, density
    )
    _logger.debug(
        "Scaling fdc_id=%s %s %s -> %s %s ratio=%s",
        item.fdc_id,
        item.serving_quantity,
        item.serving_unit,
        new_quantity,
        new_unit,
        ratio,
    )
    return replace(
        item,
        serving_quantity=new_quantity,
        serving_unit=Unit(new_unit),
        nutrients=scale_nutrients(item.nutrients, ratio),
        serving_metric=None,
        serving_imperial=None,
    )


def with_dual_units(item: FoodItem) -> FoodItem:
    """Attach metric and imperial serving equivalents for display."""
    return replace(
        item,
        serving_metric=to_metric(item.serving_quantity, item.serving_unit),
        serving_imperial=to_imperial(item.serving_quantity, item.serving_unit),
    )


def _check_serving(quantity: float, unit: Unit) -> None:
    """Reject quantities that cannot anchor a ratio."""
    if not math.isfinite(quantity) or quantity <= 0:
        raise InvalidServingSpecification(quantity, unit)
