"""Persistence of food items as Notion database pages."""

import logging
import re
from dataclasses import dataclass, is_dataclass, replace

from nutrition_sync.adapters.notion_client import NotionClient
from nutrition_sync.domain.errors import UnsupportedConversion
from nutrition_sync.domain.notion import (
    NotionDatabaseInfo,
    NotionProperty,
    NotionSaveResult,
)
from nutrition_sync.domain.nutrition import FoodItem, NutrientProfile, ServingAmount
from nutrition_sync.domain.units import Unit
from nutrition_sync.services.conversion import parse_unit
from nutrition_sync.services.scaling import map_nutrient_leaves

_logger = logging.getLogger(__name__)

FDC_ID_PROPERTY = "FDC ID"
SERVING_LABEL_PROPERTY = "Serving Label"
PERSISTED_DECIMALS = 2

# Number columns and the nutrient leaf each one stores.
_NUMBER_PROPERTIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Calories (kcal)", ("calories",)),
    ("Protein (g)", ("protein",)),
    ("Total Carbs (g)", ("carbs", "total")),
    ("Fiber (g)", ("carbs", "fiber")),
    ("Sugar (g)", ("carbs", "sugar")),
    ("Total Fat (g)", ("fats", "total")),
    ("Saturated Fat (g)", ("fats", "saturated")),
    ("Trans Fat (g)", ("fats", "trans")),
    ("MUFA (g)", ("fats", "mufa")),
    ("PUFA (g)", ("fats", "pufa")),
    ("Cholesterol (mg)", ("cholesterol",)),
    ("Sodium (mg)", ("minerals", "sodium")),
    ("Potassium (mg)", ("minerals", "potassium")),
    ("Calcium (mg)", ("minerals", "calcium")),
    ("Iron (mg)", ("minerals", "iron")),
)

# (heading, rows of (label, nutrient path, display unit))
_TABLE_SECTIONS: tuple[tuple[str, tuple[tuple[str, tuple[str, ...], str], ...]], ...] = (
    (
        "Foundational Data",
        (
            ("Calories", ("calories",), "kcal"),
            ("Water", ("water",), "g"),
            ("Total Carbs", ("carbs", "total"), "g"),
            ("Dietary Fiber", ("carbs", "fiber"), "g"),
            ("Total Sugars", ("carbs", "sugar"), "g"),
            ("Added Sugars", ("carbs", "added_sugar"), "g"),
            ("Total Fat", ("fats", "total"), "g"),
            ("Saturated Fat", ("fats", "saturated"), "g"),
            ("Trans Fat", ("fats", "trans"), "g"),
            ("Cholesterol", ("cholesterol",), "mg"),
        ),
    ),
    (
        "Core Micronutrients",
        (
            ("Vitamin A / Retinol", ("vitamins", "a"), "µg"),
            ("Vitamin D / Calciferol", ("vitamins", "d"), "µg"),
            ("Vitamin E / Tocopherol", ("vitamins", "e"), "mg"),
            ("Vitamin K / Phylloquinone", ("vitamins", "k"), "µg"),
            ("Vitamin B6 / Pyridoxine", ("vitamins", "b6"), "mg"),
            ("Vitamin B12 / Cobalamin", ("vitamins", "b12"), "µg"),
            ("Vitamin B9 / Folate (DFE)", ("vitamins", "folate"), "µg"),
            ("Calcium", ("minerals", "calcium"), "mg"),
            ("Iron", ("minerals", "iron"), "mg"),
            ("Magnesium", ("minerals", "magnesium"), "mg"),
            ("Zinc", ("minerals", "zinc"), "mg"),
            ("Iodine", ("minerals", "iodine"), "µg"),
            ("Sodium", ("minerals", "sodium"), "mg"),
            ("Potassium", ("minerals", "potassium"), "mg"),
        ),
    ),
    (
        "Functional Clinical Data",
        (
            ("MUFA", ("fats", "mufa"), "g"),
            ("PUFA", ("fats", "pufa"), "g"),
            ("Omega-3 ALA", ("fats", "omega3", "ala"), "g"),
            ("Omega-3 EPA", ("fats", "omega3", "epa"), "g"),
            ("Omega-3 DHA", ("fats", "omega3", "dha"), "g"),
            ("Leucine", ("amino_acids", "leucine"), "g"),
            ("Lysine", ("amino_acids", "lysine"), "g"),
            ("Methionine", ("amino_acids", "methionine"), "g"),
            ("Cystine", ("amino_acids", "cystine"), "g"),
            ("Choline", ("choline",), "mg"),
        ),
    ),
)

# Checked in order; the first group with a matching keyword wins.
_FOOD_GROUP_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Fruits", ("fruit", "berry", "citrus", "apple", "banana", "grape")),
    (
        "Vegetables",
        (
            "vegetable",
            "lettuce",
            "carrot",
            "tomato",
            "onion",
            "pepper",
            "broccoli",
            "spinach",
        ),
    ),
    ("Meat", ("beef", "pork", "chicken", "turkey", "lamb", "meat", "poultry")),
    ("Seafood", ("fish", "seafood", "salmon", "tuna", "shrimp", "crab", "lobster")),
    ("Tree Nuts", ("nut", "almond", "walnut", "pecan", "cashew", "pistachio")),
    ("Legumes", ("bean", "pea", "lentil", "chickpea", "legume", "soy")),
    ("Grains", ("grain", "cereal", "bread", "rice", "wheat", "oat", "pasta")),
    ("Dairy", ("dairy", "milk", "cheese", "yogurt", "butter", "cream")),
    ("Herbs & Spices", ("spice", "herb", "seasoning", "pepper", "salt")),
)

_SERVING_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([A-Za-z_ ]+?)\s*$")


@dataclass
class NotionService:
    """Writes and reads food items in a Notion database."""

    notion_client: NotionClient
    default_database_id: str | None = None

    async def save_food(
        self,
        item: FoodItem,
        database_id: str | None = None,
        serving_label: str | None = None,
    ) -> NotionSaveResult:
        """Create a page for ``item`` in the target database."""
        target = self._resolve_database(database_id)
        page = await self.notion_client.create_page(
            target,
            properties=build_page_properties(item, serving_label),
            children=build_page_children(item),
        )
        _logger.info("Created Notion page fdc_id=%s page_id=%s", item.fdc_id, page["id"])
        return NotionSaveResult(page_id=str(page["id"]), food_name=item.description)

    async def update_food(
        self, page_id: str, item: FoodItem, serving_label: str | None = None
    ) -> None:
        """Overwrite the serving and nutrient columns of an existing page."""
        await self.notion_client.update_page(
            page_id, build_update_properties(item, serving_label)
        )
        _logger.info("Updated Notion page page_id=%s", page_id)

    async def get_food(self, page_id: str) -> FoodItem:
        """Rebuild a FoodItem from a stored page."""
        page = await self.notion_client.retrieve_page(page_id)
        return food_item_from_page(page)

    async def fdc_page_map(self, database_id: str | None = None) -> dict[int, str]:
        """Map FDC ids to page ids for every page that has one."""
        target = self._resolve_database(database_id)
        mapping: dict[int, str] = {}
        cursor: str | None = None
        while True:
            response = await self.notion_client.query_database(
                target,
                filter_={"property": FDC_ID_PROPERTY, "number": {"is_not_empty": True}},
                start_cursor=cursor,
            )
            for page in response.get("results", []):
                fdc_id = _number_property(page.get("properties", {}), FDC_ID_PROPERTY)
                if fdc_id:
                    mapping[int(fdc_id)] = str(page["id"])
            if not response.get("has_more"):
                return mapping
            cursor = response.get("next_cursor")

    async def database_info(self, database_id: str | None = None) -> NotionDatabaseInfo:
        """Return the database title, page count and column list."""
        target = self._resolve_database(database_id)
        database = await self.notion_client.retrieve_database(target)
        pages = await self.notion_client.query_database(target)
        title_parts = database.get("title") or []
        title = title_parts[0].get("plain_text", "") if title_parts else ""
        properties = [
            NotionProperty(name=name, type=str(prop.get("type", "")))
            for name, prop in (database.get("properties") or {}).items()
        ]
        return NotionDatabaseInfo(
            title=title or "Untitled",
            page_count=len(pages.get("results", [])),
            properties=properties,
        )

    def _resolve_database(self, database_id: str | None) -> str:
        target = database_id or self.default_database_id
        if not target:
            raise ValueError("No Notion database id provided")
        return target


def map_food_group(category: str | None) -> dict[str, str] | None:
    """Map an FDC food category onto a Notion "Food Group" option."""
    if not category:
        return None
    lowered = category.lower()
    for group, keywords in _FOOD_GROUP_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return {"name": group}
    return None


def round_nutrients(
    nutrients: NutrientProfile, places: int = PERSISTED_DECIMALS
) -> NutrientProfile:
    """Round every nutrient leaf for storage."""
    return map_nutrient_leaves(nutrients, lambda value: round(value, places))


def serving_text(item: FoodItem) -> str:
    """Return the serving the nutrient columns are valid for, e.g. "100 g"."""
    return f"{format_number(item.serving_quantity)} {item.serving_unit.value}"


def format_number(value: float) -> str:
    """Format a value rounded to the persisted precision."""
    rounded = round(value, PERSISTED_DECIMALS)
    if float(rounded).is_integer():
        return str(int(rounded))
    return str(rounded)


def build_page_properties(
    item: FoodItem, serving_label: str | None = None
) -> dict[str, object]:
    """Build the full property payload for a new page."""
    properties = build_update_properties(item, serving_label)
    properties.update(
        {
            "Food Group": {"select": map_food_group(item.food_category)},
            "Data Type": {"select": {"name": item.data_type or "Foundation"}},
            "Brand Name": {"rich_text": _rich_text(item.brand_name)},
            FDC_ID_PROPERTY: {"number": item.fdc_id or 0},
        }
    )
    return properties


def build_update_properties(
    item: FoodItem, serving_label: str | None = None
) -> dict[str, object]:
    """Build properties that change when a serving is edited."""
    rounded = round_nutrients(item.nutrients)
    properties: dict[str, object] = {
        "Food Name": {"title": _rich_text(item.description)},
        "Serving Size": {"rich_text": _rich_text(serving_text(item))},
        SERVING_LABEL_PROPERTY: {
            "rich_text": _rich_text(serving_label or item.serving_label)
        },
    }
    if item.serving_metric is not None:
        properties["Serving Size Metric"] = {
            "rich_text": _rich_text(_amount_text(item.serving_metric))
        }
    if item.serving_imperial is not None:
        properties["Serving Size Imperial"] = {
            "rich_text": _rich_text(_amount_text(item.serving_imperial))
        }
    for name, path in _NUMBER_PROPERTIES:
        properties[name] = {"number": _leaf(rounded, path)}
    return properties


def build_page_children(item: FoodItem) -> list[dict[str, object]]:
    """Build heading and table blocks listing the full nutrient tree."""
    rounded = round_nutrients(item.nutrients)
    blocks: list[dict[str, object]] = []
    for heading, rows in _TABLE_SECTIONS:
        blocks.append(
            {
                "object": "block",
                "type": "heading_2",
                "heading_2": {"rich_text": _rich_text(heading)},
            }
        )
        blocks.append(
            {
                "object": "block",
                "type": "table",
                "table": {
                    "table_width": 2,
                    "has_column_header": False,
                    "has_row_header": False,
                    "children": [
                        _table_row(label, _leaf(rounded, path), unit)
                        for label, path, unit in rows
                    ],
                },
            }
        )
    return blocks


def food_item_from_page(page: dict[str, object]) -> FoodItem:
    """Reconstruct a FoodItem from the columns of a stored page.

    Only nutrients kept as number columns are restored; the rest are 0.0.
    The label comes from its own column. A serving text that does not
    parse as "<quantity> <unit>" is treated as a label on a 100 g serving.
    """
    properties = page.get("properties") or {}
    nutrients = NutrientProfile()
    for name, path in _NUMBER_PROPERTIES:
        value = _number_property(properties, name)
        nutrients = _with_leaf(nutrients, path, max(value or 0.0, 0.0))

    text = _plain_text(properties, "Serving Size")
    label = _plain_text(properties, SERVING_LABEL_PROPERTY) or None
    quantity, unit, unparsed = 100.0, Unit.GRAM, text or None
    match = _SERVING_PATTERN.match(text)
    if match:
        try:
            unit = parse_unit(match.group(2))
        except UnsupportedConversion:
            _logger.info("Keeping unparsed serving as label: %s", text)
        else:
            quantity, unparsed = float(match.group(1)), None

    group = properties.get("Food Group", {}).get("select") or {}
    data_type = properties.get("Data Type", {}).get("select") or {}
    return FoodItem(
        fdc_id=int(_number_property(properties, FDC_ID_PROPERTY) or 0),
        description=_plain_text(properties, "Food Name"),
        serving_quantity=quantity,
        serving_unit=unit,
        nutrients=nutrients,
        brand_name=_plain_text(properties, "Brand Name") or None,
        data_type=data_type.get("name"),
        food_category=group.get("name"),
        serving_label=label or unparsed,
    )


def _leaf(node: object, path: tuple[str, ...]) -> float:
    for name in path:
        node = getattr(node, name)
    return float(node)


def _with_leaf(node: object, path: tuple[str, ...], value: float) -> object:
    head, *rest = path
    if not rest:
        return replace(node, **{head: value})
    child = getattr(node, head)
    if not is_dataclass(child):
        raise TypeError(f"'{head}' is not a nutrient group")
    return replace(node, **{head: _with_leaf(child, tuple(rest), value)})


def _amount_text(amount: ServingAmount) -> str:
    return f"{format_number(amount.quantity)} {amount.unit.value}"


def _rich_text(content: str | None) -> list[dict[str, object]]:
    if not content:
        return []
    return [{"type": "text", "text": {"content": content}}]


def _table_row(label: str, value: float, unit: str) -> dict[str, object]:
    display = f"{format_number(value)} {unit}" if value else "N/A"
    return {
        "object": "block",
        "type": "table_row",
        "table_row": {
            "cells": [
                _rich_text(label),
                [
                    {
                        "type": "text",
                        "text": {"content": display},
                        "annotations": {"color": "blue" if value else "red"},
                    }
                ],
            ]
        },
    }


def _number_property(properties: dict[str, object], name: str) -> float | None:
    value = (properties.get(name) or {}).get("number")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return None


def _plain_text(properties: dict[str, object], name: str) -> str:
    prop = properties.get(name) or {}
    parts = prop.get("title") or prop.get("rich_text") or []
    return "".join(
        part.get("plain_text") or part.get("text", {}).get("content", "")
        for part in parts
    )
