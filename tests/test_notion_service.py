"""Tests for Notion persistence."""

import asyncio
from dataclasses import replace

import pytest

from nutrition_sync.domain.nutrition import FoodItem
from nutrition_sync.domain.units import Unit
from nutrition_sync.services.notion import (
    NotionService,
    build_page_children,
    build_page_properties,
    food_item_from_page,
    format_number,
    map_food_group,
    round_nutrients,
    serving_text,
)
from nutrition_sync.services.nutrition import process_food_details
from nutrition_sync.services.scaling import scale_food_item, with_dual_units
from tests.conftest import FakeNotionClient, make_food_item


@pytest.mark.parametrize(
    ("category", "expected"),
    [
        ("Dairy and Egg Products", "Dairy"),
        ("Fruits and Fruit Juices", "Fruits"),
        ("Beef Products", "Meat"),
        ("Finfish and Shellfish Products", "Seafood"),
        ("Nut and Seed Products", "Tree Nuts"),
        ("Cereal Grains and Pasta", "Grains"),
        ("Spices and Herbs", "Herbs & Spices"),
    ],
)
def test_map_food_group(category: str, expected: str) -> None:
    assert map_food_group(category) == {"name": expected}


def test_map_food_group_unknown() -> None:
    assert map_food_group("Baby Foods") is None
    assert map_food_group(None) is None


def test_round_nutrients_rounds_every_leaf() -> None:
    item = scale_food_item(make_food_item(), 1, Unit.CUP)

    rounded = round_nutrients(item.nutrients)

    assert rounded.calories == round(item.nutrients.calories, 2)
    assert rounded.fats.omega3.ala == round(item.nutrients.fats.omega3.ala, 2)
    assert rounded.vitamins.b6 == round(item.nutrients.vitamins.b6, 2)


def test_format_number() -> None:
    assert format_number(100.0) == "100"
    assert format_number(8) == "8"
    assert format_number(3.527396) == "3.53"
    assert format_number(0.004) == "0"


def test_serving_text_ignores_label(food_item: FoodItem) -> None:
    labelled = replace(food_item, serving_label="1 glass")
    assert serving_text(labelled) == "100 g"


def test_build_page_properties_accepts_int_serving(food_item: FoodItem) -> None:
    scaled = with_dual_units(scale_food_item(food_item, 8, Unit.OUNCE))

    properties = build_page_properties(scaled)

    assert properties["Serving Size"]["rich_text"][0]["text"]["content"] == "8 oz"


def test_build_page_properties_rounds_and_maps(food_item: FoodItem) -> None:
    scaled = with_dual_units(scale_food_item(food_item, 1, Unit.CUP))

    properties = build_page_properties(scaled)

    assert properties["Food Name"]["title"][0]["text"]["content"] == scaled.description
    assert properties["Serving Size"]["rich_text"][0]["text"]["content"] == "1 cup"
    metric = properties["Serving Size Metric"]["rich_text"][0]["text"]["content"]
    assert metric == "236.59 ml"
    assert properties["Food Group"] == {"select": {"name": "Dairy"}}
    assert properties["FDC ID"] == {"number": 171705}
    assert properties["Calories (kcal)"]["number"] == round(61.0 * 2.36588, 2)
    assert properties["Iron (mg)"]["number"] == round(0.03 * 2.36588, 2)
    assert properties["Brand Name"] == {"rich_text": []}


def test_build_page_children_has_three_tables(food_item: FoodItem) -> None:
    blocks = build_page_children(food_item)

    headings = [
        block["heading_2"]["rich_text"][0]["text"]["content"]
        for block in blocks
        if block["type"] == "heading_2"
    ]
    assert headings == [
        "Foundational Data",
        "Core Micronutrients",
        "Functional Clinical Data",
    ]
    first_row = blocks[1]["table"]["children"][0]["table_row"]["cells"][1][0]
    assert first_row["text"]["content"] == "61 kcal"
    assert first_row["annotations"]["color"] == "blue"
    fiber_row = blocks[1]["table"]["children"][3]["table_row"]["cells"][1][0]
    assert fiber_row["text"]["content"] == "N/A"
    assert fiber_row["annotations"]["color"] == "red"


def test_food_item_round_trips_through_page(food_item: FoodItem) -> None:
    scaled = scale_food_item(food_item, 2, Unit.CUP)
    page = {"id": "p1", "properties": build_page_properties(scaled)}

    restored = food_item_from_page(page)

    assert restored.fdc_id == 171705
    assert restored.description == scaled.description
    assert restored.serving_quantity == 2
    assert restored.serving_unit is Unit.CUP
    assert restored.serving_label is None
    assert restored.food_category == "Dairy"
    assert restored.nutrients.protein == round(scaled.nutrients.protein, 2)
    assert restored.nutrients.vitamins.b12 == 0.0


def test_food_item_from_page_keeps_unparsed_serving_as_label() -> None:
    page = {
        "id": "p1",
        "properties": {
            "Food Name": {"title": [{"plain_text": "Bread"}]},
            "Serving Size": {"rich_text": [{"plain_text": "1 slice"}]},
            "FDC ID": {"number": 42},
            "Calories (kcal)": {"number": 80},
        },
    }

    restored = food_item_from_page(page)

    assert restored.serving_quantity == 100
    assert restored.serving_unit is Unit.GRAM
    assert restored.serving_label == "1 slice"
    assert restored.nutrients.calories == 80


def test_save_and_update_food(food_item: FoodItem) -> None:
    client = FakeNotionClient()
    service = NotionService(client, default_database_id="db-1")

    result = asyncio.run(service.save_food(food_item, serving_label="1 glass"))
    page = client.pages[result.page_id]
    assert page["database_id"] == "db-1"
    properties = page["properties"]
    assert properties["Serving Size"]["rich_text"][0]["text"]["content"] == "100 g"
    assert properties["Serving Label"]["rich_text"][0]["text"]["content"] == "1 glass"
    assert result.food_name == food_item.description

    scaled = scale_food_item(food_item, 50, Unit.GRAM)
    asyncio.run(service.update_food(result.page_id, scaled))

    page_id, properties = client.updates[0]
    assert page_id == result.page_id
    assert properties["Calories (kcal)"]["number"] == 30.5
    assert "FDC ID" not in properties
    restored = asyncio.run(service.get_food(result.page_id))
    assert restored.serving_quantity == 50
    assert restored.nutrients.calories == 30.5


def test_save_food_requires_database(food_item: FoodItem) -> None:
    service = NotionService(FakeNotionClient())
    with pytest.raises(ValueError):
        asyncio.run(service.save_food(food_item))


def test_fdc_page_map_paginates() -> None:
    client = FakeNotionClient(query_page_size=2)
    service = NotionService(client, default_database_id="db-1")
    for fdc_id in (1, 2, 3):
        asyncio.run(service.save_food(make_food_item(fdc_id=fdc_id)))
    asyncio.run(service.save_food(make_food_item(fdc_id=9), database_id="db-other"))

    mapping = asyncio.run(service.fdc_page_map())

    assert mapping == {1: "page-1", 2: "page-2", 3: "page-3"}


def test_database_info() -> None:
    client = FakeNotionClient()
    service = NotionService(client)
    asyncio.run(service.save_food(make_food_item(), database_id="db-1"))

    info = asyncio.run(service.database_info("db-1"))

    assert info.title == "Food Library"
    assert info.page_count == 1
    assert [prop.name for prop in info.properties] == ["Food Name", "FDC ID"]


def test_labelled_fdc_item_keeps_serving_basis_after_reload() -> None:
    item = process_food_details(
        {
            "fdcId": 2000,
            "description": "Peanut butter",
            "dataType": "Branded",
            "householdServingFullText": "2 Tbsp",
            "foodNutrients": [
                {"nutrientNumber": "208", "unitName": "KCAL", "value": 588},
            ],
        }
    )
    page = {"id": "p1", "properties": build_page_properties(item)}

    restored = food_item_from_page(page)
    rescaled = scale_food_item(restored, 100, Unit.GRAM)

    assert restored.serving_quantity == 100
    assert restored.serving_unit is Unit.GRAM
    assert restored.serving_label == "2 Tbsp"
    assert rescaled.nutrients.calories == pytest.approx(588)
