"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from nutrition_sync.adapters.fdc_client import FdcClient
from nutrition_sync.adapters.notion_client import NotionClient
from nutrition_sync.config import Settings
from nutrition_sync.containers import AppContainer
from nutrition_sync.domain.nutrition import (
    AminoAcids,
    Carbohydrates,
    Fats,
    FoodItem,
    Minerals,
    NutrientProfile,
    Omega3,
    Vitamins,
)
from nutrition_sync.domain.units import Unit
from nutrition_sync.services.cache import InMemoryCache
from nutrition_sync.services.notion import NotionService
from nutrition_sync.services.nutrition import NutritionService


def _nutrient(number: str, name: str, unit: str, amount: float) -> dict[str, object]:
    return {
        "amount": amount,
        "nutrient": {"number": number, "name": name, "unitName": unit},
    }


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with in-memory responses."""

    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "totalHits": 1,
            "currentPage": 1,
            "totalPages": 1,
            "foods": [
                {
                    "fdcId": 171705,
                    "description": "Milk, whole, 3.25% milkfat",
                    "dataType": "Foundation",
                    "foodCategory": "Dairy and Egg Products",
                }
            ],
        }
    )
    food_payload: dict[str, object] = field(
        default_factory=lambda: {
            "fdcId": 171705,
            "description": "Milk, whole, 3.25% milkfat",
            "dataType": "Foundation",
            "foodCategory": {"description": "Dairy and Egg Products"},
            "foodNutrients": [
                _nutrient("208", "Energy", "kcal", 61),
                _nutrient("268", "Energy", "kJ", 255),
                _nutrient("255", "Water", "g", 88.1),
                _nutrient("203", "Protein", "g", 3.15),
                _nutrient("204", "Total lipid (fat)", "g", 3.25),
                _nutrient("606", "Fatty acids, total saturated", "g", 1.86),
                _nutrient("205", "Carbohydrate, by difference", "g", 4.8),
                _nutrient("269", "Sugars, total", "g", 5.05),
                _nutrient("301", "Calcium, Ca", "mg", 113),
                _nutrient("307", "Sodium, Na", "mg", 43),
                _nutrient("851", "PUFA 18:3 n-3 c,c,c (ALA)", "g", 0.075),
                _nutrient("418", "Vitamin B-12", "µg", 0.45),
            ],
        }
    )
    search_calls: list[dict[str, object]] = field(default_factory=list)
    food_calls: int = 0

    async def search_foods(
        self,
        query: str,
        data_types: list[str] | None = None,
        page_size: int = 15,
        page_number: int = 1,
    ) -> dict[str, object]:
        self.search_calls.append(
            {
                "query": query,
                "data_types": data_types,
                "page_size": page_size,
                "page_number": page_number,
            }
        )
        return self.search_payload

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        self.food_calls += 1
        return self.food_payload


@dataclass
class FakeNotionClient(NotionClient):
    """Fake Notion client that stores pages in memory."""

    pages: dict[str, dict[str, object]] = field(default_factory=dict)
    updates: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    database: dict[str, object] = field(
        default_factory=lambda: {
            "title": [{"plain_text": "Food Library"}],
            "properties": {
                "Food Name": {"type": "title"},
                "FDC ID": {"type": "number"},
            },
        }
    )
    query_page_size: int = 100

    async def create_page(
        self,
        database_id: str,
        properties: dict[str, object],
        children: list[dict[str, object]] | None = None,
    ) -> dict[str, object]:
        page_id = f"page-{len(self.pages) + 1}"
        self.pages[page_id] = {
            "id": page_id,
            "database_id": database_id,
            "properties": properties,
            "children": children or [],
        }
        return self.pages[page_id]

    async def update_page(
        self, page_id: str, properties: dict[str, object]
    ) -> dict[str, object]:
        self.updates.append((page_id, properties))
        page = self.pages[page_id]
        page["properties"] = {**page["properties"], **properties}
        return page

    async def retrieve_page(self, page_id: str) -> dict[str, object]:
        return self.pages[page_id]

    async def retrieve_database(self, database_id: str) -> dict[str, object]:
        return self.database

    async def query_database(
        self,
        database_id: str,
        filter_: dict[str, object] | None = None,
        start_cursor: str | None = None,
        page_size: int = 100,
    ) -> dict[str, object]:
        ordered = [
            page for page in self.pages.values() if page["database_id"] == database_id
        ]
        start = int(start_cursor or 0)
        end = start + min(page_size, self.query_page_size)
        has_more = end < len(ordered)
        return {
            "results": ordered[start:end],
            "has_more": has_more,
            "next_cursor": str(end) if has_more else None,
        }


def make_food_item(
    quantity: float = 100.0, unit: Unit = Unit.GRAM, **overrides: object
) -> FoodItem:
    """Build a fully populated food item for scaling tests."""
    nutrients = NutrientProfile(
        calories=61.0,
        energy_kj=255.0,
        water=88.1,
        protein=3.15,
        carbs=Carbohydrates(total=4.8, fiber=0.0, sugar=5.05, added_sugar=0.0),
        fats=Fats(
            total=3.25,
            saturated=1.86,
            trans=0.12,
            mufa=0.81,
            pufa=0.2,
            omega3=Omega3(ala=0.075, epa=0.0, dha=0.0),
        ),
        cholesterol=10.0,
        minerals=Minerals(
            sodium=43.0,
            potassium=132.0,
            calcium=113.0,
            iron=0.03,
            magnesium=10.0,
            phosphorus=84.0,
            zinc=0.37,
            iodine=29.0,
            selenium=3.7,
            copper=0.025,
        ),
        vitamins=Vitamins(a=46.0, d=1.1, e=0.07, k=0.3, b6=0.036, b12=0.45, folate=5.0),
        amino_acids=AminoAcids(leucine=0.265, lysine=0.14, methionine=0.075, cystine=0.017),
        choline=14.3,
    )
    values: dict[str, object] = {
        "fdc_id": 171705,
        "description": "Milk, whole, 3.25% milkfat",
        "serving_quantity": quantity,
        "serving_unit": unit,
        "nutrients": nutrients,
        "data_type": "Foundation",
        "food_category": "Dairy and Egg Products",
    }
    values.update(overrides)
    return FoodItem(**values)


@pytest.fixture
def food_item() -> FoodItem:
    return make_food_item()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        fdc_api_key="fdc-key",
        notion_api_key="notion-key",
        notion_database_id="db-default",
    )


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def notion_client() -> FakeNotionClient:
    return FakeNotionClient()


@pytest.fixture
def container(
    settings: Settings,
    fdc_client: FakeFdcClient,
    notion_client: FakeNotionClient,
) -> AppContainer:
    nutrition_service = NutritionService(
        fdc_client=fdc_client,
        cache=InMemoryCache(),
        retry_delay_seconds=0,
    )
    notion_service = NotionService(
        notion_client=notion_client,
        default_database_id=settings.notion_database_id,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        nutrition_service=nutrition_service,
        notion_service=notion_service,
        close_resources=close_resources,
    )
