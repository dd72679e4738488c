"""Nutrition service integrating USDA FDC."""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from nutrition_sync.adapters.fdc_client import FdcClient
from nutrition_sync.domain.nutrition import (
    AminoAcids,
    Carbohydrates,
    Fats,
    FoodItem,
    FoodSearchPage,
    FoodSummary,
    Minerals,
    NutrientProfile,
    Omega3,
    Vitamins,
)
from nutrition_sync.domain.units import Unit
from nutrition_sync.services.cache import Cache

# FDC nutrient numbers. Nutrient amounts in food details are per 100 g.
_NUTRIENT_NUMBERS = {
    "energy_kcal": "208",
    "energy_kj": "268",
    "water": "255",
    "protein": "203",
    "total_fat": "204",
    "total_fat_nlea": "298",
    "saturated_fat": "606",
    "trans_fat": "605",
    "carbohydrate": "205",
    "fiber": "291",
    "total_sugars": "269",
    "added_sugars": "539",
    "cholesterol": "601",
    "sodium": "307",
    "vitamin_d": "328",
    "calcium": "301",
    "iron": "303",
    "potassium": "306",
    "magnesium": "304",
    "zinc": "309",
    "iodine": "314",
    "folate_dfe": "417",
    "vitamin_b12": "418",
    "vitamin_b6": "415",
    "vitamin_a_rae": "320",
    "vitamin_e": "323",
    "vitamin_k": "430",
    "mufa": "645",
    "pufa": "646",
    "omega3_ala": "851",
    "omega3_epa": "629",
    "omega3_dha": "631",
    "leucine": "504",
    "lysine": "505",
    "methionine": "506",
    "cystine": "526",
    "choline": "421",
    "selenium": "317",
    "phosphorus": "305",
    "copper": "312",
}

FDC_BASIS_GRAMS = 100.0

_logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@dataclass
class NutritionService:
    """Service for FDC lookups with caching."""

    fdc_client: FdcClient
    cache: Cache
    default_data_types: tuple[str, ...] = ("Foundation", "Branded")
    search_ttl_seconds: int = 3600
    food_ttl_seconds: int = 86400
    debug: bool = False
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(
        self,
        query: str,
        data_types: list[str] | None = None,
        limit: int = 15,
        page: int = 1,
    ) -> FoodSearchPage:
        """Search FDC foods with caching."""
        resolved_types = list(data_types or self.default_data_types)
        cache_key = (
            f"fdc:search:{query.lower()}:{','.join(resolved_types)}:{limit}:{page}"
        )
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodSearchPage):
            return cached

        payload = await self._call_with_retry(
            lambda: self.fdc_client.search_foods(
                query,
                data_types=resolved_types,
                page_size=limit,
                page_number=page,
            ),
            action="search",
        )
        foods = [_food_summary(food) for food in payload.get("foods", [])]
        result = FoodSearchPage(
            foods=foods,
            total_hits=int(payload.get("totalHits", len(foods)) or 0),
            current_page=int(payload.get("currentPage", page) or page),
            total_pages=int(payload.get("totalPages", 1) or 1),
        )
        self.cache.set(cache_key, result, ttl_seconds=self.search_ttl_seconds)
        if self.debug:
            _logger.info("Nutrition search FDC: query=%s results=%s", query, len(foods))
        return result

    async def get_food(self, fdc_id: int) -> FoodItem:
        """Retrieve a food from FDC processed into a FoodItem."""
        cache_key = f"fdc:food:{fdc_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodItem):
            return cached

        payload = await self._call_with_retry(
            lambda: self.fdc_client.get_food(fdc_id),
            action=f"get_food:{fdc_id}",
        )
        item = process_food_details(payload)
        self.cache.set(cache_key, item, ttl_seconds=self.food_ttl_seconds)
        if self.debug:
            _logger.info("Nutrition food FDC: fdc_id=%s", fdc_id)
        return item

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                status_code = _status_code_from_exception(exc)
                _logger.warning(
                    "Nutrition %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    status_code,
                    exc,
                )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def process_food_details(payload: dict[str, object]) -> FoodItem:
    """Map an FDC food details payload onto a FoodItem.

    The serving is fixed at 100 g because that is the basis FDC reports
    ``foodNutrients`` on; a branded household serving is kept as the label.
    """
    food_nutrients = payload.get("foodNutrients") or []
    amounts = _index_amounts(food_nutrients)

    def amount(key: str) -> float:
        return amounts.get(_NUTRIENT_NUMBERS[key], 0.0)

    nutrients = NutrientProfile(
        calories=_energy_kcal(food_nutrients) or amount("energy_kcal"),
        energy_kj=amount("energy_kj"),
        water=amount("water"),
        protein=amount("protein"),
        carbs=Carbohydrates(
            total=amount("carbohydrate"),
            fiber=amount("fiber"),
            sugar=amount("total_sugars"),
            added_sugar=amount("added_sugars"),
        ),
        fats=Fats(
            total=amount("total_fat") or amount("total_fat_nlea"),
            saturated=amount("saturated_fat"),
            trans=amount("trans_fat"),
            mufa=amount("mufa"),
            pufa=amount("pufa"),
            omega3=Omega3(
                ala=amount("omega3_ala"),
                epa=amount("omega3_epa"),
                dha=amount("omega3_dha"),
            ),
        ),
        cholesterol=amount("cholesterol"),
        minerals=Minerals(
            sodium=amount("sodium"),
            potassium=amount("potassium"),
            calcium=amount("calcium"),
            iron=amount("iron"),
            magnesium=amount("magnesium"),
            phosphorus=amount("phosphorus"),
            zinc=amount("zinc"),
            iodine=amount("iodine"),
            selenium=amount("selenium"),
            copper=amount("copper"),
        ),
        vitamins=Vitamins(
            a=amount("vitamin_a_rae"),
            d=amount("vitamin_d"),
            e=amount("vitamin_e"),
            k=amount("vitamin_k"),
            b6=amount("vitamin_b6"),
            b12=amount("vitamin_b12"),
            folate=amount("folate_dfe"),
        ),
        amino_acids=AminoAcids(
            leucine=amount("leucine"),
            lysine=amount("lysine"),
            methionine=amount("methionine"),
            cystine=amount("cystine"),
        ),
        choline=amount("choline"),
    )
    return FoodItem(
        fdc_id=int(payload["fdcId"]),
        description=str(payload.get("description", "")),
        serving_quantity=FDC_BASIS_GRAMS,
        serving_unit=Unit.GRAM,
        nutrients=nutrients,
        brand_owner=payload.get("brandOwner"),
        brand_name=payload.get("brandName"),
        data_type=payload.get("dataType"),
        food_category=_food_category(payload.get("foodCategory")),
        ingredients=payload.get("ingredients"),
        serving_label=payload.get("householdServingFullText") or None,
    )


def _food_summary(food: dict[str, object]) -> FoodSummary:
    return FoodSummary(
        fdc_id=food["fdcId"],
        description=food.get("description", ""),
        brand_owner=food.get("brandOwner"),
        brand_name=food.get("brandName"),
        data_type=food.get("dataType"),
        food_category=_food_category(food.get("foodCategory")),
        serving_size=food.get("servingSize"),
        serving_size_unit=food.get("servingSizeUnit"),
    )


def _index_amounts(food_nutrients: list[dict[str, object]]) -> dict[str, float]:
    """Index nutrient amounts by nutrient number, keeping the first match."""
    amounts: dict[str, float] = {}
    for entry in food_nutrients:
        info = entry.get("nutrient") or {}
        number = info.get("number") or entry.get("number") or entry.get("nutrientNumber")
        if number is None or str(number) in amounts:
            continue
        amounts[str(number)] = _non_negative(entry.get("amount", entry.get("value")))
    return amounts


def _energy_kcal(food_nutrients: list[dict[str, object]]) -> float:
    """Return the first energy value reported in kcal."""
    for entry in food_nutrients:
        info = entry.get("nutrient") or {}
        name = info.get("name") or entry.get("nutrientName") or ""
        unit = info.get("unitName") or entry.get("unitName") or ""
        if "Energy" in str(name) and str(unit).lower() == "kcal":
            return _non_negative(entry.get("amount", entry.get("value")))
    return 0.0


def _non_negative(raw: object) -> float:
    """Coerce an FDC amount into a non-negative float, 0.0 when unknown."""
    if raw is None or isinstance(raw, bool):
        return 0.0
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value) or value < 0:
        return 0.0
    return value


def _food_category(raw: object) -> str | None:
    """FDC returns the category either as a string or as an object."""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, dict):
        description = raw.get("description")
        return str(description) if description else None
    return None


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
