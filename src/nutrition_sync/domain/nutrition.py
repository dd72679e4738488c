"""Nutrition domain models."""

from dataclasses import dataclass, field

from nutrition_sync.domain.units import Unit


@dataclass(frozen=True)
class Carbohydrates:
    """Carbohydrate breakdown in grams."""

    total: float = 0.0
    fiber: float = 0.0
    sugar: float = 0.0
    added_sugar: float = 0.0


@dataclass(frozen=True)
class Omega3:
    """Omega-3 fatty acids in grams."""

    ala: float = 0.0
    epa: float = 0.0
    dha: float = 0.0


@dataclass(frozen=True)
class Fats:
    """Fat breakdown in grams."""

    total: float = 0.0
    saturated: float = 0.0
    trans: float = 0.0
    mufa: float = 0.0
    pufa: float = 0.0
    omega3: Omega3 = field(default_factory=Omega3)


@dataclass(frozen=True)
class Minerals:
    """Minerals in mg (iodine and selenium in µg)."""

    sodium: float = 0.0
    potassium: float = 0.0
    calcium: float = 0.0
    iron: float = 0.0
    magnesium: float = 0.0
    phosphorus: float = 0.0
    zinc: float = 0.0
    iodine: float = 0.0
    selenium: float = 0.0
    copper: float = 0.0


@dataclass(frozen=True)
class Vitamins:
    """Vitamins in µg (E and B6 in mg)."""

    a: float = 0.0
    d: float = 0.0
    e: float = 0.0
    k: float = 0.0
    b6: float = 0.0
    b12: float = 0.0
    folate: float = 0.0


@dataclass(frozen=True)
class AminoAcids:
    """Selected amino acids in grams."""

    leucine: float = 0.0
    lysine: float = 0.0
    methionine: float = 0.0
    cystine: float = 0.0


@dataclass(frozen=True)
class NutrientProfile:
    """Full nutrient tree for one serving.

    Every leaf is a non-negative float; unknown values are stored as 0.0.
    Grouping nodes carry no value of their own.
    """

    calories: float = 0.0
    energy_kj: float = 0.0
    water: float = 0.0
    protein: float = 0.0
    carbs: Carbohydrates = field(default_factory=Carbohydrates)
    fats: Fats = field(default_factory=Fats)
    cholesterol: float = 0.0
    minerals: Minerals = field(default_factory=Minerals)
    vitamins: Vitamins = field(default_factory=Vitamins)
    amino_acids: AminoAcids = field(default_factory=AminoAcids)
    choline: float = 0.0


@dataclass(frozen=True)
class ServingAmount:
    """A quantity expressed in a specific unit."""

    quantity: float
    unit: Unit


@dataclass(frozen=True)
class FoodItem:
    """A food with nutrient values valid for its serving specification."""

    fdc_id: int
    description: str
    serving_quantity: float
    serving_unit: Unit
    nutrients: NutrientProfile
    brand_owner: str | None = None
    brand_name: str | None = None
    data_type: str | None = None
    food_category: str | None = None
    ingredients: str | None = None
    serving_label: str | None = None
    serving_metric: ServingAmount | None = None
    serving_imperial: ServingAmount | None = None


@dataclass(frozen=True)
class FoodSummary:
    """Summary information about a food from FDC search."""

    fdc_id: int
    description: str
    brand_owner: str | None
    brand_name: str | None
    data_type: str | None
    food_category: str | None = None
    serving_size: float | None = None
    serving_size_unit: str | None = None


@dataclass(frozen=True)
class FoodSearchPage:
    """One page of FDC search results."""

    foods: list[FoodSummary]
    total_hits: int
    current_page: int
    total_pages: int
