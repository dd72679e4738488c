"""Serving units supported by the converter (single source of truth)."""

from enum import Enum


class UnitFamily(Enum):
    """Physical dimension a unit measures."""

    MASS = "mass"
    VOLUME = "volume"


class Unit(str, Enum):
    """Serving-size units accepted at every boundary."""

    MILLIGRAM = "mg"
    GRAM = "g"
    KILOGRAM = "kg"
    OUNCE = "oz"
    POUND = "lb"
    MILLILITER = "ml"
    LITER = "l"
    TEASPOON = "tsp"
    TABLESPOON = "tbsp"
    FLUID_OUNCE = "floz"
    CUP = "cup"

    @property
    def family(self) -> UnitFamily:
        """Return the family this unit belongs to."""
        if self in GRAMS_PER_UNIT:
            return UnitFamily.MASS
        return UnitFamily.VOLUME

    def __str__(self) -> str:
        return self.value


GRAMS_PER_UNIT: dict[Unit, float] = {
    Unit.MILLIGRAM: 0.001,
    Unit.GRAM: 1.0,
    Unit.KILOGRAM: 1000.0,
    Unit.OUNCE: 28.3495231,
    Unit.POUND: 453.59237,
}

ML_PER_UNIT: dict[Unit, float] = {
    Unit.MILLILITER: 1.0,
    Unit.LITER: 1000.0,
    Unit.TEASPOON: 4.92892,
    Unit.TABLESPOON: 14.7868,
    Unit.FLUID_OUNCE: 29.5735,
    Unit.CUP: 236.588,
}

CANONICAL_UNITS: dict[UnitFamily, Unit] = {
    UnitFamily.MASS: Unit.GRAM,
    UnitFamily.VOLUME: Unit.MILLILITER,
}

# Water-equivalent density in g/ml.
DEFAULT_DENSITY = 1.0
