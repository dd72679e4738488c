"""Serving-size unit conversion.

Mass units convert through grams and volume units through millilitres.
Crossing between the two families goes through a density in g/ml, which
defaults to water (1.0) when the caller has nothing better.
"""

from nutrition_sync.domain.errors import UnsupportedConversion
from nutrition_sync.domain.nutrition import ServingAmount
from nutrition_sync.domain.units import (
    CANONICAL_UNITS,
    DEFAULT_DENSITY,
    GRAMS_PER_UNIT,
    ML_PER_UNIT,
    Unit,
)

# Spellings seen from FDC payloads and free-text input, mapped onto Unit.
_UNIT_ALIASES: dict[str, Unit] = {
    "milligram": Unit.MILLIGRAM,
    "milligrams": Unit.MILLIGRAM,
    "gram": Unit.GRAM,
    "grams": Unit.GRAM,
    "grm": Unit.GRAM,
    "kilogram": Unit.KILOGRAM,
    "kilograms": Unit.KILOGRAM,
    "ounce": Unit.OUNCE,
    "ounces": Unit.OUNCE,
    "pound": Unit.POUND,
    "pounds": Unit.POUND,
    "lbs": Unit.POUND,
    "milliliter": Unit.MILLILITER,
    "milliliters": Unit.MILLILITER,
    "millilitre": Unit.MILLILITER,
    "mlt": Unit.MILLILITER,
    "liter": Unit.LITER,
    "liters": Unit.LITER,
    "litre": Unit.LITER,
    "teaspoon": Unit.TEASPOON,
    "teaspoons": Unit.TEASPOON,
    "tablespoon": Unit.TABLESPOON,
    "tablespoons": Unit.TABLESPOON,
    "fl oz": Unit.FLUID_OUNCE,
    "fl_oz": Unit.FLUID_OUNCE,
    "fluid_ounce": Unit.FLUID_OUNCE,
    "fluid ounce": Unit.FLUID_OUNCE,
    "cups": Unit.CUP,
}

_METRIC_EQUIVALENTS: dict[Unit, Unit] = {
    Unit.OUNCE: Unit.GRAM,
    Unit.POUND: Unit.GRAM,
    Unit.FLUID_OUNCE: Unit.MILLILITER,
    Unit.CUP: Unit.MILLILITER,
}

_IMPERIAL_EQUIVALENTS: dict[Unit, Unit] = {
    Unit.GRAM: Unit.OUNCE,
    Unit.KILOGRAM: Unit.POUND,
    Unit.MILLILITER: Unit.FLUID_OUNCE,
    Unit.LITER: Unit.CUP,
}


def parse_unit(raw: str) -> Unit:
    """Resolve a unit string from an external source into a Unit.

    Raises:
        UnsupportedConversion: If the string names no supported unit
            (count units such as "piece" included).
    """
    cleaned = raw.strip().lower()
    try:
        return Unit(cleaned)
    except ValueError:
        pass
    unit = _UNIT_ALIASES.get(cleaned)
    if unit is None:
        raise UnsupportedConversion(raw)
    return unit


def canonical_unit(unit: Unit | str) -> Unit:
    """Return grams for mass units and millilitres for volume units."""
    return CANONICAL_UNITS[_as_unit(unit).family]


def convert(
    value: float,
    from_unit: Unit | str,
    to_unit: Unit | str,
    density: float = DEFAULT_DENSITY,
) -> float:
    """Convert ``value`` between two supported units.

    ``density`` (g/ml) is only used when the units belong to different
    families.

    Raises:
        UnsupportedConversion: If either unit is outside the mass and
            volume families.
    """
    source = _coerce(from_unit)
    target = _coerce(to_unit)
    if source is None or target is None:
        raise UnsupportedConversion(from_unit, to_unit)
    if source is target:
        return value

    if source in GRAMS_PER_UNIT and target in GRAMS_PER_UNIT:
        return value * GRAMS_PER_UNIT[source] / GRAMS_PER_UNIT[target]

    if source in ML_PER_UNIT and target in ML_PER_UNIT:
        return value * ML_PER_UNIT[source] / ML_PER_UNIT[target]

    if source in GRAMS_PER_UNIT and target in ML_PER_UNIT:
        grams = value * GRAMS_PER_UNIT[source]
        return grams / density / ML_PER_UNIT[target]

    if source in ML_PER_UNIT and target in GRAMS_PER_UNIT:
        millilitres = value * ML_PER_UNIT[source]
        return millilitres * density / GRAMS_PER_UNIT[target]

    raise UnsupportedConversion(source, target)


def to_metric(value: float, unit: Unit | str) -> ServingAmount:
    """Return the metric equivalent of an imperial amount.

    Units without an entry in the fixed lookup pass through unchanged.
    """
    source = _as_unit(unit)
    target = _METRIC_EQUIVALENTS.get(source)
    if target is None:
        return ServingAmount(quantity=value, unit=source)
    return ServingAmount(quantity=convert(value, source, target), unit=target)


def to_imperial(value: float, unit: Unit | str) -> ServingAmount:
    """Return the imperial equivalent of a metric amount.

    Only g, kg, ml and l are mapped (kg always becomes lb, never oz).
    """
    source = _as_unit(unit)
    target = _IMPERIAL_EQUIVALENTS.get(source)
    if target is None:
        return ServingAmount(quantity=value, unit=source)
    return ServingAmount(quantity=convert(value, source, target), unit=target)


def _as_unit(unit: Unit | str) -> Unit:
    """Coerce an exact unit identifier into a Unit or fail."""
    resolved = _coerce(unit)
    if resolved is None:
        raise UnsupportedConversion(unit)
    return resolved


def _coerce(unit: Unit | str) -> Unit | None:
    if isinstance(unit, Unit):
        return unit
    try:
        return Unit(unit)
    except ValueError:
        return None
