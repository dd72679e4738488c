"""Domain errors raised by conversion and scaling."""


class NutritionSyncError(Exception):
    """Base class for application errors."""


class UnsupportedConversion(NutritionSyncError):
    """Raised when two units cannot be related by mass/volume/density rules."""

    def __init__(self, from_unit: object, to_unit: object | None = None) -> None:
        self.from_unit = str(from_unit)
        self.to_unit = None if to_unit is None else str(to_unit)
        if self.to_unit is None:
            message = f"Unsupported unit '{self.from_unit}'"
        else:
            message = (
                f"Unsupported unit conversion: '{self.from_unit}' -> '{self.to_unit}'"
            )
        super().__init__(message)


class InvalidServingSpecification(NutritionSyncError):
    """Raised when a serving quantity or unit cannot anchor a scale ratio."""

    def __init__(self, quantity: object, unit: object) -> None:
        self.quantity = quantity
        self.unit = str(unit)
        super().__init__(
            f"Invalid serving specification: quantity={quantity!r} unit='{unit}'"
        )
