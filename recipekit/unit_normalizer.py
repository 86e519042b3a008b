"""Yield unit normalization using the Pint library."""

from typing import Optional, Tuple
from pint import UnitRegistry

# Initialize Pint unit registry
ureg = UnitRegistry()


class UnitNormalizer:
    """Normalizes kitchen yield units and compares yields across units."""

    # Kitchen abbreviations Pint does not parse the way cooks write them
    UNIT_ALIASES = {
        'g': 'gram', 'gr': 'gram', 'grams': 'gram',
        'kg': 'kilogram', 'kgs': 'kilogram', 'kilo': 'kilogram', 'kilos': 'kilogram',
        'mg': 'milligram',
        'lb': 'pound', 'lbs': 'pound', '#': 'pound',
        'oz': 'ounce', 'fl oz': 'fluid_ounce', 'floz': 'fluid_ounce',
        'l': 'liter', 'lt': 'liter', 'ltr': 'liter', 'litre': 'liter', 'litres': 'liter',
        'ml': 'milliliter', 'cl': 'centiliter', 'dl': 'deciliter',
        'qt': 'quart', 'pt': 'pint', 'gal': 'gallon',
        'tsp': 'teaspoon', 'tbsp': 'tablespoon', 'tbs': 'tablespoon',
        'c': 'cup', 'cups': 'cup',
    }

    def __init__(self):
        """Initialize the unit normalizer."""
        self.ureg = ureg

    def normalize_unit(self, unit: Optional[str]):
        """Resolve a unit string to a Pint unit.

        Args:
            unit: Unit as entered on the recipe (e.g. "kg", "Litres", "portions")

        Returns:
            Pint Unit, or None if the unit is empty or not a physical unit
            (portions, each, pans, ...)
        """
        if unit is None:
            return None

        unit_str = unit.strip()
        if not unit_str:
            return None

        unit_name = self.UNIT_ALIASES.get(unit_str.lower(), unit_str)

        try:
            return self.ureg.parse_units(unit_name)
        except Exception:
            # Counting units and typos are not convertible
            return None

    def canonical_unit(self, unit: Optional[str]) -> Optional[str]:
        """Return Pint's canonical name for a unit string, or None."""
        parsed = self.normalize_unit(unit)
        return str(parsed) if parsed is not None else None

    def convert(self, amount: float, from_unit: str, to_unit: str) -> Optional[float]:
        """Convert an amount between two units.

        Args:
            amount: Quantity in from_unit
            from_unit: Source unit string
            to_unit: Target unit string

        Returns:
            Converted magnitude, or None if either unit is unknown or the
            units measure different dimensions (mass vs volume)
        """
        source = self.normalize_unit(from_unit)
        target = self.normalize_unit(to_unit)
        if source is None or target is None:
            return None

        try:
            return (amount * source).to(target).magnitude
        except Exception:
            return None

    def scale_factor(
        self,
        previous: Tuple[Optional[float], Optional[str]],
        current: Tuple[Optional[float], Optional[str]]
    ) -> Optional[float]:
        """Compute how much a yield grew or shrank (current / previous).

        Same-unit yields compare directly, so counting units like "portions"
        still produce a factor.

        Args:
            previous: (amount, unit) of the saved yield
            current: (amount, unit) of the new yield

        Returns:
            Ratio of current to previous yield, or None if the yields are
            not comparable
        """
        prev_amount, prev_unit = previous
        curr_amount, curr_unit = current
        if not prev_amount or curr_amount is None:
            return None

        if (prev_unit or "").strip().lower() == (curr_unit or "").strip().lower():
            return curr_amount / prev_amount

        converted = self.convert(curr_amount, curr_unit or "", prev_unit or "")
        if converted is None:
            return None
        return converted / prev_amount
