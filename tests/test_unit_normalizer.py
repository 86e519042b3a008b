"""
Unit tests for yield unit normalization.
"""

import pytest

from recipekit.unit_normalizer import UnitNormalizer


@pytest.fixture
def normalizer():
    return UnitNormalizer()


class TestNormalizeUnit:

    def test_kitchen_aliases(self, normalizer):
        assert normalizer.canonical_unit("kg") == "kilogram"
        assert normalizer.canonical_unit("Litres") == "liter"
        assert normalizer.canonical_unit("tbsp") == "tablespoon"

    def test_empty_unit(self, normalizer):
        assert normalizer.normalize_unit(None) is None
        assert normalizer.normalize_unit("  ") is None

    def test_unknown_unit(self, normalizer):
        assert normalizer.normalize_unit("hotel pans") is None


class TestConvert:

    def test_mass(self, normalizer):
        assert normalizer.convert(2, "kg", "g") == pytest.approx(2000)

    def test_volume(self, normalizer):
        assert normalizer.convert(1, "l", "ml") == pytest.approx(1000)

    def test_incompatible_dimensions(self, normalizer):
        assert normalizer.convert(1, "kg", "l") is None


class TestScaleFactor:

    def test_same_unit(self, normalizer):
        assert normalizer.scale_factor((4, "kg"), (6, "KG")) == pytest.approx(1.5)

    def test_counting_unit(self, normalizer):
        assert normalizer.scale_factor((24, "portions"), (12, "portions")) == pytest.approx(0.5)

    def test_converted_units(self, normalizer):
        assert normalizer.scale_factor((500, "g"), (1, "kg")) == pytest.approx(2.0)

    def test_not_comparable(self, normalizer):
        assert normalizer.scale_factor((1, "kg"), (1, "l")) is None
        assert normalizer.scale_factor((0, "kg"), (1, "kg")) is None
        assert normalizer.scale_factor((None, "kg"), (1, "kg")) is None
