"""
Unit tests for the set and scalar differ (Layer 1).
"""

from recipekit.diff.set_diff import (
    SetDiff,
    diff_ids,
    diff_sets,
    normalize_identifier,
    scalar_changed,
    text_fields_changed,
)


class TestDiffSets:
    """Natural-language identifiers compare case-insensitively."""

    def test_added_and_removed(self):
        diff = diff_sets(current={"milk", "egg"}, previous={"milk", "soy"})

        assert diff.added == ["egg"]
        assert diff.removed == ["soy"]
        assert diff.has_changes() is True

    def test_case_and_whitespace_ignored(self):
        diff = diff_sets(current=["  Peanut", "TREENUT"], previous=["peanut", "treenut "])

        assert diff.has_changes() is False

    def test_empty_identifiers_ignored(self):
        diff = diff_sets(current=["", "  ", "fish"], previous=["fish"])

        assert diff == SetDiff()

    def test_output_is_sorted_and_normalized(self):
        diff = diff_sets(current=["Sesame", "Celery", "Mustard"], previous=[])

        assert diff.added == ["celery", "mustard", "sesame"]

    def test_swapping_arguments_swaps_added_and_removed(self):
        first = ["  Peanut", "MILK", "egg "]
        second = ["peanut", "Soy", " Fish"]

        forward = diff_sets(current=first, previous=second)
        backward = diff_sets(current=second, previous=first)

        assert forward.added == backward.removed == ["egg", "milk"]
        assert forward.removed == backward.added == ["fish", "soy"]


class TestDiffIds:

    def test_exact_match(self):
        diff = diff_ids(current=["abc", "ABC"], previous=["abc"])

        assert diff.added == ["ABC"]
        assert diff.removed == []


class TestScalars:

    def test_normalize_identifier(self):
        assert normalize_identifier("  Hot_Pepper ") == "hot_pepper"

    def test_none_and_empty_text_are_equal(self):
        assert scalar_changed(None, "") is False
        assert scalar_changed("a", None) is True

    def test_numbers(self):
        assert scalar_changed(4.0, 4) is False
        assert scalar_changed(4.0, None) is True
        assert scalar_changed(None, None) is False

    def test_text_fields_changed_keeps_order(self):
        changed = text_fields_changed(
            {"b": "new", "a": "new", "c": None},
            {"b": "old", "a": "old", "c": ""},
            ["a", "b", "c"],
        )

        assert changed == ["a", "b"]
