"""Tests für parallele Fächergruppen und die Stundenkorrektur."""

import pytest

from migration.parallel_groups import (
    build_group_index,
    correct_hours,
    get_parallel_group_for_subject,
    get_subjects_in_parallel_group,
    is_subject_in_parallel_group,
)
from models.parallel_group import ParallelGroup


def _make_group(group_id: str, subjects: list[str], hours: dict[int, int]) -> ParallelGroup:
    return ParallelGroup(id=group_id, name=group_id, subjects=subjects, hours_per_grade=hours)


class TestGroupLookup:
    def test_subject_to_group(self):
        assert get_parallel_group_for_subject("KR").id == "Religion"
        assert get_parallel_group_for_subject("TC").id == "Differenzierung"
        assert get_parallel_group_for_subject("D") is None

    def test_membership(self):
        assert is_subject_in_parallel_group("PP")
        assert not is_subject_in_parallel_group("Deutsch")

    def test_subjects_in_group(self):
        assert get_subjects_in_parallel_group("Religion") == ["KR", "ER", "PP"]
        assert get_subjects_in_parallel_group("Unbekannt") == []

    def test_duplicate_subject_rejected(self):
        """Ein Fach in zwei Gruppen ist ein Konfigurationsfehler."""
        groups = {
            "A": _make_group("A", ["X", "Y"], {5: 2}),
            "B": _make_group("B", ["Y", "Z"], {5: 2}),
        }
        with pytest.raises(ValueError, match="mehreren parallelen Gruppen"):
            build_group_index(groups)

    def test_duplicate_within_group_rejected(self):
        with pytest.raises(ValueError):
            _make_group("A", ["X", "X"], {5: 2})


class TestCorrectHours:
    def test_religion_counted_once(self):
        """KR+ER+PP zählen als eine Gruppe mit 2h."""
        result = correct_hours({"KR": 2, "ER": 2, "PP": 2, "Deutsch": 4}, 5)
        assert result.total_hours == 6
        assert result.parallel_group_hours == {"Religion": 2}
        assert result.regular_hours == {"Deutsch": 4}

    def test_group_quota_overrides_input_hours(self):
        """Maßgeblich ist das Gruppenkontingent, nicht die Eingabe."""
        result = correct_hours({"FS": 5, "IF": 1}, 8)
        assert result.total_hours == 4
        assert result.parallel_group_hours == {"Differenzierung": 4}

    def test_group_without_quota_for_grade(self):
        result = correct_hours({"FS": 3, "Mathematik": 4}, 5)
        assert result.parallel_group_hours == {"Differenzierung": 0}
        assert result.total_hours == 4

    def test_custom_groups(self):
        groups = {"G": _make_group("G", ["A", "B"], {6: 3})}
        result = correct_hours({"A": 2, "B": 2, "KR": 2}, 6, groups)
        # KR gehört hier keiner Gruppe an
        assert result.total_hours == 5
        assert result.regular_hours == {"KR": 2}

    def test_empty(self):
        assert correct_hours({}, 7).total_hours == 0
