"""Parallele Fächergruppen: Stundenberechnung ohne Doppelzählung.

Bietet eine Schule z.B. KR, ER und PP parallel an, belegt jede Schülerin nur
eines davon. Für die Stundentafel zählt die Gruppe daher genau einmal mit
ihrem festen Kontingent pro Jahrgang.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional

from config.defaults import PARALLEL_GROUPS
from models.parallel_group import ParallelGroup


def build_group_index(groups: Mapping[str, ParallelGroup]) -> dict[str, ParallelGroup]:
    """Fach-Kürzel → Gruppe. Ein Fach darf nur in einer Gruppe stehen."""
    index: dict[str, ParallelGroup] = {}
    for group in groups.values():
        for subject in group.subjects:
            if subject in index and index[subject].id != group.id:
                raise ValueError(
                    f"Fach '{subject}' ist in mehreren parallelen Gruppen: "
                    f"{index[subject].id}, {group.id}"
                )
            index[subject] = group
    return index


_GROUP_INDEX = build_group_index(PARALLEL_GROUPS)


def get_parallel_group_for_subject(subject: str) -> Optional[ParallelGroup]:
    return _GROUP_INDEX.get(subject)


def is_subject_in_parallel_group(subject: str) -> bool:
    return subject in _GROUP_INDEX


def get_subjects_in_parallel_group(group_id: str) -> list[str]:
    group = PARALLEL_GROUPS.get(group_id)
    return list(group.subjects) if group else []


@dataclass(frozen=True)
class CorrectedHours:
    """Ergebnis von correct_hours()."""

    total_hours: float
    parallel_group_hours: dict[str, int] = field(default_factory=dict)
    regular_hours: dict[str, float] = field(default_factory=dict)


def correct_hours(
    subject_hours: Mapping[str, float],
    grade: int,
    groups: Optional[Mapping[str, ParallelGroup]] = None,
) -> CorrectedHours:
    """Summiert Wochenstunden, parallele Gruppen nur einmal pro Jahrgang.

    Für Fächer einer Gruppe zählt das Gruppenkontingent des Jahrgangs, nicht
    die im Eingabe-Mapping angegebene Stundenzahl. Fächer ohne Gruppe werden
    einzeln addiert.
    """
    index = _GROUP_INDEX if groups is None else build_group_index(groups)
    parallel_group_hours: dict[str, int] = {}
    regular_hours: dict[str, float] = {}

    for subject, hours in subject_hours.items():
        group = index.get(subject)
        if group is None:
            regular_hours[subject] = hours
        elif group.id not in parallel_group_hours:
            parallel_group_hours[group.id] = group.hours_for_grade(grade)

    total = sum(parallel_group_hours.values()) + sum(regular_hours.values())
    return CorrectedHours(
        total_hours=total,
        parallel_group_hours=parallel_group_hours,
        regular_hours=regular_hours,
    )
