"""Fach-Jahrgangs-Regeln für den Schuljahreswechsel (NRW Realschule).

Die Regeln selbst stehen als Daten in config.defaults.SUBJECT_GRADE_MAPPING;
dieses Modul enthält nur die Abfragen darauf.
"""

from dataclasses import dataclass, field
from typing import Literal, Optional

from config.defaults import (
    FINAL_GRADE,
    REALSCHULE_GRADES,
    SUBJECT_ALIASES,
    SUBJECT_GRADE_MAPPING,
)
from migration.class_names import is_valid_grade
from migration.parallel_groups import get_parallel_group_for_subject

Verdict = Literal["auto", "manual", "impossible"]

_KEYS_CASEFOLD = {k.casefold(): k for k in SUBJECT_GRADE_MAPPING}
_ALIASES_CASEFOLD = {k.casefold(): v for k, v in SUBJECT_ALIASES.items()}


def resolve_subject_key(subject: str) -> Optional[str]:
    """Fachname oder Kürzel → Schlüssel der Fach-Jahrgangs-Matrix (oder None)."""
    if subject in SUBJECT_GRADE_MAPPING:
        return subject
    folded = subject.strip().casefold()
    if folded in _KEYS_CASEFOLD:
        return _KEYS_CASEFOLD[folded]
    return _ALIASES_CASEFOLD.get(folded)


def evaluate_migration(current_grade: int, target_grade: int, subject: str) -> Verdict:
    """Bewertet, ob eine Zuordnung von current_grade nach target_grade mitgehen kann.

    Reihenfolge der Prüfungen:
      1. Jahrgänge außerhalb 5–10               → impossible
      2. Fach unbekannt / in einem Jahrgang nicht angeboten → impossible
      3. Jahrgang 10 (Abschluss)               → impossible
      4. Sprung um mehr als einen Jahrgang     → manual
      5. Schritt +1: Pausenjahr → manual, Differenzierung → manual,
         Religion → auto, sonst Standardregel des Fachs
      6. Schritt −1                            → manual
    """
    if not is_valid_grade(current_grade) or not is_valid_grade(target_grade):
        return "impossible"

    key = resolve_subject_key(subject)
    if key is None:
        return "impossible"
    rule = SUBJECT_GRADE_MAPPING[key]
    if target_grade not in rule["grades"] or current_grade not in rule["grades"]:
        return "impossible"

    if current_grade == FINAL_GRADE:
        return "impossible"

    if abs(target_grade - current_grade) > 1:
        return "manual"

    if target_grade == current_grade + 1:
        if target_grade in rule["breaks"]:
            return "manual"
        group = get_parallel_group_for_subject(key)
        if group is not None:
            if group.id == "Differenzierung":
                return "manual"
            if group.id == "Religion":
                return "auto"
        return rule["migration_rule"]

    return "manual"


def get_subject_availability(grade: int) -> list[str]:
    """Alle Fächer, die im Jahrgang unterrichtet werden (sortiert)."""
    if not is_valid_grade(grade):
        return []
    return sorted(k for k, rule in SUBJECT_GRADE_MAPPING.items() if grade in rule["grades"])


@dataclass(frozen=True)
class SubjectMigrationAvailability:
    available: list[str]     # in beiden Jahrgängen
    unavailable: list[str]   # entfallen im Zieljahrgang
    new: list[str]           # kommen im Zieljahrgang hinzu


def get_subject_migration_availability(from_grade: int, to_grade: int) -> SubjectMigrationAvailability:
    source = set(get_subject_availability(from_grade))
    target = set(get_subject_availability(to_grade))
    return SubjectMigrationAvailability(
        available=sorted(source & target),
        unavailable=sorted(source - target),
        new=sorted(target - source),
    )


def is_subject_on_break(subject: str, grade: int) -> bool:
    """True, wenn das Fach im Jahrgang reduziert/pausiert ist (Bio 7, Physik 9)."""
    key = resolve_subject_key(subject)
    if key is None:
        return False
    return grade in SUBJECT_GRADE_MAPPING[key]["breaks"]


def get_subjects_on_break(grade: int) -> list[str]:
    return sorted(k for k, rule in SUBJECT_GRADE_MAPPING.items() if grade in rule["breaks"])


def categorize_migration_rules(from_grade: int, to_grade: int) -> dict[str, list[str]]:
    """Teilt alle Fächer des Ausgangsjahrgangs nach Migrationsregel auf."""
    buckets: dict[str, list[str]] = {"auto": [], "manual": [], "impossible": []}
    for subject in get_subject_availability(from_grade):
        buckets[evaluate_migration(from_grade, to_grade, subject)].append(subject)
    return {k: sorted(v) for k, v in buckets.items()}


@dataclass(frozen=True)
class RuleStatistics:
    total: int
    auto: int
    manual: int
    impossible: int
    percentage_auto: int
    percentage_manual: int
    percentage_impossible: int


def _percent(part: int, total: int) -> int:
    # kaufmännisch gerundet, nicht Banker's Rounding
    return int(part * 100 / total + 0.5) if total else 0


def calculate_rule_statistics(from_grade: int, to_grade: int) -> RuleStatistics:
    buckets = categorize_migration_rules(from_grade, to_grade)
    auto, manual, impossible = (len(buckets[k]) for k in ("auto", "manual", "impossible"))
    total = auto + manual + impossible
    return RuleStatistics(
        total=total,
        auto=auto,
        manual=manual,
        impossible=impossible,
        percentage_auto=_percent(auto, total),
        percentage_manual=_percent(manual, total),
        percentage_impossible=_percent(impossible, total),
    )


def create_migration_matrix() -> dict[int, dict[int, dict[str, Verdict]]]:
    """Ausgangsjahrgang → Zieljahrgang → Fach → Regel, für alle Jahrgänge 5–10."""
    return {
        from_grade: {
            to_grade: {
                subject: evaluate_migration(from_grade, to_grade, subject)
                for subject in get_subject_availability(from_grade)
            }
            for to_grade in REALSCHULE_GRADES
        }
        for from_grade in REALSCHULE_GRADES
    }


@dataclass(frozen=True)
class ParallelMigrationInfo:
    migration_rule: Verdict
    parallel_group: Optional[str]
    parallel_subjects: list[str] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def evaluate_parallel_subject_migration(subject: str, from_grade: int, to_grade: int) -> ParallelMigrationInfo:
    """Migrationsregel plus Hinweise auf alternative Fächer der Gruppe."""
    rule = evaluate_migration(from_grade, to_grade, subject)
    key = resolve_subject_key(subject) or subject
    group = get_parallel_group_for_subject(key)
    if group is None:
        return ParallelMigrationInfo(migration_rule=rule, parallel_group=None)

    alternatives = [s for s in group.subjects if s != key]
    if group.id == "Differenzierung":
        notes = ["Differenzierungsfach: Schüler können bei Jahrgangsstufenwechsel das Fach wechseln"]
    else:
        notes = ["Religionsfach: Alternative Fächer verfügbar"]
    notes.append("Alternative Fächer: " + ", ".join(alternatives))
    return ParallelMigrationInfo(
        migration_rule=rule,
        parallel_group=group.name,
        parallel_subjects=alternatives,
        notes=notes,
    )
