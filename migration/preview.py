"""Gesamtvorschau: fasst Klassen-, Zuordnungs- und Schülerpläne zusammen.

Das Ergebnis wird vollständig über MigrationPreview validiert. Schlägt das
fehl, liegt ein Logikfehler in einem Planer vor, kein Datenproblem; dafür
gibt es MigrationContractError.
"""

import logging
from typing import Iterable, Optional

from pydantic import ValidationError

from config.schema import AggregationOptions, RiskThresholds
from migration.workload import calculate_teacher_workload_analysis
from models.assignment import Assignment
from models.migration import (
    AssignmentDecision,
    ClassPromotionPlan,
    Conflict,
    MigrationPreview,
    StudentPromotionPlan,
)
from models.school_year import SchoolYear
from models.teacher import Teacher

logger = logging.getLogger(__name__)


class MigrationContractError(Exception):
    """Die zusammengesetzte Vorschau verletzt ihr eigenes Schema."""

    def __init__(self, validation_error: ValidationError):
        self.validation_error = validation_error
        super().__init__(
            f"Vorschau ist inkonsistent ({validation_error.error_count()} Fehler):\n"
            f"{validation_error}"
        )


# ─── Konflikte ────────────────────────────────────────────────────────────────

def extract_conflicts_from_decisions(decisions: Iterable[AssignmentDecision]) -> list[Conflict]:
    """manual → warning, impossible → error; auto erzeugt keinen Konflikt."""
    conflicts: list[Conflict] = []
    for d in decisions:
        if d.decision == "auto":
            continue
        impossible = d.decision == "impossible"
        label = "Unmögliche" if impossible else "Manuelle"
        conflicts.append(Conflict(
            type="mapping_error",
            severity="error" if impossible else "warning",
            message=d.reason or (
                f"{label} Migration für {d.teacher_name} - {d.subject} ({d.old_class_name})"
            ),
            related_id=d.teacher_id,
            related_type="teacher",
            suggested_resolution=(
                "Zuordnung kann nicht migriert werden - manuelle Neuzuordnung erforderlich"
                if impossible
                else "Manuelle Überprüfung und Anpassung erforderlich"
            ),
            affected_items=(d.assignment_id,),
        ))
    return conflicts


def extract_conflicts_from_promotions(promotions: Iterable[StudentPromotionPlan]) -> list[Conflict]:
    """Schülerpläne mit Status conflict → error."""
    return [
        Conflict(
            type="student_conflict",
            severity="error",
            message=p.reason or (
                f"Konflikt bei Schülerversetzung: {p.student_name} ({p.old_class_name})"
            ),
            related_id=p.student_id,
            related_type="student",
            suggested_resolution="Schülerversetzung manuell überprüfen und korrigieren",
            affected_items=(p.student_id,),
        )
        for p in promotions
        if p.status == "conflict"
    ]


def deduplicate_conflicts(conflicts: Iterable[Conflict]) -> list[Conflict]:
    """Entfernt Duplikate (Typ, Bezugs-ID, Meldung); die erste Meldung bleibt."""
    seen: set[tuple[str, str, str]] = set()
    unique: list[Conflict] = []
    for c in conflicts:
        if c.dedup_key not in seen:
            seen.add(c.dedup_key)
            unique.append(c)
    return unique


def sort_conflicts(conflicts: list[Conflict]) -> list[Conflict]:
    """Fehler vor Warnungen, danach nach Typ; sonst Eingabereihenfolge."""
    return sorted(conflicts, key=lambda c: (c.severity != "error", c.type))


# ─── Statistik ────────────────────────────────────────────────────────────────

def calculate_migration_statistics(
    class_promotions: list[ClassPromotionPlan],
    decisions: list[AssignmentDecision],
    student_promotions: list[StudentPromotionPlan],
    conflicts: list[Conflict],
    classes_graduated: Optional[int] = None,
) -> dict:
    """Kennzahlen in einem Durchlauf pro Sammlung.

    classes_graduated kommt aus dem Klassenplaner; fehlt die Angabe, zählen
    die verschiedenen Ausgangsklassen der abgehenden Schüler.
    """
    verdicts = {"auto": 0, "manual": 0, "impossible": 0}
    for d in decisions:
        verdicts[d.decision] += 1

    statuses = {"promote": 0, "graduate": 0, "conflict": 0}
    graduating_classes: set[str] = set()
    for p in student_promotions:
        statuses[p.status] += 1
        if p.status == "graduate":
            graduating_classes.add(p.old_class_id)

    errors = sum(1 for c in conflicts if c.severity == "error")

    graduated = len(graduating_classes) if classes_graduated is None else classes_graduated
    return {
        "total_classes": len(class_promotions) + graduated,
        "classes_promoted": len(class_promotions),
        "classes_graduated": graduated,
        "total_assignments": len(decisions),
        "assignments_auto": verdicts["auto"],
        "assignments_manual": verdicts["manual"],
        "assignments_impossible": verdicts["impossible"],
        "total_students": len(student_promotions),
        "students_promoted": statuses["promote"],
        "students_graduated": statuses["graduate"],
        "conflicts_count": errors,
        "warnings_count": len(conflicts) - errors,
    }


# ─── Zusammenführung ──────────────────────────────────────────────────────────

def aggregate_migration_preview(
    from_year: SchoolYear,
    to_year: SchoolYear,
    class_promotions: list[ClassPromotionPlan],
    assignment_decisions: list[AssignmentDecision],
    student_promotions: list[StudentPromotionPlan],
    existing_conflicts: Iterable[Conflict] = (),
    current_assignments: Iterable[Assignment] = (),
    teachers: Iterable[Teacher] = (),
    options: Optional[AggregationOptions] = None,
    risk: Optional[RiskThresholds] = None,
    classes_graduated: Optional[int] = None,
) -> MigrationPreview:
    """Baut die validierte Gesamtvorschau.

    Raises:
        MigrationContractError: wenn die zusammengesetzte Vorschau das
            Schema oder die Querprüfungen von MigrationPreview verletzt.
    """
    opts = options or AggregationOptions()

    classes = list(class_promotions)
    decisions = list(assignment_decisions)
    students = list(student_promotions)

    conflicts = (
        list(existing_conflicts)
        + extract_conflicts_from_decisions(decisions)
        + extract_conflicts_from_promotions(students)
    )
    if opts.deduplicate_conflicts:
        before = len(conflicts)
        conflicts = deduplicate_conflicts(conflicts)
        logger.debug(f"{before - len(conflicts)} doppelte Konflikte entfernt")
    if opts.sort_results:
        conflicts = sort_conflicts(conflicts)
        classes.sort(key=lambda p: (p.old_grade, p.old_class_name))
        decisions.sort(key=lambda d: (d.old_grade, d.old_class_name, d.subject, d.assignment_id))
        students.sort(key=lambda s: (s.old_grade, s.old_class_name, s.student_name, s.student_id))

    workload = []
    if opts.include_workload_analysis:
        workload = calculate_teacher_workload_analysis(
            decisions, list(current_assignments), list(teachers), conflicts, opts, risk)

    payload = {
        "from_year": from_year,
        "to_year": to_year,
        "class_promotions": classes,
        "assignment_decisions": decisions,
        "student_promotions": students,
        "statistics": calculate_migration_statistics(
            classes, decisions, students, conflicts, classes_graduated),
        "conflicts": conflicts,
        "teacher_workload": workload,
    }
    try:
        preview = MigrationPreview.model_validate(payload)
    except ValidationError as e:
        logger.error(f"Vorschau verletzt das Ausgabeschema: {e.error_count()} Fehler")
        raise MigrationContractError(e) from e

    s = preview.statistics
    logger.info(
        f"Vorschau {from_year.name} → {to_year.name}: {s.classes_promoted} Klassen, "
        f"{s.total_assignments} Zuordnungen, {s.total_students} Schüler, "
        f"{s.conflicts_count} Fehler, {s.warnings_count} Warnungen"
    )
    return preview
