"""Schüler-Versetzungsplaner: ordnet Schüler über die Klassenpläne neu zu."""

import logging
from collections import defaultdict
from typing import Optional

from pydantic import BaseModel

from config.defaults import FINAL_GRADE, GRADE_PROGRESSION, STUDENT_STATUS_DESCRIPTIONS
from config.schema import StudentPromotionOptions
from migration.class_names import is_valid_grade
from models.migration import ClassPromotionPlan, Conflict, StudentPromotionPlan
from models.school_class import SchoolClass
from models.student import Student

logger = logging.getLogger(__name__)


class GradeCounts(BaseModel):
    total: int = 0
    promoted: int = 0
    graduated: int = 0
    conflicts: int = 0


class StudentPromotionStatistics(BaseModel):
    total_students: int = 0
    promoted: int = 0
    graduated: int = 0
    conflicts: int = 0       # Schüler mit Status conflict oder übersprungen (Fehler)
    by_grade: dict[int, GradeCounts] = {}
    by_class: dict[str, int] = {}   # alte Klassen-ID → Anzahl Schüler


class StudentPromotionResult(BaseModel):
    promotions: list[StudentPromotionPlan]
    conflicts: list[Conflict]
    statistics: StudentPromotionStatistics


def placeholder_class_id(old_class_id: str, new_grade: int) -> str:
    """Vorläufige Zielklassen-ID; die echte ID vergibt erst die Ausführung."""
    return f"{old_class_id}_promoted_to_{new_grade}"


# ─── Prüfungen ────────────────────────────────────────────────────────────────

def validate_student(student: Student) -> list[Conflict]:
    conflicts: list[Conflict] = []
    name = student.full_name or student.id

    if not is_valid_grade(student.grade):
        conflicts.append(Conflict(
            type="student_conflict",
            severity="error",
            message=f'Schüler "{name}" hat eine ungültige Jahrgangsstufe: {student.grade}',
            related_id=student.id,
            related_type="student",
            suggested_resolution="Korrigieren Sie die Jahrgangsstufe auf einen Wert zwischen 5 und 10",
            affected_items=(student.id,),
        ))

    if not student.class_id:
        conflicts.append(Conflict(
            type="student_conflict",
            severity="error",
            message=f'Schüler "{name}" ist keiner Klasse zugeordnet',
            related_id=student.id,
            related_type="student",
            suggested_resolution=(
                "Weisen Sie den Schüler einer Klasse zu oder schließen Sie ihn "
                "von der Migration aus"
            ),
            affected_items=(student.id,),
        ))

    if not student.has_complete_name:
        conflicts.append(Conflict(
            type="student_conflict",
            severity="warning",
            message=f'Schüler mit ID "{student.id}" hat unvollständige Namensangaben',
            related_id=student.id,
            related_type="student",
            suggested_resolution="Vervollständigen Sie Vor- und Nachname des Schülers",
            affected_items=(student.id,),
        ))

    return conflicts


def check_class_groups(
    students_by_class: dict[str, list[Student]],
    plans_by_class: dict[str, ClassPromotionPlan],
    options: StudentPromotionOptions,
) -> list[Conflict]:
    """Prüfungen über alle Schüler einer Klasse hinweg."""
    conflicts: list[Conflict] = []

    for class_id, students in students_by_class.items():
        plan = plans_by_class.get(class_id)
        promoting = [
            s for s in students
            if is_valid_grade(s.grade) and s.grade != FINAL_GRADE
        ]

        if plan is None:
            graduating_only = options.graduate_grade_10 and not promoting
            if not graduating_only:
                conflicts.append(Conflict(
                    type="student_conflict",
                    severity="error",
                    message=(
                        f'Keine Klassenversetzung geplant für Klasse mit ID "{class_id}" '
                        f"({len(students)} Schüler betroffen)"
                    ),
                    related_id=class_id,
                    related_type="class",
                    suggested_resolution=(
                        "Erstellen Sie einen Versetzungsplan für diese Klasse oder "
                        "migrieren Sie die Schüler manuell"
                    ),
                    affected_items=tuple(s.id for s in students),
                ))
            continue

        mismatched = [s for s in students if s.grade != plan.old_grade]
        if mismatched:
            conflicts.append(Conflict(
                type="student_conflict",
                severity="warning",
                message=(
                    f"Jahrgangsstufen-Konflikt: {len(mismatched)} Schüler in Klasse "
                    f'"{plan.old_class_name}" haben abweichende Jahrgangsstufen'
                ),
                related_id=class_id,
                related_type="class",
                suggested_resolution="Jahrgangsstufen der Schüler mit der Klasse abgleichen",
                affected_items=tuple(s.id for s in mismatched),
            ))

        if not options.allow_overcrowding and len(promoting) > options.max_class_size:
            conflicts.append(Conflict(
                type="student_conflict",
                severity="warning",
                message=(
                    f'Potenzielle Überfüllung: Klasse "{plan.new_class_name}" würde '
                    f"{len(promoting)} Schüler erhalten (Limit: {options.max_class_size})"
                ),
                related_id=class_id,
                related_type="class",
                suggested_resolution=(
                    "Erwägen Sie eine Klassenteilung oder erhöhen Sie das Klassenlimit"
                ),
                affected_items=tuple(s.id for s in promoting),
            ))

    return conflicts


# ─── Planer ───────────────────────────────────────────────────────────────────

class StudentPromotionPlanner:
    """Plant die Versetzung aller Schüler anhand der Klassenpläne."""

    def __init__(self, options: Optional[StudentPromotionOptions] = None):
        self.options = options or StudentPromotionOptions()

    def plan(
        self,
        students: list[Student],
        class_promotions: list[ClassPromotionPlan],
        source_classes: Optional[list[SchoolClass]] = None,
    ) -> StudentPromotionResult:
        opts = self.options
        plans_by_class = {p.old_class_id: p for p in class_promotions}
        class_names = {c.id: c.name for c in source_classes or []}
        class_names.update({p.old_class_id: p.old_class_name for p in class_promotions})

        students_by_class: dict[str, list[Student]] = defaultdict(list)
        for s in students:
            if s.class_id:
                students_by_class[s.class_id].append(s)

        conflicts = check_class_groups(students_by_class, plans_by_class, opts)
        promotions: list[StudentPromotionPlan] = []
        skipped: list[Student] = []

        for student in students:
            student_conflicts = validate_student(student)
            conflicts.extend(student_conflicts)
            if any(c.severity == "error" for c in student_conflicts):
                skipped.append(student)
                logger.debug(f"Schüler {student.id} übersprungen (Fehler bei der Prüfung)")
                continue

            plan = self._plan_student(
                student, plans_by_class.get(student.class_id), class_names, conflicts)
            if plan is not None:
                promotions.append(plan)

        stats = self._statistics(promotions, skipped, len(students))
        logger.info(
            f"Schülerversetzung: {stats.promoted} versetzt, {stats.graduated} Abschluss, "
            f"{stats.conflicts} mit Konflikt (gesamt {stats.total_students})"
        )
        return StudentPromotionResult(promotions=promotions, conflicts=conflicts, statistics=stats)

    def _plan_student(
        self,
        student: Student,
        class_plan: Optional[ClassPromotionPlan],
        class_names: dict[str, str],
        conflicts: list[Conflict],
    ) -> Optional[StudentPromotionPlan]:
        opts = self.options
        name = student.full_name or student.id
        old_class_name = class_names.get(student.class_id, student.class_id)
        base = dict(
            student_id=student.id,
            student_name=name,
            old_class_id=student.class_id,
            old_class_name=old_class_name,
            old_grade=student.grade,
        )

        if student.grade == FINAL_GRADE:
            if opts.graduate_grade_10:
                return StudentPromotionPlan(
                    **base, status="graduate", reason=STUDENT_STATUS_DESCRIPTIONS["graduate"])
            conflicts.append(Conflict(
                type="student_conflict",
                severity="warning",
                message=(
                    f'Schüler "{name}" (Jahrgang 10) wird nicht versetzt: '
                    f"Abschluss ist deaktiviert"
                ),
                related_id=student.id,
                related_type="student",
                suggested_resolution="Schüler manuell einer Klasse im Zieljahr zuordnen",
                affected_items=(student.id,),
            ))
            return None

        if class_plan is None:
            if not opts.handle_orphaned_students:
                conflicts.append(Conflict(
                    type="student_conflict",
                    severity="warning",
                    message=(
                        f'Schüler "{name}" wird nicht migriert: keine Klassenversetzung '
                        f'für Klasse "{old_class_name}"'
                    ),
                    related_id=student.id,
                    related_type="student",
                    affected_items=(student.id,),
                ))
                return None
            conflicts.append(Conflict(
                type="student_conflict",
                severity="error",
                message=(
                    f'Schüler "{name}" kann nicht versetzt werden: keine '
                    f'Klassenversetzung für Klasse "{student.class_id}"'
                ),
                related_id=student.id,
                related_type="student",
                suggested_resolution=(
                    "Erstellen Sie einen Klassen-Versetzungsplan oder weisen Sie den "
                    "Schüler manuell zu"
                ),
                affected_items=(student.id,),
            ))
            return StudentPromotionPlan(
                **base, status="conflict", reason="Keine Klassenversetzung verfügbar")

        target_grade = GRADE_PROGRESSION[student.grade]
        if target_grade != class_plan.new_grade:
            conflicts.append(Conflict(
                type="student_conflict",
                severity="warning",
                message=(
                    f'Jahrgangsstufen-Konflikt für Schüler "{name}": erwartet '
                    f"{target_grade}, Klasse wird zu {class_plan.new_grade} versetzt"
                ),
                related_id=student.id,
                related_type="student",
                suggested_resolution="Jahrgangsstufe des Schülers überprüfen",
                affected_items=(student.id,),
            ))

        return StudentPromotionPlan(
            **base,
            new_class_id=placeholder_class_id(class_plan.old_class_id, class_plan.new_grade),
            new_class_name=class_plan.new_class_name,
            new_grade=class_plan.new_grade,
            status="promote",
            reason=f"Versetzung von Klasse {old_class_name} nach {class_plan.new_class_name}",
        )

    @staticmethod
    def _statistics(
        promotions: list[StudentPromotionPlan], skipped: list[Student], total: int
    ) -> StudentPromotionStatistics:
        stats = StudentPromotionStatistics(total_students=total, conflicts=len(skipped))
        by_grade: dict[int, GradeCounts] = defaultdict(GradeCounts)
        by_class: dict[str, int] = defaultdict(int)

        # Übersprungene Schüler zählen als Konflikt ihres Jahrgangs, sofern gültig
        for s in skipped:
            if is_valid_grade(s.grade):
                by_grade[s.grade].total += 1
                by_grade[s.grade].conflicts += 1

        for p in promotions:
            counts = by_grade[p.old_grade]
            counts.total += 1
            by_class[p.old_class_id] += 1
            if p.status == "promote":
                stats.promoted += 1
                counts.promoted += 1
            elif p.status == "graduate":
                stats.graduated += 1
                counts.graduated += 1
            else:
                stats.conflicts += 1
                counts.conflicts += 1

        stats.by_grade = dict(sorted(by_grade.items()))
        stats.by_class = dict(by_class)
        return stats


# ─── Auswertung ───────────────────────────────────────────────────────────────

def analyze_promotions_by_grade(promotions: list[StudentPromotionPlan]) -> list[dict]:
    """Pro Ausgangsjahrgang: Anzahl, Zieljahrgänge und Statusverteilung."""
    rows: dict[int, dict] = {}
    for p in promotions:
        row = rows.setdefault(p.old_grade, {
            "grade": p.old_grade,
            "count": 0,
            "target_grades": set(),
            "statuses": {"promote": 0, "graduate": 0, "conflict": 0},
        })
        row["count"] += 1
        row["statuses"][p.status] += 1
        if p.new_grade is not None:
            row["target_grades"].add(p.new_grade)
    for row in rows.values():
        row["target_grades"] = sorted(row["target_grades"])
    return [rows[g] for g in sorted(rows)]


def get_promotion_summary(result: StudentPromotionResult) -> str:
    """Einzeilige Zusammenfassung für Log und Konsole."""
    s = result.statistics
    errors = sum(1 for c in result.conflicts if c.severity == "error")
    warnings = len(result.conflicts) - errors
    text = (
        f"{s.total_students} Schüler: {s.promoted} versetzt, "
        f"{s.graduated} Abschluss, {s.conflicts} mit Konflikt"
    )
    if errors or warnings:
        text += f" ({errors} Fehler, {warnings} Warnungen)"
    return text
