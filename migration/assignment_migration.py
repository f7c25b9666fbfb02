"""Migrationsentscheidungen für Unterrichtszuordnungen (auto / manual / impossible)."""

import logging
from collections import defaultdict
from typing import Optional

from pydantic import BaseModel

from config.defaults import FINAL_GRADE, MIGRATION_REASONS, SUBJECT_GRADE_MAPPING
from config.schema import AssignmentMigrationOptions
from migration.class_names import is_valid_grade
from migration.parallel_groups import get_parallel_group_for_subject
from migration.subject_rules import (
    evaluate_parallel_subject_migration,
    is_subject_on_break,
    resolve_subject_key,
)
from models.assignment import Assignment
from models.migration import AssignmentDecision, ClassPromotionPlan, Conflict
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher

logger = logging.getLogger(__name__)


class VerdictCounts(BaseModel):
    auto: int = 0
    manual: int = 0
    impossible: int = 0

    @property
    def total(self) -> int:
        return self.auto + self.manual + self.impossible


class AssignmentMigrationStatistics(BaseModel):
    total: int = 0
    auto: int = 0
    manual: int = 0
    impossible: int = 0
    by_transition: dict[str, VerdictCounts] = {}   # "7→8"
    by_subject: dict[str, VerdictCounts] = {}


class AssignmentMigrationResult(BaseModel):
    decisions: list[AssignmentDecision]
    conflicts: list[Conflict]
    statistics: AssignmentMigrationStatistics


def select_reason(verdict: str, subject_key: str, old_grade: int, new_grade: int) -> str:
    """Begründungstext passend zur Entscheidung."""
    reasons = MIGRATION_REASONS[verdict]
    group = get_parallel_group_for_subject(subject_key)
    if verdict == "auto":
        if group is not None and group.id == "Religion":
            return reasons["parallel_group_auto"]
        if SUBJECT_GRADE_MAPPING[subject_key]["continuity"] == "continuous":
            return reasons["continuous_subject"]
        return reasons["standard_promotion"]
    if verdict == "manual":
        if is_subject_on_break(subject_key, new_grade):
            return reasons["subject_break"]
        if group is not None and group.id == "Differenzierung":
            return reasons["parallel_group_review"]
        if abs(new_grade - old_grade) > 1:
            return reasons["non_consecutive"]
        return reasons["hour_adjustment"]
    return reasons["subject_not_available"]


def build_notes(subject_key: str, old_grade: int, new_grade: int) -> list[str]:
    notes: list[str] = []
    if is_subject_on_break(subject_key, new_grade):
        notes.append(f"{subject_key} reduziert in Klasse {new_grade} - Stundenzahl anpassen")
    group = get_parallel_group_for_subject(subject_key)
    if group is not None and group.id == "Differenzierung":
        notes.append("Differenzierungsfach - Schülerwahl kann sich ändern")
        others = [s for s in group.subjects if s != subject_key]
        notes.append("Alternative Fächer verfügbar: " + ", ".join(others))
    if abs(new_grade - old_grade) > 1:
        notes.append(f"Ungewöhnlicher Jahrgangsstufenwechsel: {old_grade} → {new_grade}")
    return notes


# ─── Planer ───────────────────────────────────────────────────────────────────

class AssignmentMigrationPlanner:
    """Entscheidet pro Zuordnung, ob sie ins neue Schuljahr mitgehen kann."""

    def __init__(self, options: Optional[AssignmentMigrationOptions] = None):
        self.options = options or AssignmentMigrationOptions()

    def plan(
        self,
        assignments: list[Assignment],
        classes: list[SchoolClass],
        class_promotions: list[ClassPromotionPlan],
        teachers: list[Teacher],
        subjects: list[Subject],
    ) -> AssignmentMigrationResult:
        classes_by_id = {c.id: c for c in classes}
        plans_by_class = {p.old_class_id: p for p in class_promotions}
        teachers_by_id = {t.id: t for t in teachers}
        subjects_by_id = {s.id: s for s in subjects}

        decisions: list[AssignmentDecision] = []
        conflicts: list[Conflict] = []

        for a in assignments:
            cls = classes_by_id.get(a.class_id)
            if cls is None or not is_valid_grade(cls.grade):
                conflicts.append(Conflict(
                    type="mapping_error",
                    severity="error",
                    message=(
                        f'Zuordnung "{a.id}" verweist auf unbekannte oder ungültige '
                        f'Klasse "{a.class_id}"'
                    ),
                    related_id=a.id,
                    related_type="assignment",
                    suggested_resolution="Klassenzuordnung der Unterrichtsstunde korrigieren",
                    affected_items=(a.id,),
                ))
                continue

            teacher = teachers_by_id.get(a.teacher_id)
            decision = self._decide(
                a, cls, plans_by_class.get(cls.id), teacher,
                subjects_by_id.get(a.subject_id), conflicts,
            )
            decisions.append(decision)
            logger.debug(
                f"Zuordnung {a.id} ({decision.subject}, {cls.name}): {decision.decision}")

        stats = self._statistics(decisions)
        logger.info(
            f"Zuordnungen: {stats.auto} auto, {stats.manual} manuell, "
            f"{stats.impossible} unmöglich (gesamt {stats.total})"
        )
        return AssignmentMigrationResult(
            decisions=decisions, conflicts=conflicts, statistics=stats)

    def _decide(
        self,
        a: Assignment,
        cls: SchoolClass,
        class_plan: Optional[ClassPromotionPlan],
        teacher: Optional[Teacher],
        subject: Optional[Subject],
        conflicts: list[Conflict],
    ) -> AssignmentDecision:
        opts = self.options
        teacher_name = teacher.full_name if teacher else a.teacher_id
        subject_code = subject.short_name if subject else a.subject_id
        base = dict(
            assignment_id=a.id,
            teacher_id=a.teacher_id,
            teacher_name=teacher_name,
            subject=subject_code,
            old_class_id=cls.id,
            old_class_name=cls.name,
            old_grade=cls.grade,
            hours_per_week=a.hours_per_week,
            semester=a.semester,
        )
        impossible = MIGRATION_REASONS["impossible"]

        key = None
        if subject is not None:
            key = resolve_subject_key(subject.short_name) or resolve_subject_key(subject.name)
        if key is None:
            conflicts.append(Conflict(
                type="missing_subject",
                severity="error",
                message=f'Fach "{subject_code}" ist unbekannt',
                related_id=a.subject_id,
                related_type="subject",
                suggested_resolution="Fach in der Fächerliste anlegen oder Zuordnung korrigieren",
                affected_items=(a.id,),
            ))
            return AssignmentDecision(
                **base, decision="impossible", reason=impossible["subject_not_available"])

        if cls.grade == FINAL_GRADE:
            return AssignmentDecision(
                **base, decision="impossible", reason=impossible["graduation"],
                migration_rule="impossible")

        if class_plan is None:
            return AssignmentDecision(
                **base, decision="impossible", reason=impossible["missing_target_class"])

        if teacher is not None and opts.validate_teacher_qualifications:
            if not teacher.is_active and not opts.include_inactive_teachers:
                conflicts.append(Conflict(
                    type="inactive_teacher",
                    severity="warning",
                    message=f'Lehrer "{teacher_name}" ist für das nächste Schuljahr nicht aktiv',
                    related_id=teacher.id,
                    related_type="teacher",
                    suggested_resolution="Zuordnung einer aktiven Lehrkraft übertragen",
                    affected_items=(a.id,),
                ))
                return AssignmentDecision(
                    **base,
                    new_class_name=class_plan.new_class_name,
                    new_grade=class_plan.new_grade,
                    decision="impossible",
                    reason=impossible["inactive_teacher"],
                )
            if not self._is_qualified(teacher, subject, key):
                conflicts.append(Conflict(
                    type="mapping_error",
                    severity="warning",
                    message=f'Lehrer "{teacher_name}" hat "{subject_code}" nicht als Unterrichtsfach',
                    related_id=teacher.id,
                    related_type="teacher",
                    suggested_resolution="Lehrerqualifikation überprüfen oder anderen Lehrer zuweisen",
                    affected_items=(a.id,),
                ))

        new_grade = class_plan.new_grade
        info = evaluate_parallel_subject_migration(key, cls.grade, new_grade)
        verdict = info.migration_rule

        if verdict == "impossible":
            conflicts.append(Conflict(
                type="missing_subject",
                severity="error",
                message=f'Fach "{subject_code}" ist in Jahrgangsstufe {new_grade} nicht verfügbar',
                related_id=a.id,
                related_type="assignment",
                suggested_resolution="Fach-Verfügbarkeit überprüfen oder alternative Zuordnung wählen",
                affected_items=(a.id,),
            ))

        group = get_parallel_group_for_subject(key)
        # Schulinterne Gruppe am Fach, falls die Stundentafel keine kennt
        group_id = group.id if group else (subject.parallel_group if subject.is_parallel else None)
        return AssignmentDecision(
            **base,
            new_class_name=class_plan.new_class_name,
            new_grade=new_grade,
            decision=verdict,
            reason=select_reason(verdict, key, cls.grade, new_grade),
            migration_rule=verdict,
            parallel_group=group_id,
            parallel_subjects=tuple(info.parallel_subjects),
            notes=tuple(build_notes(key, cls.grade, new_grade)) if verdict == "manual" else (),
        )

    @staticmethod
    def _is_qualified(teacher: Teacher, subject: Subject, key: str) -> bool:
        own = {s.casefold() for s in teacher.subjects}
        if subject.short_name.casefold() in own or subject.name.casefold() in own:
            return True
        return any(resolve_subject_key(s) == key for s in teacher.subjects)

    @staticmethod
    def _statistics(decisions: list[AssignmentDecision]) -> AssignmentMigrationStatistics:
        stats = AssignmentMigrationStatistics(total=len(decisions))
        by_transition: dict[str, VerdictCounts] = defaultdict(VerdictCounts)
        by_subject: dict[str, VerdictCounts] = defaultdict(VerdictCounts)

        for d in decisions:
            setattr(stats, d.decision, getattr(stats, d.decision) + 1)
            target = d.new_grade if d.new_grade is not None else "–"
            for counts in (by_transition[f"{d.old_grade}→{target}"], by_subject[d.subject]):
                setattr(counts, d.decision, getattr(counts, d.decision) + 1)

        stats.by_transition = dict(sorted(by_transition.items()))
        stats.by_subject = dict(sorted(by_subject.items()))
        return stats
