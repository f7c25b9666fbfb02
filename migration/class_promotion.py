"""Klassen-Versetzungsplaner: Jahrgang 5–9 → +1, Jahrgang 10 → Abschluss."""

import logging
from collections import defaultdict
from typing import Iterable, Optional

from pydantic import BaseModel

from config.defaults import GRADE_PROGRESSION
from config.schema import ClassPromotionOptions, NamingStrategy
from migration.class_names import (
    generate_alternative_names,
    generate_promoted_class_name,
    get_promotion_action,
    normalize_class_name,
    parse_class_name,
)
from models.migration import ClassPromotionPlan, Conflict
from models.school_class import SchoolClass

logger = logging.getLogger(__name__)


class PromotionStatistics(BaseModel):
    total_classes: int = 0
    promoted: int = 0
    graduated: int = 0
    skipped: int = 0         # Fehler, deaktivierter Abschluss oder leere Klasse
    manual_review: int = 0
    conflicts: int = 0       # Anzahl error-Konflikte


class ClassPromotionResult(BaseModel):
    promotions: list[ClassPromotionPlan]
    conflicts: list[Conflict]
    statistics: PromotionStatistics


class PromotionValidation(BaseModel):
    is_valid: bool
    errors: list[str]
    warnings: list[str]


# ─── Prüfungen ────────────────────────────────────────────────────────────────

def validate_class_for_promotion(cls: SchoolClass) -> list[Conflict]:
    """Prüft eine Klasse vor der Versetzung. error-Konflikte verhindern den Plan."""
    conflicts: list[Conflict] = []

    if get_promotion_action(cls.grade) == "invalid":
        conflicts.append(Conflict(
            type="mapping_error",
            severity="error",
            message=f'Klasse "{cls.name}" hat eine ungültige Jahrgangsstufe: {cls.grade}',
            related_id=cls.id,
            related_type="class",
            suggested_resolution="Korrigieren Sie die Jahrgangsstufe auf einen Wert zwischen 5 und 10",
            affected_items=(cls.id,),
        ))

    if cls.student_count == 0:
        conflicts.append(Conflict(
            type="mapping_error",
            severity="warning",
            message=f'Klasse "{cls.name}" hat keine Schüler',
            related_id=cls.id,
            related_type="class",
            suggested_resolution=(
                "Überprüfen Sie, ob diese Klasse versetzt werden soll "
                "oder gelöscht werden kann"
            ),
            affected_items=(cls.id,),
        ))

    parsed = parse_class_name(cls.name)
    if not parsed.is_valid:
        conflicts.append(Conflict(
            type="mapping_error",
            severity="warning",
            message=f'Klassenname "{cls.name}" folgt keinem erkannten Namensschema',
            related_id=cls.id,
            related_type="class",
            suggested_resolution=(
                'Verwenden Sie manuelle Benennung oder korrigieren Sie den Namen '
                '(z.B. "5a", "6 B", "Klasse 7c", "VIII-A")'
            ),
            affected_items=(cls.id,),
        ))
    elif parsed.grade != cls.grade:
        conflicts.append(Conflict(
            type="mapping_error",
            severity="warning",
            message=(
                f'Klassenname "{cls.name}" passt nicht zur Jahrgangsstufe {cls.grade}'
            ),
            related_id=cls.id,
            related_type="class",
            suggested_resolution="Überprüfen Sie Klassenname und Jahrgangsstufe",
            affected_items=(cls.id,),
        ))

    return conflicts


def detect_naming_conflicts(
    promotions: list[ClassPromotionPlan],
    existing_class_names: Iterable[str] = (),
) -> list[Conflict]:
    """Findet Zielnamen, die mehrfach vergeben würden oder im Zieljahr schon existieren.

    Gruppiert wird nach normalisiertem Namen, d.h. "6a" und "06a" kollidieren.
    """
    existing = list(existing_class_names)
    existing_keys = {normalize_class_name(n): n for n in existing}
    planned_names = [p.new_class_name for p in promotions]

    groups: dict[str, list[ClassPromotionPlan]] = defaultdict(list)
    for p in promotions:
        groups[normalize_class_name(p.new_class_name)].append(p)

    conflicts: list[Conflict] = []
    for key, plans in groups.items():
        target = plans[0].new_class_name
        affected = tuple(p.old_class_id for p in plans)
        alternatives = generate_alternative_names(target, existing + planned_names)
        hint = ", ".join(f'"{a}"' for a in alternatives)

        if len(plans) > 1:
            names = " / ".join(dict.fromkeys(p.new_class_name for p in plans))
            sources = ", ".join(p.old_class_name for p in plans)
            conflicts.append(Conflict(
                type="class_name_collision",
                severity="error",
                message=f'Mehrere Klassen würden den Namen "{names}" erhalten: {sources}',
                related_type="class",
                suggested_resolution=(
                    "Verwenden Sie manuelle Benennung oder fügen Sie Suffixe hinzu"
                    + (f" (z.B. {hint})" if hint else "")
                ),
                affected_items=affected,
            ))

        if key in existing_keys:
            conflicts.append(Conflict(
                type="class_name_collision",
                severity="error",
                message=f'Klasse "{existing_keys[key]}" existiert bereits im Zieljahr',
                related_id=plans[0].old_class_id,
                related_type="class",
                suggested_resolution=(
                    "Wählen Sie einen anderen Namen"
                    + (f" (z.B. {hint})" if hint else "")
                ),
                affected_items=affected,
            ))

    return conflicts


# ─── Planer ───────────────────────────────────────────────────────────────────

class ClassPromotionPlanner:
    """Plant die Versetzung aller Klassen eines Schuljahres."""

    def __init__(
        self,
        naming_strategy: NamingStrategy = NamingStrategy.AUTO,
        options: Optional[ClassPromotionOptions] = None,
    ):
        self.naming_strategy = NamingStrategy(naming_strategy)
        self.options = options or ClassPromotionOptions()

    def plan(
        self,
        classes: list[SchoolClass],
        to_year_id: str,
        existing_target_class_names: Iterable[str] = (),
    ) -> ClassPromotionResult:
        opts = self.options
        promotions: list[ClassPromotionPlan] = []
        conflicts: list[Conflict] = []
        stats = PromotionStatistics(total_classes=len(classes))

        for cls in classes:
            class_conflicts = validate_class_for_promotion(cls)
            conflicts.extend(class_conflicts)
            if any(c.severity == "error" for c in class_conflicts):
                logger.warning(f"Klasse {cls.name} übersprungen (Fehler bei der Prüfung)")
                stats.skipped += 1
                continue

            if get_promotion_action(cls.grade) == "graduate":
                if opts.graduate_grade_10:
                    stats.graduated += 1
                    logger.debug(f"Klasse {cls.name}: Abschluss")
                else:
                    stats.skipped += 1
                    stats.manual_review += 1
                    conflicts.append(Conflict(
                        type="mapping_error",
                        severity="warning",
                        message=(
                            f'Klasse "{cls.name}" (Jahrgang 10) wird weder versetzt '
                            f"noch entlassen: Abschluss ist deaktiviert"
                        ),
                        related_id=cls.id,
                        related_type="class",
                        suggested_resolution=(
                            "Aktivieren Sie graduate_grade_10 oder legen Sie die "
                            "Klasse im Zieljahr manuell an"
                        ),
                        affected_items=(cls.id,),
                    ))
                continue

            if cls.student_count == 0 and opts.handle_empty_classes:
                stats.skipped += 1
                logger.info(f"Leere Klasse {cls.name} übersprungen")
                continue

            promotions.append(self._build_plan(cls, conflicts, stats))

        stats.promoted = len(promotions)
        conflicts.extend(detect_naming_conflicts(promotions, existing_target_class_names))
        stats.conflicts = sum(1 for c in conflicts if c.severity == "error")

        logger.info(
            f"Klassenversetzung → {to_year_id}: {stats.promoted} versetzt, "
            f"{stats.graduated} Abschluss, {stats.skipped} übersprungen, "
            f"{stats.manual_review} zur Prüfung, {stats.conflicts} Fehler"
        )
        return ClassPromotionResult(promotions=promotions, conflicts=conflicts, statistics=stats)

    def _build_plan(
        self, cls: SchoolClass, conflicts: list[Conflict], stats: PromotionStatistics
    ) -> ClassPromotionPlan:
        opts = self.options
        new_grade = GRADE_PROGRESSION[cls.grade]
        new_name = generate_promoted_class_name(cls.name, cls.grade, new_grade)
        needs_review = False

        if self.naming_strategy == NamingStrategy.MANUAL:
            needs_review = True
        elif not parse_class_name(cls.name).is_valid:
            needs_review = True
            conflicts.append(Conflict(
                type="mapping_error",
                severity="warning",
                message=f'Automatische Benennung für Klasse "{cls.name}" nicht möglich',
                related_id=cls.id,
                related_type="class",
                suggested_resolution=(
                    f'Verwenden Sie den vorgeschlagenen Namen "{new_name}" '
                    f"oder wählen Sie einen eigenen Namen"
                ),
                affected_items=(cls.id,),
            ))
        if needs_review:
            stats.manual_review += 1

        class_teachers = cls.class_teacher_ids if opts.preserve_class_teachers else []
        logger.debug(f"Klasse {cls.name} → {new_name} (Jg. {new_grade})")
        return ClassPromotionPlan(
            old_class_id=cls.id,
            old_class_name=cls.name,
            old_grade=cls.grade,
            new_class_name=new_name,
            new_grade=new_grade,
            subject_hours=dict(cls.subject_hours) if opts.copy_subject_hours else {},
            teacher_ids=tuple(class_teachers),
            student_count=cls.student_count,
            class_teacher_1_id=cls.class_teacher_1_id if opts.preserve_class_teachers else None,
            class_teacher_2_id=cls.class_teacher_2_id if opts.preserve_class_teachers else None,
            needs_manual_review=needs_review,
        )


# ─── Auswertung ───────────────────────────────────────────────────────────────

def summarize_promotions_by_grade(promotions: list[ClassPromotionPlan]) -> list[dict]:
    """Pro Ausgangsjahrgang: Anzahl und "alt → neu"-Liste, nach Jahrgang sortiert."""
    by_grade: dict[int, list[str]] = defaultdict(list)
    for p in promotions:
        by_grade[p.old_grade].append(f"{p.old_class_name} → {p.new_class_name}")
    return [
        {"grade": grade, "count": len(names), "classes": names}
        for grade, names in sorted(by_grade.items())
    ]


def validate_promotion_result(result: ClassPromotionResult) -> PromotionValidation:
    """Prüft ein Planungsergebnis auf Fehler und Unstimmigkeiten."""
    errors: list[str] = []
    warnings: list[str] = []

    critical = [c for c in result.conflicts if c.severity == "error"]
    if critical:
        errors.append(f"{len(critical)} kritische Konflikte gefunden")

    collisions = [c for c in result.conflicts if c.type == "class_name_collision"]
    if collisions:
        errors.append(f"{len(collisions)} Namenskonflikte gefunden")

    s = result.statistics
    if s.promoted + s.graduated + s.skipped != s.total_classes:
        warnings.append(
            "Statistiken sind inkonsistent - einige Klassen wurden möglicherweise "
            "nicht verarbeitet"
        )
    if not result.promotions and s.total_classes > 0 and s.graduated < s.total_classes:
        warnings.append("Keine Klasse wird versetzt, obwohl Klassen vorhanden sind")

    return PromotionValidation(is_valid=not errors, errors=errors, warnings=warnings)
