"""Kompletter Vorschau-Lauf über einen Datensatz: Klassen → Zuordnungen → Schüler → Vorschau."""

import logging
from dataclasses import dataclass
from typing import Optional

from config.defaults import default_migration_config
from config.schema import MigrationConfig
from migration.assignment_migration import AssignmentMigrationPlanner, AssignmentMigrationResult
from migration.class_promotion import ClassPromotionPlanner, ClassPromotionResult
from migration.preview import aggregate_migration_preview
from migration.student_promotion import StudentPromotionPlanner, StudentPromotionResult
from models.migration import MigrationPreview
from models.snapshot import MigrationSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationRun:
    """Zwischenergebnisse aller Planer plus die validierte Vorschau."""

    classes: ClassPromotionResult
    assignments: AssignmentMigrationResult
    students: StudentPromotionResult
    preview: MigrationPreview


def plan_migration(
    snapshot: MigrationSnapshot, config: Optional[MigrationConfig] = None
) -> MigrationRun:
    """Führt alle Planer nacheinander aus. Der Snapshot wird nicht verändert."""
    cfg = config or default_migration_config()
    logger.info(
        f"Starte Vorschau {snapshot.from_year.name} → {snapshot.to_year.name} "
        f"({len(snapshot.classes)} Klassen, {len(snapshot.students)} Schüler, "
        f"{len(snapshot.assignments)} Zuordnungen)"
    )

    class_result = ClassPromotionPlanner(cfg.naming_strategy, cfg.classes).plan(
        snapshot.classes, snapshot.to_year.id, snapshot.existing_target_class_names)

    assignment_result = AssignmentMigrationPlanner(cfg.assignments).plan(
        snapshot.assignments, snapshot.classes, class_result.promotions,
        snapshot.teachers, snapshot.subjects)

    student_result = StudentPromotionPlanner(cfg.students).plan(
        snapshot.students, class_result.promotions, snapshot.classes)

    preview = aggregate_migration_preview(
        snapshot.from_year,
        snapshot.to_year,
        class_result.promotions,
        assignment_result.decisions,
        student_result.promotions,
        existing_conflicts=(
            class_result.conflicts + assignment_result.conflicts + student_result.conflicts
        ),
        current_assignments=snapshot.assignments,
        teachers=snapshot.teachers,
        options=cfg.aggregation,
        risk=cfg.risk,
        classes_graduated=class_result.statistics.graduated,
    )
    return MigrationRun(
        classes=class_result,
        assignments=assignment_result,
        students=student_result,
        preview=preview,
    )


def run_migration_preview(
    snapshot: MigrationSnapshot, config: Optional[MigrationConfig] = None
) -> MigrationPreview:
    return plan_migration(snapshot, config).preview
