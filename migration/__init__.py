from migration.class_names import (
    generate_promoted_class_name,
    normalize_class_name,
    parse_class_name,
)
from migration.parallel_groups import correct_hours
from migration.subject_rules import evaluate_migration
from migration.class_promotion import ClassPromotionPlanner, ClassPromotionResult
from migration.student_promotion import StudentPromotionPlanner, StudentPromotionResult
from migration.assignment_migration import AssignmentMigrationPlanner, AssignmentMigrationResult
from migration.workload import calculate_teacher_workload_analysis
from migration.preview import MigrationContractError, aggregate_migration_preview
from migration.pipeline import MigrationRun, plan_migration, run_migration_preview

__all__ = [
    "generate_promoted_class_name",
    "normalize_class_name",
    "parse_class_name",
    "correct_hours",
    "evaluate_migration",
    "ClassPromotionPlanner",
    "ClassPromotionResult",
    "StudentPromotionPlanner",
    "StudentPromotionResult",
    "AssignmentMigrationPlanner",
    "AssignmentMigrationResult",
    "calculate_teacher_workload_analysis",
    "MigrationContractError",
    "aggregate_migration_preview",
    "MigrationRun",
    "plan_migration",
    "run_migration_preview",
]
