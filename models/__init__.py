from models.school_year import SchoolYear
from models.school_class import SchoolClass
from models.teacher import Teacher, ReductionHours
from models.student import Student
from models.subject import Subject
from models.parallel_group import ParallelGroup
from models.assignment import Assignment
from models.migration import (
    AssignmentChanges,
    AssignmentDecision,
    ClassPromotionPlan,
    Conflict,
    MigrationPreview,
    MigrationStatistics,
    StudentPromotionPlan,
    TeacherWorkloadAnalysis,
)
from models.snapshot import MigrationSnapshot

__all__ = [
    "SchoolYear",
    "SchoolClass",
    "Teacher",
    "ReductionHours",
    "Student",
    "Subject",
    "ParallelGroup",
    "Assignment",
    "AssignmentChanges",
    "AssignmentDecision",
    "ClassPromotionPlan",
    "Conflict",
    "MigrationPreview",
    "MigrationStatistics",
    "StudentPromotionPlan",
    "TeacherWorkloadAnalysis",
    "MigrationSnapshot",
]
