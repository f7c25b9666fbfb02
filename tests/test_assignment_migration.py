"""Tests für die Migrationsentscheidungen der Unterrichtszuordnungen."""

import pytest

from config.defaults import MIGRATION_REASONS, SUBJECT_METADATA
from config.schema import AssignmentMigrationOptions
from migration.assignment_migration import (
    AssignmentMigrationPlanner,
    build_notes,
    select_reason,
)
from models.assignment import Assignment
from models.migration import ClassPromotionPlan
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher


# ─── Testdaten ────────────────────────────────────────────────────────────────

def _make_teacher(tid: str, subjects: list[str], active: bool = True) -> Teacher:
    return Teacher(
        id=tid, first_name="Vorname", last_name=tid, short_name=tid,
        subjects=subjects, is_active=active,
    )


def _make_assignment(aid: str, teacher_id: str, class_id: str, subject_id: str,
                     hours: float = 2.0) -> Assignment:
    return Assignment(id=aid, teacher_id=teacher_id, class_id=class_id,
                      subject_id=subject_id, hours_per_week=hours)


_SUBJECTS = [
    Subject(id=meta["short"], name=name, short_name=meta["short"],
            category=meta["category"], parallel_group=meta["group"])
    for name, meta in SUBJECT_METADATA.items()
]

_CLASSES = [
    SchoolClass(id="K5a", name="5a", grade=5),
    SchoolClass(id="K6a", name="6a", grade=6),
    SchoolClass(id="K7a", name="7a", grade=7),
    SchoolClass(id="K9a", name="9a", grade=9),
    SchoolClass(id="K10a", name="10a", grade=10),
]

_PLANS = [
    ClassPromotionPlan(old_class_id="K5a", old_class_name="5a", old_grade=5,
                       new_class_name="6a", new_grade=6),
    ClassPromotionPlan(old_class_id="K6a", old_class_name="6a", old_grade=6,
                       new_class_name="7a", new_grade=7),
    ClassPromotionPlan(old_class_id="K7a", old_class_name="7a", old_grade=7,
                       new_class_name="8a", new_grade=8),
]

_TEACHERS = [
    _make_teacher("T1", ["D", "BI", "KR", "FS", "CH"]),
    _make_teacher("T2", ["M"], active=False),
    _make_teacher("T3", ["SP"]),
]


def _plan(assignments, options=None):
    planner = AssignmentMigrationPlanner(options)
    return planner.plan(assignments, _CLASSES, _PLANS, _TEACHERS, _SUBJECTS)


def _single(assignment, options=None):
    result = _plan([assignment], options)
    assert len(result.decisions) == 1
    return result.decisions[0], result.conflicts


# ─── ENTSCHEIDUNGEN ───────────────────────────────────────────────────────────

class TestVerdicts:
    def test_continuous_subject_auto(self):
        d, conflicts = _single(_make_assignment("A1", "T1", "K5a", "D", hours=5))
        assert d.decision == "auto"
        assert d.migration_rule == "auto"
        assert d.reason == MIGRATION_REASONS["auto"]["continuous_subject"]
        assert d.subject == "D"
        assert (d.new_class_name, d.new_grade) == ("6a", 6)
        assert d.new_class_id is None
        assert d.hours_per_week == 5
        assert d.notes == ()
        assert conflicts == []

    def test_break_subject_manual(self):
        """Biologie 6 → 7: Pausenjahr, manuell mit Hinweis."""
        d, _ = _single(_make_assignment("A1", "T1", "K6a", "BI"))
        assert d.decision == "manual"
        assert d.reason == MIGRATION_REASONS["manual"]["subject_break"]
        assert "Biologie reduziert in Klasse 7 - Stundenzahl anpassen" in d.notes

    def test_religion_auto_with_alternatives(self):
        d, _ = _single(_make_assignment("A1", "T1", "K5a", "KR"))
        assert d.decision == "auto"
        assert d.reason == MIGRATION_REASONS["auto"]["parallel_group_auto"]
        assert d.parallel_group == "Religion"
        assert d.parallel_subjects == ("ER", "PP")

    def test_differenzierung_manual(self):
        d, _ = _single(_make_assignment("A1", "T1", "K7a", "FS", hours=3))
        assert d.decision == "manual"
        assert d.reason == MIGRATION_REASONS["manual"]["parallel_group_review"]
        assert d.parallel_group == "Differenzierung"
        assert "Differenzierungsfach - Schülerwahl kann sich ändern" in d.notes

    def test_school_specific_group_from_subject(self):
        """Fach ohne Gruppe in der Stundentafel übernimmt die Gruppe vom Fach."""
        subject = Subject(id="D", name="Deutsch", short_name="D", parallel_group="Förderband")
        assert subject.is_parallel
        planner = AssignmentMigrationPlanner()
        result = planner.plan([_make_assignment("A1", "T1", "K5a", "D")],
                              _CLASSES, _PLANS, _TEACHERS, [subject])
        assert result.decisions[0].decision == "auto"
        assert result.decisions[0].parallel_group == "Förderband"

    def test_table_group_wins_over_subject(self):
        subject = Subject(id="KR", name="Katholische Religion", short_name="KR",
                          parallel_group="Sonstiges")
        result = AssignmentMigrationPlanner().plan(
            [_make_assignment("A1", "T1", "K5a", "KR")], _CLASSES, _PLANS, _TEACHERS, [subject])
        assert result.decisions[0].parallel_group == "Religion"

    def test_subject_not_offered_in_source(self):
        """Chemie in Klasse 6 → impossible mit missing_subject-Fehler."""
        d, conflicts = _single(_make_assignment("A1", "T1", "K6a", "CH"))
        assert d.decision == "impossible"
        assert d.reason == MIGRATION_REASONS["impossible"]["subject_not_available"]
        assert len(conflicts) == 1
        assert conflicts[0].type == "missing_subject"
        assert conflicts[0].severity == "error"
        assert conflicts[0].related_id == "A1"
        assert conflicts[0].related_type == "assignment"

    def test_unknown_subject(self):
        d, conflicts = _single(_make_assignment("A1", "T1", "K5a", "LA"))
        assert d.decision == "impossible"
        assert d.subject == "LA"
        assert conflicts[0].type == "missing_subject"
        assert conflicts[0].related_type == "subject"

    def test_graduating_class_impossible(self):
        d, conflicts = _single(_make_assignment("A1", "T1", "K10a", "D"))
        assert d.decision == "impossible"
        assert d.migration_rule == "impossible"
        assert d.reason == MIGRATION_REASONS["impossible"]["graduation"]
        assert d.new_grade is None
        assert conflicts == []

    def test_missing_class_plan(self):
        d, _ = _single(_make_assignment("A1", "T1", "K9a", "D"))
        assert d.decision == "impossible"
        assert d.reason == MIGRATION_REASONS["impossible"]["missing_target_class"]

    def test_unknown_class_no_decision(self):
        result = _plan([_make_assignment("A1", "T1", "K99", "D")])
        assert result.decisions == []
        assert result.conflicts[0].type == "mapping_error"
        assert result.conflicts[0].severity == "error"


# ─── LEHRKRÄFTE ───────────────────────────────────────────────────────────────

class TestTeacherChecks:
    def test_inactive_teacher(self):
        d, conflicts = _single(_make_assignment("A1", "T2", "K5a", "M"))
        assert d.decision == "impossible"
        assert d.reason == MIGRATION_REASONS["impossible"]["inactive_teacher"]
        assert d.new_class_name == "6a"
        assert conflicts[0].type == "inactive_teacher"
        assert conflicts[0].severity == "warning"
        assert conflicts[0].related_id == "T2"

    def test_inactive_teacher_included(self):
        options = AssignmentMigrationOptions(include_inactive_teachers=True)
        d, conflicts = _single(_make_assignment("A1", "T2", "K5a", "M"), options)
        assert d.decision == "auto"
        assert conflicts == []

    def test_unqualified_teacher_warning(self):
        """Fachfremder Einsatz: Warnung, Entscheidung bleibt."""
        d, conflicts = _single(_make_assignment("A1", "T3", "K5a", "D"))
        assert d.decision == "auto"
        assert conflicts[0].type == "mapping_error"
        assert conflicts[0].severity == "warning"
        assert conflicts[0].related_id == "T3"

    def test_validation_disabled(self):
        options = AssignmentMigrationOptions(validate_teacher_qualifications=False)
        result = _plan([
            _make_assignment("A1", "T3", "K5a", "D"),
            _make_assignment("A2", "T2", "K5a", "M"),
        ], options)
        assert result.conflicts == []
        assert [d.decision for d in result.decisions] == ["auto", "auto"]


# ─── STATISTIK + TEXTE ────────────────────────────────────────────────────────

class TestStatistics:
    def test_counts(self):
        result = _plan([
            _make_assignment("A1", "T1", "K5a", "D"),
            _make_assignment("A2", "T1", "K6a", "BI"),
            _make_assignment("A3", "T1", "K10a", "D"),
            _make_assignment("A4", "T1", "K5a", "KR"),
        ])
        s = result.statistics
        assert (s.total, s.auto, s.manual, s.impossible) == (4, 2, 1, 1)
        assert s.by_transition["5→6"].auto == 2
        assert s.by_transition["6→7"].manual == 1
        assert s.by_subject["D"].total == 2

    def test_decisions_keep_input_order(self):
        result = _plan([
            _make_assignment("A2", "T1", "K6a", "BI"),
            _make_assignment("A1", "T1", "K5a", "D"),
        ])
        assert [d.assignment_id for d in result.decisions] == ["A2", "A1"]


class TestReasonsAndNotes:
    def test_non_consecutive_reason(self):
        assert select_reason("manual", "Deutsch", 5, 7) == MIGRATION_REASONS["manual"]["non_consecutive"]

    def test_notes_for_jump(self):
        notes = build_notes("Deutsch", 5, 7)
        assert notes == ["Ungewöhnlicher Jahrgangsstufenwechsel: 5 → 7"]

    def test_notes_differenzierung_alternatives(self):
        notes = build_notes("IF", 8, 9)
        assert notes[-1] == "Alternative Fächer verfügbar: FS, SW, NW, TC, MUS"
