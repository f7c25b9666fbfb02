"""Tests für die Lehrer-Auslastung nach dem Schuljahreswechsel."""

import pytest

from config.schema import AggregationOptions, RiskThresholds
from migration.workload import (
    assess_teacher_risk_level,
    calculate_teacher_workload_analysis,
    identify_break_subjects,
    identify_parallel_subjects,
)
from models.assignment import Assignment
from models.migration import AssignmentChanges, AssignmentDecision, Conflict
from models.teacher import Teacher


def _make_teacher(tid: str, last: str) -> Teacher:
    return Teacher(id=tid, first_name="Lehrkraft", last_name=last, short_name=tid)


def _make_decision(aid: str, teacher_id: str, subject: str, decision: str,
                   hours: float = 2.0, old_grade: int = 6, reason: str = "",
                   parallel_group=None) -> AssignmentDecision:
    return AssignmentDecision(
        assignment_id=aid, teacher_id=teacher_id, teacher_name=teacher_id,
        subject=subject, old_class_id="K", old_class_name="6a", old_grade=old_grade,
        new_grade=old_grade + 1 if old_grade < 10 else None,
        hours_per_week=hours, decision=decision, reason=reason,
        parallel_group=parallel_group,
    )


def _make_assignment(aid: str, teacher_id: str, hours: float) -> Assignment:
    return Assignment(id=aid, teacher_id=teacher_id, class_id="K",
                      subject_id="D", hours_per_week=hours)


def _make_conflict(teacher_id: str, severity: str = "error", message: str = "x") -> Conflict:
    return Conflict(type="mapping_error", severity=severity, message=message,
                    related_id=teacher_id, related_type="teacher")


# ─── RISIKO ───────────────────────────────────────────────────────────────────

class TestRiskLevel:
    def test_low(self):
        assert assess_teacher_risk_level(0, AssignmentChanges(auto=3, total=3), []) == "low"

    def test_small_delta_still_low(self):
        assert assess_teacher_risk_level(1.5, AssignmentChanges(), []) == "low"

    @pytest.mark.parametrize("delta", [2, -2, 4.5])
    def test_medium_delta(self, delta):
        assert assess_teacher_risk_level(delta, AssignmentChanges(), []) == "medium"

    @pytest.mark.parametrize("delta", [5, -5, 12])
    def test_high_delta(self, delta):
        assert assess_teacher_risk_level(delta, AssignmentChanges(), []) == "high"

    def test_manual_is_medium(self):
        assert assess_teacher_risk_level(0, AssignmentChanges(manual=1, total=1), []) == "medium"

    def test_any_conflict_is_medium(self):
        conflicts = [_make_conflict("T1", severity="warning")]
        assert assess_teacher_risk_level(0, AssignmentChanges(), conflicts) == "medium"

    def test_impossible_is_high(self):
        assert assess_teacher_risk_level(0, AssignmentChanges(impossible=1, total=1), []) == "high"

    def test_many_errors_high(self):
        conflicts = [_make_conflict("T1", message=str(i)) for i in range(3)]
        assert assess_teacher_risk_level(0, AssignmentChanges(), conflicts) == "high"

    def test_custom_thresholds(self):
        t = RiskThresholds(low_delta=1, high_delta=3, high_conflict=1)
        assert assess_teacher_risk_level(1, AssignmentChanges(), [], t) == "medium"
        assert assess_teacher_risk_level(3, AssignmentChanges(), [], t) == "high"
        assert assess_teacher_risk_level(0, AssignmentChanges(), [_make_conflict("T1")], t) == "high"

    def test_threshold_order_validated(self):
        with pytest.raises(ValueError):
            RiskThresholds(low_delta=6, high_delta=5)


# ─── FÄCHER ───────────────────────────────────────────────────────────────────

class TestSubjectDetection:
    def test_break_subjects_from_table(self):
        decisions = [
            _make_decision("A1", "T1", "BI", "manual", old_grade=6),
            _make_decision("A2", "T1", "PH", "manual", old_grade=8),
            _make_decision("A3", "T1", "D", "auto", old_grade=6),
        ]
        assert identify_break_subjects(decisions) == ["BI", "PH"]

    def test_break_subjects_from_reason(self):
        """Ohne Tabelleneintrag zählt der Begründungstext."""
        decisions = [_make_decision("A1", "T1", "XY", "manual", reason="Fach pausiert in 7")]
        assert identify_break_subjects(decisions) == ["XY"]

    def test_parallel_subjects(self):
        decisions = [
            _make_decision("A1", "T1", "KR", "auto", parallel_group="Religion"),
            _make_decision("A2", "T1", "D", "auto"),
        ]
        assert identify_parallel_subjects(decisions) == ["KR"]


# ─── ANALYSE ──────────────────────────────────────────────────────────────────

class TestWorkloadAnalysis:
    @pytest.fixture
    def teachers(self) -> list[Teacher]:
        return [_make_teacher("T1", "Arndt"), _make_teacher("T2", "Berg"), _make_teacher("T3", "Conrad")]

    @pytest.fixture
    def decisions(self) -> list[AssignmentDecision]:
        return [
            _make_decision("A1", "T1", "D", "auto", hours=4),
            _make_decision("A2", "T1", "BI", "manual", hours=2),
            _make_decision("A3", "T2", "M", "auto", hours=4),
            _make_decision("A4", "T3", "D", "impossible", hours=5, old_grade=10),
        ]

    @pytest.fixture
    def current(self) -> list[Assignment]:
        return [
            _make_assignment("A1", "T1", 4), _make_assignment("A2", "T1", 2),
            _make_assignment("A3", "T2", 4), _make_assignment("A4", "T3", 5),
        ]

    def test_projected_hours_count_auto_only(self, decisions, current, teachers):
        result = calculate_teacher_workload_analysis(decisions, current, teachers, [])
        by_id = {w.teacher_id: w for w in result}
        t1 = by_id["T1"]
        assert t1.current_hours == 6
        assert t1.projected_hours == 4
        assert t1.hours_delta == -2
        assert t1.assignment_changes == AssignmentChanges(auto=1, manual=1, impossible=0, total=2)
        assert t1.subjects_on_break == ("BI",)
        assert by_id["T3"].hours_delta == -5

    def test_sorted_by_risk(self, decisions, current, teachers):
        result = calculate_teacher_workload_analysis(decisions, current, teachers, [])
        assert [(w.teacher_id, w.risk_level) for w in result] == [
            ("T3", "high"), ("T1", "medium"), ("T2", "low"),
        ]

    def test_conflicts_attached_to_teacher(self, decisions, current, teachers):
        conflicts = [_make_conflict("T2", severity="warning"), _make_conflict("T9")]
        result = calculate_teacher_workload_analysis(decisions, current, teachers, conflicts)
        t2 = next(w for w in result if w.teacher_id == "T2")
        assert len(t2.conflicts) == 1
        assert t2.risk_level == "medium"

    def test_unknown_teacher_skipped(self, current, teachers):
        decisions = [_make_decision("A9", "T99", "D", "auto")]
        assert calculate_teacher_workload_analysis(decisions, current, teachers, []) == []

    def test_without_hour_deltas(self, decisions, current, teachers):
        options = AggregationOptions(calculate_hour_deltas=False)
        result = calculate_teacher_workload_analysis(decisions, current, teachers, [], options)
        assert all(w.hours_delta == 0 for w in result)
        assert all(w.projected_hours == w.current_hours for w in result)

    def test_without_break_detection(self, decisions, current, teachers):
        options = AggregationOptions(detect_break_subjects=False)
        result = calculate_teacher_workload_analysis(decisions, current, teachers, [], options)
        assert all(w.subjects_on_break == () for w in result)

    def test_overloaded_teacher_scenario(self):
        """24h heute, 30h automatisch übernommen: Delta +6, hohes Risiko, steht vorne."""
        teachers = [
            _make_teacher("T1", "Arndt"), _make_teacher("T2", "Berg"),
            _make_teacher("T3", "Conrad"), _make_teacher("T4", "Dietz"),
        ]
        current = [_make_assignment(f"A1{i}", "T1", 6) for i in range(4)] + [
            _make_assignment("A20", "T2", 10),
            _make_assignment("A30", "T3", 4),
            _make_assignment("A40", "T4", 4),
        ]
        decisions = [_make_decision(f"A1{i}", "T1", "D", "auto", hours=6) for i in range(5)] + [
            _make_decision("A20", "T2", "M", "auto", hours=5),
            _make_decision("A30", "T3", "E", "auto", hours=7),
            _make_decision("A40", "T4", "D", "auto", hours=4),
        ]

        result = calculate_teacher_workload_analysis(decisions, current, teachers, [])
        t1 = result[0]
        assert t1.teacher_id == "T1"
        assert t1.current_hours == 24
        assert t1.projected_hours == 30
        assert t1.hours_delta == 6
        assert t1.risk_level == "high"
        assert t1.assignment_changes == AssignmentChanges(auto=5, manual=0, impossible=0, total=5)

        # Risiko absteigend, innerhalb gleichen Risikos |Delta| absteigend
        assert [(w.teacher_id, w.risk_level, w.hours_delta) for w in result] == [
            ("T1", "high", 6), ("T2", "high", -5), ("T3", "medium", 3), ("T4", "low", 0),
        ]
