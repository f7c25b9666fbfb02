"""Tests für die Gesamtvorschau und den kompletten Vorschau-Lauf."""

from datetime import date

import pytest

from analysis.migration_summary import preview_checksum
from config.defaults import default_migration_config
from config.schema import AggregationOptions
from data.fake_data import DemoSnapshotGenerator
from migration.pipeline import plan_migration, run_migration_preview
from migration.preview import (
    MigrationContractError,
    aggregate_migration_preview,
    calculate_migration_statistics,
    deduplicate_conflicts,
    extract_conflicts_from_decisions,
    extract_conflicts_from_promotions,
    sort_conflicts,
)
from models.migration import (
    AssignmentDecision,
    ClassPromotionPlan,
    Conflict,
    MigrationPreview,
    StudentPromotionPlan,
)
from models.school_year import SchoolYear
from models.snapshot import MigrationSnapshot


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

_FROM = SchoolYear(id="SJ1", name="2025/26", start_date=date(2025, 8, 1), end_date=date(2026, 7, 31))
_TO = SchoolYear(id="SJ2", name="2026/27", start_date=date(2026, 8, 1), end_date=date(2027, 7, 31))


def _make_class_plan(cid: str, old: str, grade: int) -> ClassPromotionPlan:
    return ClassPromotionPlan(
        old_class_id=cid, old_class_name=old, old_grade=grade,
        new_class_name=f"{grade + 1}{old[-1]}", new_grade=grade + 1,
    )


def _make_decision(aid: str, decision: str, grade: int = 5, cls: str = "5a",
                   subject: str = "D", reason: str = "Grund") -> AssignmentDecision:
    return AssignmentDecision(
        assignment_id=aid, teacher_id="T1", teacher_name="Anna Arndt",
        subject=subject, old_class_id=f"K{cls}", old_class_name=cls, old_grade=grade,
        hours_per_week=2, decision=decision, reason=reason,
    )


def _make_student_plan(sid: str, status: str, grade: int = 5, name: str = "Ben") -> StudentPromotionPlan:
    if status == "promote":
        target = dict(new_class_name=f"{grade + 1}a", new_grade=grade + 1)
    else:
        target = {}
    return StudentPromotionPlan(
        student_id=sid, student_name=name, old_class_id="K5a",
        old_class_name="5a", old_grade=grade, status=status,
        reason="Keine Klassenversetzung verfügbar" if status == "conflict" else "",
        **target,
    )


def _make_conflict(severity: str = "error", ctype: str = "mapping_error",
                   related_id: str = "X", message: str = "Meldung") -> Conflict:
    return Conflict(type=ctype, severity=severity, message=message, related_id=related_id)


@pytest.fixture(scope="module")
def demo_snapshot() -> MigrationSnapshot:
    return DemoSnapshotGenerator(seed=42).generate()


@pytest.fixture(scope="module")
def demo_run(demo_snapshot):
    return plan_migration(demo_snapshot)


# ─── KONFLIKTE ────────────────────────────────────────────────────────────────

class TestConflictExtraction:
    def test_from_decisions(self):
        conflicts = extract_conflicts_from_decisions([
            _make_decision("A1", "auto"),
            _make_decision("A2", "manual", reason="Fach pausiert"),
            _make_decision("A3", "impossible"),
        ])
        assert [c.severity for c in conflicts] == ["warning", "error"]
        assert conflicts[0].message == "Fach pausiert"
        assert conflicts[0].related_type == "teacher"
        assert conflicts[0].affected_items == ("A2",)
        assert all(c.type == "mapping_error" for c in conflicts)

    def test_fallback_message(self):
        conflicts = extract_conflicts_from_decisions([_make_decision("A1", "impossible", reason="")])
        assert conflicts[0].message == "Unmögliche Migration für Anna Arndt - D (5a)"

    def test_from_student_plans(self):
        conflicts = extract_conflicts_from_promotions([
            _make_student_plan("S1", "promote"),
            _make_student_plan("S2", "conflict"),
            _make_student_plan("S3", "graduate", grade=10),
        ])
        assert len(conflicts) == 1
        assert conflicts[0].type == "student_conflict"
        assert conflicts[0].related_id == "S2"
        assert conflicts[0].severity == "error"

    def test_deduplicate_keeps_first(self):
        first = _make_conflict(severity="error")
        conflicts = deduplicate_conflicts([
            first,
            _make_conflict(severity="warning"),    # gleicher Schlüssel
            _make_conflict(related_id="Y"),
            _make_conflict(message="Andere Meldung"),
        ])
        assert len(conflicts) == 3
        assert conflicts[0] is first

    def test_deduplicate_none_related_id(self):
        a = Conflict(type="class_name_collision", severity="error", message="m")
        b = Conflict(type="class_name_collision", severity="error", message="m")
        assert len(deduplicate_conflicts([a, b])) == 1

    def test_sort_errors_first_stable(self):
        conflicts = sort_conflicts([
            _make_conflict("warning", "mapping_error", "1"),
            _make_conflict("error", "student_conflict", "2"),
            _make_conflict("error", "class_name_collision", "3"),
            _make_conflict("error", "student_conflict", "4"),
        ])
        assert [c.related_id for c in conflicts] == ["3", "2", "4", "1"]


# ─── STATISTIK ────────────────────────────────────────────────────────────────

class TestStatistics:
    def test_counts(self):
        stats = calculate_migration_statistics(
            [_make_class_plan("K5a", "5a", 5)],
            [_make_decision("A1", "auto"), _make_decision("A2", "manual")],
            [_make_student_plan("S1", "promote"), _make_student_plan("S2", "graduate", grade=10)],
            [_make_conflict("error"), _make_conflict("warning"), _make_conflict("warning")],
        )
        assert stats["classes_promoted"] == 1
        assert stats["classes_graduated"] == 1       # aus den abgehenden Schülern
        assert stats["total_classes"] == 2
        assert stats["assignments_auto"] == 1
        assert stats["assignments_manual"] == 1
        assert stats["students_graduated"] == 1
        assert stats["conflicts_count"] == 1
        assert stats["warnings_count"] == 2

    def test_explicit_graduated_classes(self):
        stats = calculate_migration_statistics([], [], [], [], classes_graduated=3)
        assert stats["classes_graduated"] == 3
        assert stats["total_classes"] == 3


# ─── ZUSAMMENFÜHRUNG ──────────────────────────────────────────────────────────

class TestAggregate:
    def _aggregate(self, **kwargs) -> MigrationPreview:
        return aggregate_migration_preview(
            _FROM, _TO,
            [_make_class_plan("K6b", "6b", 6), _make_class_plan("K5a", "5a", 5)],
            [
                _make_decision("A2", "auto", grade=6, cls="6b"),
                _make_decision("A1", "manual", reason="Prüfen"),
                _make_decision("A3", "auto", subject="BI"),
            ],
            [_make_student_plan("S2", "promote", name="Zoe"), _make_student_plan("S1", "promote", name="Anna")],
            **kwargs,
        )

    def test_statistics_consistent(self):
        p = self._aggregate()
        s = p.statistics
        assert s.classes_promoted == 2
        assert s.total_assignments == 3
        assert s.assignments_auto == 2
        assert s.total_students == 2
        assert s.warnings_count == 1
        assert not p.has_blocking_conflicts

    def test_sorted_results(self):
        p = self._aggregate()
        assert [c.old_class_name for c in p.class_promotions] == ["5a", "6b"]
        assert [d.assignment_id for d in p.assignment_decisions] == ["A3", "A1", "A2"]
        assert [s.student_name for s in p.student_promotions] == ["Anna", "Zoe"]

    def test_unsorted_keeps_input_order(self):
        p = self._aggregate(options=AggregationOptions(sort_results=False))
        assert [c.old_class_name for c in p.class_promotions] == ["6b", "5a"]

    def test_existing_conflicts_deduplicated(self):
        dup = _make_conflict("error")
        p = self._aggregate(existing_conflicts=[dup, dup])
        assert p.statistics.conflicts_count == 1
        assert p.has_blocking_conflicts

    def test_dedup_disabled(self):
        dup = _make_conflict("error")
        p = self._aggregate(
            existing_conflicts=[dup, dup],
            options=AggregationOptions(deduplicate_conflicts=False),
        )
        assert p.statistics.conflicts_count == 2

    def test_workload_disabled(self):
        p = self._aggregate(options=AggregationOptions(include_workload_analysis=False))
        assert p.teacher_workload == ()

    def test_contract_error_same_year(self):
        """Verletztes Ausgabeschema → MigrationContractError."""
        with pytest.raises(MigrationContractError) as exc_info:
            aggregate_migration_preview(_FROM, _FROM, [], [], [])
        assert exc_info.value.validation_error.error_count() >= 1

    def test_preview_is_frozen(self):
        p = self._aggregate()
        with pytest.raises(Exception):
            p.statistics = None

    def test_inconsistent_statistics_rejected(self):
        p = self._aggregate()
        data = p.model_dump()
        data["statistics"]["classes_promoted"] = 5
        with pytest.raises(ValueError):
            MigrationPreview.model_validate(data)

    def test_json_round_trip(self):
        p = self._aggregate()
        assert MigrationPreview.model_validate_json(p.model_dump_json()) == p


# ─── KOMPLETTER LAUF (DEMO-DATENSATZ) ─────────────────────────────────────────

class TestDemoPipeline:
    def test_class_counts(self, demo_run):
        s = demo_run.preview.statistics
        assert s.classes_graduated == 2
        assert s.classes_promoted == 15
        assert s.total_classes == 17

    def test_naming_collisions_detected(self, demo_run):
        collisions = [c for c in demo_run.preview.conflicts if c.type == "class_name_collision"]
        messages = " | ".join(c.message for c in collisions)
        assert len(collisions) == 2
        assert "Förderklasse" in messages
        assert '"7c" existiert bereits' in messages
        assert demo_run.preview.has_blocking_conflicts

    def test_fallback_class_needs_review(self, demo_run):
        plan = next(p for p in demo_run.preview.class_promotions if p.old_class_name == "Förderklasse")
        assert plan.new_class_name == "8a"
        assert plan.needs_manual_review

    def test_orphan_student_in_conflict(self, demo_run):
        plan = next(p for p in demo_run.preview.student_promotions if p.old_class_id == "K07z")
        assert plan.status == "conflict"
        assert any(
            c.related_id == plan.student_id and c.severity == "error"
            for c in demo_run.preview.conflicts
        )

    def test_overcrowding_warning(self, demo_run):
        assert any("Überfüllung" in c.message for c in demo_run.preview.conflicts)

    def test_inactive_teacher_reported(self, demo_run, demo_snapshot):
        inactive = next(t for t in demo_snapshot.teachers if not t.is_active)
        assert any(
            c.type == "inactive_teacher" and c.related_id == inactive.id
            for c in demo_run.preview.conflicts
        )
        workload = next(w for w in demo_run.preview.teacher_workload if w.teacher_id == inactive.id)
        assert workload.risk_level == "high"

    def test_grade_10_assignments_impossible(self, demo_run):
        grade_10 = [d for d in demo_run.preview.assignment_decisions if d.old_grade == 10]
        assert grade_10
        assert all(d.decision == "impossible" for d in grade_10)

    def test_planner_statistics_match_preview(self, demo_run):
        assert demo_run.assignments.statistics.total == demo_run.preview.statistics.total_assignments
        assert demo_run.classes.statistics.promoted == demo_run.preview.statistics.classes_promoted

    def test_idempotent(self, demo_snapshot, demo_run):
        """Gleicher Datensatz → identische Vorschau und Prüfsumme."""
        again = run_migration_preview(demo_snapshot, default_migration_config())
        assert again == demo_run.preview
        assert preview_checksum(again) == preview_checksum(demo_run.preview)

    def test_snapshot_not_modified(self, demo_snapshot):
        before = demo_snapshot.model_dump()
        run_migration_preview(demo_snapshot)
        assert demo_snapshot.model_dump() == before

    def test_same_seed_same_snapshot(self, demo_snapshot):
        assert DemoSnapshotGenerator(seed=42).generate() == demo_snapshot

    def test_snapshot_json_round_trip(self, demo_snapshot, tmp_path):
        path = tmp_path / "snapshot.json"
        demo_snapshot.save_json(path)
        loaded = MigrationSnapshot.load_json(path)
        assert loaded.created_at is not None
        assert loaded.classes == demo_snapshot.classes
        assert run_migration_preview(loaded) == run_migration_preview(demo_snapshot)

    def test_load_missing_snapshot(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            MigrationSnapshot.load_json(tmp_path / "fehlt.json")
