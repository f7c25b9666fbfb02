"""Tests für Zusammenfassung, Vollständigkeitsprüfung und Prüfsumme."""

from datetime import date

import pytest

from analysis.migration_summary import (
    generate_migration_summary,
    preview_checksum,
    validate_migration_completeness,
)
from data.fake_data import DemoSnapshotGenerator
from migration.pipeline import run_migration_preview
from migration.preview import aggregate_migration_preview
from models.migration import AssignmentDecision, ClassPromotionPlan, StudentPromotionPlan
from models.school_year import SchoolYear


# ─── Testdaten-Hilfsfunktionen ────────────────────────────────────────────────

_FROM = SchoolYear(id="SJ1", name="2025/26", start_date=date(2025, 8, 1), end_date=date(2026, 7, 31))
_TO = SchoolYear(id="SJ2", name="2026/27", start_date=date(2026, 8, 1), end_date=date(2027, 7, 31))


def _make_clean_preview():
    """Eine Klasse, eine Zuordnung, ein Schüler, alles automatisch."""
    return aggregate_migration_preview(
        _FROM, _TO,
        [ClassPromotionPlan(old_class_id="K1", old_class_name="5a", old_grade=5,
                            new_class_name="6a", new_grade=6)],
        [AssignmentDecision(assignment_id="A1", teacher_id="T1", teacher_name="Anna Arndt",
                            subject="D", old_class_id="K1", old_class_name="5a", old_grade=5,
                            new_class_name="6a", new_grade=6, hours_per_week=4,
                            decision="auto", reason="ok")],
        [StudentPromotionPlan(student_id="S1", student_name="Ben Berg", old_class_id="K1",
                              old_class_name="5a", old_grade=5, new_class_name="6a",
                              new_grade=6, status="promote")],
    )


@pytest.fixture(scope="module")
def demo_preview():
    return run_migration_preview(DemoSnapshotGenerator(seed=42).generate())


# ─── ZUSAMMENFASSUNG ──────────────────────────────────────────────────────────

class TestMigrationSummary:
    def test_clean_preview(self):
        summary = generate_migration_summary(_make_clean_preview())
        assert summary.overview == (
            "Migration von 2025/26 nach 2026/27 umfasst 1 Klassen, 1 Zuordnungen und 1 Schüler."
        )
        assert len(summary.key_metrics) == 7
        assert all(m.status == "success" for m in summary.key_metrics)
        assert summary.recommendations == [
            "Migration kann ohne weitere Anpassungen ausgeführt werden"
        ]

    def test_auto_rate_metric(self):
        summary = generate_migration_summary(_make_clean_preview())
        auto = next(m for m in summary.key_metrics if m.label == "Automatische Zuordnungen")
        assert auto.value == "1/1 (100%)"

    def test_demo_preview_has_recommendations(self, demo_preview):
        summary = generate_migration_summary(demo_preview)
        text = " ".join(summary.recommendations)
        assert "kritische Konflikte" in text
        assert "Klassennamen von" in text
        critical = next(m for m in summary.key_metrics if m.label == "Kritische Konflikte")
        assert critical.status == "error"
        assert critical.value == str(demo_preview.statistics.conflicts_count)


# ─── VOLLSTÄNDIGKEIT ──────────────────────────────────────────────────────────

class TestCompleteness:
    def test_clean_preview_complete(self):
        report = validate_migration_completeness(_make_clean_preview())
        assert report.is_complete
        assert report.missing == []
        assert report.warnings == []

    def test_empty_preview_incomplete(self):
        report = validate_migration_completeness(aggregate_migration_preview(_FROM, _TO, [], [], []))
        assert not report.is_complete
        assert report.missing == [
            "Keine Klassenversetzungen geplant",
            "Keine Lehrerzuordnungen geplant",
            "Keine Schülerversetzungen geplant",
        ]

    def test_demo_warnings(self, demo_preview):
        report = validate_migration_completeness(demo_preview)
        s = demo_preview.statistics
        assert report.is_complete
        assert f"{s.conflicts_count} kritische Konflikte erfordern Aufmerksamkeit" in report.warnings
        assert (
            f"{s.assignments_impossible} Zuordnungen können nicht automatisch migriert werden"
            in report.warnings
        )


# ─── PRÜFSUMME ────────────────────────────────────────────────────────────────

class TestChecksum:
    def test_stable(self):
        assert preview_checksum(_make_clean_preview()) == preview_checksum(_make_clean_preview())

    def test_changes_with_content(self, demo_preview):
        assert preview_checksum(_make_clean_preview()) != preview_checksum(demo_preview)
        assert len(preview_checksum(demo_preview)) == 64
