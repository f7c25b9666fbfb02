"""Tests für den Export der Migrationsvorschau (Excel + PDF)."""

import pytest
from pathlib import Path

from data.fake_data import DemoSnapshotGenerator
from export.excel_export import ExcelExporter
from export.helpers import format_delta, format_hours, hex_to_rgb
from export.pdf_export import PdfExporter, _pdf_safe
from migration.pipeline import run_migration_preview


@pytest.fixture(scope="module")
def preview():
    return run_migration_preview(DemoSnapshotGenerator(seed=42).generate())


# ─── HELPERS ──────────────────────────────────────────────────────────────────

class TestHelpers:
    def test_hex_to_rgb(self):
        assert hex_to_rgb("4472C4") == (0x44, 0x72, 0xC4)
        assert hex_to_rgb("#FFFFFF") == (255, 255, 255)

    def test_format_hours(self):
        assert format_hours(4.0) == "4"
        assert format_hours(2.5) == "2,5"

    def test_format_delta(self):
        assert format_delta(3) == "+3"
        assert format_delta(-1.5) == "-1,5"
        assert format_delta(0) == "0"

    def test_pdf_safe(self):
        assert _pdf_safe("5a → 6a") == "5a -> 6a"
        assert _pdf_safe("Schüler • Größe") == "Schüler - Größe"
        assert _pdf_safe("✓") == "?"


# ─── EXCEL ────────────────────────────────────────────────────────────────────

class TestExcelExport:
    def test_creates_file_with_sheets(self, preview, tmp_path: Path):
        from openpyxl import load_workbook
        path = tmp_path / "vorschau.xlsx"
        ExcelExporter(preview, "Muster-Realschule").export(path)
        assert path.exists()

        wb = load_workbook(path)
        assert wb.sheetnames == [
            "Übersicht", "Klassen", "Zuordnungen", "Schüler", "Konflikte", "Lehrer-Auslastung",
        ]

    def test_row_counts(self, preview, tmp_path: Path):
        from openpyxl import load_workbook
        path = tmp_path / "vorschau.xlsx"
        ExcelExporter(preview).export(path)
        wb = load_workbook(path)
        assert wb["Klassen"].max_row == len(preview.class_promotions) + 1
        assert wb["Zuordnungen"].max_row == len(preview.assignment_decisions) + 1
        assert wb["Schüler"].max_row == len(preview.student_promotions) + 1
        assert wb["Konflikte"].max_row == len(preview.conflicts) + 1
        assert wb["Klassen"]["A1"].value == "Alte Klasse"
        assert wb["Klassen"].freeze_panes == "A2"

    def test_overview_contents(self, preview, tmp_path: Path):
        from openpyxl import load_workbook
        path = tmp_path / "vorschau.xlsx"
        ExcelExporter(preview, "Muster-Realschule").export(path)
        ws = load_workbook(path)["Übersicht"]
        assert ws["A1"].value == "Schuljahreswechsel 2025/26 → 2026/27"
        assert ws["A2"].value == "Muster-Realschule"
        assert ws["A3"].value.startswith("Migration von 2025/26 nach 2026/27")

    def test_no_workload_sheet_when_empty(self, preview, tmp_path: Path):
        from openpyxl import load_workbook
        path = tmp_path / "ohne_auslastung.xlsx"
        ExcelExporter(preview.model_copy(update={"teacher_workload": ()})).export(path)
        assert "Lehrer-Auslastung" not in load_workbook(path).sheetnames

    def test_creates_parent_dirs(self, preview, tmp_path: Path):
        path = tmp_path / "unter" / "ordner" / "vorschau.xlsx"
        ExcelExporter(preview).export(path)
        assert path.exists()


# ─── PDF ──────────────────────────────────────────────────────────────────────

class TestPdfExport:
    def test_creates_pdf(self, preview, tmp_path: Path):
        path = tmp_path / "bericht.pdf"
        PdfExporter(preview, "Muster-Realschule").export(path)
        assert path.exists()
        assert path.read_bytes().startswith(b"%PDF")

    def test_precomputed_summary(self, preview, tmp_path: Path):
        from analysis.migration_summary import generate_migration_summary
        path = tmp_path / "bericht.pdf"
        PdfExporter(preview).export(path, summary=generate_migration_summary(preview))
        assert path.stat().st_size > 0
