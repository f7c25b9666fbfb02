"""Excel-Export der Migrationsvorschau (openpyxl)."""

from pathlib import Path
from typing import Optional

from analysis.migration_summary import (
    CompletenessReport,
    MigrationSummary,
    generate_migration_summary,
    validate_migration_completeness,
)
from models.migration import MigrationPreview

from export.helpers import (
    COLORS, RISK_LABELS, VERDICT_LABELS, format_delta, format_hours, today_str,
)


class ExcelExporter:
    """Exportiert eine MigrationPreview in eine Excel-Datei mit 6 Blättern."""

    COL_DEFAULT_W = 14
    COL_TEXT_W = 48
    ROW_HEADER_H = 20

    def __init__(self, preview: MigrationPreview, school_name: str = ""):
        self.preview = preview
        self.school_name = school_name

    # ─── Öffentliche API ──────────────────────────────────────────────────────

    def export(self, output_path: Path, summary: Optional[MigrationSummary] = None) -> None:
        """Erstellt die Excel-Datei.

        summary: optional vorberechnete Zusammenfassung; sonst wird sie hier
        aus der Vorschau erzeugt.
        """
        from openpyxl import Workbook
        wb = Workbook()
        wb.remove(wb.active)   # Leeres Standard-Sheet entfernen

        summary = summary or generate_migration_summary(self.preview)
        completeness = validate_migration_completeness(self.preview)

        self._sheet_uebersicht(wb, summary, completeness)
        self._sheet_klassen(wb)
        self._sheet_zuordnungen(wb)
        self._sheet_schueler(wb)
        self._sheet_konflikte(wb)
        if self.preview.teacher_workload:
            self._sheet_auslastung(wb)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        wb.save(output_path)

    # ─── Style-Helpers ────────────────────────────────────────────────────────

    def _fill(self, hex_color: str):
        from openpyxl.styles import PatternFill
        return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")

    def _thin_border(self):
        from openpyxl.styles import Border, Side
        s = Side(border_style="thin", color="BBBBBB")
        return Border(left=s, right=s, top=s, bottom=s)

    def _write_table(
        self, ws, start_row: int, headers: list[str], rows: list[list],
        row_colors: Optional[list[Optional[str]]] = None,
        text_columns: tuple[int, ...] = (),
    ) -> int:
        """Schreibt Kopfzeile und Datenzeilen; gibt die nächste freie Zeile zurück.

        text_columns: 1-basierte Spalten mit langen Texten (breiter, umbrechend).
        """
        from openpyxl.styles import Alignment, Font
        from openpyxl.utils import get_column_letter

        fill_h = self._fill(COLORS["header"])
        border = self._thin_border()
        for col, h in enumerate(headers, 1):
            c = ws.cell(row=start_row, column=col, value=h)
            c.fill = fill_h
            c.font = Font(bold=True, color="FFFFFF")
            c.border = border
            width = self.COL_TEXT_W if col in text_columns else self.COL_DEFAULT_W
            letter = get_column_letter(col)
            ws.column_dimensions[letter].width = max(
                ws.column_dimensions[letter].width or 0, width)
        ws.row_dimensions[start_row].height = self.ROW_HEADER_H

        row = start_row + 1
        for i, values in enumerate(rows):
            color = row_colors[i] if row_colors else None
            for col, value in enumerate(values, 1):
                c = ws.cell(row=row, column=col, value=value)
                c.border = border
                if col in text_columns:
                    c.alignment = Alignment(wrap_text=True, vertical="top")
                if color:
                    c.fill = self._fill(color)
            row += 1
        if start_row == 1:
            ws.freeze_panes = "A2"
        return row

    # ─── Blätter ──────────────────────────────────────────────────────────────

    def _sheet_uebersicht(
        self, wb, summary: MigrationSummary, completeness: CompletenessReport
    ) -> None:
        from openpyxl.styles import Font
        ws = wb.create_sheet(title="Übersicht", index=0)
        p = self.preview

        row = 1
        title = f"Schuljahreswechsel {p.from_year.name} → {p.to_year.name}"
        ws.cell(row=row, column=1, value=title).font = Font(bold=True, size=14)
        row += 1
        if self.school_name:
            ws.cell(row=row, column=1, value=self.school_name)
        ws.cell(row=row, column=3, value=f"Erstellt: {today_str()}")
        row += 1
        ws.cell(row=row, column=1, value=summary.overview)
        row += 2

        row = self._write_table(
            ws, row, ["Kennzahl", "Wert", "Bewertung"],
            [[m.label, m.value, m.status] for m in summary.key_metrics],
            row_colors=[COLORS[m.status] for m in summary.key_metrics],
        )
        row += 1

        ws.cell(row=row, column=1, value="Empfehlungen").font = Font(bold=True)
        row += 1
        for r in summary.recommendations:
            ws.cell(row=row, column=1, value=f"• {r}")
            row += 1
        row += 1

        for entry in completeness.missing + completeness.warnings:
            ws.cell(row=row, column=1, value=entry).font = Font(italic=True)
            row += 1

    def _sheet_klassen(self, wb) -> None:
        ws = wb.create_sheet(title="Klassen")
        plans = self.preview.class_promotions
        rows = [
            [
                p.old_class_name, p.old_grade, p.new_class_name, p.new_grade,
                p.student_count,
                format_hours(sum(p.subject_hours.values())),
                ", ".join(p.teacher_ids),
                "ja" if p.needs_manual_review else "",
            ]
            for p in plans
        ]
        self._write_table(
            ws, 1,
            ["Alte Klasse", "Jg.", "Neue Klasse", "Jg.", "Schüler",
             "Wochenstd.", "Klassenleitung", "Prüfen"],
            rows,
            row_colors=[COLORS["review"] if p.needs_manual_review else None for p in plans],
        )

    def _sheet_zuordnungen(self, wb) -> None:
        ws = wb.create_sheet(title="Zuordnungen")
        decisions = self.preview.assignment_decisions
        rows = [
            [
                d.teacher_name, d.subject, d.old_class_name,
                d.new_class_name or "", format_hours(d.hours_per_week),
                VERDICT_LABELS[d.decision], d.reason, "; ".join(d.notes),
            ]
            for d in decisions
        ]
        self._write_table(
            ws, 1,
            ["Lehrkraft", "Fach", "Alte Klasse", "Neue Klasse", "Std.",
             "Entscheidung", "Begründung", "Hinweise"],
            rows,
            row_colors=[COLORS[d.decision] for d in decisions],
            text_columns=(7, 8),
        )

    def _sheet_schueler(self, wb) -> None:
        ws = wb.create_sheet(title="Schüler")
        plans = self.preview.student_promotions
        rows = [
            [
                s.student_name, s.old_class_name, s.old_grade,
                s.new_class_name or "", s.new_grade or "", s.status, s.reason,
            ]
            for s in plans
        ]
        self._write_table(
            ws, 1,
            ["Name", "Alte Klasse", "Jg.", "Neue Klasse", "Jg.", "Status", "Begründung"],
            rows,
            row_colors=[COLORS[s.status] for s in plans],
            text_columns=(7,),
        )

    def _sheet_konflikte(self, wb) -> None:
        ws = wb.create_sheet(title="Konflikte")
        conflicts = self.preview.conflicts
        rows = [
            [
                c.severity, c.type, c.message, c.related_type or "",
                c.related_id or "", c.suggested_resolution or "",
                ", ".join(c.affected_items),
            ]
            for c in conflicts
        ]
        self._write_table(
            ws, 1,
            ["Schwere", "Typ", "Meldung", "Bezug", "ID", "Lösungsvorschlag", "Betroffen"],
            rows,
            row_colors=[COLORS[c.severity] for c in conflicts],
            text_columns=(3, 6),
        )

    def _sheet_auslastung(self, wb) -> None:
        ws = wb.create_sheet(title="Lehrer-Auslastung")
        workload = self.preview.teacher_workload
        rows = [
            [
                w.teacher_name,
                format_hours(w.current_hours),
                format_hours(w.projected_hours),
                format_delta(w.hours_delta),
                w.assignment_changes.auto,
                w.assignment_changes.manual,
                w.assignment_changes.impossible,
                ", ".join(w.subjects_on_break),
                ", ".join(w.parallel_subjects),
                RISK_LABELS[w.risk_level],
            ]
            for w in workload
        ]
        self._write_table(
            ws, 1,
            ["Lehrkraft", "Ist", "Prognose", "Delta", "auto", "manuell",
             "unmöglich", "Pausierende Fächer", "Parallele Fächer", "Risiko"],
            rows,
            row_colors=[COLORS[w.risk_level] for w in workload],
        )
