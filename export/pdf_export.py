"""PDF-Bericht der Migrationsvorschau (fpdf2)."""

from pathlib import Path
from typing import Optional

from analysis.migration_summary import (
    MigrationSummary,
    generate_migration_summary,
    validate_migration_completeness,
)
from models.migration import MigrationPreview

from export.helpers import (
    COLORS, RISK_LABELS, VERDICT_LABELS, format_delta, format_hours, hex_to_rgb, today_str,
)


def _pdf_safe(text: str) -> str:
    """Ersetzt nicht-latin-1-fähige Zeichen für fpdf2-Built-in-Fonts."""
    return (
        text
        .replace("—", " - ")   # em dash
        .replace("–", "-")      # en dash
        .replace("→", "->")     # →
        .replace("•", "-")      # •
        .replace("─", "-")      # ─
        .encode("latin-1", errors="replace")
        .decode("latin-1")
    )


# ─── A4-Hochformat ────────────────────────────────────────────────────────────
# Nutzbare Breite (Margin 12 links+rechts): 186 mm

_PAGE_W = 186
_ROW_H = 6
_FONT_TITLE = 14
_FONT_HEADER = 8
_FONT_CONTENT = 7


class _ReportPdf:
    """Interner Wrapper um fpdf.FPDF für den Migrationsbericht."""

    def __init__(self, school_name: str, title: str):
        from fpdf import FPDF

        class _Pdf(FPDF):
            def __init__(inner):
                super().__init__(orientation="P", unit="mm", format="A4")
                inner.alias_nb_pages()
                inner.set_auto_page_break(auto=True, margin=18)
                inner.set_margins(left=12, top=22, right=12)

            def header(inner):
                inner.set_font("Helvetica", "B", 10)
                inner.set_xy(12, 8)
                inner.cell(100, 7, _pdf_safe(school_name), border=0, align="L")
                inner.cell(0, 7, _pdf_safe(title), border=0, align="R")
                inner.set_draw_color(150, 150, 150)
                inner.line(12, 17, inner.w - 12, 17)
                inner.set_y(22)

            def footer(inner):
                inner.set_y(-14)
                inner.set_font("Helvetica", "I", 7)
                inner.cell(
                    0, 8,
                    f"{today_str()}  |  Seite {inner.page_no()}/{{nb}}",
                    border=0, align="C",
                )

        self._pdf = _Pdf()

    def add_page(self) -> None:
        self._pdf.add_page()

    def save(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._pdf.output(str(path))

    def heading(self, text: str, size: int = 11) -> None:
        p = self._pdf
        p.ln(3)
        p.set_font("Helvetica", "B", size)
        p.cell(0, 8, _pdf_safe(text), border=0, new_x="LMARGIN", new_y="NEXT")

    def paragraph(self, text: str) -> None:
        p = self._pdf
        p.set_font("Helvetica", "", 9)
        p.multi_cell(0, 5, _pdf_safe(text), new_x="LMARGIN", new_y="NEXT")

    def table(
        self, headers: list[str], widths: list[float], rows: list[list[str]],
        row_colors: Optional[list[Optional[str]]] = None,
    ) -> None:
        """Einfache Tabelle; Zelltexte werden auf die Spaltenbreite gekürzt."""
        p = self._pdf
        r, g, b = hex_to_rgb(COLORS["header"])
        p.set_fill_color(r, g, b)
        p.set_text_color(255, 255, 255)
        p.set_font("Helvetica", "B", _FONT_HEADER)
        for h, w in zip(headers, widths):
            p.cell(w, _ROW_H, _pdf_safe(h), border=1, fill=True, align="C")
        p.ln(_ROW_H)

        p.set_text_color(0, 0, 0)
        p.set_font("Helvetica", "", _FONT_CONTENT)
        p.set_draw_color(180, 180, 180)
        for i, values in enumerate(rows):
            color = row_colors[i] if row_colors else None
            if color:
                p.set_fill_color(*hex_to_rgb(color))
            for value, w in zip(values, widths):
                text = _pdf_safe(str(value))
                max_chars = int(w / 1.45)
                if len(text) > max_chars:
                    text = text[: max_chars - 2] + ".."
                p.cell(w, _ROW_H, text, border=1, fill=bool(color))
            p.ln(_ROW_H)


class PdfExporter:
    """Erstellt einen PDF-Bericht: Zusammenfassung, Konflikte, Auslastung, Klassen."""

    def __init__(self, preview: MigrationPreview, school_name: str = ""):
        self.preview = preview
        self.school_name = school_name

    def export(self, output_path: Path, summary: Optional[MigrationSummary] = None) -> None:
        p = self.preview
        title = f"Schuljahreswechsel {p.from_year.name} -> {p.to_year.name}"
        pdf = _ReportPdf(self.school_name, title)
        summary = summary or generate_migration_summary(p)
        completeness = validate_migration_completeness(p)

        pdf.add_page()
        pdf.heading(title, size=_FONT_TITLE)
        pdf.paragraph(summary.overview)

        pdf.heading("Kennzahlen")
        pdf.table(
            ["Kennzahl", "Wert"], [90, 96],
            [[m.label, m.value] for m in summary.key_metrics],
            row_colors=[COLORS[m.status] for m in summary.key_metrics],
        )

        pdf.heading("Empfehlungen")
        for r in summary.recommendations:
            pdf.paragraph(f"- {r}")
        for entry in completeness.missing + completeness.warnings:
            pdf.paragraph(f"! {entry}")

        if p.conflicts:
            pdf.heading(f"Konflikte ({len(p.conflicts)})")
            pdf.table(
                ["Schwere", "Typ", "Meldung"], [18, 32, 136],
                [[c.severity, c.type, c.message] for c in p.conflicts],
                row_colors=[COLORS[c.severity] for c in p.conflicts],
            )

        if p.teacher_workload:
            pdf.heading("Lehrer-Auslastung")
            pdf.table(
                ["Lehrkraft", "Ist", "Prognose", "Delta", "auto/man./unm.", "Risiko"],
                [56, 20, 20, 20, 40, 30],
                [
                    [
                        w.teacher_name,
                        format_hours(w.current_hours),
                        format_hours(w.projected_hours),
                        format_delta(w.hours_delta),
                        f"{w.assignment_changes.auto}/{w.assignment_changes.manual}/"
                        f"{w.assignment_changes.impossible}",
                        RISK_LABELS[w.risk_level],
                    ]
                    for w in p.teacher_workload
                ],
                row_colors=[COLORS[w.risk_level] for w in p.teacher_workload],
            )

        pdf.heading("Klassenversetzungen")
        pdf.table(
            ["Alte Klasse", "Jg.", "Neue Klasse", "Jg.", "Schüler", "Prüfen"],
            [40, 16, 40, 16, 24, 50],
            [
                [c.old_class_name, c.old_grade, c.new_class_name, c.new_grade,
                 c.student_count, "ja" if c.needs_manual_review else ""]
                for c in p.class_promotions
            ],
        )

        manual = [d for d in p.assignment_decisions if d.decision != "auto"]
        if manual:
            pdf.heading("Zuordnungen mit Handlungsbedarf")
            pdf.table(
                ["Lehrkraft", "Fach", "Klasse", "Entscheidung", "Begründung"],
                [40, 16, 22, 24, 84],
                [
                    [d.teacher_name, d.subject, d.old_class_name,
                     VERDICT_LABELS[d.decision], d.reason]
                    for d in manual
                ],
                row_colors=[COLORS[d.decision] for d in manual],
            )

        pdf.save(output_path)
