"""Zusammenfassung und Vollständigkeitsprüfung einer Migrationsvorschau.

Liefert Kennzahlen mit Ampelstatus, Handlungsempfehlungen und eine
Prüfsumme, mit der sich zwei Vorschau-Läufe auf Gleichheit vergleichen lassen.
"""

import hashlib
from typing import Literal

from pydantic import BaseModel

from models.migration import MigrationPreview

MetricStatus = Literal["success", "warning", "error"]


# ─── Modelle ──────────────────────────────────────────────────────────────────

class KeyMetric(BaseModel):
    label: str
    value: str
    status: MetricStatus


class MigrationSummary(BaseModel):
    """Kurzfassung einer Vorschau für Konsole, Excel und PDF."""

    overview: str
    key_metrics: list[KeyMetric]
    recommendations: list[str]


class CompletenessReport(BaseModel):
    is_complete: bool
    missing: list[str]
    warnings: list[str]


# ─── Berechnung ───────────────────────────────────────────────────────────────

def _auto_rate(preview: MigrationPreview) -> float:
    s = preview.statistics
    return s.assignments_auto / s.total_assignments if s.total_assignments else 1.0


def generate_migration_summary(preview: MigrationPreview) -> MigrationSummary:
    s = preview.statistics
    rate = _auto_rate(preview)
    high_risk = [w for w in preview.teacher_workload if w.risk_level == "high"]
    review_classes = [p for p in preview.class_promotions if p.needs_manual_review]

    overview = (
        f"Migration von {preview.from_year.name} nach {preview.to_year.name} umfasst "
        f"{s.classes_promoted} Klassen, {s.total_assignments} Zuordnungen und "
        f"{s.total_students} Schüler."
    )

    metrics = [
        KeyMetric(
            label="Klassenversetzungen",
            value=f"{s.classes_promoted} versetzt, {s.classes_graduated} Abschluss",
            status="success" if s.classes_promoted or s.classes_graduated else "warning",
        ),
        KeyMetric(
            label="Automatische Zuordnungen",
            value=f"{s.assignments_auto}/{s.total_assignments} ({rate:.0%})",
            status="success" if rate >= 0.8 else "warning" if rate >= 0.5 else "error",
        ),
        KeyMetric(
            label="Manuelle Prüfungen",
            value=str(s.assignments_manual),
            status="warning" if s.assignments_manual else "success",
        ),
        KeyMetric(
            label="Unmögliche Zuordnungen",
            value=str(s.assignments_impossible),
            status="error" if s.assignments_impossible else "success",
        ),
        KeyMetric(
            label="Schülerversetzungen",
            value=f"{s.students_promoted} versetzt, {s.students_graduated} Abschluss",
            status="success" if s.students_promoted + s.students_graduated == s.total_students
            else "warning",
        ),
        KeyMetric(
            label="Kritische Konflikte",
            value=str(s.conflicts_count),
            status="error" if s.conflicts_count else "success",
        ),
        KeyMetric(
            label="Warnungen",
            value=str(s.warnings_count),
            status="warning" if s.warnings_count else "success",
        ),
    ]

    recommendations: list[str] = []
    if s.conflicts_count:
        recommendations.append(
            f"{s.conflicts_count} kritische Konflikte vor der Ausführung beheben")
    if s.assignments_impossible:
        recommendations.append(
            f"{s.assignments_impossible} Zuordnungen im neuen Schuljahr manuell neu vergeben")
    if s.assignments_manual:
        recommendations.append(
            f"{s.assignments_manual} Zuordnungen mit manueller Prüfung durchsehen")
    if high_risk:
        names = ", ".join(w.teacher_name for w in high_risk[:5])
        recommendations.append(
            f"Auslastung von {len(high_risk)} Lehrkräften mit hohem Risiko prüfen ({names})")
    if review_classes:
        recommendations.append(
            f"Klassennamen von {len(review_classes)} Klassen bestätigen")
    if not recommendations:
        recommendations.append("Migration kann ohne weitere Anpassungen ausgeführt werden")

    return MigrationSummary(
        overview=overview, key_metrics=metrics, recommendations=recommendations)


def validate_migration_completeness(preview: MigrationPreview) -> CompletenessReport:
    """Prüft, ob alle drei Bereiche geplant sind und was noch offen ist."""
    s = preview.statistics
    missing: list[str] = []
    warnings: list[str] = []

    if not preview.class_promotions:
        missing.append("Keine Klassenversetzungen geplant")
    if not preview.assignment_decisions:
        missing.append("Keine Lehrerzuordnungen geplant")
    if not preview.student_promotions:
        missing.append("Keine Schülerversetzungen geplant")

    if s.conflicts_count:
        warnings.append(f"{s.conflicts_count} kritische Konflikte erfordern Aufmerksamkeit")
    if s.assignments_impossible:
        warnings.append(
            f"{s.assignments_impossible} Zuordnungen können nicht automatisch migriert werden")

    return CompletenessReport(is_complete=not missing, missing=missing, warnings=warnings)


def preview_checksum(preview: MigrationPreview) -> str:
    """SHA-256 über den JSON-Inhalt; gleiche Eingaben ergeben gleiche Prüfsumme."""
    return hashlib.sha256(preview.model_dump_json().encode("utf-8")).hexdigest()


# ─── Ausgabe ──────────────────────────────────────────────────────────────────

_STATUS_STYLE = {"success": "green", "warning": "yellow", "error": "red"}


def print_summary(summary: MigrationSummary, completeness: CompletenessReport) -> None:
    """Gibt Zusammenfassung und Vollständigkeit über Rich aus."""
    from rich.console import Console
    from rich.panel import Panel
    from rich.table import Table
    from rich import box

    console = Console()
    console.print(Panel(summary.overview, title="Zusammenfassung", border_style="cyan"))

    table = Table(title="Kennzahlen", box=box.ROUNDED)
    table.add_column("Kennzahl", style="bold")
    table.add_column("Wert", justify="right")
    for m in summary.key_metrics:
        color = _STATUS_STYLE[m.status]
        table.add_row(m.label, f"[{color}]{m.value}[/{color}]")
    console.print(table)

    for entry in completeness.missing:
        console.print(f"[red]✗[/red] {entry}")
    for entry in completeness.warnings:
        console.print(f"[yellow]⚠[/yellow] {entry}")

    console.print("\n[bold]Empfehlungen:[/bold]")
    for r in summary.recommendations:
        console.print(f"  • {r}")
