"""Schuljahreswechsel: Haupt-CLI.

Verwendung:
  python main.py config init              Standard-Konfiguration anlegen
  python main.py config show              Konfiguration anzeigen
  python main.py config edit              Konfiguration bearbeiten
  python main.py generate                 Demo-Datensatz erzeugen (JSON)
  python main.py preview                  Vorschau des Schuljahreswechsels
  python main.py preview --strict         ... Exit-Code 1 bei Fehlern
  python main.py export                   Vorschau als Excel + PDF
  python main.py rules 7 8                Migrationsregeln Jg. 7 → 8
  python main.py -v preview               mit ausführlichem Log
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

# Standard-Pfad für den gespeicherten Datensatz
DEFAULT_SNAPSHOT_JSON = Path("output/snapshot.json")


def _load_config_or_abort():
    """Lädt die Konfiguration oder bricht mit Fehlermeldung ab."""
    from config.manager import ConfigManager
    mgr = ConfigManager()
    if mgr.first_run_check():
        console.print(
            "[red]Keine Konfiguration gefunden.[/red]\n"
            "Führen Sie zunächst [bold]python main.py config init[/bold] aus."
        )
        sys.exit(1)
    try:
        return mgr, mgr.load()
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def _load_config_or_default():
    """Wie _load_config_or_abort, fällt aber ohne Datei auf die Standardwerte zurück."""
    from config.defaults import default_migration_config
    from config.manager import ConfigManager
    if ConfigManager().first_run_check():
        console.print("[dim]Keine Konfiguration gefunden, verwende Standardwerte.[/dim]")
        return default_migration_config()
    return _load_config_or_abort()[1]


def _load_snapshot_or_abort(json_path: str, gen_first: bool, seed: int):
    from models.snapshot import MigrationSnapshot

    if gen_first:
        from data.fake_data import DemoSnapshotGenerator
        return DemoSnapshotGenerator(seed=seed).generate()

    p = Path(json_path)
    if not p.exists():
        console.print(
            f"[red]Keine Datendatei gefunden: {p}[/red]\n"
            "Verwenden Sie [bold]python main.py generate[/bold] "
            "oder das [bold]--generate[/bold] Flag."
        )
        sys.exit(1)
    console.print(f"[bold]Lade Datensatz:[/bold] {p}")
    try:
        return MigrationSnapshot.load_json(p)
    except ValueError as e:
        console.print(f"[red]Datensatz ungültig: {p}[/red]\n{e}")
        sys.exit(1)


def _run_preview_or_abort(snapshot, config):
    from migration.pipeline import plan_migration
    from migration.preview import MigrationContractError

    try:
        return plan_migration(snapshot, config)
    except MigrationContractError as e:
        console.print(Panel(
            f"[bold red]Interner Fehler: Vorschau ist inkonsistent[/bold red]\n\n{e}",
            border_style="red",
        ))
        sys.exit(1)


_snapshot_options = [
    click.option("--json-path", default=str(DEFAULT_SNAPSHOT_JSON),
                 help="Pfad zur gespeicherten JSON-Datei."),
    click.option("--generate", "gen_first", is_flag=True, default=False,
                 help="Demo-Datensatz erzeugen statt JSON zu laden."),
    click.option("--seed", default=42, help="Zufalls-Seed für --generate."),
]


def _with_snapshot_options(func):
    for option in reversed(_snapshot_options):
        func = option(func)
    return func


# ─── CONFIG ───────────────────────────────────────────────────────────────────

@click.group("config")
def cmd_config():
    """Konfiguration anlegen, anzeigen oder bearbeiten."""


@cmd_config.command("init")
def config_init():
    """Legt die Standard-Konfiguration als YAML an."""
    from config.defaults import default_migration_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    if not mgr.first_run_check():
        console.print(
            "[yellow]Eine Konfiguration existiert bereits.[/yellow]\n"
            "Verwenden Sie [bold]python main.py config edit[/bold] zum Bearbeiten."
        )
        if not click.confirm("Mit Standardwerten überschreiben?", default=False):
            return
    mgr.save(default_migration_config())


@cmd_config.command("show")
def config_show():
    """Zeigt die aktuelle Konfiguration an."""
    mgr, config = _load_config_or_abort()
    mgr.show(config)


@cmd_config.command("edit")
def config_edit():
    """Bearbeitet die Konfiguration interaktiv."""
    mgr, config = _load_config_or_abort()
    mgr.edit_interactive(config)


# ─── GENERATE ─────────────────────────────────────────────────────────────────

@click.command("generate")
@click.option("--seed", default=42, help="Zufalls-Seed für reproduzierbare Daten.")
@click.option("--json-path", default=str(DEFAULT_SNAPSHOT_JSON),
              help="Pfad für den JSON-Export.")
def cmd_generate(seed: int, json_path: str):
    """Erzeugt einen Demo-Datensatz (Klassen, Schüler, Lehrkräfte, Zuordnungen)."""
    from data.fake_data import DemoSnapshotGenerator

    console.print("[bold]Demo-Datensatz wird generiert...[/bold]")
    snapshot = DemoSnapshotGenerator(seed=seed).generate()
    console.print(f"\n[dim]{snapshot.summary()}[/dim]\n")

    out_path = Path(json_path)
    snapshot.save_json(out_path)
    console.print(f"[green]✓[/green] JSON gespeichert: {out_path}")


# ─── PREVIEW ──────────────────────────────────────────────────────────────────

@click.command("preview")
@_with_snapshot_options
@click.option("--export-json", "export_json", default=None,
              help="Vorschau zusätzlich als JSON speichern.")
@click.option("--details", is_flag=True, default=False,
              help="Lehrer-Auslastung und Zuordnungen anzeigen.")
@click.option("--strict", is_flag=True, default=False,
              help="Exit-Code 1, wenn blockierende Konflikte bestehen.")
def cmd_preview(json_path: str, gen_first: bool, seed: int,
                export_json: str, details: bool, strict: bool):
    """Berechnet die Vorschau des Schuljahreswechsels."""
    from analysis.migration_summary import (
        generate_migration_summary, preview_checksum, print_summary,
        validate_migration_completeness,
    )

    config = _load_config_or_default()
    snapshot = _load_snapshot_or_abort(json_path, gen_first, seed)
    console.print(f"\n{snapshot.summary()}\n")

    preview = _run_preview_or_abort(snapshot, config).preview
    preview.print_rich()
    print_summary(
        generate_migration_summary(preview), validate_migration_completeness(preview))

    if details:
        _print_workload(preview)
        _print_decisions(preview)

    console.print(f"\n[dim]Prüfsumme: {preview_checksum(preview)}[/dim]")

    if export_json:
        out = Path(export_json)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(preview.model_dump_json(indent=2), encoding="utf-8")
        console.print(f"[green]✓[/green] Vorschau gespeichert: {out}")

    if strict and preview.has_blocking_conflicts:
        sys.exit(1)


def _print_workload(preview) -> None:
    from export.helpers import RISK_LABELS, format_delta, format_hours

    table = Table(title="Lehrer-Auslastung", box=box.ROUNDED)
    table.add_column("Lehrkraft", style="bold")
    table.add_column("Ist", justify="right")
    table.add_column("Prognose", justify="right")
    table.add_column("Delta", justify="right")
    table.add_column("auto/man./unm.", justify="center")
    table.add_column("Pausierend")
    table.add_column("Risiko")
    colors = {"high": "red", "medium": "yellow", "low": "green"}
    for w in preview.teacher_workload:
        c = colors[w.risk_level]
        ch = w.assignment_changes
        table.add_row(
            w.teacher_name,
            format_hours(w.current_hours),
            format_hours(w.projected_hours),
            format_delta(w.hours_delta),
            f"{ch.auto}/{ch.manual}/{ch.impossible}",
            ", ".join(w.subjects_on_break),
            f"[{c}]{RISK_LABELS[w.risk_level]}[/{c}]",
        )
    console.print(table)


def _print_decisions(preview) -> None:
    table = Table(title="Zuordnungen mit Handlungsbedarf", box=box.SIMPLE)
    table.add_column("Lehrkraft")
    table.add_column("Fach")
    table.add_column("Klasse")
    table.add_column("Entscheidung")
    table.add_column("Begründung")
    for d in preview.assignment_decisions:
        if d.decision == "auto":
            continue
        color = "red" if d.decision == "impossible" else "yellow"
        table.add_row(
            d.teacher_name, d.subject, d.old_class_name,
            f"[{color}]{d.decision}[/{color}]", d.reason,
        )
    console.print(table)


# ─── EXPORT ───────────────────────────────────────────────────────────────────

@click.command("export")
@_with_snapshot_options
@click.option("--output-dir", "-o", default="output",
              help="Zielverzeichnis für Excel und PDF.")
@click.option("--no-pdf", is_flag=True, default=False, help="Nur Excel erzeugen.")
def cmd_export(json_path: str, gen_first: bool, seed: int, output_dir: str, no_pdf: bool):
    """Exportiert die Vorschau als Excel und PDF."""
    from analysis.migration_summary import generate_migration_summary
    from export import ExcelExporter, PdfExporter

    config = _load_config_or_default()
    snapshot = _load_snapshot_or_abort(json_path, gen_first, seed)
    preview = _run_preview_or_abort(snapshot, config).preview
    summary = generate_migration_summary(preview)

    stem = f"schuljahreswechsel_{preview.from_year.name}_{preview.to_year.name}".replace("/", "-")
    out_dir = Path(output_dir)

    xlsx = out_dir / f"{stem}.xlsx"
    ExcelExporter(preview, config.school_name).export(xlsx, summary)
    console.print(f"[green]✓[/green] Excel gespeichert: {xlsx}")

    if not no_pdf:
        pdf = out_dir / f"{stem}.pdf"
        PdfExporter(preview, config.school_name).export(pdf, summary)
        console.print(f"[green]✓[/green] PDF gespeichert: {pdf}")


# ─── RULES ────────────────────────────────────────────────────────────────────

@click.command("rules")
@click.argument("from_grade", type=click.IntRange(5, 10))
@click.argument("to_grade", type=click.IntRange(5, 10))
def cmd_rules(from_grade: int, to_grade: int):
    """Zeigt die Migrationsregeln aller Fächer für einen Jahrgangswechsel."""
    from migration.subject_rules import (
        calculate_rule_statistics, evaluate_parallel_subject_migration,
        get_subject_availability, get_subject_migration_availability,
    )

    colors = {"auto": "green", "manual": "yellow", "impossible": "red"}
    table = Table(title=f"Migrationsregeln Jahrgang {from_grade} → {to_grade}", box=box.ROUNDED)
    table.add_column("Fach", style="bold")
    table.add_column("Regel")
    table.add_column("Gruppe")
    table.add_column("Hinweise")
    for subject in get_subject_availability(from_grade):
        info = evaluate_parallel_subject_migration(subject, from_grade, to_grade)
        c = colors[info.migration_rule]
        table.add_row(
            subject, f"[{c}]{info.migration_rule}[/{c}]",
            info.parallel_group or "", "\n".join(info.notes),
        )
    console.print(table)

    stats = calculate_rule_statistics(from_grade, to_grade)
    availability = get_subject_migration_availability(from_grade, to_grade)
    console.print(
        f"auto: {stats.auto} ({stats.percentage_auto}%) | "
        f"manuell: {stats.manual} ({stats.percentage_manual}%) | "
        f"unmöglich: {stats.impossible} ({stats.percentage_impossible}%)"
    )
    if availability.new:
        console.print(f"[cyan]Neu im Zieljahrgang:[/cyan] {', '.join(availability.new)}")
    if availability.unavailable:
        console.print(f"[red]Entfällt:[/red] {', '.join(availability.unavailable)}")


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False,
              help="Ausführliches Log (DEBUG) ausgeben.")
def cli(verbose: bool):
    """Schuljahreswechsel für Realschulen (Jahrgänge 5–10).

    Starten Sie mit: python main.py config init
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def main():
    """Einstiegspunkt. Ohne Argumente und ohne Config wird sie angelegt."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen beim Schuljahreswechsel![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Die Standard-Konfiguration wird jetzt angelegt...",
            border_style="cyan",
        ))
        sys.argv.extend(["config", "init"])

    cli()


# Befehle registrieren
cli.add_command(cmd_config)
cli.add_command(cmd_generate)
cli.add_command(cmd_preview)
cli.add_command(cmd_export)
cli.add_command(cmd_rules)


if __name__ == "__main__":
    main()
