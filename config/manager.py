"""Verwaltung der Migrations-Konfiguration (migration_config.yaml).

Die YAML-Datei wird mit ruamel.yaml geschrieben, damit Abschnittskommentare erhalten bleiben.
"""

import json
from datetime import date
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table
from rich import box
from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.schema import (
    AggregationOptions,
    ClassPromotionOptions,
    MigrationConfig,
    NamingStrategy,
    StudentPromotionOptions,
)

console = Console()
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Schuljahreswechsel - Konfiguration
# Version: 1.0 (Realschule, Jahrgänge 5–10)
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "naming_strategy": (
        "Benennung",
        "auto = neue Klassennamen automatisch ableiten (5a → 6a),\n"
        "manual = Namen vorschlagen, aber jede Klasse zur Prüfung markieren.",
    ),
    "classes": (
        "Klassen-Versetzung",
        None,
    ),
    "students": (
        "Schüler-Versetzung",
        "max_class_size: Warnung wenn mehr Schüler in eine Zielklasse wechseln.",
    ),
    "assignments": (
        "Unterrichtszuordnungen",
        None,
    ),
    "aggregation": (
        "Vorschau",
        None,
    ),
    "risk": (
        "Risikobewertung Lehrer-Auslastung",
        "Stunden-Delta ab low_delta → mittel, ab high_delta → hoch.",
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "migration_config.yaml"

    def first_run_check(self) -> bool:
        """True, solange noch keine migration_config.yaml angelegt wurde."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> MigrationConfig:
        """Liest die Migrations-Konfiguration und prüft sie gegen MigrationConfig."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py config init' aus, um sie anzulegen."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        if raw is None:
            raise ValueError(f"Konfigurationsdatei ist leer: {target}")
        try:
            return MigrationConfig.model_validate(dict(raw))
        except ValidationError as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e

    # ─── Speichern ───

    def save(self, config: MigrationConfig, path: Optional[Path] = None) -> None:
        """Schreibt die Konfiguration samt Kopfzeile und Abschnittskommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        console.print(f"[green]✓[/green] Konfiguration gespeichert: {target}")

    def _build_commented_yaml(self, config: MigrationConfig) -> CommentedMap:
        """CommentedMap mit einem Kommentarblock vor jedem Abschnitt."""
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )

        if "students" in cm:
            students_map = CommentedMap(cm["students"])
            students_map.yaml_add_eol_comment("1–40", "max_class_size")
            cm["students"] = students_map

        return cm

    # ─── Anzeige ───

    def show(self, config: MigrationConfig) -> None:
        """Gibt die Konfiguration als Tabellen über Rich aus."""
        console.print(Panel(
            f"[bold]{config.school_name}[/bold]  |  "
            f"{config.school_type.value}  |  {config.bundesland}  |  "
            f"Benennung: {config.naming_strategy.value}",
            title="Schuljahreswechsel-Konfiguration",
            border_style="cyan",
        ))
        for label, section in (
            ("Klassen-Versetzung", config.classes),
            ("Schüler-Versetzung", config.students),
            ("Unterrichtszuordnungen", config.assignments),
            ("Vorschau", config.aggregation),
            ("Risikobewertung", config.risk),
        ):
            table = Table(title=label, box=box.SIMPLE)
            table.add_column("Parameter", style="bold")
            table.add_column("Wert")
            for k, v in section.model_dump().items():
                table.add_row(k, str(v))
            console.print(table)

    # ─── Interaktives Bearbeiten ───

    def edit_interactive(self, config: MigrationConfig) -> MigrationConfig:
        """Menü zum Anpassen von Klassen-, Schüler- und Vorschau-Optionen."""
        while True:
            console.print()
            console.print(Panel(
                "[bold]Konfiguration bearbeiten[/bold]",
                border_style="cyan",
            ))
            console.print("  [bold]1.[/bold] Schule & Benennung")
            console.print("  [bold]2.[/bold] Klassen-Versetzung")
            console.print("  [bold]3.[/bold] Schüler-Versetzung")
            console.print("  [bold]4.[/bold] Vorschau-Optionen")
            console.print("  [bold]0.[/bold] Speichern & Zurück")

            choice = Prompt.ask("\nAuswahl", default="0")

            if choice == "1":
                name = Prompt.ask("Name der Schule", default=config.school_name)
                strategy = Prompt.ask(
                    "Benennung", choices=[s.value for s in NamingStrategy],
                    default=config.naming_strategy.value,
                )
                config = config.model_copy(update={
                    "school_name": name,
                    "naming_strategy": NamingStrategy(strategy),
                })
            elif choice == "2":
                config = self._with_graduation(
                    config, classes=self._edit_classes(config.classes))
            elif choice == "3":
                config = self._with_graduation(
                    config, students=self._edit_students(config.students))
            elif choice == "4":
                config = config.model_copy(
                    update={"aggregation": self._edit_aggregation(config.aggregation)}
                )
            elif choice == "0":
                self.save(config)
                break
            else:
                console.print("[yellow]Ungültige Auswahl.[/yellow]")

        return config

    def _with_graduation(self, config: MigrationConfig, **sections) -> MigrationConfig:
        """Übernimmt geänderte Abschnitte und hält graduate_grade_10 synchron."""
        data = config.model_dump()
        for key, section in sections.items():
            data[key] = section.model_dump()
            graduate = section.graduate_grade_10
        data["classes"]["graduate_grade_10"] = graduate
        data["students"]["graduate_grade_10"] = graduate
        return MigrationConfig.model_validate(data)

    def _edit_classes(self, opts: ClassPromotionOptions) -> ClassPromotionOptions:
        """Klassen-Optionen interaktiv anpassen."""
        return ClassPromotionOptions(
            preserve_class_teachers=Confirm.ask(
                "Klassenleitungen übernehmen?", default=opts.preserve_class_teachers),
            copy_subject_hours=Confirm.ask(
                "Stundentafel übernehmen?", default=opts.copy_subject_hours),
            graduate_grade_10=Confirm.ask(
                "Jahrgang 10 als Abschlussjahrgang?", default=opts.graduate_grade_10),
            handle_empty_classes=Confirm.ask(
                "Leere Klassen überspringen?", default=opts.handle_empty_classes),
        )

    def _edit_students(self, opts: StudentPromotionOptions) -> StudentPromotionOptions:
        """Schüler-Optionen interaktiv anpassen."""
        size = IntPrompt.ask("Maximale Klassengröße", default=opts.max_class_size)
        while not 1 <= size <= 40:
            console.print("[red]Bitte einen Wert zwischen 1 und 40 eingeben.[/red]")
            size = IntPrompt.ask("Maximale Klassengröße", default=opts.max_class_size)
        return StudentPromotionOptions(
            handle_orphaned_students=Confirm.ask(
                "Schüler ohne Klassenplan als Konflikt ausweisen?",
                default=opts.handle_orphaned_students),
            allow_overcrowding=Confirm.ask(
                "Überfüllte Klassen zulassen?", default=opts.allow_overcrowding),
            max_class_size=size,
            graduate_grade_10=Confirm.ask(
                "Jahrgang 10 als Abschlussjahrgang?", default=opts.graduate_grade_10),
        )

    def _edit_aggregation(self, opts: AggregationOptions) -> AggregationOptions:
        """Vorschau-Optionen interaktiv anpassen."""
        values = {
            key: Confirm.ask(key, default=value)
            for key, value in opts.model_dump().items()
        }
        return AggregationOptions(**values)
