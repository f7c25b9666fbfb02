"""Ausgabe-Modelle des Schuljahreswechsels (Pydantic v2).

Alle Modelle sind unveränderlich (frozen) und werden pro Lauf neu aus einem
schreibgeschützten Datensatz berechnet. MigrationPreview prüft zusätzlich die
Konsistenz zwischen Statistik und Inhalt – ein Verstoß dort ist ein Logikfehler
in einem vorgelagerten Planer, kein Datenproblem.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.school_year import SchoolYear

ConflictType = Literal[
    "class_name_collision",
    "missing_subject",
    "inactive_teacher",
    "mapping_error",
    "student_conflict",
]
Severity = Literal["error", "warning"]
RelatedType = Literal["class", "teacher", "student", "assignment", "subject"]
MigrationVerdict = Literal["auto", "manual", "impossible"]
StudentStatus = Literal["promote", "graduate", "conflict"]
RiskLevel = Literal["low", "medium", "high"]


# ─── Konflikte ────────────────────────────────────────────────────────────────

class Conflict(BaseModel):
    """Ein erkanntes Problem; error blockiert die automatische Ausführung."""

    model_config = ConfigDict(frozen=True)

    type: ConflictType
    severity: Severity
    message: str = Field(min_length=1)
    related_id: Optional[str] = None
    related_type: Optional[RelatedType] = None
    suggested_resolution: Optional[str] = None
    affected_items: tuple[str, ...] = ()

    @property
    def is_error(self) -> bool:
        return self.severity == "error"

    @property
    def dedup_key(self) -> tuple[str, str, str]:
        """Schlüssel für die Duplikat-Erkennung: (Typ, Bezugs-ID, Meldung)."""
        return (self.type, self.related_id or "none", self.message)


# ─── Pläne ────────────────────────────────────────────────────────────────────

class ClassPromotionPlan(BaseModel):
    """Versetzungsplan einer Klasse in die nächste Jahrgangsstufe."""

    model_config = ConfigDict(frozen=True)

    old_class_id: str
    old_class_name: str
    old_grade: int = Field(ge=5, le=9)
    new_class_name: str = Field(min_length=1, max_length=50)
    new_grade: int = Field(ge=6, le=10)
    subject_hours: dict[str, float] = {}
    teacher_ids: tuple[str, ...] = ()
    student_count: int = Field(0, ge=0)
    class_teacher_1_id: Optional[str] = None
    class_teacher_2_id: Optional[str] = None
    needs_manual_review: bool = False

    @model_validator(mode='after')
    def _check_grade_step(self):
        if self.new_grade != self.old_grade + 1:
            raise ValueError(
                f"Klasse {self.old_class_name}: Zieljahrgang {self.new_grade} "
                f"folgt nicht auf {self.old_grade}"
            )
        return self


class AssignmentDecision(BaseModel):
    """Migrationsentscheidung für eine einzelne Unterrichtszuordnung."""

    model_config = ConfigDict(frozen=True)

    assignment_id: str
    teacher_id: str
    teacher_name: str
    subject: str                         # Fach-Kürzel bzw. Fachname aus der Tabelle
    old_class_id: str
    old_class_name: str
    old_grade: int = Field(ge=5, le=10)
    new_class_id: Optional[str] = None   # wird erst bei der Ausführung aufgelöst
    new_class_name: Optional[str] = None
    new_grade: Optional[int] = Field(None, ge=5, le=10)
    hours_per_week: float = Field(ge=0)
    semester: Literal["1", "2"] = "1"
    decision: MigrationVerdict
    reason: str = ""
    migration_rule: Optional[MigrationVerdict] = None
    parallel_group: Optional[str] = None
    parallel_subjects: tuple[str, ...] = ()
    notes: tuple[str, ...] = ()


class StudentPromotionPlan(BaseModel):
    """Versetzungsplan einer Schülerin / eines Schülers."""

    model_config = ConfigDict(frozen=True)

    student_id: str
    student_name: str
    old_class_id: str
    old_class_name: str
    old_grade: int = Field(ge=5, le=10)
    new_class_id: Optional[str] = None
    new_class_name: Optional[str] = None
    new_grade: Optional[int] = Field(None, ge=6, le=10)
    status: StudentStatus
    reason: str = ""

    @model_validator(mode='after')
    def _check_status_fields(self):
        if self.status == "promote" and (
            self.new_class_name is None or self.new_grade is None
        ):
            raise ValueError(
                f"Schüler {self.student_id}: Versetzung ohne Zielklasse/Zieljahrgang"
            )
        if self.status == "graduate" and self.new_grade is not None:
            raise ValueError(
                f"Schüler {self.student_id}: Abschluss mit Zieljahrgang {self.new_grade}"
            )
        return self


# ─── Statistik + Lehrer-Auslastung ────────────────────────────────────────────

class MigrationStatistics(BaseModel):
    """Kennzahlen über alle drei Versetzungsbereiche."""

    model_config = ConfigDict(frozen=True)

    total_classes: int = Field(ge=0)
    classes_promoted: int = Field(ge=0)
    classes_graduated: int = Field(ge=0)
    total_assignments: int = Field(ge=0)
    assignments_auto: int = Field(ge=0)
    assignments_manual: int = Field(ge=0)
    assignments_impossible: int = Field(ge=0)
    total_students: int = Field(ge=0)
    students_promoted: int = Field(ge=0)
    students_graduated: int = Field(ge=0)
    conflicts_count: int = Field(ge=0)   # Anzahl error-Konflikte
    warnings_count: int = Field(ge=0)

    @model_validator(mode='after')
    def _check_sums(self):
        decided = self.assignments_auto + self.assignments_manual + self.assignments_impossible
        if decided != self.total_assignments:
            raise ValueError(
                f"Zuordnungen: auto+manual+impossible ({decided}) "
                f"!= total ({self.total_assignments})"
            )
        if self.students_promoted + self.students_graduated > self.total_students:
            raise ValueError("Mehr versetzte/abgehende Schüler als Schüler insgesamt")
        return self


class AssignmentChanges(BaseModel):
    model_config = ConfigDict(frozen=True)

    auto: int = Field(0, ge=0)
    manual: int = Field(0, ge=0)
    impossible: int = Field(0, ge=0)
    total: int = Field(0, ge=0)


class TeacherWorkloadAnalysis(BaseModel):
    """Stunden-Delta und Risikoeinschätzung für eine Lehrkraft."""

    model_config = ConfigDict(frozen=True)

    teacher_id: str
    teacher_name: str
    current_hours: float = Field(ge=0)
    projected_hours: float = Field(ge=0)   # nur auto-Entscheidungen
    hours_delta: float
    assignment_changes: AssignmentChanges
    subjects_on_break: tuple[str, ...] = ()
    parallel_subjects: tuple[str, ...] = ()
    conflicts: tuple[Conflict, ...] = ()
    risk_level: RiskLevel


# ─── Gesamtvorschau ───────────────────────────────────────────────────────────

class MigrationPreview(BaseModel):
    """Konsistenzgeprüfte Vorschau des Schuljahreswechsels."""

    model_config = ConfigDict(frozen=True)

    from_year: SchoolYear
    to_year: SchoolYear
    class_promotions: tuple[ClassPromotionPlan, ...]
    assignment_decisions: tuple[AssignmentDecision, ...]
    student_promotions: tuple[StudentPromotionPlan, ...]
    statistics: MigrationStatistics
    conflicts: tuple[Conflict, ...]
    teacher_workload: tuple[TeacherWorkloadAnalysis, ...] = ()

    @model_validator(mode='after')
    def _check_consistency(self):
        """Querprüfung zwischen Statistik und Inhalt der Vorschau."""
        stats = self.statistics
        if self.from_year.id == self.to_year.id:
            raise ValueError("Ausgangs- und Zieljahr sind identisch")

        if stats.classes_promoted != len(self.class_promotions):
            raise ValueError(
                f"classes_promoted ({stats.classes_promoted}) != "
                f"Anzahl Klassenpläne ({len(self.class_promotions)})"
            )

        verdicts = {"auto": 0, "manual": 0, "impossible": 0}
        for d in self.assignment_decisions:
            verdicts[d.decision] += 1
        if stats.total_assignments != len(self.assignment_decisions) or (
            verdicts["auto"], verdicts["manual"], verdicts["impossible"]
        ) != (stats.assignments_auto, stats.assignments_manual, stats.assignments_impossible):
            raise ValueError("Zuordnungs-Statistik passt nicht zu den Entscheidungen")

        statuses = {"promote": 0, "graduate": 0, "conflict": 0}
        for p in self.student_promotions:
            statuses[p.status] += 1
        if (
            stats.total_students != len(self.student_promotions)
            or stats.students_promoted != statuses["promote"]
            or stats.students_graduated != statuses["graduate"]
        ):
            raise ValueError("Schüler-Statistik passt nicht zu den Schülerplänen")

        errors = sum(1 for c in self.conflicts if c.severity == "error")
        if stats.conflicts_count != errors or stats.warnings_count != len(self.conflicts) - errors:
            raise ValueError("Konflikt-Statistik passt nicht zur Konfliktliste")
        return self

    @property
    def has_blocking_conflicts(self) -> bool:
        return self.statistics.conflicts_count > 0

    def print_rich(self) -> None:
        """Gibt die Vorschau formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        s = self.statistics
        status = (
            "[bold red]✗ BLOCKIERENDE KONFLIKTE[/bold red]"
            if self.has_blocking_conflicts
            else "[bold green]✓ AUSFÜHRBAR[/bold green]"
        )
        console.print(Panel(
            f"{status}\n"
            f"Klassen: {s.classes_promoted} versetzt, {s.classes_graduated} Abschluss "
            f"(gesamt {s.total_classes})\n"
            f"Zuordnungen: {s.assignments_auto} auto | {s.assignments_manual} manuell | "
            f"{s.assignments_impossible} unmöglich (gesamt {s.total_assignments})\n"
            f"Schüler: {s.students_promoted} versetzt, {s.students_graduated} Abschluss "
            f"(gesamt {s.total_students})\n"
            f"Konflikte: [red]{s.conflicts_count} Fehler[/red], "
            f"[yellow]{s.warnings_count} Warnungen[/yellow]",
            title=f"Schuljahreswechsel {self.from_year.name} → {self.to_year.name}",
            border_style="cyan",
        ))

        table = Table(title="Klassenversetzungen", box=box.ROUNDED)
        table.add_column("Alt")
        table.add_column("Jg.", justify="right")
        table.add_column("Neu", style="bold")
        table.add_column("Jg.", justify="right")
        table.add_column("Schüler", justify="right")
        for p in self.class_promotions:
            name = f"{p.new_class_name} [yellow](prüfen)[/yellow]" if p.needs_manual_review else p.new_class_name
            table.add_row(p.old_class_name, str(p.old_grade), name,
                          str(p.new_grade), str(p.student_count))
        console.print(table)

        if self.conflicts:
            c_table = Table(title="Konflikte", box=box.SIMPLE)
            c_table.add_column("Schwere", width=8)
            c_table.add_column("Typ")
            c_table.add_column("Meldung")
            for c in self.conflicts:
                color = "red" if c.severity == "error" else "yellow"
                c_table.add_row(f"[{color}]{c.severity}[/{color}]", c.type, c.message)
            console.print(c_table)
