"""MigrationSnapshot: schreibgeschützter Datensatz eines Schuljahres (Pydantic v2)."""

from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, model_validator

from models.assignment import Assignment
from models.school_class import SchoolClass
from models.school_year import SchoolYear
from models.student import Student
from models.subject import Subject
from models.teacher import Teacher


class MigrationSnapshot(BaseModel):
    """Alle Eingabedaten für einen Schuljahreswechsel.

    Die Planer lesen den Snapshot nur; geschrieben wird er ausschließlich
    beim Speichern als JSON.
    """

    from_year: SchoolYear
    to_year: SchoolYear
    classes: list[SchoolClass] = []
    students: list[Student] = []
    teachers: list[Teacher] = []
    subjects: list[Subject] = []
    assignments: list[Assignment] = []
    existing_target_class_names: list[str] = []
    created_at: Optional[datetime] = None
    data_version: str = "1.0"

    @model_validator(mode='after')
    def _check_unique_ids(self):
        for label, items in (
            ("Klassen", self.classes),
            ("Schüler", self.students),
            ("Lehrkräfte", self.teachers),
            ("Fächer", self.subjects),
            ("Zuordnungen", self.assignments),
        ):
            dupes = [i for i, n in Counter(x.id for x in items).items() if n > 1]
            if dupes:
                raise ValueError(f"Doppelte IDs bei {label}: {sorted(dupes)}")
        return self

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über den Datensatz."""
        active = sum(1 for t in self.teachers if t.is_active)
        total_hours = sum(a.hours_per_week for a in self.assignments)
        lines = [
            f"Schuljahr: {self.from_year.name} → {self.to_year.name}",
            f"Klassen: {len(self.classes)} "
            f"({len(set(c.grade for c in self.classes))} Jahrgänge)",
            f"Schüler: {len(self.students)}",
            f"Lehrkräfte: {len(self.teachers)} ({active} aktiv, "
            f"{len(self.teachers) - active} inaktiv)",
            f"Fächer: {len(self.subjects)}",
            f"Zuordnungen: {len(self.assignments)} ({total_hours:g}h/Woche)",
            f"Bereits vorhandene Klassen im Zieljahr: "
            f"{', '.join(self.existing_target_class_names)}"
            if self.existing_target_class_names else "",
        ]
        return "\n".join(l for l in lines if l)

    # ─── JSON ───

    def save_json(self, path: Path) -> None:
        """Speichert den kompletten Datensatz als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        updated = self.model_copy(update={
            "created_at": self.created_at or datetime.now(timezone.utc),
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    @classmethod
    def load_json(cls, path: Path) -> "MigrationSnapshot":
        """Lädt einen Datensatz aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
