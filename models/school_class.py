"""Datenmodell für eine Schulklasse (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field


class SchoolClass(BaseModel):
    """Repräsentiert eine einzelne Klasse eines Schuljahres (z.B. 7b).

    Die Jahrgangsstufe wird hier bewusst nicht auf 5–10 beschränkt: auch
    fehlerhafte Datensätze sollen geladen werden können. Die Prüfung erfolgt
    im Klassen-Versetzungsplaner und erscheint dort als Konflikt.
    """

    id: str
    name: str                                      # "5a", "Klasse 7c", "VI-B"
    grade: int
    student_count: int = Field(0, ge=0)
    subject_hours: dict[str, float] = {}           # Fach → Wochenstunden
    class_teacher_1_id: Optional[str] = None       # Klassenleitung
    class_teacher_2_id: Optional[str] = None       # Stellvertretung

    @property
    def total_weekly_hours(self) -> float:
        """Summe aller Wochenstunden (ohne Korrektur paralleler Fächer)."""
        return sum(self.subject_hours.values())

    @property
    def class_teacher_ids(self) -> list[str]:
        return [t for t in (self.class_teacher_1_id, self.class_teacher_2_id) if t]
