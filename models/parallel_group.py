"""Datenmodell für eine parallele Fächergruppe (Pydantic v2)."""

from pydantic import BaseModel, field_validator


class ParallelGroup(BaseModel):
    """Bündel austauschbarer Fächer, von denen jede Schülerin genau eines belegt.

    Beispiel: KR / ER / PP (Religion) – pro Jahrgang zählt die Gruppe nur
    einmal mit ihrem festen Stundenkontingent.
    """

    id: str                              # "Religion"
    name: str                            # "Religionsfächer"
    description: str = ""
    subjects: list[str]                  # Fach-Kürzel
    hours_per_grade: dict[int, int]      # Jahrgang → Wochenstunden der Gruppe

    @field_validator("subjects")
    @classmethod
    def _unique_subjects(cls, v: list[str]) -> list[str]:
        if len(set(v)) != len(v):
            raise ValueError(f"Doppelte Fächer in paralleler Gruppe: {v}")
        return v

    def hours_for_grade(self, grade: int) -> int:
        return self.hours_per_grade.get(grade, 0)
