"""Datenmodell für eine Schülerin / einen Schüler (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel


class Student(BaseModel):
    """Repräsentiert eine Schülerin oder einen Schüler.

    Die Jahrgangsstufe soll mit der Jahrgangsstufe der Klasse übereinstimmen.
    Das wird nicht erzwungen, sondern vom Schüler-Versetzungsplaner geprüft.
    """

    id: str
    first_name: str = ""
    last_name: str = ""
    class_id: Optional[str] = None
    grade: Optional[int] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_complete_name(self) -> bool:
        return bool(self.first_name.strip()) and bool(self.last_name.strip())
