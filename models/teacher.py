"""Datenmodell für eine Lehrkraft (Pydantic v2)."""

from pydantic import BaseModel, Field, field_validator, model_validator


class ReductionHours(BaseModel):
    """Ermäßigungs- und Anrechnungsstunden einer Lehrkraft (NRW-Kategorien)."""

    sV: float = 0   # Schulleitung / Verwaltung
    sL: float = 0   # Sonstige Leitungsaufgaben
    SB: float = 0   # Schwerbehinderung
    LK: float = 0   # Lehrerrat / Konferenzen
    VG: float = 0   # Vorgriffsstunden
    FB: float = 0   # Fachbereichsleitung
    aE: float = 0   # Altersermäßigung
    BA: float = 0   # Besondere Aufgaben
    SO: float = 0   # Sonstiges

    @property
    def total(self) -> float:
        return sum(self.model_dump().values())


class Teacher(BaseModel):
    """Repräsentiert eine einzelne Lehrkraft."""

    id: str
    first_name: str
    last_name: str
    short_name: str                               # Kürzel ("MÜL")
    subjects: list[str] = []                      # Unterrichtbare Fächer (Kürzel)
    max_hours: float = Field(25.5, ge=0)          # Pflichtstunden laut Vertrag
    reduction_hours: ReductionHours = Field(default_factory=ReductionHours)
    is_active: bool = True

    @field_validator("short_name")
    @classmethod
    def normalize_short_name(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode='after')
    def _check_reduction(self):
        if self.reduction_hours.total > self.max_hours:
            raise ValueError(
                f"Ermäßigungsstunden ({self.reduction_hours.total}) > "
                f"Pflichtstunden ({self.max_hours}) bei {self.short_name}"
            )
        return self

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def available_hours(self) -> float:
        """Pflichtstunden abzüglich aller Ermäßigungen."""
        return self.max_hours - self.reduction_hours.total
