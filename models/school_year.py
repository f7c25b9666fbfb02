"""Datenmodell für ein Schuljahr (Pydantic v2)."""

from datetime import date

from pydantic import BaseModel, model_validator


class SchoolYear(BaseModel):
    """Ein Schuljahr, z.B. "2024/25". Pro Migrationslauf unveränderlich."""

    id: str                  # "sj-2024"
    name: str                # "2024/25"
    start_date: date
    end_date: date
    is_current: bool = False

    @model_validator(mode='after')
    def _check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError(
                f"Schuljahr {self.name}: Ende ({self.end_date}) liegt nicht nach "
                f"dem Beginn ({self.start_date})."
            )
        return self
