"""Datenmodell für eine Unterrichtszuordnung Lehrkraft × Klasse × Fach (Pydantic v2)."""

from typing import Literal, Optional

from pydantic import BaseModel, Field


class Assignment(BaseModel):
    """Eine Lehrkraft unterrichtet ein Fach in einer Klasse."""

    id: str
    teacher_id: str
    class_id: str
    subject_id: str
    hours_per_week: float = Field(ge=0)
    semester: Literal["1", "2"] = "1"
    team_teaching_id: Optional[str] = None   # Gemeinsame ID bei Team-Teaching
