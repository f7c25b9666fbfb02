"""Datenmodell für ein Unterrichtsfach (Pydantic v2)."""

from typing import Optional
from pydantic import BaseModel


class Subject(BaseModel):
    """Repräsentiert ein Unterrichtsfach."""

    id: str
    name: str
    short_name: str
    category: str = "sonstig"   # hauptfach/sprache/nw/musisch/sport/gesellschaft/religion/differenzierung
    parallel_group: Optional[str] = None   # "Religion", "Differenzierung" oder None

    @property
    def is_parallel(self) -> bool:
        """True wenn das Fach zu einer parallelen Fächergruppe gehört."""
        return self.parallel_group is not None
