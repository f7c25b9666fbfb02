from pydantic import BaseModel, Field, model_validator
from enum import Enum


class SchoolType(str, Enum):
    REALSCHULE = "realschule"


class NamingStrategy(str, Enum):
    AUTO = "auto"
    MANUAL = "manual"


# ─── KLASSEN-VERSETZUNG ───

class ClassPromotionOptions(BaseModel):
    """Optionen für den Klassen-Versetzungsplaner."""
    # Klassenleitungen in die neue Klasse übernehmen
    preserve_class_teachers: bool = Field(True,
        description="Klassenleitungen übernehmen")
    # Wochenstunden-Tabelle der Klasse in den Plan kopieren
    copy_subject_hours: bool = Field(True,
        description="Stundentafel der Klasse übernehmen")
    # Jahrgang 10 verlässt die Schule (Mittlere Reife)
    graduate_grade_10: bool = Field(True,
        description="Jahrgang 10 als Abschlussjahrgang behandeln")
    # True: Klassen ohne Schüler werden übersprungen statt versetzt
    handle_empty_classes: bool = Field(False,
        description="Leere Klassen überspringen")


# ─── SCHÜLER-VERSETZUNG ───

class StudentPromotionOptions(BaseModel):
    """Optionen für den Schüler-Versetzungsplaner."""
    # Schüler ohne Klassenplan erhalten Status "conflict"
    handle_orphaned_students: bool = Field(True,
        description="Schüler ohne Klassenplan als Konflikt ausweisen")
    # Keine Warnung bei Überschreitung der maximalen Klassengröße
    allow_overcrowding: bool = Field(False,
        description="Überfüllte Klassen zulassen")
    # Maximale Klassengröße (NRW Realschule: Klassenfrequenzhöchstwert)
    max_class_size: int = Field(30, ge=1, le=40,
        description="Maximale Klassengröße")
    # Schüler im Jahrgang 10 erhalten Status "graduate"
    graduate_grade_10: bool = Field(True,
        description="Jahrgang 10 als Abschlussjahrgang behandeln")


# ─── ZUORDNUNGEN ───

class AssignmentMigrationOptions(BaseModel):
    """Optionen für die Migration der Unterrichtszuordnungen."""
    # Lehrbefähigung und Aktivstatus der Lehrkraft prüfen
    validate_teacher_qualifications: bool = Field(True,
        description="Lehrbefähigung und Aktivstatus prüfen")
    # Zuordnungen inaktiver Lehrkräfte trotzdem migrieren
    include_inactive_teachers: bool = Field(False,
        description="Inaktive Lehrkräfte einbeziehen")


# ─── VORSCHAU ───

class AggregationOptions(BaseModel):
    """Optionen für die Gesamtvorschau."""
    # Lehrer-Auslastung mit Risikobewertung berechnen
    include_workload_analysis: bool = Field(True,
        description="Lehrer-Auslastung berechnen")
    # Stunden-Delta pro Lehrkraft berechnen (sonst 0)
    calculate_hour_deltas: bool = Field(True,
        description="Stunden-Delta berechnen")
    # Pausierende Fächer (Bio 7, Physik 9) erkennen
    detect_break_subjects: bool = Field(True,
        description="Pausierende Fächer erkennen")
    # Doppelte Konflikte zusammenfassen
    deduplicate_conflicts: bool = Field(True,
        description="Doppelte Konflikte zusammenfassen")
    # Ergebnislisten deterministisch sortieren
    sort_results: bool = Field(True,
        description="Ergebnisse sortieren")


class RiskThresholds(BaseModel):
    """Schwellenwerte für die Risikobewertung der Lehrer-Auslastung."""
    # |Delta| ab diesem Wert → mittleres Risiko
    low_delta: float = Field(2, ge=0)
    # |Delta| ab diesem Wert → hohes Risiko
    high_delta: float = Field(5, ge=0)
    # Anzahl error-Konflikte ab der das Risiko hoch ist
    high_conflict: int = Field(3, ge=1)

    @model_validator(mode='after')
    def _check_order(self):
        if self.low_delta > self.high_delta:
            raise ValueError(
                f"low_delta ({self.low_delta}) > high_delta ({self.high_delta})")
        return self


# ─── GESAMT-CONFIG ───

class MigrationConfig(BaseModel):
    """Gesamtkonfiguration des Schuljahreswechsels."""
    # Name der Schule
    school_name: str = Field("Muster-Realschule",
        description="Name der Schule")
    # Schultyp (nur Realschule wird für den Wechsel unterstützt)
    school_type: SchoolType = Field(SchoolType.REALSCHULE)
    # Bundesland (für länderspezifische Regeln)
    bundesland: str = Field("NRW")
    # Benennung der neuen Klassen: auto oder manuell prüfen
    naming_strategy: NamingStrategy = Field(NamingStrategy.AUTO)
    # Klassen-Versetzung
    classes: ClassPromotionOptions = Field(default_factory=ClassPromotionOptions)
    # Schüler-Versetzung
    students: StudentPromotionOptions = Field(default_factory=StudentPromotionOptions)
    # Unterrichtszuordnungen
    assignments: AssignmentMigrationOptions = Field(
        default_factory=AssignmentMigrationOptions)
    # Gesamtvorschau
    aggregation: AggregationOptions = Field(default_factory=AggregationOptions)
    # Risiko-Schwellen der Lehrer-Auslastung
    risk: RiskThresholds = Field(default_factory=RiskThresholds)

    @model_validator(mode='after')
    def _check_graduation_consistency(self):
        """Abschluss muss für Klassen und Schüler gleich behandelt werden."""
        if self.classes.graduate_grade_10 != self.students.graduate_grade_10:
            raise ValueError(
                "graduate_grade_10 muss für Klassen und Schüler übereinstimmen")
        return self
