from config.schema import (
    AggregationOptions,
    AssignmentMigrationOptions,
    ClassPromotionOptions,
    MigrationConfig,
    NamingStrategy,
    RiskThresholds,
    SchoolType,
    StudentPromotionOptions,
)
from models.parallel_group import ParallelGroup


def default_migration_config() -> MigrationConfig:
    """Komplette Default-Konfiguration für eine Realschule in NRW."""
    return MigrationConfig(
        school_name="Muster-Realschule",
        school_type=SchoolType.REALSCHULE,
        bundesland="NRW",
        naming_strategy=NamingStrategy.AUTO,
        classes=ClassPromotionOptions(),
        students=StudentPromotionOptions(max_class_size=30),
        assignments=AssignmentMigrationOptions(),
        aggregation=AggregationOptions(),
        risk=RiskThresholds(low_delta=2, high_delta=5, high_conflict=3),
    )


REALSCHULE_GRADES: tuple[int, ...] = (5, 6, 7, 8, 9, 10)
FIRST_GRADE = 5
FINAL_GRADE = 10

# Feste Versetzungstabelle 5→6 … 9→10. Jahrgang 10 hat keinen Nachfolger.
GRADE_PROGRESSION: dict[int, int] = {5: 6, 6: 7, 7: 8, 8: 9, 9: 10}


# ─── PARALLELE FÄCHERGRUPPEN ───
# Jede Schülerin belegt genau ein Fach der Gruppe. Pro Jahrgang zählt die
# Gruppe deshalb nur einmal mit ihrem festen Stundenkontingent.

PARALLEL_GROUPS: dict[str, ParallelGroup] = {
    "Differenzierung": ParallelGroup(
        id="Differenzierung",
        name="Differenzierungsfächer",
        description="Wahlpflichtfächer, die parallel unterrichtet werden (Jg. 7–10)",
        # FS=Französisch, SW=Sozialwissenschaften, NW=Biologie-Kurs,
        # IF=Informatik, TC=Technik, MUS=Musik-Kurs
        subjects=["FS", "SW", "NW", "IF", "TC", "MUS"],
        hours_per_grade={7: 3, 8: 4, 9: 3, 10: 4},
    ),
    "Religion": ParallelGroup(
        id="Religion",
        name="Religionsfächer",
        description="Religions- und Philosophieunterricht, parallel unterrichtet",
        # KR=Katholische Religion, ER=Evangelische Religion, PP=Praktische Philosophie
        subjects=["KR", "ER", "PP"],
        hours_per_grade={5: 2, 6: 2, 7: 2, 8: 2, 9: 2, 10: 2},
    ),
}


# ─── FACH-JAHRGANGS-MATRIX (NRW Realschule, Stundentafel 2025) ───
# Pro Fach: Jahrgänge, Kontinuität, Standard-Migrationsregel,
# Jahrgänge mit reduzierten Stunden ("breaks") und Hinweise.
# continuity: continuous / interrupted / terminates
# migration_rule: auto / manual / impossible

SUBJECT_GRADE_MAPPING: dict[str, dict] = {
    # Kernfächer
    "Deutsch": {
        "grades":         [5, 6, 7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Kernfach - durchgängig alle Jahrgangsstufen",
    },
    "Mathematik": {
        "grades":         [5, 6, 7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Kernfach - durchgängig alle Jahrgangsstufen",
    },
    "Englisch": {
        "grades":         [5, 6, 7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Erste Fremdsprache - durchgängig alle Jahrgangsstufen",
    },
    # Gesellschaftslehre
    "Geschichte": {
        "grades":         [5, 6, 7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Durchgängig, in Klasse 5 mit reduziertem Stundenumfang",
    },
    "Politik": {
        "grades":         [6, 7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Gesellschaftslehre - ab Klasse 6",
    },
    "Erdkunde": {
        "grades":         [5, 6, 7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Gesellschaftslehre - durchgängig",
    },
    # Naturwissenschaften
    "Biologie": {
        "grades":         [5, 6, 7, 8, 9, 10],
        "continuity":     "interrupted",
        "migration_rule": "manual",
        "breaks":         [7],
        "notes":          "Reduzierte Stunden in Klasse 7 - manuelle Überprüfung nötig",
    },
    "Physik": {
        "grades":         [6, 7, 8, 9, 10],
        "continuity":     "interrupted",
        "migration_rule": "manual",
        "breaks":         [9],
        "notes":          "Reduzierte Stunden in Klasse 9 - manuelle Überprüfung nötig",
    },
    "Chemie": {
        "grades":         [7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Ab Klasse 7 durchgängig",
    },
    # Sport + ästhetische Fächer
    "Sport": {
        "grades":         [5, 6, 7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Durchgängig alle Jahrgangsstufen",
    },
    "Kunst": {
        "grades":         [5, 6, 7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Ästhetisches Fach - durchgängig",
    },
    "Musik": {
        "grades":         [5, 6, 7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Ästhetisches Fach - durchgängig",
    },
    # Religion (parallele Gruppe)
    "KR": {
        "grades":         [5, 6, 7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Katholische Religion - parallele Gruppe mit ER/PP",
    },
    "ER": {
        "grades":         [5, 6, 7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Evangelische Religion - parallele Gruppe mit KR/PP",
    },
    "PP": {
        "grades":         [5, 6, 7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "auto",
        "breaks":         [],
        "notes":          "Praktische Philosophie - parallele Gruppe mit KR/ER",
    },
    # Differenzierung 7–10 (parallele Gruppe)
    "FS": {
        "grades":         [7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "manual",
        "breaks":         [],
        "notes":          "Französisch - Differenzierungsfach",
    },
    "SW": {
        "grades":         [7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "manual",
        "breaks":         [],
        "notes":          "Sozialwissenschaften - Differenzierungsfach",
    },
    "NW": {
        "grades":         [7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "manual",
        "breaks":         [],
        "notes":          "Biologie-Kurs - Differenzierungsfach",
    },
    "IF": {
        "grades":         [7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "manual",
        "breaks":         [],
        "notes":          "Informatik - Differenzierungsfach",
    },
    "TC": {
        "grades":         [7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "manual",
        "breaks":         [],
        "notes":          "Technik - Differenzierungsfach",
    },
    "MUS": {
        "grades":         [7, 8, 9, 10],
        "continuity":     "continuous",
        "migration_rule": "manual",
        "breaks":         [],
        "notes":          "Musik-Kurs - Differenzierungsfach",
    },
}

# Übliche Kürzel und Langnamen → Schlüssel der Fach-Jahrgangs-Matrix.
# Vergleich erfolgt ohne Groß-/Kleinschreibung.
SUBJECT_ALIASES: dict[str, str] = {
    "D":   "Deutsch",
    "DE":  "Deutsch",
    "M":   "Mathematik",
    "MA":  "Mathematik",
    "E":   "Englisch",
    "EN":  "Englisch",
    "GE":  "Geschichte",
    "PK":  "Politik",
    "PO":  "Politik",
    "EK":  "Erdkunde",
    "BI":  "Biologie",
    "PH":  "Physik",
    "CH":  "Chemie",
    "SP":  "Sport",
    "KU":  "Kunst",
    "MU":  "Musik",
    "Katholische Religion":   "KR",
    "Evangelische Religion":  "ER",
    "Praktische Philosophie": "PP",
    "Französisch":            "FS",
    "Sozialwissenschaften":   "SW",
    "Biologie-Kurs":          "NW",
    "Informatik":             "IF",
    "Technik":                "TC",
    "Musik-Kurs":             "MUS",
}


# ─── STUNDENTAFEL ───
# Jahrgang → Fach → Wochenstunden. Parallele Gruppen erscheinen hier nur
# einmal unter ihrem Gruppennamen ("Religion", "Differenzierung").

STUNDENTAFEL_REALSCHULE_NRW: dict[int, dict[str, int]] = {
    5: {
        "Deutsch": 5, "Mathematik": 4, "Englisch": 4, "Biologie": 2,
        "Erdkunde": 2, "Geschichte": 2, "Sport": 3, "Kunst": 2, "Musik": 2,
        "Religion": 2,
    },  # Summe: 28h
    6: {
        "Deutsch": 4, "Mathematik": 4, "Englisch": 4, "Biologie": 2,
        "Physik": 2, "Erdkunde": 1, "Geschichte": 2, "Politik": 1, "Sport": 3,
        "Kunst": 2, "Musik": 1, "Religion": 2,
    },  # Summe: 28h
    7: {
        "Deutsch": 4, "Mathematik": 4, "Englisch": 4, "Differenzierung": 3,
        "Biologie": 2, "Physik": 2, "Chemie": 2, "Geschichte": 2, "Politik": 2,
        "Erdkunde": 1, "Sport": 3, "Kunst": 1, "Musik": 1, "Religion": 2,
    },  # Summe: 33h
    8: {
        "Deutsch": 4, "Mathematik": 4, "Englisch": 3, "Differenzierung": 4,
        "Biologie": 1, "Physik": 2, "Chemie": 2, "Geschichte": 2, "Politik": 2,
        "Erdkunde": 2, "Sport": 3, "Kunst": 2, "Musik": 1, "Religion": 2,
    },  # Summe: 34h
    9: {
        "Deutsch": 4, "Mathematik": 4, "Englisch": 3, "Differenzierung": 3,
        "Biologie": 2, "Physik": 2, "Chemie": 2, "Geschichte": 2, "Politik": 2,
        "Erdkunde": 1, "Sport": 3, "Kunst": 1, "Musik": 1, "Religion": 2,
    },  # Summe: 32h
    10: {
        "Deutsch": 4, "Mathematik": 4, "Englisch": 4, "Differenzierung": 4,
        "Biologie": 2, "Physik": 2, "Chemie": 2, "Geschichte": 2, "Politik": 2,
        "Erdkunde": 2, "Sport": 3, "Kunst": 1, "Musik": 1, "Religion": 2,
    },  # Summe: 35h
}


# ─── FACH-METADATEN ───
# Pro Fach: Kürzel, Kategorie, parallele Gruppe (oder None).

SUBJECT_METADATA: dict[str, dict] = {
    "Deutsch":                {"short": "D",   "category": "hauptfach",    "group": None},
    "Mathematik":             {"short": "M",   "category": "hauptfach",    "group": None},
    "Englisch":               {"short": "E",   "category": "sprache",      "group": None},
    "Geschichte":             {"short": "GE",  "category": "gesellschaft", "group": None},
    "Politik":                {"short": "PK",  "category": "gesellschaft", "group": None},
    "Erdkunde":               {"short": "EK",  "category": "gesellschaft", "group": None},
    "Biologie":               {"short": "BI",  "category": "nw",           "group": None},
    "Physik":                 {"short": "PH",  "category": "nw",           "group": None},
    "Chemie":                 {"short": "CH",  "category": "nw",           "group": None},
    "Sport":                  {"short": "SP",  "category": "sport",        "group": None},
    "Kunst":                  {"short": "KU",  "category": "musisch",      "group": None},
    "Musik":                  {"short": "MU",  "category": "musisch",      "group": None},
    "Katholische Religion":   {"short": "KR",  "category": "religion",     "group": "Religion"},
    "Evangelische Religion":  {"short": "ER",  "category": "religion",     "group": "Religion"},
    "Praktische Philosophie": {"short": "PP",  "category": "religion",     "group": "Religion"},
    "Französisch":            {"short": "FS",  "category": "differenzierung", "group": "Differenzierung"},
    "Sozialwissenschaften":   {"short": "SW",  "category": "differenzierung", "group": "Differenzierung"},
    "Biologie-Kurs":          {"short": "NW",  "category": "differenzierung", "group": "Differenzierung"},
    "Informatik":             {"short": "IF",  "category": "differenzierung", "group": "Differenzierung"},
    "Technik":                {"short": "TC",  "category": "differenzierung", "group": "Differenzierung"},
    "Musik-Kurs":             {"short": "MUS", "category": "differenzierung", "group": "Differenzierung"},
}


# ─── BEGRÜNDUNGSTEXTE ───

MIGRATION_REASONS: dict[str, dict[str, str]] = {
    "auto": {
        "continuous_subject":  "Kontinuierliches Fach - direkte Migration möglich",
        "parallel_group_auto": "Parallele Fächergruppe - automatische Migration",
        "standard_promotion":  "Standard-Klassenstufenübergang",
    },
    "manual": {
        "subject_break":         "Fach pausiert/reduziert in Zieljahrgangsstufe - manuelle Überprüfung erforderlich",
        "parallel_group_review": "Parallele Fächergruppe - Schülerzuordnung überprüfen",
        "hour_adjustment":       "Stundenzahl ändert sich - manuelle Anpassung erforderlich",
        "non_consecutive":       "Nicht-aufeinanderfolgender Jahrgangsstufenwechsel",
    },
    "impossible": {
        "graduation":            "Klasse 10 graduiert - keine Migration erforderlich",
        "subject_not_available": "Fach nicht in Zieljahrgangsstufe verfügbar",
        "missing_target_class":  "Zielklasse nicht gefunden",
        "inactive_teacher":      "Lehrer nicht aktiv für nächstes Schuljahr",
    },
}

STUDENT_STATUS_DESCRIPTIONS: dict[str, str] = {
    "promote":  "Versetzung in die nächste Jahrgangsstufe",
    "graduate": "Abschluss mit Mittlerer Reife",
    "conflict": "Konflikt - manuelle Bearbeitung erforderlich",
}
