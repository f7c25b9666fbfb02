"""Demo-Datensatz für den Schuljahreswechsel einer Realschule (Jg. 5–10).

Erzeugt einen reproduzierbaren MigrationSnapshot mit absichtlichen Problemen,
damit jede Konfliktart in der Vorschau sichtbar wird.

Absichtliche Probleme:
  1. Klasse "Förderklasse" (Jg. 7): Name nicht erkennbar → Ersatzname "8a",
     der mit 7a → 8a kollidiert
  2. Zieljahr enthält bereits "7c" → Kollision mit 6c → 7c
  3. Klasse 9d ohne Schüler
  4. Klasse 6b mit 31 Schülern (Limit 30)
  5. Eine inaktive Lehrkraft mit Zuordnungen
  6. Eine fachfremde Zuordnung (Sport-Lehrkraft unterrichtet Chemie)
  7. Schüler mit unvollständigem Namen, ein Schüler mit abweichendem
     Jahrgang, ein Schüler in einer nicht existierenden Klasse
"""

import random
import string
from datetime import date
from typing import Optional

from config.defaults import PARALLEL_GROUPS, STUNDENTAFEL_REALSCHULE_NRW, SUBJECT_METADATA
from models.assignment import Assignment
from models.school_class import SchoolClass
from models.school_year import SchoolYear
from models.snapshot import MigrationSnapshot
from models.student import Student
from models.subject import Subject
from models.teacher import ReductionHours, Teacher

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_FIRST_NAMES = [
    "Anna", "Ben", "Clara", "David", "Elif", "Finn", "Greta", "Hannah",
    "Ida", "Jonas", "Kerem", "Lena", "Mia", "Noah", "Ole", "Paula",
    "Quentin", "Romy", "Samuel", "Tara", "Umut", "Valentina", "Wilma",
    "Yusuf", "Zoe", "Leon", "Emma", "Luis", "Sofia", "Mats",
]

_TEACHER_FIRST_NAMES = [
    "Andreas", "Birgit", "Christian", "Dieter", "Eva", "Gabi", "Hans",
    "Iris", "Jürgen", "Kathrin", "Markus", "Monika", "Peter", "Sabine",
    "Stefan", "Ulrike", "Thomas", "Vera", "Wolfgang", "Claudia",
]

_LAST_NAMES = [
    "Müller", "Schmidt", "Schneider", "Fischer", "Weber", "Meyer",
    "Wagner", "Becker", "Schulz", "Hoffmann", "Schäfer", "Koch",
    "Bauer", "Richter", "Klein", "Wolf", "Schröder", "Neumann",
    "Schwarz", "Zimmermann", "Braun", "Krüger", "Hartmann", "Lange",
    "Schmitz", "Krause", "Lehmann", "Kaiser", "Fuchs", "Vogel",
]

# ─── Fächerkombinationen der Lehrkräfte (Kürzel) ─────────────────────────────
# Jede Kombination kommt zweimal vor, damit jedes Fach mindestens zwei
# Lehrkräfte hat.

_SUBJECT_COMBOS: list[list[str]] = [
    ["D", "GE"], ["M", "PH"], ["E", "EK"], ["BI", "CH"], ["SP", "KU"],
    ["MU", "PK"], ["KR", "D"], ["ER", "E"], ["FS", "E"], ["IF", "M"],
    ["TC", "PH"], ["PP", "PK"], ["SW", "GE"], ["NW", "BI"], ["MUS", "MU"],
]

# Klassen pro Jahrgang: (Klassenname, Anzahl Schüler oder None für Zufall)
_CLASS_LAYOUT: dict[int, list[tuple[str, Optional[int]]]] = {
    5:  [("5a", None), ("5b", None), ("5 c", None)],
    6:  [("6a", None), ("6b", 31), ("6c", None)],
    7:  [("7a", None), ("7b", None), ("Förderklasse", 12)],
    8:  [("VIII-A", None), ("VIII-B", None)],
    9:  [("9a", None), ("9b", None), ("9d", 0)],
    10: [("Klasse 10a", None), ("Klasse 10b", None)],
}

# Religion und Differenzierung: welche Fächer der Gruppe angeboten werden
_OFFERED_PARALLEL: dict[str, list[str]] = {
    "Religion": ["KR", "ER", "PP"],
    "Differenzierung": ["FS", "IF", "TC", "SW"],
}


def _make_abbreviation(last_name: str, used: set[str]) -> str:
    """Generiert ein eindeutiges 3-Zeichen-Kürzel aus dem Nachnamen."""
    base = (
        last_name.upper()
        .replace("Ä", "AE").replace("Ö", "OE").replace("Ü", "UE")
        .replace("ß", "SS")
    )
    for c in (base[:3], base[:2] + base[-1], base[0] + base[2:4]):
        c = c[:3].ljust(3, "X")
        if c not in used:
            used.add(c)
            return c
    n = 1
    while f"{base[:2]}{n}" in used:
        n += 1
    used.add(f"{base[:2]}{n}")
    return f"{base[:2]}{n}"


class DemoSnapshotGenerator:
    """Erzeugt einen vollständigen MigrationSnapshot. Gleicher Seed, gleiche Daten."""

    def __init__(self, seed: Optional[int] = 42) -> None:
        self.rng = random.Random(seed)

    # ─── Stammdaten ───────────────────────────────────────────────────────────

    def _generate_subjects(self) -> list[Subject]:
        return [
            Subject(
                id=meta["short"],
                name=name,
                short_name=meta["short"],
                category=meta["category"],
                parallel_group=meta["group"],
            )
            for name, meta in SUBJECT_METADATA.items()
        ]

    def _generate_teachers(self) -> list[Teacher]:
        used: set[str] = set()
        teachers: list[Teacher] = []
        combos = _SUBJECT_COMBOS + _SUBJECT_COMBOS
        last_names = self.rng.sample(_LAST_NAMES, len(combos))
        for i, (subjects, last) in enumerate(zip(combos, last_names), 1):
            reduction = ReductionHours()
            if self.rng.random() < 0.25:
                reduction = ReductionHours(aE=1.0)
            elif self.rng.random() < 0.15:
                reduction = ReductionHours(FB=2.0)
            part_time = self.rng.random() < 0.2
            teachers.append(Teacher(
                id=f"T{i:02d}",
                first_name=self.rng.choice(_TEACHER_FIRST_NAMES),
                last_name=last,
                short_name=_make_abbreviation(last, used),
                subjects=list(subjects),
                max_hours=14.0 if part_time else 25.5,
                reduction_hours=reduction,
            ))
        return teachers

    def _generate_classes(self) -> list[SchoolClass]:
        classes: list[SchoolClass] = []
        for grade, layout in _CLASS_LAYOUT.items():
            table = STUNDENTAFEL_REALSCHULE_NRW[grade]
            for name, count in layout:
                suffix = "".join(ch for ch in name.lower() if ch in string.ascii_lowercase)[-1:]
                classes.append(SchoolClass(
                    id=f"K{grade:02d}{suffix or 'x'}",
                    name=name,
                    grade=grade,
                    student_count=count if count is not None else self.rng.randint(22, 29),
                    subject_hours={s: float(h) for s, h in table.items()},
                ))
        return classes

    # ─── Zuordnungen ──────────────────────────────────────────────────────────

    def _lesson_plan(self, grade: int) -> list[tuple[str, float]]:
        """(Fach-Kürzel, Wochenstunden) für eine Klasse des Jahrgangs."""
        lessons: list[tuple[str, float]] = []
        for name, hours in STUNDENTAFEL_REALSCHULE_NRW[grade].items():
            if name in _OFFERED_PARALLEL:
                group_hours = PARALLEL_GROUPS[name].hours_for_grade(grade)
                for code in _OFFERED_PARALLEL[name]:
                    lessons.append((code, float(group_hours)))
            else:
                lessons.append((SUBJECT_METADATA[name]["short"], float(hours)))
        return lessons

    def _generate_assignments(
        self, classes: list[SchoolClass], teachers: list[Teacher]
    ) -> list[Assignment]:
        load: dict[str, float] = {t.id: 0.0 for t in teachers}
        assignments: list[Assignment] = []

        for cls in classes:
            homeroom: list[str] = []
            for code, hours in self._lesson_plan(cls.grade):
                qualified = [t for t in teachers if code in t.subjects]
                qualified.sort(key=lambda t: (load[t.id] / t.available_hours, self.rng.random()))
                teacher = qualified[0]
                load[teacher.id] += hours
                assignments.append(Assignment(
                    id=f"A{len(assignments) + 1:04d}",
                    teacher_id=teacher.id,
                    class_id=cls.id,
                    subject_id=code,
                    hours_per_week=hours,
                ))
                if code in ("D", "M") and teacher.id not in homeroom:
                    homeroom.append(teacher.id)
            cls.class_teacher_1_id = homeroom[0] if homeroom else None
            cls.class_teacher_2_id = homeroom[1] if len(homeroom) > 1 else None

        # Fachfremder Einsatz: eine Chemie-Stunde geht an eine Sport-Lehrkraft
        sport_teacher = next(t for t in teachers if "SP" in t.subjects)
        chem = next(a for a in assignments if a.subject_id == "CH")
        chem.teacher_id = sport_teacher.id
        return assignments

    # ─── Schüler ──────────────────────────────────────────────────────────────

    def _generate_students(self, classes: list[SchoolClass]) -> list[Student]:
        students: list[Student] = []
        for cls in classes:
            for _ in range(cls.student_count):
                students.append(Student(
                    id=f"S{len(students) + 1:04d}",
                    first_name=self.rng.choice(_FIRST_NAMES),
                    last_name=self.rng.choice(_LAST_NAMES),
                    class_id=cls.id,
                    grade=cls.grade,
                ))

        # Unvollständige Namen
        for s in self.rng.sample(students, 2):
            s.last_name = ""
        # Abweichender Jahrgang in einer 8. Klasse
        eighth = next(s for s in students if s.grade == 8)
        eighth.grade = 9
        # Klasse existiert nicht (mehr)
        students.append(Student(
            id=f"S{len(students) + 1:04d}",
            first_name="Nils",
            last_name="Ohneklasse",
            class_id="K07z",
            grade=7,
        ))
        return students

    # ─── Gesamt ───────────────────────────────────────────────────────────────

    def generate(self) -> MigrationSnapshot:
        subjects = self._generate_subjects()
        teachers = self._generate_teachers()
        classes = self._generate_classes()
        assignments = self._generate_assignments(classes, teachers)
        students = self._generate_students(classes)

        # Lehrkraft mit Zuordnungen verlässt die Schule
        inactive_id = assignments[len(assignments) // 2].teacher_id
        teachers = [
            t.model_copy(update={"is_active": False}) if t.id == inactive_id else t
            for t in teachers
        ]

        return MigrationSnapshot(
            from_year=SchoolYear(
                id="SJ2025", name="2025/26",
                start_date=date(2025, 8, 1), end_date=date(2026, 7, 31),
                is_current=True,
            ),
            to_year=SchoolYear(
                id="SJ2026", name="2026/27",
                start_date=date(2026, 8, 1), end_date=date(2027, 7, 31),
            ),
            classes=classes,
            students=students,
            teachers=teachers,
            subjects=subjects,
            assignments=assignments,
            existing_target_class_names=["7c"],
        )
