"""Erkennung und Fortschreibung deutscher Klassennamen.

Unterstützte Schreibweisen (in dieser Reihenfolge geprüft):

  standard     "5a", "05B"
  with_space   "5 a", "05  b"
  with_prefix  "Klasse 5a", "klasse  7c"
  roman        "V-A", "VIb"
  grade_only   "5", "10"

Die erste passende Schreibweise gewinnt. Jahrgänge außerhalb 5–10 ergeben
is_valid=False, niemals eine Ausnahme.
"""

import re
from dataclasses import dataclass
from typing import Literal, Optional

from config.defaults import FINAL_GRADE, FIRST_GRADE

NamePattern = Literal["standard", "with_space", "with_prefix", "roman", "grade_only", "unknown"]

_STANDARD = re.compile(r"^(\d{1,2})([a-zA-Z])$")
_WITH_SPACE = re.compile(r"^(\d{1,2})(\s+)([a-zA-Z])$")
_WITH_PREFIX = re.compile(r"^(Klasse\s+)?(\d{1,2})([a-zA-Z])$", re.IGNORECASE)
_ROMAN = re.compile(r"^([IVX]+)(-?)([a-zA-Z])$", re.IGNORECASE)
_GRADE_ONLY = re.compile(r"^(\d{1,2})$")

ROMAN_TO_ARABIC: dict[str, int] = {
    "V": 5, "VI": 6, "VII": 7, "VIII": 8, "IX": 9, "X": 10,
}
ARABIC_TO_ROMAN: dict[int, str] = {v: k for k, v in ROMAN_TO_ARABIC.items()}


@dataclass(frozen=True)
class ParsedClassName:
    """Zerlegter Klassenname.

    grade ist None, wenn kein Muster passt oder der Jahrgang außerhalb 5–10
    liegt. prefix/separator/grade_text halten die Originalschreibweise fest,
    damit der Folgename dieselbe Form erhält.
    """

    grade: Optional[int]
    suffix: str
    pattern: NamePattern
    is_valid: bool
    prefix: str = ""
    separator: str = ""
    grade_text: str = ""

    @property
    def zero_padded(self) -> bool:
        return len(self.grade_text) == 2 and self.grade_text.startswith("0")


def is_valid_grade(grade: Optional[int]) -> bool:
    return grade is not None and FIRST_GRADE <= grade <= FINAL_GRADE


def get_promotion_action(grade: Optional[int]) -> Literal["promote", "graduate", "invalid"]:
    """Versetzung, Abschluss oder ungültig – abhängig vom Jahrgang."""
    if not is_valid_grade(grade):
        return "invalid"
    if grade == FINAL_GRADE:
        return "graduate"
    return "promote"


def _parsed(grade: Optional[int], suffix: str, pattern: NamePattern, **extra) -> ParsedClassName:
    valid = is_valid_grade(grade)
    return ParsedClassName(
        grade=grade if valid else None,
        suffix=suffix,
        pattern=pattern,
        is_valid=valid,
        **extra,
    )


def parse_class_name(name: str) -> ParsedClassName:
    """Zerlegt einen Klassennamen in Jahrgang und Zug."""
    trimmed = name.strip()

    m = _STANDARD.match(trimmed)
    if m:
        return _parsed(int(m.group(1)), m.group(2), "standard", grade_text=m.group(1))

    m = _WITH_SPACE.match(trimmed)
    if m:
        return _parsed(int(m.group(1)), m.group(3), "with_space",
                       separator=m.group(2), grade_text=m.group(1))

    m = _WITH_PREFIX.match(trimmed)
    if m:
        return _parsed(int(m.group(2)), m.group(3), "with_prefix",
                       prefix=m.group(1) or "", grade_text=m.group(2))

    m = _ROMAN.match(trimmed)
    if m:
        grade = ROMAN_TO_ARABIC.get(m.group(1).upper())
        return _parsed(grade, m.group(3), "roman",
                       separator=m.group(2), grade_text=m.group(1))

    m = _GRADE_ONLY.match(trimmed)
    if m:
        return _parsed(int(m.group(1)), "", "grade_only", grade_text=m.group(1))

    return ParsedClassName(grade=None, suffix="", pattern="unknown", is_valid=False)


def _format_grade(parsed: ParsedClassName, grade: int) -> str:
    if parsed.pattern == "roman":
        roman = ARABIC_TO_ROMAN[grade]
        return roman.lower() if parsed.grade_text.islower() else roman
    if parsed.zero_padded:
        return f"{grade:02d}"
    return str(grade)


def _compose(parsed: ParsedClassName, grade: int, suffix: str) -> str:
    """Setzt einen Namen in der Schreibweise von parsed zusammen."""
    grade_str = _format_grade(parsed, grade)
    if parsed.pattern == "with_space":
        return f"{grade_str}{parsed.separator}{suffix}"
    if parsed.pattern == "with_prefix":
        return f"{parsed.prefix}{grade_str}{suffix}"
    if parsed.pattern == "roman":
        return f"{grade_str}{parsed.separator}{suffix}"
    if parsed.pattern == "grade_only":
        return grade_str
    return f"{grade_str}{suffix}"


def generate_promoted_class_name(old_name: str, old_grade: int, new_grade: int) -> str:
    """Leitet den Klassennamen für den neuen Jahrgang ab.

    Nicht erkennbare Namen (oder Zieljahrgänge außerhalb 5–10) ergeben den
    Ersatznamen "<new_grade>a"; der Aufrufer muss diese Klasse zur manuellen
    Prüfung markieren.
    """
    parsed = parse_class_name(old_name)
    if not parsed.is_valid or not is_valid_grade(new_grade):
        return f"{new_grade}a"
    return _compose(parsed, new_grade, parsed.suffix)


def normalize_class_name(name: str) -> str:
    """Vergleichsschlüssel für Klassennamen: "06a", "6 A", "VI-a" → "6a"."""
    parsed = parse_class_name(name)
    if parsed.is_valid:
        return f"{parsed.grade}{parsed.suffix.lower()}"
    return "".join(name.split()).casefold()


def generate_alternative_names(
    name: str, taken_names: list[str], max_suggestions: int = 3
) -> list[str]:
    """Schlägt freie Ausweichnamen vor: erst "6a-1", "6a-2", dann Folgebuchstaben."""
    taken = {normalize_class_name(n) for n in taken_names}
    suggestions: list[str] = []

    for i in range(1, max_suggestions + 1):
        candidate = f"{name}-{i}"
        if normalize_class_name(candidate) not in taken:
            suggestions.append(candidate)
        if len(suggestions) >= max_suggestions:
            return suggestions

    parsed = parse_class_name(name)
    if parsed.is_valid and parsed.suffix:
        for offset in range(1, 4):
            code = ord(parsed.suffix.lower()) + offset
            if code > ord("z"):
                break
            letter = chr(code).upper() if parsed.suffix.isupper() else chr(code)
            candidate = _compose(parsed, parsed.grade, letter)
            if normalize_class_name(candidate) not in taken:
                suggestions.append(candidate)
            if len(suggestions) >= max_suggestions:
                break

    return suggestions
