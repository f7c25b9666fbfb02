"""Gemeinsame Hilfsfunktionen für Excel- und PDF-Export."""

from datetime import date

# ─── Farbpalette (RRGGBB, ohne #) ─────────────────────────────────────────────

COLORS: dict[str, str] = {
    "header":     "4472C4",
    "auto":       "C6EFCE",
    "manual":     "FFEB9C",
    "impossible": "FFC7CE",
    "promote":    "C6EFCE",
    "graduate":   "BDD7EE",
    "conflict":   "FFC7CE",
    "error":      "FFC7CE",
    "warning":    "FFEB9C",
    "success":    "C6EFCE",
    "high":       "FFC7CE",
    "medium":     "FFEB9C",
    "low":        "C6EFCE",
    "review":     "FFF2CC",
}

VERDICT_LABELS: dict[str, str] = {
    "auto": "automatisch",
    "manual": "manuell",
    "impossible": "unmöglich",
}

RISK_LABELS: dict[str, str] = {
    "high": "hoch",
    "medium": "mittel",
    "low": "niedrig",
}


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """Wandelt RRGGBB-String in (r, g, b)-Tupel um."""
    h = hex_color.lstrip("#")
    return int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16)


def today_str() -> str:
    """Gibt das heutige Datum als DD.MM.YYYY zurück."""
    return date.today().strftime("%d.%m.%Y")


def format_hours(value: float) -> str:
    """4.0 → "4", 2.5 → "2,5"."""
    return f"{value:g}".replace(".", ",")


def format_delta(value: float) -> str:
    sign = "+" if value > 0 else ""
    return f"{sign}{format_hours(value)}"
