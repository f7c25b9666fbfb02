"""Lehrer-Auslastung nach dem Schuljahreswechsel: Stunden-Delta und Risiko."""

import logging
from collections import defaultdict
from typing import Iterable, Optional

from config.schema import AggregationOptions, RiskThresholds
from migration.subject_rules import is_subject_on_break
from models.assignment import Assignment
from models.migration import (
    AssignmentChanges,
    AssignmentDecision,
    Conflict,
    RiskLevel,
    TeacherWorkloadAnalysis,
)
from models.teacher import Teacher

logger = logging.getLogger(__name__)

_RISK_ORDER = {"high": 0, "medium": 1, "low": 2}
_BREAK_MARKERS = ("pausiert", "reduziert")


def identify_break_subjects(decisions: Iterable[AssignmentDecision]) -> list[str]:
    """Fächer, die im Zieljahrgang pausieren oder reduziert sind.

    Maßgeblich ist die Fach-Jahrgangs-Matrix. Entscheidungen aus anderen
    Quellen ohne Tabelleneintrag werden zusätzlich am Begründungstext erkannt.
    """
    found: set[str] = set()
    for d in decisions:
        if d.new_grade is not None and is_subject_on_break(d.subject, d.new_grade):
            found.add(d.subject)
        elif d.decision == "manual" and any(m in d.reason.lower() for m in _BREAK_MARKERS):
            found.add(d.subject)
    return sorted(found)


def identify_parallel_subjects(decisions: Iterable[AssignmentDecision]) -> list[str]:
    return sorted({d.subject for d in decisions if d.parallel_group})


def assess_teacher_risk_level(
    hours_delta: float,
    changes: AssignmentChanges,
    conflicts: list[Conflict],
    thresholds: Optional[RiskThresholds] = None,
) -> RiskLevel:
    """high: großes Delta, viele Fehler oder unmögliche Zuordnungen.
    medium: mittleres Delta, manuelle Zuordnungen oder Konflikte.
    """
    t = thresholds or RiskThresholds()
    errors = sum(1 for c in conflicts if c.severity == "error")
    delta = abs(hours_delta)

    if delta >= t.high_delta or errors >= t.high_conflict or changes.impossible > 0:
        return "high"
    if delta >= t.low_delta or changes.manual > 0 or conflicts:
        return "medium"
    return "low"


def calculate_teacher_workload_analysis(
    decisions: list[AssignmentDecision],
    current_assignments: list[Assignment],
    teachers: list[Teacher],
    conflicts: list[Conflict],
    options: Optional[AggregationOptions] = None,
    thresholds: Optional[RiskThresholds] = None,
) -> list[TeacherWorkloadAnalysis]:
    """Analyse pro Lehrkraft, die Entscheidungen hat und im Kollegium geführt wird.

    Sortierung: Risiko absteigend, dann |Delta| absteigend.
    """
    opts = options or AggregationOptions()
    teachers_by_id = {t.id: t for t in teachers}

    decisions_by_teacher: dict[str, list[AssignmentDecision]] = defaultdict(list)
    for d in decisions:
        decisions_by_teacher[d.teacher_id].append(d)

    current_hours: dict[str, float] = defaultdict(float)
    for a in current_assignments:
        current_hours[a.teacher_id] += a.hours_per_week

    conflicts_by_teacher: dict[str, list[Conflict]] = defaultdict(list)
    for c in conflicts:
        if c.related_type == "teacher" and c.related_id:
            conflicts_by_teacher[c.related_id].append(c)

    result: list[TeacherWorkloadAnalysis] = []
    for teacher_id, own in decisions_by_teacher.items():
        teacher = teachers_by_id.get(teacher_id)
        if teacher is None:
            continue

        counts = {"auto": 0, "manual": 0, "impossible": 0}
        projected = 0.0
        for d in own:
            counts[d.decision] += 1
            if d.decision == "auto":
                projected += d.hours_per_week
        changes = AssignmentChanges(**counts, total=len(own))

        current = current_hours[teacher_id]
        if not opts.calculate_hour_deltas:
            projected = current
        delta = projected - current

        teacher_conflicts = conflicts_by_teacher[teacher_id]
        result.append(TeacherWorkloadAnalysis(
            teacher_id=teacher_id,
            teacher_name=teacher.full_name,
            current_hours=current,
            projected_hours=projected,
            hours_delta=delta,
            assignment_changes=changes,
            subjects_on_break=tuple(identify_break_subjects(own)) if opts.detect_break_subjects else (),
            parallel_subjects=tuple(identify_parallel_subjects(own)),
            conflicts=tuple(teacher_conflicts),
            risk_level=assess_teacher_risk_level(delta, changes, teacher_conflicts, thresholds),
        ))

    result.sort(key=lambda w: (_RISK_ORDER[w.risk_level], -abs(w.hours_delta), w.teacher_name))
    high = sum(1 for w in result if w.risk_level == "high")
    logger.info(f"Lehrer-Auslastung: {len(result)} Lehrkräfte analysiert, {high} mit hohem Risiko")
    return result
