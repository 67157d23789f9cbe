"""
Health-surveillance analytics.

Pure functions that turn already-fetched health log rows into per-hostel
and per-symptom aggregates and outbreak alerts.  Nothing in this module
talks to the database or reads the clock: callers window the rows with
:func:`window_cutoff` and an explicit ``now`` before passing them in.
Rows may be mappings (``QuerySet.values()``) or model instances; only
``hostel`` and ``symptoms`` are read.

Hostel names and symptom strings are used verbatim as keys.  They are
compared case-sensitively and never normalised.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Iterable, Mapping, Optional

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_OUTBREAK_THRESHOLD = 20.0
ALERT_SEVERITY = 'high'


@dataclass
class HostelAggregate:
    hostel: str
    total_cases: int = 0
    symptom_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'hostel': self.hostel,
            'total_cases': self.total_cases,
            'symptom_counts': dict(self.symptom_counts),
        }


@dataclass
class SymptomAggregate:
    symptom: str
    count: int = 0
    hostel_counts: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'symptom': self.symptom,
            'count': self.count,
            'hostel_counts': dict(self.hostel_counts),
        }


@dataclass(frozen=True)
class OutbreakAlert:
    hostel: str
    cases: int
    total_students: int
    percentage: float
    message: str
    severity: str = ALERT_SEVERITY

    def to_dict(self) -> dict:
        return {
            'hostel': self.hostel,
            'cases': self.cases,
            'total_students': self.total_students,
            'percentage': self.percentage,
            'severity': self.severity,
            'message': self.message,
        }


def _get(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _distinct_symptoms(row: Any) -> list[str]:
    # A log counts once per distinct symptom even if the stored list repeats one
    return list(dict.fromkeys(_get(row, 'symptoms') or []))


def window_cutoff(now: datetime, days: int) -> datetime:
    """Return the inclusive lower bound of a ``days`` long window ending at ``now``."""
    return now - timedelta(days=days)


def _hostel_entry(aggregates: dict[str, HostelAggregate], hostel: str) -> HostelAggregate:
    entry = aggregates.get(hostel)
    if entry is None:
        entry = aggregates[hostel] = HostelAggregate(hostel=hostel)
    return entry


def _symptom_entry(aggregates: dict[str, SymptomAggregate], symptom: str) -> SymptomAggregate:
    entry = aggregates.get(symptom)
    if entry is None:
        entry = aggregates[symptom] = SymptomAggregate(symptom=symptom)
    return entry


def aggregate_by_hostel(logs: Iterable[Any]) -> dict[str, HostelAggregate]:
    """Group logs by hostel, counting cases and symptom mentions.

    Every log adds one to its hostel's ``total_cases``; every distinct
    symptom it lists adds one to that hostel's ``symptom_counts`` entry.  A
    log without symptoms only counts as a case.
    """
    aggregates: dict[str, HostelAggregate] = {}
    for log in logs:
        entry = _hostel_entry(aggregates, _get(log, 'hostel'))
        entry.total_cases += 1
        for symptom in _distinct_symptoms(log):
            entry.symptom_counts[symptom] = entry.symptom_counts.get(symptom, 0) + 1
    return aggregates


def aggregate_by_symptom(logs: Iterable[Any]) -> dict[str, SymptomAggregate]:
    """Group logs by symptom, with a per-hostel breakdown for each symptom.

    A log contributes once per distinct symptom it lists, and once to the
    (symptom, hostel) sub-count for each of them.  Logs without symptoms do
    not appear at all.
    """
    aggregates: dict[str, SymptomAggregate] = {}
    for log in logs:
        hostel = _get(log, 'hostel')
        for symptom in _distinct_symptoms(log):
            entry = _symptom_entry(aggregates, symptom)
            entry.count += 1
            entry.hostel_counts[hostel] = entry.hostel_counts.get(hostel, 0) + 1
    return aggregates


def rank_symptoms(aggregates: Mapping[str, SymptomAggregate], limit: Optional[int] = None) -> list[SymptomAggregate]:
    """Order symptoms by count descending, then by name, optionally truncated."""
    ranked = sorted(aggregates.values(), key=lambda agg: (-agg.count, agg.symptom))
    return ranked if limit is None else ranked[:limit]


def count_cases_by_hostel(logs: Iterable[Any]) -> dict[str, int]:
    """One case per log row; a student logging twice counts twice."""
    cases: dict[str, int] = {}
    for log in logs:
        hostel = _get(log, 'hostel')
        cases[hostel] = cases.get(hostel, 0) + 1
    return cases


def outbreak_message(hostel: str, percentage: float, window_days: int = 7) -> str:
    return (
        f"Outbreak alert: {percentage:.1f}% of {hostel} students "
        f"reported health issues in the last {window_days} days"
    )


def compute_outbreak_alerts(
    students_by_hostel: Mapping[str, int],
    recent_logs: Iterable[Any],
    threshold: float = DEFAULT_OUTBREAK_THRESHOLD,
    window_days: int = 7,
) -> list[OutbreakAlert]:
    """Flag hostels where the share of reporting students exceeds ``threshold``.

    ``students_by_hostel`` is the full roster count per hostel and
    ``recent_logs`` the logs of the alert window.  For each hostel that has
    cases, ``percentage = 100 * cases / roster`` and an alert is produced
    when it is strictly greater than ``threshold``; sitting exactly on the
    threshold does not alert.  Hostels that appear in the logs but have no
    students on the roster cannot produce a meaningful percentage and are
    skipped with a warning.  Alerts are returned sorted by hostel name.
    """
    alerts: list[OutbreakAlert] = []
    cases_by_hostel = count_cases_by_hostel(recent_logs)
    for hostel in sorted(cases_by_hostel):
        cases = cases_by_hostel[hostel]
        total = students_by_hostel.get(hostel, 0)
        if total <= 0:
            logger.warning('outbreak_hostel_not_on_roster', hostel=hostel, cases=cases)
            continue
        percentage = 100.0 * cases / total
        if percentage > threshold:
            alerts.append(OutbreakAlert(
                hostel=hostel,
                cases=cases,
                total_students=total,
                percentage=round(percentage, 2),
                message=outbreak_message(hostel, percentage, window_days),
            ))
    return alerts
