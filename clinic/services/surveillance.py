"""Record-store queries feeding the analytics engine.

Each call re-queries and re-aggregates from scratch; nothing is cached.
Database errors propagate to the caller untouched.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

import structlog
from django.conf import settings
from django.db.models import Count
from django.utils import timezone

from clinic.models import HealthLog, StudentProfile
from clinic.services.analytics import (
    HostelAggregate,
    OutbreakAlert,
    SymptomAggregate,
    aggregate_by_hostel,
    aggregate_by_symptom,
    compute_outbreak_alerts,
    rank_symptoms,
    window_cutoff,
)

logger = structlog.get_logger(__name__)


def recent_logs(days: int, *, now: Optional[datetime] = None) -> list[dict]:
    now = now or timezone.now()
    qs = HealthLog.objects.filter(created_at__gte=window_cutoff(now, days))
    return list(qs.values('hostel', 'symptoms', 'created_at'))


def roster_counts() -> dict[str, int]:
    """Registered students per hostel over the whole roster (not windowed)."""
    rows = StudentProfile.objects.values('hostel').annotate(total=Count('id'))
    return {row['hostel']: row['total'] for row in rows}


def hostel_analytics(*, now: Optional[datetime] = None) -> dict[str, HostelAggregate]:
    days = settings.ANALYTICS_WINDOW_DAYS
    logs = recent_logs(days, now=now)
    result = aggregate_by_hostel(logs)
    logger.info('hostel_analytics_computed', window_days=days, logs=len(logs), hostels=len(result))
    return result


def disease_analytics(*, now: Optional[datetime] = None) -> dict[str, SymptomAggregate]:
    days = settings.ANALYTICS_WINDOW_DAYS
    logs = recent_logs(days, now=now)
    result = aggregate_by_symptom(logs)
    logger.info('disease_analytics_computed', window_days=days, logs=len(logs), symptoms=len(result))
    return result


def outbreak_alerts(*, now: Optional[datetime] = None, threshold: Optional[float] = None) -> list[OutbreakAlert]:
    if threshold is None:
        threshold = settings.OUTBREAK_THRESHOLD
    days = settings.ALERT_WINDOW_DAYS
    roster = roster_counts()
    logs = recent_logs(days, now=now)
    alerts = compute_outbreak_alerts(roster, logs, threshold=threshold, window_days=days)
    if alerts:
        logger.warning('outbreak_alerts_raised', hostels=[a.hostel for a in alerts], threshold=threshold)
    return alerts


def dashboard_summary(*, now: Optional[datetime] = None) -> dict:
    """Overview numbers for the admin landing page."""
    now = now or timezone.now()
    days = settings.ANALYTICS_WINDOW_DAYS
    logs = recent_logs(days, now=now)
    hostels = aggregate_by_hostel(logs)
    top = rank_symptoms(aggregate_by_symptom(logs), limit=settings.TOP_SYMPTOMS_LIMIT)
    return {
        'window_days': days,
        'total_logs': len(logs),
        'hostels': len(hostels),
        'alerts': len(outbreak_alerts(now=now)),
        'top_symptoms': [{'symptom': s.symptom, 'count': s.count} for s in top],
    }
