"""Read-only views computed from the record collection.

Nothing here is cached: every function walks the records it is given and
returns fresh values, so callers can pass a snapshot per render.
"""
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Tuple

import pytz

from .models import STATUSES, ActivityEntry, ApplicationRecord

STATUS_LABELS = [
    ("applied", "Applied"),
    ("interview", "Interview"),
    ("offer", "Offer"),
    ("accepted", "Accepted"),
    ("rejected", "Rejected"),
    ("withdrawn", "Withdrawn"),
]

JOB_TYPE_LABELS = [
    ("full-time", "Full-Time"),
    ("part-time", "Part-Time"),
    ("contract", "Contract"),
    ("internship", "Internship"),
    ("working-student", "Working Student"),
]

PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}
SORT_KEYS = ("date-desc", "date-asc", "company", "priority")
MONTH_WINDOW = 6
TIMELINE_ACTIVITY_LIMIT = 3

def current_date(tz_name: str = "UTC") -> date:
    return datetime.now(pytz.timezone(tz_name)).date()

def percentage(part: int, total: int) -> float:
    if total == 0:
        return 0.0
    return part / total * 100

def format_rate(value: float, total: int) -> str:
    """'0' for an empty collection, otherwise one decimal place."""
    if total == 0:
        return "0"
    return f"{value:.1f}"

@dataclass
class DashboardStats:
    total: int
    by_status: Dict[str, int]
    applied: int
    interviews: int
    active: int
    offers: int
    rejected: int
    response_rate: float
    success_rate: float
    upcoming_interviews: int

    @property
    def response_rate_label(self) -> str:
        return format_rate(self.response_rate, self.total)

    @property
    def success_rate_label(self) -> str:
        return format_rate(self.success_rate, self.total)

def dashboard(records: Sequence[ApplicationRecord], today: Optional[date] = None) -> DashboardStats:
    today = today or current_date()
    counts = Counter(r.status for r in records)
    by_status = {s: counts.get(s, 0) for s in STATUSES}
    total = len(records)
    interviews = by_status["interview"]
    offers = by_status["offer"] + by_status["accepted"]
    upcoming = sum(1 for r in records if r.interview_date is not None and r.interview_date >= today)
    return DashboardStats(
        total=total,
        by_status=by_status,
        applied=by_status["applied"],
        interviews=interviews,
        active=by_status["applied"] + interviews,
        offers=offers,
        rejected=by_status["rejected"],
        response_rate=percentage(interviews + offers, total),
        success_rate=percentage(offers, total),
        upcoming_interviews=upcoming,
    )

@dataclass
class AnalyticsReport:
    total: int
    status_data: List[Tuple[str, int]]
    job_type_data: List[Tuple[str, int]]
    monthly_data: List[Tuple[str, int]]
    interview_rate: float
    offer_rate: float
    in_progress: int
    average_days_since_applied: int

    @property
    def interview_rate_label(self) -> str:
        return format_rate(self.interview_rate, self.total)

    @property
    def offer_rate_label(self) -> str:
        return format_rate(self.offer_rate, self.total)

def monthly_counts(records: Sequence[ApplicationRecord], window: int = MONTH_WINDOW) -> List[Tuple[str, int]]:
    buckets = Counter((r.application_date.year, r.application_date.month) for r in records)
    ordered = sorted(buckets.items())[-window:] if window else []
    return [(date(year, month, 1).strftime("%b %Y"), count) for (year, month), count in ordered]

def analytics(records: Sequence[ApplicationRecord], today: Optional[date] = None) -> AnalyticsReport:
    today = today or current_date()
    total = len(records)
    statuses = Counter(r.status for r in records)
    job_types = Counter(r.job_type for r in records)
    interviews = statuses["interview"]
    offers = statuses["offer"] + statuses["accepted"]
    if total:
        elapsed = sum((today - r.application_date).days for r in records)
        average_days = elapsed // total
    else:
        average_days = 0
    return AnalyticsReport(
        total=total,
        status_data=[(label, statuses[key]) for key, label in STATUS_LABELS if statuses[key]],
        job_type_data=[(label, job_types[key]) for key, label in JOB_TYPE_LABELS if job_types[key]],
        monthly_data=monthly_counts(records),
        interview_rate=percentage(interviews, total),
        offer_rate=percentage(offers, total),
        in_progress=statuses["applied"] + interviews,
        average_days_since_applied=average_days,
    )

@dataclass
class TimelineEntry:
    record: ApplicationRecord
    recent_activities: List[ActivityEntry]

@dataclass
class TimelineGroup:
    label: str                  # e.g. "March 2024"
    entries: List[TimelineEntry] = field(default_factory=list)

def recent_activities(record: ApplicationRecord, limit: int = TIMELINE_ACTIVITY_LIMIT) -> List[ActivityEntry]:
    if limit <= 0:
        return []
    return list(reversed(record.activities[-limit:]))

def timeline(records: Sequence[ApplicationRecord]) -> List[TimelineGroup]:
    ordered = sorted(records, key=lambda r: r.application_date, reverse=True)
    groups: Dict[str, TimelineGroup] = {}
    for record in ordered:
        label = record.application_date.strftime("%B %Y")
        group = groups.setdefault(label, TimelineGroup(label=label))
        group.entries.append(TimelineEntry(record=record, recent_activities=recent_activities(record)))
    return list(groups.values())

def filter_records(
    records: Sequence[ApplicationRecord],
    search: str = "",
    status: Optional[str] = None,
    sort: str = "date-desc",
) -> List[ApplicationRecord]:
    if sort not in SORT_KEYS:
        raise ValueError(f"Unknown sort {sort!r}; expected one of: {', '.join(SORT_KEYS)}")
    term = (search or "").lower()
    matched = [
        r for r in records
        if (not term
            or term in r.company.lower()
            or term in r.position.lower()
            or term in r.location.lower())
        and (status in (None, "", "all") or r.status == status)
    ]
    if sort == "date-desc":
        matched.sort(key=lambda r: r.application_date, reverse=True)
    elif sort == "date-asc":
        matched.sort(key=lambda r: r.application_date)
    elif sort == "company":
        matched.sort(key=lambda r: r.company.casefold())
    else:
        matched.sort(key=lambda r: PRIORITY_ORDER[r.priority])
    return matched

@dataclass
class Reminder:
    due: date
    kind: str                   # follow_up | offer_deadline
    record: ApplicationRecord
    overdue: bool = False

def reminders(
    records: Sequence[ApplicationRecord],
    today: Optional[date] = None,
    window_days: int = 7,
) -> List[Reminder]:
    """Follow-ups due up to the end of the window (overdue ones included) and
    offer deadlines that fall between today and the end of the window."""
    today = today or current_date()
    horizon = today + timedelta(days=window_days)
    found: List[Reminder] = []
    for r in records:
        if r.follow_up_date is not None and r.follow_up_date <= horizon:
            found.append(Reminder(due=r.follow_up_date, kind="follow_up", record=r,
                                  overdue=r.follow_up_date < today))
        if r.offer_deadline is not None and today <= r.offer_deadline <= horizon:
            found.append(Reminder(due=r.offer_deadline, kind="offer_deadline", record=r))
    found.sort(key=lambda rem: rem.due)
    return found
