import time
from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional

import pytz

from .attachments import SLOTS, AttachmentError, read_attachment
from .models import ACTIVITY_TYPES, FIELD_KEYS, ActivityEntry, ApplicationRecord, check_choice
from .settings import DEFAULT_MAX_ATTACHMENT_BYTES
from .store import RecordStore
from .views import current_date

COMMON_INTERVIEW_QUESTIONS = [
    "Tell me about yourself",
    "Why do you want to work here?",
    "What are your strengths and weaknesses?",
    "Where do you see yourself in 5 years?",
    "Why should we hire you?",
]

# fields a patch may not touch: identity, and the append-only log
PROTECTED_FIELDS = ("id", "activities")
REQUIRED_FIELDS = ("company", "position")

def _new_id(taken: Iterable[str]) -> str:
    taken = set(taken)
    candidate = int(time.time() * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)

def _now() -> datetime:
    return datetime.now(pytz.utc).replace(microsecond=0)

class Tracker:
    """Owns the record collection and the current selection.

    Every mutation replaces the affected record with an updated copy and then
    persists the whole collection through the injected store.
    """

    def __init__(self, store: RecordStore, timezone: str = "UTC",
                 max_attachment_bytes: int = DEFAULT_MAX_ATTACHMENT_BYTES):
        self.store = store
        self.timezone = timezone
        self.max_attachment_bytes = max_attachment_bytes
        self._records: List[ApplicationRecord] = store.load()
        self._selected_id: Optional[str] = None

    @property
    def records(self) -> List[ApplicationRecord]:
        return list(self._records)

    def get(self, record_id: str) -> Optional[ApplicationRecord]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    # selection

    @property
    def selected(self) -> Optional[ApplicationRecord]:
        if self._selected_id is None:
            return None
        return self.get(self._selected_id)

    def select(self, record_id: str) -> Optional[ApplicationRecord]:
        record = self.get(record_id)
        self._selected_id = record.id if record else None
        return record

    def clear_selection(self) -> None:
        self._selected_id = None

    # mutations

    def create(self, fields: Mapping[str, Any]) -> ApplicationRecord:
        fields = dict(fields)
        unknown = set(fields) - set(FIELD_KEYS) | (set(fields) & set(PROTECTED_FIELDS))
        if unknown:
            raise ValueError(f"Unknown or read-only fields: {', '.join(sorted(unknown))}")
        for required in REQUIRED_FIELDS:
            if not str(fields.get(required) or "").strip():
                raise ValueError(f"{required} is required")
        fields.setdefault("application_date", current_date(self.timezone))
        record = ApplicationRecord(id=_new_id(r.id for r in self._records), **fields)
        records = [record] + self._records
        self.store.save(records)
        self._records = records
        return record

    def patch(self, record_id: str, fields: Mapping[str, Any]) -> None:
        fields = dict(fields)
        bad = [k for k in fields if k not in FIELD_KEYS or k in PROTECTED_FIELDS]
        if bad:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(bad))}")
        for required in REQUIRED_FIELDS:
            if required in fields and not str(fields[required] or "").strip():
                raise ValueError(f"{required} is required")
        current = self.get(record_id)
        if current is None:
            return
        updated = replace(current, **fields)
        new_status = fields.get("status")
        if new_status is not None and new_status != current.status:
            updated = self._with_activity(
                updated, "status_change", f"Status changed from {current.status} to {new_status}"
            )
        self._replace(updated)

    def delete(self, record_id: str) -> None:
        remaining = [r for r in self._records if r.id != record_id]
        if len(remaining) == len(self._records):
            return
        self.store.save(remaining)
        self._records = remaining
        if self._selected_id == record_id:
            self._selected_id = None

    # activity log

    def add_note(self, record_id: str, description: str, kind: str = "note") -> Optional[ActivityEntry]:
        check_choice("activity type", kind, ACTIVITY_TYPES)
        if kind == "status_change":
            raise ValueError("status_change entries are recorded automatically")
        if not description.strip():
            raise ValueError("Please enter a description")
        current = self.get(record_id)
        if current is None:
            return None
        updated = self._with_activity(current, kind, description.strip())
        self._replace(updated)
        return updated.activities[-1]

    # interview prep

    def add_interview_question(self, record_id: str, question: str) -> None:
        if not question.strip():
            raise ValueError("Please enter a question")
        current = self.get(record_id)
        if current is None:
            return
        self.patch(record_id, {"interview_questions": current.interview_questions + [question.strip()]})

    def remove_interview_question(self, record_id: str, index: int) -> None:
        current = self.get(record_id)
        if current is None:
            return
        questions = [q for i, q in enumerate(current.interview_questions) if i != index]
        self.patch(record_id, {"interview_questions": questions})

    # attachments

    def attach(self, record_id: str, slot: str, path: str) -> None:
        if slot not in SLOTS:
            raise AttachmentError(f"Unknown attachment slot {slot!r}; expected one of: {', '.join(SLOTS)}")
        if self.get(record_id) is None:
            return
        attachment = read_attachment(path, max_bytes=self.max_attachment_bytes)
        self.patch(record_id, {slot: attachment})

    def detach(self, record_id: str, slot: str) -> None:
        if slot not in SLOTS:
            raise AttachmentError(f"Unknown attachment slot {slot!r}; expected one of: {', '.join(SLOTS)}")
        self.patch(record_id, {slot: None})

    # internals

    def _with_activity(self, record: ApplicationRecord, kind: str, description: str) -> ApplicationRecord:
        entry = ActivityEntry(
            id=_new_id(a.id for a in record.activities),
            type=kind,
            description=description,
            date=_now(),
        )
        return replace(record, activities=record.activities + [entry])

    def _replace(self, updated: ApplicationRecord) -> None:
        records = [updated if r.id == updated.id else r for r in self._records]
        # memory only changes once the write has gone through
        self.store.save(records)
        self._records = records
