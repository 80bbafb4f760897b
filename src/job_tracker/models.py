from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, List, Optional

STATUSES = ("applied", "interview", "offer", "rejected", "accepted", "withdrawn")
JOB_TYPES = ("full-time", "part-time", "contract", "internship", "working-student")
PRIORITIES = ("low", "medium", "high")
ACTIVITY_TYPES = ("status_change", "note", "email", "interview", "follow_up")

# attribute name -> persisted JSON key
FIELD_KEYS = {
    "id": "id",
    "company": "company",
    "position": "position",
    "status": "status",
    "location": "location",
    "salary": "salary",
    "job_type": "jobType",
    "application_date": "applicationDate",
    "interview_date": "interviewDate",
    "notes": "notes",
    "contact_person": "contactPerson",
    "contact_email": "contactEmail",
    "job_url": "jobUrl",
    "priority": "priority",
    "cv": "cv",
    "cover_letter": "coverLetter",
    "activities": "activities",
    "interview_questions": "interviewQuestions",
    "follow_up_date": "followUpDate",
    "offer_deadline": "offerDeadline",
}

DATE_FIELDS = ("application_date", "interview_date", "follow_up_date", "offer_deadline")
ATTACHMENT_FIELDS = ("cv", "cover_letter")
KNOWN_KEYS = set(FIELD_KEYS.values())

def check_choice(name: str, value: str, choices) -> str:
    if value not in choices:
        raise ValueError(f"Invalid {name} {value!r}; expected one of: {', '.join(choices)}")
    return value

def parse_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # tolerate full timestamps stored for date fields
    return date.fromisoformat(str(value)[:10])

def parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))

@dataclass(frozen=True)
class Attachment:
    name: str
    data: str                   # data:<type>;base64,<payload>
    type: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "data": self.data, "type": self.type}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Attachment":
        return cls(name=raw["name"], data=raw["data"], type=raw["type"])

@dataclass(frozen=True)
class ActivityEntry:
    id: str
    type: str                   # status_change | note | email | interview | follow_up
    description: str
    date: datetime

    def __post_init__(self):
        check_choice("activity type", self.type, ACTIVITY_TYPES)

    def to_dict(self) -> Dict[str, str]:
        return {
            "id": self.id,
            "type": self.type,
            "description": self.description,
            "date": self.date.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ActivityEntry":
        return cls(
            id=str(raw["id"]),
            type=raw["type"],
            description=raw["description"],
            date=parse_timestamp(raw["date"]),
        )

@dataclass
class ApplicationRecord:
    id: str
    company: str
    position: str
    application_date: date
    status: str = "applied"
    location: str = ""
    job_type: str = "full-time"
    priority: str = "medium"
    salary: Optional[str] = None
    interview_date: Optional[date] = None
    notes: Optional[str] = None
    contact_person: Optional[str] = None
    contact_email: Optional[str] = None
    job_url: Optional[str] = None
    cv: Optional[Attachment] = None
    cover_letter: Optional[Attachment] = None
    activities: List[ActivityEntry] = field(default_factory=list)
    interview_questions: List[str] = field(default_factory=list)
    follow_up_date: Optional[date] = None
    offer_deadline: Optional[date] = None
    # keys found in the persisted slot that no attribute maps to
    extra: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self):
        for attr in DATE_FIELDS:
            setattr(self, attr, parse_date(getattr(self, attr)))
        if self.application_date is None:
            raise ValueError("application_date is required")
        check_choice("status", self.status, STATUSES)
        check_choice("job type", self.job_type, JOB_TYPES)
        check_choice("priority", self.priority, PRIORITIES)

    def to_dict(self) -> Dict[str, Any]:
        """Persisted shape: camelCase keys, unset optionals omitted."""
        out: Dict[str, Any] = dict(self.extra)
        for attr, key in FIELD_KEYS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if attr in DATE_FIELDS:
                value = value.isoformat()
            elif attr in ATTACHMENT_FIELDS:
                value = value.to_dict()
            elif attr == "activities":
                value = [a.to_dict() for a in value]
            elif attr == "interview_questions":
                value = list(value)
            out[key] = value
        return out

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ApplicationRecord":
        kwargs: Dict[str, Any] = {}
        extra = {k: v for k, v in raw.items() if k not in KNOWN_KEYS}
        if extra:
            kwargs["extra"] = extra
        for attr, key in FIELD_KEYS.items():
            if key not in raw or raw[key] is None:
                continue
            value = raw[key]
            if attr in DATE_FIELDS:
                value = parse_date(value)
                if value is None:
                    continue
            elif attr in ATTACHMENT_FIELDS:
                value = Attachment.from_dict(value)
            elif attr == "activities":
                value = [ActivityEntry.from_dict(a) for a in value]
            elif attr == "interview_questions":
                value = [str(q) for q in value]
            elif attr == "id":
                value = str(value)
            kwargs[attr] = value
        return cls(**kwargs)
